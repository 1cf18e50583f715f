"""
Unit Tests for Sampler Building Blocks

Tests tuning math, the reject rule, settings, likelihoods and random sources
in isolation.
Run with: pytest tests/test_unit.py -v
"""

import math

import numpy as np
import pytest
from scipy import stats as scipy_stats

from bugsmc import NumpyRandomSource, JaxRandomSource, RandomSource
from bugsmc.distributions import (
    normal_logp, uniform_logp, gamma_logp, binomial_logp, dnorm, resolve,
)
from bugsmc.mcmc.sampling import bad_logp, metropolis_reject
from bugsmc.proposals import tune_factor, rescale, rand_walk_proposal, component_proposal
from bugsmc.settings import TuningSlot, TUNING_DEFAULTS, MAX_SETTINGS, build_tuning_settings

from conftest import FixedUniformSource, ScriptedSource


# ============================================================================
# TUNE FACTOR TESTS
# ============================================================================

class TestTuneFactor:
    """Test the deadbanded proportional step-size controller."""

    @pytest.mark.parametrize("r", [0.6, 0.62, 0.7, 0.75, 0.8])
    def test_deadband_is_exactly_one(self, r):
        assert tune_factor(r) == 1.0

    def test_formula_outside_deadband(self):
        assert tune_factor(0.0) == pytest.approx(1.0 + (0.0 - 0.7) * 0.2)
        assert tune_factor(1.0) == pytest.approx(1.0 + (1.0 - 0.7) * 0.2)
        assert tune_factor(0.5) == pytest.approx(0.96)

    def test_strictly_increasing_outside_deadband(self):
        low = np.linspace(0.0, 0.59, 30)
        high = np.linspace(0.81, 1.0, 30)
        assert np.all(np.diff(tune_factor(low)) > 0)
        assert np.all(np.diff(tune_factor(high)) > 0)
        assert np.all(tune_factor(low) < 1.0)
        assert np.all(tune_factor(high) > 1.0)

    def test_vectorized_matches_scalar(self):
        rates = np.array([0.0, 0.3, 0.65, 0.9])
        expected = [tune_factor(float(r)) for r in rates]
        np.testing.assert_allclose(tune_factor(rates), expected)

    def test_custom_settings(self):
        settings = build_tuning_settings({'target_acceptance': 0.44, 'threshold': 0.0})
        assert tune_factor(0.44, settings) == 1.0
        assert tune_factor(0.54, settings) == pytest.approx(1.0 + 0.1 * 0.2)


class TestRescale:
    """Test per-component scale adaptation."""

    def test_rescale_updates_and_resets(self):
        scale = np.array([0.25, 0.25, 0.25])
        accepted = np.array([0.0, 7.0, 10.0])
        rejected = np.array([10.0, 3.0, 0.0])

        rescale(scale, accepted, rejected)

        np.testing.assert_allclose(scale, [0.25 * 0.86, 0.25, 0.25 * 1.06])
        assert np.all(accepted == 0)
        assert np.all(rejected == 0)

    def test_components_without_trials_keep_scale(self):
        scale = np.array([0.5, 0.5])
        accepted = np.array([0.0, 0.0])
        rejected = np.array([0.0, 4.0])

        with np.errstate(all='raise'):
            rescale(scale, accepted, rejected)

        np.testing.assert_allclose(scale, [0.5, 0.5 * 0.86])

    def test_scalar_is_size_one_case(self):
        scale = np.array(0.25)
        accepted = np.array(1.0)
        rejected = np.array(9.0)
        rescale(scale, accepted, rejected)
        assert float(scale) == pytest.approx(0.25 * (1.0 + (0.1 - 0.7) * 0.2))


# ============================================================================
# PROPOSAL TESTS
# ============================================================================

class TestRandWalkProposals:

    def test_block_walk_uses_one_draw_per_component(self):
        value = np.array([1.0, 2.0, 3.0])
        scale = np.array([0.1, 1.0, 10.0])
        rng = ScriptedSource(normals=[1.0, -2.0, 0.5])

        rand_walk_proposal(value, scale, rng)

        np.testing.assert_allclose(value, [1.1, 0.0, 8.0])

    def test_block_walk_in_place_on_matrix(self):
        value = np.zeros((2, 2))
        original = value
        rng = ScriptedSource(normals=[1.0, 2.0, 3.0, 4.0])

        rand_walk_proposal(value, np.ones((2, 2)), rng)

        assert value is original
        np.testing.assert_allclose(value, [[1.0, 2.0], [3.0, 4.0]])

    def test_component_walk_touches_one_component(self):
        value = np.array([1.0, 2.0, 3.0])
        component_proposal(value, np.full(3, 0.5), 1, ScriptedSource(normals=[2.0]))
        np.testing.assert_allclose(value, [1.0, 3.0, 3.0])

    def test_scalar_component(self):
        value = np.array(1.0)
        component_proposal(value, np.array(0.25), 0, ScriptedSource(normals=[4.0]))
        assert float(value) == pytest.approx(2.0)


# ============================================================================
# REJECT RULE TESTS
# ============================================================================

class TestRejectRule:

    @pytest.mark.parametrize("bad", [math.nan, -math.inf])
    @pytest.mark.parametrize("old", [-1e300, -5.0, 0.0, 12.0, -math.inf])
    def test_bad_logp_always_rejected(self, bad, old):
        for u in (0.0, 1e-300, 0.5, 0.999999):
            assert metropolis_reject(ScriptedSource(uniforms=[u]), bad, old)

    def test_bad_logp_detection(self):
        assert bad_logp(math.nan)
        assert bad_logp(-math.inf)
        assert not bad_logp(math.inf)
        assert not bad_logp(-1e308)

    def test_uniform_drawn_on_every_call(self):
        rng = FixedUniformSource(uniform_value=0.5)
        metropolis_reject(rng, math.nan, 0.0)
        metropolis_reject(rng, -1.0, 0.0)
        assert rng.n_uniform == 2

    def test_improvement_always_accepted(self):
        for u in (1e-12, 0.3, 0.999):
            assert not metropolis_reject(ScriptedSource(uniforms=[u]), -1.0, -5.0)

    def test_log_space_threshold(self):
        # diff = -1 -> accept iff log(u) <= -1, i.e. u <= e^-1
        assert not metropolis_reject(ScriptedSource(uniforms=[0.3]), -2.0, -1.0)
        assert metropolis_reject(ScriptedSource(uniforms=[0.4]), -2.0, -1.0)

    def test_huge_ratios_stay_finite(self):
        assert metropolis_reject(ScriptedSource(uniforms=[0.5]), -1e6, 1e6)
        assert not metropolis_reject(ScriptedSource(uniforms=[0.5]), 1e6, -1e6)

    def test_zero_uniform_accepts_finite_moves(self):
        assert not metropolis_reject(ScriptedSource(uniforms=[0.0]), -1e6, 0.0)

    def test_uniform_one_rejects_any_decrease(self):
        assert metropolis_reject(ScriptedSource(uniforms=[1.0]), -1e-9, 0.0)


# ============================================================================
# SETTINGS TESTS
# ============================================================================

class TestSettings:

    def test_defaults(self):
        settings = build_tuning_settings()
        assert settings.shape == (MAX_SETTINGS,)
        for slot, default in TUNING_DEFAULTS.items():
            assert settings[slot] == default
        assert settings[TuningSlot.TARGET_ACCEPTANCE] == 0.7
        assert settings[TuningSlot.INITIAL_SCALE] == 0.25

    def test_override(self):
        settings = build_tuning_settings({'dilution': 0.5, 'INITIAL_SCALE': 1.0})
        assert settings[TuningSlot.DILUTION] == 0.5
        assert settings[TuningSlot.INITIAL_SCALE] == 1.0

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown tuning setting"):
            build_tuning_settings({'gain': 2.0})


# ============================================================================
# LIKELIHOOD TESTS
# ============================================================================

class TestDistributions:
    """Log densities against scipy.stats."""

    def test_normal_matches_scipy(self):
        x = np.array([0.3, -1.2, 2.5])
        mu, tau = 0.5, 4.0
        expected = np.sum(scipy_stats.norm.logpdf(x, mu, 1.0 / np.sqrt(tau)))
        assert normal_logp(x, mu, tau) == pytest.approx(expected)

    def test_normal_vector_parameters(self):
        x = np.array([1.0, 2.0])
        mu = np.array([0.0, 2.0])
        tau = np.array([1.0, 9.0])
        expected = np.sum(scipy_stats.norm.logpdf(x, mu, 1.0 / np.sqrt(tau)))
        assert normal_logp(x, mu, tau) == pytest.approx(expected)

    def test_normal_invalid_precision(self):
        assert normal_logp(1.0, 0.0, 0.0) == -np.inf
        assert normal_logp(1.0, 0.0, -2.0) == -np.inf

    def test_uniform(self):
        assert uniform_logp(np.array([0.2, 0.9]), 0.0, 2.0) == pytest.approx(2 * -np.log(2.0))
        assert uniform_logp(2.5, 0.0, 2.0) == -np.inf
        assert uniform_logp(-0.1, 0.0, 2.0) == -np.inf

    def test_gamma_matches_scipy(self):
        x = np.array([0.5, 1.5, 4.0])
        alpha, beta = 2.5, 1.5
        expected = np.sum(scipy_stats.gamma.logpdf(x, alpha, scale=1.0 / beta))
        assert gamma_logp(x, alpha, beta) == pytest.approx(expected)
        assert gamma_logp(-0.1, alpha, beta) == -np.inf

    def test_binomial_matches_scipy(self):
        x = np.array([3, 0, 10])
        n = np.array([10, 5, 10])
        p = 0.35
        expected = np.sum(scipy_stats.binom.logpmf(x, n, p))
        assert binomial_logp(x, n, p) == pytest.approx(expected)
        assert binomial_logp(11, 10, p) == -np.inf
        assert binomial_logp(3, 10, 1.2) == -np.inf

    def test_binomial_edge_probabilities(self):
        assert binomial_logp(0, 10, 0.0) == pytest.approx(0.0)
        assert binomial_logp(10, 10, 1.0) == pytest.approx(0.0)
        assert binomial_logp(1, 10, 0.0) == -np.inf

    def test_parameters_resolved_live(self):
        mu = np.array(0.0)
        logp = dnorm(mu, 1.0)
        first = logp(np.array(1.0))
        mu[...] = 1.0
        assert logp(np.array(1.0)) > first

    def test_resolve_callable_and_value_holder(self):
        class Holder:
            value = np.array([1.0, 2.0])

        assert resolve(lambda: 3.0) == 3.0
        assert resolve(Holder()) is Holder.value
        assert resolve(5) == 5


# ============================================================================
# RANDOM SOURCE TESTS
# ============================================================================

class TestRandomSources:

    def test_protocol(self):
        assert isinstance(NumpyRandomSource(1), RandomSource)
        assert isinstance(JaxRandomSource(1, block_size=8), RandomSource)

    def test_numpy_source_reproducible(self):
        a, b = NumpyRandomSource(seed=11), NumpyRandomSource(seed=11)
        draws_a = [(a.uniform(), a.normal()) for _ in range(20)]
        draws_b = [(b.uniform(), b.normal()) for _ in range(20)]
        assert draws_a == draws_b

    def test_jax_source_reproducible_across_blocks(self):
        a = JaxRandomSource(seed=5, block_size=7)
        b = JaxRandomSource(seed=5, block_size=7)
        draws_a = [a.normal() for _ in range(20)]
        draws_b = [b.normal() for _ in range(20)]
        assert draws_a == draws_b
        assert len(set(draws_a)) == 20

    def test_jax_streams_independent(self):
        a = JaxRandomSource(seed=5, block_size=16)
        b = JaxRandomSource(seed=5, block_size=16)
        for _ in range(10):
            a.uniform()
        assert [a.normal() for _ in range(5)] == [b.normal() for _ in range(5)]

    def test_jax_uniform_range(self):
        source = JaxRandomSource(seed=0, block_size=256)
        draws = np.array([source.uniform() for _ in range(500)])
        assert np.all(draws >= 0.0) and np.all(draws < 1.0)

    def test_jax_invalid_block_size(self):
        with pytest.raises(ValueError):
            JaxRandomSource(seed=0, block_size=0)
