"""
Pytest configuration and shared fixtures for bugsmc tests.
"""

import numpy as np
import pytest

from bugsmc import Model, NumpyRandomSource


class FixedUniformSource:
    """
    Random source whose uniform() always returns the same value.

    normal() draws come from a seeded numpy generator. With uniform() == 1.0
    the Metropolis test rejects every proposal that lowers the joint logp.
    """

    def __init__(self, uniform_value=1.0, seed=0):
        self.uniform_value = uniform_value
        self._gen = np.random.default_rng(seed)
        self.n_uniform = 0
        self.n_normal = 0

    def uniform(self):
        self.n_uniform += 1
        return self.uniform_value

    def normal(self):
        self.n_normal += 1
        return float(self._gen.standard_normal())


class ScriptedSource:
    """Random source replaying fixed uniform and normal sequences."""

    def __init__(self, uniforms=(), normals=()):
        self._uniforms = list(uniforms)
        self._normals = list(normals)

    def uniform(self):
        return self._uniforms.pop(0)

    def normal(self):
        return self._normals.pop(0)


@pytest.fixture
def rng_seed():
    """Default RNG seed for reproducible tests."""
    return 42


@pytest.fixture
def rng(rng_seed):
    return NumpyRandomSource(seed=rng_seed)


@pytest.fixture
def fixed_uniform_rng():
    return FixedUniformSource(uniform_value=1.0, seed=3)


@pytest.fixture
def scalar_normal_model(rng):
    """Single latent scalar ~ Normal(3, sd 0.1), no deterministics."""
    model = Model(rng=rng)
    model.normal('theta', 0.0, mu=3.0, tau=100.0)
    return model


@pytest.fixture
def regression_data():
    """Synthetic straight-line data: y = 1.5 + 2.0 x + N(0, 0.1^2)."""
    gen = np.random.default_rng(1977)
    x = np.linspace(0.0, 1.0, 40)
    y = 1.5 + 2.0 * x + gen.normal(0.0, 0.1, x.shape[0])
    return {'x': x, 'y': y, 'intercept': 1.5, 'slope': 2.0, 'sigma': 0.1}


def build_regression_model(data, rng):
    """Linear regression with a latent coefficient vector and a fitted-value node."""
    x, y = data['x'], data['y']
    b = np.zeros(2)
    y_hat = np.zeros_like(y)

    def update():
        y_hat[:] = b[0] + b[1] * x

    model = Model(update, rng=rng)
    model.normal('b', b, mu=0.0, tau=1e-4)
    model.deterministic('y_hat', y_hat)
    model.normal('y', y, mu=y_hat, tau=1.0 / data['sigma'] ** 2, observed=True)
    return model, b, y_hat
