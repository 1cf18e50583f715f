"""
Model Container.

The Model owns a node arena (see registry.NodeRegistry), the random source
and the whole-chain statistics, and runs the two sampling phases:

    tune(adapt, step)        component-wise Metropolis with periodic rescale
    run(total, burn, thin)   block Metropolis with burn-in and thinning

sample(iterations, burn, adapt, thin) validates its arguments, then chains
init_chain -> tune -> run.

Example:
    import numpy as np
    from bugsmc import Model, NumpyRandomSource

    y = np.array([4.1, 5.3, 4.8, 5.9])
    model = Model(rng=NumpyRandomSource(seed=1))
    mu = model.normal('mu', 0.0, mu=0.0, tau=1e-4)
    model.normal('y', y, mu=mu, tau=1.0, observed=True)
    model.sample(iterations=5000, burn=1000, adapt=1000, thin=1)
    mu.mean()
"""

import logging
from typing import Callable, List, Optional

import numpy as np

from ..distributions import dnorm, dunif, dgamma, dbinom
from ..error_handling import (
    NodeTypeMismatchError,
    require_initialized_chain,
    validate_sample_args,
    validate_mcmc_config,
)
from ..nodes import Node, Stochastic, Deterministic
from ..registry import NodeRegistry, NodeHandle, Ownership
from ..rng import NumpyRandomSource
from ..settings import TuningSlot, build_tuning_settings
from .sampling import metropolis_reject, component_sweep, full_chain_iteration
from .types import ChainState, ChainStats
from .utils import clean_config

logger = logging.getLogger('bugsmc')


def _noop_update():
    pass


class Model:
    """
    Container for a probabilistic model and its MCMC chain.

    Args:
        update: Zero-argument callback recomputing every deterministic node
                from the current stochastic values (in place). Defaults to a no-op.
        rng: RandomSource providing uniform() and normal(). Defaults to an
             unseeded NumpyRandomSource.
        settings: Optional dict of tuning overrides (see settings.TuningSlot)
    """

    def __init__(self, update: Optional[Callable[[], None]] = None, rng=None, settings=None):
        self._update = update if update is not None else _noop_update
        self.rng = rng if rng is not None else NumpyRandomSource()
        self.settings = build_tuning_settings(settings)
        self.stats = ChainStats()
        self.state = ChainState.UNINITIALIZED

        self._registry = NodeRegistry()
        self._jumping_idx: List[int] = []
        self._deterministic_idx: List[int] = []
        self._logp_functors: List[Callable[[], float]] = []

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, node: Node, ownership: Ownership = Ownership.BORROWED) -> NodeHandle:
        """
        Add a node to the model. It takes part in sampling from the next init_chain().
        """
        handle = self._registry.register(node, ownership)
        logger.debug(f"Registered {node.describe()} [{ownership}]")
        return handle

    def _bind(self, value, floating: bool):
        """Wrap caller values: numpy arrays are borrowed, anything else is copied into owned storage."""
        if isinstance(value, np.ndarray):
            return value, Ownership.BORROWED
        if floating:
            return np.array(value, dtype=np.float64), Ownership.OWNED
        return np.array(value), Ownership.OWNED

    def _stochastic(self, name, value, likelihood, observed) -> NodeHandle:
        storage, ownership = self._bind(value, floating=not observed)
        node = Stochastic(name, storage, likelihood, observed=observed,
                          initial_scale=self.settings[TuningSlot.INITIAL_SCALE])
        return self.register(node, ownership)

    def normal(self, name: str, value, mu, tau, observed: bool = False) -> NodeHandle:
        """Register a Normal(mu, precision tau) node."""
        return self._stochastic(name, value, dnorm(mu, tau), observed)

    def uniform(self, name: str, value, lower, upper, observed: bool = False) -> NodeHandle:
        """Register a Uniform(lower, upper) node."""
        return self._stochastic(name, value, dunif(lower, upper), observed)

    def gamma(self, name: str, value, alpha, beta, observed: bool = False) -> NodeHandle:
        """Register a Gamma(shape alpha, rate beta) node."""
        return self._stochastic(name, value, dgamma(alpha, beta), observed)

    def binomial(self, name: str, value, n, p, observed: bool = False) -> NodeHandle:
        """Register a Binomial(n, p) node."""
        return self._stochastic(name, value, dbinom(n, p), observed)

    def deterministic(self, name: str, value) -> NodeHandle:
        """Register a node whose value is written by the update callback."""
        storage, ownership = self._bind(value, floating=True)
        return self.register(Deterministic(name, storage), ownership)

    def get_node(self, binding, value_type: Optional[type] = None) -> NodeHandle:
        """
        Look up a registered node by its name or its bound array.

        Args:
            binding: Node name, bound numpy array, node or handle
            value_type: Optional expected value type (float/int/bool for
                        scalar nodes, np.ndarray for array nodes)

        Raises:
            NodeNotFoundError: If nothing was registered under binding
            NodeTypeMismatchError: If value_type differs from the node's
        """
        handle = self._registry.get(binding)
        if value_type is not None and handle.node.value_type is not value_type:
            raise NodeTypeMismatchError(
                f"Node '{handle.name}' holds {handle.node.value_type.__name__}, "
                f"requested {value_type.__name__}"
            )
        return handle

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> List[Node]:
        """Every registered node, in registration order."""
        return self._registry.nodes

    @property
    def jumping_stochastics(self) -> List[Node]:
        """Latent stochastic nodes as of the last init_chain()."""
        return [self._registry.node_at(i) for i in self._jumping_idx]

    @property
    def deterministics(self) -> List[Node]:
        """Deterministic nodes as of the last init_chain()."""
        return [self._registry.node_at(i) for i in self._deterministic_idx]

    def handles(self) -> List[NodeHandle]:
        return self._registry.handles

    # ------------------------------------------------------------------
    # Chain primitives
    # ------------------------------------------------------------------

    def update(self) -> None:
        self._update()

    def init_chain(self) -> None:
        """
        Rebuild the derived views from the registered nodes and run update once.
        Tallies are kept.
        """
        self._jumping_idx = self._registry.indices(lambda n: n.is_stochastic and not n.is_observed)
        self._deterministic_idx = self._registry.indices(lambda n: n.is_deterministic)
        self._logp_functors = [
            self._registry.node_at(i).logp_functor()
            for i in self._registry.indices(lambda n: n.is_stochastic)
        ]
        self.update()
        self.state = ChainState.INITIALIZED
        logger.debug(
            f"Chain initialized: {len(self._jumping_idx)} latent, "
            f"{len(self._logp_functors) - len(self._jumping_idx)} observed, "
            f"{len(self._deterministic_idx)} deterministic"
        )

    def logp(self) -> float:
        """Joint log-probability: sum over every stochastic node's likelihood."""
        total = 0.0
        for functor in self._logp_functors:
            total += functor()
        return total

    def reject(self, new_logp: float, old_logp: float) -> bool:
        return metropolis_reject(self.rng, new_logp, old_logp)

    def acceptance_ratio(self) -> float:
        """Whole-chain acceptance ratio of the sampling loop (NaN before any sweep)."""
        return self.stats.acceptance_ratio

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def tune(self, iterations: int, tuning_step: int) -> None:
        """
        Component-wise Metropolis sweeps; every tuning_step sweeps each latent
        node rescales its proposal from its acceptance counts.

        Raises:
            ChainNotInitializedError: If init_chain() has not run
        """
        require_initialized_chain(self.state is ChainState.UNINITIALIZED, 'tune', len(self))
        self.state = ChainState.TUNING
        for i in range(1, iterations + 1):
            component_sweep(self)
            if i % tuning_step == 0:
                logger.debug(f"tuning at step: {i}")
                for node in self.jumping_stochastics:
                    node.tune(self.settings)

    def run(self, iterations: int, burn: int, thin: int) -> None:
        """
        Block Metropolis sweeps. Sweep i (1-based) is tallied when i > burn
        and i % thin == 0.

        Raises:
            ChainNotInitializedError: If init_chain() has not run
        """
        require_initialized_chain(self.state is ChainState.UNINITIALIZED, 'run', len(self))
        self.state = ChainState.SAMPLING
        logp_value = self.logp()
        for i in range(1, iterations + 1):
            logp_value = full_chain_iteration(self, logp_value)
            if i > burn and i % thin == 0:
                for node in self.nodes:
                    node.tally()

    def sample(self, iterations: int, burn: int = 0, adapt: int = 0, thin: int = 1) -> None:
        """
        Tune, burn in and sample.

        Args:
            iterations: Sampling sweeps after burn-in (multiple of thin)
            burn: Burn-in sweeps, never tallied
            adapt: Tuning sweeps before burn-in
            thin: Tally every thin-th sweep

        Raises:
            InvalidSamplingConfigError: Before anything runs, if the arguments
                are inconsistent
        """
        validate_sample_args(iterations, burn, adapt, thin)

        self.init_chain()
        logger.info(f"Tuning for {adapt} iterations...")
        self.tune(adapt, max(1, adapt // 100))
        logger.info(f"Sampling {iterations} iterations (burn={burn}, thin={thin})...")
        self.run(iterations + burn, burn, thin)
        self.state = ChainState.DONE
        logger.info(f"Acceptance ratio: {self.acceptance_ratio():.3f}")

    def sample_from_config(self, mcmc_config) -> None:
        """Dict-driven sample(); see mcmc.utils.clean_config for keys and defaults."""
        mcmc_config = clean_config(mcmc_config)
        validate_mcmc_config(mcmc_config)
        if mcmc_config['clear_history']:
            self.clear_history()
        self.sample(
            iterations=mcmc_config['num_collect'],
            burn=mcmc_config['burn_iter'],
            adapt=mcmc_config['adapt_iter'],
            thin=mcmc_config['thin_iteration'],
        )

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def clear_history(self) -> None:
        for node in self.nodes:
            node.clear_history()

    def reset_statistics(self) -> None:
        self.stats.reset()

    def describe(self) -> str:
        return "\n".join(node.describe() for node in self.nodes)

    def print(self) -> None:
        """Print every node's current state in registration order."""
        print(self.describe())

    def close(self) -> None:
        """
        Release all nodes. Storage the model allocated goes with them;
        caller-owned arrays are left exactly as they are.
        """
        self._registry.clear()
        self._jumping_idx = []
        self._deterministic_idx = []
        self._logp_functors = []
        self.state = ChainState.UNINITIALIZED

    def __len__(self):
        return len(self._registry)

    def __repr__(self):
        return f"Model(nodes={len(self)}, state={self.state})"
