"""
bugsmc - Bayesian MCMC Sampling for Node Graphs

Public API:
    Model:
        Model - Node container and sampler (sample, tune, run, get_node)
        ChainState - Lifecycle enum (UNINITIALIZED ... DONE)

    Nodes:
        Stochastic - Latent or observed random variable with a log-likelihood
        Deterministic - Value recomputed by the model's update callback
        NodeHandle - Reference returned by registration
        Ownership - OWNED (model-allocated) or BORROWED (caller) storage

    Random Sources:
        RandomSource - Protocol: uniform() and normal()
        NumpyRandomSource - numpy Generator backed source
        JaxRandomSource - JAX PRNG backed source

    Likelihoods:
        dnorm, dunif, dgamma, dbinom - Likelihood factories for custom nodes

    Tuning:
        tune_factor - Step-size multiplier for an acceptance rate
        TuningSlot, TUNING_DEFAULTS - Controller settings

    Errors:
        NodeNotFoundError, NodeTypeMismatchError, InvalidSamplingConfigError,
        ChainNotInitializedError

Example:
    import numpy as np
    from bugsmc import Model, NumpyRandomSource

    x = np.linspace(0, 1, 20)
    y = 1.5 + 2.0 * x + np.random.normal(0, 0.1, 20)
    b = np.zeros(2)
    y_hat = np.zeros(20)

    def update():
        y_hat[:] = b[0] + b[1] * x

    model = Model(update, rng=NumpyRandomSource(seed=7))
    model.normal('b', b, mu=0.0, tau=1e-4)
    model.deterministic('y_hat', y_hat)
    model.normal('y', y, mu=y_hat, tau=100.0, observed=True)
    model.sample(iterations=10000, burn=2000, adapt=1000, thin=5)
    model.get_node('b').mean()
"""
from .error_handling import (
    BugsmcError,
    NodeNotFoundError,
    NodeTypeMismatchError,
    InvalidSamplingConfigError,
    ChainNotInitializedError,
)
from .settings import TuningSlot, TUNING_DEFAULTS, build_tuning_settings
from .rng import RandomSource, NumpyRandomSource, JaxRandomSource
from .distributions import dnorm, dunif, dgamma, dbinom
from .nodes import Node, Stochastic, Deterministic
from .registry import NodeHandle, Ownership
from .proposals import tune_factor

# Main entry points
from .mcmc import (
    Model,
    ChainState,
    clean_config,
)
