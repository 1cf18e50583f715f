"""
Proposal Distributions and Step-Size Tuning

This package implements the random-walk proposals used by latent stochastic
nodes and the controller that adapts their step sizes during tuning.

Both proposal granularities are symmetric, so the sampler never needs a
Hastings correction: the accept/reject test compares log-probabilities only
(see mcmc.sampling.metropolis_reject).
"""

from .rand_walk import rand_walk_proposal, component_proposal
from .tuning import tune_factor, rescale

__all__ = [
    'rand_walk_proposal',
    'component_proposal',
    'tune_factor',
    'rescale',
]
