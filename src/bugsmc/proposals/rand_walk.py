"""
Random Walk Proposals for MCMC Sampling

Independent Gaussian random walk on every component of a node value, with a
per-component step size.

Proposal: x'[i] = x[i] + scale[i] * z,   z ~ N(0, 1)

Hastings ratio: 0 (symmetric proposal, q(x'|x) = q(x|x'))

Two granularities are provided:
    rand_walk_proposal  - block move: perturbs every component in one pass
    component_proposal  - single-site move: perturbs one component

Both mutate the value array in place, so nodes bound to caller-owned storage
keep that storage. Components are visited in flat (C) order; for a 0-d
scalar value the only component is index 0.
"""

import numpy as np


def rand_walk_proposal(value: np.ndarray, scale: np.ndarray, rng) -> None:
    """
    Block random walk: value[i] += rng.normal() * scale[i] for every i.

    Draws are consumed in component order, one normal per component.

    Args:
        value: Node value, modified in place
        scale: Per-component step size, same shape as value
        rng: RandomSource
    """
    for i in range(value.size):
        value.flat[i] += rng.normal() * scale.flat[i]


def component_proposal(value: np.ndarray, scale: np.ndarray, i: int, rng) -> None:
    """
    Single-site random walk on component i. Consumes one normal draw.

    Args:
        value: Node value, modified in place
        scale: Per-component step size, same shape as value
        i: Flat component index
        rng: RandomSource
    """
    value.flat[i] += rng.normal() * scale.flat[i]
