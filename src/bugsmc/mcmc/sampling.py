"""
MCMC Sampling Functions.

Core sampling functions used by the model container:
- bad_logp: Detect log-probabilities that force a rejection
- metropolis_reject: Log-space Metropolis accept/reject rule
- component_sweep: One tuning sweep (single-site moves on every latent node)
- full_chain_iteration: One sampling sweep (block move on all latent nodes)

The sweep functions drive any object exposing the model interface
(jumping_stochastics, nodes, update, logp, reject, stats).
"""

import math


def bad_logp(value: float) -> bool:
    """True for NaN or -inf: such a state has zero (or undefined) density."""
    return math.isnan(value) or value == -math.inf


def metropolis_reject(rng, new_logp: float, old_logp: float) -> bool:
    """
    Metropolis test in log space.

    A fresh uniform is drawn on every call, whatever the log-probabilities,
    so the random stream advances the same way for good and bad proposals.

    Args:
        rng: RandomSource
        new_logp: Joint log-probability after the proposal
        old_logp: Joint log-probability before the proposal

    Returns:
        True if the proposal must be rejected
    """
    u = rng.uniform()
    if bad_logp(new_logp):
        return True
    # log(0) is -inf, which never exceeds a real difference
    log_u = math.log(u) if u > 0.0 else -math.inf
    return log_u > new_logp - old_logp


def component_sweep(model) -> None:
    """
    One tuning sweep: each latent node in registration order performs its
    component-wise accept/reject moves.

    A later node's tests see the already-applied moves (and refreshed
    deterministics) of earlier nodes within the same sweep.
    """
    for node in model.jumping_stochastics:
        node.component_jump(model.rng, model)


def full_chain_iteration(model, logp_value: float) -> float:
    """
    One sampling sweep with a joint block proposal.

    Preserves every node, jumps all latent nodes, runs update, and either
    keeps the new state or reverts every node (deterministics included,
    since update mutated them).

    Args:
        model: Model driving the sweep
        logp_value: Joint log-probability of the current state

    Returns:
        Joint log-probability of the state the chain is in after the sweep
    """
    old_logp_value = logp_value
    for node in model.nodes:
        node.preserve()
    for node in model.jumping_stochastics:
        node.jump(model.rng)
    model.update()
    logp_value = model.logp()

    if model.reject(logp_value, old_logp_value):
        for node in model.nodes:
            node.revert()
        model.stats.rejected += 1
        return old_logp_value

    model.stats.accepted += 1
    return logp_value
