"""
MCMC Diagnostics.

Summaries of a finished (or partial) chain:
- summarize_node: Posterior mean, standard deviation and quantiles of a node's tallies
- print_posterior_summary: Table of summaries for every stochastic/deterministic node
- print_acceptance_summary: Whole-chain acceptance and current proposal scales
- diagnose_model: Run error_handling.diagnose_sampler_issues over every node
"""

from typing import Dict, Any, Tuple

import numpy as np

from ..error_handling import diagnose_sampler_issues


def summarize_node(node, quantiles: Tuple[float, ...] = (0.025, 0.5, 0.975)) -> Dict[str, Any]:
    """
    Summary statistics over a node's tallied history, per component.

    Args:
        node: Node (or NodeHandle) with tallies
        quantiles: Quantile levels to report

    Returns:
        Dict with 'n', 'mean', 'std' and one entry per quantile ('q2.5', ...)
    """
    history = np.asarray(node.history, dtype=np.float64)
    n = history.shape[0]
    summary = {'n': n}
    if n == 0:
        nan = np.full(history.shape[1:], np.nan)
        summary['mean'] = nan
        summary['std'] = nan
        for q in quantiles:
            summary[f"q{100 * q:g}"] = nan
        return summary

    summary['mean'] = history.mean(axis=0)
    summary['std'] = history.std(axis=0, ddof=1) if n > 1 else np.zeros(history.shape[1:])
    for q, value in zip(quantiles, np.quantile(history, quantiles, axis=0)):
        summary[f"q{100 * q:g}"] = value
    return summary


def print_posterior_summary(model) -> None:
    """Print mean/sd of every tallied non-observed node."""
    print(f"\n--- Posterior Summary ({model.stats.total} sweeps) ---")
    for node in model.nodes:
        if node.is_observed:
            continue
        summary = summarize_node(node)
        mean = np.array2string(np.asarray(summary['mean']), precision=4)
        std = np.array2string(np.asarray(summary['std']), precision=4)
        print(f"  {node.name}: n={summary['n']}  mean={mean}  sd={std}")


def print_acceptance_summary(model) -> None:
    """
    Print the whole-chain acceptance ratio and each latent node's proposal scale.
    """
    ratio = model.acceptance_ratio()
    print(f"\n--- MH Acceptance ({model.stats.total} sweeps) ---")
    print(f"  Ratio: {ratio:.1%}")

    for node in model.jumping_stochastics:
        scale = np.array2string(node.scale, precision=4)
        print(f"  {node.name}: scale={scale}")

    if ratio < 0.10:
        print("  WARNING: acceptance ratio < 10%; consider more adaptation iterations")


def diagnose_model(model) -> Dict[str, Any]:
    """Collect issues/warnings/info for every non-observed node's tallies."""
    diagnostics = {'issues': [], 'warnings': [], 'info': [], 'nodes': {}}
    for node in model.nodes:
        if node.is_observed:
            continue
        diagnostics = diagnose_sampler_issues(
            np.asarray(node.history, dtype=np.float64), node.name, diagnostics
        )
    return diagnostics
