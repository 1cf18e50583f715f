"""
Error Handling and Validation Utilities for the Sampler

This module provides the exception types raised by the model container,
validation functions for sampling configurations, and diagnostic tools
for tallied chains.
"""

from typing import Any, Dict

import numpy as np

import logging
logger = logging.getLogger('bugsmc')


class BugsmcError(Exception):
    """Base class for all errors raised by bugsmc."""


class NodeNotFoundError(BugsmcError, KeyError):
    """Raised by Model.get_node when no node was registered under a binding."""

    def __str__(self):
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ''


class NodeTypeMismatchError(BugsmcError, TypeError):
    """Raised by Model.get_node when the stored node holds a different value type."""


class InvalidSamplingConfigError(BugsmcError, ValueError):
    """Raised when sampling parameters are inconsistent. No sampling is performed."""


class ChainNotInitializedError(BugsmcError, RuntimeError):
    """Raised when a sampling phase is started before Model.init_chain."""


def require_initialized_chain(uninitialized: bool, operation: str, n_nodes: int) -> None:
    """
    Refuses to start a sampling phase on a chain whose views were never built.

    Args:
        uninitialized: True while the model is in ChainState.UNINITIALIZED
        operation: Name of the phase being started ('tune' or 'run')
        n_nodes: Number of registered nodes

    Raises:
        ChainNotInitializedError: If the chain is uninitialized
    """
    if not uninitialized:
        return

    errors = [
        f"{operation}() called before init_chain()",
        f"no latent node would be proposed and logp() would sum no likelihoods "
        f"({n_nodes} node(s) registered)",
        "call init_chain() first, or use sample() which runs it",
    ]
    raise ChainNotInitializedError(
        "Chain is not initialized:\n  " + "\n  ".join(errors)
    )


def validate_sample_args(iterations: int, burn: int, adapt: int, thin: int) -> None:
    """
    Validates the arguments of Model.sample before anything is run.

    Args:
        iterations: Number of post-burn-in sampling sweeps
        burn: Number of burn-in sweeps discarded from tallies
        adapt: Number of component-wise tuning sweeps
        thin: Keep one tally every `thin` sweeps

    Raises:
        InvalidSamplingConfigError: If any argument is invalid
    """
    errors = []

    if iterations < 0:
        errors.append(f"iterations must be >= 0, got {iterations}")
    if burn < 0:
        errors.append(f"burn must be >= 0, got {burn}")
    if adapt < 0:
        errors.append(f"adapt must be >= 0, got {adapt}")

    if thin < 1:
        errors.append(f"thin must be >= 1, got {thin}")
    elif iterations % thin != 0:
        errors.append(
            f"iterations ({iterations}) must be a multiple of thin ({thin})"
        )

    if errors:
        raise InvalidSamplingConfigError(
            "Invalid sampling configuration:\n  " + "\n  ".join(errors)
        )


def validate_mcmc_config(mcmc_config: Dict[str, Any]) -> None:
    """
    Validates that a dict-based sampling configuration is sensible.

    Args:
        mcmc_config: Configuration dictionary (see mcmc.utils.clean_config)

    Raises:
        InvalidSamplingConfigError: If configuration is invalid
    """
    errors = []

    required_keys = ['num_collect', 'burn_iter', 'adapt_iter', 'thin_iteration']
    for key in required_keys:
        if key not in mcmc_config:
            errors.append(f"Missing required config key: '{key}'")

    for key in required_keys:
        if key in mcmc_config and not isinstance(mcmc_config[key], (int, np.integer)):
            errors.append(f"{key} must be an integer, got {type(mcmc_config[key]).__name__}")

    # Only real bools: Model.sample_from_config branches on this value directly
    clear_history = mcmc_config.get('clear_history', False)
    if not isinstance(clear_history, (bool, np.bool_)):
        errors.append(
            f"clear_history must be True or False, got {type(clear_history).__name__} {clear_history!r}"
        )

    if errors:
        raise InvalidSamplingConfigError(
            "Invalid MCMC configuration:\n  " + "\n  ".join(errors)
        )

    validate_sample_args(
        mcmc_config['num_collect'],
        mcmc_config['burn_iter'],
        mcmc_config['adapt_iter'],
        mcmc_config['thin_iteration'],
    )


_LEVELS = {'issues': logging.ERROR, 'warnings': logging.WARNING, 'info': logging.INFO}


def _record(diagnostics: Dict[str, Any], kind: str, name: str, detail: str) -> None:
    diagnostics[kind].append(f"{name}: {detail}")
    diagnostics['nodes'].setdefault(name, []).append((kind, detail))


def diagnose_sampler_issues(history: np.ndarray, name: str, diagnostics: Dict[str, Any]) -> Dict[str, Any]:
    """
    Analyzes the tallied history of one node to identify common issues.

    Messages go both to the flat 'issues'/'warnings'/'info' lists (prefixed
    with the node name) and to diagnostics['nodes'][name] as (kind, detail)
    pairs, which print_diagnostics uses to group its output.

    Args:
        history: Tally array (n_samples, *value_shape)
        name: Node name used in messages
        diagnostics: Existing diagnostics dict to extend

    Returns:
        diagnostics: Dictionary with issues, warnings, info and per-node entries
    """
    diagnostics = {
        'issues': [],
        'warnings': [],
        'info': [],
        'nodes': {},
    } | diagnostics

    if history.shape[0] == 0:
        _record(diagnostics, 'warnings', name, "no samples tallied")
        return diagnostics

    flat = history.reshape(history.shape[0], -1)

    if not np.all(np.isfinite(flat)):
        _record(diagnostics, 'issues', name,
                "history contains NaN or Inf values - sampler became unstable")

    # Near-zero variance: the chain never moved this component
    if flat.shape[0] > 1:
        stuck = int(np.sum(np.var(flat, axis=0) < 1e-12))
        if stuck > 0:
            _record(diagnostics, 'warnings', name,
                    f"{stuck} component(s) appear stuck (near-zero variance)")

    _record(diagnostics, 'info', name, f"{flat.shape[0]} samples of {flat.shape[1]} component(s)")

    return diagnostics


def print_diagnostics(diagnostics: Dict[str, Any]) -> None:
    """
    Log diagnose_sampler_issues results one node at a time.

    Each node's header is logged at the level of its worst message, so a
    node with an issue stands out even when INFO output is filtered.
    """
    nodes = diagnostics.get('nodes', {})
    for name, entries in nodes.items():
        worst = max(_LEVELS[kind] for kind, _ in entries)
        logger.log(worst, f"Node '{name}':")
        for kind, detail in entries:
            logger.log(_LEVELS[kind], f"  [{kind}] {detail}")

    n_issues = len(diagnostics['issues'])
    n_warnings = len(diagnostics['warnings'])
    if n_issues or n_warnings:
        logger.warning(f"{n_issues} issue(s), {n_warnings} warning(s) across {len(nodes)} node(s)")
    else:
        logger.info(f"No issues detected across {len(nodes)} node(s)")
