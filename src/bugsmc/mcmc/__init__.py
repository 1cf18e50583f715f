"""
MCMC Subpackage - Core MCMC sampling implementation.

This package contains the core MCMC sampling logic:
- model: Model container (registration, init_chain, tune, run, sample)
- sampling: Metropolis reject rule and the tuning/sampling sweeps
- diagnostics: Posterior summaries and acceptance reports
- types: Chain state and statistics
- utils: Config defaults
"""

from .types import ChainState, ChainStats
from .model import Model
from .sampling import bad_logp, metropolis_reject, component_sweep, full_chain_iteration
from .diagnostics import (
    summarize_node,
    print_posterior_summary,
    print_acceptance_summary,
    diagnose_model,
)
from .utils import clean_config

__all__ = [
    # Main entry point
    'Model',
    # Types
    'ChainState',
    'ChainStats',
    # Sampling
    'bad_logp',
    'metropolis_reject',
    'component_sweep',
    'full_chain_iteration',
    # Diagnostics
    'summarize_node',
    'print_posterior_summary',
    'print_acceptance_summary',
    'diagnose_model',
    # Config
    'clean_config',
]
