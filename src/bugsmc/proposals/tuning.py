"""
Adaptive Step-Size Controller

During tuning every latent component keeps its own accepted/rejected counts.
At each tuning step the per-component acceptance rate r is turned into a
multiplicative correction of that component's proposal scale:

    diff   = r - target
    factor = 1 + diff * dilution   if |diff| > threshold
           = 1                     otherwise

With the defaults (target 0.7, threshold 0.1, dilution 0.2) the scale is
left alone for r in [0.6, 0.8], shrinks by at most 14% when nothing was
accepted and grows by at most 6% when everything was. The deadband keeps
short, noisy acceptance estimates from jittering the scale.

Settings used:
    TARGET_ACCEPTANCE, THRESHOLD, DILUTION (see settings.TuningSlot)
"""

import numpy as np

from ..settings import TuningSlot, build_tuning_settings

_DEFAULT_SETTINGS = build_tuning_settings()
_EDGE_TOL = 1e-12


def tune_factor(acceptance_ratio, settings=None):
    """
    Scale multiplier for an observed acceptance rate.

    Args:
        acceptance_ratio: Scalar or array of acceptance rates in [0, 1]
        settings: Optional tuning settings array (defaults to TUNING_DEFAULTS)

    Returns:
        Multiplier(s) with the shape of acceptance_ratio. Exactly 1.0 inside
        the deadband.
    """
    if settings is None:
        settings = _DEFAULT_SETTINGS
    target = settings[TuningSlot.TARGET_ACCEPTANCE]
    thresh = settings[TuningSlot.THRESHOLD]
    dilution = settings[TuningSlot.DILUTION]

    diff = np.asarray(acceptance_ratio, dtype=np.float64) - target
    # Band edges are inclusive; 0.8 - 0.7 rounds to slightly above 0.1
    outside = np.abs(diff) > thresh + _EDGE_TOL
    factor = np.where(outside, 1.0 + diff * dilution, 1.0)
    if factor.ndim == 0:
        return float(factor)
    return factor


def rescale(scale: np.ndarray, accepted: np.ndarray, rejected: np.ndarray, settings=None) -> None:
    """
    Apply tune_factor to every component of scale in place, then zero the counters.

    Components with no trials since the last tuning step keep their scale.

    Args:
        scale: Per-component proposal scale, modified in place
        accepted: Per-component accept counts, zeroed in place
        rejected: Per-component reject counts, zeroed in place
        settings: Optional tuning settings array
    """
    trials = accepted + rejected
    with np.errstate(invalid='ignore', divide='ignore'):
        ratio = accepted / trials
    factor = np.where(trials > 0, tune_factor(np.where(trials > 0, ratio, 0.0), settings), 1.0)
    scale *= factor
    accepted.fill(0)
    rejected.fill(0)
