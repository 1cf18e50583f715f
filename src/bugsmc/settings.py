"""
Tuning settings configuration.

This module defines the canonical ordering of the adaptive step-size
controller settings and provides a helper to build a settings array from
user overrides.

Settings are stored in a numpy array of shape (MAX_SETTINGS,) so each node's
tune() can read them by position using the TuningSlot enum.

To add a new setting:
1. Add it to TuningSlot enum
2. Add default value to TUNING_DEFAULTS
3. Use it in the controller: settings[TuningSlot.NEW_SETTING]
4. Override it per model: Model(settings={'new_setting': value})
"""

from enum import IntEnum
import numpy as np


class TuningSlot(IntEnum):
    """
    Canonical slot indices for tuning settings.

    These map setting names to positions in the settings array.
    """
    TARGET_ACCEPTANCE = 0  # Univariate target acceptance rate for component-wise tuning
    THRESHOLD = 1          # Half-width of the deadband around the target (no rescale inside)
    DILUTION = 2           # Proportional gain applied to (rate - target) outside the deadband
    INITIAL_SCALE = 3      # Starting proposal scale for every component of a latent node


# Default values for each setting
TUNING_DEFAULTS = {
    TuningSlot.TARGET_ACCEPTANCE: 0.7,
    TuningSlot.THRESHOLD: 0.1,
    TuningSlot.DILUTION: 0.2,
    TuningSlot.INITIAL_SCALE: 0.25,
}

# Total number of settings (determines array width)
MAX_SETTINGS = len(TuningSlot)


def build_tuning_settings(overrides=None):
    """
    Convert a settings dict into a numpy array.

    Args:
        overrides: Optional dict keyed by lowercase slot name
                   (e.g. {'target_acceptance': 0.44})

    Returns:
        numpy array of shape (MAX_SETTINGS,) containing all settings

    Raises:
        ValueError: If an override key does not name a TuningSlot
    """
    settings = np.zeros(MAX_SETTINGS, dtype=np.float64)
    for slot, default in TUNING_DEFAULTS.items():
        settings[slot] = default

    if overrides:
        for key, value in overrides.items():
            if not hasattr(TuningSlot, key.upper()):
                raise ValueError(
                    f"Unknown tuning setting '{key}'. "
                    f"Available: {[s.name.lower() for s in TuningSlot]}"
                )
            settings[getattr(TuningSlot, key.upper())] = float(value)

    return settings
