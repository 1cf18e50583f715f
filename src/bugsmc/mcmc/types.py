"""
MCMC Data Structures and Type Definitions.

This module contains the small state types used by the model container:
- ChainState: Lifecycle of a chain (uninitialized -> tuning -> sampling -> done)
- ChainStats: Whole-chain accept/reject counters from the sampling loop
"""

import math
from dataclasses import dataclass
from enum import IntEnum


class ChainState(IntEnum):
    """
    Lifecycle of a model's chain.

    DONE is not destructive: tallies and the acceptance ratio stay readable,
    and the next sample() call re-initializes the chain.
    """
    UNINITIALIZED = 0
    INITIALIZED = 1
    TUNING = 2
    SAMPLING = 3
    DONE = 4

    def __str__(self):
        return self.name.title()


@dataclass
class ChainStats:
    """
    Accept/reject counters of the block-proposal sampling loop.

    Tuning-phase decisions are counted per node and per component on the
    nodes themselves, never here.
    """
    accepted: int = 0
    rejected: int = 0

    @property
    def total(self) -> int:
        return self.accepted + self.rejected

    @property
    def acceptance_ratio(self) -> float:
        """accepted / (accepted + rejected); NaN before the first sweep."""
        if self.total == 0:
            return math.nan
        return self.accepted / self.total

    def reset(self) -> None:
        self.accepted = 0
        self.rejected = 0
