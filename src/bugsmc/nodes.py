"""
Model Nodes

A node binds one numpy array (the node's value) into a model. Every node
supports the same capability set so the model can drive all of them through
one loop:

    preserve()                  snapshot value -> old_value
    revert()                    restore value <- old_value
    jump(rng)                   block random-walk proposal
    component_jump(rng, model)  single-site propose + accept/reject, per component
    tune(settings)              adapt proposal scales from acceptance counts
    tally()                     append a copy of the value to the history

Variants:
    Stochastic    - random variable with a log-likelihood. Latent nodes
                    (observed=False) are proposed; observed nodes hold fixed
                    data and only contribute likelihood.
    Deterministic - value computed by the model's update callback; never proposed.

Scalars are stored as 0-d arrays and handled by the same code as vectors and
matrices: component i is value.flat[i].

All mutation is in place. A node bound to caller-owned storage therefore
keeps writing into the caller's array for its whole lifetime.
"""

from typing import Callable, Optional

import numpy as np

from .proposals import rand_walk_proposal, component_proposal, rescale
from .settings import TuningSlot, TUNING_DEFAULTS


class Node:
    """Base class holding the value, its rollback snapshot and tally history."""

    _STOCHASTIC = False
    _DETERMINISTIC = False

    def __init__(self, name: str, value: np.ndarray):
        if not isinstance(value, np.ndarray):
            raise TypeError(f"Node '{name}' value must be a numpy array, got {type(value).__name__}")
        self._name = name
        self.value = value
        self.old_value = value.copy()
        self._history = []

    # Role flags are fixed by the node class (and the observed flag at construction)
    @property
    def is_stochastic(self) -> bool:
        return self._STOCHASTIC

    @property
    def is_observed(self) -> bool:
        return False

    @property
    def is_deterministic(self) -> bool:
        return self._DETERMINISTIC

    @property
    def name(self) -> str:
        return self._name

    @property
    def size(self) -> int:
        """Number of scalar components in the value."""
        return self.value.size

    @property
    def shape(self):
        return self.value.shape

    @property
    def value_type(self) -> type:
        """float/int/bool for 0-d values, np.ndarray otherwise."""
        if self.value.ndim == 0:
            return type(self.value.item())
        return np.ndarray

    def preserve(self) -> None:
        self.old_value[...] = self.value

    def revert(self) -> None:
        self.value[...] = self.old_value

    def jump(self, rng) -> None:
        pass

    def component_jump(self, rng, model) -> None:
        pass

    def tune(self, settings=None) -> None:
        pass

    def logp_functor(self) -> Callable[[], float]:
        raise TypeError(f"{type(self).__name__} node '{self.name}' has no likelihood")

    # ------------------------------------------------------------------
    # Tally history
    # ------------------------------------------------------------------

    def tally(self) -> None:
        self._history.append(self.value.copy())

    @property
    def history(self) -> np.ndarray:
        """Tallied values stacked along a new leading axis: (n_tallies, *shape)."""
        if not self._history:
            return np.empty((0,) + self.value.shape, dtype=self.value.dtype)
        return np.stack(self._history)

    @property
    def n_tallies(self) -> int:
        return len(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    def release(self) -> None:
        """Drop the value, snapshot and history. Only for storage the model allocated."""
        self._history.clear()
        self.value = None
        self.old_value = None

    def mean(self):
        """Mean of the tallied values (NaN-filled if nothing was tallied)."""
        if not self._history:
            return np.full(self.value.shape, np.nan)
        return self.history.mean(axis=0)

    def describe(self) -> str:
        return f"{self._role()} '{self.name}': {np.array2string(self.value, precision=6)}"

    def _role(self) -> str:
        return type(self).__name__

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r}, shape={self.shape})"


class Stochastic(Node):
    """
    Random variable with a log-likelihood.

    Args:
        name: Unique node name within a model
        value: Bound storage. Latent nodes require a floating dtype.
        likelihood: fn(value) -> float log-density of the current value
        observed: True for fixed data (never proposed, still contributes logp)
        initial_scale: Starting proposal scale for every component
    """

    _STOCHASTIC = True

    def __init__(self, name: str, value: np.ndarray, likelihood: Callable[[np.ndarray], float],
                 observed: bool = False, initial_scale: Optional[float] = None):
        super().__init__(name, value)
        if not observed and not np.issubdtype(value.dtype, np.floating):
            raise TypeError(
                f"Latent stochastic node '{name}' needs a floating-point value, got dtype {value.dtype}"
            )
        if initial_scale is None:
            initial_scale = TUNING_DEFAULTS[TuningSlot.INITIAL_SCALE]
        self._likelihood = likelihood
        self._observed = bool(observed)
        self.accepted = np.zeros(value.shape, dtype=np.float64)
        self.rejected = np.zeros(value.shape, dtype=np.float64)
        self.scale = np.full(value.shape, float(initial_scale), dtype=np.float64)

    @property
    def is_observed(self) -> bool:
        return self._observed

    def logp(self) -> float:
        return float(self._likelihood(self.value))

    def logp_functor(self) -> Callable[[], float]:
        return self.logp

    def jump(self, rng) -> None:
        if self._observed:
            return
        rand_walk_proposal(self.value, self.scale, rng)

    def component_jump(self, rng, model) -> None:
        """
        One Metropolis accept/reject decision per component.

        For each component the joint log-probability is evaluated before and
        after perturbing that component alone (with model.update() in between
        so dependent deterministics follow). A rejected component is restored
        from old_value and update() runs again so deterministics match.
        """
        if self._observed:
            return
        for i in range(self.value.size):
            old_logp = model.logp()
            self.old_value.flat[i] = self.value.flat[i]
            component_proposal(self.value, self.scale, i, rng)
            model.update()
            if model.reject(model.logp(), old_logp):
                self.value.flat[i] = self.old_value.flat[i]
                model.update()
                self.rejected.flat[i] += 1
            else:
                self.accepted.flat[i] += 1

    def tune(self, settings=None) -> None:
        if self._observed:
            return
        rescale(self.scale, self.accepted, self.rejected, settings)

    def acceptance_ratio(self) -> np.ndarray:
        """Per-component acceptance rate since the last tune() (NaN with no trials)."""
        trials = self.accepted + self.rejected
        with np.errstate(invalid='ignore', divide='ignore'):
            return self.accepted / trials

    def describe(self) -> str:
        text = super().describe()
        if not self._observed:
            text += f" (scale={np.array2string(self.scale, precision=4)})"
        return text

    def _role(self) -> str:
        return "Observed" if self._observed else "Stochastic"


class Deterministic(Node):
    """Value computed from other nodes by the model's update callback."""

    _DETERMINISTIC = True
