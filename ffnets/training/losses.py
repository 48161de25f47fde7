"""Error functions used to train networks.

Both errors share the derivative ``current - target``. For CROSS_ENTROPY that
is only the correct gradient at the pre-activation of a SOFTMAX output layer,
where the softmax Jacobian cancels; the SOFTMAX activator therefore reports a
derivative of one. Other pairings are accepted but train incorrectly.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from ..core.activations import Activator
from ..core.types import Array
from ..errors import ConfigurationError


PointwiseFn = Callable[[Array, Array], Array]


@dataclass(frozen=True)
class ErrorFunctions:
    """Pointwise loss and its derivative with respect to the current output."""

    function: PointwiseFn
    derivative: PointwiseFn


def _cross_entropy(target: Array, current: Array) -> Array:
    with np.errstate(divide="ignore", invalid="ignore"):
        return -target * np.log(current)


def _half_squared_difference(target: Array, current: Array) -> Array:
    diff = target - current
    return 0.5 * diff * diff


def _difference(target: Array, current: Array) -> Array:
    return current - target


class Error(enum.Enum):
    """Closed set of error functions; behaviour is looked up in :data:`TABLE`."""

    CROSS_ENTROPY = "cross_entropy"
    HALF_SQUARED_DIFFERENCE = "half_squared_difference"

    @classmethod
    def resolve(
        cls, value: "Error | str", *, output_activator: Activator | None = None
    ) -> "Error":
        """Return the member for ``value``; ``"auto"`` picks the natural pairing."""

        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key == "auto":
            if output_activator is None:
                raise ConfigurationError("Resolving 'auto' requires the output activator")
            return cls.default_for(output_activator)
        key = _ALIASES.get(key, key)
        for member in cls:
            if member.value == key:
                return member
        raise ConfigurationError(
            f"Unknown error {value!r}. Available errors: {', '.join(names())}"
        )

    @classmethod
    def default_for(cls, output_activator: Activator) -> "Error":
        if output_activator is Activator.SOFTMAX:
            return cls.CROSS_ENTROPY
        return cls.HALF_SQUARED_DIFFERENCE

    def pairs_with(self, output_activator: Activator) -> bool:
        """Return whether training with this error and activator is correct."""

        return (self is Error.CROSS_ENTROPY) == (output_activator is Activator.SOFTMAX)

    def invoke(self, target: object, current: object) -> float:
        """Return the error summed over the overlapping elements."""

        target = np.asarray(target, dtype=np.float64).reshape(-1)
        current = np.asarray(current, dtype=np.float64).reshape(-1)
        limit = min(target.shape[0], current.shape[0])
        return float(np.sum(TABLE[self].function(target[:limit], current[:limit])))

    def derivative(self, target: Array, current: Array, out: Array | None = None) -> Array:
        """Return dE/d(current), written into ``out`` when given."""

        result = TABLE[self].derivative(target, current)
        if out is None:
            return result
        out[...] = result
        return out


TABLE: Dict[Error, ErrorFunctions] = {
    Error.CROSS_ENTROPY: ErrorFunctions(_cross_entropy, _difference),
    Error.HALF_SQUARED_DIFFERENCE: ErrorFunctions(_half_squared_difference, _difference),
}

_ALIASES = {"ce": "cross_entropy", "hsd": "half_squared_difference", "mse": "half_squared_difference"}


def names() -> Iterable[str]:
    return sorted(member.value for member in Error)


__all__ = ["Error", "ErrorFunctions", "TABLE", "names"]
