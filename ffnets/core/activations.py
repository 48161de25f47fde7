"""Activation functions for calculation layers.

Every activator is described by a row in a lookup table holding

* the forward function, applied in place to a layer's pre-activation values,
* the derivative expressed in terms of the activator's *output*, so that
  backpropagation never needs the pre-activation values, and
* a "single-folded" flag telling whether that derivative can be evaluated
  independently per output element.

SOFTMAX is the only activator that is not single-folded. Its derivative is
reported as one because it is only meant to be combined with the
CROSS_ENTROPY error in the final layer, where the two derivatives cancel
algebraically. Any other use gives incorrect training.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Dict

import numpy as np

from ..errors import ConfigurationError
from .types import Array


def _identity(output: Array) -> Array:
    return output


def _rectifier(output: Array) -> Array:
    return np.maximum(output, 0.0, out=output)


def _sigmoid(output: Array) -> Array:
    with np.errstate(over="ignore"):
        np.negative(output, out=output)
        np.exp(output, out=output)
    output += 1.0
    return np.reciprocal(output, out=output)


def _softmax(output: Array) -> Array:
    # Not shifted by the max: if the sum underflows the result is NaN.
    np.exp(output, out=output)
    output /= output.sum()
    return output


def _tanh(output: Array) -> Array:
    return np.tanh(output, out=output)


def _one(output: Array) -> Array:
    return np.ones_like(output)


def _rectifier_derivative(output: Array) -> Array:
    return (output > 0.0).astype(output.dtype)


def _sigmoid_derivative(output: Array) -> Array:
    return output * (1.0 - output)


def _tanh_derivative(output: Array) -> Array:
    return 1.0 - output * output


@dataclass(frozen=True)
class ActivatorFunctions:
    """Forward function, output-space derivative and folding flag."""

    function: Callable[[Array], Array]
    derivative: Callable[[Array], Array]
    single_folded: bool


class Activator(enum.Enum):
    """Closed set of activators; behaviour is looked up in :data:`TABLE`."""

    IDENTITY = "identity"  # (-inf, +inf)
    RECTIFIER = "rectifier"  # [0, +inf)
    SIGMOID = "sigmoid"  # [0, 1]
    SOFTMAX = "softmax"  # [0, 1], final layer with CROSS_ENTROPY only
    TANH = "tanh"  # [-1, 1]

    @classmethod
    def resolve(cls, value: "Activator | str") -> "Activator":
        """Return the member for ``value`` given as member, name or value."""

        if isinstance(value, cls):
            return value
        key = str(value).strip().upper()
        key = _ALIASES.get(key, key)
        try:
            return cls[key]
        except KeyError as exc:
            available = ", ".join(member.name for member in cls)
            raise ConfigurationError(
                f"Unknown activator {value!r}. Available activators: {available}"
            ) from exc

    @property
    def single_folded(self) -> bool:
        return TABLE[self].single_folded

    def activate(
        self,
        output: Array,
        probability_to_keep: float = 1.0,
        rng: np.random.Generator | None = None,
    ) -> Array:
        """Apply the activator to ``output`` in place, optionally dropping nodes.

        When ``probability_to_keep`` is below one, each node is independently
        set to zero with probability ``1 - probability_to_keep``. Kept nodes are
        passed through unscaled.
        """

        if not 0.0 < probability_to_keep <= 1.0:
            raise ValueError(
                f"probability_to_keep must be in (0, 1], got {probability_to_keep}"
            )
        TABLE[self].function(output)
        if probability_to_keep < 1.0:
            rng = rng if rng is not None else np.random.default_rng()
            output *= rng.random(output.shape) < probability_to_keep
        return output

    def derivative(self, output: Array) -> Array:
        """Return the derivative evaluated at the activator's ``output``."""

        return TABLE[self].derivative(output)


TABLE: Dict[Activator, ActivatorFunctions] = {
    Activator.IDENTITY: ActivatorFunctions(_identity, _one, True),
    Activator.RECTIFIER: ActivatorFunctions(_rectifier, _rectifier_derivative, True),
    Activator.SIGMOID: ActivatorFunctions(_sigmoid, _sigmoid_derivative, True),
    Activator.SOFTMAX: ActivatorFunctions(_softmax, _one, False),
    Activator.TANH: ActivatorFunctions(_tanh, _tanh_derivative, True),
}

_ALIASES = {"RELU": "RECTIFIER", "LOGISTIC": "SIGMOID"}


__all__ = ["Activator", "ActivatorFunctions", "TABLE"]
