"""A single calculation layer: affine transform followed by an activator."""

from __future__ import annotations

import numpy as np

from .activations import Activator
from .types import Array, Structure


class CalculationLayer:
    """Weights ``(inputs, outputs)``, bias ``(outputs,)`` and one activator."""

    def __init__(
        self,
        inputs: int,
        outputs: int,
        activator: Activator,
        *,
        dtype: np.dtype | type = np.float64,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.weights: Array = np.zeros((inputs, outputs), dtype=dtype)
        self.bias: Array = np.zeros(outputs, dtype=dtype)
        self.activator = Activator.resolve(activator)
        self.randomise(rng if rng is not None else np.random.default_rng())

    # ------------------------------------------------------------------
    # Structure

    def count_input_nodes(self) -> int:
        return int(self.weights.shape[0])

    def count_output_nodes(self) -> int:
        return int(self.weights.shape[1])

    @property
    def structure(self) -> Structure:
        return Structure(*self.weights.shape)

    # ------------------------------------------------------------------
    # Parameters

    def get_weight(self, input: int, output: int) -> float:
        return float(self.weights[input, output])

    def set_weight(self, input: int, output: int, weight: float) -> None:
        self.weights[input, output] = weight

    def get_bias(self, output: int) -> float:
        return float(self.bias[output])

    def set_bias(self, output: int, bias: float) -> None:
        self.bias[output] = bias

    def randomise(self, rng: np.random.Generator) -> None:
        """Draw weights and bias uniformly from ``[-m, m]``, ``m = 1/sqrt(inputs)``."""

        magnitude = 1.0 / np.sqrt(self.count_input_nodes())
        self.weights[...] = rng.uniform(-magnitude, magnitude, size=self.weights.shape)
        self.bias[...] = rng.uniform(-magnitude, magnitude, size=self.bias.shape)

    def scale(self, factor: float) -> None:
        self.weights *= factor
        self.bias *= factor

    # ------------------------------------------------------------------
    # Evaluation and training

    def invoke(
        self,
        input: Array,
        output: Array,
        probability_to_keep: float = 1.0,
        rng: np.random.Generator | None = None,
    ) -> Array:
        """Compute ``activator(input @ W + b)`` into ``output`` and return it."""

        np.matmul(input, self.weights, out=output)
        output += self.bias
        return self.activator.activate(output, probability_to_keep, rng)

    def adjust(
        self,
        input: Array,
        output: Array,
        upstream_gradient: Array | None,
        downstream_gradient: Array,
        learning_rate: float,
        scale_factor: float = 1.0,
        lasso: float = 0.0,
        ridge: float = 0.0,
    ) -> None:
        """Backpropagate through this layer and update its parameters in place.

        ``downstream_gradient`` holds dE/d(output) on entry and is turned into
        dE/d(pre-activation). When ``upstream_gradient`` is given it receives
        dE/d(input), computed before the weights change. ``learning_rate`` is
        added as is, so callers pass a negative rate to descend.
        """

        gradient = downstream_gradient
        gradient *= self.activator.derivative(output)

        if upstream_gradient is not None:
            np.matmul(self.weights, gradient, out=upstream_gradient)

        step = learning_rate * scale_factor
        if lasso or ridge:
            penalty = lasso * np.sign(self.weights) + ridge * self.weights
            self.weights += learning_rate * penalty
        self.weights += step * np.outer(input, gradient)
        self.bias += step * gradient

    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, CalculationLayer):
            return NotImplemented
        return (
            self.activator is other.activator
            and self.weights.shape == other.weights.shape
            and np.array_equal(self.weights, other.weights)
            and np.array_equal(self.bias, other.bias)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        rows, columns = self.structure
        return f"CalculationLayer(inputs={rows}, outputs={columns}, activator={self.activator.name})"


__all__ = ["CalculationLayer"]
