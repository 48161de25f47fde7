"""Backpropagation trainer for feed-forward networks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List

import numpy as np

from ..core.activations import Activator
from ..core.invoker import as_input
from ..core.network import DROPOUT_FACTOR, Network
from ..core.types import Array, Structure
from .losses import Error

logger = logging.getLogger(__name__)


@dataclass
class TrainingConfiguration:
    """Settings shared by every :meth:`NetworkTrainer.train` call."""

    learning_rate: float = 1.0
    error: Error = Error.HALF_SQUARED_DIFFERENCE
    lasso: float = 0.0
    ridge: float = 0.0


class NetworkTrainer:
    """Run online stochastic gradient descent on a network.

    The trainer keeps a reference to the network, not a copy, and owns the
    scratch buffers used by every step: one output buffer per layer and one
    gradient buffer per layer boundary. Only one trainer should update a given
    network at a time; nothing enforces this.
    """

    def __init__(self, network: Network) -> None:
        self._network = network
        self._configuration = TrainingConfiguration()
        self._outputs: List[Array] = [
            np.zeros(network.count_output_nodes(layer), dtype=network.dtype)
            for layer in range(network.depth())
        ]
        self._gradients: List[Array] = [np.zeros(network.count_input_nodes(), dtype=network.dtype)]
        self._gradients.extend(np.zeros_like(output) for output in self._outputs)

    @property
    def network(self) -> Network:
        return self._network

    @property
    def configuration(self) -> TrainingConfiguration:
        return self._configuration

    # ------------------------------------------------------------------
    # Fluent configuration

    def activator(self, layer: int, activator: Activator | str) -> "NetworkTrainer":
        self._network._set_activator(layer, activator)
        return self

    def activators(self, *activators: Activator | str) -> "NetworkTrainer":
        """Set one activator for every layer, or one per layer in order."""

        if len(activators) == 1:
            activators = activators * self.depth()
        for layer, activator in enumerate(activators):
            self.activator(layer, activator)
        return self

    def bias(self, layer: int, output: int, bias: float) -> "NetworkTrainer":
        self._network._set_bias(layer, output, bias)
        return self

    def weight(self, layer: int, input: int, output: int, weight: float) -> "NetworkTrainer":
        self._network._set_weight(layer, input, output, weight)
        return self

    def rate(self, rate: float) -> "NetworkTrainer":
        self._configuration.learning_rate = float(rate)
        return self

    def error(self, error: Error | str) -> "NetworkTrainer":
        """Select the error function to minimise.

        CROSS_ENTROPY is only correct together with a SOFTMAX output layer,
        and SOFTMAX only with CROSS_ENTROPY. Other pairings are accepted but
        logged since they train incorrectly.
        """

        error = Error.resolve(error, output_activator=self._network.output_activator)
        if not error.pairs_with(self._network.output_activator):
            logger.warning(
                "Error %s with output activator %s gives incorrect training",
                error.name,
                self._network.output_activator.name,
            )
        self._configuration.error = error
        return self

    def dropouts(self, enabled: bool = True) -> "NetworkTrainer":
        """Switch dropout on (or off, rescaling the trained weights)."""

        self._network._set_dropouts(enabled)
        return self

    def lasso(self, factor: float) -> "NetworkTrainer":
        """L1 regularisation applied to the weights on every update."""

        self._configuration.lasso = float(factor)
        return self

    def ridge(self, factor: float) -> "NetworkTrainer":
        """L2 regularisation applied to the weights on every update."""

        self._configuration.ridge = float(factor)
        return self

    # ------------------------------------------------------------------
    # Read access

    def depth(self) -> int:
        return self._network.depth()

    def structure(self) -> List[Structure]:
        return self._network.structure()

    def get_activator(self, layer: int) -> Activator:
        return self._network.get_activator(layer)

    def get_bias(self, layer: int, output: int) -> float:
        return self._network.get_bias(layer, output)

    def get_weight(self, layer: int, input: int, output: int) -> float:
        return self._network.get_weight(layer, input, output)

    def get_weights(self) -> List[Array]:
        return self._network.get_weights()

    # ------------------------------------------------------------------
    # Training

    def probability_to_keep(self, layer: int) -> float:
        """Keep probability applied to ``layer``'s output in the forward pass."""

        if self._network.dropouts and layer < self.depth() - 1:
            return DROPOUT_FACTOR
        return 1.0

    def dropout_factor(self, layer: int) -> float:
        """Scale factor applied to ``layer``'s updates, 0.5 past the first layer."""

        if self._network.dropouts and layer > 0:
            return DROPOUT_FACTOR
        return 1.0

    def train(self, input: object, target: object) -> None:
        """Update the network once, from a single training pair."""

        network = self._network
        config = self._configuration

        given = self._gradients[0]
        given[...] = as_input(network, input)

        current = given
        for layer, output in enumerate(self._outputs):
            current = network._invoke(layer, current, output, self.probability_to_keep(layer))

        target = np.asarray(target, dtype=network.dtype).reshape(-1)
        if target.shape != current.shape:
            raise ValueError(f"Expected {current.shape[0]} target values, got {target.shape[0]}")
        config.error.derivative(target, current, out=self._gradients[-1])

        for layer in range(self.depth() - 1, -1, -1):
            layer_input = given if layer == 0 else self._outputs[layer - 1]
            network._layer(layer).adjust(
                layer_input,
                self._outputs[layer],
                self._gradients[layer] if layer > 0 else None,
                self._gradients[layer + 1],
                -config.learning_rate,
                self.dropout_factor(layer),
                config.lasso,
                config.ridge,
            )

    def train_all(self, inputs: Iterable[object], targets: Iterable[object]) -> int:
        """Train on each paired row in turn and return the number of steps.

        This is plain online SGD: no averaging, and later pairs see the
        updates made by earlier ones. Stops at the shorter of the two inputs.
        """

        steps = 0
        for input, target in zip(inputs, targets):
            self.train(input, target)
            steps += 1
        return steps

    def error_value(self, target: object, current: object) -> float:
        """Return the configured error for ``current`` against ``target``."""

        return self._configuration.error.invoke(target, current)

    def __repr__(self) -> str:
        return (
            f"NetworkTrainer(structure={[tuple(s) for s in self.structure()]}, "
            f"error={self._configuration.error.name}, "
            f"learning_rate={self._configuration.learning_rate})"
        )


__all__ = ["NetworkTrainer", "TrainingConfiguration"]
