"""Feed-forward network topology and parameters.

A :class:`Network` is an ordered, fixed sequence of calculation layers. Its
topology never changes after construction but its weights and biases are
mutated in place by trainers and by the persistence codec.

Concurrency: the parameters are the only state shared between trainers and
invokers, and nothing serialises access to them. Callers must keep to a single
writer at a time. Invokers evaluating concurrently with a running trainer may
observe partially updated weights; this is accepted rather than locked against.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Iterable, List, Sequence

import numpy as np

from ..errors import ConfigurationError
from .activations import Activator
from .layer import CalculationLayer
from .types import Array, LayerTemplate, Structure

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from ..training.trainer import NetworkTrainer
    from .invoker import NetworkInvoker

logger = logging.getLogger(__name__)

#: Weight-update scale factor for layers fed by dropped-out nodes.
DROPOUT_FACTOR = 0.5


class Network:
    """An artificial neural network made of fully connected layers."""

    def __init__(
        self,
        templates: Sequence[LayerTemplate],
        *,
        dtype: np.dtype | type | str = np.float64,
        seed: int | np.random.Generator | None = None,
    ) -> None:
        templates = list(templates)
        _validate_templates(templates)
        self.dtype = np.dtype(dtype)
        if self.dtype not in (np.dtype(np.float64), np.dtype(np.float32)):
            raise ConfigurationError(f"Unsupported dtype: {self.dtype}")
        self.rng = np.random.default_rng(seed)
        self._dropouts = False
        self._layers: tuple[CalculationLayer, ...] = tuple(
            CalculationLayer(
                template.inputs,
                template.outputs,
                template.activator,
                dtype=self.dtype,
                rng=self.rng,
            )
            for template in templates
        )
        for index, layer in enumerate(self._layers[:-1]):
            if not layer.activator.single_folded:
                logger.warning(
                    "Layer %d uses %s which is only correct in the final layer",
                    index,
                    layer.activator.name,
                )
        logger.debug("Created network %s", [tuple(s) for s in self.structure()])

    # ------------------------------------------------------------------
    # Construction helpers

    @staticmethod
    def builder(
        inputs: int,
        *,
        dtype: np.dtype | type | str = np.float64,
        seed: int | np.random.Generator | None = None,
    ) -> "NetworkBuilder":
        return NetworkBuilder(inputs, dtype=dtype, seed=seed)

    @classmethod
    def read_from(cls, source: str | Path | BinaryIO) -> "Network":
        """Read a network previously written by :meth:`write_to`."""

        from ..persistence.file_format import read_network

        return read_network(source)

    def write_to(self, target: str | Path | BinaryIO) -> None:
        """Write this network; float32 networks use format version 2."""

        from ..persistence.file_format import write_network

        write_network(self, target)

    # ------------------------------------------------------------------
    # Topology

    def depth(self) -> int:
        """Return the number of calculation layers."""

        return len(self._layers)

    def width(self) -> int:
        """Return the largest output count of any layer."""

        return max(layer.count_output_nodes() for layer in self._layers)

    def structure(self) -> List[Structure]:
        return [layer.structure for layer in self._layers]

    def count_input_nodes(self, layer: int = 0) -> int:
        return self._layers[layer].count_input_nodes()

    def count_output_nodes(self, layer: int = -1) -> int:
        return self._layers[layer].count_output_nodes()

    @property
    def output_activator(self) -> Activator:
        return self._layers[-1].activator

    @property
    def dropouts(self) -> bool:
        return self._dropouts

    # ------------------------------------------------------------------
    # Read access

    def get_activator(self, layer: int) -> Activator:
        return self._layers[layer].activator

    def get_bias(self, layer: int, output: int) -> float:
        return self._layers[layer].get_bias(output)

    def get_weight(self, layer: int, input: int, output: int) -> float:
        return self._layers[layer].get_weight(input, output)

    def get_weights(self) -> List[Array]:
        return [layer.weights.copy() for layer in self._layers]

    def get_biases(self) -> List[Array]:
        return [layer.bias.copy() for layer in self._layers]

    # ------------------------------------------------------------------
    # Evaluation contexts

    def new_invoker(self) -> "NetworkInvoker":
        """Return a new forward-only evaluation context.

        Invokers own their buffers, so several can be used from different
        threads at the same time.
        """

        from .invoker import NetworkInvoker

        return NetworkInvoker(self)

    def new_trainer(self) -> "NetworkTrainer":
        """Return a trainer; only one should be used at a time."""

        from ..training.losses import Error
        from ..training.trainer import NetworkTrainer

        trainer = NetworkTrainer(self)
        trainer.error(Error.default_for(self.output_activator))
        return trainer

    # ------------------------------------------------------------------
    # Package internal: used by trainers, invokers and the file format

    def _layer(self, layer: int) -> CalculationLayer:
        return self._layers[layer]

    def _invoke(
        self,
        layer: int,
        input: Array,
        output: Array,
        probability_to_keep: float = 1.0,
    ) -> Array:
        return self._layers[layer].invoke(input, output, probability_to_keep, self.rng)

    def _set_activator(self, layer: int, activator: Activator | str) -> None:
        self._layers[layer].activator = Activator.resolve(activator)

    def _set_bias(self, layer: int, output: int, bias: float) -> None:
        self._layers[layer].set_bias(output, bias)

    def _set_weight(self, layer: int, input: int, output: int, weight: float) -> None:
        self._layers[layer].set_weight(input, output, weight)

    def _randomise(self) -> None:
        for layer in self._layers:
            layer.randomise(self.rng)

    def _scale(self, layer: int, factor: float) -> None:
        self._layers[layer].scale(factor)

    def _set_dropouts(self, enabled: bool) -> None:
        if self._dropouts and not enabled:
            # Every layer but the first was trained on half of its inputs.
            for layer in range(1, self.depth()):
                self._scale(layer, DROPOUT_FACTOR)
            logger.debug("Dropout switched off, layers 1..%d rescaled", self.depth() - 1)
        self._dropouts = bool(enabled)

    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Network):
            return NotImplemented
        return self._layers == other._layers

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        layers = "".join(f"\n  {layer!r}" for layer in self._layers)
        return f"Network(dtype={self.dtype.name}, layers=[{layers}\n])"


class NetworkBuilder:
    """Fluent builder adding one calculation layer at a time."""

    def __init__(
        self,
        inputs: int,
        *,
        dtype: np.dtype | type | str = np.float64,
        seed: int | np.random.Generator | None = None,
    ) -> None:
        if int(inputs) < 1:
            raise ConfigurationError(f"A network needs at least 1 input node, got {inputs}")
        self.inputs = int(inputs)
        self.dtype = dtype
        self.seed = seed
        self._layers: List[LayerTemplate] = []

    def layer(
        self, outputs: int, activator: Activator | str = Activator.SIGMOID
    ) -> "NetworkBuilder":
        previous = self._layers[-1].outputs if self._layers else self.inputs
        self._layers.append(
            LayerTemplate(previous, int(outputs), Activator.resolve(activator))
        )
        return self

    def layers(self, outputs: Iterable[int], activator: Activator | str = Activator.SIGMOID) -> "NetworkBuilder":
        for count in outputs:
            self.layer(count, activator)
        return self

    @property
    def templates(self) -> List[LayerTemplate]:
        return list(self._layers)

    def get(self) -> Network:
        return Network(self._layers, dtype=self.dtype, seed=self.seed)


def _validate_templates(templates: Sequence[LayerTemplate]) -> None:
    if len(templates) < 1:
        raise ConfigurationError("There must be at least 1 layer")
    for index, template in enumerate(templates):
        if template.inputs < 1 or template.outputs < 1:
            raise ConfigurationError(
                f"Layer {index} must have at least 1 input and 1 output node, "
                f"got {template.inputs} x {template.outputs}"
            )
        if index > 0 and templates[index - 1].outputs != template.inputs:
            raise ConfigurationError(
                f"Layer {index} expects {template.inputs} inputs but layer "
                f"{index - 1} produces {templates[index - 1].outputs} outputs"
            )


__all__ = ["DROPOUT_FACTOR", "Network", "NetworkBuilder"]
