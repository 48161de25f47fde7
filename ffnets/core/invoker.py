"""Forward-only evaluation context."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import numpy as np

from .types import Array

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .network import Network


def as_input(network: "Network", values: object) -> Array:
    """Return ``values`` as a flat vector of the network's dtype and input arity."""

    vector = np.asarray(values, dtype=network.dtype).reshape(-1)
    expected = network.count_input_nodes()
    if vector.shape[0] != expected:
        raise ValueError(f"Expected {expected} input values, got {vector.shape[0]}")
    return vector


class NetworkInvoker:
    """Evaluate a network without changing it.

    The output buffers are allocated once and reused, so an instance must not
    be shared between threads. Create one invoker per concurrent caller.
    Dropout is never applied; switch it off on the trainer first so the
    trained weights are rescaled.
    """

    def __init__(self, network: "Network") -> None:
        self.network = network
        self._outputs: List[Array] = [
            np.zeros(network.count_output_nodes(layer), dtype=network.dtype)
            for layer in range(network.depth())
        ]

    def invoke(self, input: object) -> Array:
        """Return the network output for ``input``.

        The returned array is this invoker's last-layer buffer and is
        overwritten by the next call; copy it to keep it.
        """

        current = as_input(self.network, input)
        for layer, output in enumerate(self._outputs):
            current = self.network._invoke(layer, current, output)
        return current

    __call__ = invoke


__all__ = ["NetworkInvoker", "as_input"]
