"""ffnets public API."""

from __future__ import annotations

import numpy as np

from .core import activations, types  # noqa: F401
from .core.activations import Activator
from .core.invoker import NetworkInvoker
from .core.network import Network, NetworkBuilder
from .errors import ConfigurationError, FFNetsError, UnsupportedFormatError
from .persistence import read_network, write_network
from .training.losses import Error
from .training.trainer import NetworkTrainer


def builder(
    inputs: int,
    *outputs: int,
    dtype: np.dtype | type | str = np.float64,
    seed: int | np.random.Generator | None = None,
) -> NetworkBuilder | NetworkTrainer:
    """Start a network with ``inputs`` input nodes.

    Without ``outputs`` this returns a :class:`NetworkBuilder`. Given the
    output counts of every layer it builds an all-SIGMOID network right away
    and returns a trainer for it, whose fluent setters can then adjust
    activators, weights, biases, error and learning rate.
    """

    network_builder = Network.builder(inputs, dtype=dtype, seed=seed)
    if not outputs:
        return network_builder
    return network_builder.layers(outputs).get().new_trainer()


__all__ = [
    "Activator",
    "ConfigurationError",
    "Error",
    "FFNetsError",
    "Network",
    "NetworkBuilder",
    "NetworkInvoker",
    "NetworkTrainer",
    "UnsupportedFormatError",
    "activations",
    "builder",
    "read_network",
    "types",
    "write_network",
]
