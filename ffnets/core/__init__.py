"""Core numerical primitives for ffnets."""

from . import activations, invoker, layer, network, types
from .activations import Activator
from .invoker import NetworkInvoker
from .layer import CalculationLayer
from .network import Network, NetworkBuilder

__all__ = [
    "Activator",
    "CalculationLayer",
    "Network",
    "NetworkBuilder",
    "NetworkInvoker",
    "activations",
    "invoker",
    "layer",
    "network",
    "types",
]
