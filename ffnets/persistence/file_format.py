"""Versioned binary file format for networks.

Layout (all big-endian)::

    utf     MAGIC
    int     version
    int     number of network input nodes
    int     number of layers
    int     output nodes, once per layer
    per layer:
        per output node:
            real    bias
            real    weight, once per input node
        utf     activator name

``real`` is an 8-byte double in version 1 and a 4-byte float in version 2.
Activator names are those in :data:`FILE_NAMES`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict

import numpy as np

from ..core.activations import Activator
from ..core.network import Network
from ..core.types import LayerTemplate
from ..errors import ConfigurationError, UnsupportedFormatError
from .stream import DataInput, DataOutput

logger = logging.getLogger(__name__)

MAGIC = "org.ojalgo.ann.ArtificialNeuralNetwork"


@dataclass(frozen=True)
class FormatVersion:
    """Per-version encoding of real values."""

    version: int
    real: np.dtype
    dtype: np.dtype


VERSIONS: Dict[int, FormatVersion] = {
    1: FormatVersion(1, np.dtype(">f8"), np.dtype(np.float64)),
    2: FormatVersion(2, np.dtype(">f4"), np.dtype(np.float32)),
}

#: Activator names as stored on disk; RECTIFIER keeps the name "RELU".
FILE_NAMES: Dict[Activator, str] = {
    activator: "RELU" if activator is Activator.RECTIFIER else activator.name
    for activator in Activator
}
_FROM_FILE: Dict[str, Activator] = {name: activator for activator, name in FILE_NAMES.items()}
_FROM_FILE.update((activator.name, activator) for activator in Activator)


def version_for(network: Network) -> int:
    return 2 if network.dtype == np.dtype(np.float32) else 1


def write(network: Network, version: int, stream: BinaryIO) -> None:
    """Write ``network`` to ``stream`` using format ``version``."""

    try:
        fmt = VERSIONS[version]
    except KeyError as exc:
        raise UnsupportedFormatError(f"Unsupported version: {version}") from exc

    output = DataOutput(stream)
    output.write_utf(MAGIC)
    output.write_int(fmt.version)

    depth = network.depth()
    output.write_int(network.count_input_nodes())
    output.write_int(depth)
    for layer in range(depth):
        output.write_int(network.count_output_nodes(layer))

    for layer in range(depth):
        calc = network._layer(layer)
        # One row per output node: the bias followed by its incoming weights.
        rows = np.column_stack((calc.bias, calc.weights.T))
        stream.write(rows.astype(fmt.real).tobytes())
        output.write_utf(FILE_NAMES[calc.activator])


def read(stream: BinaryIO) -> Network:
    """Read a network written by :func:`write`.

    Raises :class:`UnsupportedFormatError` for an unknown identifier, version
    or activator. A truncated body raises ``EOFError``.
    """

    data = DataInput(stream)
    try:
        magic = data.read_utf()
        version = data.read_int()
    except (EOFError, UnicodeDecodeError) as exc:
        raise UnsupportedFormatError("Unable to read the file header") from exc
    if magic != MAGIC:
        raise UnsupportedFormatError(f"Unknown identifier: {magic!r}")
    try:
        fmt = VERSIONS[version]
    except KeyError as exc:
        raise UnsupportedFormatError(f"Unsupported version: {version}") from exc

    inputs = data.read_int()
    depth = data.read_int()
    if depth < 1:
        raise UnsupportedFormatError(f"Invalid number of layers: {depth}")
    outputs = [data.read_int() for _ in range(depth)]

    templates = []
    previous = inputs
    for count in outputs:
        templates.append(LayerTemplate(previous, count, Activator.SIGMOID))
        previous = count
    try:
        network = Network(templates, dtype=fmt.dtype)
    except ConfigurationError as exc:
        raise UnsupportedFormatError(f"Invalid layer sizes: {inputs} -> {outputs}") from exc

    for layer, template in enumerate(templates):
        size = template.outputs * (1 + template.inputs) * fmt.real.itemsize
        rows = np.frombuffer(data.read_fully(size), dtype=fmt.real)
        rows = rows.reshape(template.outputs, 1 + template.inputs)
        calc = network._layer(layer)
        calc.bias[...] = rows[:, 0]
        calc.weights[...] = rows[:, 1:].T
        try:
            name = data.read_utf()
        except UnicodeDecodeError as exc:
            raise UnsupportedFormatError(f"Unreadable activator name in layer {layer}") from exc
        try:
            calc.activator = _FROM_FILE[name]
        except KeyError as exc:
            raise UnsupportedFormatError(f"Unknown activator: {name!r}") from exc

    return network


def write_network(network: Network, target: str | Path | BinaryIO) -> None:
    """Write ``network`` to a path or binary stream in its natural version."""

    version = version_for(network)
    if isinstance(target, (str, Path)):
        with Path(target).open("wb") as handle:
            write(network, version, handle)
        logger.debug("Wrote network (version %d) to %s", version, target)
    else:
        write(network, version, target)


def read_network(source: str | Path | BinaryIO) -> Network:
    """Read a network from a path or binary stream."""

    if isinstance(source, (str, Path)):
        with Path(source).open("rb") as handle:
            network = read(handle)
        logger.debug("Read network %s from %s", network.structure(), source)
        return network
    return read(source)


__all__ = [
    "FILE_NAMES",
    "MAGIC",
    "VERSIONS",
    "read",
    "read_network",
    "version_for",
    "write",
    "write_network",
]
