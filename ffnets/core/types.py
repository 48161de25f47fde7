"""Core typing contracts for ffnets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

import numpy as np

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .activations import Activator

Array = np.ndarray


@dataclass(frozen=True)
class Batch:
    """Paired rows of inputs and targets, one training pair per row."""

    inputs: Array
    targets: Array

    def __len__(self) -> int:
        return int(self.inputs.shape[0])


@dataclass(frozen=True)
class LayerTemplate:
    """Shape and activator of one calculation layer, prior to allocation."""

    inputs: int
    outputs: int
    activator: "Activator"


class Structure(NamedTuple):
    """Weight matrix shape of a layer: ``rows`` inputs by ``columns`` outputs."""

    rows: int
    columns: int


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`ffnets.training.pipelines.run_pipeline`."""

    epochs: int
    steps: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    network_path: str = ""
