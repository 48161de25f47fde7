"""Named in-memory datasets of training pairs.

Loaders register a factory under a name; :func:`get_dataset` calls it with
the configured options and checks that the returned arrays agree with the
declared :class:`DataSpec` before a network is sized from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping

import numpy as np

from ..core.types import Array, Batch
from ..errors import ConfigurationError
from .utils import SplitIndices

TASK_TYPES = ("binary", "multiclass", "regression")


@dataclass(frozen=True)
class DataSpec:
    """Arity and task of a dataset.

    ``d_in`` is the network input arity and ``d_out`` the output layer's node
    count. Multiclass targets are one-hot rows of ``num_classes`` values.
    """

    d_in: int
    d_out: int
    task_type: str
    num_classes: int | None = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DatasetSpec:
    """All rows of a dataset plus the indices of its three partitions."""

    name: str
    inputs: Array
    targets: Array
    data_spec: DataSpec
    provenance: Dict[str, Any]
    indices: SplitIndices

    @property
    def splits(self) -> Mapping[str, int]:
        return self.indices.sizes

    def split(self, split: str) -> Batch:
        try:
            rows = {"train": self.indices.train, "val": self.indices.val, "test": self.indices.test}[split]
        except KeyError as exc:
            raise ValueError(f"Unsupported split: {split}") from exc
        return Batch(inputs=self.inputs[rows], targets=self.targets[rows])


DatasetFactory = Callable[..., DatasetSpec]

_FACTORIES: Dict[str, DatasetFactory] = {}


def register_dataset(name: str, factory: DatasetFactory | None = None):
    """Register ``factory`` under ``name``; without a factory, act as a decorator."""

    def _register(func: DatasetFactory) -> DatasetFactory:
        _FACTORIES[name] = func
        return func

    return _register(factory) if factory is not None else _register


def available_datasets() -> List[str]:
    return sorted(_FACTORIES)


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    factory = _FACTORIES.get(dataset)
    if factory is None:
        raise ConfigurationError(
            f"Unknown dataset {dataset!r}. Available datasets: {', '.join(available_datasets())}"
        )
    spec = factory(**options)
    _validate_spec(spec)
    return spec


def _validate_spec(spec: DatasetSpec) -> None:
    meta = spec.data_spec
    if meta.task_type not in TASK_TYPES:
        raise ValueError(f"Invalid task type {meta.task_type!r} for dataset {spec.name!r}")
    if meta.task_type == "multiclass" and meta.num_classes is None:
        raise ValueError(f"Multiclass dataset {spec.name!r} must define num_classes")
    if len(spec.inputs) != len(spec.targets):
        raise ValueError(
            f"Dataset {spec.name!r} has {len(spec.inputs)} inputs but {len(spec.targets)} targets"
        )
    if spec.inputs.shape[1:] != (meta.d_in,) or spec.targets.shape[1:] != (meta.d_out,):
        raise ValueError(
            f"Dataset {spec.name!r} rows are {spec.inputs.shape[1:]} -> {spec.targets.shape[1:]}, "
            f"expected ({meta.d_in},) -> ({meta.d_out},)"
        )
    if spec.indices.train.size == 0:
        raise ValueError(f"Dataset {spec.name!r} has an empty train split")


def as_rows(array: object) -> Array:
    """Return ``array`` as float64 with one sample per row."""

    rows = np.asarray(array, dtype=np.float64)
    return rows.reshape(len(rows), -1)


__all__ = [
    "Batch",
    "DataSpec",
    "DatasetSpec",
    "as_rows",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
