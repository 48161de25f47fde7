"""Datasets stored as ``.npz`` archives with ``inputs`` and ``targets`` arrays."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from ...errors import ConfigurationError
from ..registry import DataSpec, DatasetSpec, as_rows, register_dataset
from ..utils import deterministic_split


@register_dataset("npz")
def load_npz(
    path: str | Path | None = None,
    task_type: str = "regression",
    seed: int = 0,
    val_split: float = 0.1,
    test_split: float = 0.2,
    **_: object,
) -> DatasetSpec:
    if path is None:
        raise ConfigurationError("The npz dataset requires a 'path' option")
    path = Path(path)
    with np.load(path) as archive:
        missing = {"inputs", "targets"} - set(archive.files)
        if missing:
            raise ConfigurationError(f"{path} is missing arrays: {', '.join(sorted(missing))}")
        inputs = as_rows(archive["inputs"])
        targets = as_rows(archive["targets"])

    num_classes = int(targets.shape[1]) if task_type == "multiclass" else None
    return DatasetSpec(
        name="npz",
        inputs=inputs,
        targets=targets,
        data_spec=DataSpec(
            d_in=int(inputs.shape[1]),
            d_out=int(targets.shape[1]),
            task_type=task_type,
            num_classes=num_classes,
        ),
        provenance={
            "type": "npz",
            "path": str(path),
            "seed": seed,
            "val_split": val_split,
            "test_split": test_split,
        },
        indices=deterministic_split(
            inputs.shape[0], val_split=val_split, test_split=test_split, seed=seed
        ),
    )


__all__ = ["load_npz"]
