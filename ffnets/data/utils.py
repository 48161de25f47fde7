"""Partitioning and encoding helpers shared by the dataset loaders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np


@dataclass(frozen=True)
class SplitIndices:
    """Row indices of the train, val and test partitions."""

    train: np.ndarray
    val: np.ndarray
    test: np.ndarray

    @property
    def sizes(self) -> Dict[str, int]:
        return {name: int(getattr(self, name).size) for name in ("train", "val", "test")}


def _holdout_size(n_samples: int, fraction: float, available: int) -> int:
    # A non-zero fraction always holds out at least one row.
    size = int(round(n_samples * fraction))
    if fraction > 0:
        size = max(size, 1)
    return min(size, available)


def _split_sizes(n_samples: int, val_split: float, test_split: float) -> Tuple[int, int]:
    for name, fraction in (("val_split", val_split), ("test_split", test_split)):
        if not 0.0 <= fraction < 1.0:
            raise ValueError(f"{name} must be in [0, 1), got {fraction}")
    if val_split + test_split >= 1.0:
        raise ValueError("val_split + test_split must be < 1")

    test_size = _holdout_size(n_samples, test_split, n_samples)
    val_size = _holdout_size(n_samples, val_split, n_samples - test_size)
    if n_samples - test_size - val_size < 1:
        raise ValueError(f"{n_samples} samples leave nothing to train on")
    return val_size, test_size


def deterministic_split(
    n_samples: int,
    *,
    val_split: float = 0.1,
    test_split: float = 0.2,
    seed: int = 0,
) -> SplitIndices:
    """Shuffle ``range(n_samples)`` with ``seed`` and cut it into three parts."""

    val_size, test_size = _split_sizes(n_samples, val_split, test_split)
    order = np.random.default_rng(seed).permutation(n_samples)
    return SplitIndices(
        train=order[test_size + val_size :],
        val=order[test_size : test_size + val_size],
        test=order[:test_size],
    )


def shared_split(n_samples: int) -> SplitIndices:
    """Every row in every split, for problems too small to hold anything out."""

    rows = np.arange(n_samples)
    return SplitIndices(train=rows, val=rows.copy(), test=rows.copy())


def one_hot(labels: np.ndarray, num_classes: int) -> np.ndarray:
    """Rows of the identity matrix selected by integer ``labels``."""

    return np.eye(num_classes, dtype=np.float64)[np.asarray(labels, dtype=np.int64)]


__all__ = ["SplitIndices", "deterministic_split", "one_hot", "shared_split"]
