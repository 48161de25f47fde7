"""Pure in-memory synthetic datasets."""

from __future__ import annotations

import numpy as np

from ..registry import DataSpec, DatasetSpec, register_dataset
from ..utils import deterministic_split, one_hot, shared_split


@register_dataset("xor")
def make_xor(**_: object) -> DatasetSpec:
    """The four exclusive-or pairs, used as train, val and test alike."""

    inputs = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])
    targets = np.array([[0.0], [1.0], [1.0], [0.0]])
    return DatasetSpec(
        name="xor",
        inputs=inputs,
        targets=targets,
        data_spec=DataSpec(d_in=2, d_out=1, task_type="binary"),
        provenance={"type": "xor"},
        indices=shared_split(inputs.shape[0]),
    )


@register_dataset("sine")
def make_sine(
    freq: int = 1,
    n_points: int = 128,
    noise: float = 0.05,
    seed: int = 0,
    val_split: float = 0.1,
    test_split: float = 0.2,
    **_: object,
) -> DatasetSpec:
    """Noisy samples of ``sin(freq * pi * x)`` on ``[-1, 1]``."""

    rng = np.random.default_rng(seed)
    x = np.linspace(-1.0, 1.0, n_points).reshape(-1, 1)
    y = np.sin(freq * np.pi * x)
    if noise > 0:
        y = y + noise * rng.standard_normal(size=y.shape)
    return DatasetSpec(
        name="sine",
        inputs=x,
        targets=y,
        data_spec=DataSpec(d_in=1, d_out=1, task_type="regression"),
        provenance={
            "type": "sine",
            "freq": freq,
            "n_points": n_points,
            "noise": noise,
            "seed": seed,
            "val_split": val_split,
            "test_split": test_split,
        },
        indices=deterministic_split(n_points, val_split=val_split, test_split=test_split, seed=seed),
    )


@register_dataset("blobs")
def make_blobs(
    n_samples: int = 150,
    d_in: int = 2,
    num_classes: int = 3,
    spread: float = 0.5,
    seed: int = 0,
    val_split: float = 0.1,
    test_split: float = 0.2,
    **_: object,
) -> DatasetSpec:
    """Gaussian clusters around random centres with one-hot targets."""

    rng = np.random.default_rng(seed)
    centres = rng.uniform(-2.0, 2.0, size=(num_classes, d_in))
    labels = rng.integers(0, num_classes, size=n_samples)
    inputs = centres[labels] + spread * rng.standard_normal(size=(n_samples, d_in))
    return DatasetSpec(
        name="blobs",
        inputs=inputs,
        targets=one_hot(labels, num_classes),
        data_spec=DataSpec(d_in=d_in, d_out=num_classes, task_type="multiclass", num_classes=num_classes),
        provenance={
            "type": "blobs",
            "n_samples": n_samples,
            "num_classes": num_classes,
            "spread": spread,
            "seed": seed,
            "val_split": val_split,
            "test_split": test_split,
        },
        indices=deterministic_split(n_samples, val_split=val_split, test_split=test_split, seed=seed),
    )


__all__ = ["make_blobs", "make_sine", "make_xor"]
