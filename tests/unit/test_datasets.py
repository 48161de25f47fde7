import numpy as np
import pytest

from ffnets.data import available_datasets, get_dataset
from ffnets.data.utils import deterministic_split
from ffnets.errors import ConfigurationError


def test_builtin_datasets_are_registered():
    assert {"blobs", "npz", "sine", "xor"} <= set(available_datasets())


def test_xor_uses_all_rows_in_every_split():
    dataset = get_dataset("xor")
    assert dataset.splits == {"train": 4, "val": 4, "test": 4}
    batch = dataset.split("train")
    assert batch.inputs.shape == (4, 2)
    np.testing.assert_array_equal(batch.targets.ravel(), [0.0, 1.0, 1.0, 0.0])


def test_sine_splits_are_disjoint_and_deterministic():
    first = get_dataset("sine", n_points=50, seed=3)
    second = get_dataset("sine", n_points=50, seed=3)
    indices = first.indices
    assert sum(first.splits.values()) == 50
    assert not set(indices.train) & set(indices.test)
    assert not set(indices.val) & set(indices.test)
    np.testing.assert_array_equal(indices.train, second.indices.train)
    np.testing.assert_array_equal(first.targets, second.targets)


def test_blobs_targets_are_one_hot():
    dataset = get_dataset("blobs", n_samples=40, num_classes=4)
    assert dataset.data_spec.d_out == 4
    assert dataset.data_spec.task_type == "multiclass"
    np.testing.assert_array_equal(dataset.targets.sum(axis=1), np.ones(40))


def test_npz_dataset_reads_arrays(tmp_path):
    path = tmp_path / "data.npz"
    np.savez(path, inputs=np.arange(20.0).reshape(10, 2), targets=np.arange(10.0))
    dataset = get_dataset("npz", path=path)
    assert dataset.data_spec.d_in == 2
    assert dataset.data_spec.d_out == 1
    assert dataset.provenance["path"] == str(path)


def test_npz_dataset_requires_path_and_arrays(tmp_path):
    with pytest.raises(ConfigurationError):
        get_dataset("npz")
    path = tmp_path / "partial.npz"
    np.savez(path, inputs=np.zeros((3, 1)))
    with pytest.raises(ConfigurationError):
        get_dataset("npz", path=path)


def test_unknown_dataset_and_split():
    with pytest.raises(ConfigurationError):
        get_dataset("mnist")
    with pytest.raises(ValueError):
        get_dataset("xor").split("holdout")


def test_split_ratios_are_validated():
    with pytest.raises(ValueError):
        deterministic_split(10, val_split=0.5, test_split=0.5)
