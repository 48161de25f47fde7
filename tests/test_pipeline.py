from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from ffnets import ConfigurationError, Network
from ffnets.data import get_dataset
from ffnets.training import pipelines


def _preset(name, tmp_path, **train):
    config = pipelines.load_preset(name)
    config["train"]["run_dir"] = str(tmp_path / name)
    config["train"].update(train)
    return config


def test_pipeline_writes_all_artifacts(tmp_path):
    result = pipelines.run_pipeline(_preset("xor-sigmoid", tmp_path, epochs=10))
    run_dir = tmp_path / "xor-sigmoid"
    assert result.steps == 40
    for name in (
        "metrics_train.jsonl",
        "metrics_val.csv",
        "metrics_test.json",
        "manifest.json",
        "summary.json",
        "config.json",
        "network.ann",
    ):
        assert (run_dir / name).exists(), name

    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert [r["epoch"] for r in records] == list(range(1, 11))
    assert {"error", "accuracy"} <= set(records[0])

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["network"]["structure"] == [[2, 4], [4, 1]]
    assert manifest["network"]["activators"] == ["SIGMOID", "SIGMOID"]


def test_xor_training_learns(tmp_path):
    result = pipelines.run_pipeline(_preset("xor-sigmoid", tmp_path, epochs=2000))
    summary = json.loads(Path(result.summary_path).read_text())
    error = summary["metrics"]["error"]
    assert error["last"] < error["first"]

    network = Network.read_from(result.network_path)
    invoker = network.new_invoker()
    dataset = get_dataset("xor")
    outputs = np.array([invoker.invoke(x).copy() for x in dataset.inputs])
    assert np.mean(np.abs(outputs - dataset.targets)) < 0.5


def test_softmax_preset_reports_accuracy(tmp_path):
    result = pipelines.run_pipeline(_preset("blobs-softmax", tmp_path, epochs=5))
    metrics = json.loads((tmp_path / "blobs-softmax" / "metrics_test.json").read_text())
    assert 0.0 <= metrics["accuracy"] <= 1.0
    assert Network.read_from(result.network_path).count_output_nodes() == 3


def test_float32_model_is_saved_as_float32(tmp_path):
    config = _preset("sine-tanh", tmp_path, epochs=2)
    config["model"]["dtype"] = "float32"
    result = pipelines.run_pipeline(config)
    assert Network.read_from(result.network_path).dtype == np.float32


def test_invalid_configs_are_rejected(tmp_path):
    with pytest.raises(ConfigurationError):
        pipelines.load_preset("missing")
    with pytest.raises(ConfigurationError):
        pipelines.run_pipeline({"data": {"name": "xor"}, "model": {}})
    config = _preset("xor-sigmoid", tmp_path)
    config["model"]["d_out"] = 3
    with pytest.raises(ConfigurationError):
        pipelines.run_pipeline(config)
    config = _preset("xor-sigmoid", tmp_path, epochs=0)
    with pytest.raises(ConfigurationError):
        pipelines.run_pipeline(config)


def test_config_files_and_merging(tmp_path):
    yaml_path = tmp_path / "cfg.yaml"
    yaml_path.write_text("train:\n  epochs: 3\n")
    json_path = tmp_path / "cfg.json"
    json_path.write_text('{"model": {"hidden": [2]}}')
    merged = pipelines.merge_config(pipelines.load_preset("xor-sigmoid"), pipelines.load_config(yaml_path))
    merged = pipelines.merge_config(merged, pipelines.load_config(json_path))
    assert merged["train"]["epochs"] == 3
    assert merged["train"]["lr"] == 1.0
    assert merged["model"]["hidden"] == [2]
    toml_path = tmp_path / "cfg.toml"
    toml_path.write_text("[train]\nepochs = 3\n")
    with pytest.raises(ConfigurationError):
        pipelines.load_config(toml_path)
