"""Configuration-driven training runs.

A run config is a mapping with three sections::

    {
        "data": {"name": "xor", "options": {}},
        "model": {"hidden": [4], "activator": "sigmoid", "output_activator": "sigmoid"},
        "train": {"epochs": 500, "lr": 1.0, "error": "auto", "seed": 7},
    }

:func:`run_pipeline` builds the network, trains it online one sample at a
time, reports the mean error per epoch and split, and saves the trained
network next to the metrics.
"""

from __future__ import annotations

import json
import logging
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np

from ..core.activations import Activator
from ..core.network import Network
from ..core.types import Batch, RunResult
from ..data import get_dataset
from ..data.registry import DataSpec
from ..errors import ConfigurationError
from ..persistence.file_format import write_network
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import NetworkTrainer

logger = logging.getLogger(__name__)

NETWORK_FILE = "network.ann"
SPLITS = ("train", "val", "test")

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-sigmoid": {
        "data": {"name": "xor", "options": {}},
        "model": {"hidden": [4], "activator": "sigmoid", "output_activator": "sigmoid"},
        "train": {
            "epochs": 500,
            "lr": 1.0,
            "error": "auto",
            "seed": 7,
            "shuffle": True,
            "run_dir": "runs/xor-sigmoid",
            "enable_plots": False,
        },
    },
    "sine-tanh": {
        "data": {"name": "sine", "options": {"freq": 1, "n_points": 128, "seed": 0}},
        "model": {"hidden": [16], "activator": "tanh", "output_activator": "identity"},
        "train": {
            "epochs": 40,
            "lr": 0.05,
            "error": "half_squared_difference",
            "seed": 3,
            "shuffle": True,
            "run_dir": "runs/sine-tanh",
            "enable_plots": False,
        },
    },
    "blobs-softmax": {
        "data": {"name": "blobs", "options": {"n_samples": 150, "num_classes": 3, "seed": 0}},
        "model": {"hidden": [8], "activator": "rectifier", "output_activator": "softmax"},
        "train": {
            "epochs": 20,
            "lr": 0.05,
            "error": "auto",
            "seed": 11,
            "shuffle": True,
            "run_dir": "runs/blobs-softmax",
            "enable_plots": False,
        },
    },
}


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Mapping[str, object]:
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        available = ", ".join(sorted(_PRESETS))
        raise ConfigurationError(f"Unknown preset {name!r}. Available presets: {available}") from exc


def load_config(path: str | Path) -> Dict[str, object]:
    """Read a JSON or YAML config file into a plain dict."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - declared dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ConfigurationError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Config {path.name} must decode to a mapping")
    return dict(data)


def merge_config(base: Mapping[str, object], override: Mapping[str, object]) -> Dict[str, object]:
    """Return ``base`` with ``override`` merged in, recursing into mappings."""

    merged = deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)  # type: ignore[arg-type]
        else:
            merged[key] = deepcopy(value)
    return merged


def build_network(model_cfg: Mapping[str, object], data_spec: DataSpec, seed: int) -> Network:
    """Build the network described by the ``model`` section for ``data_spec``."""

    d_in = int(model_cfg.get("d_in", data_spec.d_in))
    d_out = int(model_cfg.get("d_out", data_spec.d_out))
    if d_in != data_spec.d_in:
        raise ConfigurationError(f"Configured d_in={d_in} but the dataset has {data_spec.d_in}")
    if d_out != data_spec.d_out:
        raise ConfigurationError(f"Configured d_out={d_out} but the dataset has {data_spec.d_out}")

    hidden_activator = Activator.resolve(str(model_cfg.get("activator", "sigmoid")))
    default_output = "softmax" if data_spec.task_type == "multiclass" else "sigmoid"
    output_activator = Activator.resolve(str(model_cfg.get("output_activator", default_output)))

    builder = Network.builder(d_in, dtype=str(model_cfg.get("dtype", "float64")), seed=seed)
    for width in _build_hidden(model_cfg):
        builder.layer(width, hidden_activator)
    builder.layer(d_out, output_activator)
    return builder.get()


def configure_trainer(network: Network, train_cfg: Mapping[str, object]) -> NetworkTrainer:
    trainer = network.new_trainer()
    trainer.rate(float(train_cfg.get("lr", 0.1)))
    trainer.error(str(train_cfg.get("error", "auto")))
    if train_cfg.get("lasso"):
        trainer.lasso(float(train_cfg["lasso"]))  # type: ignore[arg-type]
    if train_cfg.get("ridge"):
        trainer.ridge(float(train_cfg["ridge"]))  # type: ignore[arg-type]
    if train_cfg.get("dropouts"):
        trainer.dropouts()
    return trainer


def evaluate(trainer: NetworkTrainer, batch: Batch, task_type: str) -> Dict[str, float]:
    """Return the mean error (and accuracy for classification) over ``batch``."""

    invoker = trainer.network.new_invoker()
    total = 0.0
    correct = 0
    for input, target in zip(batch.inputs, batch.targets):
        output = invoker.invoke(input)
        total += trainer.error_value(target, output)
        if task_type == "multiclass":
            correct += int(np.argmax(output) == np.argmax(target))
        elif task_type == "binary":
            correct += int(np.array_equal(output >= 0.5, target >= 0.5))
    count = max(1, len(batch))
    metrics = {"error": total / count}
    if task_type in {"multiclass", "binary"}:
        metrics["accuracy"] = correct / count
    return metrics


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    data_cfg, model_cfg, train_cfg = _sections(config)

    dataset = get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options") or {}))
    data_spec = dataset.data_spec
    seed = int(train_cfg.get("seed", 0))
    epochs = int(train_cfg.get("epochs", 1))
    shuffle = bool(train_cfg.get("shuffle", True))
    if epochs < 1:
        raise ConfigurationError(f"epochs must be at least 1, got {epochs}")

    network = build_network(model_cfg, data_spec, seed)
    trainer = configure_trainer(network, train_cfg)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        structure=[tuple(s) for s in network.structure()],
        activators=[network.get_activator(k).name for k in range(network.depth())],
        error=trainer.configuration.error.name,
        learning_rate=trainer.configuration.learning_rate,
        dropouts=network.dropouts,
        param_count=sum(rows * columns + columns for rows, columns in network.structure()),
    )

    batches = {split: dataset.split(split) for split in SPLITS}
    jsonl = {split: JsonlSink(run_dir / f"metrics_{split}.jsonl", split=split, seed=seed) for split in SPLITS}
    csv = {split: CsvSink(run_dir / f"metrics_{split}.csv", split=split) for split in SPLITS}
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    sinks = {split: [jsonl[split], csv[split], plots.sink(split)] for split in SPLITS}

    order_rng = np.random.default_rng(seed + 1)
    train = batches["train"]
    steps = 0
    last: Dict[str, Mapping[str, float]] = {}
    for epoch in range(1, epochs + 1):
        order = order_rng.permutation(len(train)) if shuffle else np.arange(len(train))
        steps += trainer.train_all(train.inputs[order], train.targets[order])
        if epoch == epochs and network.dropouts:
            trainer.dropouts(False)
        for split in SPLITS:
            if len(batches[split]) == 0:
                continue
            metrics = evaluate(trainer, batches[split], data_spec.task_type)
            last[split] = metrics
            for sink in sinks[split]:
                sink(epoch, metrics)
        logger.debug("Epoch %d: %s", epoch, last.get("train"))

    plots.close()
    network_path = run_dir / NETWORK_FILE
    write_network(network, network_path)
    (run_dir / "metrics_test.json").write_text(json.dumps(last.get("test", {}), indent=2))

    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        structure=network.structure(),
        activators=[network.get_activator(k).name for k in range(network.depth())],
        network_path=network_path,
    )
    summary_path = write_summary(
        jsonl["train"].path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 32))
    )
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    logger.info("Finished %d epochs (%d steps) in %s", epochs, steps, run_dir)
    return RunResult(
        epochs=epochs,
        steps=steps,
        metrics_path=str(jsonl["train"].path),
        manifest_path=manifest,
        summary_path=summary_path,
        network_path=str(network_path),
    )


def _sections(config: Mapping[str, object]) -> tuple[Mapping, Mapping, Mapping]:
    missing = {"data", "model", "train"} - set(config)
    if missing:
        raise ConfigurationError(f"Config is missing required sections: {', '.join(sorted(missing))}")
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    if "name" not in data_cfg:
        raise ConfigurationError("The data section requires a dataset 'name'")
    return data_cfg, dict(config["model"]), dict(config["train"])  # type: ignore[arg-type]


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _build_hidden(config: Mapping[str, object]) -> List[int]:
    if "hidden" in config:
        return [int(width) for width in config["hidden"]]  # type: ignore[union-attr]
    hidden_dim = int(config.get("hidden_dim", 8))
    depth = int(config.get("depth", 1))
    return [hidden_dim for _ in range(depth)]


def _print_startup_summary(
    *,
    dataset_name: str,
    structure: Sequence[tuple],
    activators: Sequence[str],
    error: str,
    learning_rate: float,
    dropouts: bool,
    param_count: int,
) -> None:
    print("=== ffnets run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Layers        : {list(structure)}")
    print(f"Activators    : {list(activators)}")
    print(f"Error         : {error}")
    print(f"Learning rate : {learning_rate}")
    print(f"Dropouts      : {dropouts}")
    print(f"Parameters    : {param_count}")
    print("==================")


__all__ = [
    "build_network",
    "configure_trainer",
    "evaluate",
    "load_config",
    "load_preset",
    "merge_config",
    "presets",
    "run_pipeline",
]
