"""Command line entry point for ffnets training runs."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Iterable

from ffnets.persistence import read_network
from ffnets.training import pipelines


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=sorted(pipelines.presets().keys()),
        default="xor-sigmoid",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--seed", type=int, help="Seed used for initialisation and shuffling")
    parser.add_argument("--epochs", type=int, help="Override the number of training epochs")
    parser.add_argument("--run-dir", type=Path, help="Directory receiving the run artifacts")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write a training curve image"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    parser.add_argument(
        "--describe",
        type=Path,
        metavar="NETWORK",
        help="Print the structure of a saved network file and exit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return parser.parse_args(argv)


def _describe(path: Path) -> str:
    network = read_network(path)
    payload = {
        "path": str(path),
        "dtype": network.dtype.name,
        "inputs": network.count_input_nodes(),
        "layers": [
            {
                "inputs": rows,
                "outputs": columns,
                "activator": network.get_activator(layer).name,
            }
            for layer, (rows, columns) in enumerate(network.structure())
        ],
    }
    return json.dumps(payload, sort_keys=True)


def _resolve_config(args: argparse.Namespace) -> Dict[str, object]:
    """Preset, then the config file, then individual flags."""

    config = pipelines.load_preset(args.preset)
    if args.config:
        override = pipelines.load_config(args.config)
        # A file with every section replaces the preset outright.
        complete = {"data", "model", "train"} <= set(override)
        config = override if complete else pipelines.merge_config(config, override)

    flags = {
        "seed": args.seed,
        "epochs": args.epochs,
        "run_dir": str(args.run_dir) if args.run_dir is not None else None,
        "enable_plots": True if args.enable_plots else None,
    }
    train = {key: value for key, value in flags.items() if value is not None}
    return pipelines.merge_config(config, {"train": train})


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    if args.describe:
        print(_describe(args.describe))
        raise SystemExit(0)

    config = _resolve_config(args)
    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)
    print(json.dumps(asdict(result), sort_keys=True))


if __name__ == "__main__":
    main()
