"""Run manifest: what was trained, on what data, from which revision."""

from __future__ import annotations

import functools
import json
import platform
import subprocess
import time
from pathlib import Path
from typing import Dict, Mapping, Sequence

import numpy as np


@functools.lru_cache(maxsize=None)
def git_sha() -> str:
    """Current ``HEAD`` revision, or ``"unknown"`` outside a git checkout."""

    try:
        out = subprocess.run(
            ["git", "rev-parse", "HEAD"], capture_output=True, check=True, text=True
        )
    except (OSError, subprocess.CalledProcessError):  # pragma: no cover - git may be unavailable
        return "unknown"
    return out.stdout.strip()


def _network_section(
    structure: Sequence[Sequence[int]],
    activators: Sequence[str],
    network_path: str | Path | None,
) -> Dict[str, object]:
    shapes = [[int(rows), int(columns)] for rows, columns in structure]
    return {
        "structure": shapes,
        "activators": list(activators),
        "parameters": sum(rows * columns + columns for rows, columns in shapes),
        "path": None if network_path is None else str(network_path),
    }


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
    structure: Sequence[Sequence[int]],
    activators: Sequence[str],
    network_path: str | Path | None = None,
) -> str:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "git_sha": git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": dict(config),
        "dataset": dict(dataset_provenance),
        "network": _network_section(structure, activators, network_path),
        "environment": {"python": platform.python_version(), "numpy": np.__version__},
    }
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)


__all__ = ["git_sha", "write_manifest"]
