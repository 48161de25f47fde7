"""Condense a run's per-epoch error records into ``summary.json``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np

#: Record fields that describe the record rather than the network.
BOOKKEEPING = frozenset({"epoch", "seed", "split", "sha"})


def compute_auc(points: Sequence[float]) -> float:
    """Trapezoidal area under ``points``, one unit apart."""

    values = np.asarray(points, dtype=np.float64)
    if values.size < 2:
        return 0.0
    return float(0.5 * np.sum(values[1:] + values[:-1]))


def _series(records: Sequence[Mapping[str, object]]) -> Dict[str, List[float]]:
    series: Dict[str, List[float]] = {}
    for record in records:
        for name, value in record.items():
            if name in BOOKKEEPING or isinstance(value, bool):
                continue
            if isinstance(value, (int, float)):
                series.setdefault(name, []).append(float(value))
    return series


def summarise(records: Sequence[Mapping[str, object]], tail: int) -> Dict[str, object]:
    """Return first/last/min/max/mean and the tail AUC of every metric."""

    window = min(tail, len(records))
    metrics = {}
    for name, values in _series(records).items():
        curve = np.asarray(values)
        metrics[name] = {
            "first": float(curve[0]),
            "last": float(curve[-1]),
            "min": float(curve.min()),
            "max": float(curve.max()),
            "mean": float(curve.mean()),
            "tail_auc": compute_auc(curve[len(curve) - window :] if window else []),
        }
    return {"version": 1, "records": len(records), "tail_window": window, "metrics": metrics}


def write_summary(metrics_jsonl: str | Path, out_summary_json: str | Path, *, tail: int = 32) -> str:
    source = Path(metrics_jsonl)
    records = []
    if source.exists():
        with source.open(encoding="utf-8") as handle:
            records = [json.loads(line) for line in handle if line.strip()]

    target = Path(out_summary_json)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(summarise(records, tail), sort_keys=True, indent=2))
    return str(target)


__all__ = ["compute_auc", "summarise", "write_summary"]
