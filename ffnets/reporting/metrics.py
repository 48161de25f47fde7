"""Per-epoch error records written next to a training run."""

from __future__ import annotations

import csv
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Mapping

from .artifacts import git_sha


def _numeric(metrics: Mapping[str, object]) -> Dict[str, float]:
    return {
        name: float(value)  # type: ignore[arg-type]
        for name, value in metrics.items()
        if isinstance(value, (int, float)) and not isinstance(value, bool)
    }


class _EpochSink(ABC):
    """Truncate ``path`` on creation, then append one record per epoch."""

    def __init__(self, path: str | Path, split: str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split

    def tags(self) -> Dict[str, object]:
        return {}

    def record(self, epoch: int, metrics: Mapping[str, object]) -> Dict[str, object]:
        row: Dict[str, object] = {"epoch": int(epoch), "split": self.split, **self.tags()}
        row.update(_numeric(metrics))
        return row

    @abstractmethod
    def on_epoch(self, epoch: int, metrics: Mapping[str, object]) -> None:
        """Append the record for ``epoch``."""

    def __call__(self, epoch: int, metrics: Mapping[str, object]) -> None:
        self.on_epoch(epoch, metrics)


class JsonlSink(_EpochSink):
    """One JSON object per line, tagged with the seed and source revision."""

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "train",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        super().__init__(path, split)
        self.seed = seed
        self.sha = sha or git_sha()

    def tags(self) -> Dict[str, object]:
        return {"seed": self.seed, "sha": self.sha}

    def on_epoch(self, epoch: int, metrics: Mapping[str, object]) -> None:
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(self.record(epoch, metrics)) + "\n")


class CsvSink(_EpochSink):
    """Comma separated rows; the header is taken from the first record."""

    def __init__(self, path: str | Path, *, split: str = "train") -> None:
        super().__init__(path, split)

    def on_epoch(self, epoch: int, metrics: Mapping[str, object]) -> None:
        row = self.record(epoch, metrics)
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=sorted(row))
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)


__all__ = ["CsvSink", "JsonlSink"]
