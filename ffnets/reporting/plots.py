"""Headless-safe plotting of training curves."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Tuple


class PlotAdapter:
    """Collect per-epoch errors and optionally emit a matplotlib figure."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False, metric: str = "error"):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.metric = metric
        self._history: Dict[str, List[Tuple[int, float]]] = {}
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def sink(self, split: str):
        def _record(epoch: int, metrics: Mapping[str, float]) -> None:
            if self.enable_plots and self.metric in metrics:
                self._history.setdefault(split, []).append((epoch, float(metrics[self.metric])))

        return _record

    def close(self) -> str | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        fig, ax = plt.subplots()
        for split, points in sorted(self._history.items()):
            epochs, values = zip(*points)
            ax.plot(epochs, values, label=split)
        ax.set_xlabel("Epoch")
        ax.set_ylabel(f"Mean {self.metric}")
        ax.set_title("Training Curve")
        ax.legend()
        plot_path = self.run_dir / f"{self.metric}.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return str(plot_path)


__all__ = ["PlotAdapter"]
