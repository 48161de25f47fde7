import csv
import json

import pytest

from ffnets.reporting.metrics import CsvSink, JsonlSink, _EpochSink
from ffnets.reporting.plots import PlotAdapter
from ffnets.reporting.summary import compute_auc, summarise


def test_compute_auc_uses_trapezoids():
    assert compute_auc([]) == 0.0
    assert compute_auc([1.0]) == 0.0
    assert compute_auc([1.0, 3.0, 3.0]) == pytest.approx(5.0)


def test_summarise_ignores_bookkeeping_fields():
    records = [
        {"epoch": 1, "seed": 3, "split": "train", "error": 0.5},
        {"epoch": 2, "seed": 3, "split": "train", "error": 0.25},
    ]
    summary = summarise(records, tail=8)
    assert set(summary["metrics"]) == {"error"}
    assert summary["metrics"]["error"]["first"] == 0.5
    assert summary["metrics"]["error"]["last"] == 0.25
    assert summary["tail_window"] == 2


def test_sinks_write_one_row_per_epoch(tmp_path):
    jsonl = JsonlSink(tmp_path / "m.jsonl", split="val", seed=1, sha="abc")
    table = CsvSink(tmp_path / "m.csv", split="val")
    for epoch in (1, 2):
        jsonl(epoch, {"error": 1.0 / epoch})
        table(epoch, {"error": 1.0 / epoch})

    records = [json.loads(line) for line in jsonl.path.read_text().splitlines()]
    assert records[1] == {"epoch": 2, "split": "val", "seed": 1, "sha": "abc", "error": 0.5}
    with table.path.open() as handle:
        rows = list(csv.DictReader(handle))
    assert [row["error"] for row in rows] == ["1.0", "0.5"]


def test_plot_adapter_is_a_no_op_when_disabled(tmp_path):
    plots = PlotAdapter(tmp_path / "off")
    plots.sink("train")(1, {"error": 1.0})
    assert plots.close() is None
    assert not (tmp_path / "off").exists()


def test_plot_adapter_writes_png(tmp_path):
    plots = PlotAdapter(tmp_path, enable_plots=True)
    record = plots.sink("train")
    for epoch in range(1, 4):
        record(epoch, {"error": 1.0 / epoch})
    path = plots.close()
    assert path is not None and path.endswith("error.png")
    assert (tmp_path / "error.png").stat().st_size > 0


def test_epoch_sink_requires_on_epoch(tmp_path):
    with pytest.raises(TypeError):
        _EpochSink(tmp_path / "m.txt", "train")

    class CountingSink(_EpochSink):
        def on_epoch(self, epoch, metrics):
            self.last = self.record(epoch, metrics)

    sink = CountingSink(tmp_path / "m.txt", "test")
    sink(3, {"error": 0.5, "flag": True})
    assert sink.last == {"epoch": 3, "split": "test", "error": 0.5}
