"""Reporting utilities for ffnets runs."""

from .artifacts import git_sha, write_manifest
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import write_summary

__all__ = ["CsvSink", "JsonlSink", "PlotAdapter", "git_sha", "write_manifest", "write_summary"]
