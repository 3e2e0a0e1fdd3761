"""Concurrent source collection."""

from collector.runner import SourceTask, run_sources

__all__ = ["SourceTask", "run_sources"]
