"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from conf2json.types import StructuredValue


class SourceEvaluator(Protocol):
    """Evaluate a configuration script into a structured value."""

    def evaluate(self, source_path: Path) -> StructuredValue:
        """Return the value produced by ``source_path``."""


class ProgressReporter(Protocol):
    """Receive progress events emitted during a conversion run."""

    def file_converted(self, current: int, total: int, relative_path: str) -> None:
        """Report that file ``current`` of ``total`` was written."""

    def nothing_to_convert(self) -> None:
        """Report that enumeration produced no files."""

    def finished(self, total: int, elapsed_ms: float) -> None:
        """Report the end of a run."""
