"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from conf2json.types import SourceKind


@dataclass(frozen=True)
class ResolvedPaths:
    """Canonical input/output roots for a run."""

    input_root: Path
    output_root: Path
    kind: SourceKind


@dataclass(frozen=True)
class ConvertedFile:
    """One source file and the JSON artifact written for it."""

    source: Path
    destination: Path
    relative_path: str


@dataclass(frozen=True)
class ConversionResult:
    """Structured conversion outcome.

    An empty ``files`` tuple means there was nothing to convert.
    """

    files: tuple[ConvertedFile, ...] = ()
    elapsed_ms: float = 0.0

    @property
    def count(self) -> int:
        """Number of files converted."""
        return len(self.files)
