"""Error taxonomy for PHP-to-JSON conversion."""

from __future__ import annotations

from pathlib import Path


class ConversionError(Exception):
    """Base class for conversion failures surfaced to callers."""

    exit_code = 1


class PathError(ConversionError):
    """Raised when the input file or directory does not exist."""

    exit_code = 2


class EvaluationError(ConversionError):
    """Raised when a source file cannot be evaluated to a structured value.

    Parameters
    ----------
    message : str
        Human-readable failure description.
    source : Path | None, default=None
        Source file being evaluated, when known.
    line : int | None, default=None
        1-based line in ``source`` where the failure was detected.
    """

    exit_code = 3

    def __init__(
        self,
        message: str,
        *,
        source: Path | None = None,
        line: int | None = None,
    ) -> None:
        self.message = message
        self.source = source
        self.line = line
        super().__init__(self._format())

    def _format(self) -> str:
        if self.source is None:
            return self.message
        location = str(self.source)
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.message}"

    def with_source(self, source: Path) -> EvaluationError:
        """Return a copy of this error bound to ``source`` if it has none."""
        if self.source is not None:
            return self
        return EvaluationError(self.message, source=source, line=self.line)


class ConversionIOError(ConversionError):
    """Raised when creating a directory or writing an output file fails."""

    exit_code = 4
