"""Progress reporter implementations."""

from __future__ import annotations

import sys
from typing import TextIO


class SilentReporter:
    """Reporter used when verbose output is disabled."""

    def file_converted(self, current: int, total: int, relative_path: str) -> None:
        del current, total, relative_path

    def nothing_to_convert(self) -> None:
        return None

    def finished(self, total: int, elapsed_ms: float) -> None:
        del total, elapsed_ms


class ConsoleReporter:
    """Write progress lines to stdout and diagnostics to stderr.

    Parameters
    ----------
    stdout : TextIO | None, default=None
        Stream for progress and summary lines (``sys.stdout`` when omitted).
    stderr : TextIO | None, default=None
        Stream for the nothing-to-convert diagnostic (``sys.stderr`` when
        omitted).
    """

    def __init__(
        self, stdout: TextIO | None = None, stderr: TextIO | None = None
    ) -> None:
        self._stdout = stdout
        self._stderr = stderr

    @property
    def stdout(self) -> TextIO:
        return self._stdout or sys.stdout

    @property
    def stderr(self) -> TextIO:
        return self._stderr or sys.stderr

    def file_converted(self, current: int, total: int, relative_path: str) -> None:
        """Print ``[current/total] relative-path``."""
        print(f"[{current}/{total}] {relative_path}", file=self.stdout, flush=True)

    def nothing_to_convert(self) -> None:
        """Print the empty-input diagnostic."""
        print("No files to be converted.", file=self.stderr, flush=True)

    def finished(self, total: int, elapsed_ms: float) -> None:
        """Print the completion summary."""
        noun = "file" if total == 1 else "files"
        print(
            f"\nDone! {total} {noun} converted in {elapsed_ms:f} milliseconds.",
            file=self.stdout,
            flush=True,
        )


def reporter_for(verbose: bool) -> ConsoleReporter | SilentReporter:
    """Return the reporter matching the verbose flag."""
    return ConsoleReporter() if verbose else SilentReporter()
