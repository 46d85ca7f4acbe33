"""Top-level API for PHP configuration to JSON conversion."""

from __future__ import annotations

from pathlib import Path

from conf2json.application.results import ConversionResult
from conf2json.errors import (
    ConversionError,
    ConversionIOError,
    EvaluationError,
    PathError,
)

__version__ = "1.0.0"


def convert(
    input_path: Path | str | None = None,
    output_path: Path | str | None = None,
    pretty: bool = True,
    recursive: bool = True,
    verbose: bool = False,
) -> ConversionResult:
    """Convert PHP configuration files to JSON.

    Parameters
    ----------
    input_path : Path | str | None, default=None
        PHP file or directory to convert. Defaults to the current directory.
    output_path : Path | str | None, default=None
        Destination directory. Defaults to the current directory.
    pretty : bool, default=True
        Tab-indent the JSON output.
    recursive : bool, default=True
        Convert files in subdirectories of a directory input.
    verbose : bool, default=False
        Print progress and a completion summary.

    Returns
    -------
    ConversionResult
        Files written and elapsed time.
    """
    from .api import convert_to_json as _impl

    return _impl(
        input_path=input_path,
        output_path=output_path,
        pretty=pretty,
        recursive=recursive,
        verbose=verbose,
    )


def __getattr__(name: str) -> object:
    if name == "Converter":
        from .converter.core import Converter

        return Converter
    raise AttributeError(f"module 'conf2json' has no attribute {name!r}")


__all__ = [
    "Converter",
    "ConversionError",
    "ConversionIOError",
    "ConversionResult",
    "EvaluationError",
    "PathError",
    "convert",
]
