"""Public file-based conversion API (delegates to application use-cases)."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from conf2json.application.results import ConversionResult
from conf2json.converter.core import Converter
from conf2json.evaluation import evaluate_php_file
from conf2json.infrastructure.serialization import encode_json
from conf2json.types import StructuredValue


def convert_to_json(
    input_path: Optional[Path | str] = None,
    output_path: Optional[Path | str] = None,
    pretty: bool = True,
    recursive: bool = True,
    verbose: bool = False,
) -> ConversionResult:
    """Convert a PHP file or directory tree into JSON files."""
    converter = Converter(
        input=input_path,
        output=output_path,
        pretty=pretty,
        recursive=recursive,
        verbose=verbose,
    )
    return converter.run()


def evaluate_file(
    source_path: Path, environ: Optional[Mapping[str, str]] = None
) -> StructuredValue:
    """Evaluate one PHP configuration file into JSON-compatible data."""
    return evaluate_php_file(source_path, environ=environ)


def render_file(source_path: Path, pretty: bool = True) -> str:
    """Evaluate one PHP configuration file and return its JSON text."""
    value = evaluate_file(source_path)
    return encode_json(value, pretty=pretty, source=source_path)
