"""Application-layer use-cases and option objects."""

from __future__ import annotations

from pathlib import Path

from conf2json.application.options import EnumerationOptions, SerializationOptions
from conf2json.application.ports import ProgressReporter, SourceEvaluator
from conf2json.application.results import (
    ConversionResult,
    ConvertedFile,
    ResolvedPaths,
)
from conf2json.schemas import ConversionConfig


def build_conversion_config(
    *,
    input_path: Path | str | None = None,
    output_path: Path | str | None = None,
    pretty: object = None,
    recursive: object = None,
    verbose: object = None,
) -> ConversionConfig:
    """Build a validated run configuration via lazy use-case import."""
    from conf2json.application.use_cases import build_conversion_config as _impl

    return _impl(
        input_path=input_path,
        output_path=output_path,
        pretty=pretty,
        recursive=recursive,
        verbose=verbose,
    )


def resolve_paths(config: ConversionConfig) -> ResolvedPaths:
    """Resolve run paths via lazy use-case import."""
    from conf2json.application.use_cases import resolve_paths as _impl

    return _impl(config)


def enumerate_sources(
    paths: ResolvedPaths, options: EnumerationOptions | None = None
) -> list[Path]:
    """Enumerate source files via lazy use-case import."""
    from conf2json.application.use_cases import enumerate_sources as _impl

    return _impl(paths, options)


def convert_sources(
    paths: ResolvedPaths,
    *,
    enumeration: EnumerationOptions | None = None,
    serialization: SerializationOptions | None = None,
    evaluator: SourceEvaluator | None = None,
    reporter: ProgressReporter | None = None,
) -> ConversionResult:
    """Run a conversion pass via lazy use-case import."""
    from conf2json.application.use_cases import convert_sources as _impl

    return _impl(
        paths,
        enumeration=enumeration,
        serialization=serialization,
        evaluator=evaluator,
        reporter=reporter,
    )


__all__ = [
    "ConversionConfig",
    "ConversionResult",
    "ConvertedFile",
    "EnumerationOptions",
    "ProgressReporter",
    "ResolvedPaths",
    "SerializationOptions",
    "SourceEvaluator",
    "build_conversion_config",
    "convert_sources",
    "enumerate_sources",
    "resolve_paths",
]
