"""Application use-cases orchestrating PHP-to-JSON conversion."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from conf2json.adapters.evaluators import PhpSourceEvaluator
from conf2json.application.options import EnumerationOptions, SerializationOptions
from conf2json.application.ports import ProgressReporter, SourceEvaluator
from conf2json.application.results import (
    ConversionResult,
    ConvertedFile,
    ResolvedPaths,
)
from conf2json.errors import ConversionError, ConversionIOError, PathError
from conf2json.infrastructure.reporting import SilentReporter
from conf2json.infrastructure.serialization import encode_json
from conf2json.schemas import ConversionConfig
from conf2json.types import OUTPUT_SUFFIX

logger = logging.getLogger(__name__)

DIRECTORY_MODE = 0o755


def build_conversion_config(
    *,
    input_path: Path | str | None = None,
    output_path: Path | str | None = None,
    pretty: object = None,
    recursive: object = None,
    verbose: object = None,
) -> ConversionConfig:
    """Build a validated run configuration, applying defaults for ``None``."""
    try:
        return ConversionConfig(
            input_path=input_path,
            output_path=output_path,
            pretty=pretty,
            recursive=recursive,
            verbose=verbose,
        )
    except ValidationError as exc:
        raise ConversionError(f"Invalid conversion parameters: {exc}") from exc


def _make_directory(path: Path) -> None:
    try:
        path.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
    except OSError as exc:
        raise ConversionIOError(f"Cannot create directory '{path}': {exc}") from exc


def resolve_paths(config: ConversionConfig) -> ResolvedPaths:
    """Use-case: validate and canonicalize the input and output locations.

    Parameters
    ----------
    config : ConversionConfig
        Run configuration holding the raw paths.

    Returns
    -------
    ResolvedPaths
        Absolute, symlink-resolved roots and the input kind.

    Raises
    ------
    PathError
        If the input path does not exist.
    ConversionIOError
        If the output directory cannot be created or is not a directory.
    """
    input_path = config.input_path.expanduser()
    output_path = config.output_path.expanduser()

    if not input_path.exists():
        raise PathError(
            f"The input file or directory '{input_path}' does not exist "
            "or it is inaccessible."
        )
    if not output_path.exists():
        logger.debug("creating output directory %s", output_path)
        _make_directory(output_path)

    input_root = input_path.resolve(strict=True)
    output_root = output_path.resolve(strict=True)
    if not output_root.is_dir():
        raise ConversionIOError(f"The output path '{output_root}' is not a directory.")

    kind = "file" if input_root.is_file() else "directory"
    logger.debug("resolved %s input %s -> %s", kind, input_root, output_root)
    return ResolvedPaths(input_root=input_root, output_root=output_root, kind=kind)


def _walk(directory: Path, options: EnumerationOptions) -> list[Path]:
    found: list[Path] = []
    for entry in directory.iterdir():
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            if options.recursive and not entry.is_symlink():
                found.extend(_walk(entry, options))
            continue
        if entry.suffix == options.suffix and entry.is_file():
            found.append(entry)
    return found


def enumerate_sources(
    paths: ResolvedPaths, options: EnumerationOptions | None = None
) -> list[Path]:
    """Use-case: list the source files to convert.

    A file input yields itself. A directory input yields matching files
    directly inside it, or at any depth when recursion is enabled, sorted
    by relative path. Hidden entries and symlinked directories are skipped.
    """
    options = options or EnumerationOptions()
    if paths.kind == "file":
        return [paths.input_root]

    root = paths.input_root
    try:
        files = _walk(root, options)
    except OSError as exc:
        raise ConversionIOError(f"Cannot list directory '{root}': {exc}") from exc
    return sorted(files, key=lambda path: path.relative_to(root).as_posix())


def derive_destination(source: Path, paths: ResolvedPaths) -> tuple[Path, str]:
    """Return the output path for ``source`` and its progress label.

    Single-file inputs land directly in the output root and are labelled
    with the output filename; directory inputs mirror their path relative
    to the input root and are labelled with that relative source path.
    """
    if paths.kind == "file":
        destination = paths.output_root / f"{source.stem}{OUTPUT_SUFFIX}"
        return destination, destination.name
    relative = source.relative_to(paths.input_root)
    destination = paths.output_root / relative.with_suffix(OUTPUT_SUFFIX)
    return destination, relative.as_posix()


def transcode_file(
    source: Path,
    *,
    index: int,
    files: Sequence[Path],
    paths: ResolvedPaths,
    evaluator: SourceEvaluator,
    serialization: SerializationOptions,
    reporter: ProgressReporter,
) -> ConvertedFile:
    """Use-case: evaluate one source file and write its JSON artifact."""
    destination, label = derive_destination(source, paths)
    _make_directory(destination.parent)

    value = evaluator.evaluate(source)
    text = encode_json(value, pretty=serialization.pretty, source=source)

    try:
        destination.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise ConversionIOError(f"Cannot write '{destination}': {exc}") from exc

    logger.debug("wrote %s", destination)
    reporter.file_converted(index + 1, len(files), label)
    return ConvertedFile(source=source, destination=destination, relative_path=label)


def convert_sources(
    paths: ResolvedPaths,
    *,
    enumeration: EnumerationOptions | None = None,
    serialization: SerializationOptions | None = None,
    evaluator: SourceEvaluator | None = None,
    reporter: ProgressReporter | None = None,
) -> ConversionResult:
    """Use-case: perform one full conversion pass over resolved paths."""
    serialization = serialization or SerializationOptions()
    evaluator = evaluator or PhpSourceEvaluator()
    reporter = reporter or SilentReporter()

    start = time.perf_counter()
    files = enumerate_sources(paths, enumeration)
    if not files:
        logger.debug("no source files under %s", paths.input_root)
        reporter.nothing_to_convert()
        return ConversionResult()

    converted = [
        transcode_file(
            source,
            index=index,
            files=files,
            paths=paths,
            evaluator=evaluator,
            serialization=serialization,
            reporter=reporter,
        )
        for index, source in enumerate(files)
    ]
    elapsed_ms = (time.perf_counter() - start) * 1000
    reporter.finished(len(converted), elapsed_ms)
    return ConversionResult(files=tuple(converted), elapsed_ms=elapsed_ms)
