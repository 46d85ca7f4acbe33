"""The converter object: resolve paths once, convert on each run."""

from __future__ import annotations

from pathlib import Path

from conf2json.application import (
    ConversionResult,
    EnumerationOptions,
    ProgressReporter,
    ResolvedPaths,
    SerializationOptions,
    SourceEvaluator,
    build_conversion_config,
    convert_sources,
    resolve_paths,
)
from conf2json.infrastructure.reporting import reporter_for
from conf2json.schemas import ConversionConfig


class Converter:
    """Convert PHP configuration files to JSON.

    Parameters
    ----------
    input : Path | str | None, default=None
        File or directory holding the files to convert (current directory
        when omitted).
    output : Path | str | None, default=None
        Directory where JSON files are written (current directory when
        omitted). Created with any missing parents.
    pretty : bool | None, default=None
        Tab-indent the JSON output (``True`` when omitted).
    recursive : bool | None, default=None
        Descend into subdirectories of a directory input (``True`` when
        omitted).
    verbose : bool | None, default=None
        Print progress to stdout and diagnostics to stderr (``False`` when
        omitted).
    evaluator : SourceEvaluator | None, default=None
        Override the PHP evaluator.
    reporter : ProgressReporter | None, default=None
        Override the progress reporter chosen from ``verbose``.

    Raises
    ------
    PathError
        If ``input`` does not exist.
    ConversionIOError
        If the output directory cannot be created.
    """

    def __init__(
        self,
        input: Path | str | None = None,
        output: Path | str | None = None,
        pretty: bool | str | None = None,
        recursive: bool | str | None = None,
        verbose: bool | str | None = None,
        *,
        evaluator: SourceEvaluator | None = None,
        reporter: ProgressReporter | None = None,
    ) -> None:
        self.config: ConversionConfig = build_conversion_config(
            input_path=input,
            output_path=output,
            pretty=pretty,
            recursive=recursive,
            verbose=verbose,
        )
        self.paths: ResolvedPaths = resolve_paths(self.config)
        self._evaluator = evaluator
        self._reporter = reporter or reporter_for(self.config.verbose)

    @property
    def input(self) -> Path:
        return self.paths.input_root

    @property
    def output(self) -> Path:
        return self.paths.output_root

    def run(self) -> ConversionResult:
        """Perform one conversion pass.

        Returns
        -------
        ConversionResult
            Files written and elapsed time; empty when nothing matched.
        """
        return convert_sources(
            self.paths,
            enumeration=EnumerationOptions(recursive=self.config.recursive),
            serialization=SerializationOptions(pretty=self.config.pretty),
            evaluator=self._evaluator,
            reporter=self._reporter,
        )
