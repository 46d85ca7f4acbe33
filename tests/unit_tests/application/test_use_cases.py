"""Unit tests for the conversion use-cases with fake ports."""

from __future__ import annotations

from pathlib import Path

import pytest

from conf2json.application.options import EnumerationOptions, SerializationOptions
from conf2json.application.results import ResolvedPaths
from conf2json.application.use_cases import (
    build_conversion_config,
    convert_sources,
    derive_destination,
    enumerate_sources,
    resolve_paths,
)
from conf2json.errors import ConversionIOError, EvaluationError, PathError


class FakeEvaluator:
    """Return the source's stem instead of running PHP."""

    def __init__(self, failing: str | None = None) -> None:
        self.failing = failing
        self.seen: list[Path] = []

    def evaluate(self, source_path: Path) -> object:
        self.seen.append(source_path)
        if source_path.name == self.failing:
            raise EvaluationError("boom", source=source_path)
        return {"name": source_path.stem, "path": "a/b"}


class RecordingReporter:
    def __init__(self) -> None:
        self.events: list[tuple[object, ...]] = []

    def file_converted(self, current: int, total: int, relative_path: str) -> None:
        self.events.append(("file", current, total, relative_path))

    def nothing_to_convert(self) -> None:
        self.events.append(("empty",))

    def finished(self, total: int, elapsed_ms: float) -> None:
        self.events.append(("done", total, elapsed_ms >= 0))


def _touch(root: Path, *names: str) -> None:
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("<?php return [];", encoding="utf-8")


def _resolve(input_path: Path, output_path: Path) -> ResolvedPaths:
    return resolve_paths(
        build_conversion_config(input_path=input_path, output_path=output_path)
    )


def test_resolve_paths_rejects_missing_input(tmp_path: Path) -> None:
    with pytest.raises(PathError, match="does not exist or it is inaccessible"):
        _resolve(tmp_path / "missing", tmp_path / "out")
    assert not (tmp_path / "out").exists()


def test_resolve_paths_creates_output_with_parents(tmp_path: Path) -> None:
    _touch(tmp_path, "in/app.php")
    paths = _resolve(tmp_path / "in", tmp_path / "out" / "deep")
    assert paths.output_root == (tmp_path / "out" / "deep").resolve()
    assert paths.output_root.is_dir()
    assert paths.kind == "directory"


def test_resolve_paths_detects_file_input(tmp_path: Path) -> None:
    _touch(tmp_path, "app.php")
    paths = _resolve(tmp_path / "app.php", tmp_path)
    assert paths.kind == "file"
    assert paths.input_root == (tmp_path / "app.php").resolve()


def test_resolve_paths_rejects_file_as_output(tmp_path: Path) -> None:
    _touch(tmp_path, "app.php", "taken.php")
    with pytest.raises(ConversionIOError, match="not a directory"):
        _resolve(tmp_path / "app.php", tmp_path / "taken.php")


def test_enumerate_sources_recursion_filter_and_order(tmp_path: Path) -> None:
    _touch(
        tmp_path,
        "in/b.php",
        "in/a.php",
        "in/notes.txt",
        "in/sub/c.php",
        "in/.hidden/d.php",
        "in/.e.php",
    )
    paths = _resolve(tmp_path / "in", tmp_path / "out")
    root = paths.input_root

    recursive = enumerate_sources(paths)
    assert [p.relative_to(root).as_posix() for p in recursive] == [
        "a.php",
        "b.php",
        "sub/c.php",
    ]

    flat = enumerate_sources(paths, EnumerationOptions(recursive=False))
    assert [p.name for p in flat] == ["a.php", "b.php"]


def test_enumerate_sources_skips_symlinked_directories(tmp_path: Path) -> None:
    _touch(tmp_path, "in/a.php", "elsewhere/x.php")
    (tmp_path / "in" / "linked").symlink_to(tmp_path / "elsewhere", target_is_directory=True)
    paths = _resolve(tmp_path / "in", tmp_path / "out")
    assert [p.name for p in enumerate_sources(paths)] == ["a.php"]


def test_derive_destination(tmp_path: Path) -> None:
    _touch(tmp_path, "in/sub/db.php")
    tree = _resolve(tmp_path / "in", tmp_path / "out")
    source = tree.input_root / "sub" / "db.php"
    assert derive_destination(source, tree) == (
        tree.output_root / "sub" / "db.json",
        "sub/db.php",
    )

    single = _resolve(source, tmp_path / "single")
    assert derive_destination(single.input_root, single) == (
        single.output_root / "db.json",
        "db.json",
    )


def test_convert_sources_writes_mirrored_tree(tmp_path: Path) -> None:
    _touch(tmp_path, "in/a.php", "in/sub/b.php")
    paths = _resolve(tmp_path / "in", tmp_path / "out")
    reporter = RecordingReporter()

    result = convert_sources(
        paths,
        serialization=SerializationOptions(pretty=False),
        evaluator=FakeEvaluator(),
        reporter=reporter,
    )

    assert result.count == 2
    assert [f.relative_path for f in result.files] == ["a.php", "sub/b.php"]
    assert (paths.output_root / "sub" / "b.json").read_text(encoding="utf-8") == (
        '{"name":"b","path":"a\\/b"}'
    )
    assert reporter.events == [
        ("file", 1, 2, "a.php"),
        ("file", 2, 2, "sub/b.php"),
        ("done", 2, True),
    ]


def test_convert_sources_reports_nothing_to_convert(tmp_path: Path) -> None:
    (tmp_path / "in").mkdir()
    paths = _resolve(tmp_path / "in", tmp_path / "out")
    reporter = RecordingReporter()

    result = convert_sources(paths, evaluator=FakeEvaluator(), reporter=reporter)

    assert result.count == 0
    assert reporter.events == [("empty",)]
    assert list(paths.output_root.iterdir()) == []


def test_convert_sources_stops_at_first_failure(tmp_path: Path) -> None:
    _touch(tmp_path, "in/a.php", "in/b.php", "in/c.php")
    paths = _resolve(tmp_path / "in", tmp_path / "out")
    evaluator = FakeEvaluator(failing="b.php")

    with pytest.raises(EvaluationError, match="boom"):
        convert_sources(paths, evaluator=evaluator)

    assert [p.name for p in evaluator.seen] == ["a.php", "b.php"]
    assert (paths.output_root / "a.json").exists()
    assert not (paths.output_root / "c.json").exists()


def test_convert_sources_write_failure_keeps_earlier_outputs(tmp_path: Path) -> None:
    _touch(tmp_path, "in/a.php", "in/b.php", "in/c.php")
    paths = _resolve(tmp_path / "in", tmp_path / "out")
    (paths.output_root / "b.json").mkdir()

    with pytest.raises(ConversionIOError, match="Cannot write") as info:
        convert_sources(paths, evaluator=FakeEvaluator())

    assert isinstance(info.value.__cause__, OSError)
    assert (paths.output_root / "a.json").is_file()
    assert not (paths.output_root / "c.json").exists()


def test_convert_sources_directory_failure_is_an_io_error(tmp_path: Path) -> None:
    _touch(tmp_path, "in/a.php", "in/sub/b.php")
    paths = _resolve(tmp_path / "in", tmp_path / "out")
    (paths.output_root / "sub").write_text("not a directory", encoding="utf-8")

    with pytest.raises(ConversionIOError, match="Cannot create directory"):
        convert_sources(paths, evaluator=FakeEvaluator())

    assert (paths.output_root / "a.json").is_file()
