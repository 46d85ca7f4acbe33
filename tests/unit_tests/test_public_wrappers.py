"""Unit tests for thin public wrapper modules."""

from __future__ import annotations

from pathlib import Path

import pytest

import conf2json
from conf2json import application, evaluation
from conf2json.api import evaluate_file
from conf2json.application import use_cases
from conf2json.application.results import ConversionResult, ResolvedPaths


def test_application_wrappers_forward_to_use_cases(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Forward each lazy application wrapper to its use-case implementation."""
    paths = ResolvedPaths(input_root=tmp_path, output_root=tmp_path, kind="directory")
    called: dict[str, object] = {}

    def fake_build(**kwargs: object) -> str:
        called["build"] = kwargs
        return "config"

    def fake_resolve(config: object) -> ResolvedPaths:
        called["resolve"] = config
        return paths

    def fake_enumerate(resolved: object, options: object) -> list[Path]:
        called["enumerate"] = (resolved, options)
        return [tmp_path / "a.php"]

    def fake_convert(resolved: object, **kwargs: object) -> ConversionResult:
        called["convert"] = (resolved, kwargs)
        return ConversionResult()

    monkeypatch.setattr(use_cases, "build_conversion_config", fake_build)
    monkeypatch.setattr(use_cases, "resolve_paths", fake_resolve)
    monkeypatch.setattr(use_cases, "enumerate_sources", fake_enumerate)
    monkeypatch.setattr(use_cases, "convert_sources", fake_convert)

    assert application.build_conversion_config(input_path="in", pretty=False) == "config"
    assert called["build"] == {
        "input_path": "in",
        "output_path": None,
        "pretty": False,
        "recursive": None,
        "verbose": None,
    }
    assert application.resolve_paths("config") is paths  # type: ignore[arg-type]
    assert application.enumerate_sources(paths) == [tmp_path / "a.php"]
    assert called["enumerate"] == (paths, None)
    assert application.convert_sources(paths).count == 0
    assert called["convert"] == (
        paths,
        {"enumeration": None, "serialization": None, "evaluator": None, "reporter": None},
    )


def test_converter_runs_through_application_wrappers(
    monkeypatch: pytest.MonkeyPatch, write_php, tmp_path: Path
) -> None:
    """Route Converter construction and runs through the application package."""
    write_php("in/a.php", "return 1;")
    seen: list[str] = []
    real_resolve = use_cases.resolve_paths
    real_convert = use_cases.convert_sources

    def spy_resolve(config: object) -> ResolvedPaths:
        seen.append("resolve")
        return real_resolve(config)  # type: ignore[arg-type]

    def spy_convert(resolved: ResolvedPaths, **kwargs: object) -> ConversionResult:
        seen.append("convert")
        return real_convert(resolved, **kwargs)  # type: ignore[arg-type]

    monkeypatch.setattr(use_cases, "resolve_paths", spy_resolve)
    monkeypatch.setattr(use_cases, "convert_sources", spy_convert)

    result = conf2json.Converter(tmp_path / "in", tmp_path / "out").run()

    assert seen == ["resolve", "convert"]
    assert result.count == 1


def test_evaluate_php_file_and_api_evaluate_file_agree(write_php) -> None:
    source = write_php("app.php", "return ['name' => env('APP_NAME', 'x')];")
    environ = {"APP_NAME": "demo"}

    assert evaluation.evaluate_php_file(source, environ=environ) == {"name": "demo"}
    assert evaluate_file(source, environ=environ) == {"name": "demo"}


def test_api_evaluate_file_uses_evaluation_package(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    called: dict[str, object] = {}

    def fake_evaluate(path: Path, environ: object = None) -> list[int]:
        called.update(path=path, environ=environ)
        return [1]

    monkeypatch.setattr("conf2json.api.evaluate_php_file", fake_evaluate)

    assert evaluate_file(tmp_path / "a.php", environ={"A": "1"}) == [1]
    assert called == {"path": tmp_path / "a.php", "environ": {"A": "1"}}


def test_evaluate_php_source_defaults_to_working_directory(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)
    assert evaluation.evaluate_php_source("<?php return __DIR__;") == str(Path.cwd())


def test_top_level_convert_forwards(monkeypatch: pytest.MonkeyPatch) -> None:
    called: dict[str, object] = {}

    def fake_impl(**kwargs: object) -> ConversionResult:
        called.update(kwargs)
        return ConversionResult()

    monkeypatch.setattr("conf2json.api.convert_to_json", fake_impl)

    assert conf2json.convert("in", "out", pretty=False).count == 0
    assert called == {
        "input_path": "in",
        "output_path": "out",
        "pretty": False,
        "recursive": True,
        "verbose": False,
    }
