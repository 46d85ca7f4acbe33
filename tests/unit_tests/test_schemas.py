"""Unit tests for conversion config validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from conf2json.application.use_cases import build_conversion_config
from conf2json.errors import ConversionError
from conf2json.schemas import ConversionConfig


def test_defaults() -> None:
    config = ConversionConfig()
    assert config.input_path == Path.cwd()
    assert config.output_path == Path.cwd()
    assert (config.pretty, config.recursive, config.verbose) == (True, True, False)


def test_none_selects_defaults() -> None:
    config = ConversionConfig(
        input_path=None, output_path=None, pretty=None, recursive=None, verbose=None
    )
    assert config == ConversionConfig()


def test_loose_boolean_spellings() -> None:
    config = ConversionConfig(pretty="no", recursive="0", verbose="yes")
    assert (config.pretty, config.recursive, config.verbose) == (False, False, True)


def test_string_paths_are_coerced() -> None:
    assert ConversionConfig(input_path="conf").input_path == Path("conf")


def test_config_is_frozen_and_strict() -> None:
    config = ConversionConfig()
    with pytest.raises(ValidationError):
        config.pretty = False  # type: ignore[misc]
    with pytest.raises(ValidationError):
        ConversionConfig(indent=2)  # type: ignore[call-arg]


def test_build_conversion_config_wraps_validation_errors() -> None:
    with pytest.raises(ConversionError, match="Invalid conversion parameters"):
        build_conversion_config(input_path="  ")
    with pytest.raises(ConversionError):
        build_conversion_config(pretty="sometimes")
