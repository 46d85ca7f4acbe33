"""Pydantic schemas for runtime validation of conversion inputs."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConversionConfig(BaseModel):
    """Validated, immutable settings for one conversion run.

    ``None`` for any field selects its default, so callers can forward
    optional values straight through. Flags accept loose boolean spellings
    such as ``"yes"``, ``"on"`` or ``"0"``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    input_path: Path = Field(default_factory=Path.cwd)
    output_path: Path = Field(default_factory=Path.cwd)
    pretty: bool = True
    recursive: bool = True
    verbose: bool = False

    @field_validator("input_path", "output_path", mode="before")
    @classmethod
    def _default_missing_path(cls, value: object) -> object:
        if value is None:
            return Path.cwd()
        if isinstance(value, str) and not value.strip():
            raise ValueError("path cannot be empty.")
        return value

    @field_validator("pretty", "recursive", mode="before")
    @classmethod
    def _default_missing_true(cls, value: object) -> object:
        return True if value is None else value

    @field_validator("verbose", mode="before")
    @classmethod
    def _default_missing_false(cls, value: object) -> object:
        return False if value is None else value
