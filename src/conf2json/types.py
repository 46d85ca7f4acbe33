"""Shared type aliases for conversion modules."""

from __future__ import annotations

from typing import Literal

type SourceKind = Literal["file", "directory"]

type StructuredValue = (
    None
    | bool
    | int
    | float
    | str
    | list["StructuredValue"]
    | dict[str, "StructuredValue"]
)

SOURCE_SUFFIX = ".php"
OUTPUT_SUFFIX = ".json"
