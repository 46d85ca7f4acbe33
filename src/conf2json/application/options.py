"""Typed option objects shared across conversion use-cases."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EnumerationOptions:
    """Source discovery configuration."""

    recursive: bool = True
    suffix: str = ".php"


@dataclass(frozen=True)
class SerializationOptions:
    """JSON output configuration."""

    pretty: bool = True
