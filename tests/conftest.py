"""Shared pytest configuration, marker assignment and PHP fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

type WritePhp = Callable[[str, str], Path]


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        parts = set(Path(str(item.fspath)).parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def write_php(tmp_path: Path) -> WritePhp:
    """Return a helper writing ``<?php`` + body to a path under ``tmp_path``."""

    def _write(relative: str, body: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"<?php\n{body}\n", encoding="utf-8")
        return path

    return _write
