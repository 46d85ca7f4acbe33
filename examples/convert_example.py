#!/usr/bin/env python3
"""Convert the sample PHP configuration tree and print the results."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

from conf2json import Converter
from conf2json.api import render_file

HERE = Path(__file__).resolve().parent


def example_directory_tree(output_dir: Path) -> None:
    """Mirror ``config/`` into ``output_dir`` with progress output."""
    print("\n" + "=" * 60)
    print("Example 1: directory tree")
    print("=" * 60)

    result = Converter(HERE / "config", output_dir, verbose=True).run()
    for converted in result.files:
        data = json.loads(converted.destination.read_text(encoding="utf-8"))
        print(f"{converted.relative_path}: {sorted(data)}")


def example_single_file() -> None:
    """Render one file as compact JSON without writing anything."""
    print("\n" + "=" * 60)
    print("Example 2: single file")
    print("=" * 60)

    print(render_file(HERE / "config" / "services" / "database.php", pretty=False))


if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as tmp:
        example_directory_tree(Path(tmp))
    example_single_file()
