"""End-to-end tests invoking the installed console script."""

from __future__ import annotations

import subprocess
from pathlib import Path


def test_cli_help_runs() -> None:
    proc = subprocess.run(
        ["conf2json", "--help"], capture_output=True, text=True, check=False
    )
    assert proc.returncode == 0
    assert "Convert PHP configuration files to JSON." in proc.stdout

def test_cli_converts_and_reports_failures(tmp_path: Path) -> None:
    (tmp_path / "in").mkdir()
    (tmp_path / "in" / "app.php").write_text("<?php return ['ok' => true];", encoding="utf-8")

    proc = subprocess.run(
        ["conf2json", "convert", str(tmp_path / "in"), str(tmp_path / "out"), "--compact"],
        capture_output=True,
        text=True,
        check=False,
    )
    assert proc.returncode == 0, proc.stderr
    assert (tmp_path / "out" / "app.json").read_text() == '{"ok":true}'

    missing = subprocess.run(
        ["conf2json", "convert", str(tmp_path / "missing")],
        capture_output=True,
        text=True,
        check=False,
    )
    assert missing.returncode == 2
    assert "does not exist" in missing.stderr
