"""Restricted evaluator for PHP configuration scripts.

Only the declarative subset used by configuration files is understood:
literals, arrays, variables, constants, operators, a whitelist of pure
functions and ``require``/``include``. Anything else raises
:class:`~conf2json.errors.EvaluationError` naming the unsupported construct.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from conf2json.evaluation.interpreter import Interpreter
from conf2json.evaluation.values import PhpArray, to_structured
from conf2json.types import StructuredValue


def evaluate_php_file(
    path: Path, environ: Mapping[str, str] | None = None
) -> StructuredValue:
    """Evaluate a PHP file and return its JSON-compatible value."""
    return to_structured(Interpreter(environ=environ).evaluate_file(path))


def evaluate_php_source(
    source: str,
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> StructuredValue:
    """Evaluate PHP source text; ``path`` sets ``__FILE__``/``__DIR__``."""
    origin = path or Path.cwd() / "stdin.php"
    return to_structured(Interpreter(environ=environ).evaluate_source(source, origin))


__all__ = [
    "Interpreter",
    "PhpArray",
    "evaluate_php_file",
    "evaluate_php_source",
    "to_structured",
]
