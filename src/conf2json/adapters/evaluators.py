"""Source evaluators for configuration scripts."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from conf2json.evaluation.interpreter import DEFAULT_MAX_INCLUDE_DEPTH, Interpreter
from conf2json.evaluation.values import to_structured
from conf2json.types import StructuredValue

logger = logging.getLogger(__name__)


class PhpSourceEvaluator:
    """Evaluate PHP configuration files with the restricted interpreter.

    Parameters
    ----------
    environ : Mapping[str, str] | None, default=None
        Environment exposed to ``getenv()``/``env()``. Defaults to the process
        environment.
    max_include_depth : int, default=32
        Maximum ``require``/``include`` nesting.
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
    ) -> None:
        self._interpreter = Interpreter(
            environ=environ, max_include_depth=max_include_depth
        )

    def evaluate(self, source_path: Path) -> StructuredValue:
        """Evaluate ``source_path`` and convert the result to JSON types.

        Raises
        ------
        EvaluationError
            If the script cannot be evaluated or returns nothing.
        """
        logger.debug("evaluating %s", source_path)
        return to_structured(self._interpreter.evaluate_file(source_path))
