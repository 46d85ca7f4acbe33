"""JSON encoding with tab-indented pretty printing."""

from __future__ import annotations

import json
import re
from pathlib import Path

from conf2json.errors import EvaluationError
from conf2json.types import StructuredValue

INDENT_WIDTH = 4
_LEADING_INDENT = re.compile(rf"^(?: {{{INDENT_WIDTH}}})+", re.MULTILINE)

# String literals are matched first so their content is never rewritten.
_EXPONENT_FLOAT = re.compile(r'"(?:\\.|[^"\\])*"|(-?\d+(?:\.\d+)?)e([+-])0*(\d+)')


def php_exponents(text: str) -> str:
    """Write exponent floats as PHP does: ``1e+100`` -> ``1.0e+100``, ``1e-07`` -> ``1.0e-7``."""

    def _rewrite(match: re.Match[str]) -> str:
        mantissa = match.group(1)
        if mantissa is None:
            return match.group(0)
        if "." not in mantissa:
            mantissa += ".0"
        return f"{mantissa}e{match.group(2)}{match.group(3)}"

    return _EXPONENT_FLOAT.sub(_rewrite, text)


def retab(text: str) -> str:
    """Replace each leading run of 4-space indent units with one tab per unit."""
    return _LEADING_INDENT.sub(
        lambda match: "\t" * (len(match.group(0)) // INDENT_WIDTH), text
    )


def encode_json(
    value: StructuredValue, *, pretty: bool = True, source: Path | None = None
) -> str:
    """Encode a structured value as JSON text.

    Parameters
    ----------
    value : StructuredValue
        JSON-compatible tree to encode.
    pretty : bool, default=True
        Indent nested structures with one tab per level. When disabled the
        output carries no whitespace beyond JSON's separators.
    source : Path | None, default=None
        Source file, used only to enrich error messages.

    Returns
    -------
    str
        JSON document. Non-ASCII characters are ``\\u`` escaped and ``/`` is
        written as ``\\/``. Exponent floats carry a fractional part
        (``1.0e+100``).

    Raises
    ------
    EvaluationError
        If the value contains NaN/Infinity or a non-JSON type.
    """
    try:
        if pretty:
            text = json.dumps(value, indent=INDENT_WIDTH, allow_nan=False)
        else:
            text = json.dumps(value, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise EvaluationError(
            f"Value cannot be encoded as JSON: {exc}", source=source
        ) from exc

    # "/" only ever appears inside string literals in JSON text.
    text = php_exponents(text.replace("/", "\\/"))
    return retab(text) if pretty else text
