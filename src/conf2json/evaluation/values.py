"""PHP value model and type juggling rules."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterator

from conf2json.errors import EvaluationError
from conf2json.types import StructuredValue

logger = logging.getLogger(__name__)

INT_MAX = 2**63 - 1
INT_MIN = -(2**63)

_INTEGER_KEY = re.compile(r"^(?:0|-?[1-9][0-9]*)$")
_NUMERIC = re.compile(r"^[ \t\n\r\v\f]*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?[ \t\n\r\v\f]*$")
_LEADING_NUMERIC = re.compile(r"^[ \t\n\r\v\f]*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

type Key = int | str


class PhpArray:
    """Ordered map with PHP array key semantics.

    Integer-like string keys are stored as ints, implicit keys continue from
    the largest integer key, and assignment copies (see :meth:`copy`).
    """

    __slots__ = ("_items", "_next")

    def __init__(self) -> None:
        self._items: dict[Key, object] = {}
        self._next: int | None = None

    @classmethod
    def from_list(cls, values: list[object]) -> PhpArray:
        array = cls()
        for value in values:
            array.append(value)
        return array

    @classmethod
    def from_pairs(cls, pairs: list[tuple[object, object]]) -> PhpArray:
        array = cls()
        for key, value in pairs:
            array.set(key, value)
        return array

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return normalize_key(key) in self._items

    def __iter__(self) -> Iterator[Key]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"PhpArray({self._items!r})"

    def items(self) -> Iterator[tuple[Key, object]]:
        return iter(list(self._items.items()))

    def values(self) -> list[object]:
        return list(self._items.values())

    def keys(self) -> list[Key]:
        return list(self._items.keys())

    def get(self, key: object, default: object = None) -> object:
        return self._items.get(normalize_key(key), default)

    def set(self, key: object, value: object) -> None:
        normalized = normalize_key(key)
        if isinstance(normalized, int) and (self._next is None or normalized >= self._next):
            self._next = normalized + 1
        self._items[normalized] = value

    def append(self, value: object) -> None:
        key = 0 if self._next is None else self._next
        if key > INT_MAX:
            raise EvaluationError(
                "Cannot add element to the array as the next element is already occupied."
            )
        self.set(key, value)

    def copy(self) -> PhpArray:
        """Return a deep copy, giving the array value semantics."""
        clone = PhpArray()
        clone._next = self._next
        clone._items = {key: copy_value(value) for key, value in self._items.items()}
        return clone

    def is_list(self) -> bool:
        return all(key == index for index, key in enumerate(self._items))


def copy_value(value: object) -> object:
    """Copy arrays on assignment; scalars are immutable."""
    return value.copy() if isinstance(value, PhpArray) else value


def type_name(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    return "array"


def normalize_key(key: object) -> Key:
    """Cast an array offset to the int or string key PHP would store."""
    if isinstance(key, bool):
        return int(key)
    if isinstance(key, int):
        return key
    if isinstance(key, str):
        if _INTEGER_KEY.match(key):
            number = int(key)
            if INT_MIN <= number <= INT_MAX:
                return number
        return key
    if isinstance(key, float):
        if math.isnan(key) or math.isinf(key):
            return 0
        return int(key)
    if key is None:
        return ""
    raise EvaluationError("Illegal offset type: array.")


def clamp_int(value: int) -> int | float:
    """Overflow beyond 64-bit integers becomes float, as in PHP."""
    if INT_MIN <= value <= INT_MAX:
        return value
    return float(value)


def to_bool(value: object) -> bool:
    if isinstance(value, PhpArray):
        return len(value) > 0
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def format_float(value: float) -> str:
    """Render a float the way PHP string conversion does."""
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    text = format(value, ".14G")
    if "E" in text:
        mantissa, exponent = text.split("E")
        if "." not in mantissa:
            mantissa += ".0"
        power = int(exponent)
        return f"{mantissa}E{'+' if power >= 0 else '-'}{abs(power)}"
    return text


def to_string(value: object) -> str:
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_float(value)
    if isinstance(value, str):
        return value
    logger.warning("Array to string conversion")
    return "Array"


def is_numeric(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and _NUMERIC.match(value) is not None


def _parse_numeric(text: str) -> int | float:
    text = text.strip(" \t\n\r\v\f")
    if re.fullmatch(r"[+-]?\d+", text):
        return clamp_int(int(text))
    return float(text)


def to_number(value: object, operator: str = "+") -> int | float:
    """Convert an arithmetic operand, rejecting arrays and non-numeric strings."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if value is None:
        return 0
    if isinstance(value, str):
        if _NUMERIC.match(value):
            return _parse_numeric(value)
        leading = _LEADING_NUMERIC.match(value)
        if leading:
            logger.warning("A non-numeric value encountered: %r", value)
            return _parse_numeric(leading.group(0))
        raise EvaluationError(
            f"Unsupported operand types: non-numeric string {value!r} {operator} number."
        )
    raise EvaluationError(f"Unsupported operand types: array {operator} number.")


def to_int(value: object) -> int:
    if isinstance(value, PhpArray):
        return 1 if len(value) else 0
    if isinstance(value, str):
        leading = _LEADING_NUMERIC.match(value)
        if not leading:
            return 0
        value = _parse_numeric(leading.group(0))
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return int(value) if INT_MIN <= value <= INT_MAX else 0
    if value is None:
        return 0
    return int(value)  # type: ignore[arg-type]


def to_float(value: object) -> float:
    if isinstance(value, str):
        leading = _LEADING_NUMERIC.match(value)
        return float(_parse_numeric(leading.group(0))) if leading else 0.0
    if isinstance(value, PhpArray):
        return 1.0 if len(value) else 0.0
    if value is None:
        return 0.0
    return float(value)  # type: ignore[arg-type]


def to_array(value: object) -> PhpArray:
    if isinstance(value, PhpArray):
        return value.copy()
    if value is None:
        return PhpArray()
    return PhpArray.from_list([value])


def strict_equals(left: object, right: object) -> bool:
    """``===``: same type and value; arrays also need the same order."""
    if isinstance(left, PhpArray) and isinstance(right, PhpArray):
        if left.keys() != right.keys():
            return False
        return all(strict_equals(left.get(key), right.get(key)) for key in left)
    if type_name(left) != type_name(right):
        return False
    return left == right


def compare(left: object, right: object) -> int:
    """Three-way loose comparison (``<=>``) following PHP 8 rules."""
    if left is None and right is None:
        return 0
    if isinstance(left, bool) or isinstance(right, bool):
        return _spaceship(to_bool(left), to_bool(right))
    if left is None:
        return _spaceship("", right) if isinstance(right, str) else _spaceship(False, to_bool(right))
    if right is None:
        return _spaceship(left, "") if isinstance(left, str) else _spaceship(to_bool(left), False)
    if isinstance(left, PhpArray) or isinstance(right, PhpArray):
        return _compare_arrays(left, right)
    if isinstance(left, str) and isinstance(right, str):
        if is_numeric(left) and is_numeric(right):
            return _spaceship(_parse_numeric(left), _parse_numeric(right))
        return _spaceship(left, right)
    if isinstance(left, str) or isinstance(right, str):
        text, number = (left, right) if isinstance(left, str) else (right, left)
        if is_numeric(text):
            result = _spaceship(_parse_numeric(text), number)
        else:
            result = _spaceship(text, to_string(number))
        return result if isinstance(left, str) else -result
    return _spaceship(left, right)


def loose_equals(left: object, right: object) -> bool:
    if isinstance(left, PhpArray) and isinstance(right, PhpArray):
        if len(left) != len(right):
            return False
        return all(key in right and loose_equals(value, right.get(key)) for key, value in left.items())
    return compare(left, right) == 0


def _compare_arrays(left: object, right: object) -> int:
    if not isinstance(left, PhpArray):
        return -1
    if not isinstance(right, PhpArray):
        return 1
    if len(left) != len(right):
        return _spaceship(len(left), len(right))
    for key, value in left.items():
        if key not in right:
            return 1
        result = compare(value, right.get(key))
        if result:
            return result
    return 0


def _spaceship(left: object, right: object) -> int:
    return (left > right) - (left < right)  # type: ignore[operator]


def to_structured(value: object) -> StructuredValue:
    """Convert an evaluated PHP value into a JSON-compatible tree.

    Arrays keyed ``0..n-1`` in order become lists (including the empty
    array); every other array becomes a dict with string keys.
    """
    if isinstance(value, PhpArray):
        if value.is_list():
            return [to_structured(item) for item in value.values()]
        return {str(key): to_structured(item) for key, item in value.items()}
    return value  # type: ignore[return-value]


def from_structured(value: object) -> object:
    """Convert decoded JSON data back into PHP values."""
    if isinstance(value, dict):
        return PhpArray.from_pairs([(key, from_structured(item)) for key, item in value.items()])
    if isinstance(value, list):
        return PhpArray.from_list([from_structured(item) for item in value])
    return value
