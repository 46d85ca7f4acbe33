"""Pure PHP functions available to configuration scripts."""

from __future__ import annotations

import json
import math
import re
from collections.abc import Callable, Mapping
from pathlib import PurePath

from conf2json.errors import EvaluationError
from conf2json.evaluation.values import (
    PhpArray,
    clamp_int,
    compare,
    copy_value,
    from_structured,
    loose_equals,
    strict_equals,
    to_bool,
    to_float,
    to_int,
    to_number,
    to_string,
    type_name,
)

type Builtin = Callable[..., object]

_SPRINTF_SPEC = re.compile(
    r"%(?:(?P<arg>\d+)\$)?(?P<flags>(?:[-+ 0]|'.)*)(?P<width>\d+)?(?:\.(?P<precision>\d+))?(?P<conv>[bcdeEfFgGosuxX%])"
)


def _expect_array(name: str, value: object, position: int = 1) -> PhpArray:
    if not isinstance(value, PhpArray):
        raise EvaluationError(
            f"{name}(): Argument #{position} must be of type array, {type_name(value)} given."
        )
    return value


def _trim(value: object, characters: object = " \t\n\r\0\x0b") -> str:
    return to_string(value).strip(to_string(characters))


def _ucfirst(value: object) -> str:
    text = to_string(value)
    return text[:1].upper() + text[1:]


def _count(value: object) -> int:
    return len(_expect_array("count", value))


def _implode(separator: object, pieces: object = None) -> str:
    if pieces is None:
        separator, pieces = "", separator
    elif isinstance(separator, PhpArray):
        separator, pieces = pieces, separator
    array = _expect_array("implode", pieces, 2)
    return to_string(separator).join(to_string(item) for item in array.values())


def _explode(separator: object, text: object, limit: object = None) -> PhpArray:
    delimiter = to_string(separator)
    if not delimiter:
        raise EvaluationError("explode(): Argument #1 ($separator) cannot be empty.")
    source = to_string(text)
    if limit is None:
        return PhpArray.from_list(list(source.split(delimiter)))
    bound = to_int(limit)
    if bound > 0:
        return PhpArray.from_list(list(source.split(delimiter, bound - 1)))
    pieces = source.split(delimiter)
    if bound < 0:
        pieces = pieces[:bound]
    else:
        pieces = [delimiter.join(pieces)]
    return PhpArray.from_list(list(pieces))


def _str_repeat(text: object, times: object) -> str:
    count = to_int(times)
    if count < 0:
        raise EvaluationError("str_repeat(): Argument #2 ($times) must be greater than or equal to 0.")
    return to_string(text) * count


def _str_replace(search: object, replace: object, subject: object) -> object:
    if isinstance(subject, PhpArray):
        return PhpArray.from_pairs(
            [(key, _str_replace(search, replace, item)) for key, item in subject.items()]
        )
    result = to_string(subject)
    if isinstance(search, PhpArray):
        replacements = replace.values() if isinstance(replace, PhpArray) else None
        for index, needle in enumerate(search.values()):
            if replacements is None:
                substitute = to_string(replace)
            else:
                substitute = to_string(replacements[index]) if index < len(replacements) else ""
            if to_string(needle):
                result = result.replace(to_string(needle), substitute)
        return result
    needle = to_string(search)
    return result.replace(needle, to_string(replace)) if needle else result


def _format_one(match: re.Match[str], value: object) -> str:
    conv = match.group("conv")
    flags = match.group("flags")
    custom = re.search(r"'(.)", flags)
    plain = re.sub(r"'.", "", flags)
    left = "-" in plain
    plus = "+" in plain
    pad = custom.group(1) if custom else ("0" if "0" in plain else " ")
    width = int(match.group("width") or 0)
    precision = match.group("precision")

    if conv in "du":
        number = to_int(value)
        if conv == "u" and number < 0:
            number += 2**64
        text = f"{number:+d}" if plus and conv == "d" else str(number)
    elif conv in "eEfFgG":
        digits = 6 if precision is None else int(precision)
        spec = conv.lower() if conv in "fF" else conv
        text = format(to_float(value), f"{'+' if plus else ''}.{digits}{spec}")
        if conv in "eE":
            text = re.sub(r"([eE][+-])0*(\d)", r"\1\2", text)
    elif conv == "s":
        text = to_string(value)
        if precision is not None:
            text = text[: int(precision)]
    elif conv == "c":
        text = chr(to_int(value) % 256)
    else:
        number = to_int(value) & (2**64 - 1)
        text = format(number, {"b": "b", "o": "o", "x": "x", "X": "X"}[conv])

    if len(text) < width:
        if left:
            text = text.ljust(width, " " if pad == "0" else pad)
        elif pad == "0" and text[:1] in "+-" and conv not in "sc":
            text = text[0] + text[1:].rjust(width - 1, "0")
        else:
            text = text.rjust(width, pad)
    return text


def _sprintf(template: object, *args: object) -> str:
    text = to_string(template)
    position = 0
    output: list[str] = []
    cursor = 0
    for match in _SPRINTF_SPEC.finditer(text):
        output.append(text[cursor : match.start()])
        cursor = match.end()
        if match.group("conv") == "%":
            output.append("%")
            continue
        if match.group("arg"):
            index = int(match.group("arg")) - 1
        else:
            index = position
            position += 1
        if index >= len(args):
            raise EvaluationError(f"sprintf(): {index + 2} arguments are required, {len(args) + 1} given.")
        output.append(_format_one(match, args[index]))
    output.append(text[cursor:])
    return "".join(output)


def _boolval(value: object) -> bool:
    return to_bool(value)


def _extreme(name: str, values: tuple[object, ...], sign: int) -> object:
    if len(values) == 1:
        candidates = _expect_array(name, values[0]).values()
    else:
        candidates = list(values)
    if not candidates:
        raise EvaluationError(f"{name}(): Argument #1 ($value) must contain at least one element.")
    best = candidates[0]
    for candidate in candidates[1:]:
        if compare(candidate, best) * sign > 0:
            best = candidate
    return copy_value(best)


def _abs(value: object) -> int | float:
    number = to_number(value)
    return clamp_int(abs(number)) if isinstance(number, int) else abs(number)


def _array_merge(*arrays: object) -> PhpArray:
    merged = PhpArray()
    for position, array in enumerate(arrays, start=1):
        for key, value in _expect_array("array_merge", array, position).items():
            if isinstance(key, int):
                merged.append(copy_value(value))
            else:
                merged.set(key, copy_value(value))
    return merged


def _array_keys(array: object) -> PhpArray:
    return PhpArray.from_list(list(_expect_array("array_keys", array).keys()))


def _array_values(array: object) -> PhpArray:
    return PhpArray.from_list([copy_value(v) for v in _expect_array("array_values", array).values()])


def _array_key_exists(key: object, array: object) -> bool:
    return key in _expect_array("array_key_exists", array, 2)


def _in_array(needle: object, haystack: object, strict: object = False) -> bool:
    equals = strict_equals if to_bool(strict) else loose_equals
    return any(equals(needle, item) for item in _expect_array("in_array", haystack, 2).values())


def _range(start: object, end: object, step: object = 1) -> PhpArray:
    if (
        isinstance(start, str)
        and isinstance(end, str)
        and len(start) == 1
        and len(end) == 1
        and not start.isdigit()
    ):
        first, last = ord(start), ord(end)
        stride = abs(to_int(step)) or 1
        codes = range(first, last + 1, stride) if first <= last else range(first, last - 1, -stride)
        return PhpArray.from_list([chr(code) for code in codes])

    low, high, stride = to_number(start), to_number(end), to_number(step)
    if stride == 0:
        raise EvaluationError("range(): Argument #3 ($step) cannot be 0.")
    stride = abs(stride)
    use_float = any(isinstance(item, float) for item in (low, high, stride))
    values: list[object] = []
    count = int(math.floor(abs(high - low) / stride + 1e-9)) + 1
    direction = 1 if high >= low else -1
    for index in range(count):
        current = low + direction * index * stride
        values.append(float(current) if use_float else int(current))
    return PhpArray.from_list(values)


def _dirname(path: object, levels: object = 1) -> str:
    text = to_string(path)
    if not text:
        return ""
    current = PurePath(text)
    for _ in range(max(to_int(levels), 1)):
        current = current.parent
    return str(current)


def _basename(path: object, suffix: object = "") -> str:
    name = PurePath(to_string(path)).name
    ending = to_string(suffix)
    if ending and name.endswith(ending) and name != ending:
        name = name[: -len(ending)]
    return name


def _json_decode(text: object, associative: object = None) -> object:
    del associative
    try:
        return from_structured(json.loads(to_string(text)))
    except ValueError:
        return None


def _is_null(value: object) -> bool:
    return value is None


def make_environment_functions(environ: Mapping[str, str]) -> dict[str, Builtin]:
    """Build ``getenv``/``env`` bound to an environment mapping."""

    def getenv(name: object = None) -> object:
        if name is None:
            return PhpArray.from_pairs(list(environ.items()))
        return environ.get(to_string(name), False)

    def env(name: object, default: object = None) -> object:
        value = environ.get(to_string(name))
        if value is None:
            return default
        lowered = value.lower()
        if lowered in ("true", "(true)"):
            return True
        if lowered in ("false", "(false)"):
            return False
        if lowered in ("null", "(null)"):
            return None
        if lowered in ("empty", "(empty)"):
            return ""
        if len(value) > 1 and value[0] == value[-1] and value[0] in "\"'":
            return value[1:-1]
        return value

    return {"getenv": getenv, "env": env}


BUILTINS: dict[str, Builtin] = {
    "strtoupper": lambda value: to_string(value).upper(),
    "strtolower": lambda value: to_string(value).lower(),
    "ucfirst": _ucfirst,
    "trim": _trim,
    "strlen": lambda value: len(to_string(value).encode("utf-8")),
    "count": _count,
    "implode": _implode,
    "join": _implode,
    "explode": _explode,
    "str_repeat": _str_repeat,
    "str_replace": _str_replace,
    "sprintf": _sprintf,
    "intval": to_int,
    "floatval": to_float,
    "strval": to_string,
    "boolval": _boolval,
    "max": lambda *values: _extreme("max", values, 1),
    "min": lambda *values: _extreme("min", values, -1),
    "abs": _abs,
    "array_merge": _array_merge,
    "array_keys": _array_keys,
    "array_values": _array_values,
    "array_key_exists": _array_key_exists,
    "in_array": _in_array,
    "range": _range,
    "dirname": _dirname,
    "basename": _basename,
    "json_decode": _json_decode,
    "is_null": _is_null,
}
