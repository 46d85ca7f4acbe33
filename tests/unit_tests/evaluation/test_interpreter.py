"""Unit tests for evaluating PHP configuration scripts."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from conf2json.errors import EvaluationError
from conf2json.evaluation import evaluate_php_file, evaluate_php_source
from conf2json.evaluation.interpreter import Interpreter


def _run(body: str, **kwargs: object) -> object:
    return evaluate_php_source(f"<?php\n{body}\n", **kwargs)  # type: ignore[arg-type]


# -----------------------------
# Arrays
# -----------------------------
def test_associative_and_nested_arrays() -> None:
    assert _run("return ['a' => 1, 'b' => [1, 2, 3]];") == {"a": 1, "b": [1, 2, 3]}


def test_legacy_array_syntax_and_empty_array() -> None:
    assert _run("return array('x', 'y');") == ["x", "y"]
    assert _run("return [];") == []


def test_non_sequential_integer_keys_become_an_object() -> None:
    assert _run("return [1 => 'a', 2 => 'b'];") == {"1": "a", "2": "b"}


def test_implicit_keys_continue_after_largest_integer_key() -> None:
    assert _run("return ['5' => 'a', 'b'];") == {"5": "a", "6": "b"}


def test_key_casting_overwrites_in_place() -> None:
    result = _run("return [true => 'a', null => 'b', 1.7 => 'c'];")
    assert result == {"1": "c", "": "b"}
    assert list(result) == ["1", ""]


def test_spread_reindexes_integer_keys() -> None:
    assert _run("$a = [1, 2]; return [...$a, 3, ...['k' => 'v']];") == {
        "0": 1,
        "1": 2,
        "2": 3,
        "k": "v",
    }


def test_assignment_copies_arrays() -> None:
    assert _run("$a = [1]; $b = $a; $b[] = 2; return [$a, $b];") == [[1], [1, 2]]


def test_nested_writes_create_arrays() -> None:
    assert _run("$c['x']['y'][] = 1; $c['x']['z'] = true; return $c;") == {
        "x": {"y": [1], "z": True}
    }


def test_array_union_keeps_left_keys() -> None:
    assert _run("return ['a' => 1] + ['a' => 2, 'b' => 3];") == {"a": 1, "b": 3}


# -----------------------------
# Scalars and operators
# -----------------------------
def test_arithmetic() -> None:
    assert _run(
        "return [1 + 2 * 3, 7 / 2, 6 / 3, 7 % 3, -7 % 3, 2 ** 10, -2 ** 2, '5' + 1];"
    ) == [7, 3.5, 2, 1, -1, 1024, -4, 6]


def test_integer_overflow_becomes_float() -> None:
    assert _run("return PHP_INT_MAX + 1;") == 9.223372036854775808e18


def test_concatenation_converts_scalars() -> None:
    assert _run("return 'a' . 1 . true . null . false . 1.5;") == "a111.5"


def test_string_interpolation() -> None:
    result = _run(
        "$name = 'app'; $cfg = ['x' => 'y']; $n = [3];\n"
        "return \"$name-{$cfg['x']}-$cfg[x]-$n[0]\\t/\";"
    )
    assert result == "app-y-y-3\t/"


def test_single_quoted_string_is_literal() -> None:
    assert _run(r"return 'a\nb $x';") == "a\\nb $x"


def test_comparisons_follow_php8_rules() -> None:
    assert _run(
        "return [1 == '1', 1 === '1', 'abc' == 0, null == false, [1, 2] == [1, 2],"
        " '10' == '1e1', 2 > 1, 'a' < 'b', 1 != 2, 1 <> 1];"
    ) == [True, False, False, True, True, True, True, True, True, False]


def test_logical_operators_short_circuit() -> None:
    assert _run("return [true && false, false || 'x', !0, false and undefined_fn()];") == [
        False,
        True,
        True,
        False,
    ]


def test_ternary_and_null_coalescing() -> None:
    assert _run(
        "return [$missing ?? 'default', true ? 'y' : 'n', 0 ?: 'fallback', 'v' ?: 'w'];"
    ) == ["default", "y", "fallback", "v"]


def test_null_coalescing_does_not_warn(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        assert _run("return $cfg['a']['b'] ?? 1;") == 1
    assert caplog.records == []


def test_undefined_variable_warns_and_is_null(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        assert _run("return $nope;") is None
    assert "Undefined variable $nope" in caplog.text


def test_casts() -> None:
    assert _run(
        "return [(int) '12abc', (bool) '0', (string) 1.5, (array) 'x', (float) '2', (int) 3.9];"
    ) == [12, False, "1.5", ["x"], 2.0, 3]


def test_compound_assignment() -> None:
    assert _run(
        "$s = 'a'; $s .= 'b'; $n = 1; $n += 2; $n *= 3; $o ??= 'set'; $o ??= 'kept';"
        " return [$s, $n, $o];"
    ) == ["ab", 9, "set"]


def test_string_offsets() -> None:
    assert _run("$s = 'abc'; return [$s[0], $s[-1]];") == ["a", "c"]


# -----------------------------
# Constants and functions
# -----------------------------
def test_define_and_const() -> None:
    assert _run(
        "define('APP', 'demo'); const VERSION = 2;"
        " return [APP, VERSION, defined('APP'), defined('NOPE'), constant('VERSION')];"
    ) == ["demo", 2, True, False, 2]


def test_magic_constants(tmp_path: Path) -> None:
    source = tmp_path / "conf" / "app.php"
    result = _run("return [__DIR__, __FILE__, __LINE__];", path=source)
    assert result == [str(source.parent), str(source), 2]


def test_builtin_function_calls() -> None:
    assert _run(
        "return [strtoupper('abc'), implode(',', [1, 2]), count([1, 2, 3]),"
        " sprintf('%05.1f|%s|%d', 3.14159, 'x', '42'), \\trim('  t  ')];"
    ) == ["ABC", "1,2", 3, "003.1|x|42", "t"]


def test_environment_functions() -> None:
    environ = {"APP_DEBUG": "true", "APP_NAME": "demo"}
    assert _run(
        "return [env('APP_DEBUG', false), env('MISSING', 'x'), getenv('APP_NAME'), getenv('NONE')];",
        environ=environ,
    ) == [True, "x", "demo", False]


# -----------------------------
# Includes
# -----------------------------
def test_require_merges_included_values(write_php) -> None:
    write_php("base.php", "return ['a' => 1];")
    main = write_php(
        "main.php", "$base = require __DIR__ . '/base.php';\nreturn $base + ['b' => 2];"
    )
    assert evaluate_php_file(main) == {"a": 1, "b": 2}


def test_included_file_shares_variables(write_php) -> None:
    write_php("vars.php", "$shared = 'from include';")
    main = write_php("main.php", "include __DIR__ . '/vars.php';\nreturn [$shared];")
    assert evaluate_php_file(main) == ["from include"]


def test_require_once_returns_true_on_repeat(write_php) -> None:
    write_php("part.php", "return 'once';")
    main = write_php(
        "main.php",
        "return [require_once __DIR__ . '/part.php', require_once __DIR__ . '/part.php'];",
    )
    assert evaluate_php_file(main) == ["once", True]


def test_missing_include_warns_but_missing_require_fails(
    write_php, caplog: pytest.LogCaptureFixture
) -> None:
    soft = write_php("soft.php", "return [include 'nope.php'];")
    with caplog.at_level(logging.WARNING):
        assert evaluate_php_file(soft) == [False]
    assert "Failed to open stream" in caplog.text

    hard = write_php("hard.php", "return require 'nope.php';")
    with pytest.raises(EvaluationError, match="Failed opening required"):
        evaluate_php_file(hard)


def test_include_depth_is_limited(write_php) -> None:
    loop = write_php("loop.php", "return require __FILE__;")
    with pytest.raises(EvaluationError, match="depth limit"):
        Interpreter(max_include_depth=4).evaluate_file(loop)


# -----------------------------
# Errors
# -----------------------------
@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("$x = 1;", "does not return"),
        ("return foo();", "unsupported function foo"),
        ("return 1 / 0;", "Division by zero"),
        ("return 1 % 0;", "Modulo by zero"),
        ("return 'abc' * 2;", "non-numeric"),
        ("return UNKNOWN_CONST;", "Undefined constant"),
        ("const A = 1; const A = 2; return A;", "already defined"),
        ("return [[1] => 2];", "Illegal offset"),
        ("$s = 'str'; $s['k'] = 1; return $s;", "scalar"),
        ("return 1 + [1];", "array"),
    ],
)
def test_evaluation_errors(body: str, message: str) -> None:
    with pytest.raises(EvaluationError, match=message):
        _run(body)


def test_errors_report_file_and_line(tmp_path: Path) -> None:
    source = tmp_path / "broken.php"
    source.write_text("<?php\n$a = 1;\nreturn $a / 0;\n", encoding="utf-8")
    with pytest.raises(EvaluationError) as info:
        evaluate_php_file(source)
    assert info.value.line == 3
    assert info.value.source == source.resolve()
    assert str(info.value).startswith(f"{source.resolve()}:3: ")


def test_nan_result_is_returned_for_encoding_to_reject() -> None:
    result = _run("return NAN;")
    assert result != result
