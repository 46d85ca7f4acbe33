"""Tree-walking interpreter for the PHP configuration subset."""

from __future__ import annotations

import logging
import math
import os
import platform
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from conf2json.errors import EvaluationError
from conf2json.evaluation.builtins import BUILTINS, Builtin, make_environment_functions
from conf2json.evaluation.nodes import (
    ArrayLiteral,
    Assign,
    Binary,
    Call,
    Cast,
    ConstantRef,
    ConstDeclaration,
    ExpressionStatement,
    Include,
    Index,
    Interpolated,
    Literal,
    Node,
    Return,
    Ternary,
    Unary,
    Variable,
)
from conf2json.evaluation.parser import parse
from conf2json.evaluation.values import (
    INT_MAX,
    INT_MIN,
    PhpArray,
    clamp_int,
    compare,
    copy_value,
    loose_equals,
    strict_equals,
    to_array,
    to_bool,
    to_float,
    to_int,
    to_number,
    to_string,
    type_name,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_INCLUDE_DEPTH = 32

_MISSING = object()

_BUILTIN_CONSTANTS: dict[str, object] = {
    "PHP_EOL": "\n",
    "PHP_INT_MAX": INT_MAX,
    "PHP_INT_MIN": INT_MIN,
    "PHP_INT_SIZE": 8,
    "PHP_FLOAT_EPSILON": sys.float_info.epsilon,
    "PHP_FLOAT_MAX": sys.float_info.max,
    "PHP_FLOAT_MIN": sys.float_info.min,
    "PHP_VERSION": "8.3.0",
    "PHP_OS": platform.system(),
    "PHP_OS_FAMILY": platform.system(),
    "DIRECTORY_SEPARATOR": os.sep,
    "PATH_SEPARATOR": os.pathsep,
    "M_PI": math.pi,
    "M_E": math.e,
    "INF": math.inf,
    "NAN": math.nan,
}


@dataclass
class _Frame:
    """Per-file evaluation context."""

    path: Path


@dataclass
class _Session:
    """State shared by a file and everything it includes."""

    variables: dict[str, object] = field(default_factory=dict)
    constants: dict[str, object] = field(default_factory=dict)
    included: set[Path] = field(default_factory=set)
    depth: int = 0


class _ReturnSignal(Exception):
    def __init__(self, value: object) -> None:
        super().__init__()
        self.value = value


class Interpreter:
    """Evaluate PHP configuration files.

    Parameters
    ----------
    environ : Mapping[str, str] | None, default=None
        Environment visible to ``getenv()``/``env()``; ``os.environ`` when
        omitted.
    max_include_depth : int, default=32
        Maximum nesting of ``require``/``include``.
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
    ) -> None:
        self.max_include_depth = max_include_depth
        self.functions: dict[str, Builtin] = {
            **BUILTINS,
            **make_environment_functions(os.environ if environ is None else environ),
        }

    def evaluate_file(self, path: Path) -> object:
        """Run ``path`` and return the value of its top-level ``return``.

        Raises
        ------
        EvaluationError
            If the file cannot be read, parsed or evaluated, or never returns.
        """
        path = path.resolve()
        session = _Session(included={path})
        returned = self._run_file(path, session)
        if returned is _MISSING:
            raise EvaluationError("File does not return a value.", source=path)
        return returned

    def evaluate_source(self, source: str, path: Path) -> object:
        """Run PHP ``source`` as if it were the content of ``path``."""
        session = _Session(included={path})
        returned = self._run_source(source, path, session)
        if returned is _MISSING:
            raise EvaluationError("File does not return a value.", source=path)
        return returned

    def _run_file(self, path: Path, session: _Session) -> object:
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise EvaluationError(f"Cannot read file: {exc}", source=path) from exc
        return self._run_source(source, path, session)

    def _run_source(self, source: str, path: Path, session: _Session) -> object:
        frame = _Frame(path=path)
        try:
            statements = parse(source)
            for statement in statements:
                self._execute(statement, frame, session)
        except _ReturnSignal as signal:
            return signal.value
        except EvaluationError as exc:
            bound = exc.with_source(path)
            if bound is exc:
                raise
            raise bound from exc
        except RecursionError as exc:
            raise EvaluationError("Expression nesting is too deep.", source=path) from exc
        return _MISSING

    # Statements

    def _execute(self, node: Node, frame: _Frame, session: _Session) -> None:
        if isinstance(node, Return):
            value = None if node.value is None else self._eval(node.value, frame, session)
            raise _ReturnSignal(value)
        if isinstance(node, ConstDeclaration):
            self._define(node.name, self._eval(node.value, frame, session), node, session)
            return
        if isinstance(node, ExpressionStatement):
            self._eval(node.expression, frame, session)
            return
        raise EvaluationError(f"Unsupported statement {type(node).__name__}.", line=node.line)

    # Expressions

    def _eval(self, node: Node, frame: _Frame, session: _Session, quiet: bool = False) -> object:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Variable):
            return self._read_variable(node, session, quiet)
        if isinstance(node, ArrayLiteral):
            return self._array(node, frame, session)
        if isinstance(node, Index):
            return self._read_index(node, frame, session, quiet)
        if isinstance(node, Interpolated):
            return "".join(
                part if isinstance(part, str) else to_string(self._eval(part, frame, session))
                for part in node.parts
            )
        if isinstance(node, ConstantRef):
            return self._constant(node, frame, session)
        if isinstance(node, Unary):
            return self._unary(node, frame, session)
        if isinstance(node, Binary):
            return self._binary(node, frame, session)
        if isinstance(node, Ternary):
            condition = self._eval(node.condition, frame, session)
            if to_bool(condition):
                return condition if node.then is None else self._eval(node.then, frame, session)
            return self._eval(node.otherwise, frame, session)
        if isinstance(node, Cast):
            return self._cast(node.kind, self._eval(node.operand, frame, session))
        if isinstance(node, Assign):
            return self._assign(node, frame, session)
        if isinstance(node, Call):
            return self._call(node, frame, session)
        if isinstance(node, Include):
            return self._include(node, frame, session)
        raise EvaluationError(f"Unsupported expression {type(node).__name__}.", line=node.line)

    def _read_variable(self, node: Variable, session: _Session, quiet: bool) -> object:
        if node.name == "this":
            raise EvaluationError("Using $this outside of an object context.", line=node.line)
        if node.name not in session.variables:
            if not quiet:
                logger.warning("Undefined variable $%s on line %d", node.name, node.line)
            return None
        return session.variables[node.name]

    def _array(self, node: ArrayLiteral, frame: _Frame, session: _Session) -> PhpArray:
        array = PhpArray()
        for item in node.items:
            value = self._eval(item.value, frame, session)
            if item.spread:
                if not isinstance(value, PhpArray):
                    raise EvaluationError("Only arrays can be unpacked.", line=item.line)
                for key, element in value.items():
                    if isinstance(key, int):
                        array.append(copy_value(element))
                    else:
                        array.set(key, copy_value(element))
            elif item.key is None:
                array.append(copy_value(value))
            else:
                key = self._eval(item.key, frame, session)
                array.set(self._key(key, item.line), copy_value(value))
        return array

    def _key(self, key: object, line: int) -> object:
        if isinstance(key, PhpArray):
            raise EvaluationError("Illegal offset type: array.", line=line)
        return key

    def _read_index(self, node: Index, frame: _Frame, session: _Session, quiet: bool) -> object:
        if node.index is None:
            raise EvaluationError("Cannot use [] for reading.", line=node.line)
        container = self._eval(node.target, frame, session, quiet)
        key = self._key(self._eval(node.index, frame, session), node.line)
        if isinstance(container, PhpArray):
            value = container.get(key, _MISSING)
            if value is _MISSING:
                if not quiet:
                    logger.warning("Undefined array key %r on line %d", key, node.line)
                return None
            return value
        if isinstance(container, str):
            offset = to_int(key)
            if -len(container) <= offset < len(container):
                return container[offset]
            if not quiet:
                logger.warning("Uninitialized string offset %d on line %d", offset, node.line)
            return ""
        if container is not None and not quiet:
            logger.warning(
                "Trying to access array offset on value of type %s on line %d",
                type_name(container),
                node.line,
            )
        return None

    def _constant(self, node: ConstantRef, frame: _Frame, session: _Session) -> object:
        name = node.name
        if name == "__DIR__":
            return str(frame.path.parent)
        if name == "__FILE__":
            return str(frame.path)
        if name == "__LINE__":
            return node.line
        if name in session.constants:
            return session.constants[name]
        if name in _BUILTIN_CONSTANTS:
            return _BUILTIN_CONSTANTS[name]
        raise EvaluationError(f'Undefined constant "{name}".', line=node.line)

    def _define(self, name: str, value: object, node: Node, session: _Session) -> bool:
        if name in session.constants or name in _BUILTIN_CONSTANTS:
            if isinstance(node, ConstDeclaration):
                raise EvaluationError(f"Constant {name} already defined.", line=node.line)
            logger.warning("Constant %s already defined on line %d", name, node.line)
            return False
        session.constants[name] = copy_value(value)
        return True

    def _unary(self, node: Unary, frame: _Frame, session: _Session) -> object:
        value = self._eval(node.operand, frame, session)
        if node.op == "!":
            return not to_bool(value)
        number = self._number(value, node.op, node)
        if node.op == "-":
            return clamp_int(-number) if isinstance(number, int) else -number
        return number

    def _number(self, value: object, op: str, node: Node) -> int | float:
        try:
            return to_number(value, op)
        except EvaluationError as exc:
            raise EvaluationError(exc.message, line=node.line) from exc

    def _binary(self, node: Binary, frame: _Frame, session: _Session) -> object:
        op = node.op
        if op in ("&&", "and"):
            return to_bool(self._eval(node.left, frame, session)) and to_bool(
                self._eval(node.right, frame, session)
            )
        if op in ("||", "or"):
            return to_bool(self._eval(node.left, frame, session)) or to_bool(
                self._eval(node.right, frame, session)
            )
        if op == "??":
            left = self._eval(node.left, frame, session, quiet=True)
            return self._eval(node.right, frame, session) if left is None else left

        left = self._eval(node.left, frame, session)
        right = self._eval(node.right, frame, session)
        return self.apply_operator(op, left, right, node)

    def apply_operator(self, op: str, left: object, right: object, node: Node) -> object:
        """Apply a non-short-circuit binary operator to evaluated operands."""
        if op == ".":
            return to_string(left) + to_string(right)
        if op == "===":
            return strict_equals(left, right)
        if op == "!==":
            return not strict_equals(left, right)
        if op == "==":
            return loose_equals(left, right)
        if op == "!=":
            return not loose_equals(left, right)
        if op in ("<", "<=", ">", ">="):
            result = compare(left, right)
            return {
                "<": result < 0,
                "<=": result <= 0,
                ">": result > 0,
                ">=": result >= 0,
            }[op]
        if op == "+" and isinstance(left, PhpArray) and isinstance(right, PhpArray):
            union = left.copy()
            for key, value in right.items():
                if key not in union:
                    union.set(key, copy_value(value))
            return union
        if op == "%":
            return self._modulo(left, right, node)

        a = self._number(left, op, node)
        b = self._number(right, op, node)
        if op == "+":
            result: int | float = a + b
        elif op == "-":
            result = a - b
        elif op == "*":
            result = a * b
        elif op == "/":
            if b == 0:
                raise EvaluationError("Division by zero.", line=node.line)
            if isinstance(a, int) and isinstance(b, int) and a % b == 0:
                result = a // b
            else:
                result = a / b
        elif op == "**":
            result = self._power(a, b)
        else:
            raise EvaluationError(f"Unsupported operator '{op}'.", line=node.line)
        return clamp_int(result) if isinstance(result, int) else result

    def _modulo(self, left: object, right: object, node: Node) -> int:
        a = to_int(self._number(left, "%", node))
        b = to_int(self._number(right, "%", node))
        if b == 0:
            raise EvaluationError("Modulo by zero.", line=node.line)
        remainder = abs(a) % abs(b)
        return -remainder if a < 0 else remainder

    def _power(self, base: int | float, exponent: int | float) -> int | float:
        if isinstance(base, int) and isinstance(exponent, int) and exponent >= 0:
            if abs(base) <= 1 or exponent * math.log2(abs(base)) < 64:
                return base**exponent
        if base < 0 and not float(exponent).is_integer():
            return math.nan
        try:
            return float(base) ** exponent
        except ZeroDivisionError:
            return math.inf
        except OverflowError:
            odd = float(exponent).is_integer() and int(exponent) % 2 == 1
            return -math.inf if base < 0 and odd else math.inf

    def _cast(self, kind: str, value: object) -> object:
        if kind == "int":
            return to_int(value)
        if kind == "float":
            return to_float(value)
        if kind == "string":
            return to_string(value)
        if kind == "bool":
            return to_bool(value)
        return to_array(value)

    # Assignment

    def _assign(self, node: Assign, frame: _Frame, session: _Session) -> object:
        if node.op == "??=":
            current = self._eval(node.target, frame, session, quiet=True)
            if current is not None:
                return current
            value = self._eval(node.value, frame, session)
        elif node.op == "=":
            value = self._eval(node.value, frame, session)
        else:
            current = self._eval(node.target, frame, session)
            operand = self._eval(node.value, frame, session)
            value = self.apply_operator(node.op[:-1], current, operand, node)
        value = copy_value(value)
        self._store(node.target, value, frame, session)
        return value

    def _store(self, target: Node, value: object, frame: _Frame, session: _Session) -> None:
        if isinstance(target, Variable):
            if target.name == "this":
                raise EvaluationError("Cannot re-assign $this.", line=target.line)
            session.variables[target.name] = value
            return

        chain: list[Index] = []
        cursor: Node = target
        while isinstance(cursor, Index):
            chain.append(cursor)
            cursor = cursor.target
        if not isinstance(cursor, Variable):
            raise EvaluationError("Cannot assign to this expression.", line=target.line)
        chain.reverse()

        root = session.variables.get(cursor.name)
        if root is None:
            root = PhpArray()
            session.variables[cursor.name] = root
        container = self._writable(root, target.line)

        for step in chain[:-1]:
            if step.index is None:
                child = PhpArray()
                container.append(child)
            else:
                key = self._key(self._eval(step.index, frame, session), step.line)
                child = container.get(key)
                if child is None:
                    child = PhpArray()
                    container.set(key, child)
            container = self._writable(child, step.line)

        last = chain[-1]
        if last.index is None:
            container.append(value)
        else:
            key = self._key(self._eval(last.index, frame, session), last.line)
            container.set(key, value)

    def _writable(self, value: object, line: int) -> PhpArray:
        if isinstance(value, PhpArray):
            return value
        if value is False:
            raise EvaluationError("Automatic conversion of false to array is not supported.", line=line)
        raise EvaluationError("Cannot use a scalar value as an array.", line=line)

    # Calls

    def _call(self, node: Call, frame: _Frame, session: _Session) -> object:
        name = node.name.rsplit("\\", 1)[-1].lower()
        args = [self._eval(arg, frame, session) for arg in node.args]
        if name == "define":
            if len(args) < 2:
                raise EvaluationError("define() expects 2 arguments.", line=node.line)
            return self._define(to_string(args[0]), args[1], node, session)
        if name == "defined":
            constant = to_string(args[0]) if args else ""
            return constant in session.constants or constant in _BUILTIN_CONSTANTS
        if name == "constant":
            return self._constant(ConstantRef(node.line, to_string(args[0]) if args else ""), frame, session)

        function = self.functions.get(name)
        if function is None:
            raise EvaluationError(f"Call to unsupported function {node.name}().", line=node.line)
        try:
            return function(*args)
        except EvaluationError as exc:
            raise EvaluationError(exc.message, line=node.line) from exc
        except (TypeError, ValueError, OverflowError) as exc:
            raise EvaluationError(f"{node.name}(): invalid arguments ({exc}).", line=node.line) from exc

    # Includes

    def _include(self, node: Include, frame: _Frame, session: _Session) -> object:
        raw = to_string(self._eval(node.path, frame, session))
        required = node.kind.startswith("require")
        target = self._locate(raw, frame)
        if target is None:
            if required:
                raise EvaluationError(f"Failed opening required '{raw}'.", line=node.line)
            logger.warning("include(%s): Failed to open stream on line %d", raw, node.line)
            return False

        if node.kind.endswith("_once") and target in session.included:
            return True
        if session.depth >= self.max_include_depth:
            raise EvaluationError(
                f"Include depth limit ({self.max_include_depth}) exceeded.", line=node.line
            )

        session.included.add(target)
        session.depth += 1
        try:
            returned = self._run_file(target, session)
        finally:
            session.depth -= 1
        return 1 if returned is _MISSING else returned

    def _locate(self, raw: str, frame: _Frame) -> Path | None:
        candidate = Path(raw)
        if candidate.is_absolute():
            options = [candidate]
        else:
            options = [Path.cwd() / candidate, frame.path.parent / candidate]
        for option in options:
            if option.is_file():
                return option.resolve()
        return None
