"""Pratt parser for the PHP configuration subset."""

from __future__ import annotations

from conf2json.errors import EvaluationError
from conf2json.evaluation.lexer import Lexer, TemplatePart, Token, tokenize
from conf2json.evaluation.nodes import (
    ArrayItem,
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

# Left binding powers of infix operators, lowest first.
_INFIX_POWER = {
    "or": 1,
    "and": 2,
    "=": 3,
    "+=": 3,
    "-=": 3,
    "*=": 3,
    "/=": 3,
    ".=": 3,
    "??=": 3,
    "?": 4,
    "??": 5,
    "||": 6,
    "&&": 7,
    "==": 8,
    "!=": 8,
    "<>": 8,
    "===": 8,
    "!==": 8,
    "<": 9,
    "<=": 9,
    ">": 9,
    ">=": 9,
    ".": 10,
    "+": 11,
    "-": 11,
    "*": 12,
    "/": 12,
    "%": 12,
    "**": 14,
}
_ASSIGNMENTS = {"=", "+=", "-=", "*=", "/=", ".=", "??="}
_RIGHT_ASSOCIATIVE = _ASSIGNMENTS | {"??", "**"}
_PREFIX_POWER = 13

_CASTS = {
    "int": "int",
    "integer": "int",
    "float": "float",
    "double": "float",
    "string": "string",
    "bool": "bool",
    "boolean": "bool",
    "array": "array",
}
_INCLUDES = {"require", "require_once", "include", "include_once"}
_UNSUPPORTED = {
    "if", "else", "elseif", "foreach", "for", "while", "do", "switch", "match",
    "function", "fn", "class", "interface", "trait", "enum", "new", "echo",
    "print", "exit", "die", "eval", "goto", "try", "throw", "global", "static",
    "list", "isset", "unset", "empty", "clone", "yield", "abstract", "final",
}


class Parser:
    """Build statement nodes from a token stream."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def _peek(self, offset: int = 1) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != "EOF":
            self.pos += 1
        return token

    def _error(self, message: str, token: Token | None = None) -> EvaluationError:
        return EvaluationError(message, line=(token or self.current).line)

    def _is_op(self, value: str, token: Token | None = None) -> bool:
        token = token or self.current
        return token.kind == "OP" and token.value == value

    def _expect_op(self, value: str) -> Token:
        if not self._is_op(value):
            raise self._error(f"Expected '{value}' but found {self._describe()}.")
        return self._advance()

    def _describe(self, token: Token | None = None) -> str:
        token = token or self.current
        if token.kind == "EOF":
            return "end of file"
        if token.kind in ("OP", "IDENT"):
            return f"'{token.value}'"
        return token.kind.lower()

    # Statements

    def parse_program(self) -> list[Node]:
        """Parse every statement up to end of input."""
        statements: list[Node] = []
        while self.current.kind != "EOF":
            statements.extend(self._statement())
        return statements

    def _end_statement(self) -> None:
        if self.current.kind == "EOF":
            return
        self._expect_op(";")

    def _skip_to_semicolon(self) -> None:
        while self.current.kind != "EOF" and not self._is_op(";"):
            if self._is_op("{"):
                raise self._error("Block declarations are not supported.")
            self._advance()
        self._end_statement()

    def _statement(self) -> list[Node]:
        token = self.current
        if self._is_op(";"):
            self._advance()
            return []
        keyword = str(token.value).lower() if token.kind == "IDENT" else None
        if keyword == "return":
            self._advance()
            value = None
            if not self._is_op(";") and self.current.kind != "EOF":
                value = self.parse_expression()
            self._end_statement()
            return [Return(token.line, value)]
        if keyword in ("declare", "namespace", "use"):
            self._advance()
            self._skip_to_semicolon()
            return []
        if keyword == "const":
            return self._const_declarations()
        expression = self.parse_expression()
        self._end_statement()
        return [ExpressionStatement(token.line, expression)]

    def _const_declarations(self) -> list[Node]:
        self._advance()
        declarations: list[Node] = []
        while True:
            name = self._advance()
            if name.kind != "IDENT":
                raise self._error("Expected constant name.", name)
            self._expect_op("=")
            declarations.append(
                ConstDeclaration(name.line, str(name.value), self.parse_expression())
            )
            if not self._is_op(","):
                break
            self._advance()
        self._end_statement()
        return declarations

    # Expressions

    def parse_expression(self, min_power: int = 0) -> Node:
        """Parse an expression whose operators bind tighter than ``min_power``."""
        left = self._prefix()
        while True:
            token = self.current
            op = self._infix_operator(token)
            if op is None:
                return left
            power = _INFIX_POWER[op]
            if power <= min_power:
                return left
            self._advance()
            left = self._infix(op, token, left, power)

    def _infix_operator(self, token: Token) -> str | None:
        if token.kind == "OP" and token.value in _INFIX_POWER:
            return str(token.value)
        if token.kind == "IDENT" and str(token.value).lower() in ("and", "or"):
            return str(token.value).lower()
        return None

    def _infix(self, op: str, token: Token, left: Node, power: int) -> Node:
        if op == "?":
            if self._is_op(":"):
                self._advance()
                return Ternary(token.line, left, None, self.parse_expression(power))
            then = self.parse_expression()
            self._expect_op(":")
            return Ternary(token.line, left, then, self.parse_expression(power))
        right_power = power - 1 if op in _RIGHT_ASSOCIATIVE else power
        right = self.parse_expression(right_power)
        if op in _ASSIGNMENTS:
            if not isinstance(left, (Variable, Index)):
                raise self._error("Cannot assign to this expression.", token)
            return Assign(token.line, op, left, right)
        if op == "<>":
            op = "!="
        return Binary(token.line, op, left, right)

    def _prefix(self) -> Node:
        token = self._advance()
        kind = token.kind
        if kind in ("INT", "FLOAT", "STRING"):
            node: Node = Literal(token.line, token.value)
        elif kind == "TEMPLATE":
            node = self._template(token)
        elif kind == "VARIABLE":
            node = Variable(token.line, str(token.value))
        elif kind == "IDENT":
            node = self._identifier(token)
        elif kind == "OP":
            node = self._prefix_operator(token)
        else:
            raise self._error("Unexpected end of file.", token)
        return self._postfix(node)

    def _prefix_operator(self, token: Token) -> Node:
        value = token.value
        if value == "[":
            return ArrayLiteral(token.line, self._array_items("]"))
        if value == "(":
            cast = self._cast_name()
            if cast is not None:
                self._advance()
                self._advance()
                return Cast(token.line, cast, self.parse_expression(_PREFIX_POWER))
            inner = self.parse_expression()
            self._expect_op(")")
            return inner
        if value in ("-", "+", "!"):
            return Unary(token.line, str(value), self.parse_expression(_PREFIX_POWER))
        if value == "@":
            return self.parse_expression(_PREFIX_POWER)
        raise self._error(f"Unexpected {self._describe(token)}.", token)

    def _cast_name(self) -> str | None:
        name = self.current
        if name.kind != "IDENT" or not self._is_op(")", self._peek()):
            return None
        if str(name.value).lower() == "object":
            raise self._error("Classes and objects are not supported.", name)
        return _CASTS.get(str(name.value).lower())

    def _identifier(self, token: Token) -> Node:
        name = str(token.value)
        lowered = name.lower()
        if lowered == "array" and self._is_op("("):
            self._advance()
            return ArrayLiteral(token.line, self._array_items(")"))
        if lowered in ("true", "false", "null"):
            return Literal(token.line, {"true": True, "false": False, "null": None}[lowered])
        if lowered in _INCLUDES:
            return Include(token.line, lowered, self.parse_expression(_INFIX_POWER["and"]))
        if self._is_op("::") or self._is_op("->"):
            raise self._error("Classes and objects are not supported.")
        if lowered in _UNSUPPORTED:
            raise self._error(f"Unsupported construct '{name}'.", token)
        if self._is_op("("):
            self._advance()
            return Call(token.line, name, self._arguments())
        return ConstantRef(token.line, name)

    def _arguments(self) -> tuple[Node, ...]:
        args: list[Node] = []
        while not self._is_op(")"):
            if self._is_op("..."):
                raise self._error("Argument unpacking is not supported.")
            args.append(self.parse_expression())
            if not self._is_op(","):
                break
            self._advance()
        self._expect_op(")")
        return tuple(args)

    def _array_items(self, closing: str) -> tuple[ArrayItem, ...]:
        items: list[ArrayItem] = []
        while not self._is_op(closing):
            start = self.current
            if self._is_op("..."):
                self._advance()
                items.append(ArrayItem(start.line, None, self.parse_expression(), spread=True))
            else:
                first = self.parse_expression()
                if self._is_op("=>"):
                    self._advance()
                    items.append(ArrayItem(start.line, first, self.parse_expression()))
                else:
                    items.append(ArrayItem(start.line, None, first))
            if not self._is_op(","):
                break
            self._advance()
        self._expect_op(closing)
        return tuple(items)

    def _postfix(self, node: Node) -> Node:
        while self._is_op("["):
            token = self._advance()
            if self._is_op("]"):
                self._advance()
                node = Index(token.line, node, None)
                continue
            index = self.parse_expression()
            self._expect_op("]")
            node = Index(token.line, node, index)
        return node

    def _template(self, token: Token) -> Node:
        parts: list[str | Node] = []
        raw_parts: list[TemplatePart] = token.value  # type: ignore[assignment]
        for part in raw_parts:
            if isinstance(part, str):
                parts.append(part)
                continue
            kind, payload, extra = part
            if kind == "var":
                node: Node = Variable(token.line, payload)
                if extra is not None:
                    node = Index(token.line, node, Literal(token.line, extra))
                parts.append(node)
            else:
                assert isinstance(extra, int)
                parts.append(parse_embedded(payload, extra))
        if all(isinstance(part, str) for part in parts):
            return Literal(token.line, "".join(parts))  # type: ignore[arg-type]
        return Interpolated(token.line, tuple(parts))


def parse_embedded(code: str, line: int) -> Node:
    """Parse the expression inside a ``{$...}`` interpolation."""
    parser = Parser(Lexer(code, embedded=True, line=line).tokens())
    expression = parser.parse_expression()
    if parser.current.kind != "EOF":
        raise parser._error("Unexpected content in string interpolation.")
    return expression


def parse(source: str) -> list[Node]:
    """Parse a complete PHP configuration file into statements."""
    return Parser(tokenize(source)).parse_program()
