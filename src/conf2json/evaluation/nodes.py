"""Syntax tree for the PHP configuration subset."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Node:
    line: int


# Expressions


@dataclass(frozen=True)
class Literal(Node):
    value: object


@dataclass(frozen=True)
class Interpolated(Node):
    parts: tuple[str | Node, ...]


@dataclass(frozen=True)
class Variable(Node):
    name: str


@dataclass(frozen=True)
class ConstantRef(Node):
    name: str


@dataclass(frozen=True)
class ArrayItem(Node):
    key: Node | None
    value: Node
    spread: bool = False


@dataclass(frozen=True)
class ArrayLiteral(Node):
    items: tuple[ArrayItem, ...]


@dataclass(frozen=True)
class Index(Node):
    """``target[index]``; ``index`` is ``None`` for the append form ``[]``."""

    target: Node
    index: Node | None


@dataclass(frozen=True)
class Unary(Node):
    op: str
    operand: Node


@dataclass(frozen=True)
class Binary(Node):
    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class Ternary(Node):
    """``condition ? then : otherwise``; ``then`` is ``None`` for ``?:``."""

    condition: Node
    then: Node | None
    otherwise: Node


@dataclass(frozen=True)
class Cast(Node):
    kind: str
    operand: Node


@dataclass(frozen=True)
class Call(Node):
    name: str
    args: tuple[Node, ...]


@dataclass(frozen=True)
class Include(Node):
    kind: str
    path: Node


@dataclass(frozen=True)
class Assign(Node):
    """Assignment; ``op`` is ``"="`` or a compound operator such as ``".="``."""

    op: str
    target: Variable | Index
    value: Node


# Statements


@dataclass(frozen=True)
class Return(Node):
    value: Node | None


@dataclass(frozen=True)
class ExpressionStatement(Node):
    expression: Node


@dataclass(frozen=True)
class ConstDeclaration(Node):
    name: str
    value: Node
