"""Tokenizer for the PHP configuration subset."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from conf2json.errors import EvaluationError

type TokenKind = Literal[
    "INT", "FLOAT", "STRING", "TEMPLATE", "VARIABLE", "IDENT", "OP", "EOF"
]

# Interpolated string parts: literal text, ("var", name, key) or ("expr", code, line).
type TemplatePart = str | tuple[str, str, object]


@dataclass(frozen=True)
class Token:
    """A lexical token with its 1-based source line."""

    kind: TokenKind
    value: object
    line: int


_OPERATORS = (
    "...", "===", "!==", "??=", "**", "==", "!=", "<>", "<=", ">=", "&&", "||",
    "??", "=>", "::", ".=", "+=", "-=", "*=", "/=", "->",
    "+", "-", "*", "/", "%", ".", "=", "!", "<", ">", "?", ":", "(", ")", "[",
    "]", ",", ";", "{", "}", "@",
)

_NAME = r"[A-Za-z_\x80-\U0010ffff][A-Za-z0-9_\x80-\U0010ffff]*"
_NAME_RE = re.compile(_NAME)
_IDENT_RE = re.compile(rf"\\?{_NAME}(?:\\{_NAME})*")
_VARIABLE_RE = re.compile(rf"\$({_NAME})")
_NUMBER_RE = re.compile(
    r"""
    0[xX][0-9a-fA-F](?:_?[0-9a-fA-F])*
    | 0[bB][01](?:_?[01])*
    | 0[oO][0-7](?:_?[0-7])*
    | (?:\d(?:_?\d)*)?\.\d(?:_?\d)*(?:[eE][+-]?\d(?:_?\d)*)?
    | \d(?:_?\d)*\.(?:\d(?:_?\d)*)?(?:[eE][+-]?\d(?:_?\d)*)?
    | \d(?:_?\d)*[eE][+-]?\d(?:_?\d)*
    | \d(?:_?\d)*
    """,
    re.VERBOSE,
)
_OPEN_TAG_RE = re.compile(r"\A(?:\ufeff)?(?:#![^\n]*\n)?\s*<\?php(?=\s|$)", re.IGNORECASE)
_INT_MAX = 2**63 - 1

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "\\": "\\",
    "$": "$",
    '"': '"',
}


def _parse_number(text: str, line: int) -> Token:
    digits = text.replace("_", "")
    lowered = digits.lower()
    if lowered.startswith(("0x", "0b", "0o")):
        base = {"x": 16, "b": 2, "o": 8}[lowered[1]]
        value = int(digits[2:], base)
    elif any(ch in lowered for ch in ".e"):
        return Token("FLOAT", float(digits), line)
    elif len(digits) > 1 and digits.startswith("0"):
        if any(ch in "89" for ch in digits):
            raise EvaluationError(f"Invalid numeric literal '{text}'", line=line)
        value = int(digits, 8)
    else:
        value = int(digits)
    if value > _INT_MAX:
        return Token("FLOAT", float(value), line)
    return Token("INT", value, line)


class Lexer:
    """Split PHP source into tokens.

    Parameters
    ----------
    source : str
        Full file content, starting with an optional BOM or shebang line
        followed by ``<?php``.
    embedded : bool, default=False
        Treat ``source`` as a bare expression without an open tag. Used for
        ``{$...}`` string interpolation.
    line : int, default=1
        Line number of the first character of ``source``.
    """

    def __init__(self, source: str, *, embedded: bool = False, line: int = 1) -> None:
        self.source = source
        self.pos = 0
        self.line = line
        self.embedded = embedded

    def _error(self, message: str) -> EvaluationError:
        return EvaluationError(message, line=self.line)

    def _advance(self, count: int) -> str:
        chunk = self.source[self.pos : self.pos + count]
        self.line += chunk.count("\n")
        self.pos += count
        return chunk

    def _skip_open_tag(self) -> None:
        match = _OPEN_TAG_RE.match(self.source)
        if match is None:
            raise self._error("Source must start with a '<?php' open tag.")
        self._advance(match.end())

    def _skip_trivia(self) -> None:
        source = self.source
        while self.pos < len(source):
            char = source[self.pos]
            if char in " \t\r\n\f\v":
                self._advance(1)
            elif source.startswith("/*", self.pos):
                end = source.find("*/", self.pos + 2)
                if end < 0:
                    raise self._error("Unterminated comment.")
                self._advance(end + 2 - self.pos)
            elif source.startswith("//", self.pos) or (
                char == "#" and not source.startswith("#[", self.pos)
            ):
                end = self.pos
                while end < len(source) and source[end] != "\n":
                    if source.startswith("?>", end):
                        break
                    end += 1
                self._advance(end - self.pos)
            else:
                return

    def tokens(self) -> list[Token]:
        """Tokenize the whole source."""
        if not self.embedded:
            self._skip_open_tag()
        result: list[Token] = []
        while True:
            self._skip_trivia()
            if self.pos >= len(self.source):
                break
            if self.source.startswith("?>", self.pos):
                if self.embedded:
                    raise self._error("Unexpected '?>'.")
                result.append(Token("OP", ";", self.line))
                self._advance(2)
                trailing = self.source[self.pos :]
                if trailing.strip():
                    raise self._error("Inline content after '?>' is not supported.")
                break
            result.append(self._next_token())
        result.append(Token("EOF", None, self.line))
        return result

    def _next_token(self) -> Token:
        source = self.source
        char = source[self.pos]
        line = self.line

        if char == "$":
            match = _VARIABLE_RE.match(source, self.pos)
            if match is None:
                raise self._error("Variable variables are not supported.")
            self._advance(match.end() - self.pos)
            return Token("VARIABLE", match.group(1), line)

        if char.isdigit() or (char == "." and source[self.pos + 1 : self.pos + 2].isdigit()):
            match = _NUMBER_RE.match(source, self.pos)
            assert match is not None
            self._advance(match.end() - self.pos)
            return _parse_number(match.group(0), line)

        if char == "'":
            return Token("STRING", self._single_quoted(), line)
        if char == '"':
            return Token("TEMPLATE", self._double_quoted(), line)
        if char == "`":
            raise self._error("Shell execution (backticks) is not supported.")
        if source.startswith("<<<", self.pos):
            raise self._error("Heredoc and nowdoc strings are not supported.")

        match = _IDENT_RE.match(source, self.pos)
        if match is not None:
            self._advance(match.end() - self.pos)
            return Token("IDENT", match.group(0).lstrip("\\"), line)

        for op in _OPERATORS:
            if source.startswith(op, self.pos):
                self._advance(len(op))
                return Token("OP", op, line)
        raise self._error(f"Unexpected character {char!r}.")

    def _single_quoted(self) -> str:
        source = self.source
        index = self.pos + 1
        chunks: list[str] = []
        while index < len(source):
            char = source[index]
            if char == "\\" and source[index + 1 : index + 2] in ("'", "\\"):
                chunks.append(source[index + 1])
                index += 2
            elif char == "'":
                self._advance(index + 1 - self.pos)
                return "".join(chunks)
            else:
                chunks.append(char)
                index += 1
        raise self._error("Unterminated string literal.")

    def _double_quoted(self) -> list[TemplatePart]:
        source = self.source
        index = self.pos + 1
        line = self.line
        parts: list[TemplatePart] = []
        text: list[str] = []

        def flush() -> None:
            if text:
                parts.append("".join(text))
                text.clear()

        while index < len(source):
            char = source[index]
            if char == '"':
                flush()
                self._advance(index + 1 - self.pos)
                return parts
            if char == "\\":
                consumed, value = self._escape(index)
                text.append(value)
                index += consumed
                continue
            if char == "$" and _NAME_RE.match(source, index + 1):
                flush()
                index = self._simple_interpolation(index, parts)
                continue
            if char == "{" and source.startswith("{$", index):
                flush()
                end = self._matching_brace(index)
                code = source[index + 1 : end]
                parts.append(("expr", code, line))
                line += code.count("\n")
                index = end + 1
                continue
            if char == "\n":
                line += 1
            text.append(char)
            index += 1
        raise self._error("Unterminated string literal.")

    def _escape(self, index: int) -> tuple[int, str]:
        source = self.source
        nxt = source[index + 1 : index + 2]
        if nxt in _SIMPLE_ESCAPES:
            return 2, _SIMPLE_ESCAPES[nxt]
        octal = re.match(r"[0-7]{1,3}", source[index + 1 : index + 4])
        if octal:
            return 1 + octal.end(), chr(int(octal.group(0), 8) & 0xFF)
        hexa = re.match(r"x([0-9A-Fa-f]{1,2})", source[index + 1 : index + 4])
        if hexa:
            return 1 + hexa.end(), chr(int(hexa.group(1), 16))
        uni = re.match(r"u\{([0-9A-Fa-f]+)\}", source[index + 1 :])
        if uni:
            return 1 + uni.end(), chr(int(uni.group(1), 16))
        return 1, "\\"

    def _simple_interpolation(self, index: int, parts: list[TemplatePart]) -> int:
        source = self.source
        match = _NAME_RE.match(source, index + 1)
        assert match is not None
        name = match.group(0)
        index = match.end()
        key: str | int | None = None
        offset = re.match(rf"\[(-?\d+|{_NAME})\]", source[index:])
        if offset:
            raw = offset.group(1)
            key = int(raw) if raw.lstrip("-").isdigit() else raw
            index += offset.end()
        parts.append(("var", name, key))
        return index

    def _matching_brace(self, start: int) -> int:
        depth = 0
        index = start
        quote: str | None = None
        source = self.source
        while index < len(source):
            char = source[index]
            if quote:
                if char == "\\":
                    index += 2
                    continue
                if char == quote:
                    quote = None
            elif char in "'\"":
                quote = char
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return index
            index += 1
        raise self._error("Unterminated '{$' interpolation.")


def tokenize(source: str) -> list[Token]:
    """Tokenize a complete PHP file."""
    return Lexer(source).tokens()
