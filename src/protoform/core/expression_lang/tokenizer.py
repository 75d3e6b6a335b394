"""
Tokenizer for visibility expressions.

One compiled pattern scans the source left to right. Renderers have stored
JavaScript spellings over the years, so ``===``, ``!==``, ``&&``, ``||``,
``!`` and ``undefined`` are folded onto ``==``, ``!=``, ``and``, ``or``,
``not`` and ``null`` here and the parser only sees the canonical forms.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from protoform.core.errors import ExpressionError


class TokenKind(StrEnum):
    NUMBER = "number"
    STRING = "string"
    NAME = "name"
    KEYWORD = "keyword"
    OP = "op"
    EOF = "eof"


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    value: str
    pos: int


KEYWORDS = frozenset({"true", "false", "null", "and", "or", "not", "in", "is"})

_ALIASES = {
    "===": "==",
    "!==": "!=",
    "&&": "and",
    "||": "or",
    "!": "not",
    "undefined": "null",
}

_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
  | (?P<number>\d+(?:\.\d+)?)
  | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
  | (?P<name>[A-Za-z_$][A-Za-z0-9_$]*)
  | (?P<op>===|!==|==|!=|<=|>=|&&|\|\||[!<>()\[\],.\-])
    """,
    re.VERBOSE | re.ASCII | re.DOTALL,
)

_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


class ExpressionTokenError(ExpressionError):
    """Error during expression tokenization."""

    def __init__(self, message: str, pos: int) -> None:
        super().__init__(message)
        self.pos = pos


def _word_token(text: str, pos: int, fallback: TokenKind) -> Token:
    word = _ALIASES.get(text, text)
    return Token(TokenKind.KEYWORD if word in KEYWORDS else fallback, word, pos)


def tokenize(source: str) -> list[Token]:
    """
    Split an expression into tokens, ending with an ``EOF`` token.

    Raises:
        ExpressionTokenError: On an unterminated string or a character
            outside the grammar
    """
    tokens: list[Token] = []
    pos = 0
    while pos < len(source):
        m = _TOKEN_RE.match(source, pos)
        if m is None:
            if source[pos] in "\"'":
                raise ExpressionTokenError("Unterminated string literal", pos)
            raise ExpressionTokenError(f"Unexpected character: {source[pos]!r}", pos)

        text = m.group()
        if m.lastgroup == "number":
            tokens.append(Token(TokenKind.NUMBER, text, pos))
        elif m.lastgroup == "string":
            tokens.append(Token(TokenKind.STRING, _ESCAPE_RE.sub(r"\1", text[1:-1]), pos))
        elif m.lastgroup == "name":
            tokens.append(_word_token(text, pos, TokenKind.NAME))
        elif m.lastgroup == "op":
            tokens.append(_word_token(text, pos, TokenKind.OP))
        pos = m.end()

    tokens.append(Token(TokenKind.EOF, "", len(source)))
    return tokens
