"""
Recursive descent parser for visibility expressions.

Grammar, loosest binding first::

    disjunction := conjunction ("or" conjunction)*
    conjunction := negation ("and" negation)*
    negation    := "not" negation | comparison
    comparison  := operand ( CMP operand
                           | "not"? "in" list
                           | "is" "not"? "null" )?
    operand     := "(" disjunction ")" | "-"? NUMBER | STRING
                 | "true" | "false" | "null" | NAME ("." NAME)*
    list        := "[" (disjunction ("," disjunction)*)? "]"
"""

from __future__ import annotations

from collections.abc import Callable

from protoform.core.errors import ExpressionError
from protoform.core.expression_lang.tokenizer import (
    ExpressionTokenError,
    Token,
    TokenKind,
    tokenize,
)
from protoform.core.ir.expressions import (
    CompareOp,
    Comparison,
    Expr,
    FieldRef,
    Literal,
    Logical,
    LogicalOp,
    Membership,
    Not,
    NullCheck,
)


class ExpressionParseError(ExpressionError):
    """Error during expression parsing."""

    def __init__(self, message: str, pos: int = 0) -> None:
        super().__init__(message)
        self.pos = pos


_COMPARE_OPS = {op.value: op for op in CompareOp}
_CONSTANTS: dict[str, bool | None] = {"true": True, "false": False, "null": None}


def _number(text: str) -> int | float:
    return float(text) if "." in text else int(text)


def _describe(token: Token) -> str:
    return repr(token.value) if token.kind != TokenKind.EOF else "end of input"


class _ExprParser:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._index = 0

    @property
    def _token(self) -> Token:
        return self._tokens[self._index]

    def _at(self, kind: TokenKind, value: str | None = None, ahead: int = 0) -> bool:
        token = self._tokens[min(self._index + ahead, len(self._tokens) - 1)]
        return token.kind == kind and (value is None or token.value == value)

    def _take(self) -> Token:
        token = self._token
        if token.kind != TokenKind.EOF:
            self._index += 1
        return token

    def _accept(self, kind: TokenKind, value: str | None = None) -> bool:
        if self._at(kind, value):
            self._take()
            return True
        return False

    def _require(self, kind: TokenKind, value: str | None = None) -> Token:
        if not self._at(kind, value):
            raise ExpressionParseError(
                f"Expected {value or kind.value!r}, got {_describe(self._token)}",
                self._token.pos,
            )
        return self._take()

    def parse(self) -> Expr:
        expr = self._disjunction()
        if not self._at(TokenKind.EOF):
            raise ExpressionParseError(
                f"Unexpected {_describe(self._token)} after expression", self._token.pos
            )
        return expr

    def _logical(self, op: LogicalOp, operand: Callable[[], Expr]) -> Expr:
        operands = [operand()]
        while self._accept(TokenKind.KEYWORD, op.value):
            operands.append(operand())
        if len(operands) == 1:
            return operands[0]
        return Logical(op=op, operands=operands)

    def _disjunction(self) -> Expr:
        return self._logical(LogicalOp.OR, self._conjunction)

    def _conjunction(self) -> Expr:
        return self._logical(LogicalOp.AND, self._negation)

    def _negation(self) -> Expr:
        if self._accept(TokenKind.KEYWORD, "not"):
            return Not(operand=self._negation())
        return self._comparison()

    def _comparison(self) -> Expr:
        left = self._operand()
        token = self._token

        if token.kind == TokenKind.OP and token.value in _COMPARE_OPS:
            self._take()
            return Comparison(op=_COMPARE_OPS[token.value], left=left, right=self._operand())
        if self._accept(TokenKind.KEYWORD, "is"):
            negated = self._accept(TokenKind.KEYWORD, "not")
            self._require(TokenKind.KEYWORD, "null")
            return NullCheck(value=left, negated=negated)
        if self._at(TokenKind.KEYWORD, "not") and self._at(TokenKind.KEYWORD, "in", ahead=1):
            self._take()
            self._take()
            return Membership(value=left, items=self._list(), negated=True)
        if self._accept(TokenKind.KEYWORD, "in"):
            return Membership(value=left, items=self._list())
        return left

    def _operand(self) -> Expr:
        token = self._take()

        if token.kind == TokenKind.OP and token.value == "(":
            expr = self._disjunction()
            self._require(TokenKind.OP, ")")
            return expr
        if token.kind == TokenKind.OP and token.value == "-":
            return Literal(value=-_number(self._require(TokenKind.NUMBER).value))
        if token.kind == TokenKind.NUMBER:
            return Literal(value=_number(token.value))
        if token.kind == TokenKind.STRING:
            return Literal(value=token.value)
        if token.kind == TokenKind.KEYWORD and token.value in _CONSTANTS:
            return Literal(value=_CONSTANTS[token.value])
        if token.kind == TokenKind.NAME:
            path = [token.value]
            while self._accept(TokenKind.OP, "."):
                path.append(self._require(TokenKind.NAME).value)
            return FieldRef(path=path)

        raise ExpressionParseError(f"Unexpected {_describe(token)}", token.pos)

    def _list(self) -> list[Expr]:
        self._require(TokenKind.OP, "[")
        items: list[Expr] = []
        if not self._at(TokenKind.OP, "]"):
            items.append(self._disjunction())
            while self._accept(TokenKind.OP, ","):
                items.append(self._disjunction())
        self._require(TokenKind.OP, "]")
        return items


def parse_expr(source: str) -> Expr:
    """
    Parse a ``visibleWhen`` expression.

    Raises:
        ExpressionParseError: If the text cannot be tokenized or does not
            fit the grammar
    """
    try:
        tokens = tokenize(source)
    except ExpressionTokenError as e:
        raise ExpressionParseError(e.message, e.pos) from e
    return _ExprParser(tokens).parse()
