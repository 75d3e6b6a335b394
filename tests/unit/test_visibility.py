"""Tests for the visibility expression language and field visibility."""

from __future__ import annotations

from typing import Any

import pytest

from protoform.core.expression_lang import (
    ExpressionEvalError,
    ExpressionParseError,
    evaluate,
    parse_expr,
    tokenize,
)
from protoform.core.expression_lang.tokenizer import TokenKind
from protoform.core.ir import (
    CompareOp,
    Comparison,
    FieldRef,
    Literal,
    Logical,
    LogicalOp,
    Membership,
    Not,
    NullCheck,
    RuntimeFieldSchema,
    RuntimeFormSchema,
)
from protoform.runtime.visibility import is_visible, visible_fields


class TestTokenizer:
    def test_js_operators_are_folded(self) -> None:
        tokens = tokenize("a === 1 && !b || c !== 2")
        assert [(t.kind, t.value) for t in tokens] == [
            (TokenKind.NAME, "a"),
            (TokenKind.OP, "=="),
            (TokenKind.NUMBER, "1"),
            (TokenKind.KEYWORD, "and"),
            (TokenKind.KEYWORD, "not"),
            (TokenKind.NAME, "b"),
            (TokenKind.KEYWORD, "or"),
            (TokenKind.NAME, "c"),
            (TokenKind.OP, "!="),
            (TokenKind.NUMBER, "2"),
            (TokenKind.EOF, ""),
        ]

    def test_undefined_is_null(self) -> None:
        token = tokenize("undefined")[0]
        assert (token.kind, token.value) == (TokenKind.KEYWORD, "null")

    def test_string_escape(self) -> None:
        token = tokenize(r'"say \"hi\""')[0]
        assert token.kind == TokenKind.STRING
        assert token.value == 'say "hi"'

    def test_positions(self) -> None:
        assert [t.pos for t in tokenize("ab <= 'x'")] == [0, 3, 6, 9]

    @pytest.mark.parametrize("source", ["a # b", "a = 1", "a == ²", "été == 1"])
    def test_unexpected_character(self, source: str) -> None:
        with pytest.raises(ExpressionParseError, match="Unexpected character"):
            parse_expr(source)

    def test_unterminated_string(self) -> None:
        with pytest.raises(ExpressionParseError, match="Unterminated string"):
            parse_expr("a == 'open")


class TestParser:
    def test_comparison(self) -> None:
        expr = parse_expr('status == "active"')
        assert expr == Comparison(
            op=CompareOp.EQ, left=FieldRef(path=["status"]), right=Literal(value="active")
        )

    def test_precedence(self) -> None:
        expr = parse_expr("a or b and not c")
        assert expr == Logical(
            op=LogicalOp.OR,
            operands=[
                FieldRef(path=["a"]),
                Logical(
                    op=LogicalOp.AND,
                    operands=[FieldRef(path=["b"]), Not(operand=FieldRef(path=["c"]))],
                ),
            ],
        )

    def test_chains_stay_flat(self) -> None:
        expr = parse_expr("a && b && (c || d)")
        assert isinstance(expr, Logical)
        assert expr.op == LogicalOp.AND
        assert len(expr.operands) == 3
        assert isinstance(expr.operands[2], Logical)

    def test_in_and_not_in(self) -> None:
        expr = parse_expr('kind not in ["a", "b"]')
        assert isinstance(expr, Membership)
        assert expr.negated is True
        assert expr.items == [Literal(value="a"), Literal(value="b")]
        assert parse_expr("kind in []") == Membership(value=FieldRef(path=["kind"]), items=[])

    def test_is_not_null(self) -> None:
        assert parse_expr("address.city is not null") == NullCheck(
            value=FieldRef(path=["address", "city"]), negated=True
        )
        assert parse_expr("city is null") == NullCheck(value=FieldRef(path=["city"]))

    def test_numbers(self) -> None:
        assert parse_expr("-3") == Literal(value=-3)
        assert parse_expr("2.5") == Literal(value=2.5)

    @pytest.mark.parametrize("source", ["a ==", "(a", "a b", '"open', "a in b", "a is 1", "- x", "a."])
    def test_invalid(self, source: str) -> None:
        with pytest.raises(ExpressionParseError):
            parse_expr(source)


class TestEvaluator:
    @pytest.mark.parametrize(
        "source,context,expected",
        [
            ('status == "active"', {"status": "active"}, True),
            ("amount > 100 and amount <= 200", {"amount": 150}, True),
            ("amount >= 10", {"amount": None}, False),
            ("a.b.c == 1", {"a": {"b": {"c": 1}}}, True),
            ("missing == null", {}, True),
            ('kind in ["x", "y"]', {"kind": "y"}, True),
            ("flag || other", {"flag": False, "other": True}, True),
            ("!flag", {"flag": False}, True),
            ("a and b and c", {"a": 1, "b": 2, "c": 0}, False),
            ("note is null", {}, True),
            ("note is not null", {"note": ""}, True),
            ('kind not in ["x", "y"]', {"kind": "y"}, False),
            ("score >= -1.5", {"score": -1}, True),
        ],
    )
    def test_evaluate(self, source: str, context: dict[str, Any], expected: bool) -> None:
        assert bool(evaluate(parse_expr(source), context)) is expected

    def test_incomparable_types(self) -> None:
        with pytest.raises(ExpressionEvalError):
            evaluate(parse_expr('a < "x"'), {"a": 1})


class TestIsVisible:
    def test_empty_expression_is_visible(self) -> None:
        assert is_visible(None, {}) is True
        assert is_visible("  ", {}) is True

    def test_plain_and_values_prefixed_refs(self) -> None:
        assert is_visible('status === "open"', {"status": "open"}) is True
        assert is_visible('values.status === "open"', {"status": "open"}) is True
        assert is_visible("values.count > 3", {"count": 1}) is False

    def test_field_named_values_wins(self) -> None:
        assert is_visible("values == 2", {"values": 2}) is True

    def test_errors_hide_field(self) -> None:
        assert is_visible("status ==", {"status": "open"}) is False
        assert is_visible("count < 'x'", {"count": 1}) is False

    def test_no_code_execution(self) -> None:
        assert is_visible("__import__('os')", {}) is False

    def test_visible_fields(self) -> None:
        schema = RuntimeFormSchema(
            form_id="F",
            version="1.0.0",
            fields=[
                RuntimeFieldSchema(id="kind", component_type="select"),
                RuntimeFieldSchema(id="detail", component_type="string", visible_when='kind == "other"'),
            ],
        )
        assert [f.id for f in visible_fields(schema, {"kind": "other"})] == ["kind", "detail"]
        assert [f.id for f in visible_fields(schema, {"kind": "a"})] == ["kind"]
