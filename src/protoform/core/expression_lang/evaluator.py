"""
Tree-walking evaluator for visibility expressions.

References read from a dict of submitted values; dotted paths walk nested
dicts and a missing segment reads as ``None``. ``and``/``or`` return the
deciding operand like Python's own operators. Ordering against ``None`` is
false, ordering two incomparable values raises ``ExpressionEvalError``.
"""

from __future__ import annotations

import operator
from collections.abc import Mapping, Sequence
from typing import Any

from protoform.core.errors import ExpressionError
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

_ORDERING = {
    CompareOp.LT: operator.lt,
    CompareOp.GT: operator.gt,
    CompareOp.LE: operator.le,
    CompareOp.GE: operator.ge,
}


class ExpressionEvalError(ExpressionError):
    """Error during expression evaluation."""


def resolve_path(context: Mapping[str, Any], path: Sequence[str]) -> Any:
    current: Any = context
    for segment in path:
        if not isinstance(current, Mapping) or segment not in current:
            return None
        current = current[segment]
    return current


def _compare(op: CompareOp, left: Any, right: Any) -> bool:
    if op == CompareOp.EQ:
        return left == right
    if op == CompareOp.NE:
        return left != right
    if left is None or right is None:
        return False
    try:
        return bool(_ORDERING[op](left, right))
    except TypeError as e:
        raise ExpressionEvalError(
            f"Cannot compare {type(left).__name__} with {type(right).__name__}"
        ) from e


def _logical(expr: Logical, context: Mapping[str, Any]) -> Any:
    result: Any = None
    for operand in expr.operands:
        result = evaluate(operand, context)
        if (expr.op == LogicalOp.AND) != bool(result):
            return result
    return result


def evaluate(expr: Expr, context: Mapping[str, Any]) -> Any:
    """
    Evaluate an expression AST against submitted values.

    Raises:
        ExpressionEvalError: If two values cannot be ordered
    """
    if isinstance(expr, Literal):
        return expr.value
    if isinstance(expr, FieldRef):
        return resolve_path(context, expr.path)
    if isinstance(expr, Not):
        return not evaluate(expr.operand, context)
    if isinstance(expr, Logical):
        return _logical(expr, context)
    if isinstance(expr, Comparison):
        return _compare(expr.op, evaluate(expr.left, context), evaluate(expr.right, context))
    if isinstance(expr, Membership):
        found = evaluate(expr.value, context) in [evaluate(item, context) for item in expr.items]
        return found != expr.negated
    if isinstance(expr, NullCheck):
        return (evaluate(expr.value, context) is None) != expr.negated
    raise ExpressionEvalError(f"Unsupported expression node: {type(expr).__name__}")
