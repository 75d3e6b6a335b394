"""
Restricted expression language for field visibility.

Tokenizer, parser and evaluator for ``visibleWhen`` conditions. Expressions
are parsed into the AST in ``protoform.core.ir.expressions`` and walked by a
tree interpreter; nothing is ever passed to Python's ``eval``.

Usage:
    from protoform.core.expression_lang import parse_expr, evaluate

    expr = parse_expr('status == "active" && amount > 100')
    result = evaluate(expr, {"status": "active", "amount": 150})
    # result is True
"""

from protoform.core.expression_lang.evaluator import ExpressionEvalError, evaluate
from protoform.core.expression_lang.parser import ExpressionParseError, parse_expr
from protoform.core.expression_lang.tokenizer import ExpressionTokenError, tokenize

__all__ = [
    "ExpressionEvalError",
    "ExpressionParseError",
    "ExpressionTokenError",
    "evaluate",
    "parse_expr",
    "tokenize",
]
