"""
Field visibility evaluation.

``visibleWhen`` expressions are stored as text and evaluated with the
restricted expression language, never with ``eval``. A field whose
expression cannot be tokenized, parsed or evaluated is hidden.
"""

import logging
from collections.abc import Mapping
from typing import Any

from protoform.core.errors import ExpressionError
from protoform.core.expression_lang import evaluate, parse_expr
from protoform.core.ir import RuntimeFieldSchema, RuntimeFormSchema

logger = logging.getLogger(__name__)

# Expressions address the submitted values directly (status == "x") or
# through this name (values.status == "x")
VALUES_ALIAS = "values"


def is_visible(expr: str | None, values: Mapping[str, Any]) -> bool:
    """
    Evaluate a ``visibleWhen`` expression against submitted values.

    Examples:
        >>> is_visible('status == "active"', {"status": "active"})
        True
        >>> is_visible("values.count > 3", {"count": 1})
        False
        >>> is_visible(None, {})
        True
    """
    if expr is None or not expr.strip():
        return True

    context = dict(values)
    context.setdefault(VALUES_ALIAS, dict(values))

    try:
        return bool(evaluate(parse_expr(expr), context))
    except ExpressionError as e:
        logger.debug("Hiding field: cannot evaluate %r: %s", expr, e)
        return False


def visible_fields(schema: RuntimeFormSchema, values: Mapping[str, Any]) -> list[RuntimeFieldSchema]:
    """Runtime fields whose ``visibleWhen`` holds for ``values``."""
    return [f for f in schema.fields if is_visible(f.visible_when, values)]
