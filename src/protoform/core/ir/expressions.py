"""
Visibility expression AST.

``visibleWhen`` conditions parse into these frozen nodes::

    status == "open" and (amount > 100 or vip)   # Logical, Comparison
    not archived                                  # Not
    kind not in ["a", "b"]                        # Membership
    address.city is not null                      # NullCheck
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class CompareOp(StrEnum):
    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="


class LogicalOp(StrEnum):
    AND = "and"
    OR = "or"


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


class Literal(_Node):
    """A number, string, boolean or ``null`` constant."""

    value: int | float | str | bool | None


class FieldRef(_Node):
    """Dotted path into the submitted values, e.g. ``["address", "city"]``."""

    path: list[str]


class Comparison(_Node):
    op: CompareOp
    left: Expr
    right: Expr


class Logical(_Node):
    """``and``/``or`` over two or more operands; chains are kept flat."""

    op: LogicalOp
    operands: list[Expr]


class Not(_Node):
    operand: Expr


class Membership(_Node):
    value: Expr
    items: list[Expr]
    negated: bool = False


class NullCheck(_Node):
    """``x is null`` or, negated, ``x is not null``."""

    value: Expr
    negated: bool = False


Expr = Literal | FieldRef | Comparison | Logical | Not | Membership | NullCheck

for _model in (Comparison, Logical, Not, Membership, NullCheck):
    _model.model_rebuild()
