"""
Domain → runtime schema conversion.

Converts a stored ``DomainFormSchema`` into the ``RuntimeFormSchema`` a form
renderer consumes: one runtime field per domain field, with the display
props gathered, a ``required`` rule synthesized from the boolean flag, and
value-binding hints for boolean components.
"""

from typing import Any

from protoform.core.ir import (
    DomainFieldSchema,
    DomainFormSchema,
    EnumOption,
    RuleType,
    RuntimeFieldSchema,
    RuntimeFormSchema,
    ValidationRule,
)

# Components bound through a boolean "checked" prop instead of "value"
CHECKED_COMPONENTS = frozenset({"checkbox", "switch"})


# =============================================================================
# Props
# =============================================================================


def _dump_options(field: DomainFieldSchema) -> list[Any]:
    """Domain options unchanged; enum options become plain dicts."""
    return [
        option.model_dump() if isinstance(option, EnumOption) else option
        for option in field.options or []
    ]


def _build_props(field: DomainFieldSchema) -> dict[str, Any]:
    props: dict[str, Any] = {
        "label": field.label,
        "options": _dump_options(field),
    }
    if field.item_type is not None:
        props["itemType"] = field.item_type
    if field.object_fields is not None:
        props["objectFields"] = [
            child.model_dump(by_alias=True, exclude_none=True, mode="json")
            for child in field.object_fields
        ]
    return props


def _build_rules(field: DomainFieldSchema) -> list[ValidationRule]:
    """Field rules, led by a ``required`` rule when only the flag says so."""
    rules = list(field.rules)
    if field.required and not field.has_rule(RuleType.REQUIRED):
        rules.insert(0, ValidationRule(type=RuleType.REQUIRED))
    return rules


# =============================================================================
# Conversion
# =============================================================================


def convert_field(field: DomainFieldSchema) -> RuntimeFieldSchema:
    """Convert one domain field to its runtime shape."""
    return RuntimeFieldSchema(
        id=field.key,
        component_type=field.field_type,
        props=_build_props(field),
        rules=_build_rules(field),
        visible_when=field.visibility.expr if field.visibility and field.visibility.expr else None,
        value_prop_name="checked" if field.field_type in CHECKED_COMPONENTS else None,
    )


def to_runtime_schema(domain: DomainFormSchema) -> RuntimeFormSchema:
    """
    Convert a domain schema to the renderer-facing runtime schema.

    Args:
        domain: Compiled or stored domain schema

    Returns:
        Runtime schema with ``formId`` set to the domain form name

    Example:
        >>> domain = compile_idl(idl_text, "invoice")
        >>> runtime = to_runtime_schema(domain)
        >>> runtime.fields[0].component_type
        'string'
    """
    return RuntimeFormSchema(
        form_id=domain.form_name,
        version=domain.version,
        fields=[convert_field(f) for f in domain.fields],
    )
