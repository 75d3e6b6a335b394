"""
JSON Schema export for domain form schemas.

``build_json_schema`` describes a ``DomainFormSchema`` as a draft 2020-12
JSON Schema document so records can be checked by any JSON Schema
validator, e.g. in a client or another service. Field kinds map to JSON
types, ``min``/``max`` rules to length, item or value bounds, ``pattern``
rules to ``pattern``, and required fields to the object's ``required``
list. Every object node closes with ``additionalProperties: false``.

The export is stricter than ``protoform.core.validator.validate`` in two
places: a bare object is not accepted for an ``array<object>`` field, and
keys the form does not declare are rejected.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as JsonSchemaValidationError

from protoform.core.ir import DomainFieldSchema, DomainFormSchema, EnumOption, RuleType

logger = logging.getLogger(__name__)

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

TEXT_KINDS = frozenset({"string", "textarea", "markdown", "json", "select"})
ARRAY_KINDS = frozenset({"array", "checkbox-group", "array-image", "array<object>"})

_ITEM_TYPES = {
    "string": "string",
    "number": "number",
    "boolean": "boolean",
    "object": "object",
}


def _option_values(field: DomainFieldSchema) -> list[str]:
    return [
        option.value if isinstance(option, EnumOption) else option
        for option in field.options or []
    ]


def _bound(value: str | None) -> int | float | None:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return int(number) if number.is_integer() else number


def _type_node(field: DomainFieldSchema) -> dict[str, Any]:
    kind = field.field_type
    if kind == "number":
        return {"type": "number"}
    if kind in ("switch", "checkbox"):
        return {"type": "boolean"}
    if kind in TEXT_KINDS:
        node: dict[str, Any] = {"type": "string"}
        values = _option_values(field) if kind == "select" else []
        if values:
            node["enum"] = values
        return node
    if kind == "image":
        # Upload widgets may store a list of URLs
        return {"type": ["string", "array"], "items": {"type": "string"}}
    if kind == "array":
        item_type = _ITEM_TYPES.get(field.item_type or "string", "string")
        return {"type": "array", "items": {"type": item_type}}
    if kind == "array-image":
        return {"type": "array", "items": {"type": "string"}}
    if kind == "checkbox-group":
        items: dict[str, Any] = {"type": "string"}
        values = _option_values(field)
        if values:
            items["enum"] = values
        return {"type": "array", "items": items}
    if kind == "object":
        return _object_node(field.object_fields or [])
    if kind == "array<object>":
        return {"type": "array", "items": _object_node(field.object_fields or [])}
    return {}


def _apply_rules(field: DomainFieldSchema, node: dict[str, Any]) -> None:
    kind = field.field_type
    if kind in TEXT_KINDS:
        lower, upper = "minLength", "maxLength"
    elif kind in ARRAY_KINDS:
        lower, upper = "minItems", "maxItems"
    elif kind == "number":
        lower, upper = "minimum", "maximum"
    else:
        lower = upper = None

    for rule in field.rules:
        if rule.type in (RuleType.MIN, RuleType.MAX) and lower:
            bound = _bound(rule.value)
            if bound is None:
                continue
            node[lower if rule.type == RuleType.MIN else upper] = bound
        elif rule.type == RuleType.PATTERN and rule.value and kind in TEXT_KINDS:
            try:
                re.compile(rule.value)
            except re.error:
                logger.debug("Skipping invalid pattern on %s: %r", field.key, rule.value)
                continue
            node["pattern"] = rule.value

    if field.is_required and kind in TEXT_KINDS:
        node.setdefault("minLength", 1)


def build_field_schema(field: DomainFieldSchema) -> dict[str, Any]:
    """JSON Schema node for one domain field."""
    node: dict[str, Any] = {}
    if field.label:
        node["title"] = field.label
    node.update(_type_node(field))
    _apply_rules(field, node)
    return node


def _object_node(fields: list[DomainFieldSchema]) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {f.key: build_field_schema(f) for f in fields},
        "required": [f.key for f in fields if f.is_required],
        "additionalProperties": False,
    }


def build_json_schema(domain: DomainFormSchema) -> dict[str, Any]:
    """
    Build a JSON Schema document for a domain form schema.

    Args:
        domain: Compiled or stored domain schema

    Returns:
        A draft 2020-12 schema dict titled with the form name

    Example:
        >>> schema = build_json_schema(compile_idl(idl_text, "invoice"))
        >>> schema["required"]
        ['number']
    """
    document: dict[str, Any] = {"$schema": SCHEMA_DIALECT, "title": domain.form_name}
    document.update(_object_node(list(domain.fields)))
    return document


def build_json_schema_validator(domain: DomainFormSchema) -> Draft202012Validator:
    """A ready validator for the domain's JSON Schema."""
    return Draft202012Validator(build_json_schema(domain))


def _format_error(err: JsonSchemaValidationError) -> str:
    loc = ".".join(str(p) for p in err.path)
    if loc:
        return f"{loc}: {err.message}"
    return err.message


def json_schema_errors(domain: DomainFormSchema, data: Mapping[str, Any]) -> list[str]:
    """
    Every JSON Schema violation in ``data``, as ``"path: message"`` strings.

    Unlike ``validate`` this collects all errors instead of stopping at the
    first one.
    """
    validator = build_json_schema_validator(domain)
    return [_format_error(err) for err in validator.iter_errors(dict(data))]
