"""
Type resolution for parsed IDL fields.

Every ``ParsedField`` is classified as a scalar, an enum reference or a
message reference, and then turned into one resolved ``SchemaField``
variant depending on whether it is ``repeated``:

    scalar string   -> string (or a ui_widget) | array[string] (array-image)
    scalar number   -> number                  | array[number]
    scalar boolean  -> switch                  | checkbox-group ["true", "false"]
    enum            -> select                  | checkbox-group
    message         -> object                  | array<object>

Fields whose type cannot be classified are dropped. Message references are
resolved recursively; a message that refers back to itself (directly or
through other messages) is cut at the recursive reference, and nesting is
capped at ``max_depth`` levels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from protoform.core.ir import (
    STRING_WIDGETS,
    ArrayField,
    ArrayImageField,
    ArrayObjectField,
    CheckboxGroupField,
    EnumDef,
    MessageDef,
    NumberField,
    ObjectField,
    ParsedField,
    RuleType,
    SchemaField,
    SelectField,
    SwitchField,
    TextField,
    ValidationRule,
)
from protoform.core.strings import humanize_field_name

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 16


class ScalarKind(StrEnum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


STRING_SCALARS = frozenset({"string", "bytes"})
BOOLEAN_SCALARS = frozenset({"bool"})
NUMERIC_SCALARS = frozenset(
    {
        "double",
        "float",
        "int32",
        "int64",
        "uint32",
        "uint64",
        "sint32",
        "sint64",
        "fixed32",
        "fixed64",
        "sfixed32",
        "sfixed64",
    }
)

BOOLEAN_OPTIONS = ["true", "false"]


@dataclass(frozen=True)
class ScalarRef:
    kind: ScalarKind


@dataclass(frozen=True)
class EnumRef:
    enum: EnumDef


@dataclass(frozen=True)
class MessageRef:
    message: MessageDef


TypeRef = ScalarRef | EnumRef | MessageRef


def scalar_kind(type_name: str) -> ScalarKind | None:
    if type_name in STRING_SCALARS:
        return ScalarKind.STRING
    if type_name in BOOLEAN_SCALARS:
        return ScalarKind.BOOLEAN
    if type_name in NUMERIC_SCALARS:
        return ScalarKind.NUMBER
    return None


def classify_type(
    type_name: str,
    messages: dict[str, MessageDef],
    enums: dict[str, EnumDef],
) -> TypeRef | None:
    """Classify a local type name; enums are looked up before messages."""
    kind = scalar_kind(type_name)
    if kind is not None:
        return ScalarRef(kind)
    if type_name in enums:
        return EnumRef(enums[type_name])
    if type_name in messages:
        return MessageRef(messages[type_name])
    return None


def build_rules(field: ParsedField) -> list[ValidationRule]:
    rules: list[ValidationRule] = []
    if field.pattern:
        rules.append(ValidationRule(type=RuleType.PATTERN, value=field.pattern))
    if field.widget == "json":
        rules.append(ValidationRule(type=RuleType.JSON))
    if field.widget == "markdown":
        rules.append(ValidationRule(type=RuleType.MARKDOWN))
    return rules


def resolve_field(
    field: ParsedField,
    messages: dict[str, MessageDef],
    enums: dict[str, EnumDef],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    path: tuple[str, ...] = (),
) -> SchemaField | None:
    """
    Resolve one parsed field.

    Args:
        field: Parsed field declaration
        messages: All messages of the document, by name
        enums: All enums of the document, by name
        max_depth: Maximum number of nested message levels
        path: Names of the messages currently being resolved, outermost first

    Returns:
        The resolved field, or ``None`` when its type is unknown or resolving
        it would recurse into a message already on ``path``.
    """
    ref = classify_type(field.type, messages, enums)
    if ref is None:
        logger.debug("Dropping field %s: unknown type %s", field.name, field.type)
        return None

    base = {
        "name": field.name,
        "label": field.label or humanize_field_name(field.name),
        "required": bool(field.required),
        "rules": build_rules(field),
        "list_visible": bool(field.list_visible),
        "unique_key": bool(field.unique_key),
    }

    if isinstance(ref, ScalarRef):
        return _resolve_scalar(field, ref.kind, base)

    if isinstance(ref, EnumRef):
        if field.repeated:
            return CheckboxGroupField(options=list(ref.enum.values), **base)
        return SelectField(options=list(ref.enum.values), **base)

    message = ref.message
    if message.name in path:
        logger.warning(
            "Dropping field %s: recursive reference to %s (%s)",
            field.name,
            message.name,
            " -> ".join((*path, message.name)),
        )
        return None
    if len(path) >= max_depth:
        logger.warning(
            "Dropping field %s: nesting deeper than %d levels at %s",
            field.name,
            max_depth,
            message.name,
        )
        return None

    children = resolve_fields(
        message.fields,
        messages,
        enums,
        max_depth=max_depth,
        path=(*path, message.name),
    )
    if field.repeated:
        return ArrayObjectField(item_object_fields=children, **base)
    return ObjectField(object_fields=children, **base)


def _resolve_scalar(field: ParsedField, kind: ScalarKind, base: dict) -> SchemaField:
    if kind == ScalarKind.STRING:
        if field.repeated:
            if field.widget == "image":
                return ArrayImageField(**base)
            return ArrayField(item_type="string", **base)
        widget = field.widget if field.widget in STRING_WIDGETS else "string"
        return TextField(type=widget, **base)

    if kind == ScalarKind.NUMBER:
        if field.repeated:
            return ArrayField(item_type="number", **base)
        return NumberField(**base)

    if field.repeated:
        return CheckboxGroupField(options=list(BOOLEAN_OPTIONS), **base)
    return SwitchField(**base)


def resolve_fields(
    fields: list[ParsedField],
    messages: dict[str, MessageDef],
    enums: dict[str, EnumDef],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    path: tuple[str, ...] = (),
) -> list[SchemaField]:
    """Resolve a message's fields in declaration order, dropping unresolvable ones."""
    resolved: list[SchemaField] = []
    for field in fields:
        schema_field = resolve_field(field, messages, enums, max_depth=max_depth, path=path)
        if schema_field is not None:
            resolved.append(schema_field)
    return resolved
