"""
Write-path guards for submitted records.

Run before a record is created or updated:

- ``check_required``: every required top-level field has a value
- ``validate``: every present value has the right shape
- ``check_unique_key``: the record's natural key is present, unchanged on
  update, and not already taken
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from protoform.core.errors import make_unique_key_error, make_validation_error
from protoform.core.ir import DomainFieldSchema, DomainFormSchema
from protoform.core.validator import RuleValidator, validate

ExistsCallback = Callable[[str, str], bool]

# Components whose required check means "is switched on"
BOOLEAN_COMPONENTS = frozenset({"switch", "checkbox"})
LIST_COMPONENTS = frozenset({"checkbox-group", "array", "array<object>", "array-image"})


def find_unique_key_field(schema: DomainFormSchema) -> str | None:
    """Key of the first field flagged as unique key."""
    for field in schema.fields:
        if field.unique_key:
            return field.key
    return None


def read_unique_value(data: Mapping[str, Any], field: str) -> str | None:
    value = data.get(field)
    if value is None:
        return None
    return str(value)


def check_unique_key(
    schema: DomainFormSchema,
    data: Mapping[str, Any],
    previous: Mapping[str, Any] | None = None,
    exists: ExistsCallback | None = None,
) -> str | None:
    """
    Enforce the unique-key contract for a create (``previous is None``) or
    an update (``previous`` is the stored record).

    Args:
        schema: Form the record belongs to
        data: Submitted record
        previous: Stored record being updated, if any
        exists: ``exists(field, value)`` returns True when another record
            already holds ``value``

    Returns:
        The unique value, or ``None`` when the form has no unique key.

    Raises:
        UniqueKeyError: If the value is missing, changed, or taken
    """
    field = find_unique_key_field(schema)
    if field is None:
        return None

    value = read_unique_value(data, field)
    if value is None or value == "":
        raise make_unique_key_error(f'Unique key "{field}" is required', field)

    if previous is not None:
        old_value = read_unique_value(previous, field)
        if old_value is not None and old_value != "" and old_value != value:
            raise make_unique_key_error(f'Unique key "{field}" is immutable once initialized', field)

    if exists is not None and exists(field, value):
        raise make_unique_key_error(f'Unique key "{field}" value "{value}" already exists', field)

    return value


def _has_required_value(field: DomainFieldSchema, value: Any) -> bool:
    if field.field_type in BOOLEAN_COMPONENTS:
        return value is True
    if field.field_type in LIST_COMPONENTS:
        return isinstance(value, list) and len(value) > 0
    if field.field_type == "object":
        return isinstance(value, Mapping) and len(value) > 0
    if isinstance(value, str):
        return value.strip() != ""
    return value is not None


def check_required(schema: DomainFormSchema, data: Mapping[str, Any]) -> None:
    """
    Raise for the first required top-level field without a value.

    Raises:
        ValidationError: Naming the missing field
    """
    for field in schema.fields:
        if field.is_required and not _has_required_value(field, data.get(field.key)):
            raise make_validation_error("is required", field_path=field.key, label=field.label)


def validate_for_write(
    schema: DomainFormSchema,
    data: Mapping[str, Any],
    previous: Mapping[str, Any] | None = None,
    exists: ExistsCallback | None = None,
    *,
    rule_validators: Mapping[str, RuleValidator] | None = None,
) -> None:
    """Required check, shape validation and unique-key check, in that order."""
    check_required(schema, data)
    validate(schema, data, rule_validators=rule_validators)
    check_unique_key(schema, data, previous, exists)
