"""
Loading of stored form schemas.

Stored schemas were written by several generations of tooling, so field
dicts use snake_case or camelCase keys, nest children under different names
and sometimes keep flags in ``metadata``. ``load_domain_schema`` accepts all
of them and returns a clean ``DomainFormSchema``.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from protoform.core.compiler import schema_field_to_domain
from protoform.core.ir import (
    DomainFieldSchema,
    DomainFormSchema,
    EnumOption,
    FormStatus,
    RuleType,
    ValidationRule,
    Visibility,
)

logger = logging.getLogger(__name__)

__all__ = [
    "extract_schema_root",
    "load_domain_schema",
    "normalize_options",
    "parse_domain_field",
    "schema_field_to_domain",
]

ITEM_TYPES = frozenset({"string", "number", "boolean", "object"})

_OBJECT_FIELD_KEYS = ("objectFields", "object_fields", "fields", "itemObjectFields", "item_object_fields")
_LIST_IN_TABLE_KEYS = ("listInTable", "list_in_table", "listVisible", "list_visible")
_UNIQUE_KEY_KEYS = ("uniqueKey", "unique_key")


def _first(raw: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def extract_schema_root(raw: dict[str, Any]) -> dict[str, Any]:
    """The dict holding ``fields``: ``raw`` itself or its ``schema`` entry."""
    if isinstance(raw.get("fields"), list):
        return raw
    if isinstance(raw.get("schema"), dict):
        return raw["schema"]
    return raw


def normalize_options(raw: Any) -> list[str | EnumOption] | None:
    """Keep string options and ``{label, value}`` string pairs; ``None`` if nothing is left."""
    if not isinstance(raw, list):
        return None
    options: list[str | EnumOption] = []
    for item in raw:
        if isinstance(item, str):
            options.append(item)
        elif isinstance(item, dict) and isinstance(item.get("label"), str) and isinstance(item.get("value"), str):
            options.append(EnumOption(label=item["label"], value=item["value"]))
    return options or None


def _parse_rules(raw: Any) -> list[ValidationRule]:
    if not isinstance(raw, list):
        return []
    rules = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        rules.append(
            ValidationRule(
                type=str(item.get("type") or RuleType.CUSTOM),
                value=item["value"] if isinstance(item.get("value"), str) else None,
                plugin=item["plugin"] if isinstance(item.get("plugin"), str) else None,
            )
        )
    return rules


def parse_domain_field(raw: dict[str, Any]) -> DomainFieldSchema | None:
    """Parse one stored field dict; ``None`` when it has no key."""
    key = raw.get("key") if isinstance(raw.get("key"), str) else raw.get("name")
    if not isinstance(key, str) or not key:
        return None

    metadata = raw.get("metadata") if isinstance(raw.get("metadata"), dict) else {}

    field_type = next(
        (raw[k] for k in ("fieldType", "field_type", "type") if isinstance(raw.get(k), str)),
        "string",
    )

    item_type = next(
        (raw[k] for k in ("itemType", "item_type") if raw.get(k) in ITEM_TYPES),
        None,
    )

    children_raw = _first(raw, _OBJECT_FIELD_KEYS)
    if children_raw is None:
        children_raw = metadata.get("objectFields")
    object_fields = None
    if isinstance(children_raw, list):
        children = [parse_domain_field(c) for c in children_raw if isinstance(c, dict)]
        object_fields = [c for c in children if c is not None] or None

    list_in_table = _first(raw, _LIST_IN_TABLE_KEYS)
    if list_in_table is None:
        list_in_table = metadata.get("listInTable")

    unique_key = _first(raw, _UNIQUE_KEY_KEYS)
    if unique_key is None:
        unique_key = metadata.get("uniqueKey")

    visibility = None
    raw_visibility = raw.get("visibility")
    if isinstance(raw_visibility, dict) and isinstance(raw_visibility.get("expr"), str):
        visibility = Visibility(expr=raw_visibility["expr"])

    return DomainFieldSchema(
        key=key,
        label=raw["label"] if isinstance(raw.get("label"), str) else key,
        field_type=field_type,
        required=bool(raw.get("required")),
        list_in_table=list_in_table if isinstance(list_in_table, bool) else False,
        unique_key=unique_key if isinstance(unique_key, bool) else False,
        options=normalize_options(raw.get("options")),
        item_type=item_type,
        object_fields=object_fields,
        rules=_parse_rules(raw.get("rules")),
        visibility=visibility,
        metadata=metadata or None,
    )


def load_domain_schema(
    raw: dict[str, Any],
    form_name: str | None = None,
    version: str | None = None,
    status: FormStatus | str | None = None,
) -> DomainFormSchema | None:
    """
    Load a stored form document or schema dict.

    Args:
        raw: Stored document (``{formName, version, status, schema: {...}}``)
            or a bare schema dict with ``fields``
        form_name: Overrides the stored form name
        version: Overrides the stored version
        status: Overrides the stored status

    Returns:
        The domain schema, or ``None`` when no fields list can be found.
    """
    root = extract_schema_root(raw)
    raw_fields = root.get("fields")
    if not isinstance(raw_fields, list):
        logger.debug("No fields list in stored schema %s", form_name or raw.get("formName"))
        return None

    fields = [parse_domain_field(f) for f in raw_fields if isinstance(f, dict)]

    stored_status = status or raw.get("status") or root.get("status")
    try:
        resolved_status = FormStatus(stored_status) if stored_status else FormStatus.DRAFT
    except ValueError:
        resolved_status = FormStatus.DRAFT

    created_at = raw.get("createdAt") or root.get("createdAt")
    if not isinstance(created_at, str):
        created_at = datetime.now(UTC).isoformat()

    return DomainFormSchema(
        form_name=form_name
        or _first(raw, ("formName", "form_name"))
        or _first(root, ("formName", "form_name"))
        or "proto_form",
        version=version or raw.get("version") or root.get("version") or "1.0.0",
        tenant_id=raw.get("tenantId") if isinstance(raw.get("tenantId"), str) else None,
        status=resolved_status,
        created_at=created_at,
        fields=[f for f in fields if f is not None],
    )
