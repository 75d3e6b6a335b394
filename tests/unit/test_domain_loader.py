"""Tests for loading stored form schemas in their historical shapes."""

from __future__ import annotations

from protoform.core.ir import EnumOption, FormStatus
from protoform.runtime.domain_loader import (
    extract_schema_root,
    load_domain_schema,
    normalize_options,
    parse_domain_field,
)


class TestParseDomainField:
    def test_camel_case_field(self) -> None:
        field = parse_domain_field(
            {
                "key": "items",
                "label": "Items",
                "fieldType": "array<object>",
                "listInTable": True,
                "uniqueKey": False,
                "objectFields": [{"key": "sku", "fieldType": "string"}],
            }
        )
        assert field is not None
        assert field.field_type == "array<object>"
        assert field.list_in_table is True
        assert field.object_fields is not None
        assert field.object_fields[0].key == "sku"
        assert field.object_fields[0].label == "sku"

    def test_snake_case_resolved_field(self) -> None:
        field = parse_domain_field(
            {
                "name": "items",
                "label": "Items",
                "type": "array<object>",
                "list_visible": True,
                "unique_key": True,
                "item_object_fields": [{"name": "sku", "label": "SKU", "type": "string"}],
            }
        )
        assert field is not None
        assert field.key == "items"
        assert field.list_in_table is True
        assert field.unique_key is True
        assert field.object_fields is not None
        assert field.object_fields[0].label == "SKU"

    def test_metadata_fallbacks(self) -> None:
        field = parse_domain_field(
            {
                "key": "address",
                "fieldType": "object",
                "metadata": {
                    "objectFields": [{"key": "city"}],
                    "listInTable": True,
                    "uniqueKey": True,
                },
            }
        )
        assert field is not None
        assert field.object_fields is not None
        assert field.object_fields[0].field_type == "string"
        assert field.list_in_table is True
        assert field.unique_key is True
        assert field.metadata is not None

    def test_defaults(self) -> None:
        field = parse_domain_field({"key": "x"})
        assert field is not None
        assert field.label == "x"
        assert field.field_type == "string"
        assert field.required is False
        assert field.options is None

    def test_item_type_whitelist(self) -> None:
        assert parse_domain_field({"key": "x", "itemType": "number"}).item_type == "number"  # type: ignore[union-attr]
        assert parse_domain_field({"key": "x", "itemType": "date"}).item_type is None  # type: ignore[union-attr]

    def test_rules_default_to_custom(self) -> None:
        field = parse_domain_field(
            {"key": "x", "rules": [{"type": "min", "value": "3"}, {"value": "vat"}, "junk"]}
        )
        assert field is not None
        assert [(r.type, r.value) for r in field.rules] == [("min", "3"), ("custom", "vat")]

    def test_visibility(self) -> None:
        field = parse_domain_field({"key": "x", "visibility": {"expr": "a == 1"}})
        assert field is not None
        assert field.visibility is not None
        assert field.visibility.expr == "a == 1"

    def test_missing_key(self) -> None:
        assert parse_domain_field({"label": "No key"}) is None


class TestNormalizeOptions:
    def test_mixed(self) -> None:
        options = normalize_options(["a", {"label": "B", "value": "b"}, {"label": 1}, 3])
        assert options == ["a", EnumOption(label="B", value="b")]

    def test_empty_or_invalid(self) -> None:
        assert normalize_options([]) is None
        assert normalize_options("a") is None


class TestLoadDomainSchema:
    def test_stored_document(self) -> None:
        schema = load_domain_schema(
            {
                "formName": "InvoiceForm",
                "version": "1.2.0",
                "status": "published",
                "tenantId": "t1",
                "createdAt": "2024-01-01T00:00:00+00:00",
                "schema": {"fields": [{"key": "a"}, {"label": "dropped"}]},
            }
        )
        assert schema is not None
        assert schema.form_name == "InvoiceForm"
        assert schema.version == "1.2.0"
        assert schema.status == FormStatus.PUBLISHED
        assert schema.tenant_id == "t1"
        assert schema.created_at == "2024-01-01T00:00:00+00:00"
        assert [f.key for f in schema.fields] == ["a"]

    def test_bare_schema_and_overrides(self) -> None:
        schema = load_domain_schema(
            {"fields": [{"key": "a"}]}, form_name="Custom", version="9.0.0", status="published"
        )
        assert schema is not None
        assert schema.form_name == "Custom"
        assert schema.version == "9.0.0"
        assert schema.status == FormStatus.PUBLISHED

    def test_defaults(self) -> None:
        schema = load_domain_schema({"fields": []})
        assert schema is not None
        assert schema.form_name == "proto_form"
        assert schema.version == "1.0.0"
        assert schema.status == FormStatus.DRAFT
        assert schema.created_at

    def test_unknown_status_falls_back_to_draft(self) -> None:
        schema = load_domain_schema({"fields": [], "status": "archived"})
        assert schema is not None
        assert schema.status == FormStatus.DRAFT

    def test_no_fields(self) -> None:
        assert load_domain_schema({"formName": "X"}) is None

    def test_extract_schema_root(self) -> None:
        inner = {"fields": []}
        assert extract_schema_root({"schema": inner}) is inner
        assert extract_schema_root(inner) is inner

    def test_reloads_compiled_schema(self, invoice_schema) -> None:
        assert load_domain_schema(invoice_schema.to_dict()) == invoice_schema
