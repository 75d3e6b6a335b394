"""Tests for recursive data validation."""

from __future__ import annotations

from typing import Any

import pytest

from protoform.core.compiler import compile_idl
from protoform.core.errors import ValidationError
from protoform.core.ir import DomainFieldSchema, DomainFormSchema, ValidationRule
from protoform.core.validator import (
    DataValidator,
    has_balanced_fences,
    is_image_url,
    validate,
)
from protoform.runtime.domain_to_runtime import to_runtime_schema


def _form(*fields: DomainFieldSchema) -> DomainFormSchema:
    return DomainFormSchema(form_name="F", created_at="2024-01-01T00:00:00+00:00", fields=list(fields))


def _field(key: str, field_type: str, **kwargs: Any) -> DomainFieldSchema:
    kwargs.setdefault("label", key.title())
    return DomainFieldSchema(key=key, field_type=field_type, **kwargs)


ITEMS = _form(
    _field(
        "items",
        "array<object>",
        label="Items",
        object_fields=[
            _field("sku", "string", label="SKU", rules=[ValidationRule(type="pattern", value="^[A-Z]+$")]),
            _field("meta", "json"),
        ],
    )
)


class TestJson:
    def test_invalid_json_raises(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate(_form(_field("payload", "json")), {"payload": "{bad"})
        assert exc_info.value.field_path == "payload"
        assert "must be valid JSON" in str(exc_info.value)

    def test_valid_json_passes(self) -> None:
        validate(_form(_field("payload", "json")), {"payload": '{"a":1}'})

    def test_absent_value_passes(self) -> None:
        schema = _form(_field("payload", "json"))
        validate(schema, {})
        validate(schema, {"payload": None})
        validate(schema, {"payload": ""})

    def test_non_string_json_fails(self) -> None:
        with pytest.raises(ValidationError):
            validate(_form(_field("payload", "json")), {"payload": {"a": 1}})

    def test_json_rule_on_string_field(self) -> None:
        schema = _form(_field("payload", "string", rules=[ValidationRule(type="json")]))
        with pytest.raises(ValidationError):
            validate(schema, {"payload": "nope"})


class TestMarkdown:
    def test_balanced_fences(self) -> None:
        validate(_form(_field("notes", "markdown")), {"notes": "# T\n```py\nx = 1\n```\n"})

    def test_unclosed_fence(self) -> None:
        with pytest.raises(ValidationError, match="unclosed code block"):
            validate(_form(_field("notes", "markdown")), {"notes": "```\ncode"})

    def test_non_string(self) -> None:
        with pytest.raises(ValidationError, match="must be markdown text"):
            validate(_form(_field("notes", "markdown")), {"notes": 3})

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("plain", True),
            ("```\na\n```", True),
            ("~~~\na\n~~~", True),
            ("````\n```\n````", True),
            ("```\na\n~~~", False),
            ("````\na\n```", False),
            ("```js\na\n```js", False),
        ],
    )
    def test_has_balanced_fences(self, text: str, expected: bool) -> None:
        assert has_balanced_fences(text) is expected


class TestImages:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("data:image/png;base64,AAA", True),
            ("blob:http://x/1", True),
            ("/uploads/a.png", True),
            ("https://cdn.example.com/a.png", True),
            ("//cdn.example.com/a.png", False),
            ("ftp://example.com/a.png", False),
            ("not a url", False),
            ("", False),
            (42, False),
        ],
    )
    def test_is_image_url(self, value: Any, expected: bool) -> None:
        assert is_image_url(value) is expected

    def test_image_field(self) -> None:
        schema = _form(_field("logo", "image"))
        validate(schema, {"logo": "https://example.com/logo.png"})
        with pytest.raises(ValidationError, match="must be an image URL"):
            validate(schema, {"logo": "logo.png"})

    def test_image_list_checks_first_entry(self) -> None:
        schema = _form(_field("logo", "image"))
        validate(schema, {"logo": ["/a.png", "junk"]})
        with pytest.raises(ValidationError):
            validate(schema, {"logo": ["junk"]})

    def test_array_image_reports_index(self) -> None:
        schema = _form(_field("photos", "array-image"))
        with pytest.raises(ValidationError) as exc_info:
            validate(schema, {"photos": ["/a.png", "/b.png", "bad"]})
        assert exc_info.value.field_path == "photos[2]"
        assert "item 2" in str(exc_info.value)

    def test_array_image_requires_list(self) -> None:
        with pytest.raises(ValidationError, match="list of image URLs"):
            validate(_form(_field("photos", "array-image")), {"photos": "/a.png"})


class TestObjects:
    def test_object_recursion_builds_dotted_path(self) -> None:
        schema = _form(
            _field("address", "object", label="Address", object_fields=[_field("meta", "json", label="Meta")])
        )
        with pytest.raises(ValidationError) as exc_info:
            validate(schema, {"address": {"meta": "{"}})
        assert exc_info.value.field_path == "address.meta"
        assert exc_info.value.label == "Address / Meta"

    def test_object_rejects_list(self) -> None:
        schema = _form(_field("address", "object", object_fields=[]))
        with pytest.raises(ValidationError, match="must be an object"):
            validate(schema, {"address": [{}]})

    def test_array_object_indexed_path(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate(ITEMS, {"items": [{"sku": "ABC"}, {"sku": "abc"}]})
        assert exc_info.value.field_path == "items[1].sku"
        assert exc_info.value.label == "Items / SKU"
        assert str(exc_info.value) == "Items / SKU (items[1].sku): format is invalid"

    def test_bare_object_is_row_zero(self) -> None:
        validate(ITEMS, {"items": {"sku": "ABC"}})
        with pytest.raises(ValidationError) as exc_info:
            validate(ITEMS, {"items": {"meta": "{bad"}})
        assert exc_info.value.field_path == "items[0].meta"

    def test_array_object_rejects_scalar(self) -> None:
        with pytest.raises(ValidationError, match="list of objects"):
            validate(ITEMS, {"items": "x"})

    def test_array_object_rejects_non_object_row(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate(ITEMS, {"items": [{"sku": "A"}, 5]})
        assert exc_info.value.field_path == "items[1]"

    def test_fail_fast_reports_first_defect(self) -> None:
        schema = _form(_field("a", "json"), _field("b", "json"))
        with pytest.raises(ValidationError) as exc_info:
            validate(schema, {"a": "{", "b": "{"})
        assert exc_info.value.field_path == "a"

    def test_data_must_be_mapping(self) -> None:
        with pytest.raises(ValidationError, match="must be an object"):
            validate(_form(), [])  # type: ignore[arg-type]


class TestRules:
    def test_pattern(self) -> None:
        schema = _form(_field("code", "string", rules=[ValidationRule(type="pattern", value=r"^\d{3}$")]))
        validate(schema, {"code": "123"})
        with pytest.raises(ValidationError, match="format is invalid"):
            validate(schema, {"code": "12"})

    def test_invalid_stored_pattern_is_ignored(self) -> None:
        schema = _form(_field("code", "string", rules=[ValidationRule(type="pattern", value="(")]))
        validate(schema, {"code": "anything"})

    def test_min_max(self) -> None:
        schema = _form(
            _field(
                "name",
                "string",
                rules=[ValidationRule(type="min", value="2"), ValidationRule(type="max", value="4")],
            ),
            _field("qty", "number", rules=[ValidationRule(type="max", value="10")]),
        )
        validate(schema, {"name": "abc", "qty": 10})
        with pytest.raises(ValidationError, match="too short"):
            validate(schema, {"name": "a"})
        with pytest.raises(ValidationError, match="too long"):
            validate(schema, {"name": "abcde"})
        with pytest.raises(ValidationError, match="too large"):
            validate(schema, {"qty": 11})

    def test_custom_rule(self) -> None:
        schema = _form(_field("vat", "string", rules=[ValidationRule(type="custom", value="vat")]))
        validators = {"vat": lambda value, _arg: str(value).startswith("GB")}
        validate(schema, {"vat": "GB123"}, rule_validators=validators)
        with pytest.raises(ValidationError, match="failed vat validation"):
            validate(schema, {"vat": "FR123"}, rule_validators=validators)

    def test_custom_rule_plugin_name(self) -> None:
        rule = ValidationRule(type="custom", value="3", plugin="min_words")
        schema = _form(_field("bio", "string", rules=[rule]))
        validator = DataValidator({"min_words": lambda value, arg: len(value.split()) >= int(arg)})
        validator.validate(schema, {"bio": "one two three"})
        with pytest.raises(ValidationError):
            validator.validate(schema, {"bio": "one"})

    def test_unknown_custom_rule_is_ignored(self) -> None:
        schema = _form(_field("vat", "string", rules=[ValidationRule(type="custom", value="nope")]))
        validate(schema, {"vat": "x"})

    def test_required_rule_is_not_a_presence_check(self) -> None:
        schema = _form(_field("name", "string", required=True, rules=[ValidationRule(type="required")]))
        validate(schema, {})


class TestRuntimeSchema:
    def test_validates_runtime_schema_with_nested_fields(self) -> None:
        runtime = to_runtime_schema(ITEMS)
        with pytest.raises(ValidationError) as exc_info:
            validate(runtime, {"items": [{"sku": "lower"}]})
        assert exc_info.value.field_path == "items[0].sku"
        assert exc_info.value.label == "Items / SKU"


class TestRepeatedWidgetFields:
    def test_repeated_json_checks_each_item(self) -> None:
        schema = compile_idl(
            'message DocForm { repeated string payloads = 1 [(ui_widget) = "json"]; }', "doc"
        )
        assert schema is not None
        assert schema.fields[0].field_type == "array"
        validate(schema, {"payloads": ['{"a": 1}', "[]"]})
        with pytest.raises(ValidationError, match="valid JSON") as exc_info:
            validate(schema, {"payloads": ['{"a": 1}', "{bad"]})
        assert exc_info.value.field_path == "payloads[1]"

    def test_repeated_markdown_checks_each_item(self) -> None:
        schema = compile_idl(
            'message DocForm { repeated string notes = 1 [(ui_widget) = "markdown"]; }', "doc"
        )
        assert schema is not None
        validate(schema, {"notes": ["hello", "```\ncode\n```"]})
        with pytest.raises(ValidationError, match="unclosed code block") as exc_info:
            validate(schema, {"notes": ["hello", "```\nopen"]})
        assert exc_info.value.field_path == "notes[1]"
