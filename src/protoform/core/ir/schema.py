"""
Resolved schema field types for protoform.

The type resolver turns every ``ParsedField`` into exactly one of the variants
below, chosen by the field's scalar/enum/message kind and whether it is
``repeated``. The ``type`` attribute is the discriminator, so a serialized
field round-trips to the same variant.

Serialized keys are snake_case (``item_type``, ``object_fields``,
``list_visible``...), matching the manifest/storage format.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .domain import ValidationRule
from .idl import EnumOption


class SchemaFieldKind(StrEnum):
    """Every ``type`` a resolved field can carry."""

    STRING = "string"
    TEXTAREA = "textarea"
    MARKDOWN = "markdown"
    JSON = "json"
    IMAGE = "image"
    NUMBER = "number"
    SWITCH = "switch"
    SELECT = "select"
    CHECKBOX_GROUP = "checkbox-group"
    ARRAY = "array"
    ARRAY_IMAGE = "array-image"
    OBJECT = "object"
    ARRAY_OBJECT = "array<object>"


# String widgets selectable with the ui_widget option
STRING_WIDGETS = frozenset({"textarea", "markdown", "json", "image"})


class _SchemaFieldBase(BaseModel):
    name: str
    label: str
    required: bool = False
    rules: list[ValidationRule] = Field(default_factory=list)
    list_visible: bool = False
    unique_key: bool = False

    model_config = ConfigDict(frozen=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, mode="json")


class TextField(_SchemaFieldBase):
    """Singular string/bytes field, optionally rendered with a widget."""

    type: Literal["string", "textarea", "markdown", "json", "image"] = "string"


class NumberField(_SchemaFieldBase):
    """Singular numeric scalar."""

    type: Literal["number"] = "number"


class SwitchField(_SchemaFieldBase):
    """Singular bool."""

    type: Literal["switch"] = "switch"


class SelectField(_SchemaFieldBase):
    """Singular enum reference."""

    type: Literal["select"] = "select"
    options: list[EnumOption] = Field(default_factory=list)


class CheckboxGroupField(_SchemaFieldBase):
    """Repeated enum reference, or repeated bool with ``["true", "false"]``."""

    type: Literal["checkbox-group"] = "checkbox-group"
    options: list[str | EnumOption] = Field(default_factory=list)


class ArrayField(_SchemaFieldBase):
    """Repeated string or numeric scalar."""

    type: Literal["array"] = "array"
    item_type: Literal["string", "number"]


class ArrayImageField(_SchemaFieldBase):
    """Repeated string rendered as an image list."""

    type: Literal["array-image"] = "array-image"


class ObjectField(_SchemaFieldBase):
    """Singular message reference."""

    type: Literal["object"] = "object"
    object_fields: list[SchemaField] = Field(default_factory=list)


class ArrayObjectField(_SchemaFieldBase):
    """Repeated message reference."""

    type: Literal["array<object>"] = "array<object>"
    item_object_fields: list[SchemaField] = Field(default_factory=list)


SchemaField = Annotated[
    TextField
    | NumberField
    | SwitchField
    | SelectField
    | CheckboxGroupField
    | ArrayField
    | ArrayImageField
    | ObjectField
    | ArrayObjectField,
    Field(discriminator="type"),
]

# Rebuild models for recursive forward references
ObjectField.model_rebuild()
ArrayObjectField.model_rebuild()
