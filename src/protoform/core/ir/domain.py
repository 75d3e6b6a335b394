"""
Domain form schema types for protoform.

A domain schema is the versioned, field-typed description of one form. It is
what the compiler produces, what form storage persists, and what the data
validator walks. Wire keys are camelCase (``formName``, ``fieldType``,
``objectFields``...); Python attributes are snake_case.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .idl import EnumOption


class RuleType(StrEnum):
    """Validation directive types understood by the renderer and validator."""

    REQUIRED = "required"
    MIN = "min"
    MAX = "max"
    PATTERN = "pattern"
    JSON = "json"
    MARKDOWN = "markdown"
    CUSTOM = "custom"


class FormStatus(StrEnum):
    """Publication state of a stored form."""

    DRAFT = "draft"
    PUBLISHED = "published"


class ValidationRule(BaseModel):
    """
    One validation directive attached to a field.

    ``type`` stays a plain string so stored schemas carrying plugin rule names
    still load; compare against :class:`RuleType` members.
    """

    type: str
    value: str | None = None
    plugin: str | None = None

    model_config = ConfigDict(frozen=True)


class Visibility(BaseModel):
    """Conditional visibility; ``expr`` is evaluated against submitted values."""

    expr: str

    model_config = ConfigDict(frozen=True)


class DomainFieldSchema(BaseModel):
    """
    A field in a domain form schema.

    Attributes:
        key: Field identifier, also the key in submitted records
        field_type: Component kind (``string``, ``select``, ``array<object>``...)
        item_type: Element kind for ``array`` fields
        object_fields: Children of ``object`` / ``array<object>`` fields
        list_in_table: Show the field as a column in list views
        unique_key: The field is the record's natural key
    """

    key: str
    label: str
    field_type: str = Field(alias="fieldType")
    required: bool = False
    list_in_table: bool = Field(default=False, alias="listInTable")
    unique_key: bool = Field(default=False, alias="uniqueKey")
    options: list[str | EnumOption] | None = None
    item_type: str | None = Field(default=None, alias="itemType")
    object_fields: list[DomainFieldSchema] | None = Field(default=None, alias="objectFields")
    rules: list[ValidationRule] = Field(default_factory=list)
    visibility: Visibility | None = None
    metadata: dict[str, Any] | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def has_rule(self, rule_type: str) -> bool:
        return any(rule.type == rule_type for rule in self.rules)

    @property
    def is_required(self) -> bool:
        """Required by flag or by an explicit ``required`` rule."""
        return self.required or self.has_rule(RuleType.REQUIRED)


class DomainFormSchema(BaseModel):
    """
    A versioned form schema for one (tenant, app, root message).

    The compiler stamps ``version`` with its configured default and never
    increments it; version lifecycle belongs to form storage.
    """

    form_name: str = Field(alias="formName")
    version: str = "1.0.0"
    tenant_id: str | None = Field(default=None, alias="tenantId")
    status: FormStatus = FormStatus.DRAFT
    created_at: str = Field(alias="createdAt")
    fields: list[DomainFieldSchema] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def get_field(self, key: str) -> DomainFieldSchema | None:
        """Get top-level field by key."""
        for field in self.fields:
            if field.key == key:
                return field
        return None

    def to_dict(self) -> dict[str, Any]:
        """Wire JSON shape (camelCase keys, unset optionals omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


DomainFieldSchema.model_rebuild()
