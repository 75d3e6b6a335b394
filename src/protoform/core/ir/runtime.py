"""
Runtime form schema types for protoform.

The runtime schema is what a form renderer consumes. It is derived from a
domain schema on demand and never persisted.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .domain import ValidationRule


class RuntimeFieldSchema(BaseModel):
    """
    A renderer-facing field.

    Example:
        RuntimeFieldSchema(
            id="active",
            component_type="switch",
            props={"label": "Active", "options": []},
            rules=[ValidationRule(type="required")],
            value_prop_name="checked",
        )
    """

    id: str
    component_type: str = Field(alias="componentType")
    props: dict[str, Any] = Field(default_factory=dict)
    rules: list[ValidationRule] = Field(default_factory=list)
    visible_when: str | None = Field(default=None, alias="visibleWhen")
    value_prop_name: str | None = Field(default=None, alias="valuePropName")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def label(self) -> str:
        return str(self.props.get("label") or self.id)


class RuntimeFormSchema(BaseModel):
    """A renderer-facing form: ``formId`` is the domain schema's form name."""

    form_id: str = Field(alias="formId")
    version: str
    fields: list[RuntimeFieldSchema] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def get_field(self, field_id: str) -> RuntimeFieldSchema | None:
        for field in self.fields:
            if field.id == field_id:
                return field
        return None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
