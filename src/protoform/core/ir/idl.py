"""
IDL intermediate representation for protoform.

These types describe what the parser extracted from ``message`` and ``enum``
blocks, before any type resolution happens. One compilation run owns them;
nothing here outlives the run.

IDL Syntax (supported subset):

    enum Status {
      STATUS_UNSPECIFIED = 0;
      ACTIVE = 1; // @label Active
    }

    message InvoiceForm {
      // @label Invoice number* @unique
      string number = 1 [(ui.ui_pattern) = "^INV-\\d+$"];
      repeated LineItem items = 2;
      Status status = 3;
    }
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FieldMeta(BaseModel):
    """
    UI/validation metadata gathered for one field.

    Every attribute is optional: ``None`` means "not specified by this
    source", so a later source only overrides what it actually sets.
    """

    label: str | None = None
    required: bool | None = None
    pattern: str | None = None
    list_visible: bool | None = None
    unique_key: bool | None = None
    widget: str | None = None

    model_config = ConfigDict(frozen=True)

    def merged(self, other: FieldMeta) -> FieldMeta:
        """Return a copy with every attribute ``other`` sets taken from ``other``."""
        return self.model_copy(update=other.model_dump(exclude_none=True))

    @property
    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class EnumValueMeta(BaseModel):
    """Display label / emitted value overrides for one enum member."""

    label: str | None = None
    value: str | None = None

    model_config = ConfigDict(frozen=True)

    def merged(self, other: EnumValueMeta) -> EnumValueMeta:
        return self.model_copy(update=other.model_dump(exclude_none=True))


class ParsedField(BaseModel):
    """
    One field declaration inside a message body.

    Attributes:
        name: Field identifier
        type: Local type name (package qualifiers already dropped)
        repeated: True for ``repeated`` fields
    """

    name: str
    type: str
    repeated: bool = False
    label: str | None = None
    required: bool | None = None
    pattern: str | None = None
    list_visible: bool | None = None
    unique_key: bool | None = None
    widget: str | None = None

    model_config = ConfigDict(frozen=True)


class MessageDef(BaseModel):
    """A ``message`` block; nested messages are flattened into the same map by name."""

    name: str
    fields: list[ParsedField] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class EnumOption(BaseModel):
    """A selectable option: what the user sees and what gets stored."""

    label: str
    value: str

    model_config = ConfigDict(frozen=True)


class EnumDef(BaseModel):
    """An ``enum`` block with its members in declaration order."""

    name: str
    values: list[EnumOption] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class IdlDocument(BaseModel):
    """
    Everything parsed out of one IDL source.

    Attributes:
        messages: Message definitions keyed by name, in declaration order
        enums: Enum definitions keyed by name, in declaration order
        options: File-level ``option (name) = "value";`` strings
    """

    messages: dict[str, MessageDef] = Field(default_factory=dict)
    enums: dict[str, EnumDef] = Field(default_factory=dict)
    options: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)
