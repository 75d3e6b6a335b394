"""
protoform intermediate representation (IR) types.

Types are organized into submodules by pipeline stage:

- idl: what the parser extracted from IDL text
- schema: resolved per-field schema (tagged union over field kinds)
- domain: versioned domain form schema
- runtime: renderer-facing runtime form schema
- expressions: visibility expression AST

All types are re-exported from this package.
"""

# Domain schema
from .domain import (
    DomainFieldSchema,
    DomainFormSchema,
    FormStatus,
    RuleType,
    ValidationRule,
    Visibility,
)

# Visibility expressions
from .expressions import (
    CompareOp,
    Comparison,
    Expr,
    FieldRef,
    Literal,
    Logical,
    LogicalOp,
    Membership,
    Not,
    NullCheck,
)

# Parsed IDL
from .idl import (
    EnumDef,
    EnumOption,
    EnumValueMeta,
    FieldMeta,
    IdlDocument,
    MessageDef,
    ParsedField,
)

# Runtime schema
from .runtime import (
    RuntimeFieldSchema,
    RuntimeFormSchema,
)

# Resolved schema fields
from .schema import (
    STRING_WIDGETS,
    ArrayField,
    ArrayImageField,
    ArrayObjectField,
    CheckboxGroupField,
    NumberField,
    ObjectField,
    SchemaField,
    SchemaFieldKind,
    SelectField,
    SwitchField,
    TextField,
)

__all__ = [
    # Parsed IDL
    "EnumDef",
    "EnumOption",
    "EnumValueMeta",
    "FieldMeta",
    "IdlDocument",
    "MessageDef",
    "ParsedField",
    # Resolved schema fields
    "STRING_WIDGETS",
    "ArrayField",
    "ArrayImageField",
    "ArrayObjectField",
    "CheckboxGroupField",
    "NumberField",
    "ObjectField",
    "SchemaField",
    "SchemaFieldKind",
    "SelectField",
    "SwitchField",
    "TextField",
    # Domain schema
    "DomainFieldSchema",
    "DomainFormSchema",
    "FormStatus",
    "RuleType",
    "ValidationRule",
    "Visibility",
    # Runtime schema
    "RuntimeFieldSchema",
    "RuntimeFormSchema",
    # Visibility expressions
    "CompareOp",
    "Comparison",
    "Expr",
    "FieldRef",
    "Literal",
    "Logical",
    "LogicalOp",
    "Membership",
    "Not",
    "NullCheck",
]
