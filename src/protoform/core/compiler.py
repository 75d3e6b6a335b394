"""
IDL → domain form schema compilation.

Pipeline:
    text → parse_idl → pick_root → resolve_fields → DomainFormSchema

A file without a usable root message compiles to ``None``; nothing in this
module raises for malformed IDL.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from protoform.core.config import DEFAULT_ROOT_EXCLUSIONS, CompilerConfig
from protoform.core.idl_parser import extract_file_options, parse_idl
from protoform.core.ir import (
    ArrayField,
    ArrayObjectField,
    CheckboxGroupField,
    DomainFieldSchema,
    DomainFormSchema,
    FormStatus,
    IdlDocument,
    MessageDef,
    ObjectField,
    SchemaField,
    SelectField,
)
from protoform.core.resolver import resolve_fields
from protoform.core.strings import to_pascal

logger = logging.getLogger(__name__)

__all__ = [
    "CompiledForm",
    "assemble_domain",
    "compile_document",
    "compile_idl",
    "extract_file_options",
    "pick_root",
    "resolve_root",
    "schema_field_to_domain",
]


@dataclass(frozen=True)
class CompiledForm:
    """The root message of an app and its resolved fields."""

    root: MessageDef
    fields: list[SchemaField] = field(default_factory=list)

    @property
    def form_name(self) -> str:
        return self.root.name


def pick_root(
    app_id: str,
    messages: dict[str, MessageDef],
    exclusions: list[str] | None = None,
) -> str | None:
    """
    Choose the message that represents an app's form.

    Preference: ``<PascalAppId>Form``, then ``FormSchema``, then the first
    declared message that is not a known helper type.

    Examples:
        >>> pick_root("invoice", {"InvoiceForm": m1, "Other": m2})
        'InvoiceForm'
    """
    preferred = f"{to_pascal(app_id)}Form"
    if preferred in messages:
        return preferred
    if "FormSchema" in messages:
        return "FormSchema"
    excluded = set(DEFAULT_ROOT_EXCLUSIONS if exclusions is None else exclusions)
    for name in messages:
        if name not in excluded:
            return name
    return None


def resolve_root(
    document: IdlDocument,
    app_id: str,
    config: CompilerConfig | None = None,
) -> CompiledForm | None:
    """Pick the root message of ``document`` and resolve its fields."""
    config = config or CompilerConfig()
    root_name = pick_root(app_id, document.messages, config.root_exclusions)
    if root_name is None:
        logger.warning("No root message found for app %s", app_id)
        return None

    root = document.messages[root_name]
    fields = resolve_fields(
        root.fields,
        document.messages,
        document.enums,
        max_depth=config.max_depth,
        path=(root.name,),
    )
    return CompiledForm(root=root, fields=fields)


# =============================================================================
# Domain assembly
# =============================================================================


def schema_field_to_domain(schema_field: SchemaField) -> DomainFieldSchema:
    """Convert a resolved field to its domain shape.

    ``array<object>`` children land in ``objectFields`` like ``object`` ones.
    """
    options = None
    if isinstance(schema_field, (SelectField, CheckboxGroupField)):
        options = list(schema_field.options)

    item_type = None
    if isinstance(schema_field, ArrayField):
        item_type = schema_field.item_type

    object_fields = None
    if isinstance(schema_field, ObjectField):
        object_fields = [schema_field_to_domain(child) for child in schema_field.object_fields]
    elif isinstance(schema_field, ArrayObjectField):
        object_fields = [schema_field_to_domain(child) for child in schema_field.item_object_fields]

    return DomainFieldSchema(
        key=schema_field.name,
        label=schema_field.label,
        field_type=schema_field.type,
        required=schema_field.required,
        list_in_table=schema_field.list_visible,
        unique_key=schema_field.unique_key,
        options=options,
        item_type=item_type,
        object_fields=object_fields,
        rules=list(schema_field.rules),
    )


def assemble_domain(
    compiled: CompiledForm,
    *,
    version: str = "1.0.0",
    status: FormStatus = FormStatus.DRAFT,
    tenant_id: str | None = None,
    created_at: str | None = None,
) -> DomainFormSchema:
    return DomainFormSchema(
        form_name=compiled.form_name,
        version=version,
        tenant_id=tenant_id,
        status=status,
        created_at=created_at or datetime.now(UTC).isoformat(),
        fields=[schema_field_to_domain(f) for f in compiled.fields],
    )


def compile_document(
    document: IdlDocument,
    app_id: str,
    config: CompilerConfig | None = None,
    *,
    status: FormStatus = FormStatus.DRAFT,
    tenant_id: str | None = None,
) -> DomainFormSchema | None:
    """Compile an already-parsed document."""
    config = config or CompilerConfig()
    compiled = resolve_root(document, app_id, config)
    if compiled is None:
        return None
    return assemble_domain(
        compiled,
        version=config.default_version,
        status=status,
        tenant_id=tenant_id,
    )


def compile_idl(
    text: str,
    app_id: str,
    config: CompilerConfig | None = None,
    *,
    status: FormStatus = FormStatus.DRAFT,
    tenant_id: str | None = None,
) -> DomainFormSchema | None:
    """
    Compile IDL source into the domain schema of one app.

    Args:
        text: IDL source
        app_id: App identifier (the IDL file name without extension)
        config: Compiler settings; defaults when omitted
        status: Status stamped on the schema
        tenant_id: Tenant stamped on the schema

    Returns:
        The domain schema, or ``None`` when no root message exists.
    """
    return compile_document(parse_idl(text), app_id, config, status=status, tenant_id=tenant_id)
