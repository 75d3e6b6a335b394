"""
Runtime side of protoform: turning stored domain schemas into renderer
schemas, loading legacy stored shapes, evaluating field visibility, JSON
Schema export, the injectable component registry and the plugin manager.
"""

from protoform.runtime.domain_loader import load_domain_schema, parse_domain_field
from protoform.runtime.domain_to_runtime import convert_field, to_runtime_schema
from protoform.runtime.json_schema import (
    build_json_schema,
    build_json_schema_validator,
    json_schema_errors,
)
from protoform.runtime.plugins import AuditPlugin, Hook, Plugin, PluginManager
from protoform.runtime.registry import (
    BUILTIN_COMPONENT_TYPES,
    ComponentNotFoundError,
    ComponentRegistry,
)
from protoform.runtime.visibility import is_visible, visible_fields

__all__ = [
    "AuditPlugin",
    "BUILTIN_COMPONENT_TYPES",
    "ComponentNotFoundError",
    "ComponentRegistry",
    "Hook",
    "Plugin",
    "PluginManager",
    "build_json_schema",
    "build_json_schema_validator",
    "convert_field",
    "is_visible",
    "json_schema_errors",
    "load_domain_schema",
    "parse_domain_field",
    "to_runtime_schema",
    "visible_fields",
]
