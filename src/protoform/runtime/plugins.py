"""
Plugin manager for form extensions.

A plugin is any object with a ``name`` and a ``register(manager)`` method.
During registration it may add:

- field type definitions (``register_field_type``)
- validation rules, looked up by rule type or custom rule name when
  records are validated (``register_validation_rule``)
- renderer components (``register_renderer``), kept in a
  ``ComponentRegistry``
- lifecycle hooks (``add_hook``)

Hooks run in registration order. Each handler receives the previous
handler's return value, so a ``beforeDataSubmit`` chain can enrich or
rewrite a record before it is validated and stored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Protocol

from protoform.core.ir import DomainFormSchema
from protoform.core.validator import RuleValidator
from protoform.runtime.registry import ComponentRegistry
from protoform.sync.records import ExistsCallback, validate_for_write

logger = logging.getLogger(__name__)

HookHandler = Callable[[Any], Any]


class Hook(StrEnum):
    """Lifecycle points a plugin can hook into."""

    BEFORE_SCHEMA_SAVE = "beforeSchemaSave"
    AFTER_SCHEMA_SAVE = "afterSchemaSave"
    BEFORE_DATA_SUBMIT = "beforeDataSubmit"
    AFTER_DATA_SUBMIT = "afterDataSubmit"


class Plugin(Protocol):
    name: str

    def register(self, manager: PluginManager) -> None: ...


@dataclass
class PluginManager:
    """
    Registry of plugin contributions.

    Example:
        manager = PluginManager()
        manager.use(AuditPlugin())
        record = manager.submit(schema, {"name": "Ada"})
    """

    components: ComponentRegistry = field(default_factory=ComponentRegistry)
    field_types: dict[str, Any] = field(default_factory=dict)
    validators: dict[str, RuleValidator] = field(default_factory=dict)
    plugins: list[str] = field(default_factory=list)
    _hooks: dict[Hook, list[HookHandler]] = field(default_factory=dict)

    def use(self, plugin: Plugin) -> None:
        plugin.register(self)
        self.plugins.append(plugin.name)
        logger.info("Registered plugin %s", plugin.name)

    def register_field_type(self, field_type: str, definition: Any) -> None:
        self.field_types[field_type] = definition

    def register_validation_rule(self, rule_type: str, check: RuleValidator) -> None:
        self.validators[rule_type] = check

    def register_renderer(self, component_type: str, renderer: Any) -> None:
        self.components.register(component_type, renderer)

    def add_hook(self, hook: Hook | str, handler: HookHandler) -> None:
        """
        Append a handler to a hook chain.

        Raises:
            ValueError: If ``hook`` is not a known hook point
        """
        self._hooks.setdefault(Hook(hook), []).append(handler)

    def get_renderer(self, component_type: str) -> Any | None:
        if component_type not in self.components:
            return None
        return self.components.get(component_type)

    def get_validator(self, rule_type: str) -> RuleValidator | None:
        return self.validators.get(rule_type)

    def run_hook(self, hook: Hook | str, payload: Any) -> Any:
        """Pass ``payload`` through every handler of ``hook`` and return the result."""
        current = payload
        for handler in self._hooks.get(Hook(hook), []):
            current = handler(current)
        return current

    def submit(
        self,
        schema: DomainFormSchema,
        data: Mapping[str, Any],
        previous: Mapping[str, Any] | None = None,
        exists: ExistsCallback | None = None,
    ) -> Any:
        """
        Run a record through the data-submit lifecycle.

        ``beforeDataSubmit`` handlers run first, then the write-path guards
        with the registered validation rules, then ``afterDataSubmit``.

        Returns:
            The record as returned by the ``afterDataSubmit`` chain

        Raises:
            ValidationError: If the prepared record fails the write-path guards
        """
        record = self.run_hook(Hook.BEFORE_DATA_SUBMIT, dict(data))
        validate_for_write(schema, record, previous, exists, rule_validators=self.validators)
        return self.run_hook(Hook.AFTER_DATA_SUBMIT, record)


# =============================================================================
# Builtin plugins
# =============================================================================


def _is_trimmed(value: Any, rule_value: str | None = None) -> bool:
    if not isinstance(value, str):
        return True
    return value.strip() != ""


def _stamp_audit_time(payload: Any) -> dict[str, Any]:
    return {**(payload or {}), "_auditTs": datetime.now(UTC).isoformat()}


class AuditPlugin:
    """Adds a ``trimmed`` rule and stamps submitted records with ``_auditTs``."""

    name = "audit-plugin"

    def register(self, manager: PluginManager) -> None:
        manager.register_validation_rule("trimmed", _is_trimmed)
        manager.add_hook(Hook.BEFORE_DATA_SUBMIT, _stamp_audit_time)
