"""
Component registry for form renderers.

Maps a runtime ``componentType`` to whatever the renderer uses to draw it.
The registry is an ordinary object that the caller builds and passes
around; the compiler and validator never look at it.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from protoform.core.ir import RuntimeFieldSchema, RuntimeFormSchema

# Every component type the compiler can emit, plus the renderer's checkbox
BUILTIN_COMPONENT_TYPES: tuple[str, ...] = (
    "string",
    "textarea",
    "markdown",
    "json",
    "image",
    "number",
    "switch",
    "checkbox",
    "select",
    "checkbox-group",
    "array",
    "array-image",
    "object",
    "array<object>",
)


class ComponentNotFoundError(KeyError):
    """Raised when no component is registered for a type."""

    def __init__(self, component_type: str):
        super().__init__(component_type)
        self.component_type = component_type

    def __str__(self) -> str:
        return f"Component not found for type: {self.component_type}"


class ComponentRegistry:
    """
    Mapping from component type name to a component reference.

    Example:
        registry = ComponentRegistry({"string": TextInput})
        registry.register("switch", Toggle)
        registry.missing_components(runtime_schema)  # ['number', ...]
    """

    def __init__(self, components: dict[str, Any] | None = None):
        self._components: dict[str, Any] = dict(components or {})

    def register(self, component_type: str, component: Any) -> None:
        self._components[component_type] = component

    def get(self, component_type: str) -> Any:
        try:
            return self._components[component_type]
        except KeyError:
            raise ComponentNotFoundError(component_type) from None

    def __contains__(self, component_type: object) -> bool:
        return component_type in self._components

    def __iter__(self) -> Iterator[str]:
        return iter(self._components)

    def __len__(self) -> int:
        return len(self._components)

    def missing_components(self, schema: RuntimeFormSchema) -> list[str]:
        """Component types used anywhere in ``schema`` that are not registered."""
        used: set[str] = set()
        for field in schema.fields:
            _collect_field_types(field, used)
        return sorted(t for t in used if t not in self._components)


def _collect_field_types(field: RuntimeFieldSchema, used: set[str]) -> None:
    used.add(field.component_type)
    _collect_child_types(field.props.get("objectFields") or [], used)


def _collect_child_types(children: list[dict[str, Any]], used: set[str]) -> None:
    # Children are serialized domain fields
    for child in children:
        child_type = child.get("fieldType")
        if isinstance(child_type, str):
            used.add(child_type)
        _collect_child_types(child.get("objectFields") or [], used)
