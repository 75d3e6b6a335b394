"""
Recursive data validation against a form schema.

Checks the *shape* of submitted values: a json field holds parseable JSON, a
markdown field has balanced code fences, image fields hold URLs, object and
array<object> fields hold dicts whose own fields are valid, and so on.
Presence is not checked here (see ``protoform.sync.records``): a value that
is missing, ``None`` or ``""`` is skipped.

Validation is fail-fast. The first defect raises a ``ValidationError`` whose
context carries the value's path (``items[0].sku``) and a label path
(``Items / SKU``).
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, NoReturn
from urllib.parse import urlparse

from protoform.core.errors import make_validation_error
from protoform.core.ir import (
    DomainFieldSchema,
    DomainFormSchema,
    RuleType,
    RuntimeFieldSchema,
    RuntimeFormSchema,
    ValidationRule,
)

logger = logging.getLogger(__name__)

RuleValidator = Callable[[Any, str | None], bool]

_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")

_BUILTIN_RULES = frozenset(rule.value for rule in RuleType)


@dataclass(frozen=True)
class _FieldSpec:
    """The parts of a domain or runtime field the validator needs."""

    key: str
    label: str
    kind: str
    rules: tuple[ValidationRule, ...] = ()
    children: tuple[_FieldSpec, ...] = ()

    def has_rule(self, rule_type: str) -> bool:
        return any(rule.type == rule_type for rule in self.rules)


def _spec_from_domain(domain_field: DomainFieldSchema) -> _FieldSpec:
    return _FieldSpec(
        key=domain_field.key,
        label=domain_field.label or domain_field.key,
        kind=domain_field.field_type,
        rules=tuple(domain_field.rules),
        children=tuple(_spec_from_domain(child) for child in domain_field.object_fields or []),
    )


def _spec_from_runtime(runtime_field: RuntimeFieldSchema) -> _FieldSpec:
    children = [
        DomainFieldSchema.model_validate(child)
        for child in runtime_field.props.get("objectFields") or []
    ]
    return _FieldSpec(
        key=runtime_field.id,
        label=runtime_field.label,
        kind=runtime_field.component_type,
        rules=tuple(runtime_field.rules),
        children=tuple(_spec_from_domain(child) for child in children),
    )


def _field_specs(schema: DomainFormSchema | RuntimeFormSchema) -> list[_FieldSpec]:
    if isinstance(schema, RuntimeFormSchema):
        return [_spec_from_runtime(f) for f in schema.fields]
    return [_spec_from_domain(f) for f in schema.fields]


# =============================================================================
# Value checks
# =============================================================================


def is_empty_value(value: Any) -> bool:
    """Absent values skip every shape check."""
    return value is None or value == ""


def has_balanced_fences(text: str) -> bool:
    """
    True when every fenced code block in ``text`` is closed.

    A fence is a run of three or more backticks or tildes indented by at most
    three spaces. A block is closed by a fence of the same character that is
    at least as long as the opening one and carries no info string.
    """
    open_fence: str | None = None
    for line in text.splitlines():
        m = _FENCE_RE.match(line)
        if not m:
            continue
        fence = m.group(1)
        if open_fence is None:
            open_fence = fence
        elif (
            fence[0] == open_fence[0]
            and len(fence) >= len(open_fence)
            and not line[m.end() :].strip()
        ):
            open_fence = None
    return open_fence is None


def is_image_url(value: Any) -> bool:
    """Data URI, blob URL, root-relative path, or an absolute http(s) URL."""
    if not isinstance(value, str):
        return False
    text = value.strip()
    if not text:
        return False
    lowered = text.lower()
    if lowered.startswith(("data:image/", "blob:")):
        return True
    if text.startswith("/") and not text.startswith("//"):
        return True
    parsed = urlparse(text)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_valid_json(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        json.loads(value)
    except ValueError:
        return False
    return True


def _measure(value: Any) -> float | None:
    """Length for strings and lists, magnitude for numbers."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, (str, list)):
        return len(value)
    return None


def _text_values(spec: _FieldSpec, value: Any, path: str) -> list[tuple[str, Any]]:
    """(path, value) pairs a json/markdown check applies to; array fields check each item."""
    if spec.kind == "array" and isinstance(value, list):
        return [
            (f"{path}[{index}]", item)
            for index, item in enumerate(value)
            if not is_empty_value(item)
        ]
    return [(path, value)]


def _number(text: str | None) -> float | None:
    try:
        return float(text) if text is not None else None
    except ValueError:
        return None


# =============================================================================
# Validator
# =============================================================================


class DataValidator:
    """
    Walks submitted data against field specs.

    Args:
        rule_validators: Extra rule checks by name; used for ``custom`` rules
            (looked up by the rule's ``plugin``, then its ``value``) and for
            rule types the validator does not know itself
    """

    def __init__(self, rule_validators: Mapping[str, RuleValidator] | None = None):
        self.rule_validators = dict(rule_validators or {})

    def validate(self, schema: DomainFormSchema | RuntimeFormSchema, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise make_validation_error("Submitted data must be an object")
        self._validate_fields(_field_specs(schema), data, path="", labels=())

    def _validate_fields(
        self,
        specs: list[_FieldSpec] | tuple[_FieldSpec, ...],
        data: Mapping[str, Any],
        path: str,
        labels: tuple[str, ...],
    ) -> None:
        for spec in specs:
            field_path = f"{path}.{spec.key}" if path else spec.key
            self._validate_value(spec, data.get(spec.key), field_path, (*labels, spec.label))

    def _validate_value(
        self,
        spec: _FieldSpec,
        value: Any,
        path: str,
        labels: tuple[str, ...],
    ) -> None:
        if is_empty_value(value):
            return

        label = " / ".join(labels)

        def fail(message: str) -> NoReturn:
            raise make_validation_error(message, field_path=path, label=label)

        if spec.kind == "json" or spec.has_rule(RuleType.JSON):
            for item_path, text in _text_values(spec, value, path):
                if not is_valid_json(text):
                    raise make_validation_error("must be valid JSON", field_path=item_path, label=label)

        if spec.kind == "markdown" or spec.has_rule(RuleType.MARKDOWN):
            for item_path, text in _text_values(spec, value, path):
                if not isinstance(text, str):
                    raise make_validation_error("must be markdown text", field_path=item_path, label=label)
                if not has_balanced_fences(text):
                    raise make_validation_error(
                        "has an unclosed code block", field_path=item_path, label=label
                    )

        if spec.kind == "image":
            self._check_image(value, fail)

        if spec.kind == "array-image":
            if not isinstance(value, list):
                fail("must be a list of image URLs")
            for index, item in enumerate(value):
                if not is_image_url(item):
                    raise make_validation_error(
                        f"item {index} must be an image URL",
                        field_path=f"{path}[{index}]",
                        label=label,
                    )

        if spec.kind == "object":
            if not isinstance(value, Mapping):
                fail("must be an object")
            self._validate_fields(spec.children, value, path, labels)

        if spec.kind == "array<object>":
            rows = [value] if isinstance(value, Mapping) else value
            if not isinstance(rows, list):
                fail("must be a list of objects")
            for index, row in enumerate(rows):
                if not isinstance(row, Mapping):
                    raise make_validation_error(
                        f"row {index} must be an object",
                        field_path=f"{path}[{index}]",
                        label=label,
                    )
                self._validate_fields(spec.children, row, f"{path}[{index}]", labels)

        self._check_rules(spec, value, fail)

    def _check_image(self, value: Any, fail: Callable[[str], NoReturn]) -> None:
        if isinstance(value, list):
            # Upload widgets store a list; the first entry is the image
            if value and not is_image_url(value[0]):
                fail("must be an image URL")
            return
        if not is_image_url(value):
            fail("must be an image URL")

    def _check_rules(self, spec: _FieldSpec, value: Any, fail: Callable[[str], NoReturn]) -> None:
        for rule in spec.rules:
            if rule.type == RuleType.PATTERN:
                if isinstance(value, str) and rule.value:
                    try:
                        matched = re.search(rule.value, value) is not None
                    except re.error:
                        logger.debug("Ignoring invalid pattern on %s: %r", spec.key, rule.value)
                        continue
                    if not matched:
                        fail("format is invalid")
            elif rule.type in (RuleType.MIN, RuleType.MAX):
                size = _measure(value)
                bound = _number(rule.value)
                if size is None or bound is None:
                    continue
                if rule.type == RuleType.MIN and size < bound:
                    fail("is too short" if not isinstance(value, (int, float)) else "is too small")
                if rule.type == RuleType.MAX and size > bound:
                    fail("is too long" if not isinstance(value, (int, float)) else "is too large")
            elif rule.type == RuleType.CUSTOM:
                name = rule.plugin or rule.value
                check = self.rule_validators.get(name) if name else None
                if check is not None and not check(value, rule.value):
                    fail(f"failed {name} validation")
            elif rule.type not in _BUILTIN_RULES:
                check = self.rule_validators.get(rule.type)
                if check is not None and not check(value, rule.value):
                    fail(f"failed {rule.type} validation")


def validate(
    schema: DomainFormSchema | RuntimeFormSchema,
    data: Mapping[str, Any],
    *,
    rule_validators: Mapping[str, RuleValidator] | None = None,
) -> None:
    """
    Validate submitted data against a domain or runtime schema.

    Raises:
        ValidationError: On the first value that does not fit its field
    """
    DataValidator(rule_validators).validate(schema, data)
