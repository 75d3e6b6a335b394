"""
Annotation parsing for IDL fields and enum members.

UI/validation metadata reaches a field from three places:

1. Comment lines directly above the declaration (leading comments)
2. A ``//`` comment on the declaration's own lines (trailing comments)
3. The bracketed option list of the declaration

Comment directives::

    // @label Invoice number*        label; trailing ``*`` also implies required
    // @required / @required=false   bare form means true
    // @pattern ^INV-\\d+$           also @regex; quotes stripped
    // @list / @table / @list_visible[=bool]
    // @unique / @unique_key / @uk[=bool]
    // @value "A"                    enum members only

Bracket options (package-qualified names collapse to the bare key)::

    [(ui.ui_label) = "Name", (ui_required) = true, (ui_widget) = "markdown"]
    [(ui_enum_label) = "Active", (ui_enum_value) = "A"]

Precedence: leading < trailing < bracket options. See :func:`merge_field_meta`.
"""

from __future__ import annotations

import logging
import re

from protoform.core.ir import EnumValueMeta, FieldMeta
from protoform.core.strings import unquote

logger = logging.getLogger(__name__)

# A directive value runs until the next @token or the end of the comment
_VALUE_END = r"(?=\s+@[A-Za-z_]\w*|$)"
_BOOL_TOKEN = r"(?:\s*[:=]?\s*(true|false|1|0|yes|no)\b)?"

_LABEL_RE = re.compile(rf"@label\b\s*[:=]?\s*(.+?){_VALUE_END}", re.IGNORECASE)
_REQUIRED_RE = re.compile(rf"@required?\b{_BOOL_TOKEN}", re.IGNORECASE)
_PATTERN_RE = re.compile(rf"@(?:pattern|regex)\b\s*[:=]?\s*(.+?){_VALUE_END}", re.IGNORECASE)
_LIST_RE = re.compile(rf"@(?:list_visible|list|table)\b{_BOOL_TOKEN}", re.IGNORECASE)
_UNIQUE_RE = re.compile(rf"@(?:unique_key|unique|uk)\b{_BOOL_TOKEN}", re.IGNORECASE)
_VALUE_RE = re.compile(rf"@value\b\s*[:=]?\s*(.+?){_VALUE_END}", re.IGNORECASE)
_TRAILING_STARS = re.compile(r"\s*\*+\s*$")

_TRUE_TOKENS = frozenset({"true", "1", "yes"})

# Widgets ui_widget may select
WIDGETS = frozenset({"textarea", "markdown", "json", "image"})


def _bool_token(token: str | None) -> bool:
    """A bare directive means true; otherwise only true/1/yes are true."""
    if token is None:
        return True
    return token.lower() in _TRUE_TOKENS


def normalize_pattern(raw: str) -> str | None:
    """
    Turn an annotated pattern into a usable regex string.

    Collapses doubled backslashes (IDL string escaping) and returns ``None``
    when the result does not compile, so a broken pattern never reaches the
    renderer.
    """
    pattern = raw.replace("\\\\", "\\")
    try:
        re.compile(pattern)
    except re.error as e:
        logger.debug("Dropping invalid pattern %r: %s", pattern, e)
        return None
    return pattern


# =============================================================================
# Comment directives
# =============================================================================


def parse_field_comment(comment: str) -> FieldMeta:
    """Extract field metadata from the text of one ``//`` comment."""
    if not comment:
        return FieldMeta()

    label: str | None = None
    required: bool | None = None
    pattern: str | None = None
    list_visible: bool | None = None
    unique_key: bool | None = None

    m = _LABEL_RE.search(comment)
    if m:
        raw_label = m.group(1).strip()
        if raw_label:
            label = unquote(_TRAILING_STARS.sub("", raw_label).strip()) or None
            if _TRAILING_STARS.search(raw_label):
                required = True

    m = _REQUIRED_RE.search(comment)
    if m:
        required = _bool_token(m.group(1))

    m = _PATTERN_RE.search(comment)
    if m:
        pattern = normalize_pattern(unquote(m.group(1).strip()))

    m = _LIST_RE.search(comment)
    if m:
        list_visible = _bool_token(m.group(1))

    m = _UNIQUE_RE.search(comment)
    if m:
        unique_key = _bool_token(m.group(1))

    return FieldMeta(
        label=label,
        required=required,
        pattern=pattern,
        list_visible=list_visible,
        unique_key=unique_key,
    )


def parse_enum_value_comment(comment: str) -> EnumValueMeta:
    """Extract enum member metadata (``@label``, ``@value``) from a comment."""
    if not comment:
        return EnumValueMeta()

    label: str | None = None
    value: str | None = None

    m = _LABEL_RE.search(comment)
    if m:
        label = unquote(m.group(1).strip()) or None

    m = _VALUE_RE.search(comment)
    if m:
        value = unquote(m.group(1).strip()) or None

    return EnumValueMeta(label=label, value=value)


# =============================================================================
# Bracket options
# =============================================================================


def _option_re(key: str, value: str) -> re.Pattern[str]:
    # (key), (pkg.key) or a bare key, followed by = value
    return re.compile(
        rf"(?<![\w.])\(?(?:[A-Za-z_]\w*\.)*{key}\)?\s*=\s*{value}",
        re.IGNORECASE,
    )


_STRING_VALUE = r'"((?:\\.|[^"\\])*)"'
_BOOL_VALUE = r"(true|false)\b"


def extract_string_option(options: str, key: str) -> str | None:
    """Value of a string option, with ``\\"`` and ``\\\\`` escapes resolved."""
    m = _option_re(key, _STRING_VALUE).search(options)
    if m is None:
        return None
    return m.group(1).replace('\\"', '"').replace("\\\\", "\\")


def extract_bool_option(options: str, key: str) -> bool | None:
    m = _option_re(key, _BOOL_VALUE).search(options)
    if m is None:
        return None
    return m.group(1).lower() == "true"


def parse_field_options(options: str) -> FieldMeta:
    """Extract field metadata from the inside of a ``[...]`` option list."""
    if not options:
        return FieldMeta()

    label = extract_string_option(options, "ui_label") or None

    pattern = None
    raw_pattern = extract_string_option(options, "ui_pattern")
    if raw_pattern:
        pattern = normalize_pattern(raw_pattern)

    widget = None
    raw_widget = extract_string_option(options, "ui_widget")
    if raw_widget and raw_widget.strip():
        widget = raw_widget.strip().lower()

    return FieldMeta(
        label=label,
        required=extract_bool_option(options, "ui_required"),
        pattern=pattern,
        list_visible=extract_bool_option(options, "ui_list"),
        unique_key=extract_bool_option(options, "ui_unique"),
        widget=widget,
    )


def parse_enum_value_options(options: str) -> EnumValueMeta:
    """Extract ``ui_enum_label`` / ``ui_enum_value`` from an option list.

    An empty ``ui_enum_value`` is kept: it deliberately maps the member to ``""``.
    """
    if not options:
        return EnumValueMeta()
    return EnumValueMeta(
        label=extract_string_option(options, "ui_enum_label") or None,
        value=extract_string_option(options, "ui_enum_value"),
    )


def merge_field_meta(leading: FieldMeta, trailing: FieldMeta, options: FieldMeta) -> FieldMeta:
    """Combine the three metadata sources; later sources win per attribute."""
    return leading.merged(trailing).merged(options)
