"""
String utility functions for protoform.

Provides the naming transformations shared by the compiler, the catalog, and
the CLI.
"""

from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[_-]")
_UNSPECIFIED_SUFFIX = re.compile(r"_UNSPECIFIED$", re.IGNORECASE)


def to_pascal(app_id: str) -> str:
    """
    Convert an app identifier to PascalCase.

    Only the first character of every ``_``/``-`` separated part is upper-cased;
    the rest of each part is kept as written.

    Examples:
        >>> to_pascal("invoice")
        'Invoice'
        >>> to_pascal("user-profile")
        'UserProfile'
        >>> to_pascal("hr_leaveRequest")
        'HrLeaveRequest'
    """
    return "".join(part[0].upper() + part[1:] for part in _SEPARATORS.split(app_id) if part)


def title_case_id(app_id: str) -> str:
    """
    Convert an app identifier to a display title.

    Examples:
        >>> title_case_id("user-profile")
        'User Profile'
    """
    return " ".join(part[0].upper() + part[1:] for part in _SEPARATORS.split(app_id) if part)


def humanize_field_name(name: str) -> str:
    """
    Default display label for a field.

    Examples:
        >>> humanize_field_name("first_name")
        'First name'
    """
    text = name.replace("_", " ")
    return text[:1].upper() + text[1:]


def humanize_enum_key(key: str) -> str:
    """
    Default display label for an enum member.

    Strips a trailing ``_UNSPECIFIED`` and title-cases the remaining words.
    A key that reduces to nothing keeps its raw name.

    Examples:
        >>> humanize_enum_key("STATUS_ACTIVE")
        'Status Active'
        >>> humanize_enum_key("ACTIVE_UNSPECIFIED")
        'Active'
    """
    normalized = _UNSPECIFIED_SUFFIX.sub("", key).replace("_", " ").strip().lower()
    if not normalized:
        return key
    return " ".join(part[0].upper() + part[1:] for part in normalized.split())


def unquote(text: str) -> str:
    """Strip one pair of matching surrounding quotes, if present."""
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ('"', "'"):
        return text[1:-1]
    return text
