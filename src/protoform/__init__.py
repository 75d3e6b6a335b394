"""
protoform - form schemas compiled from annotated IDL messages.

Parses message/enum definitions, resolves them into typed form fields,
converts them to renderer schemas, and validates submitted records.
"""

from __future__ import annotations

import re
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

# Re-export commonly used types for convenience
from .core import ir
from .core.compiler import compile_idl
from .core.errors import ProtoformError, UniqueKeyError, ValidationError
from .core.idl_parser import parse_idl
from .core.validator import validate
from .runtime.domain_to_runtime import to_runtime_schema


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    try:
        return _metadata_version("protoform")
    except Exception:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "ir",
    "ProtoformError",
    "ValidationError",
    "UniqueKeyError",
    "parse_idl",
    "compile_idl",
    "to_runtime_schema",
    "validate",
]
