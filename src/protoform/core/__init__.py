"""Core protoform functionality: IR, IDL parser, type resolver, compiler, data validator, config."""

from . import ir
from .compiler import compile_document, compile_idl, pick_root
from .config import ProtoformConfig, find_config, load_config
from .errors import (
    ConfigError,
    ErrorContext,
    ExpressionError,
    FormNotFoundError,
    ProtoformError,
    StoreError,
    UniqueKeyError,
    ValidationError,
)
from .idl_parser import parse_idl
from .validator import DataValidator, validate

__all__ = [
    "ir",
    # Errors
    "ProtoformError",
    "ErrorContext",
    "ValidationError",
    "UniqueKeyError",
    "ConfigError",
    "StoreError",
    "FormNotFoundError",
    "ExpressionError",
    # Compilation
    "parse_idl",
    "pick_root",
    "compile_idl",
    "compile_document",
    # Validation
    "DataValidator",
    "validate",
    # Config
    "ProtoformConfig",
    "load_config",
    "find_config",
]
