"""
Error types for protoform compilation, storage, and data validation.

Malformed IDL never raises: the compiler drops the offending block, statement,
or field and moves on. Exceptions are reserved for conditions a caller has to
act on (a record that fails validation, a broken config file, a missing form).
"""

from dataclasses import dataclass
from typing import Optional


class ProtoformError(Exception):
    """Base exception for all protoform errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class ValidationError(ProtoformError):
    """
    Raised when submitted data does not fit its form schema.

    Examples:
    - A json field holding text that does not parse
    - An object field holding a list
    - An image field holding something that is not a URL
    """

    @property
    def field_path(self) -> str | None:
        return self.context.field_path if self.context else None

    @property
    def label(self) -> str | None:
        return self.context.label if self.context else None


class UniqueKeyError(ValidationError):
    """
    Raised when a record breaks its unique-key contract.

    Examples:
    - Unique key value missing
    - Unique key value already taken by another record
    - Unique key value changed after it was initialized
    """

    pass


class ConfigError(ProtoformError):
    """Raised when protoform.toml cannot be read or has the wrong shape."""

    pass


class StoreError(ProtoformError):
    """Raised by form-storage implementations."""

    pass


class FormNotFoundError(StoreError):
    """Raised when no stored form matches a lookup."""

    pass


class ExpressionError(ProtoformError):
    """Base for visibility expression tokenize/parse/evaluate failures."""

    pass


@dataclass
class ErrorContext:
    """
    Location of a validation error inside a record.

    Attributes:
        field_path: Dotted/indexed path to the value (e.g. ``items[0].sku``)
        label: Human readable path built from field labels (e.g. ``Items / SKU``)
    """

    field_path: str
    label: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "Items / SKU (items[0].sku)"
        """
        if self.label and self.label != self.field_path:
            return f"{self.label} ({self.field_path})"
        return self.field_path


def make_validation_error(
    message: str,
    field_path: str | None = None,
    label: str | None = None,
) -> ValidationError:
    """
    Helper to create a ValidationError with optional field context.

    Args:
        message: Error description
        field_path: Optional path to the offending value
        label: Optional label path shown to users

    Returns:
        ValidationError with context if a path was provided
    """
    if field_path:
        return ValidationError(message, ErrorContext(field_path=field_path, label=label))
    return ValidationError(message)


def make_unique_key_error(message: str, field: str) -> UniqueKeyError:
    """Helper to create a UniqueKeyError pointing at the unique field."""
    return UniqueKeyError(message, ErrorContext(field_path=field, label=field))
