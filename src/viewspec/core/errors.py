"""
Error types for viewspec metadata construction and entry validation.
"""

from __future__ import annotations

from typing import Any


class ViewspecError(Exception):
    """Base exception for all viewspec errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(ViewspecError):
    """
    Raised when metadata is constructed with invalid values.

    Examples:
    - Empty or non-string field name
    - Refresh delay set on a field that is not a reference
    - Unknown view type requested from an entity
    - Malformed declaration manifest
    """

    pass


class DuplicateFieldError(ConfigurationError):
    """Raised when a second field with an existing name joins a field collection."""

    def __init__(self, field_name: str, view_name: str | None = None):
        self.field_name = field_name
        self.view_name = view_name
        where = f" in view '{view_name}'" if view_name else ""
        super().__init__(f"Field '{field_name}' is already defined{where}")


class ValidationError(ViewspecError):
    """
    Base class application validators may raise to reject a value.

    The validation cascade propagates whatever a validator raises; this
    class is a convenience, not a requirement.
    """

    pass


class ConstraintViolationError(ValidationError):
    """Raised when a value breaks one of a field's declarative constraints."""

    def __init__(
        self,
        field_name: str | None,
        constraint: str,
        value: Any,
        message: str | None = None,
    ):
        self.field_name = field_name
        self.constraint = constraint
        self.value = value
        if message is None:
            subject = f"Field '{field_name}'" if field_name else "Value"
            message = f"{subject} violates constraint '{constraint}'"
        super().__init__(message)
