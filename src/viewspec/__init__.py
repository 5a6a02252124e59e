"""
viewspec - declarative metadata for administrative views.

Describes which fields an entity exposes, how they are ordered, which of
them reference other entities and how entry values are validated before
they are persisted.
"""

from __future__ import annotations

from ._version import get_version
from .core import (
    ConfigurationError,
    DuplicateFieldError,
    Entity,
    Entry,
    Field,
    FieldKind,
    ListView,
    ValidationError,
    View,
    ViewspecError,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "ConfigurationError",
    "DuplicateFieldError",
    "Entity",
    "Entry",
    "Field",
    "FieldKind",
    "ListView",
    "ValidationError",
    "View",
    "ViewspecError",
]
