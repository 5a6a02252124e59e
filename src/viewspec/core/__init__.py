"""Core viewspec metadata: fields, entities, views, entries and manifest loading."""

from .entity import Entity
from .entry import Entry, SupportsValues
from .errors import (
    ConfigurationError,
    ConstraintViolationError,
    DuplicateFieldError,
    ValidationError,
    ViewspecError,
)
from .fields import UNSET, Field, FieldKind, Reference, Validation
from .loader import build_entities, load_manifest, parse_manifest
from .views import (
    BatchDeleteView,
    CreationView,
    DeletionView,
    EditionView,
    FieldCollection,
    ListView,
    ShowView,
    View,
)

__all__ = [
    "UNSET",
    "BatchDeleteView",
    "ConfigurationError",
    "ConstraintViolationError",
    "CreationView",
    "DeletionView",
    "DuplicateFieldError",
    "EditionView",
    "Entity",
    "Entry",
    "Field",
    "FieldCollection",
    "FieldKind",
    "ListView",
    "Reference",
    "ShowView",
    "SupportsValues",
    "Validation",
    "ValidationError",
    "View",
    "ViewspecError",
    "build_entities",
    "load_manifest",
    "parse_manifest",
]
