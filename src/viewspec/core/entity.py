"""
Entity definitions for viewspec.

An Entity names a data type, carries its identifier field and hands out
one cached view per view type.
"""

from __future__ import annotations

import logging

from .errors import ConfigurationError
from .fields import Field, humanize
from .views import (
    VIEW_TYPES,
    BatchDeleteView,
    CreationView,
    DeletionView,
    EditionView,
    ListView,
    ShowView,
    View,
)

logger = logging.getLogger(__name__)


class Entity:
    """
    A named data type.

    Attributes:
        name: Entity name, fixed at construction
        label: Display label, defaults to the humanised name
        identifier: Field identifying a record, shared with every view
        read_only: Disables write views when set
    """

    def __init__(
        self,
        name: str,
        label: str | None = None,
        identifier: Field | None = None,
        read_only: bool = False,
    ):
        if not name or not isinstance(name, str):
            raise ConfigurationError(f"Entity name must be a non-empty string, got {name!r}")
        self._name = name
        self._label = label
        self.identifier = identifier
        self.read_only = read_only
        self._views: dict[str, View] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def label(self) -> str:
        return self._label if self._label is not None else humanize(self._name)

    @label.setter
    def label(self, value: str | None) -> None:
        self._label = value

    @property
    def identifier(self) -> Field | None:
        return self._identifier

    @identifier.setter
    def identifier(self, field: Field | None) -> None:
        if field is not None and not isinstance(field, Field):
            raise ConfigurationError(f"Entity identifier must be a Field, got {field!r}")
        self._identifier = field

    @property
    def views(self) -> dict[str, View]:
        """Views created so far, keyed by view type name."""
        return dict(self._views)

    def view(self, type_name: str) -> View:
        """Return the cached view of the given type, creating it on first use."""
        view_cls = VIEW_TYPES.get(type_name)
        if view_cls is None:
            known = ", ".join(sorted(VIEW_TYPES))
            raise ConfigurationError(f"Unknown view type '{type_name}' (expected one of: {known})")

        view = self._views.get(type_name)
        if view is None:
            view = view_cls(self)
            self._views[type_name] = view
            logger.debug("Created view %s", view.name)
        return view

    def list_view(self) -> ListView:
        return self.view(ListView.__name__)  # type: ignore[return-value]

    def creation_view(self) -> CreationView:
        return self.view(CreationView.__name__)  # type: ignore[return-value]

    def edition_view(self) -> EditionView:
        return self.view(EditionView.__name__)  # type: ignore[return-value]

    def show_view(self) -> ShowView:
        return self.view(ShowView.__name__)  # type: ignore[return-value]

    def deletion_view(self) -> DeletionView:
        return self.view(DeletionView.__name__)  # type: ignore[return-value]

    def batch_delete_view(self) -> BatchDeleteView:
        return self.view(BatchDeleteView.__name__)  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"Entity(name={self._name!r})"
