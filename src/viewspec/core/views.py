"""
View types for viewspec.

A view is an ordered, named collection of fields describing one
presentation of an entity (list, creation, edition, show, deletion).
Views hold non-owning references to fields: a field added to several
views is the same object in each of them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Any, Literal

from .entry import SupportsValues
from .errors import ConfigurationError, DuplicateFieldError
from .fields import REFERENCE_KINDS, Field, FieldKind

if TYPE_CHECKING:
    from .entity import Entity

logger = logging.getLogger(__name__)


#: Deepest nesting accepted when flattening field sequences.
MAX_NESTING = 32


def flatten_fields(items: Iterable[Any]) -> list[Field]:
    """
    Collect fields from nested iterables, depth-first, left to right.

    Raises ConfigurationError on a non-field leaf, a sequence containing
    itself, or nesting deeper than MAX_NESTING.
    """
    flat: list[Field] = []
    _flatten_into(flat, items, depth=0, path=set())
    return flat


def _flatten_into(flat: list[Field], items: Iterable[Any], depth: int, path: set[int]) -> None:
    if depth > MAX_NESTING:
        raise ConfigurationError(f"Field sequences are nested deeper than {MAX_NESTING} levels")
    if id(items) in path:
        raise ConfigurationError("Field sequence contains itself")
    path.add(id(items))
    for item in items:
        if isinstance(item, Field):
            flat.append(item)
        elif isinstance(item, str | bytes) or not isinstance(item, Iterable):
            raise ConfigurationError(f"Expected a Field or a sequence of fields, got {item!r}")
        else:
            _flatten_into(flat, item, depth + 1, path)
    path.discard(id(items))


class FieldCollection:
    """
    Ordered collection of fields with unique names.

    Names are read from the fields on every lookup, so a renamed field is
    found under its new name. A field without an order receives its
    insertion index. Adding the same instance twice is a no-op; a different
    instance under an existing name raises DuplicateFieldError.
    """

    def __init__(self, owner_name: str | Callable[[], str | None] | None = None):
        self._owner_name = owner_name
        self._fields: list[Field] = []

    def _owner(self) -> str | None:
        if callable(self._owner_name):
            return self._owner_name()
        return self._owner_name

    def _check(self, field: Field, pending: dict[str, Field]) -> bool:
        """Return True when the field is new; raise when its name is taken."""
        if not isinstance(field, Field):
            raise ConfigurationError(f"Expected a Field, got {field!r}")
        existing = pending.get(field.name) or self.get(field.name)
        if existing is field:
            return False
        if existing is not None:
            raise DuplicateFieldError(field.name, self._owner())
        return True

    def _append(self, field: Field) -> None:
        if field.order is None:
            field.order = len(self._fields)
        self._fields.append(field)
        field.attach(self)

    def add(self, field: Field) -> bool:
        """Append a field. Returns False when the instance was already present."""
        if not self._check(field, {}):
            return False
        self._append(field)
        return True

    def extend(self, *items: Any) -> list[Field]:
        """
        Append every field of a nested batch, or none of them.

        The batch is flattened and checked as a whole before the first
        field is appended. Returns the fields actually added.
        """
        pending: dict[str, Field] = {}
        for field in flatten_fields(items):
            if self._check(field, pending):
                pending[field.name] = field

        added = list(pending.values())
        for field in added:
            self._append(field)
        return added

    def check_rename(self, field: Field, new_name: str) -> None:
        """Reject renaming a member to the name of another member."""
        existing = self.get(new_name)
        if existing is not None and existing is not field:
            raise DuplicateFieldError(new_name, self._owner())

    def get(self, name: str) -> Field | None:
        for field in self._fields:
            if field.name == name:
                return field
        return None

    def as_tuple(self) -> tuple[Field, ...]:
        return tuple(self._fields)

    def of_kind(self, kind: FieldKind | str) -> list[Field]:
        kind = FieldKind(kind)
        return [field for field in self._fields if field.kind == kind]

    def references(self, with_refresh_delay: bool | None = None) -> dict[str, Field]:
        """
        Map reference field names to fields, in insertion order.

        Args:
            with_refresh_delay: None keeps every reference field, True only
                those with a non-null refresh delay, False only those whose
                delay is null or unset.
        """
        references: dict[str, Field] = {}
        for field in self._fields:
            if field.kind not in REFERENCE_KINDS:
                continue
            if with_refresh_delay is not None and field.has_refresh_delay != with_refresh_delay:
                continue
            references[field.name] = field
        return references

    def __iter__(self) -> Iterator[Field]:
        return iter(list(self._fields))

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Field):
            return any(field is item for field in self._fields)
        return isinstance(item, str) and self.get(item) is not None


class View:
    """
    Ordered collection of fields presenting one entity.

    Attributes:
        entity: Bound entity, may be set after construction
        name: Defaults to "<entity name>_<view class name>"
        title: False until a title is configured
        description: Empty string by default
    """

    #: Whether the view writes records; write views of a read-only entity are disabled.
    writes = False

    def __init__(self, entity: Entity | None = None, name: str | None = None):
        self._entity = entity
        self._name = name
        self._title: str | Literal[False] = False
        self._description = ""
        self._fields = FieldCollection(lambda: self.name)

    @property
    def type_name(self) -> str:
        return type(self).__name__

    @property
    def entity(self) -> Entity | None:
        return self._entity

    @entity.setter
    def entity(self, value: Entity | None) -> None:
        self._entity = value

    @property
    def name(self) -> str:
        if self._name is not None:
            return self._name
        if self._entity is None:
            return self.type_name
        return f"{self._entity.name}_{self.type_name}"

    @name.setter
    def name(self, value: str) -> None:
        if not value:
            raise ConfigurationError("View name must be a non-empty string")
        self._name = value

    @property
    def title(self) -> str | Literal[False]:
        return self._title

    @title.setter
    def title(self, value: str | Literal[False]) -> None:
        self._title = value

    @property
    def description(self) -> str:
        return self._description

    @description.setter
    def description(self, value: str) -> None:
        self._description = value

    @property
    def identifier(self) -> Field | None:
        if self._entity is None:
            return None
        return self._entity.identifier

    @property
    def enabled(self) -> bool:
        return not (self.writes and self._entity is not None and self._entity.read_only)

    # =========================================================================
    # Field collection
    # =========================================================================

    def add_field(self, field: Field) -> View:
        if self._fields.add(field):
            logger.debug("Added field %s to view %s at order %s", field.name, self.name, field.order)
        return self

    def add_fields(self, *items: Any) -> View:
        """
        Append fields given individually or as nested sequences.

        Sequences are flattened depth-first, left to right, so another
        view's ``fields`` can be passed in directly. Calls accumulate.
        The batch is checked as a whole: on error nothing is added.
        """
        for field in self._fields.extend(*items):
            logger.debug("Added field %s to view %s at order %s", field.name, self.name, field.order)
        return self

    def get_fields(self) -> tuple[Field, ...]:
        return self._fields.as_tuple()

    @property
    def fields(self) -> tuple[Field, ...]:
        return self._fields.as_tuple()

    def get_field(self, name: str) -> Field | None:
        return self._fields.get(name)

    def get_fields_of_type(self, kind: FieldKind | str) -> list[Field]:
        return self._fields.of_kind(kind)

    def get_references(self, with_refresh_delay: bool | None = None) -> dict[str, Field]:
        return self._fields.references(with_refresh_delay)

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self, entry: SupportsValues) -> None:
        """
        Run each field's validation against the entry, in field order.

        The first error raised stops the cascade and propagates unchanged;
        fields after it are not evaluated.
        """
        values = entry.values
        for field in self._fields:
            try:
                field.validation.validate(values.get(field.name), field.name)
            except Exception:
                logger.debug("Field %s failed validation in view %s", field.name, self.name)
                raise

    def __repr__(self) -> str:
        return f"{self.type_name}(name={self.name!r}, fields={len(self._fields)})"


class ListView(View):
    """
    View for tabular presentation.

    Adds paging and sorting defaults and a separate collection of filter
    fields, which follows the same ordering and uniqueness rules.
    """

    DEFAULT_PER_PAGE = 30

    def __init__(self, entity: Entity | None = None, name: str | None = None):
        super().__init__(entity, name)
        self.per_page = self.DEFAULT_PER_PAGE
        self._sort_field: str | None = None
        self._sort_dir = "DESC"
        self._filters = FieldCollection(lambda: f"{self.name} filters")

    @property
    def per_page(self) -> int:
        return self._per_page

    @per_page.setter
    def per_page(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigurationError(f"per_page must be a positive integer, got {value!r}")
        self._per_page = value

    @property
    def sort_field(self) -> str:
        if self._sort_field is not None:
            return self._sort_field
        identifier = self.identifier
        return identifier.name if identifier is not None else "id"

    @sort_field.setter
    def sort_field(self, value: str | None) -> None:
        self._sort_field = value

    @property
    def sort_dir(self) -> str:
        return self._sort_dir

    @sort_dir.setter
    def sort_dir(self, value: str) -> None:
        direction = value.upper() if isinstance(value, str) else value
        if direction not in ("ASC", "DESC"):
            raise ConfigurationError(f"sort_dir must be 'ASC' or 'DESC', got {value!r}")
        self._sort_dir = direction

    @property
    def sort_field_name(self) -> str:
        return f"{self.name}.{self.sort_field}"

    def add_filter(self, field: Field) -> ListView:
        self._filters.add(field)
        return self

    def add_filters(self, *items: Any) -> ListView:
        self._filters.extend(*items)
        return self

    def get_filters(self) -> tuple[Field, ...]:
        return self._filters.as_tuple()


class CreationView(View):
    writes = True


class EditionView(View):
    writes = True


class ShowView(View):
    pass


class DeletionView(View):
    writes = True


class BatchDeleteView(View):
    writes = True


VIEW_TYPES: dict[str, type[View]] = {
    cls.__name__: cls
    for cls in (ListView, CreationView, EditionView, ShowView, DeletionView, BatchDeleteView)
}
