"""
Entry contract.

Entries are supplied by the persistence layer. Views only read their
``values`` mapping during validation and never write to it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .views import View


@runtime_checkable
class SupportsValues(Protocol):
    """Anything exposing a field name to value mapping."""

    @property
    def values(self) -> Mapping[str, Any]: ...


@dataclass
class Entry:
    """
    One record instance.

    Attributes:
        entity_name: Name of the entity the record belongs to
        values: Field name to value mapping
        identifier_value: Value of the identifier field, if known
    """

    entity_name: str | None = None
    values: dict[str, Any] = field(default_factory=dict)
    identifier_value: Any = None

    @classmethod
    def for_view(cls, view: View, values: Mapping[str, Any]) -> Entry:
        """Build an entry for a view, reading the identifier value from ``values``."""
        identifier = view.identifier
        entity = view.entity
        return cls(
            entity_name=entity.name if entity is not None else None,
            values=dict(values),
            identifier_value=values.get(identifier.name) if identifier is not None else None,
        )
