"""
Field definitions for viewspec.

A Field is a named, orderable, labelled unit of data with an attached
validation holder. Reference fields are plain Fields carrying a
``Reference`` capability record; their kind is derived from it.

Fields are shared, never copied: the same instance may sit in several
views, and any mutation is visible through all of them.
"""

from __future__ import annotations

import re
import weakref
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from .errors import ConfigurationError, ConstraintViolationError


class FieldKind(StrEnum):
    """Capability tag of a field."""

    FIELD = "field"
    REFERENCE = "reference"
    REFERENCE_MANY = "reference_many"


REFERENCE_KINDS = frozenset({FieldKind.REFERENCE, FieldKind.REFERENCE_MANY})


class _Unset:
    """Marker for a refresh delay that was never configured."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def humanize(name: str) -> str:
    """
    Turn an identifier into a display label.

    Examples:
        post_title -> Post title
        postTitle  -> Post title
    """
    words = _CAMEL_BOUNDARY.sub(" ", name).replace("_", " ").replace("-", " ").split()
    if not words:
        return name
    text = " ".join(word.lower() for word in words)
    return text[0].upper() + text[1:]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str | list | tuple | dict | set):
        return len(value) == 0
    return False


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a constraint pattern, raising ConfigurationError when it is invalid."""
    try:
        return re.compile(pattern)
    except (re.error, TypeError) as e:
        raise ConfigurationError(f"Invalid pattern {pattern!r}: {e}") from e


class Validation:
    """
    Validation holder attached to every field.

    ``validator`` is a replaceable callable receiving the field value; it
    signals failure by raising. The declarative constraints are checked
    before it and are all disabled by default. A holder may be shared by
    several fields: the field name is supplied on each call.
    """

    def __init__(
        self,
        validator: Callable[[Any], Any] | None = None,
        *,
        required: bool = False,
        min_length: int | None = None,
        max_length: int | None = None,
        pattern: str | None = None,
    ):
        self.validator = validator
        self.required = required
        self._min_length: int | None = None
        self._max_length: int | None = None
        self.set_length_bounds(min_length, max_length)
        self.pattern = pattern

    @property
    def min_length(self) -> int | None:
        return self._min_length

    @min_length.setter
    def min_length(self, value: int | None) -> None:
        self.set_length_bounds(value, self._max_length)

    @property
    def max_length(self) -> int | None:
        return self._max_length

    @max_length.setter
    def max_length(self, value: int | None) -> None:
        self.set_length_bounds(self._min_length, value)

    def set_length_bounds(self, min_length: int | None, max_length: int | None) -> None:
        """Set both length bounds at once. Raises ConfigurationError on invalid bounds."""
        for bound in (min_length, max_length):
            if bound is not None and (
                isinstance(bound, bool) or not isinstance(bound, int) or bound < 0
            ):
                raise ConfigurationError(
                    f"Length bounds must be non-negative integers, got {bound!r}"
                )
        if min_length is not None and max_length is not None and min_length > max_length:
            raise ConfigurationError(
                f"min_length ({min_length}) is greater than max_length ({max_length})"
            )
        self._min_length = min_length
        self._max_length = max_length

    @property
    def pattern(self) -> str | None:
        return self._pattern.pattern if self._pattern is not None else None

    @pattern.setter
    def pattern(self, value: str | None) -> None:
        self._pattern = compile_pattern(value) if value is not None else None

    def validate(self, value: Any, field_name: str | None = None) -> None:
        """Check constraints, then run the custom validator. Raises on failure."""
        subject = f"Field '{field_name}'" if field_name else "Value"

        if self.required and _is_empty(value):
            raise ConstraintViolationError(field_name, "required", value, f"{subject} is required")

        if value is not None and hasattr(value, "__len__"):
            if self._min_length is not None and len(value) < self._min_length:
                raise ConstraintViolationError(
                    field_name,
                    "min_length",
                    value,
                    f"{subject} must be at least {self._min_length} long",
                )
            if self._max_length is not None and len(value) > self._max_length:
                raise ConstraintViolationError(
                    field_name,
                    "max_length",
                    value,
                    f"{subject} must be at most {self._max_length} long",
                )

        if self._pattern is not None and isinstance(value, str):
            if self._pattern.fullmatch(value) is None:
                raise ConstraintViolationError(
                    field_name,
                    "pattern",
                    value,
                    f"{subject} does not match pattern {self._pattern.pattern!r}",
                )

        if self.validator is not None:
            self.validator(value)

    def __repr__(self) -> str:
        return (
            f"Validation(validator={self.validator!r}, required={self.required!r}, "
            f"min_length={self._min_length!r}, max_length={self._max_length!r}, "
            f"pattern={self.pattern!r})"
        )


@dataclass
class Reference:
    """
    Reference capability of a field.

    Attributes:
        target_entity: Related entity, by name or Entity handle
        many: True for a to-many relation
        refresh_delay: Milliseconds between automatic refreshes; None
            disables refresh explicitly, UNSET means never configured
    """

    target_entity: Any = None
    many: bool = False
    refresh_delay: int | None = UNSET

    @property
    def target_entity_name(self) -> str | None:
        if self.target_entity is None:
            return None
        return getattr(self.target_entity, "name", self.target_entity)


def _check_refresh_delay(value: Any) -> None:
    if value is UNSET or value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(
            f"Refresh delay must be a non-negative integer or None, got {value!r}"
        )


class Field:
    """
    A named, orderable, labelled unit of data.

    Attributes:
        name: Field identifier, unique within a view
        label: Display label, defaults to the humanised name
        order: Position assigned the first time the field joins a view
        validation: Validation holder
    """

    def __init__(
        self,
        name: str,
        label: str | None = None,
        order: int | None = None,
        validation: Validation | None = None,
        reference: Reference | None = None,
    ):
        self._validation = validation or Validation()
        self._owners: weakref.WeakSet[Any] = weakref.WeakSet()
        self.name = name
        self._label = label
        self.order = order
        self._reference = reference
        if reference is not None:
            _check_refresh_delay(reference.refresh_delay)

    @classmethod
    def reference(
        cls,
        name: str,
        target_entity: Any = None,
        refresh_delay: int | None = UNSET,
        **kwargs: Any,
    ) -> Field:
        """Build a to-one reference field."""
        return cls(name, reference=Reference(target_entity, False, refresh_delay), **kwargs)

    @classmethod
    def reference_many(
        cls,
        name: str,
        target_entity: Any = None,
        refresh_delay: int | None = UNSET,
        **kwargs: Any,
    ) -> Field:
        """Build a to-many reference field."""
        return cls(name, reference=Reference(target_entity, True, refresh_delay), **kwargs)

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        if not value or not isinstance(value, str):
            raise ConfigurationError(f"Field name must be a non-empty string, got {value!r}")
        # Collections holding this field must stay unique by name.
        for owner in self._owners:
            owner.check_rename(self, value)
        self._name = value

    def attach(self, collection: Any) -> None:
        """Record a collection holding this field. The reference is weak."""
        self._owners.add(collection)

    @property
    def label(self) -> str:
        if self._label is None:
            return humanize(self._name)
        return self._label

    @label.setter
    def label(self, value: str | None) -> None:
        self._label = value

    @property
    def order(self) -> int | None:
        return self._order

    @order.setter
    def order(self, value: int | None) -> None:
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise ConfigurationError(f"Field order must be an integer, got {value!r}")
        self._order = value

    @property
    def validation(self) -> Validation:
        return self._validation

    @property
    def kind(self) -> FieldKind:
        if self._reference is None:
            return FieldKind.FIELD
        if self._reference.many:
            return FieldKind.REFERENCE_MANY
        return FieldKind.REFERENCE

    @property
    def is_reference(self) -> bool:
        return self._reference is not None

    def get_reference(self) -> Reference | None:
        """Return the reference capability, or None for a plain field."""
        return self._reference

    def _require_reference(self) -> Reference:
        if self._reference is None:
            raise ConfigurationError(f"Field '{self._name}' is not a reference field")
        return self._reference

    @property
    def target_entity(self) -> Any:
        return self._require_reference().target_entity

    @target_entity.setter
    def target_entity(self, value: Any) -> None:
        self._require_reference().target_entity = value

    @property
    def target_entity_name(self) -> str | None:
        return self._require_reference().target_entity_name

    @property
    def refresh_delay(self) -> int | None:
        """Refresh delay in milliseconds; None when disabled or never set."""
        delay = self._require_reference().refresh_delay
        return None if delay is UNSET else delay

    @refresh_delay.setter
    def refresh_delay(self, value: int | None) -> None:
        ref = self._require_reference()
        _check_refresh_delay(value)
        ref.refresh_delay = value

    @property
    def refresh_delay_is_set(self) -> bool:
        """True once a refresh delay was configured, including an explicit None."""
        return self._reference is not None and self._reference.refresh_delay is not UNSET

    @property
    def has_refresh_delay(self) -> bool:
        return self.refresh_delay_is_set and self._reference.refresh_delay is not None

    def __repr__(self) -> str:
        return f"Field(name={self._name!r}, kind={self.kind.value!r}, order={self._order!r})"
