"""
Declarative manifest loading.

Entities, their fields and their views can be declared in a TOML file:

    [entities.post]
    identifier = "id"

    [[entities.post.fields]]
    name = "id"

    [[entities.post.fields]]
    name = "category"
    kind = "reference"
    target_entity = "category"
    refresh_delay = 200

    [entities.post.views.ListView]
    fields = ["id", "category"]
    title = "Posts"
    per_page = 20

Fields are declared once per entity and shared by every view listing them.
Custom validators are code, so manifests only carry declarative constraints.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from . import fields as fields_mod
from .entity import Entity
from .errors import ConfigurationError
from .fields import FieldKind, Validation, compile_pattern
from .views import VIEW_TYPES, ListView

logger = logging.getLogger(__name__)


class FieldDecl(BaseModel):
    """
    Declaration of a single field.

    Attributes:
        name: Field identifier
        label: Optional display label
        kind: field, reference or reference_many
        target_entity: Related entity name (reference kinds only)
        refresh_delay: Refresh delay in milliseconds (reference kinds only)
        required, min_length, max_length, pattern: Declarative constraints
    """

    name: str
    label: str | None = None
    kind: FieldKind = FieldKind.FIELD
    target_entity: str | None = None
    refresh_delay: int | None = Field(default=None, ge=0)
    required: bool = False
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    pattern: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v:
            raise ValueError("Field name must not be empty")
        return v

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                compile_pattern(v)
            except ConfigurationError as e:
                raise ValueError(e.message) from e
        return v

    @model_validator(mode="after")
    def validate_length_bounds(self) -> FieldDecl:
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise ValueError(
                f"min_length ({self.min_length}) is greater than max_length ({self.max_length})"
            )
        return self


class ViewDecl(BaseModel):
    """Declaration of one view of an entity."""

    name: str | None = None
    title: str | None = None
    description: str | None = None
    fields: list[str] = Field(default_factory=list)
    # ListView only
    filters: list[str] = Field(default_factory=list)
    per_page: int | None = Field(default=None, ge=1)
    sort_field: str | None = None
    sort_dir: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def has_list_options(self) -> bool:
        return bool(
            self.filters
            or self.per_page is not None
            or self.sort_field is not None
            or self.sort_dir is not None
        )


class EntityDecl(BaseModel):
    """Declaration of an entity with its fields and views."""

    label: str | None = None
    identifier: str | None = None
    read_only: bool = False
    fields: list[FieldDecl] = Field(default_factory=list)
    views: dict[str, ViewDecl] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("views")
    @classmethod
    def validate_view_types(cls, v: dict[str, ViewDecl]) -> dict[str, ViewDecl]:
        for type_name in v:
            if type_name not in VIEW_TYPES:
                raise ValueError(f"Unknown view type '{type_name}'")
        return v


class ViewspecManifest(BaseModel):
    """Top-level manifest: entity declarations keyed by entity name."""

    entities: dict[str, EntityDecl] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")


def parse_manifest(data: dict[str, Any], source: str = "<manifest>") -> ViewspecManifest:
    try:
        return ViewspecManifest.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid manifest {source}:\n{e}") from e


def load_manifest(path: Path) -> ViewspecManifest:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Cannot parse manifest {path}: {e}") from e

    manifest = parse_manifest(data, source=str(path))
    logger.info("Loaded manifest %s with %d entities", path, len(manifest.entities))
    return manifest


def build_field(decl: FieldDecl) -> fields_mod.Field:
    validation = Validation(
        required=decl.required,
        min_length=decl.min_length,
        max_length=decl.max_length,
        pattern=decl.pattern,
    )

    if decl.kind == FieldKind.FIELD:
        if decl.target_entity is not None or decl.refresh_delay is not None:
            raise ConfigurationError(
                f"Field '{decl.name}' declares reference options but is not a reference"
            )
        return fields_mod.Field(decl.name, label=decl.label, validation=validation)

    # An omitted refresh_delay stays unset rather than explicitly disabled.
    refresh_delay = (
        decl.refresh_delay if "refresh_delay" in decl.model_fields_set else fields_mod.UNSET
    )
    factory = (
        fields_mod.Field.reference_many
        if decl.kind == FieldKind.REFERENCE_MANY
        else fields_mod.Field.reference
    )
    return factory(
        decl.name,
        target_entity=decl.target_entity,
        refresh_delay=refresh_delay,
        label=decl.label,
        validation=validation,
    )


def _resolve(
    entity_name: str, declared: dict[str, fields_mod.Field], names: list[str]
) -> list[fields_mod.Field]:
    resolved = []
    for name in names:
        if name not in declared:
            raise ConfigurationError(f"Entity '{entity_name}' has no field named '{name}'")
        resolved.append(declared[name])
    return resolved


def build_entity(name: str, decl: EntityDecl) -> Entity:
    entity = Entity(name, label=decl.label, read_only=decl.read_only)

    declared: dict[str, fields_mod.Field] = {}
    for field_decl in decl.fields:
        if field_decl.name in declared:
            raise ConfigurationError(f"Entity '{name}' declares field '{field_decl.name}' twice")
        declared[field_decl.name] = build_field(field_decl)

    if decl.identifier is not None:
        (entity.identifier,) = _resolve(name, declared, [decl.identifier])

    for type_name, view_decl in decl.views.items():
        view = entity.view(type_name)
        if view_decl.name is not None:
            view.name = view_decl.name
        if view_decl.title is not None:
            view.title = view_decl.title
        if view_decl.description is not None:
            view.description = view_decl.description
        view.add_fields(_resolve(name, declared, view_decl.fields))

        if isinstance(view, ListView):
            view.add_filters(_resolve(name, declared, view_decl.filters))
            if view_decl.per_page is not None:
                view.per_page = view_decl.per_page
            if view_decl.sort_field is not None:
                view.sort_field = view_decl.sort_field
            if view_decl.sort_dir is not None:
                view.sort_dir = view_decl.sort_dir
        elif view_decl.has_list_options:
            raise ConfigurationError(
                f"View '{view.name}' is not a ListView and cannot declare list options"
            )

    return entity


def build_entities(manifest: ViewspecManifest) -> dict[str, Entity]:
    """Build every declared entity, keyed by name."""
    return {name: build_entity(name, decl) for name, decl in manifest.entities.items()}
