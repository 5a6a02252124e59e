"""Shared pytest fixtures for viewspec tests."""

import pytest

from viewspec.core import Entity, Field, View


@pytest.fixture
def post() -> Entity:
    """Return a post entity with an identifier field."""
    return Entity("post", identifier=Field("post_id"))


@pytest.fixture
def post_view(post: Entity) -> View:
    """Return a view mixing plain and reference fields."""
    return View(post).add_fields(
        Field("title"),
        Field.reference("category", target_entity="category", refresh_delay=200),
        Field.reference_many("tags", target_entity="tag", refresh_delay=None),
        Field.reference("author", target_entity="user"),
    )
