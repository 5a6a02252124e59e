"""Tests for entities, their view factories and the entry contract."""

from __future__ import annotations

import pytest

from viewspec.core import (
    BatchDeleteView,
    ConfigurationError,
    CreationView,
    DeletionView,
    EditionView,
    Entity,
    Entry,
    Field,
    ListView,
    ShowView,
)


class TestEntity:
    def test_name_required(self):
        with pytest.raises(ConfigurationError):
            Entity("")

    def test_name_is_read_only(self):
        entity = Entity("post")
        with pytest.raises(AttributeError):
            entity.name = "comment"  # type: ignore[misc]

    def test_label_defaults_to_humanised_name(self):
        assert Entity("blog_post").label == "Blog post"

    def test_identifier_setter(self):
        post_id = Field("post_id")
        entity = Entity("post")
        entity.identifier = post_id
        assert entity.identifier is post_id

    def test_identifier_must_be_field(self):
        with pytest.raises(ConfigurationError):
            Entity("post", identifier="id")  # type: ignore[arg-type]


class TestViewFactories:
    @pytest.mark.parametrize(
        "factory,view_cls",
        [
            ("list_view", ListView),
            ("creation_view", CreationView),
            ("edition_view", EditionView),
            ("show_view", ShowView),
            ("deletion_view", DeletionView),
            ("batch_delete_view", BatchDeleteView),
        ],
    )
    def test_factory_names_and_types(self, factory: str, view_cls: type):
        view = getattr(Entity("foobar"), factory)()
        assert isinstance(view, view_cls)
        assert view.name == f"foobar_{view_cls.__name__}"

    def test_list_view_name(self):
        assert Entity("foobar").list_view().name == "foobar_ListView"

    def test_views_are_cached(self):
        entity = Entity("post")
        assert entity.list_view() is entity.list_view()
        assert entity.view("ListView") is entity.list_view()
        assert list(entity.views) == ["ListView"]

    def test_unknown_view_type(self):
        with pytest.raises(ConfigurationError, match="Unknown view type"):
            Entity("post").view("FilterView")

    def test_read_only_disables_write_views(self):
        entity = Entity("post", read_only=True)
        assert entity.list_view().enabled
        assert entity.show_view().enabled
        assert not entity.creation_view().enabled
        assert not entity.edition_view().enabled
        assert not entity.deletion_view().enabled
        assert not entity.batch_delete_view().enabled

    def test_writable_entity_enables_all_views(self):
        entity = Entity("post")
        assert entity.creation_view().enabled


class TestEntry:
    def test_defaults(self):
        entry = Entry()
        assert entry.values == {}
        assert entry.entity_name is None
        assert entry.identifier_value is None

    def test_for_view_reads_identifier_value(self, post: Entity):
        entry = Entry.for_view(post.edition_view(), {"post_id": 12, "title": "Hi"})
        assert entry.entity_name == "post"
        assert entry.identifier_value == 12
        assert entry.values == {"post_id": 12, "title": "Hi"}

    def test_for_view_copies_values(self, post: Entity):
        values = {"post_id": 1}
        entry = Entry.for_view(post.show_view(), values)
        entry.values["title"] = "Hi"
        assert values == {"post_id": 1}


class TestPackageVersion:
    def test_version_from_metadata_or_fallback(self, monkeypatch: pytest.MonkeyPatch):
        from importlib.metadata import PackageNotFoundError

        from viewspec import _version

        def missing(name: str) -> str:
            raise PackageNotFoundError(name)

        monkeypatch.setattr(_version, "version", missing)
        assert _version.get_version() == "0.0.0"

        monkeypatch.setattr(_version, "version", lambda name: "1.2.3")
        assert _version.get_version() == "1.2.3"
