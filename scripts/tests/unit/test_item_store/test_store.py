"""Tests for the ItemStore create / edit / show / update / delete flow."""

import pytest

from item_store import ItemNotFoundError, ValidationError


class TestCreate:
    def test_create_persists(self, store, repo):
        item = store.create("simple", {"name": "Home", "text": "hi"})
        assert repo.exists(item.ident)
        assert store.get(item.ident) == item
        assert item.base.revision == 1
        assert item.base.created_by == "alice"
        assert item.base.created_at == item.base.modified_at

    def test_invalid_input_reports_every_failure(self, store, repo):
        with pytest.raises(ValidationError) as exc:
            store.create("task", {"name": "", "deferred_until": "whenever"})
        assert sorted(e.tag for e in exc.value.errors) == ["deferred-error", "name-error"]
        assert "Name must be non-blank." in str(exc.value)
        assert repo.entries() == []

    def test_input_is_recorded_on_world(self, store, world):
        store.create("simple", {"name": "Home"})
        assert world.input == {"name": "Home"}


class TestReadAndList:
    def test_get_missing(self, store):
        with pytest.raises(ItemNotFoundError) as exc:
            store.get("nope")
        assert exc.value.to_dict()["details"] == {"ident": "nope"}

    def test_list_by_kind(self, store):
        a = store.create("simple", {"name": "A"})
        t = store.create("task", {"name": "T"})
        assert {i.ident for i in store.list_items()} == {a.ident, t.ident}
        assert [i.ident for i in store.list_items("task")] == [t.ident]


class TestUpdate:
    def test_update_bumps_revision(self, store):
        item = store.create("simple", {"name": "Home"})
        updated = store.update(item.ident, {"name": "Start", "text": "x"})
        stored = store.get(item.ident)
        assert stored == updated
        assert stored.data.name == "Start"
        assert stored.base.revision == 2
        assert stored.base.parent_revision == 1
        assert stored.base.created_at == item.base.created_at

    def test_failed_update_keeps_record(self, store, repo):
        item = store.create("simple", {"name": "Home"})
        before = repo.read(item.ident)
        with pytest.raises(ValidationError):
            store.update(item.ident, {"name": "  "})
        assert repo.read(item.ident) == before


class TestDelete:
    def test_delete(self, store):
        item = store.create("simple", {"name": "Home"})
        assert store.delete(item.ident) is True
        assert not store.exists(item.ident)
        assert store.delete(item.ident) is False


class TestForms:
    def test_for_new(self, store):
        resp = store.for_new("task")
        assert "Create" in resp["content"]
        assert "name-error" in resp.cleared_errors

    def test_for_edit_and_show(self, store):
        item = store.create("simple", {"name": "Home", "text": "a\nb"})
        assert "Update" in store.for_edit(item.ident)["content"]
        assert "<h1>Home</h1>" in store.for_show(item.ident)["content"]
