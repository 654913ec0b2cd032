"""Tests for TypeRegistry and ItemTypePolicy."""

from dataclasses import dataclass

import pytest

from item_store import ConfigurationError, Item, ItemBase, LastWriteWins, TypeRegistry
from item_store.registry import ItemTypePolicy
from records import Simple, SimpleTypePolicy, TaskTypePolicy, default_registry


@dataclass
class Note(Simple):
    kind = "note"


class NotePolicy(ItemTypePolicy):
    kind = "note"

    def __init__(self, merge_policy=None):
        self.merge_policy = merge_policy

    def factory(self):
        return Note()


class TestRegister:
    def test_default_registry_kinds(self):
        reg = default_registry()
        assert reg.kinds() == ["simple", "task"]
        assert reg.frozen
        assert "simple" in reg

    def test_register_new_kind(self):
        reg = TypeRegistry()
        reg.register_kind("note", NotePolicy(LastWriteWins()))
        item = reg.make_item("note")
        assert item.kind == "note"
        assert isinstance(item.data, Note)

    def test_policy_without_resolver_is_rejected(self):
        reg = TypeRegistry()
        with pytest.raises(ConfigurationError, match="no conflict resolver"):
            reg.register("note", NotePolicy())

    def test_mismatched_tag_is_rejected(self):
        reg = TypeRegistry()
        with pytest.raises(ConfigurationError):
            reg.register("page", SimpleTypePolicy())

    def test_duplicate_kind_is_rejected(self):
        reg = TypeRegistry()
        first = NotePolicy(LastWriteWins())
        reg.register("note", first)
        with pytest.raises(ConfigurationError, match="already registered"):
            reg.register("note", NotePolicy(LastWriteWins()))
        assert reg.get("note") is first

    def test_empty_tag_is_rejected(self):
        with pytest.raises(ConfigurationError):
            TypeRegistry().register("", SimpleTypePolicy())

    def test_frozen_registry_refuses_new_kinds(self):
        reg = default_registry()
        with pytest.raises(ConfigurationError, match="frozen"):
            reg.register("note", NotePolicy(LastWriteWins()))


class TestLookup:
    def test_unknown_kind(self, registry):
        with pytest.raises(ConfigurationError, match="not registered"):
            registry.get("note")

    def test_make_item_unknown_kind(self, registry):
        with pytest.raises(ConfigurationError):
            registry.make_item("note")

    def test_make_item_assigns_identity(self, registry, world):
        a = registry.make_item("task", world=world)
        b = registry.make_item("task")
        assert a.ident != b.ident
        assert a.base.created_by == "alice"
        assert a.base.revision == 0

    def test_make_item_with_ident(self, registry):
        assert registry.make_item("simple", ident="fixed").ident == "fixed"

    def test_factories_give_safe_defaults(self, registry, world):
        for kind in registry.kinds():
            item = registry.make_item(kind)
            assert item.description() == ""
            assert item.try_update({"name": "x"}, world).success
            item.for_edit(False, world)
            item.for_show(world)

    def test_policies_expose_merge_policy(self):
        assert SimpleTypePolicy().merge_policy.name == "field_union"
        assert TaskTypePolicy().merge_policy.name == "field_union+last_write_wins"


class TestItemInvariants:
    def test_payload_kind_must_match_base(self):
        with pytest.raises(ConfigurationError):
            Item(ItemBase(kind="task"), Simple())

    def test_ident_and_kind_are_immutable(self, registry):
        item = registry.make_item("simple")
        with pytest.raises(AttributeError):
            item.base.ident = "other"
        with pytest.raises(AttributeError):
            item.base.kind = "task"

    def test_stamp_advances_revision(self, registry):
        item = registry.make_item("simple")
        item.base.stamp("alice")
        assert item.base.revision == 1
        assert item.base.parent_revision is None
        created = item.base.created_at
        item.base.stamp("bob")
        assert item.base.revision == 2
        assert item.base.parent_revision == 1
        assert item.base.created_at == created
        assert item.base.created_by == "alice"
        assert item.base.updated_by == "bob"
