"""Tests for the flat record codec: layout, determinism, round trip, bad input."""

import json
from datetime import date, datetime, timezone

import pytest

from item_store import ConfigurationError, DeserializeError, decode_item, encode_item
from item_store.codec import decode_record, flatten
from item_store.item import ItemBase


WHEN = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def _simple(world, name="Home", text="hi"):
    item = world.registry.make_item("simple", ident="s1", world=world)
    item.set_data({"name": name, "text": text}, world)
    item.base.stamp("alice", now=WHEN)
    return item


def _task(world):
    item = world.registry.make_item("task", ident="t1", world=world)
    item.set_data({"name": "Ship", "text": "a\nb", "context": "work",
                   "deferred_until": "2026-04-01"}, world)
    item.base.stamp("alice", now=WHEN)
    return item


class TestLayout:
    def test_record_is_flat(self, world):
        data = json.loads(encode_item(_simple(world)))
        assert data["ident"] == "s1"
        assert data["kind"] == "simple"
        assert data["name"] == "Home"
        assert data["text"] == "hi"
        assert data["revision"] == 1
        assert "base" not in data
        assert "data" not in data

    def test_encoding_is_deterministic(self, world):
        item = _simple(world)
        assert encode_item(item) == encode_item(item)
        assert encode_item(item) == encode_item(item.clone())

    def test_keys_are_sorted(self, world):
        text = encode_item(_simple(world)).decode("utf-8")
        keys = list(json.loads(text).keys())
        assert keys == sorted(keys)

    def test_payload_may_not_shadow_base_fields(self):
        with pytest.raises(ConfigurationError):
            flatten(ItemBase(ident="x", kind="simple"), {"revision": 3})


class TestRoundTrip:
    def test_scenario_simple_description_survives(self, world):
        item = _simple(world)
        fresh = decode_item(encode_item(item), world)
        assert fresh.description() == "Home"

    @pytest.mark.parametrize("make", [_simple, _task])
    def test_decode_encode_is_observationally_equal(self, world, make):
        item = make(world)
        back = decode_item(encode_item(item), world)
        assert back == item
        assert back.description() == item.description()
        assert back.is_open == item.is_open
        assert back.is_ready == item.is_ready
        assert back.data.to_fields() == item.data.to_fields()

    @pytest.mark.parametrize("make", [_simple, _task])
    def test_reencoding_is_byte_identical(self, world, make):
        blob = encode_item(make(world))
        assert encode_item(decode_item(blob, world)) == blob

    def test_task_values_keep_their_types(self, world):
        back = decode_item(encode_item(_task(world)), world)
        assert back.data.deferred_until == date(2026, 4, 1)
        assert back.data.text == "a\nb"

    def test_decode_into_existing_payload(self, world):
        item = _simple(world, name="Other", text="x")
        target = world.registry.make_item("simple", ident="s1")
        target.data.decode(encode_item(item), world)
        assert target.data.name == "Other"


class TestMalformed:
    def test_not_json(self, world):
        with pytest.raises(DeserializeError):
            decode_item(b"{nope", world)

    def test_not_an_object(self, world):
        with pytest.raises(DeserializeError):
            decode_record(b"[1, 2]")

    def test_not_utf8(self, world):
        with pytest.raises(DeserializeError):
            decode_item(b"\xff\xfe", world)

    def test_missing_kind(self, world):
        with pytest.raises(DeserializeError):
            decode_item(b'{"ident": "a"}', world)

    def test_wrong_field_type(self, world):
        blob = b'{"ident": "a", "kind": "simple", "name": 5}'
        with pytest.raises(DeserializeError):
            decode_item(blob, world)

    def test_unknown_task_status(self, world):
        blob = b'{"ident": "a", "kind": "task", "name": "n", "status": "Lost"}'
        with pytest.raises(DeserializeError):
            decode_item(blob, world)

    def test_unregistered_kind(self, world):
        with pytest.raises(ConfigurationError):
            decode_item(b'{"ident": "a", "kind": "note"}', world)

    def test_payload_kind_must_match(self, world):
        blob = encode_item(_simple(world))
        task = world.registry.make_item("task")
        with pytest.raises(DeserializeError):
            task.data.decode(blob, world)

    def test_missing_payload_fields_take_defaults(self, world):
        item = decode_item(b'{"ident": "a", "kind": "simple", "name": "n"}', world)
        assert item.data.text == ""
