"""Serialization codec: one flat JSON document per item.

Base metadata and payload fields share a single level; there is no nested
``base`` / ``data`` split. Output is deterministic for a given logical
value (sorted keys, fixed indent, UTF-8, trailing newline).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as SchemaError

from utils.log import get_logger

from .errors import ConfigurationError, DeserializeError
from .item import BASE_FIELDS, Item, ItemBase, ItemBaseForSerde

if TYPE_CHECKING:
    from .world import World

trace = get_logger("codec")


def flatten(base: ItemBase, payload_fields: dict[str, Any]) -> dict[str, Any]:
    """Merge base metadata and payload fields into one record dict."""
    clash = BASE_FIELDS.intersection(payload_fields)
    if clash:
        raise ConfigurationError(
            f"payload fields shadow base fields: {sorted(clash)}",
            details={"kind": base.kind},
        )
    record = ItemBaseForSerde.from_base(base).base_fields()
    record.update(payload_fields)
    return record


def encode_record(record: dict[str, Any]) -> bytes:
    """Serialize a flat record dict to bytes."""
    text = json.dumps(record, indent=2, sort_keys=True, ensure_ascii=False)
    return (text + "\n").encode("utf-8")


def decode_record(blob: bytes) -> dict[str, Any]:
    """Parse bytes into a flat record dict; raises DeserializeError."""
    try:
        data = json.loads(blob.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DeserializeError(f"record is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise DeserializeError(f"record must be an object, got {type(data).__name__}")
    return data


def split_record(record: dict[str, Any]) -> ItemBaseForSerde:
    """Validate base metadata; payload fields stay in ``payload_fields``."""
    try:
        return ItemBaseForSerde.model_validate(record)
    except SchemaError as e:
        raise DeserializeError(
            "record base metadata is invalid",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e


def encode_item(item: Item) -> bytes:
    blob = item.encode()
    trace("encoded", ident=item.ident, kind=item.kind, size=len(blob))
    return blob


def decode_item(blob: bytes, world: World) -> Item:
    """Rebuild an Item of whatever kind the record declares.

    The kind is looked up in the session's registry, so an unregistered
    kind surfaces as ConfigurationError rather than DeserializeError.
    """
    serde = split_record(decode_record(blob))
    policy = world.registry.get(serde.kind)
    item = policy.make_raw(serde.to_base())
    item.data.decode(blob, world)
    trace("decoded", ident=item.ident, kind=item.kind, revision=item.base.revision)
    return item
