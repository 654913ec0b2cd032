"""The capability set every kind-specific payload implements.

Payloads are dataclasses. Their dataclass fields are exactly the payload
fields of the persisted record, so the shared ``encode`` / ``decode`` /
``to_fields`` / ``load_fields`` machinery works for every kind; a kind only
overrides ``field_to_record`` / ``field_from_record`` for values that are
not plain JSON (dates, enums).
"""

from __future__ import annotations

import copy
import html
from abc import ABC, abstractmethod
from dataclasses import MISSING, fields
from typing import TYPE_CHECKING, Any, ClassVar

from .codec import decode_record, encode_record, flatten, split_record
from .errors import DeserializeError, FieldError, ProgrammingError, ValidationError

if TYPE_CHECKING:
    from .item import ItemBase, ItemBaseForSerde
    from .response import ActionResponse, Response
    from .world import World


def normalize_line_breaks(text: str) -> str:
    """Escape text for an attribute value and encode line breaks as ``&#10;``."""
    text = html.escape(text, quote=True)
    return text.replace("\r\n", "\n").replace("\r", "\n").replace("\n", "&#10;")


class ItemData(ABC):
    """Kind-specific payload of an item."""

    kind: ClassVar[str] = ""

    # -- Rendering --

    @abstractmethod
    def for_edit(self, base: ItemBase, is_for_update: bool, world: World) -> Response:
        """Rendering payload for the edit (or create) form."""

    @abstractmethod
    def for_show(self, base: ItemBase, world: World) -> Response:
        """Rendering payload for display. Must not mutate."""

    # -- Queries --

    @abstractmethod
    def is_open(self) -> bool: ...

    @abstractmethod
    def is_ready(self) -> bool: ...

    @abstractmethod
    def description(self) -> str:
        """Short label for lists and titles."""

    # -- Input --

    @abstractmethod
    def set_data(self, vals: dict[str, str], world: World) -> None:
        """Validate and apply raw named input.

        Raises ValidationError, leaving the payload untouched, when a
        mandatory field is absent. Expected fields missing from ``vals``
        reset to their defaults.
        """

    @abstractmethod
    def try_update(self, base: ItemBaseForSerde, vals: dict[str, str], world: World) -> ActionResponse:
        """Check ``vals`` without applying them; collect every failure."""

    # -- Actions --

    def do_action(self, base: ItemBase, action: str, world: World) -> Response:
        raise ProgrammingError(
            f"{self.kind} do action called, should never happen",
            details={"ident": base.ident, "action": str(action)},
        )

    # -- Serialization --

    def field_to_record(self, name: str, value: Any) -> Any:
        return value

    def field_from_record(self, name: str, value: Any, default: Any) -> Any:
        if isinstance(default, str) and not isinstance(value, str):
            raise DeserializeError(
                f"{self.kind} field {name!r} must be a string",
                details={"value": repr(value)},
            )
        return value

    def to_fields(self) -> dict[str, Any]:
        """Payload fields as JSON-ready values."""
        return {f.name: self.field_to_record(f.name, getattr(self, f.name)) for f in fields(self)}

    def load_fields(self, data: dict[str, Any]) -> None:
        """Replace every payload field from ``data``; absent keys take defaults.

        All values are converted before any is assigned, so a bad field
        leaves the payload as it was.
        """
        staged = {}
        for f in fields(self):
            default = _default_of(f)
            if f.name in data and data[f.name] is not None:
                staged[f.name] = self.field_from_record(f.name, data[f.name], default)
            else:
                staged[f.name] = default
        for name, value in staged.items():
            setattr(self, name, value)

    def encode(self, base: ItemBase) -> bytes:
        return encode_record(flatten(base, self.to_fields()))

    def decode(self, blob: bytes, world: World) -> None:
        serde = split_record(decode_record(blob))
        if serde.kind != self.kind:
            raise DeserializeError(
                f"record of kind {serde.kind!r} cannot load into {self.kind!r}",
                details={"ident": serde.ident},
            )
        self.load_fields(serde.payload_fields)

    def clone_payload(self) -> ItemData:
        return copy.deepcopy(self)


def _default_of(f) -> Any:
    if f.default is not MISSING:
        return f.default
    if f.default_factory is not MISSING:
        return f.default_factory()
    raise ProgrammingError(f"payload field {f.name!r} has no default")


def require(vals: dict[str, str], name: str) -> str:
    """Return a mandatory input field or raise ValidationError."""
    if name not in vals:
        message = f"no {name}"
        raise ValidationError(message, errors=[FieldError(tag=f"{name}-error", message=message)])
    return vals[name]
