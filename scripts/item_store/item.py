"""Kind-independent item metadata and the Item wrapper around a payload."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import ConfigurationError
from .response import ActionResponse, Response

if TYPE_CHECKING:
    from .item_data import ItemData
    from .world import World


_IMMUTABLE = frozenset({"ident", "kind"})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ItemBase:
    """Metadata every item carries regardless of kind.

    ``ident`` and ``kind`` are fixed once the base is built. Open / ready
    flags are not stored; they are always asked of the payload.
    """

    ident: str = field(default_factory=lambda: str(uuid.uuid4()))
    kind: str = ""

    # Revision pointers
    revision: int = 0
    parent_revision: int | None = None

    # Audit
    created_at: datetime | None = None
    modified_at: datetime | None = None
    created_by: str | None = None
    updated_by: str | None = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _IMMUTABLE and name in self.__dict__:
            raise AttributeError(f"{name} is immutable after creation")
        super().__setattr__(name, value)

    def stamp(self, user: str | None, now: datetime | None = None) -> None:
        """Advance the revision for a new persisted write."""
        now = now or utc_now()
        if self.created_at is None:
            self.created_at = now
            self.created_by = user
            self.parent_revision = None
        else:
            self.parent_revision = self.revision
        self.revision += 1
        self.modified_at = now
        self.updated_by = user

    def copy(self) -> ItemBase:
        return ItemBase(**{f.name: getattr(self, f.name) for f in fields(self)})


BASE_FIELDS = frozenset(f.name for f in fields(ItemBase))


class ItemBaseForSerde(BaseModel):
    """Persisted view of :class:`ItemBase`.

    ``extra="allow"`` lets the flat record carry payload fields at the same
    level; they are available from ``model_extra``.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    ident: str = Field(min_length=1)
    kind: str = Field(min_length=1)
    revision: int = Field(default=0, ge=0)
    parent_revision: int | None = Field(default=None)
    created_at: datetime | None = Field(default=None)
    modified_at: datetime | None = Field(default=None)
    created_by: str | None = Field(default=None)
    updated_by: str | None = Field(default=None)

    @classmethod
    def from_base(cls, base: ItemBase) -> ItemBaseForSerde:
        return cls(**{name: getattr(base, name) for name in BASE_FIELDS})

    def to_base(self) -> ItemBase:
        return ItemBase(**{name: getattr(self, name) for name in BASE_FIELDS})

    def base_fields(self) -> dict[str, Any]:
        """Base metadata in JSON-ready form (extras excluded)."""
        return self.model_dump(mode="json", include=set(BASE_FIELDS))

    @property
    def payload_fields(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class Item:
    """An identified record: a base plus the payload of its kind."""

    def __init__(self, base: ItemBase, data: ItemData):
        if data.kind != base.kind:
            raise ConfigurationError(
                f"payload kind {data.kind!r} does not match item kind {base.kind!r}",
                details={"ident": base.ident},
            )
        self.base = base
        self.data = data

    def __repr__(self) -> str:
        return f"Item(ident={self.ident!r}, kind={self.kind!r}, rev={self.base.revision})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        return self.base == other.base and self.data == other.data

    @property
    def ident(self) -> str:
        return self.base.ident

    @property
    def kind(self) -> str:
        return self.base.kind

    @property
    def is_open(self) -> bool:
        return self.data.is_open()

    @property
    def is_ready(self) -> bool:
        return self.data.is_ready()

    def description(self) -> str:
        return self.data.description()

    # -- Delegation to the payload --

    def for_edit(self, is_for_update: bool, world: World) -> Response:
        return self.data.for_edit(self.base, is_for_update, world)

    def for_show(self, world: World) -> Response:
        return self.data.for_show(self.base, world)

    def encode(self) -> bytes:
        return self.data.encode(self.base)

    def set_data(self, vals: dict[str, str], world: World) -> None:
        self.data.set_data(vals, world)

    def try_update(self, vals: dict[str, str], world: World) -> ActionResponse:
        return self.data.try_update(ItemBaseForSerde.from_base(self.base), vals, world)

    def do_action(self, action: str, world: World) -> Response:
        return self.data.do_action(self.base, action, world)

    def clone(self) -> Item:
        return Item(self.base.copy(), self.data.clone_payload())
