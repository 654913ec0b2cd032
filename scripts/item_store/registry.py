"""Kind registry: kind tag -> policy (factory + conflict resolver)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from utils.log import LogLevel, get_logger

from .codec import decode_item
from .conflict import Conflict, MergePolicy
from .errors import ConfigurationError
from .item import Item, ItemBase

if TYPE_CHECKING:
    from .change_list import ChangeList
    from .item_data import ItemData
    from .world import World

trace = get_logger("registry")


class ItemTypePolicy(ABC):
    """Everything the shared machinery needs to know about one kind."""

    kind: ClassVar[str] = ""
    merge_policy: MergePolicy | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r})"

    @abstractmethod
    def factory(self) -> ItemData:
        """A payload with safe empty defaults."""

    def make_raw(self, base: ItemBase) -> Item:
        return Item(base, self.factory())

    def make_item(self, ident: str | None = None, world: World | None = None) -> Item:
        base = ItemBase(kind=self.kind) if ident is None else ItemBase(ident=ident, kind=self.kind)
        if world is not None:
            base.created_by = world.user
        return self.make_raw(base)

    def resolve_conflict(self, conflict: Conflict, changes: ChangeList, world: World) -> Item:
        """Merge both sides with ``merge_policy`` and queue the result.

        Raises ConflictUnresolvable when the policy refuses; nothing is
        queued in that case.
        """
        ours = decode_item(conflict.ours, world)
        theirs = decode_item(conflict.theirs, world)
        ancestor = decode_item(conflict.ancestor, world) if conflict.ancestor is not None else None
        for side in (ours, theirs, ancestor):
            if side is None:
                continue
            if side.kind != conflict.kind or side.ident != conflict.ident:
                raise conflict.escalation(
                    f"{conflict.ident}: side holds {side.kind}-@{side.ident}", ["kind", "ident"]
                )
        if ours.base.created_at != theirs.base.created_at:
            raise conflict.escalation(f"{conflict.ident}: sides were created separately", ["created_at"])
        merged = self.merge_policy.merge(ours, theirs, ancestor, conflict)
        merged.base.parent_revision = max(ours.base.revision, theirs.base.revision)
        merged.base.revision = merged.base.parent_revision + 1
        stamps = [t for t in (ours.base.modified_at, theirs.base.modified_at) if t is not None]
        merged.base.modified_at = max(stamps) if stamps else None
        merged.base.updated_by = world.user or merged.base.updated_by
        changes.write(merged)
        trace("conflict resolved", LogLevel.INFO, ident=conflict.ident,
              policy=self.merge_policy.name, revision=merged.base.revision)
        return merged


class TypeRegistry:
    """Closed kind registry, populated at startup and then frozen."""

    def __init__(self) -> None:
        self._types: dict[str, ItemTypePolicy] = {}
        self._frozen = False

    def register(self, kind: str, policy: ItemTypePolicy) -> None:
        if self._frozen:
            raise ConfigurationError(f"registry is frozen; cannot add {kind!r}")
        if not kind:
            raise ConfigurationError("kind tag must be non-empty")
        if kind in self._types:
            raise ConfigurationError(f"kind {kind!r} is already registered")
        if policy.kind != kind:
            raise ConfigurationError(
                f"policy {policy!r} registered under mismatched tag {kind!r}"
            )
        if not isinstance(policy.merge_policy, MergePolicy):
            raise ConfigurationError(f"kind {kind!r} has no conflict resolver")
        self._types[kind] = policy
        trace("registered kind", kind=kind, merge_policy=policy.merge_policy.name)

    register_kind = register

    def freeze(self) -> TypeRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, kind: str) -> ItemTypePolicy:
        try:
            return self._types[kind]
        except KeyError:
            raise ConfigurationError(f"item kind {kind!r} is not registered") from None

    def make_item(self, kind: str, ident: str | None = None, world: World | None = None) -> Item:
        return self.get(kind).make_item(ident=ident, world=world)

    def kinds(self) -> list[str]:
        return sorted(self._types)

    def __contains__(self, kind: str) -> bool:
        return kind in self._types

