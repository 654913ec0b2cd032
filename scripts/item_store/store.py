"""Item store façade: the create / edit / show / update / delete flow."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fs_store import SyncOperation
from utils.log import LogLevel, get_logger

from .change_list import ChangeList
from .codec import decode_item
from .errors import ItemNotFoundError, ValidationError

if TYPE_CHECKING:
    from .item import Item
    from .response import ActionResponse, Response
    from .world import World

trace = get_logger("store")


class ItemStore:
    """Runs item operations for one session.

    Every persisted write goes through a ChangeList flush, even for a
    single item.
    """

    def __init__(self, world: World) -> None:
        world.ensure_open()
        self.world = world

    # -- Lookup --

    def get(self, ident: str) -> Item:
        blob = self.world.require_repository().read(ident)
        if blob is None:
            raise ItemNotFoundError(f"no item with ident {ident!r}", ident=ident)
        return decode_item(blob, self.world)

    def exists(self, ident: str) -> bool:
        return self.world.require_repository().exists(ident)

    def list_items(self, kind: str | None = None) -> list[Item]:
        repo = self.world.require_repository()
        return [self.get(ident) for _, ident in repo.entries(kind)]

    # -- Forms --

    def new_item(self, kind: str) -> Item:
        return self.world.registry.make_item(kind, world=self.world)

    def for_new(self, kind: str) -> Response:
        return self.new_item(kind).for_edit(False, self.world)

    def for_edit(self, ident: str) -> Response:
        return self.get(ident).for_edit(True, self.world)

    def for_show(self, ident: str) -> Response:
        return self.get(ident).for_show(self.world)

    # -- Writes --

    def check(self, item: Item, vals: dict[str, str]) -> ActionResponse:
        """Validate ``vals`` against ``item``; raise with every failure."""
        self.world.set_input(vals)
        response = item.try_update(vals, self.world)
        if not response.success:
            raise ValidationError(
                "; ".join(response.messages()),
                errors=response.errors,
                details={"ident": item.ident},
            )
        return response

    def create(self, kind: str, vals: dict[str, str]) -> Item:
        item = self.new_item(kind)
        self.check(item, vals)
        item.set_data(vals, self.world)
        self.save(item, SyncOperation.CREATE)
        return item

    def update(self, ident: str, vals: dict[str, str]) -> Item:
        item = self.get(ident)
        self.check(item, vals)
        item.set_data(vals, self.world)
        self.save(item)
        return item

    def save(self, item: Item, op: SyncOperation = SyncOperation.UPDATE) -> None:
        item.base.stamp(self.world.user)
        changes = ChangeList()
        changes.write(item, op)
        changes.flush(self.world.require_repository())
        trace(f"{op} saved", LogLevel.INFO, ident=item.ident, kind=item.kind,
              revision=item.base.revision)

    def delete(self, ident: str) -> bool:
        repo = self.world.require_repository()
        for kind, rec_ident in repo.entries():
            if rec_ident == ident:
                changes = ChangeList()
                changes.delete(kind, ident)
                changes.flush(repo)
                trace("deleted", LogLevel.INFO, ident=ident, kind=kind)
                return True
        return False
