"""Routes (action, item id) to the item's kind-specific handler."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from utils.log import LogLevel, get_logger

from .errors import ItemNotFoundError, UnknownActionError
from .response import Response
from .store import ItemStore

if TYPE_CHECKING:
    from .world import World

trace = get_logger("actions")


class Action(StrEnum):
    DELETE = "delete"
    DONE = "done"
    REOPEN = "reopen"
    START = "start"
    DEFER = "defer"


# Handled here rather than by the payload
GENERIC_ACTIONS = frozenset({Action.DELETE})


def parse_action(name: str) -> Action:
    try:
        return Action(name)
    except ValueError:
        raise UnknownActionError(f"unknown action {name!r}", details={"action": name}) from None


class ActionDispatcher:
    """Stateless: everything it needs arrives with each call."""

    def dispatch(self, action: str, ident: str, world: World) -> Response:
        act = parse_action(action)
        store = ItemStore(world)
        trace("dispatch", LogLevel.INFO, action=str(act), ident=ident)
        if act in GENERIC_ACTIONS:
            return self._generic(act, ident, store)
        item = store.get(ident)
        response = item.do_action(act, world)
        store.save(item)
        return response

    def _generic(self, act: Action, ident: str, store: ItemStore) -> Response:
        if act is Action.DELETE:
            if not store.delete(ident):
                raise ItemNotFoundError(f"no item with ident {ident!r}", ident=ident)
            response = Response()
            response.add_tag("deleted", ident)
            return response
        raise UnknownActionError(f"no generic handler for {act}")
