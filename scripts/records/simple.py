"""Simple items: a named page of free text, like a wiki page."""

from __future__ import annotations

from dataclasses import dataclass

from fs_store import RecordType
from item_store.conflict import FieldUnion
from item_store.item_data import ItemData, normalize_line_breaks, require
from item_store.registry import ItemTypePolicy
from item_store.response import ActionResponse, Response
from item_store.view import edit_base_context, show_base_context
from utils.log import get_logger

trace = get_logger("simple")


@dataclass
class Simple(ItemData):
    """Data for a simple item."""

    kind = RecordType.SIMPLE

    # the name of the page
    name: str = ""
    # the text of the page, converted to markup for display
    text: str = ""

    def for_edit(self, base, is_for_update, world):
        broken_text = normalize_line_breaks(self.text)
        trace("text converted for edit", ident=base.ident, chars=len(broken_text))
        content = world.view.render("new-simple.html", {
            "base": edit_base_context(base, is_for_update, world),
            "data": {"name": self.name},
            "broken_text": broken_text,
        })
        resp = Response()
        resp.clear_errors(["name-error"])
        resp.add_tag("content", content)
        return resp

    def for_show(self, base, world):
        content = world.view.render("show-simple.html", {
            "base": show_base_context(base, world),
            "name": self.name,
            "rendered_text": world.markup(self.text),
        })
        resp = Response()
        resp.add_tag("content", content)
        return resp

    def is_open(self) -> bool:
        return True

    def is_ready(self) -> bool:
        return True

    def description(self) -> str:
        return self.name

    def set_data(self, vals, world):
        name = require(vals, "name")
        self.name = name
        self.text = vals.get("text", "")

    def try_update(self, base, vals, world):
        ar = ActionResponse()
        ar.assert_(bool(vals.get("name", "").strip()), "name-error", "Name must be non-blank.")
        return ar


class SimpleTypePolicy(ItemTypePolicy):
    """Policy for the simple item kind.

    Edits to different fields merge; the same field edited differently on
    both sides escalates.
    """

    kind = RecordType.SIMPLE

    def __init__(self) -> None:
        self.merge_policy = FieldUnion()

    def factory(self) -> Simple:
        return Simple()
