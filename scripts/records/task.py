"""Task items: something to be done, optionally deferred to a later date."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from fs_store import RecordType
from item_store.actions import Action
from item_store.conflict import FieldUnion, LastWriteWins
from item_store.errors import DeserializeError, FieldError, ValidationError
from item_store.item_data import ItemData, normalize_line_breaks, require
from item_store.registry import ItemTypePolicy
from item_store.response import ActionResponse, Response
from item_store.view import edit_base_context, show_base_context
from utils.log import LogLevel, get_logger

trace = get_logger("task")


class TaskStatus(StrEnum):
    TO_DO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


OPEN_STATUSES = frozenset({TaskStatus.TO_DO, TaskStatus.IN_PROGRESS})


def parse_deferral(raw: str) -> date | None:
    """``""`` means not deferred; anything else must be an ISO date."""
    raw = raw.strip()
    if not raw:
        return None
    return date.fromisoformat(raw)


@dataclass
class Task(ItemData):
    kind = RecordType.TASK

    name: str = ""
    text: str = ""
    context: str = ""
    status: TaskStatus = TaskStatus.TO_DO
    deferred_until: date | None = None

    # -- Rendering --

    def for_edit(self, base, is_for_update, world):
        content = world.view.render("new-task.html", {
            "base": edit_base_context(base, is_for_update, world),
            "data": {
                "name": self.name,
                "context": self.context,
                "deferred_until": self.deferred_until.isoformat() if self.deferred_until else "",
            },
            "broken_text": normalize_line_breaks(self.text),
        })
        resp = Response()
        resp.clear_errors(["name-error", "deferred-error"])
        resp.add_tag("content", content)
        return resp

    def for_show(self, base, world):
        content = world.view.render("show-task.html", {
            "base": show_base_context(base, world),
            "name": self.name,
            "context": self.context,
            "status": str(self.status),
            "is_open": self.is_open(),
            "is_ready": self.is_ready(),
            "deferred_until": self.deferred_until.isoformat() if self.deferred_until else "",
            "rendered_text": world.markup(self.text),
        })
        resp = Response()
        resp.add_tag("content", content)
        return resp

    # -- Queries --

    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def is_ready(self) -> bool:
        if not self.is_open():
            return False
        return self.deferred_until is None or self.deferred_until <= date.today()

    def description(self) -> str:
        if self.context:
            return f"{self.name} @{self.context}"
        return self.name

    # -- Input --

    def set_data(self, vals, world):
        name = require(vals, "name")
        try:
            deferred = parse_deferral(vals.get("deferred_until", ""))
        except ValueError:
            raise ValidationError(
                "bad deferral date",
                errors=[FieldError("deferred-error", "Deferral must be a date (YYYY-MM-DD).")],
            ) from None
        self.name = name
        self.text = vals.get("text", "")
        self.context = vals.get("context", "")
        self.deferred_until = deferred

    def try_update(self, base, vals, world):
        ar = ActionResponse()
        ar.assert_(bool(vals.get("name", "").strip()), "name-error", "Name must be non-blank.")
        try:
            parse_deferral(vals.get("deferred_until", ""))
            valid_date = True
        except ValueError:
            valid_date = False
        ar.assert_(valid_date, "deferred-error", "Deferral must be a date (YYYY-MM-DD).")
        return ar

    # -- Actions --

    def do_action(self, base, action, world):
        if action == Action.DONE:
            self.status = TaskStatus.DONE
        elif action == Action.REOPEN:
            self.status = TaskStatus.TO_DO
        elif action == Action.START:
            self.status = TaskStatus.IN_PROGRESS
        elif action == Action.DEFER:
            raw = require(world.input, "deferred_until")
            try:
                self.deferred_until = parse_deferral(raw)
            except ValueError:
                raise ValidationError(
                    "bad deferral date",
                    errors=[FieldError("deferred-error", "Deferral must be a date (YYYY-MM-DD).")],
                ) from None
        else:
            return super().do_action(base, action, world)
        trace("task action", LogLevel.INFO, ident=base.ident, action=str(action),
              status=str(self.status))
        return self.for_show(base, world)

    # -- Serialization --

    def field_to_record(self, name, value):
        if name == "status":
            return str(value)
        if name == "deferred_until":
            return value.isoformat() if value is not None else None
        return value

    def field_from_record(self, name, value, default):
        if name == "status":
            try:
                return TaskStatus(value)
            except ValueError:
                raise DeserializeError(f"unknown task status {value!r}") from None
        if name == "deferred_until":
            try:
                return date.fromisoformat(value)
            except (TypeError, ValueError):
                raise DeserializeError(f"bad deferral date {value!r}") from None
        return super().field_from_record(name, value, default)


class TaskTypePolicy(ItemTypePolicy):
    """Policy for tasks.

    Independent field edits merge; a field changed on both sides goes to
    the later revision.
    """

    kind = RecordType.TASK

    def __init__(self) -> None:
        self.merge_policy = FieldUnion(tie_break=LastWriteWins())

    def factory(self) -> Task:
        return Task()
