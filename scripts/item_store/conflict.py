"""Conflict reconciliation: merge-or-escalate, per kind.

A merge hands over divergent record blobs for the same identifier. Each
one is dispatched to the policy registered for its kind, which either
writes one merged record into the batch's ChangeList (RESOLVED) or raises
ConflictUnresolvable (ESCALATED). The batch is flushed once, at the end.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from pathlib import PurePath
from typing import TYPE_CHECKING, Any, Iterable

from fs_store import parse_record_stem
from utils.log import LogLevel, get_logger

from .change_list import ChangeList
from .errors import ConflictUnresolvable, DeserializeError

if TYPE_CHECKING:
    from .item import Item
    from .world import World

trace = get_logger("conflict")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class ConflictState(StrEnum):
    DETECTED = "detected"
    RESOLVED = "resolved"
    ESCALATED = "escalated"


@dataclass
class Conflict:
    """Divergent records for one identifier, as found by a merge."""

    path: str
    ours: bytes
    theirs: bytes
    ancestor: bytes | None = None
    state: ConflictState = ConflictState.DETECTED
    kind: str = field(init=False)
    ident: str = field(init=False)

    def __post_init__(self):
        try:
            self.kind, self.ident = parse_record_stem(PurePath(self.path).stem)
        except ValueError as e:
            raise DeserializeError(f"conflict path {self.path!r} is not a record path") from e

    def escalation(self, message: str, fields: list[str] | None = None) -> ConflictUnresolvable:
        return ConflictUnresolvable(
            message,
            ident=self.ident,
            ours=self.ours,
            theirs=self.theirs,
            ancestor=self.ancestor,
            fields=fields,
        )


def field_diff(ours: dict[str, Any], theirs: dict[str, Any]) -> list[str]:
    """Names of payload fields whose values differ."""
    return sorted(k for k in set(ours) | set(theirs) if ours.get(k) != theirs.get(k))


# ---------------------------------------------------------------------------
# Merge policies
# ---------------------------------------------------------------------------

class MergePolicy(ABC):
    """A deterministic way to reconcile two decoded sides."""

    name: str = ""

    @abstractmethod
    def merge(self, ours: Item, theirs: Item, ancestor: Item | None, conflict: Conflict) -> Item:
        """Return the merged item or raise ConflictUnresolvable."""


class LastWriteWins(MergePolicy):
    """Later revision wins; ties fall back to time, author, then bytes."""

    name = "last_write_wins"

    @staticmethod
    def _order_key(item: Item, blob: bytes) -> tuple:
        base = item.base
        return (base.revision, base.modified_at or _EPOCH, base.updated_by or "", blob)

    def pick(self, ours: Item, theirs: Item, conflict: Conflict) -> Item:
        if self._order_key(theirs, conflict.theirs) > self._order_key(ours, conflict.ours):
            return theirs
        return ours

    def merge(self, ours, theirs, ancestor, conflict):
        return self.pick(ours, theirs, conflict).clone()


class AlwaysEscalate(MergePolicy):
    name = "escalate"

    def merge(self, ours, theirs, ancestor, conflict):
        diff = field_diff(ours.data.to_fields(), theirs.data.to_fields())
        raise conflict.escalation(f"{conflict.ident} needs a manual merge", diff)


class FieldUnion(MergePolicy):
    """Three-way, field-by-field union.

    A field changed on one side only takes that side's value. A field that
    differs on both sides (or any differing field when there is no common
    ancestor) goes to ``tie_break``; without one the conflict escalates.
    """

    def __init__(self, tie_break: LastWriteWins | None = None) -> None:
        self.tie_break = tie_break

    @property
    def name(self) -> str:
        if self.tie_break is None:
            return "field_union"
        return f"field_union+{self.tie_break.name}"

    def merge(self, ours, theirs, ancestor, conflict):
        mine = ours.data.to_fields()
        other = theirs.data.to_fields()
        common = ancestor.data.to_fields() if ancestor is not None else None
        merged: dict[str, Any] = {}
        contested: list[str] = []
        for key in sorted(set(mine) | set(other)):
            a, b = mine.get(key), other.get(key)
            if a == b:
                merged[key] = a
            elif common is not None and a == common.get(key):
                merged[key] = b
            elif common is not None and b == common.get(key):
                merged[key] = a
            else:
                contested.append(key)
        if contested:
            if self.tie_break is None:
                raise conflict.escalation(
                    f"{conflict.ident}: both sides changed {', '.join(contested)}", contested
                )
            winner = self.tie_break.pick(ours, theirs, conflict).data.to_fields()
            for key in contested:
                merged[key] = winner.get(key)
            trace("contested fields settled by tie-break", ident=conflict.ident,
                  fields=contested, policy=self.tie_break.name)
        result = ours.clone()
        result.data.load_fields(merged)
        return result


# ---------------------------------------------------------------------------
# Merge engine
# ---------------------------------------------------------------------------

@dataclass
class Resolution:
    conflict: Conflict
    policy: str = ""
    merged: Item | None = None
    error: ConflictUnresolvable | None = None

    @property
    def ident(self) -> str:
        return self.conflict.ident

    @property
    def state(self) -> ConflictState:
        return self.conflict.state

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"ident": self.ident, "kind": self.conflict.kind,
                             "state": str(self.state), "policy": self.policy}
        if self.error is not None:
            d["error"] = self.error.to_dict()
        return d


@dataclass
class MergeReport:
    resolutions: list[Resolution] = field(default_factory=list)
    batch: str | None = None
    flushed: bool = False

    @property
    def resolved(self) -> list[Resolution]:
        return [r for r in self.resolutions if r.state == ConflictState.RESOLVED]

    @property
    def escalated(self) -> list[Resolution]:
        return [r for r in self.resolutions if r.state == ConflictState.ESCALATED]

    def to_dict(self) -> dict[str, Any]:
        return {
            "batch": self.batch,
            "flushed": self.flushed,
            "resolutions": [r.to_dict() for r in self.resolutions],
        }


class MergeEngine:
    """Resolve every conflict of one merge into one ChangeList and flush it.

    Escalations are recorded and do not stop the batch. Any other error
    aborts the batch before anything is written.
    """

    def merge(self, conflicts: Iterable[Conflict], world: World) -> MergeReport:
        world.ensure_open()
        changes = ChangeList()
        report = MergeReport()
        for conflict in conflicts:
            report.resolutions.append(self._resolve_one(conflict, changes, world))
        report.batch = changes.flush(world.require_repository())
        report.flushed = report.batch is not None
        trace("merge finished", LogLevel.INFO, resolved=len(report.resolved),
              escalated=len(report.escalated), batch=report.batch)
        return report

    def _resolve_one(self, conflict: Conflict, changes: ChangeList, world: World) -> Resolution:
        policy = world.registry.get(conflict.kind)
        resolution = Resolution(conflict=conflict, policy=policy.merge_policy.name)
        trace("conflict detected", ident=conflict.ident, kind=conflict.kind,
              has_ancestor=conflict.ancestor is not None)
        try:
            resolution.merged = policy.resolve_conflict(conflict, changes, world)
        except ConflictUnresolvable as e:
            conflict.state = ConflictState.ESCALATED
            resolution.error = e
            return resolution
        conflict.state = ConflictState.RESOLVED
        return resolution
