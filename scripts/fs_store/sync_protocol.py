"""Pending-write types shared by the repository and change lists."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class SyncOperation(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class ChangeEntry:
    """One pending write. ``data`` is the encoded record; None for deletes."""

    op: SyncOperation
    kind: str
    ident: str
    data: bytes | None = None

    def __post_init__(self):
        if self.op == SyncOperation.DELETE:
            if self.data is not None:
                raise ValueError("delete entries carry no data")
        elif self.data is None:
            raise ValueError(f"{self.op} entry for {self.ident!r} has no data")
