"""Append-only batch of pending writes, flushed exactly once."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

from fs_store import ChangeEntry, SyncOperation

from .codec import encode_item
from .errors import ProgrammingError

if TYPE_CHECKING:
    from fs_store import FsRepository

    from .item import Item


class ChangeList:
    """Pending writes for one merge batch (or one single-item save).

    Entries can only be added. A second entry for an identifier already in
    the list is refused, so an earlier resolution is never overwritten.
    """

    def __init__(self) -> None:
        self._entries: list[ChangeEntry] = []
        self._flushed = False

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ChangeEntry]:
        return iter(tuple(self._entries))

    def __contains__(self, ident: str) -> bool:
        return any(e.ident == ident for e in self._entries)

    @property
    def flushed(self) -> bool:
        return self._flushed

    @property
    def entries(self) -> tuple[ChangeEntry, ...]:
        return tuple(self._entries)

    def append(self, entry: ChangeEntry) -> None:
        if self._flushed:
            raise ProgrammingError("change list already flushed", details={"ident": entry.ident})
        if entry.ident in self:
            raise ProgrammingError(
                f"change list already holds a write for {entry.ident!r}",
                details={"ident": entry.ident, "op": str(entry.op)},
            )
        self._entries.append(entry)

    def write(self, item: Item, op: SyncOperation = SyncOperation.UPDATE) -> None:
        self.append(ChangeEntry(op=op, kind=item.kind, ident=item.ident, data=encode_item(item)))

    def delete(self, kind: str, ident: str) -> None:
        self.append(ChangeEntry(op=SyncOperation.DELETE, kind=kind, ident=ident))

    def flush(self, repository: FsRepository) -> str | None:
        """Hand every entry to the repository as one batch."""
        if self._flushed:
            raise ProgrammingError("change list flushed twice")
        batch = repository.apply(self._entries) if self._entries else None
        self._flushed = True
        return batch
