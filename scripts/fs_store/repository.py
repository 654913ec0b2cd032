"""Filesystem repository of encoded item records.

Layout::

    <root>/<kind>-@<ident>.json          one flat record per item
    <root>/.pending/<batch>/             staged batch being flushed
    <root>/.pending/<batch>/manifest.json  commit point of that batch

Writes only happen through :meth:`FsRepository.apply`, which stages every
record of a batch, writes the manifest last, and then moves the staged
files into place. A batch without a manifest is discarded on the next
open; a batch with one is replayed. Readers therefore never observe half
of a batch once the repository has been reopened.
"""

from __future__ import annotations

import json
import os
import shutil
import uuid
from pathlib import Path
from typing import Iterable

from utils.conf import MANIFEST_NAME, PENDING_DIR_NAME, get_repo_path
from utils.log import LogLevel, get_logger

from .naming import RECORD_SUFFIX, parse_record_stem, record_file_name
from .sync_protocol import ChangeEntry, SyncOperation

trace = get_logger("repository")


class FsRepository:
    """Directory of ``<kind>-@<ident>.json`` records with batch flushes."""

    def __init__(self, root: str | Path | None = None) -> None:
        self._root = get_repo_path(root)
        self._pending = self._root / PENDING_DIR_NAME
        self.recover()

    @property
    def root(self) -> Path:
        return self._root

    # -- Reading --

    def _iter_record_files(self) -> Iterable[tuple[str, str, Path]]:
        for fp in sorted(self._root.glob(f"*{RECORD_SUFFIX}")):
            try:
                kind, ident = parse_record_stem(fp.stem)
            except ValueError:
                continue
            yield kind, ident, fp

    def path_of(self, ident: str) -> Path | None:
        """Path of the record for ``ident``, or None if there is none."""
        for _, rec_ident, fp in self._iter_record_files():
            if rec_ident == ident:
                return fp
        return None

    def exists(self, ident: str) -> bool:
        return self.path_of(ident) is not None

    def read(self, ident: str) -> bytes | None:
        fp = self.path_of(ident)
        if fp is None:
            return None
        return fp.read_bytes()

    def entries(self, kind: str | None = None) -> list[tuple[str, str]]:
        """(kind, ident) pairs of all stored records, optionally one kind."""
        return [
            (rec_kind, ident)
            for rec_kind, ident, _ in self._iter_record_files()
            if kind is None or rec_kind == kind
        ]

    # -- Writing --

    def apply(self, changes: Iterable[ChangeEntry]) -> str:
        """Flush a batch of pending writes as one unit. Returns the batch id."""
        changes = list(changes)
        batch = uuid.uuid4().hex
        batch_dir = self._pending / batch
        batch_dir.mkdir(parents=True, exist_ok=False)
        ops: list[dict] = []
        try:
            for n, change in enumerate(changes):
                op = {"op": str(change.op), "kind": change.kind, "ident": change.ident}
                if change.data is not None:
                    staged = f"{n:06d}{RECORD_SUFFIX}"
                    (batch_dir / staged).write_bytes(change.data)
                    op["file"] = staged
                ops.append(op)
            tmp = batch_dir / (MANIFEST_NAME + ".tmp")
            tmp.write_text(json.dumps({"batch": batch, "ops": ops}, indent=2), encoding="utf-8")
            os.replace(tmp, batch_dir / MANIFEST_NAME)
        except OSError:
            shutil.rmtree(batch_dir, ignore_errors=True)
            raise
        trace("batch committed", LogLevel.INFO, batch=batch, writes=len(ops))
        self._replay(batch_dir)
        return batch

    def _replay(self, batch_dir: Path) -> None:
        manifest = json.loads((batch_dir / MANIFEST_NAME).read_text(encoding="utf-8"))
        for op in manifest["ops"]:
            current = self.path_of(op["ident"])
            if op["op"] == SyncOperation.DELETE:
                if current is not None:
                    current.unlink(missing_ok=True)
                continue
            target = self._root / record_file_name(op["kind"], op["ident"])
            staged = batch_dir / op["file"]
            if staged.exists():
                os.replace(staged, target)
            if current is not None and current != target:
                current.unlink(missing_ok=True)
        shutil.rmtree(batch_dir, ignore_errors=True)

    def recover(self) -> None:
        """Finish committed batches and drop uncommitted ones."""
        if not self._pending.is_dir():
            return
        for batch_dir in sorted(self._pending.iterdir()):
            if not batch_dir.is_dir():
                continue
            if (batch_dir / MANIFEST_NAME).exists():
                trace("replaying committed batch", LogLevel.WARNING, batch=batch_dir.name)
                self._replay(batch_dir)
            else:
                trace("discarding uncommitted batch", LogLevel.WARNING, batch=batch_dir.name)
                shutil.rmtree(batch_dir, ignore_errors=True)
