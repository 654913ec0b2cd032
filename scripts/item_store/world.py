"""Per-session context threaded through every operation."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterator

from utils.log import LogLevel, get_logger

from .errors import ProgrammingError
from .view import TemplateView, View, plain_markup

if TYPE_CHECKING:
    from fs_store import FsRepository

    from .registry import TypeRegistry

trace = get_logger("world")


@dataclass
class World:
    """Session-scoped state: registry, repository, current input, user.

    Passed by reference into calls; callees must not keep it. A closed
    World refuses further use.
    """

    registry: TypeRegistry
    repository: FsRepository | None = None
    user: str | None = None
    view: View = field(default_factory=TemplateView)
    markup: Callable[[str], str] = plain_markup
    input: dict[str, str] = field(default_factory=dict)
    closed: bool = False

    def set_input(self, vals: dict[str, str]) -> dict[str, str]:
        """Replace the input snapshot with a copy of ``vals``."""
        self.ensure_open()
        self.input = dict(vals)
        return self.input

    def ensure_open(self) -> None:
        if self.closed:
            raise ProgrammingError("world used after its session ended")

    def require_repository(self) -> FsRepository:
        self.ensure_open()
        if self.repository is None:
            raise ProgrammingError("session has no repository")
        return self.repository

    def close(self) -> None:
        self.input = {}
        self.closed = True


@contextmanager
def session(registry: TypeRegistry, repository: FsRepository | None = None,
            user: str | None = None, **kwargs) -> Iterator[World]:
    """Create a World for one session and close it on exit."""
    world = World(registry=registry, repository=repository, user=user, **kwargs)
    trace("session started", LogLevel.DEBUG, user=user, kinds=registry.kinds())
    try:
        yield world
    finally:
        world.close()
        trace("session ended", LogLevel.DEBUG, user=user)
