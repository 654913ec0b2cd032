"""Default view and markup collaborators.

The surrounding application may hand a different ``view`` / ``markup`` to
the session; payloads only rely on ``render(name, context) -> str`` and
``markup(text) -> str``.
"""

from __future__ import annotations

import html
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from utils.conf import TEMPLATES_DIR
from utils.template_render import TemplateNotFound, render_named

from .errors import RenderError

if TYPE_CHECKING:
    from .item import ItemBase
    from .world import World

_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")


class View(Protocol):
    def render(self, name: str, context: dict[str, Any]) -> str: ...


class TemplateView:
    """Renders ``<templates_dir>/<name>`` with the bundled template engine."""

    def __init__(self, templates_dir: str | Path | None = None) -> None:
        self.templates_dir = Path(templates_dir) if templates_dir else TEMPLATES_DIR

    def render(self, name: str, context: dict[str, Any]) -> str:
        try:
            return render_named(self.templates_dir, name, context)
        except TemplateNotFound as e:
            raise RenderError(f"template {name!r} not found", details={"path": str(e)}) from e


def plain_markup(text: str) -> str:
    """Escape text and wrap blank-line separated blocks in paragraphs."""
    text = text.replace("\r\n", "\n").replace("\r", "\n").strip()
    if not text:
        return ""
    blocks = _PARAGRAPH_SPLIT.split(text)
    return "\n".join(
        "<p>" + html.escape(block.strip()).replace("\n", "<br>\n") + "</p>" for block in blocks
    )


def _iso(value) -> str:
    return value.isoformat() if value is not None else ""


def edit_base_context(base: ItemBase, is_for_update: bool, world: World) -> dict[str, Any]:
    """Context every edit form shares, whatever the kind."""
    return {
        "ident": base.ident,
        "kind": base.kind,
        "is_for_update": is_for_update,
        "revision": base.revision,
        "kinds": world.registry.kinds(),
    }


def show_base_context(base: ItemBase, world: World) -> dict[str, Any]:
    return {
        "ident": base.ident,
        "kind": base.kind,
        "revision": base.revision,
        "created_at": _iso(base.created_at),
        "modified_at": _iso(base.modified_at),
        "created_by": base.created_by or "",
        "updated_by": base.updated_by or "",
        "user": world.user or "",
    }
