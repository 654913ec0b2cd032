"""Small Handlebars-like renderer used by the default view collaborator.

Supports:
  {{variable}}             - HTML-escaped substitution
  {{{variable}}}           - Raw substitution (already-rendered fragments)
  {{object.key}}           - Dot-notation access
  {{#if var}}...{{/if}}    - Conditional blocks
  {{#unless var}}...{{/unless}} - Inverse conditional blocks
  {{#each list}}...{{/each}}   - Iteration ({{this}} for value, {{@index}} for index)
"""

from __future__ import annotations

import html
import re
from pathlib import Path
from typing import Any

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_SUBST_RE = re.compile(
    r"\{\{\{([a-zA-Z_][\w.]*)\}\}\}"      # raw
    r"|\{\{(?!#|/|@)([a-zA-Z_][\w.]*)\}\}"  # escaped
)
_EACH_RE = re.compile(
    r"\{\{#each\s+([\w.]+)\}\}(.*?)\{\{/each\}\}", re.DOTALL
)
_IF_RE = re.compile(
    r"\{\{#if\s+([\w.]+)\}\}(.*?)\{\{/if\}\}", re.DOTALL
)
_UNLESS_RE = re.compile(
    r"\{\{#unless\s+([\w.]+)\}\}(.*?)\{\{/unless\}\}", re.DOTALL
)
_STASH_RE = re.compile(r"\x00(\d+)\x00")


class TemplateNotFound(LookupError):
    """Raised when a named template file does not exist."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _resolve(name: str, context: dict[str, Any]) -> Any:
    """Resolve a dotted name against a context dict (or attribute chain)."""
    value: Any = context
    for part in name.split("."):
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
        if value is None:
            return None
    return value


def _is_truthy(value: Any) -> bool:
    """Handlebars-style truthiness (empty list / None / False / '' are falsy)."""
    if value is None:
        return False
    if isinstance(value, (list, dict, str)) and len(value) == 0:
        return False
    return bool(value)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ---------------------------------------------------------------------------
# Core renderer
# ---------------------------------------------------------------------------

def _render_string(template: str, context: dict[str, Any]) -> str:
    """Render a template string against a context dict.

    Rendered blocks and substituted values are stashed behind placeholders
    until the end, so no value is scanned for tags or placeholders again.
    """
    stash: list[str] = []

    def _stashed(text: str) -> str:
        stash.append(text)
        return f"\x00{len(stash) - 1}\x00"

    def _replace_each(m: re.Match) -> str:
        items = _resolve(m.group(1), context)
        body = m.group(2)
        if not isinstance(items, list):
            return ""
        parts: list[str] = []
        for idx, item in enumerate(items):
            child_ctx = {**context, "this": item, "@index": idx}
            if isinstance(item, dict):
                child_ctx.update(item)
            chunk = body.replace("{{@index}}", str(idx))
            parts.append(_render_string(chunk, child_ctx))
        return _stashed("".join(parts))

    template = _EACH_RE.sub(_replace_each, template)

    def _replace_if(m: re.Match) -> str:
        if _is_truthy(_resolve(m.group(1), context)):
            return _stashed(_render_string(m.group(2), context))
        return ""

    template = _IF_RE.sub(_replace_if, template)

    def _replace_unless(m: re.Match) -> str:
        if not _is_truthy(_resolve(m.group(1), context)):
            return _stashed(_render_string(m.group(2), context))
        return ""

    template = _UNLESS_RE.sub(_replace_unless, template)

    def _substitute(m: re.Match) -> str:
        if m.group(1) is not None:
            return _stashed(_text(_resolve(m.group(1), context)))
        return _stashed(html.escape(_text(_resolve(m.group(2), context)), quote=True))

    template = _SUBST_RE.sub(_substitute, template)
    return _STASH_RE.sub(lambda m: stash[int(m.group(1))], template)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def render(template: str | Path, context: dict[str, Any]) -> str:
    """Render a template with the given context.

    Args:
        template: A template string **or** a Path to a template file.
        context: Dict of variables available inside the template.

    Returns:
        The rendered string.
    """
    if isinstance(template, Path):
        if not template.is_file():
            raise TemplateNotFound(str(template))
        template = template.read_text(encoding="utf-8")
    return _render_string(template, context)


def render_named(templates_dir: Path, name: str, context: dict[str, Any]) -> str:
    """Render ``templates_dir / name``; raises TemplateNotFound when missing."""
    return render(Path(templates_dir) / name, context)
