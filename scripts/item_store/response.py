"""Response types handed back to the view / UI collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import FieldError


@dataclass
class Response:
    """Rendering payload: placeholder tag -> rendered fragment.

    ``cleared_errors`` names error placeholders the view should blank out.
    """

    tags: dict[str, str] = field(default_factory=dict)
    cleared_errors: list[str] = field(default_factory=list)

    def add_tag(self, tag: str, fragment: str) -> None:
        self.tags[tag] = fragment

    def clear_errors(self, tags: list[str]) -> None:
        for tag in tags:
            if tag not in self.cleared_errors:
                self.cleared_errors.append(tag)

    def __getitem__(self, tag: str) -> str:
        return self.tags[tag]

    def to_dict(self) -> dict[str, Any]:
        return {"tags": dict(self.tags), "cleared_errors": list(self.cleared_errors)}


@dataclass
class ActionResponse:
    """Outcome of a validation pass: every failed assertion is kept."""

    errors: list[FieldError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def assert_(self, condition: bool, tag: str, message: str) -> bool:
        """Record ``message`` under ``tag`` when ``condition`` is false."""
        if not condition:
            self.errors.append(FieldError(tag=tag, message=message))
        return condition

    def messages(self) -> list[str]:
        return [e.message for e in self.errors]

    def messages_for(self, tag: str) -> list[str]:
        return [e.message for e in self.errors if e.tag == tag]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "errors": [e.to_dict() for e in self.errors],
        }
