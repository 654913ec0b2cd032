"""Error taxonomy for the item store.

Every error carries a technical ``message`` plus a ``details`` dict and is
written to the diagnostic stream when raised. None of them is meant to end
the process: the session boundary decides between retry and a user-facing
report.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from utils.log import LogLevel, item_log


class ItemStoreError(Exception):
    """Base exception for all item store errors."""

    level: LogLevel = LogLevel.ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        item_log(message, self.level, component="errors",
                 error_type=self.__class__.__name__)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a plain dict for responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(ItemStoreError):
    """A kind is not registered, or a policy is incomplete."""


@dataclass(frozen=True)
class FieldError:
    """One failed assertion against a named input field."""

    tag: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"tag": self.tag, "message": self.message}


class ValidationError(ItemStoreError):
    """Missing or invalid user input. Field errors are kept individually."""

    level = LogLevel.INFO

    def __init__(self, message: str, errors: list[FieldError] | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = list(errors or [])

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["errors"] = [e.to_dict() for e in self.errors]
        return d


class DeserializeError(ItemStoreError):
    """A persisted record could not be parsed into an item."""


class RenderError(ItemStoreError):
    """Building a rendering payload failed; aborts only the current request."""


class ConflictUnresolvable(ItemStoreError):
    """No safe automatic merge exists; a human has to pick.

    Both sides (and the ancestor when known) travel with the error so
    nothing is lost.
    """

    level = LogLevel.WARNING

    def __init__(
        self,
        message: str,
        ident: str = "",
        ours: bytes | None = None,
        theirs: bytes | None = None,
        ancestor: bytes | None = None,
        fields: list[str] | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.ident = ident
        self.ours = ours
        self.theirs = theirs
        self.ancestor = ancestor
        self.fields = list(fields or [])
        self.details.setdefault("ident", ident)
        self.details.setdefault("fields", self.fields)


class ProgrammingError(ItemStoreError):
    """An integration bug, e.g. an action sent to a kind that has none."""


class UnknownActionError(ItemStoreError):
    """The dispatcher does not know the requested action identifier."""


class ItemNotFoundError(ItemStoreError):
    """No stored record carries the requested identifier."""

    level = LogLevel.INFO

    def __init__(self, message: str, ident: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.ident = ident
        if ident:
            self.details["ident"] = ident
