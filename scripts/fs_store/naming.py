"""Record file naming: ``<kind>-@<ident>.json``."""

from __future__ import annotations

# Naming convention: <kind>-@<ident>
_NAME_SEP = "-@"
RECORD_SUFFIX = ".json"


def record_stem(kind: str, ident: str) -> str:
    """Build the canonical stem used for record file names."""
    return f"{kind}{_NAME_SEP}{ident}"


def parse_record_stem(stem: str) -> tuple[str, str]:
    """Parse a ``<kind>-@<ident>`` stem into (kind, ident)."""
    if _NAME_SEP not in stem:
        raise ValueError(f"Invalid record stem: {stem!r}")
    kind, ident = stem.split(_NAME_SEP, 1)
    if not kind or not ident:
        raise ValueError(f"Invalid record stem: {stem!r}")
    return kind, ident


def record_file_name(kind: str, ident: str) -> str:
    return record_stem(kind, ident) + RECORD_SUFFIX
