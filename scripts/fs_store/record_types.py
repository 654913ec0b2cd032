"""Item kind tags known to the bundled kinds."""

from enum import StrEnum


class RecordType(StrEnum):
    SIMPLE = "simple"
    TASK = "task"
