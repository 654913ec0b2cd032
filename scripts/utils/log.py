"""
Item store - Logging Module
Provides the leveled diagnostic stream shared by every module.
"""
import sys
from datetime import datetime
from enum import IntEnum

from utils.conf import ITEM_STORE_HOME, LOG_FILE, LOG_LEVEL

# =============================================================================
# CONFIGURATION
# =============================================================================

LOG = True  # Set to False to disable logging
LOG_TO_STDERR = True
LOG_TO_FILE = True
first_line = True


class LogLevel(IntEnum):
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    @classmethod
    def parse(cls, value: "str | LogLevel") -> "LogLevel":
        if isinstance(value, LogLevel):
            return value
        try:
            return cls[str(value).upper()]
        except KeyError:
            return cls.INFO


threshold = LogLevel.parse(LOG_LEVEL)

# =============================================================================
# LOGGING
# =============================================================================

def _format_fields(fields: dict) -> str:
    return " ".join(f"{key}={value!r}" for key, value in sorted(fields.items()))


def item_log(message: str, level: LogLevel | str = LogLevel.INFO, component: str = "", **fields) -> None:
    """Write one diagnostic line if ``level`` passes the configured threshold.

    Extra keyword arguments are appended as ``key=value`` pairs so the
    stream stays greppable.
    """
    global first_line
    lvl = LogLevel.parse(level)
    if not LOG or lvl < threshold:
        return
    if first_line and LOG_TO_FILE:
        first_line = False
        ITEM_STORE_HOME.mkdir(parents=True, exist_ok=True)
        item_log("--- New item store session ---", LogLevel.INFO)
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    prefix = f"{component} " if component else ""
    log_line = f"[{timestamp}] {lvl.name:<7} {prefix}{message}"
    if fields:
        log_line += " " + _format_fields(fields)
    log_line += "\n"
    if LOG_TO_STDERR:
        sys.stderr.write(log_line)
    if LOG_TO_FILE:
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(log_line)


def get_logger(component: str):
    """Return a ``trace``-style callable bound to one component name."""
    def _log(message: str, level: LogLevel | str = LogLevel.DEBUG, **fields) -> None:
        item_log(message, level, component=component, **fields)
    return _log
