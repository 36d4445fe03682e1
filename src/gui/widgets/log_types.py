"""Console entry record and the two line formats used for display and export."""

from typing import NamedTuple

from PySide6.QtCore import QDateTime, Qt

LOG_LEVELS = ("INFO", "SUCCESS", "WARNING", "ERROR")

DISPLAY_TIME_FORMAT = "hh:mm:ss"


class LogEntry(NamedTuple):
    level: str
    message: str
    timestamp: QDateTime


def normalize_level(level: str) -> str:
    """Upper-case ``level``; unknown names fall back to INFO."""
    level = str(level).upper()
    return level if level in LOG_LEVELS else "INFO"


def format_log_entry(entry: LogEntry) -> str:
    return f"[{entry.timestamp.toString(DISPLAY_TIME_FORMAT)}] {entry.message}"


def format_export_line(entry: LogEntry) -> str:
    """Export line with a UTC ISO-8601 timestamp including milliseconds."""
    stamp = entry.timestamp.toUTC().toString(Qt.DateFormat.ISODateWithMs)
    return f"[{stamp}] {entry.level}: {entry.message}"
