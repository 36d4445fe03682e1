"""
In-app console for operation messages.

Entries live in a bounded buffer (oldest dropped first) and are rendered into
a read-only QTextEdit with one colour per level. Appends are coalesced on a
short timer so a folder run that logs hundreds of lines repaints only a few
times.
"""

from collections import deque

from PySide6.QtCore import QDateTime, QTimer, Signal
from PySide6.QtGui import QTextCursor
from PySide6.QtWidgets import QCheckBox, QHBoxLayout, QPushButton, QSizePolicy, QTextEdit, QVBoxLayout, QWidget

from core.config import CONSOLE_MAX_ENTRIES
from core.state_store import EventKind, Preferences, StateStore, ThemeMode, WorkingStatus
from core.subscription_bus import Unsubscribe
from gui.utils.styling import StyleSheets, get_log_text_format
from gui.widgets.log_types import LogEntry, format_export_line, format_log_entry, normalize_level

SEPARATOR_WIDTH = 50
FLUSH_DELAY_MS = 50


class LogConsole(QWidget):
    """
    Console showing INFO, SUCCESS, WARNING and ERROR lines with timestamps.

    When bound to a StateStore the console clears itself as an operation
    starts, provided the ``auto_clear_console`` preference is set, and follows
    the theme preference.
    """

    entryCountChanged = Signal(int)

    def __init__(self, max_entries: int = CONSOLE_MAX_ENTRIES, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._max_entries = max_entries
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)
        self._unrendered: list[LogEntry] = []
        self._coalesce = True
        self._theme = ThemeMode.LIGHT
        self._store: StateStore | None = None
        self._subscriptions: list[Unsubscribe] = []

        self._flush_timer = QTimer(self)
        self._flush_timer.setSingleShot(True)
        self._flush_timer.setInterval(FLUSH_DELAY_MS)
        self._flush_timer.timeout.connect(self.flush_pending_appends)

        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(4)

        controls = QHBoxLayout()
        self.auto_clear_checkbox = QCheckBox("Auto-clear on new operation")
        self.auto_clear_checkbox.setChecked(True)
        self.auto_clear_checkbox.toggled.connect(self._on_auto_clear_toggled)
        controls.addWidget(self.auto_clear_checkbox)
        controls.addStretch()
        self.clear_button = QPushButton("Clear")
        self.clear_button.setAccessibleName("Clear console")
        self.clear_button.clicked.connect(self.clear)
        controls.addWidget(self.clear_button)
        layout.addLayout(controls)

        self._text_edit = QTextEdit()
        self._text_edit.setObjectName("logTextEdit")
        self._text_edit.setReadOnly(True)
        self._text_edit.setLineWrapMode(QTextEdit.LineWrapMode.NoWrap)
        self._text_edit.setAccessibleName("Console")
        self._text_edit.setAccessibleDescription("Messages from watermark operations")
        self._text_edit.setStyleSheet(StyleSheets.get_log_console_style(self._theme))
        self._text_edit.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        layout.addWidget(self._text_edit)

    def bind_store(self, store: StateStore) -> None:
        """Follow the auto-clear preference and clear when an operation starts."""
        self._store = store
        self.auto_clear_checkbox.setChecked(store.preferences.auto_clear_console)
        self._subscriptions = [
            store.subscribe(EventKind.WORKING_STATUS_CHANGED, self._on_working_status_changed),
            store.subscribe(EventKind.PREFERENCES_CHANGED, self._on_preferences_changed),
        ]

    def unbind_store(self) -> None:
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions = []
        self._store = None

    def _on_working_status_changed(self, status: WorkingStatus) -> None:
        if status.is_working and self._store is not None and self._store.preferences.auto_clear_console:
            self.clear()

    def _on_preferences_changed(self, prefs: Preferences) -> None:
        if self.auto_clear_checkbox.isChecked() != prefs.auto_clear_console:
            self.auto_clear_checkbox.setChecked(prefs.auto_clear_console)
        if prefs.theme_mode is not self._theme:
            self.set_theme(prefs.theme_mode)

    def _on_auto_clear_toggled(self, checked: bool) -> None:
        if self._store is not None and self._store.preferences.auto_clear_console != checked:
            self._store.update_preferences({"auto_clear_console": checked})

    def set_theme(self, theme: ThemeMode) -> None:
        self._theme = theme
        self._text_edit.setStyleSheet(StyleSheets.get_log_console_style(theme))
        self._refresh_display()

    def append_log(self, level: str, message: str, timestamp: QDateTime | None = None) -> None:
        """
        Append an entry to the console.

        Args:
            level: INFO, SUCCESS, WARNING or ERROR; anything else is shown as INFO
            message: Message text
            timestamp: When the message was produced, now if omitted
        """
        entry = LogEntry(normalize_level(level), message, timestamp or QDateTime.currentDateTime())
        self._entries.append(entry)
        self._unrendered.append(entry)

        if self._coalesce:
            self._flush_timer.start()
        else:
            self.flush_pending_appends()

        self.entryCountChanged.emit(len(self._entries))

    def info(self, message: str) -> None:
        self.append_log("INFO", message)

    def success(self, message: str) -> None:
        self.append_log("SUCCESS", message)

    def warning(self, message: str) -> None:
        self.append_log("WARNING", message)

    def error(self, message: str) -> None:
        self.append_log("ERROR", message)

    def operation(self, name: str) -> None:
        """Write a header line announcing an operation."""
        self.info(f"──── {name.upper()} ────")

    def separator(self) -> None:
        self.info("═" * SEPARATOR_WIDTH)

    def result(self, title: str, data: dict[str, object]) -> None:
        """Write a boxed key/value summary."""
        self.info(f"╭─ {title} ─╮")
        for key, value in data.items():
            self.info(f"│ {key}: {value}")
        self.info(f"╰{'─' * (len(title) + 4)}╯")

    def _write(self, entries: list[LogEntry]) -> None:
        cursor = QTextCursor(self._text_edit.document())
        cursor.movePosition(QTextCursor.MoveOperation.End)
        cursor.beginEditBlock()
        for entry in entries:
            cursor.insertText(format_log_entry(entry) + "\n", get_log_text_format(entry.level, self._theme))
        cursor.endEditBlock()
        self.scroll_to_bottom()

    def _refresh_display(self) -> None:
        self._drop_unrendered()
        self._text_edit.clear()
        self._write(list(self._entries))

    def _drop_unrendered(self) -> None:
        self._flush_timer.stop()
        self._unrendered.clear()

    def clear(self) -> None:
        self._entries.clear()
        self._drop_unrendered()
        self._text_edit.clear()
        self.entryCountChanged.emit(0)

    def export_text(self) -> str:
        """Return all entries as plain text, one ISO-timestamped line each."""
        return "\n".join(format_export_line(entry) for entry in self._entries)

    def has_errors(self) -> bool:
        return any(entry.level == "ERROR" for entry in self._entries)

    def get_entry_count(self) -> int:
        return len(self._entries)

    def get_max_entries(self) -> int:
        return self._max_entries

    def get_entries(self) -> list[LogEntry]:
        """Get a copy of all log entries."""
        return list(self._entries)

    def last_entry(self) -> LogEntry | None:
        return self._entries[-1] if self._entries else None

    def scroll_to_bottom(self) -> None:
        self._text_edit.moveCursor(QTextCursor.MoveOperation.End)
        self._text_edit.ensureCursorVisible()

    def set_batching_enabled(self, enabled: bool) -> None:
        """Render every append immediately when disabled; anything still queued is written first."""
        self._coalesce = enabled
        if not enabled:
            self.flush_pending_appends()

    def flush_pending_appends(self) -> None:
        self._flush_timer.stop()
        if self._unrendered:
            entries, self._unrendered = self._unrendered, []
            self._write(entries)

    def displayed_text(self) -> str:
        return self._text_edit.toPlainText()
