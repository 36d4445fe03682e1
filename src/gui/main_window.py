"""
Main window for the ENDEcode GUI application.

This module contains the MainWindow class which lays out the top bar,
folder picker, operation forms, progress bar and console, and wires them to
the shared services in an AppContext.
"""

import json
import logging
from pathlib import Path

from PySide6.QtGui import QCloseEvent, QColor, QGuiApplication
from PySide6.QtWidgets import (
    QApplication,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.errors import BaseAppError, ConfigError
from core.state_store import EventKind, Preferences, ThemeMode
from core.subscription_bus import Unsubscribe
from gui.app_context import AppContext
from gui.operation_handler import DEFAULT_QUICK_TEST_TEXT, OperationHandler
from gui.utils.styling import apply_theme, get_palette, system_theme
from gui.widgets.folder_picker import FolderPicker
from gui.widgets.keyboard_shortcuts import KeyboardShortcutsManager
from gui.widgets.log_console import LogConsole
from gui.widgets.operation_forms import BatchForm, FileOperationsForm, QuickTestForm, RemovalForm
from gui.widgets.progress_bar import ProgressBarWidget
from gui.widgets.status_indicator import StatusIndicatorWidget

APP_TITLE = "ENDEcode"

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """
    Main application window.

    Provides the primary user interface for watermarking a folder of files.
    """

    def __init__(self, context: AppContext) -> None:
        super().__init__()
        self.context = context
        self._store = context.store
        self._subscriptions: list[Unsubscribe] = []
        self._theme: ThemeMode | None = None

        self.setWindowTitle(APP_TITLE)
        self.resize(900, 760)

        self._setup_ui()
        self._setup_menus()

        self.shortcuts = KeyboardShortcutsManager(self)
        self.shortcuts.setup_shortcuts(
            toggle_theme=self.on_toggle_theme_shortcut,
            clear_console=self.on_clear_console_shortcut,
            quick_test=self.on_quick_test_shortcut,
            escape=self.on_escape,
        )

        self._connect_signals()
        self._apply_theme(self._store.preferences.theme_mode)

    def _setup_ui(self) -> None:
        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)

        top_bar = QHBoxLayout()
        title = QLabel(APP_TITLE)
        title.setObjectName("appTitle")
        font = title.font()
        font.setPointSize(font.pointSize() + 4)
        font.setBold(True)
        title.setFont(font)
        top_bar.addWidget(title)
        top_bar.addStretch()
        self.status_indicator = StatusIndicatorWidget()
        top_bar.addWidget(self.status_indicator)
        self.theme_button = QPushButton()
        self.theme_button.setAccessibleName("Toggle theme")
        self.theme_button.setToolTip("Toggle light/dark theme (Ctrl+T)")
        self.theme_button.clicked.connect(self.toggle_theme)
        top_bar.addWidget(self.theme_button)
        layout.addLayout(top_bar)

        self.folder_picker = FolderPicker(self._store)
        layout.addWidget(self.folder_picker)

        self.log_console = LogConsole()
        self.operation_handler = OperationHandler(
            self._store,
            self.context.backend,
            self.context.controller,
            self.log_console,
            self.status_indicator,
            parent=self,
        )

        self.file_operations_form = FileOperationsForm(self._store, self.operation_handler)
        self.quick_test_form = QuickTestForm(self._store, self.operation_handler)
        self.batch_form = BatchForm(self._store, self.operation_handler)
        self.removal_form = RemovalForm(self._store, self.operation_handler)
        forms_row = QHBoxLayout()
        left = QVBoxLayout()
        left.addWidget(self.file_operations_form)
        left.addWidget(self.quick_test_form)
        left.addWidget(self.removal_form)
        forms_row.addLayout(left, 1)
        forms_row.addWidget(self.batch_form, 1)
        layout.addLayout(forms_row)

        self.progress_bar = ProgressBarWidget(self.context.scheduler)
        layout.addWidget(self.progress_bar)

        layout.addWidget(self.log_console, 1)
        self.setCentralWidget(central)

    def _setup_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        file_menu.addAction("Export Preferences...", self.on_export_preferences)
        file_menu.addAction("Import Preferences...", self.on_import_preferences)
        file_menu.addAction("Reset Preferences", self.context.preferences.reset_to_defaults)
        file_menu.addSeparator()
        file_menu.addAction("Export Console...", self.on_export_console)
        file_menu.addSeparator()
        file_menu.addAction("Quit", self.close)

        view_menu = self.menuBar().addMenu("&View")
        view_menu.addAction("Toggle Theme", self.toggle_theme)
        view_menu.addAction("Clear Console", self.log_console.clear)

        help_menu = self.menuBar().addMenu("&Help")
        help_menu.addAction("Copy Debug Info", self.on_copy_debug_info)

    def _connect_signals(self) -> None:
        self.log_console.bind_store(self._store)
        self.status_indicator.bind_store(self._store)
        self.folder_picker.message.connect(self.log_console.append_log)
        self.context.preferences.message.connect(self.log_console.append_log)
        self.context.error_handler.errorOccurred.connect(self._on_unhandled_error)
        self._subscriptions.append(self._store.subscribe(EventKind.PREFERENCES_CHANGED, self._on_preferences_changed))
        QGuiApplication.styleHints().colorSchemeChanged.connect(self._on_system_color_scheme_changed)

    def initialize(self) -> None:
        """Load preferences, restore the last folder and greet the user."""
        self.log_console.info("Initializing ENDEcode application...")
        self.context.preferences.initialize()
        self.folder_picker.restore_last_path()
        self.log_console.success("ENDEcode application initialized successfully")
        self.log_console.info("Ready to process files and watermarks")

    # Theme

    def _apply_theme(self, theme: ThemeMode) -> None:
        if theme is self._theme:
            return
        self._theme = theme
        apply_theme(self, theme)
        self.log_console.set_theme(theme)
        pulse = QColor(get_palette(theme).PROGRESS_CHUNK)
        pulse.setAlpha(115)
        self.progress_bar.set_pulse_color(pulse)
        self.theme_button.setText("Light" if theme is ThemeMode.DARK else "Dark")

    def _on_preferences_changed(self, prefs: Preferences) -> None:
        self._apply_theme(prefs.theme_mode)

    def _on_system_color_scheme_changed(self, *_args: object) -> None:
        self._store.update_preferences({"theme_mode": system_theme()})

    def toggle_theme(self) -> ThemeMode:
        return self.context.preferences.toggle_theme()

    # Shortcuts

    def on_toggle_theme_shortcut(self) -> None:
        self.toggle_theme()
        self.log_console.info("Theme toggled via keyboard shortcut")

    def on_clear_console_shortcut(self) -> None:
        self.log_console.clear()
        self.log_console.info("Console cleared via keyboard shortcut")

    def on_quick_test_shortcut(self) -> None:
        if self._store.is_working:
            return
        text = self.quick_test_form.current_text() or DEFAULT_QUICK_TEST_TEXT
        if self.quick_test_form.run_with_text(text):
            self.log_console.info("Quick test triggered via keyboard shortcut")

    def on_escape(self) -> None:
        # Backend calls are not interruptible
        if self._store.is_working:
            self.log_console.warning("Operation cancellation is not supported")

    # Preferences and console files

    def on_export_preferences(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Export Preferences", "endecode-preferences.json", "JSON (*.json)")
        if not path:
            return
        try:
            Path(path).write_text(self.context.preferences.export_preferences(), encoding="utf-8")
        except OSError as e:
            self.context.error_handler.handle(e, {"action": "export_preferences"})
            self.log_console.error(f"Failed to export preferences: {e.strerror or e}")
            return
        self.log_console.success(f"Preferences exported to {path}")

    def on_import_preferences(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Import Preferences", "", "JSON (*.json)")
        if not path:
            return
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            self.context.error_handler.handle(e, {"action": "import_preferences"})
            self.log_console.error(f"Failed to read preferences: {e.strerror or e}")
            return
        try:
            self.context.preferences.import_preferences(text)
        except ConfigError as e:
            self.context.error_handler.handle(e, {"path": path})

    def on_export_console(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Export Console", "endecode-console.log", "Log files (*.log *.txt)")
        if not path:
            return
        try:
            Path(path).write_text(self.log_console.export_text(), encoding="utf-8")
        except OSError as e:
            self.context.error_handler.handle(e, {"action": "export_console"})
            self.log_console.error(f"Failed to export console: {e.strerror or e}")

    # Diagnostics

    def export_debug_info(self) -> str:
        """Return a JSON snapshot of the application state for bug reports."""
        state = self._store.get_state()
        info = {
            "selected_path": state.selected_path,
            "is_working": state.is_working,
            "current_operation": state.current_operation,
            "preferences": state.preferences.to_dict(),
            "progress": {
                "state": self.context.scheduler.state.name,
                "percentage": self.context.scheduler.percentage,
                "visible": self.context.scheduler.is_visible,
            },
            "console": {
                "entries": self.log_console.get_entry_count(),
                "has_errors": self.log_console.has_errors(),
            },
            "status": self.status_indicator.get_status().name,
        }
        return json.dumps(info, indent=2)

    def on_copy_debug_info(self) -> None:
        QApplication.clipboard().setText(self.export_debug_info())
        self.log_console.info("Debug info copied to clipboard")

    def _on_unhandled_error(self, error: BaseAppError) -> None:
        if error.context.get("source") not in ("sys.excepthook", "threading.excepthook"):
            return
        self.log_console.error(f"Unhandled error: {error.user_message}")
        self.status_indicator.set_error("Unexpected error occurred")

    def closeEvent(self, event: QCloseEvent) -> None:
        self.operation_handler.shutdown()
        self.context.preferences.shutdown()
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions = []
        self.log_console.unbind_store()
        self.status_indicator.unbind_store()
        self.folder_picker.detach()
        for form in (self.file_operations_form, self.quick_test_form, self.batch_form, self.removal_form):
            form.detach()
        event.accept()
