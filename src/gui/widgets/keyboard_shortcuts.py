"""
Keyboard shortcuts setup for the main window.

This module handles all keyboard shortcut configuration,
separating shortcut management from main UI layout.
"""

from collections.abc import Callable

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QMainWindow

TOGGLE_THEME_SHORTCUT = "Ctrl+T"
CLEAR_CONSOLE_SHORTCUT = "Ctrl+L"
QUICK_TEST_SHORTCUT = "Ctrl+R"
ESCAPE_SHORTCUT = "Escape"


class KeyboardShortcutsManager:
    """
    Manages keyboard shortcuts for the main window.

    Provides centralized shortcut configuration and management.
    """

    def __init__(self, main_window: QMainWindow) -> None:
        """
        Initialize the shortcuts manager.

        Args:
            main_window: The main window to add shortcuts to
        """
        self.main_window = main_window
        self.actions: dict[str, QAction] = {}

    def _add(self, shortcut: str, callback: Callable[[], object] | None) -> None:
        action = QAction(self.main_window)
        action.setShortcut(QKeySequence(shortcut))
        action.triggered.connect(lambda: callback() if callback else None)
        self.main_window.addAction(action)
        self.actions[shortcut] = action

    def setup_shortcuts(
        self,
        toggle_theme: Callable[[], object] | None = None,
        clear_console: Callable[[], object] | None = None,
        quick_test: Callable[[], object] | None = None,
        escape: Callable[[], object] | None = None,
    ) -> None:
        """
        Set up all keyboard shortcuts.

        Args:
            toggle_theme: Switches between light and dark themes
            clear_console: Clears the console
            quick_test: Runs the quick test when idle
            escape: Handles an escape request while an operation runs
        """
        self._add(TOGGLE_THEME_SHORTCUT, toggle_theme)
        self._add(CLEAR_CONSOLE_SHORTCUT, clear_console)
        self._add(QUICK_TEST_SHORTCUT, quick_test)
        self._add(ESCAPE_SHORTCUT, escape)

    def trigger(self, shortcut: str) -> None:
        """Fire the action bound to shortcut, as a key press would."""
        self.actions[shortcut].trigger()
