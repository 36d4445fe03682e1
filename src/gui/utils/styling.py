"""
Shared styling utilities for the ENDEcode GUI application.

This module contains the light and dark palettes, the application stylesheet
built from them, and text formats for the log console.
"""

from typing import Any, Protocol

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QFont, QFontDatabase, QGuiApplication, QTextCharFormat

from core.state_store import ThemeMode


class StyleableWidget(Protocol):
    """Protocol for widgets that can be styled."""

    def setStyleSheet(self, styleSheet: str) -> None: ...
    def style(self) -> Any: ...


class AccessiblePalette:
    """
    Light palette with WCAG AA accessibility compliance.

    All color combinations meet minimum contrast ratio of 4.5:1 for normal text
    and 3:1 for large text (18pt+ or 14pt+ bold).
    """

    # Log level colors
    LOG_INFO_TEXT = "#495057"
    LOG_SUCCESS_TEXT = "#146c43"
    LOG_WARNING_TEXT = "#856404"
    LOG_ERROR_TEXT = "#721c24"

    # Status indicator colors
    STATUS_READY_COLOR = "#198754"
    STATUS_WORKING_COLOR = "#fd7e14"
    STATUS_ERROR_COLOR = "#dc3545"

    BORDER_DEFAULT = "#dee2e6"
    BORDER_FOCUS = "#0d6efd"

    BACKGROUND_DEFAULT = "#ffffff"
    BACKGROUND_SECONDARY = "#f8f9fa"
    BACKGROUND_DISABLED = "#e9ecef"

    TEXT_PRIMARY = "#212529"
    TEXT_SECONDARY = "#6c757d"
    TEXT_DISABLED = "#adb5bd"

    BUTTON_PRIMARY_BG = "#0d6efd"
    BUTTON_PRIMARY_HOVER = "#0b5ed7"
    BUTTON_PRIMARY_TEXT = "#ffffff"

    PROGRESS_CHUNK = "#0d6efd"
    PROGRESS_PULSE = "rgba(13, 110, 253, 0.45)"


class DarkPalette(AccessiblePalette):
    """Dark counterpart of AccessiblePalette; status colors are shared."""

    LOG_INFO_TEXT = "#ced4da"
    LOG_SUCCESS_TEXT = "#75b798"
    LOG_WARNING_TEXT = "#ffda6a"
    LOG_ERROR_TEXT = "#ea868f"

    BORDER_DEFAULT = "#495057"
    BORDER_FOCUS = "#6ea8fe"

    BACKGROUND_DEFAULT = "#1e1f22"
    BACKGROUND_SECONDARY = "#2b2d31"
    BACKGROUND_DISABLED = "#343a40"

    TEXT_PRIMARY = "#e9ecef"
    TEXT_SECONDARY = "#adb5bd"
    TEXT_DISABLED = "#6c757d"

    BUTTON_PRIMARY_BG = "#3d8bfd"
    BUTTON_PRIMARY_HOVER = "#6ea8fe"
    BUTTON_PRIMARY_TEXT = "#0b0d0f"

    PROGRESS_CHUNK = "#3d8bfd"
    PROGRESS_PULSE = "rgba(110, 168, 254, 0.45)"


def get_palette(theme: ThemeMode) -> type[AccessiblePalette]:
    return DarkPalette if theme is ThemeMode.DARK else AccessiblePalette


def system_theme() -> ThemeMode:
    """
    Detect the desktop colour scheme.

    Returns:
        DARK when the platform reports a dark scheme, LIGHT otherwise
    """
    app = QGuiApplication.instance()
    if app is None:
        return ThemeMode.LIGHT
    scheme = QGuiApplication.styleHints().colorScheme()
    return ThemeMode.DARK if scheme == Qt.ColorScheme.Dark else ThemeMode.LIGHT


class StyleSheets:
    """Collection of reusable stylesheet definitions."""

    @staticmethod
    def get_application_style(theme: ThemeMode) -> str:
        """Get the top-level stylesheet for the given theme."""
        p = get_palette(theme)
        return f"""
            QWidget {{
                background-color: {p.BACKGROUND_DEFAULT};
                color: {p.TEXT_PRIMARY};
            }}

            QGroupBox {{
                border: 1px solid {p.BORDER_DEFAULT};
                border-radius: 6px;
                margin-top: 12px;
                padding-top: 8px;
                font-weight: bold;
            }}

            QGroupBox::title {{
                subcontrol-origin: margin;
                left: 10px;
                padding: 0 4px;
            }}

            QLineEdit, QSpinBox {{
                background-color: {p.BACKGROUND_SECONDARY};
                border: 1px solid {p.BORDER_DEFAULT};
                border-radius: 4px;
                padding: 4px 6px;
            }}

            QLineEdit:focus, QSpinBox:focus {{
                border: 2px solid {p.BORDER_FOCUS};
            }}

            QLabel#selectedPathLabel {{
                color: {p.TEXT_SECONDARY};
            }}

            {StyleSheets.get_button_style(theme)}
            {StyleSheets.get_progress_bar_style(theme)}
            {StyleSheets.get_log_console_style(theme)}
        """

    @staticmethod
    def get_log_console_style(theme: ThemeMode = ThemeMode.LIGHT) -> str:
        """Get stylesheet for the log console text edit."""
        p = get_palette(theme)
        font = get_monospace_font()

        return f"""
            QTextEdit#logTextEdit {{
                background-color: {p.BACKGROUND_SECONDARY};
                border: 1px solid {p.BORDER_DEFAULT};
                border-radius: 4px;
                font-family: '{font.family()}';
                font-size: {font.pointSize()}pt;
                color: {p.TEXT_PRIMARY};
            }}

            QTextEdit#logTextEdit:focus {{
                border: 2px solid {p.BORDER_FOCUS};
            }}
        """

    @staticmethod
    def get_button_style(theme: ThemeMode = ThemeMode.LIGHT) -> str:
        p = get_palette(theme)
        return f"""
            QPushButton {{
                background-color: {p.BUTTON_PRIMARY_BG};
                color: {p.BUTTON_PRIMARY_TEXT};
                border: 2px solid {p.BUTTON_PRIMARY_BG};
                border-radius: 4px;
                padding: 6px 14px;
                font-weight: bold;
                min-height: 20px;
            }}

            QPushButton:hover {{
                background-color: {p.BUTTON_PRIMARY_HOVER};
                border-color: {p.BUTTON_PRIMARY_HOVER};
            }}

            QPushButton:disabled {{
                background-color: {p.BACKGROUND_DISABLED};
                color: {p.TEXT_DISABLED};
                border-color: {p.BORDER_DEFAULT};
            }}
        """

    @staticmethod
    def get_progress_bar_style(theme: ThemeMode = ThemeMode.LIGHT) -> str:
        p = get_palette(theme)
        return f"""
            QProgressBar#progressBar {{
                background-color: {p.BACKGROUND_SECONDARY};
                border: 1px solid {p.BORDER_DEFAULT};
                border-radius: 4px;
                text-align: center;
                min-height: 14px;
            }}

            QProgressBar#progressBar::chunk {{
                background-color: {p.PROGRESS_CHUNK};
                border-radius: 3px;
            }}
        """


def get_monospace_font() -> QFont:
    """
    Get a monospace font suitable for log display.

    Returns:
        QFont configured for optimal readability
    """
    font = QFont()
    families = QFontDatabase.families(QFontDatabase.WritingSystem.Latin)

    preferred_fonts = [
        "SF Mono",  # macOS
        "Consolas",  # Windows
        "Ubuntu Mono",
        "DejaVu Sans Mono",
        "Courier New",
    ]

    selected_family = "monospace"
    for preferred in preferred_fonts:
        if preferred in families:
            selected_family = preferred
            break

    font.setFamily(selected_family)
    font.setStyleHint(QFont.StyleHint.Monospace)
    font.setPointSize(11)
    return font


def get_log_text_format(level: str, theme: ThemeMode = ThemeMode.LIGHT) -> QTextCharFormat:
    """
    Get QTextCharFormat for console levels.

    Args:
        level: Console level (INFO, SUCCESS, WARNING, ERROR)
        theme: Active theme

    Returns:
        QTextCharFormat with appropriate styling
    """
    p = get_palette(theme)
    colors = {
        "SUCCESS": p.LOG_SUCCESS_TEXT,
        "WARNING": p.LOG_WARNING_TEXT,
        "ERROR": p.LOG_ERROR_TEXT,
    }

    text_format = QTextCharFormat()
    text_format.setForeground(QColor(colors.get(level, p.LOG_INFO_TEXT)))
    font = get_monospace_font()
    font.setBold(level in ("WARNING", "ERROR"))
    text_format.setFont(font)
    return text_format


def get_status_indicator_color(status_state: str) -> str:
    """
    Get color for status indicator based on state.

    Args:
        status_state: Status state name (READY, WORKING, ERROR)

    Returns:
        Color hex string
    """
    status_colors = {
        "READY": AccessiblePalette.STATUS_READY_COLOR,
        "WORKING": AccessiblePalette.STATUS_WORKING_COLOR,
        "ERROR": AccessiblePalette.STATUS_ERROR_COLOR,
    }
    return status_colors.get(status_state, AccessiblePalette.STATUS_READY_COLOR)


def apply_theme(widget: StyleableWidget, theme: ThemeMode) -> None:
    """Apply the application stylesheet for theme to a top-level widget."""
    widget.setStyleSheet(StyleSheets.get_application_style(theme))
