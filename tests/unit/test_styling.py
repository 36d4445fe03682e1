"""
Tests for the styling utilities.
"""

from unittest.mock import Mock

import pytest
from PySide6.QtGui import QColor, QFont

from core.state_store import ThemeMode
from gui.utils.styling import (
    AccessiblePalette,
    DarkPalette,
    StyleSheets,
    apply_theme,
    get_log_text_format,
    get_monospace_font,
    get_palette,
    get_status_indicator_color,
)


@pytest.fixture(autouse=True)
def _app(qapp):
    """Font lookups need a QGuiApplication."""
    return qapp


class TestPalettes:
    def test_get_palette(self):
        assert get_palette(ThemeMode.LIGHT) is AccessiblePalette
        assert get_palette(ThemeMode.DARK) is DarkPalette

    def test_dark_palette_shares_status_colors(self):
        assert DarkPalette.STATUS_ERROR_COLOR == AccessiblePalette.STATUS_ERROR_COLOR
        assert DarkPalette.BACKGROUND_DEFAULT != AccessiblePalette.BACKGROUND_DEFAULT

    def test_status_indicator_color_fallback(self):
        assert get_status_indicator_color("ERROR") == AccessiblePalette.STATUS_ERROR_COLOR
        assert get_status_indicator_color("UNKNOWN") == AccessiblePalette.STATUS_READY_COLOR


class TestStyleSheets:
    def test_application_style_uses_theme_colors(self):
        light = StyleSheets.get_application_style(ThemeMode.LIGHT)
        dark = StyleSheets.get_application_style(ThemeMode.DARK)

        assert AccessiblePalette.BACKGROUND_DEFAULT in light
        assert DarkPalette.BACKGROUND_DEFAULT in dark
        assert light != dark

    def test_log_console_style_targets_text_edit(self):
        assert "logTextEdit" in StyleSheets.get_log_console_style(ThemeMode.DARK)

    def test_apply_theme_sets_stylesheet(self):
        widget = Mock()

        apply_theme(widget, ThemeMode.DARK)

        widget.setStyleSheet.assert_called_once_with(StyleSheets.get_application_style(ThemeMode.DARK))


class TestTextFormats:
    def test_log_text_format_colors(self):
        error_format = get_log_text_format("ERROR", ThemeMode.LIGHT)
        info_format = get_log_text_format("INFO", ThemeMode.DARK)

        assert error_format.foreground().color() == QColor(AccessiblePalette.LOG_ERROR_TEXT)
        assert error_format.font().bold()
        assert info_format.foreground().color() == QColor(DarkPalette.LOG_INFO_TEXT)
        assert not info_format.font().bold()

    def test_monospace_font(self):
        font = get_monospace_font()
        assert font.styleHint() == QFont.StyleHint.Monospace
        assert font.pointSize() == 11
