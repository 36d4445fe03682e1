"""
GUI-specific utilities for the ENDEcode application.

This module contains utility functions and classes that are specific
to the GUI implementation.
"""

from .styling import (
    AccessiblePalette,
    DarkPalette,
    StyleSheets,
    apply_theme,
    get_log_text_format,
    get_palette,
    system_theme,
)

__all__ = [
    "AccessiblePalette",
    "DarkPalette",
    "StyleSheets",
    "apply_theme",
    "get_log_text_format",
    "get_palette",
    "system_theme",
]
