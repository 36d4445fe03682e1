"""
Configuration constants for the ENDEcode GUI.

This module provides the preference schema, defaults, and helpers for
locating application directories and configuring QSettings.
"""

from pathlib import Path
from typing import Any

from PySide6.QtCore import QCoreApplication, QStandardPaths

# Application identifiers for QSettings
APP_ORGANIZATION = "ENDEcode"
APP_NAME = "GUI"

# QSettings group holding persisted preferences
PREFERENCES_GROUP = "preferences"

THEME_MODES = ("light", "dark")

# Default preferences in their wire (JSON-serializable) form
DEFAULT_PREFERENCES: dict[str, Any] = {
    "theme_mode": "light",
    "auto_clear_console": True,
    "last_selected_path": None,
}

# JSON Schema for imported preference documents (draft-07)
PREFERENCES_JSON_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "ENDEcode GUI Preferences",
    "description": "User preferences exported from the ENDEcode GUI application",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "theme_mode": {"type": "string", "enum": list(THEME_MODES)},
        "auto_clear_console": {"type": "boolean"},
        "last_selected_path": {"type": ["string", "null"]},
    },
}

# Simulated progress durations per operation (milliseconds)
ENCRYPT_PROGRESS_MS = 3000
DECRYPT_PROGRESS_MS = 2000
BATCH_PROGRESS_MS = 5000
REMOVAL_PROGRESS_MS = 2000

# Maximum number of entries kept by the in-app console
CONSOLE_MAX_ENTRIES = 1000


def get_app_config_dir() -> Path:
    """
    Get the application configuration directory using QStandardPaths.

    Returns:
        Path to the writable configuration directory for this application
    """
    config_location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.ConfigLocation)
    return Path(config_location) / APP_ORGANIZATION / APP_NAME


def ensure_app_directories() -> None:
    """Create the configuration directory if it doesn't exist."""
    get_app_config_dir().mkdir(parents=True, exist_ok=True)


def setup_qsettings() -> None:
    """
    Configure QSettings with application identifiers.

    This should be called early in application startup to ensure
    QSettings uses the correct organization and application names.
    """
    QCoreApplication.setOrganizationName(APP_ORGANIZATION)
    QCoreApplication.setApplicationName(APP_NAME)
