"""
Preference lifecycle management.

PreferencesManager loads preferences through the backend at startup, persists
every change published by the StateStore, and supports reset, JSON export and
schema-checked JSON import.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import jsonschema
from PySide6.QtCore import QObject, Signal

from .backend_interface import BackendInterface
from .config import PREFERENCES_JSON_SCHEMA
from .errors import BaseAppError, ConfigError, ErrorCode
from .state_store import EventKind, Preferences, StateStore, ThemeMode
from .subscription_bus import Unsubscribe

logger = logging.getLogger(__name__)


class PreferencesManager(QObject):
    """
    Keep the StateStore preferences and persistent storage in sync.

    Signals:
        message(str, str): Console level and message describing what happened
    """

    message = Signal(str, str)

    def __init__(self, store: StateStore, backend: BackendInterface, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._store = store
        self._backend = backend
        self._initialized = False
        self._subscriptions: list[Unsubscribe] = []

    def initialize(self) -> None:
        """
        Load stored preferences, then start saving on every change.

        A failed load leaves the defaults in place; it never raises.
        """
        if self._initialized:
            return

        try:
            self._load()
            self.message.emit("INFO", "Preferences loaded successfully")
        except BaseAppError as e:
            logger.warning(f"Failed to load preferences: {e.technical_message or e.user_message}")
            self.message.emit("WARNING", "Failed to load preferences, using defaults")

        self._subscriptions = [
            self._store.subscribe(EventKind.PREFERENCES_CHANGED, self._on_preferences_changed),
            self._store.subscribe(EventKind.SELECTED_PATH_CHANGED, self._on_selected_path_changed),
        ]
        self._initialized = True

    def shutdown(self) -> None:
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions = []
        self._initialized = False

    def is_initialized(self) -> bool:
        return self._initialized

    def _load(self) -> None:
        prefs = self._backend.load_preferences()
        self._store.update_preferences(prefs)
        logger.info("Preferences loaded from storage")

    def _save(self, prefs: Preferences) -> None:
        try:
            self._backend.save_preferences(prefs)
            logger.debug("Preferences saved to storage")
        except BaseAppError as e:
            logger.error(f"Failed to save preferences: {e.technical_message or e.user_message}")
            self.message.emit("ERROR", f"Failed to save preferences: {e.user_message}")

    def _on_preferences_changed(self, prefs: Preferences) -> None:
        self._save(prefs)

    def _on_selected_path_changed(self, _path: str | None) -> None:
        self._save(self._store.preferences)

    def current_preferences(self) -> Preferences:
        return self._store.preferences

    def reset_to_defaults(self) -> None:
        self._store.update_preferences(Preferences())
        self.message.emit("INFO", "Preferences reset to defaults")

    def update_preference(self, name: str, value: Any) -> None:
        """Change a single preference; unknown names are ignored by the store."""
        self._store.update_preferences({name: value})

    def toggle_theme(self) -> ThemeMode:
        current = self._store.preferences.theme_mode
        new_mode = ThemeMode.LIGHT if current is ThemeMode.DARK else ThemeMode.DARK
        self._store.update_preferences({"theme_mode": new_mode})
        return new_mode

    def export_preferences(self) -> str:
        """Serialize the current preferences as indented JSON."""
        return json.dumps(self._store.preferences.to_dict(), indent=2)

    def import_preferences(self, json_text: str) -> Preferences:
        """
        Replace the preferences with an exported JSON document.

        Missing keys take their defaults.

        Args:
            json_text: Document produced by export_preferences()

        Returns:
            The preferences now held by the store

        Raises:
            ConfigError: If the document is not valid JSON or fails schema validation
        """
        try:
            data = json.loads(json_text)
        except json.JSONDecodeError as e:
            self.message.emit("ERROR", f"Failed to import preferences: {e.msg}")
            raise ConfigError(
                code=ErrorCode.CONFIG_PARSE_ERROR,
                user_message="Preferences file is not valid JSON",
                technical_message=str(e),
            ) from e

        try:
            jsonschema.validate(data, PREFERENCES_JSON_SCHEMA)
        except jsonschema.ValidationError as e:
            self.message.emit("ERROR", f"Failed to import preferences: {e.message}")
            raise ConfigError(
                code=ErrorCode.CONFIG_INVALID,
                user_message="Preferences file is invalid",
                technical_message=f"Preference validation failed: {e.message}",
            ) from e

        prefs = Preferences.from_dict(data)
        self._store.update_preferences(prefs)
        self.message.emit("SUCCESS", "Preferences imported successfully")
        return self._store.preferences
