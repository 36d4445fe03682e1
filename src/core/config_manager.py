"""
Configuration manager for the ENDEcode GUI.

Provides QSettings-backed storage for user preferences with type coercion and
default fallbacks. It serves the load_preferences/save_preferences commands
of the local command channel.
"""

import logging
from typing import Any

from PySide6.QtCore import QSettings

from .config import DEFAULT_PREFERENCES, PREFERENCES_GROUP, THEME_MODES, setup_qsettings

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    QSettings-backed preference storage with robust defaults.

    Only keys that are actually stored are returned by load_preferences();
    filling in defaults for the rest is left to the caller.
    """

    def __init__(self) -> None:
        """Initialize the ConfigManager with QSettings."""
        setup_qsettings()
        self._settings = QSettings()

    @staticmethod
    def _key(name: str) -> str:
        return f"{PREFERENCES_GROUP}/{name}"

    def get(self, name: str, default: Any | None = None) -> Any:
        """
        Get a preference value with type coercion.

        Args:
            name: Preference name (without group prefix)
            default: Override default value (if None, uses DEFAULT_PREFERENCES)

        Returns:
            Stored value coerced to the type of the default, or the default
        """
        fallback = default if default is not None else DEFAULT_PREFERENCES.get(name)
        value = self._settings.value(self._key(name), fallback)

        if fallback is not None:
            try:
                expected_type = type(fallback)
                if expected_type is bool:
                    # QSettings returns strings for booleans on some backends
                    value = value.lower() in ("true", "1", "yes", "on") if isinstance(value, str) else bool(value)
                elif expected_type in (int, float, str):
                    value = expected_type(value)
            except (ValueError, TypeError) as e:
                logger.warning(f"Failed to coerce preference '{name}': {e}, using default")
                value = fallback

        return value

    def set(self, name: str, value: Any) -> None:
        """Store a preference value; None removes the key."""
        if value is None:
            self._settings.remove(self._key(name))
        else:
            self._settings.setValue(self._key(name), value)
        self._settings.sync()

    def has_key(self, name: str) -> bool:
        return bool(self._settings.contains(self._key(name)))

    def load_preferences(self) -> dict[str, Any]:
        """
        Load the stored preferences.

        Returns:
            Dictionary with the stored preference keys only
        """
        stored: dict[str, Any] = {}
        for name in DEFAULT_PREFERENCES:
            if not self.has_key(name):
                continue
            value = self.get(name)
            if name == "theme_mode" and value not in THEME_MODES:
                logger.warning(f"Stored theme '{value}' is not recognized, ignoring")
                continue
            if name == "last_selected_path" and not value:
                continue
            stored[name] = value
        return stored

    def save_preferences(self, prefs: dict[str, Any]) -> bool:
        """
        Persist a preference dictionary.

        Args:
            prefs: Preference values in wire form; unknown keys are skipped

        Returns:
            True once the values have been written
        """
        for name, value in prefs.items():
            if name in DEFAULT_PREFERENCES:
                self.set(name, value)
            else:
                logger.warning(f"Unknown preference key '{name}', skipping")
        return True

    def reset(self) -> None:
        """Remove every stored preference."""
        self._settings.remove(PREFERENCES_GROUP)
        self._settings.sync()
        logger.info("Preferences reset to defaults")
