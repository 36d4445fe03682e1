"""
Application state container for the ENDEcode GUI.

The StateStore is the only owner of the selected folder, the user preferences
and the working status. Every mutator applies its change and then fires exactly
one notification carrying the post-mutation value.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from .subscription_bus import SubscriptionBus, Unsubscribe

logger = logging.getLogger(__name__)

# Stored in place of an empty operation name so a busy store always has one
UNNAMED_OPERATION = "Operation"


class ThemeMode(Enum):
    """Colour theme of the application."""

    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def parse(cls, value: Any) -> ThemeMode:
        """Parse a wire value, falling back to LIGHT for anything unknown."""
        if isinstance(value, ThemeMode):
            return value
        return cls.DARK if str(value).lower() == cls.DARK.value else cls.LIGHT


class EventKind(Enum):
    """Notifications published by the StateStore."""

    SELECTED_PATH_CHANGED = auto()  # str | None
    PREFERENCES_CHANGED = auto()  # Preferences
    WORKING_STATUS_CHANGED = auto()  # WorkingStatus


@dataclass(frozen=True)
class Preferences:
    """User preferences persisted between sessions."""

    theme_mode: ThemeMode = ThemeMode.LIGHT
    auto_clear_console: bool = True
    last_selected_path: str | None = None

    def merged(self, changes: Mapping[str, Any]) -> Preferences:
        """Return a copy with the supplied keys overwritten (shallow merge)."""
        known = {f.name for f in dataclasses.fields(self)}
        updates = {key: value for key, value in changes.items() if key in known}
        if "theme_mode" in updates:
            updates["theme_mode"] = ThemeMode.parse(updates["theme_mode"])
        ignored = set(changes) - known
        if ignored:
            logger.debug(f"Ignoring unknown preference keys: {sorted(ignored)}")
        return dataclasses.replace(self, **updates)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-serializable wire form."""
        return {
            "theme_mode": ThemeMode.parse(self.theme_mode).value,
            "auto_clear_console": bool(self.auto_clear_console),
            "last_selected_path": self.last_selected_path,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Preferences:
        """
        Build preferences from a wire dict, filling missing fields with defaults.

        Args:
            data: Possibly partial preference mapping

        Returns:
            Complete Preferences instance
        """
        data = data or {}
        auto_clear = data.get("auto_clear_console")
        last_path = data.get("last_selected_path")
        return cls(
            theme_mode=ThemeMode.parse(data.get("theme_mode", ThemeMode.LIGHT.value)),
            auto_clear_console=True if auto_clear is None else bool(auto_clear),
            last_selected_path=str(last_path) if last_path else None,
        )


@dataclass(frozen=True)
class WorkingStatus:
    """Payload of WORKING_STATUS_CHANGED."""

    is_working: bool
    operation: str | None


@dataclass(frozen=True)
class AppState:
    """Immutable snapshot of the application state."""

    selected_path: str | None = None
    preferences: Preferences = field(default_factory=Preferences)
    is_working: bool = False
    current_operation: str | None = None


class StateStore:
    """
    Authoritative holder of the application state.

    One instance is created at startup and passed to every component that
    needs it. The store performs no input validation and never raises.
    """

    def __init__(self, preferences: Preferences | None = None) -> None:
        self._selected_path: str | None = None
        self._preferences = preferences or Preferences()
        self._is_working = False
        self._current_operation: str | None = None
        self._bus: SubscriptionBus[EventKind] = SubscriptionBus()

    def get_state(self) -> AppState:
        """Return an immutable snapshot of the current state."""
        return AppState(
            selected_path=self._selected_path,
            preferences=self._preferences,
            is_working=self._is_working,
            current_operation=self._current_operation,
        )

    @property
    def selected_path(self) -> str | None:
        return self._selected_path

    @property
    def preferences(self) -> Preferences:
        return self._preferences

    @property
    def is_working(self) -> bool:
        return self._is_working

    @property
    def current_operation(self) -> str | None:
        return self._current_operation

    def set_selected_path(self, path: str | None) -> None:
        """
        Set the selected folder.

        A non-empty path is also remembered as ``last_selected_path``; only
        SELECTED_PATH_CHANGED fires.
        """
        self._selected_path = path
        if path:
            self._preferences = self._preferences.merged({"last_selected_path": path})
        self._bus.publish(EventKind.SELECTED_PATH_CHANGED, path)

    def update_preferences(self, changes: Mapping[str, Any] | Preferences) -> None:
        """Shallow-merge changes into the preferences and fire PREFERENCES_CHANGED."""
        if isinstance(changes, Preferences):
            changes = {f.name: getattr(changes, f.name) for f in dataclasses.fields(changes)}
        self._preferences = self._preferences.merged(changes)
        self._bus.publish(EventKind.PREFERENCES_CHANGED, self._preferences)

    def set_working(self, is_working: bool, operation: str | None = None) -> None:
        """Set the working flag; the operation name is cleared when not working."""
        self._is_working = bool(is_working)
        self._current_operation = (operation or UNNAMED_OPERATION) if self._is_working else None
        self._bus.publish(
            EventKind.WORKING_STATUS_CHANGED,
            WorkingStatus(is_working=self._is_working, operation=self._current_operation),
        )

    def subscribe(self, event_kind: EventKind, callback: Callable[[Any], None]) -> Unsubscribe:
        """Register a listener; the returned handle removes exactly that registration."""
        return self._bus.subscribe(event_kind, callback)
