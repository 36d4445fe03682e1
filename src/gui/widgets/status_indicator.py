"""
Top-bar status light.

A coloured dot plus a short line of text for READY, WORKING and ERROR. Bound
to a StateStore it switches to WORKING whenever an operation starts.
"""

from enum import Enum

from PySide6.QtWidgets import QHBoxLayout, QLabel, QWidget

from core.state_store import EventKind, StateStore, WorkingStatus
from core.subscription_bus import Unsubscribe
from gui.utils.styling import AccessiblePalette, get_status_indicator_color

DOT_SIZE = 12

_DOT_STYLE = """
QLabel {{
    background-color: {color};
    border: 1px solid {border};
    border-radius: {radius}px;
}}
"""

_HINTS = {
    "READY": "Ready to process files",
    "WORKING": "Operation in progress",
    "ERROR": "The last operation failed",
}


class StatusState(Enum):
    READY = "Ready"
    WORKING = "Working"
    ERROR = "Error"

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def description(self) -> str:
        return _HINTS[self.name]

    @property
    def color(self) -> str:
        return get_status_indicator_color(self.name)


class StatusIndicatorWidget(QWidget):
    """Status light; an ERROR state stays until the next operation starts."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setObjectName("statusIndicator")
        self.setAccessibleName("Application status")

        self.status_dot = QLabel(self)
        self.status_dot.setFixedSize(DOT_SIZE, DOT_SIZE)
        self.status_text = QLabel(self)

        row = QHBoxLayout(self)
        row.setContentsMargins(0, 0, 0, 0)
        row.setSpacing(8)
        row.addWidget(self.status_dot)
        row.addWidget(self.status_text)

        self._state = StatusState.READY
        self._message = ""
        self._unsubscribe: Unsubscribe | None = None
        self._render()

    def bind_store(self, store: StateStore) -> None:
        self.unbind_store()
        self._unsubscribe = store.subscribe(EventKind.WORKING_STATUS_CHANGED, self._follow_working_status)

    def unbind_store(self) -> None:
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()

    def _follow_working_status(self, status: WorkingStatus) -> None:
        if status.is_working:
            self.set_status(StatusState.WORKING, f"{status.operation}...")
        elif self._state is not StatusState.ERROR:
            self.reset()

    def set_status(self, state: StatusState, message: str | None = None) -> None:
        """Show ``state`` with ``message``, or with the state's own name when no message is given."""
        self._state = state
        self._message = message or state.display_name
        self._render()

    def set_error(self, message: str) -> None:
        self.set_status(StatusState.ERROR, message)

    def reset(self) -> None:
        self.set_status(StatusState.READY)

    def get_status(self) -> StatusState:
        return self._state

    def get_message(self) -> str:
        return self._message or self._state.display_name

    def _render(self) -> None:
        state = self._state
        message = self.get_message()
        self.status_dot.setStyleSheet(
            _DOT_STYLE.format(color=state.color, border=AccessiblePalette.BORDER_DEFAULT, radius=DOT_SIZE // 2)
        )
        self.status_dot.setAccessibleName(f"Status: {state.display_name}")
        self.status_text.setText(message)
        self.status_text.setAccessibleDescription(state.description)
        self.setToolTip(f"{state.display_name}: {message}")
