"""
Tests for the StatusIndicatorWidget.
"""

import pytest

from core.state_store import StateStore
from gui.utils.styling import AccessiblePalette
from gui.widgets.status_indicator import StatusIndicatorWidget, StatusState


@pytest.fixture
def indicator(qtbot):
    widget = StatusIndicatorWidget()
    qtbot.addWidget(widget)
    return widget


class TestStatusIndicator:
    """Test cases for StatusIndicatorWidget."""

    def test_initial_state_is_ready(self, indicator):
        assert indicator.get_status() is StatusState.READY
        assert indicator.get_message() == "Ready"
        assert indicator.status_text.text() == "Ready"

    def test_state_colors(self):
        assert StatusState.READY.color == AccessiblePalette.STATUS_READY_COLOR
        assert StatusState.WORKING.color == AccessiblePalette.STATUS_WORKING_COLOR
        assert StatusState.ERROR.color == AccessiblePalette.STATUS_ERROR_COLOR

    def test_set_status_with_message(self, indicator):
        indicator.set_status(StatusState.WORKING, "Encrypting Files...")

        assert indicator.get_status() is StatusState.WORKING
        assert indicator.status_text.text() == "Encrypting Files..."
        assert StatusState.WORKING.color in indicator.status_dot.styleSheet()
        assert indicator.toolTip() == "Working: Encrypting Files..."

    def test_set_error_and_reset(self, indicator):
        indicator.set_error("Batch operation failed")
        assert indicator.get_status() is StatusState.ERROR
        assert indicator.get_message() == "Batch operation failed"

        indicator.reset()
        assert indicator.get_status() is StatusState.READY


class TestStatusIndicatorStoreBinding:
    def test_follows_working_status(self, indicator):
        store = StateStore()
        indicator.bind_store(store)

        store.set_working(True, "Decrypting Files")
        assert indicator.get_status() is StatusState.WORKING
        assert indicator.get_message() == "Decrypting Files..."

        store.set_working(False)
        assert indicator.get_status() is StatusState.READY

    def test_error_sticks_until_next_operation(self, indicator):
        store = StateStore()
        indicator.bind_store(store)
        store.set_working(True, "Batch Copy & Encode")
        indicator.set_error("Batch operation failed")

        store.set_working(False)
        assert indicator.get_status() is StatusState.ERROR

        store.set_working(True, "Quick Test")
        assert indicator.get_status() is StatusState.WORKING

    def test_unbind(self, indicator):
        store = StateStore()
        indicator.bind_store(store)
        indicator.unbind_store()
        indicator.unbind_store()

        store.set_working(True, "Quick Test")

        assert indicator.get_status() is StatusState.READY
