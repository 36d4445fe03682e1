"""
Tests for the OperationGate single-flight admission control.
"""

import pytest

from core.errors import AlreadyBusyError, ErrorCode
from core.operation_gate import OperationGate
from core.state_store import EventKind, StateStore


class TestOperationGate:
    """Test cases for OperationGate."""

    def setup_method(self) -> None:
        self.store = StateStore()
        self.gate = OperationGate(self.store)

    def test_acquire_marks_store_busy(self) -> None:
        token = self.gate.acquire("Encrypting Files")

        assert self.gate.is_busy
        assert self.store.current_operation == "Encrypting Files"
        assert self.gate.active_operation == "Encrypting Files"
        assert not token.released

    def test_second_acquire_fails_fast(self) -> None:
        """Decrypt requested during Encrypt is refused and Encrypt keeps running."""
        self.gate.acquire("Encrypting Files")

        with pytest.raises(AlreadyBusyError) as exc_info:
            self.gate.acquire("Decrypting Files")

        assert exc_info.value.code is ErrorCode.ALREADY_BUSY
        assert exc_info.value.active_operation == "Encrypting Files"
        assert exc_info.value.requested_operation == "Decrypting Files"
        assert self.store.current_operation == "Encrypting Files"

    def test_release_clears_busy(self) -> None:
        token = self.gate.acquire("Encrypting Files")
        token.release()

        assert not self.gate.is_busy
        assert self.store.current_operation is None
        assert token.released

    def test_release_is_idempotent(self) -> None:
        statuses = []
        self.store.subscribe(EventKind.WORKING_STATUS_CHANGED, statuses.append)
        token = self.gate.acquire("Encrypting Files")

        token.release()
        token.release()
        self.gate.release(token)

        assert [status.is_working for status in statuses] == [True, False]

    def test_stale_token_does_not_release_newer_operation(self) -> None:
        first = self.gate.acquire("Encrypting Files")
        first.release()
        second = self.gate.acquire("Decrypting Files")

        first.release()

        assert self.gate.is_busy
        assert self.store.current_operation == "Decrypting Files"
        second.release()

    def test_release_none_is_noop(self) -> None:
        self.gate.release(None)
        assert not self.gate.is_busy

    def test_gate_can_be_reacquired_after_release(self) -> None:
        self.gate.acquire("Encrypting Files").release()
        token = self.gate.acquire("Decrypting Files")

        assert self.store.current_operation == "Decrypting Files"
        token.release()

    def test_hold_releases_on_exception(self) -> None:
        with pytest.raises(RuntimeError):
            with self.gate.hold("Quick Test"):
                assert self.gate.is_busy
                raise RuntimeError("backend exploded")

        assert not self.gate.is_busy

    def test_token_context_manager_releases(self) -> None:
        with self.gate.acquire("Quick Test") as token:
            assert token.operation == "Quick Test"
        assert token.released
        assert not self.gate.is_busy
