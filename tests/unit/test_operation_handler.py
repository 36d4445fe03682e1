"""
Tests for the OperationHandler and the operation forms.
"""

import pytest

from core.backend_interface import BatchOptions
from core.operation_gate import OperationGate
from core.progress_scheduler import Checkpoint, ProgressScheduler
from core.state_store import StateStore
from core.threading import OperationController
from gui.operation_handler import (
    BATCH_OPERATION,
    DECRYPT_OPERATION,
    ENCRYPT_OPERATION,
    QUICK_TEST_OPERATION,
    REMOVAL_OPERATION,
    OperationHandler,
)
from gui.widgets.log_console import LogConsole
from gui.widgets.operation_forms import BatchForm, FileOperationsForm, QuickTestForm, RemovalForm
from gui.widgets.status_indicator import StatusIndicatorWidget, StatusState


@pytest.fixture(autouse=True)
def short_durations(monkeypatch):
    for name in ("ENCRYPT_PROGRESS_MS", "DECRYPT_PROGRESS_MS", "BATCH_PROGRESS_MS", "REMOVAL_PROGRESS_MS"):
        monkeypatch.setattr(f"gui.operation_handler.{name}", 40)


@pytest.fixture
def store():
    store = StateStore()
    store.set_selected_path("/photos")
    return store


@pytest.fixture
def scheduler(qapp):
    scheduler = ProgressScheduler(
        frame_interval_ms=5,
        animation_ms=10,
        reset_delay_ms=10,
        checkpoint_factory=lambda total: (Checkpoint(50, 10), Checkpoint(100, total)),
    )
    yield scheduler
    scheduler.cancel()


@pytest.fixture
def handler(qtbot, store, scheduler, backend, error_handler):
    controller = OperationController(OperationGate(store), scheduler, error_handler)
    console = LogConsole()
    console.set_batching_enabled(False)
    console.bind_store(store)
    status = StatusIndicatorWidget()
    status.bind_store(store)
    qtbot.addWidget(console)
    qtbot.addWidget(status)

    handler = OperationHandler(store, backend, controller, console, status)
    yield handler
    handler.shutdown()


def messages(handler):
    return [entry.message for entry in handler._console.get_entries()]


def run_to_finish(qtbot, handler, start):
    with qtbot.waitSignal(handler.controller.operationFinished, timeout=5000):
        assert start()


class TestValidation:
    """Invalid input never reaches the backend or the gate."""

    def test_encrypt_without_folder(self, handler, store, fake_backend):
        store.set_selected_path(None)

        assert handler.encrypt("wm") is False

        assert messages(handler) == ["No folder selected"]
        assert handler._console.last_entry().level == "ERROR"
        assert fake_backend.calls == []
        assert not store.is_working

    def test_encrypt_without_text(self, handler, fake_backend):
        assert handler.encrypt("   ") is False
        assert messages(handler) == ["Watermark text is required"]
        assert fake_backend.calls == []

    def test_decrypt_and_remove_need_folder(self, handler, store):
        store.set_selected_path(None)

        assert handler.decrypt() is False
        assert handler.remove_watermarks() is False
        assert messages(handler) == ["No folder selected", "No folder selected"]

    def test_batch_rejects_zero_copies(self, handler, fake_backend):
        options = BatchOptions(source_folder="/photos", num_copies=0, base_text="Client")

        assert handler.run_batch(options) is False
        assert messages(handler) == ["Number of copies must be at least 1"]
        assert fake_backend.calls == []

    def test_quick_test_needs_text(self, handler):
        assert handler.quick_test("") is False
        assert messages(handler) == ["Test text is required"]


class TestOperationReporting:
    """Console output and status for finished operations."""

    def test_encrypt_reports_summary(self, qtbot, handler, store, fake_backend):
        results = []
        handler.resultReady.connect(lambda name, result: results.append((name, result)))

        run_to_finish(qtbot, handler, lambda: handler.encrypt("Client A"))

        lines = messages(handler)
        assert lines[0] == "──── ENCRYPTING FILES ────"
        assert "Found 3 supported files" in lines
        assert "╭─ Encryption Results ─╮" in lines
        assert "│ Encrypted: 3" in lines
        assert lines[-1] == "Encryption completed successfully!"
        assert results[0][0] == ENCRYPT_OPERATION
        assert not store.is_working
        assert handler._status.get_status() is StatusState.READY

    def test_encrypt_with_errors_warns(self, qtbot, handler, fake_backend):
        fake_backend.failing_paths.add("/photos/b.png")

        run_to_finish(qtbot, handler, lambda: handler.encrypt("Client A"))

        assert messages(handler)[-1] == "Completed with 1 errors"
        assert handler._console.has_errors()

    def test_encrypt_empty_folder_has_no_summary(self, qtbot, handler, fake_backend):
        fake_backend.files = []

        run_to_finish(qtbot, handler, lambda: handler.encrypt("Client A"))

        lines = messages(handler)
        assert "No supported files found" in lines
        assert not any("Encryption Results" in line for line in lines)

    def test_decrypt_reports_watermarks(self, qtbot, handler, fake_backend):
        fake_backend.watermarks = {"/photos/a.jpg": "Client A"}

        run_to_finish(qtbot, handler, handler.decrypt)

        lines = messages(handler)
        assert lines[0] == f"──── {DECRYPT_OPERATION.upper()} ────"
        assert 'a.jpg: "Client A"' in lines
        assert "│ With Watermarks: 1" in lines
        assert lines[-1] == "Decryption completed successfully!"

    def test_batch_success(self, qtbot, handler, fake_backend):
        options = BatchOptions(source_folder="/photos", num_copies="2", base_text="Client")

        run_to_finish(qtbot, handler, lambda: handler.run_batch(options))

        assert messages(handler)[-1] == "Batch operation completed successfully!"
        command, args = fake_backend.calls[-1]
        assert command == "batch_copy_and_encode"
        assert args["numCopies"] == 2

    def test_batch_failure_sets_error_status(self, qtbot, handler, fake_backend):
        fake_backend.batch_result = False
        options = BatchOptions(source_folder="/photos", num_copies=1, base_text="Client")

        run_to_finish(qtbot, handler, lambda: handler.run_batch(options))

        assert messages(handler)[-1] == "Batch operation failed"
        assert handler._status.get_status() is StatusState.ERROR

    def test_remove_watermarks(self, qtbot, handler, fake_backend):
        fake_backend.watermarks = {"/photos/a.jpg": "x"}

        run_to_finish(qtbot, handler, handler.remove_watermarks)

        lines = messages(handler)
        assert lines[0] == f"──── {REMOVAL_OPERATION.upper()} ────"
        assert "Removed: 1" in lines
        assert lines[-1] == "Tail watermarks removal completed"

    def test_quick_test_passes(self, qtbot, handler):
        run_to_finish(qtbot, handler, lambda: handler.quick_test("Hello"))

        assert messages(handler)[-1] == 'Quick test PASSED for "Hello"'
        assert handler._status.get_status() is StatusState.READY

    def test_backend_failure_is_reported(self, qtbot, handler, fake_backend):
        fake_backend.files = None

        run_to_finish(qtbot, handler, handler.decrypt)

        last = handler._console.last_entry()
        assert last.level == "ERROR"
        assert last.message.startswith(f"{DECRYPT_OPERATION} failed: get_supported_files failed")
        assert handler._status.get_status() is StatusState.ERROR

    def test_concurrent_request_is_rejected(self, qtbot, handler, store, fake_backend):
        fake_backend.release.clear()

        with qtbot.waitSignal(handler.controller.operationFinished, timeout=5000):
            assert handler.encrypt("Client A")
            assert handler.decrypt() is False
            assert messages(handler)[-1] == "Another operation is already in progress: Encrypting Files"
            assert store.current_operation == ENCRYPT_OPERATION
            fake_backend.release.set()

    def test_auto_clear_happens_before_header(self, qtbot, handler):
        handler._console.info("left over from last run")

        run_to_finish(qtbot, handler, lambda: handler.quick_test("Hello"))

        assert messages(handler)[0] == f"──── {QUICK_TEST_OPERATION.upper()} ────"


class TestOperationForms:
    """Forms forward their input to the handler and follow the working status."""

    def test_file_operations_form(self, qtbot, handler, store):
        form = FileOperationsForm(store, handler)
        qtbot.addWidget(form)
        form.inject_text_input.setText("Client A")

        with qtbot.waitSignal(handler.controller.operationFinished, timeout=5000):
            assert form.encrypt()
            assert not form.encrypt_button.isEnabled()
            assert not form.decrypt_button.isEnabled()

        assert form.encrypt_button.isEnabled()
        form.detach()

    def test_batch_form_options(self, qtbot, handler, store):
        form = BatchForm(store, handler)
        qtbot.addWidget(form)
        form.base_text_input.setText("Client")
        form.num_copies_input.setValue(3)
        form.create_zip_checkbox.setChecked(True)
        form.photo_number_input.setText("12")

        options = form.options()

        assert options.source_folder == "/photos"
        assert options.num_copies == 3
        assert options.create_zip is True
        assert options.photo_number == "12"
        form.detach()

    def test_batch_form_run(self, qtbot, handler, store, fake_backend):
        form = BatchForm(store, handler)
        qtbot.addWidget(form)
        form.base_text_input.setText("Client")
        form.photo_number_input.setText("12")

        with qtbot.waitSignal(handler.controller.operationFinished, timeout=5000):
            assert form.run()

        assert fake_backend.calls[-1][1]["photoNumber"] == 12
        form.detach()

    def test_quick_test_form_run_with_text(self, qtbot, handler, store):
        form = QuickTestForm(store, handler)
        qtbot.addWidget(form)

        with qtbot.waitSignal(handler.controller.operationFinished, timeout=5000):
            assert form.run_with_text("Ping")

        assert form.current_text() == "Ping"
        form.detach()

    def test_removal_form(self, qtbot, handler, store):
        form = RemovalForm(store, handler)
        qtbot.addWidget(form)

        with qtbot.waitSignal(handler.controller.operationFinished, timeout=5000):
            assert form.run()
            assert not form.remove_button.isEnabled()

        assert form.remove_button.isEnabled()
        form.detach()

    def test_buttons_disabled_when_created_during_operation(self, qtbot, handler, store):
        store.set_working(True, "Encrypting Files")
        form = RemovalForm(store, handler)
        qtbot.addWidget(form)

        assert not form.remove_button.isEnabled()
        form.detach()
        store.set_working(False)
