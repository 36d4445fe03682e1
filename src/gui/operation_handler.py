"""
Operation handling for the ENDEcode GUI.

This module turns form requests into validated, gated background operations
and reports their outcome in the console and the status indicator.
"""

import logging
from functools import partial

from PySide6.QtCore import QObject, Signal

from core.backend_interface import BackendInterface, BatchOptions
from core.config import BATCH_PROGRESS_MS, DECRYPT_PROGRESS_MS, ENCRYPT_PROGRESS_MS, REMOVAL_PROGRESS_MS
from core.errors import AlreadyBusyError, BaseAppError, ValidationError
from core.operations import (
    BatchResult,
    DecryptResult,
    EncryptResult,
    QuickTestResult,
    RemovalResult,
    batch_copy_and_encode,
    decrypt_files,
    encrypt_files,
    quick_test,
    remove_watermarks,
)
from core.state_store import StateStore
from core.threading import OperationController
from core.validation import require_folder, require_text, validate_batch_options, validate_encrypt_request
from gui.widgets.log_console import LogConsole
from gui.widgets.status_indicator import StatusIndicatorWidget

ENCRYPT_OPERATION = "Encrypting Files"
DECRYPT_OPERATION = "Decrypting Files"
BATCH_OPERATION = "Batch Copy & Encode"
REMOVAL_OPERATION = "Removing Tail Watermarks"
QUICK_TEST_OPERATION = "Quick Test"

DEFAULT_QUICK_TEST_TEXT = "Quick Test"


class OperationHandler(QObject):
    """
    Handles watermark operations and UI updates.

    Every entry point validates its input first; invalid input is reported in
    the console and never reaches the backend or the operation gate.

    Signals:
        resultReady(str, object): Operation name and its result, after the summary was written
    """

    resultReady = Signal(str, object)

    def __init__(
        self,
        store: StateStore,
        backend: BackendInterface,
        controller: OperationController,
        console: LogConsole,
        status: StatusIndicatorWidget,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._backend = backend
        self._controller = controller
        self._console = console
        self._status = status
        self._logger = logging.getLogger(__name__)

        controller.logMessage.connect(console.append_log)
        controller.operationStarted.connect(self._on_operation_started)
        controller.operationRejected.connect(self._on_operation_rejected)
        controller.operationCompleted.connect(self._on_operation_completed)
        controller.operationFailed.connect(self._on_operation_failed)
        controller.operationCanceled.connect(self._on_operation_canceled)

    @property
    def controller(self) -> OperationController:
        return self._controller

    def encrypt(self, text: str | None) -> bool:
        """Watermark every supported file in the selected folder with text."""
        try:
            folder, text = validate_encrypt_request(self._store.selected_path, text)
        except ValidationError as e:
            return self._reject(e)
        job = partial(encrypt_files, backend=self._backend, folder=folder, text=text)
        return self._controller.start_operation(ENCRYPT_OPERATION, job, ENCRYPT_PROGRESS_MS)

    def decrypt(self) -> bool:
        """Read the watermark of every supported file in the selected folder."""
        try:
            folder = require_folder(self._store.selected_path)
        except ValidationError as e:
            return self._reject(e)
        job = partial(decrypt_files, backend=self._backend, folder=folder)
        return self._controller.start_operation(DECRYPT_OPERATION, job, DECRYPT_PROGRESS_MS)

    def run_batch(self, options: BatchOptions) -> bool:
        try:
            options = validate_batch_options(options)
        except ValidationError as e:
            return self._reject(e)
        job = partial(batch_copy_and_encode, backend=self._backend, options=options)
        return self._controller.start_operation(BATCH_OPERATION, job, BATCH_PROGRESS_MS)

    def remove_watermarks(self) -> bool:
        try:
            folder = require_folder(self._store.selected_path)
        except ValidationError as e:
            return self._reject(e)
        job = partial(remove_watermarks, backend=self._backend, folder=folder)
        return self._controller.start_operation(REMOVAL_OPERATION, job, REMOVAL_PROGRESS_MS)

    def quick_test(self, text: str | None) -> bool:
        """Round-trip text through the encoder; runs without a progress indicator."""
        try:
            text = require_text(text, "test_text", "Test text")
        except ValidationError as e:
            return self._reject(e)
        job = partial(quick_test, backend=self._backend, text=text)
        return self._controller.start_operation(QUICK_TEST_OPERATION, job)

    def _reject(self, error: ValidationError) -> bool:
        self._logger.debug(f"Rejected input for '{error.field}': {error.user_message}")
        self._console.error(error.user_message)
        return False

    def _on_operation_started(self, operation: str) -> None:
        self._console.operation(operation)

    def _on_operation_rejected(self, error: AlreadyBusyError) -> None:
        self._console.warning(f"{error.user_message}: {error.active_operation}")

    def _on_operation_completed(self, operation: str, result: object) -> None:
        if isinstance(result, EncryptResult):
            self._report_encrypt(result)
        elif isinstance(result, DecryptResult):
            self._report_decrypt(result)
        elif isinstance(result, BatchResult):
            self._report_batch(result)
        elif isinstance(result, RemovalResult):
            self._console.success("Tail watermarks removal completed")
        elif isinstance(result, QuickTestResult):
            if not result.passed:
                self._status.set_error("Quick test failed")
        else:
            self._console.success(f"{operation} completed")
        self.resultReady.emit(operation, result)

    def _report_encrypt(self, result: EncryptResult) -> None:
        if result.total == 0:
            return
        self._console.separator()
        self._console.result("Encryption Results", result.summary())
        if result.errors == 0:
            self._console.success("Encryption completed successfully!")
        else:
            self._console.warning(f"Completed with {result.errors} errors")

    def _report_decrypt(self, result: DecryptResult) -> None:
        if result.total == 0:
            return
        self._console.separator()
        self._console.result("Decryption Results", result.summary())
        if result.errors == 0:
            self._console.success("Decryption completed successfully!")
        else:
            self._console.warning(f"Completed with {result.errors} errors")

    def _report_batch(self, result: BatchResult) -> None:
        if result.success:
            self._console.success("Batch operation completed successfully!")
        else:
            self._console.error("Batch operation failed")
            self._status.set_error("Batch operation failed")

    def _on_operation_failed(self, operation: str, error: BaseAppError) -> None:
        self._logger.debug(f"Operation '{operation}' failed: {error.code.value}")
        self._console.error(f"{operation} failed: {error.user_message}")
        self._status.set_error(f"{operation} failed")

    def _on_operation_canceled(self, operation: str) -> None:
        self._console.warning(f"{operation} canceled")

    def shutdown(self, timeout_ms: int = 2000) -> None:
        self._controller.shutdown(timeout_ms)
