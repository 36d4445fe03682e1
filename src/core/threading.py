"""
Threading system for non-blocking watermark operations.

This module provides a QThread-based worker that runs an operation job off the
GUI thread, and a controller that ties each worker to the operation gate and
the progress scheduler. All state changes happen on the GUI thread through
queued signals.
"""

from __future__ import annotations

import logging
from time import monotonic

from PySide6.QtCore import QObject, Qt, QThread, Signal, Slot

from .error_handler import ErrorHandler, get_error_handler
from .errors import AlreadyBusyError, BaseAppError, map_exception
from .operation_gate import OperationGate, ReleaseToken
from .operations import CancellationToken, Job, OperationContext
from .progress_scheduler import ProgressRun, ProgressScheduler

logger = logging.getLogger(__name__)


class OperationWorker(QThread):
    """
    QThread-based worker for running one operation job without blocking the UI.

    Signals:
        progressChanged(float): Progress percentage reported by the job
        logMessage(str, str): Console level and message from the job
        operationCompleted(object): Job finished with its result
        operationFailed(object): Job raised; carries the mapped BaseAppError
        operationCanceled(): Job stopped after a cancellation request
    """

    progressChanged = Signal(float)  # percent
    logMessage = Signal(str, str)  # level, message
    operationCompleted = Signal(object)  # result
    operationFailed = Signal(object)  # BaseAppError
    operationCanceled = Signal()

    def __init__(
        self,
        operation: str,
        job: Job,
        *,
        parent: QObject | None = None,
        progress_throttle_ms: int = 50,
    ) -> None:
        """
        Initialize the worker.

        Args:
            operation: Operation name used for logging and error context
            job: Callable receiving an OperationContext
            parent: Parent QObject for lifetime management
            progress_throttle_ms: Minimum milliseconds between progress updates (0 = no throttling)
        """
        super().__init__(parent)

        self.operation = operation
        self._job = job

        self._cancel_token = CancellationToken()
        self._throttle_ms = max(0, progress_throttle_ms)
        self._last_progress_emit = 0.0

        self.setObjectName(f"OperationWorker-{operation}")

    @Slot()
    def cancel(self) -> None:
        """Request cooperative cancellation; safe to call from the UI thread."""
        logger.info(f"Cancellation requested for '{self.operation}'")
        self._cancel_token.cancel()

    def _should_emit_progress(self, percent: float) -> bool:
        if self._throttle_ms == 0 or percent >= 100:
            return True

        now = monotonic()
        if (now - self._last_progress_emit) * 1000 >= self._throttle_ms:
            self._last_progress_emit = now
            return True
        return False

    def _progress_callback(self, percent: float) -> None:
        if not self._cancel_token.is_cancelled() and self._should_emit_progress(percent):
            self.progressChanged.emit(float(percent))

    def _log_callback(self, level: str, message: str) -> None:
        if not self._cancel_token.is_cancelled():
            self.logMessage.emit(level, message)

    def run(self) -> None:
        """
        Run the job and emit exactly one terminal signal.

        Exceptions never escape the thread; they are mapped to BaseAppError
        and reported through operationFailed.
        """
        ctx = OperationContext(
            progress_cb=self._progress_callback,
            log_cb=self._log_callback,
            cancel_token=self._cancel_token,
        )

        try:
            logger.info(f"Starting operation: {self.operation}")
            result = self._job(ctx)

            if self._cancel_token.is_cancelled():
                logger.info(f"Operation '{self.operation}' was canceled")
                self.operationCanceled.emit()
            else:
                logger.info(f"Operation '{self.operation}' completed")
                self.operationCompleted.emit(result)

        except Exception as e:
            app_error = map_exception(e, {"operation": self.operation})
            logger.debug(f"Operation '{self.operation}' failed: {type(e).__name__}")
            self.operationFailed.emit(app_error)


class OperationController(QObject):
    """
    Manages the lifecycle of OperationWorker threads.

    Each start acquires the operation gate, optionally starts a simulated
    progress run, and launches a worker. The gate is released only after the
    worker has finished and, on success, after the progress run has completed.

    Signals:
        operationStarted(str): Operation name, after the gate was acquired
        operationRejected(object): AlreadyBusyError for a refused start
        progressChanged(float): Progress reported by the job
        logMessage(str, str): Console level and message from the job
        operationCompleted(str, object): Operation name and result
        operationFailed(str, object): Operation name and BaseAppError
        operationCanceled(str): Operation name
        operationFinished(str): Emitted once the gate has been released
    """

    operationStarted = Signal(str)
    operationRejected = Signal(object)
    progressChanged = Signal(float)
    logMessage = Signal(str, str)
    operationCompleted = Signal(str, object)
    operationFailed = Signal(str, object)
    operationCanceled = Signal(str)
    operationFinished = Signal(str)

    def __init__(
        self,
        gate: OperationGate,
        scheduler: ProgressScheduler,
        error_handler: ErrorHandler | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._gate = gate
        self._scheduler = scheduler
        self._error_handler = error_handler or get_error_handler()

        self.current_worker: OperationWorker | None = None
        self._token: ReleaseToken | None = None
        self._run: ProgressRun | None = None
        self._operation: str | None = None
        self._outcome: tuple[str, object] | None = None
        self._cleanup_in_progress = False

        self._scheduler.runFinished.connect(self._on_run_ended)
        self._scheduler.runCancelled.connect(self._on_run_ended)

        self.setObjectName("OperationController")
        logger.debug("OperationController initialized.")

    def is_running(self) -> bool:
        """Whether an operation holds the gate, including its progress tail."""
        return self._token is not None

    @property
    def current_operation(self) -> str | None:
        return self._operation

    def start_operation(self, operation: str, job: Job, duration_ms: float | None = None) -> bool:
        """
        Start job in a worker thread under the operation gate.

        Args:
            operation: Human-readable operation name
            job: Callable receiving an OperationContext
            duration_ms: Simulated progress duration, or None for no progress indicator

        Returns:
            True if the operation started, False if it was refused
        """
        try:
            token = self._gate.acquire(operation)
        except AlreadyBusyError as e:
            app_error = self._error_handler.handle(e, {"requested_operation": operation})
            self.operationRejected.emit(app_error)
            return False

        try:
            self._token = token
            self._operation = operation
            self._outcome = None
            self._run = self._scheduler.start(duration_ms) if duration_ms is not None else None

            worker = OperationWorker(operation, job, parent=self)
            worker.progressChanged.connect(self._on_worker_progress, Qt.ConnectionType.QueuedConnection)
            worker.logMessage.connect(self.logMessage, Qt.ConnectionType.QueuedConnection)
            worker.operationCompleted.connect(self._on_worker_completed, Qt.ConnectionType.QueuedConnection)
            worker.operationFailed.connect(self._on_worker_failed, Qt.ConnectionType.QueuedConnection)
            worker.operationCanceled.connect(self._on_worker_canceled, Qt.ConnectionType.QueuedConnection)
            worker.finished.connect(self._cleanup_worker, Qt.ConnectionType.QueuedConnection)
            self.current_worker = worker

            self.operationStarted.emit(operation)
            worker.start()
        except Exception:
            logger.exception(f"Failed to start operation '{operation}'")
            self._abort_run()
            self._reset()
            token.release()
            raise

        logger.info(f"Started operation '{operation}'")
        return True

    @Slot()
    def cancel_operation(self) -> None:
        """Request cancellation of the running operation."""
        if self.current_worker and self.current_worker.isRunning():
            logger.info(f"Requesting cancellation of '{self._operation}'")
            self.current_worker.cancel()
        else:
            logger.debug("No active operation to cancel.")

    @Slot(float)
    def _on_worker_progress(self, percent: float) -> None:
        if self._run is not None:
            self._scheduler.set_progress(percent)
        self.progressChanged.emit(percent)

    @Slot(object)
    def _on_worker_completed(self, result: object) -> None:
        self._outcome = ("completed", result)

    @Slot(object)
    def _on_worker_failed(self, app_error: BaseAppError) -> None:
        self._outcome = ("failed", app_error)
        self._abort_run()

    @Slot()
    def _on_worker_canceled(self) -> None:
        self._outcome = ("canceled", None)
        self._abort_run()

    def _abort_run(self) -> None:
        run, self._run = self._run, None
        if run is not None:
            run.cancel()

    @Slot(int)
    def _on_run_ended(self, run_id: int) -> None:
        if self._run is None or self._run.run_id != run_id:
            return
        self._run = None
        if self.current_worker is None and self._token is not None:
            self._finalize()

    @Slot()
    def _cleanup_worker(self) -> None:
        """Clean up the worker after its thread has finished."""
        if self._cleanup_in_progress:
            logger.debug("Cleanup already in progress, skipping redundant call.")
            return

        self._cleanup_in_progress = True
        worker_to_clean = self.current_worker
        self.current_worker = None

        try:
            if worker_to_clean:
                try:
                    worker_to_clean.progressChanged.disconnect(self._on_worker_progress)
                    worker_to_clean.logMessage.disconnect(self.logMessage)
                    worker_to_clean.operationCompleted.disconnect(self._on_worker_completed)
                    worker_to_clean.operationFailed.disconnect(self._on_worker_failed)
                    worker_to_clean.operationCanceled.disconnect(self._on_worker_canceled)
                    worker_to_clean.finished.disconnect(self._cleanup_worker)
                except (TypeError, RuntimeError):
                    logger.debug("Signals already disconnected or worker deleted.")

                if worker_to_clean.isRunning():
                    logger.warning(f"Worker {worker_to_clean.objectName()} is still running during cleanup. Waiting...")
                    worker_to_clean.wait(1000)

                worker_to_clean.deleteLater()
        finally:
            self._cleanup_in_progress = False
            if self._outcome is None:
                self._outcome = ("canceled", None)
            # A successful job waits for its progress run to reach 100 before finishing
            if self._run is None or self._outcome[0] != "completed":
                self._abort_run()
                self._finalize()

    def _finalize(self) -> None:
        token, operation, outcome = self._token, self._operation or "", self._outcome
        self._reset()
        # The gate is free before listeners hear the outcome, so they may start a follow-up
        try:
            if token is not None:
                token.release()
        finally:
            try:
                self._emit_outcome(operation, outcome)
            finally:
                self.operationFinished.emit(operation)
                logger.debug(f"Operation '{operation}' finished.")

    def _emit_outcome(self, operation: str, outcome: tuple[str, object] | None) -> None:
        if outcome is None:
            return
        kind, payload = outcome
        if kind == "completed":
            self.operationCompleted.emit(operation, payload)
        elif kind == "failed":
            app_error = self._error_handler.handle(payload, {"operation": operation})
            self.operationFailed.emit(operation, app_error)
        else:
            self.operationCanceled.emit(operation)

    def _reset(self) -> None:
        self._token = None
        self._operation = None
        self._outcome = None
        self._run = None

    def wait_for_completion(self, timeout_ms: int = 0) -> bool:
        """Wait for the current worker thread; intended for application shutdown."""
        if self.current_worker:
            return self.current_worker.wait(timeout_ms)
        return True

    @Slot()
    def shutdown(self, timeout_ms: int = 3000) -> None:
        """Gracefully stop any active operation when the application quits."""
        if self.current_worker and self.current_worker.isRunning():
            logger.info("Application shutting down, canceling active operation.")
            self.cancel_operation()
            if not self.wait_for_completion(timeout_ms):
                logger.warning(f"Worker did not finish within {timeout_ms}ms during shutdown.")
        else:
            logger.debug("No active operation during shutdown.")
        self._abort_run()

        # Worker already cleaned up and only the progress tail was pending
        if self._token is not None and self.current_worker is None:
            self._finalize()
