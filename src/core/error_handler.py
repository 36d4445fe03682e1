"""
Single entry point for reporting errors in ENDEcode.

Every failure that reaches the user goes through ErrorHandler.handle(), which
normalizes it into a BaseAppError, writes exactly one record to the
``endecode_gui.errors`` logger and emits ``errorOccurred`` for the window.
Unhandled exceptions on the GUI thread or in Python threads are routed the
same way once the hooks are installed.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
import threading
import traceback
from pathlib import Path
from typing import Any, ClassVar

from PySide6.QtCore import QObject, QStandardPaths, Signal

from .config import APP_NAME, APP_ORGANIZATION
from .errors import BaseAppError, ErrorSeverity, from_exception

logger = logging.getLogger(__name__)

ERROR_LOGGER_NAME = "endecode_gui.errors"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
ERROR_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | code=%(app_code)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ERROR_LOG_FILE = "endecode.log"
ERROR_LOG_MAX_BYTES = 5 * 1024 * 1024
ERROR_LOG_BACKUPS = 5

REDACTED_KEYS = ("password", "token", "secret")
MAX_CONTEXT_ITEMS = 20
MAX_CONTEXT_VALUE = 200


def _logs_dir() -> Path:
    location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
    if location:
        return Path(location) / "logs"
    config_location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.ConfigLocation)
    return Path(config_location) / APP_ORGANIZATION / APP_NAME / "logs"


def _build_error_logger() -> logging.Logger:
    """Create the dedicated error logger with a rotating file and a console echo."""
    error_logger = logging.getLogger(ERROR_LOGGER_NAME)
    error_logger.setLevel(logging.DEBUG)
    error_logger.propagate = False
    if error_logger.handlers:
        return error_logger

    formatter = logging.Formatter(ERROR_LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    try:
        logs_dir = _logs_dir()
        logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            logs_dir / ERROR_LOG_FILE,
            maxBytes=ERROR_LOG_MAX_BYTES,
            backupCount=ERROR_LOG_BACKUPS,
            encoding="utf-8",
        )
    except OSError as e:
        logger.warning("Error log file unavailable, logging to console only: %s", e)
    else:
        file_handler.setFormatter(formatter)
        error_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    error_logger.addHandler(console_handler)

    return error_logger


def _redact(context: dict[str, Any]) -> dict[str, Any]:
    """Bound the size of a context mapping and hide credential-like values."""
    safe: dict[str, Any] = {}
    items = list(context.items())

    for key, value in items[:MAX_CONTEXT_ITEMS]:
        if any(marker in key.lower() for marker in REDACTED_KEYS):
            safe[key] = "[REDACTED]"
        elif isinstance(value, str):
            safe[key] = value if len(value) <= MAX_CONTEXT_VALUE else value[:MAX_CONTEXT_VALUE] + "..."
        else:
            safe[key] = repr(value)[:MAX_CONTEXT_VALUE]

    if len(items) > MAX_CONTEXT_ITEMS:
        safe["..."] = f"({len(items) - MAX_CONTEXT_ITEMS} more items truncated)"

    return safe


class ErrorHandler(QObject):
    """
    Process-wide error sink.

    There is one instance per process; constructing it again returns the
    existing one. ``errorOccurred`` carries the normalized BaseAppError.
    """

    errorOccurred = Signal(object)

    _instance: ClassVar[ErrorHandler | None] = None

    def __new__(cls) -> ErrorHandler:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if getattr(self, "_ready", False):
            return

        super().__init__()
        self._ready = True
        self._original_excepthook = sys.excepthook
        self._original_threading_excepthook = threading.excepthook
        self._error_logger = _build_error_logger()

    def capture(self, exception: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
        """
        Normalize an exception without logging it.

        The returned error always carries a technical message and a
        ``traceback`` entry in its context.
        """
        app_error = from_exception(exception, _redact(context or {}))

        if not app_error.technical_message:
            app_error.technical_message = f"{type(exception).__name__}: {exception}"

        if "traceback" not in app_error.context:
            app_error.context["traceback"] = "".join(
                traceback.format_exception(type(exception), exception, exception.__traceback__)
            )

        return app_error

    def handle(self, exception: BaseException, context: dict[str, Any] | None = None) -> BaseAppError:
        """Normalize, log once and announce an error. Interpreter exits pass straight through."""
        if isinstance(exception, SystemExit | KeyboardInterrupt):
            raise exception

        app_error = self.capture(exception, context)
        self._log(app_error, exception)
        self.errorOccurred.emit(app_error)
        return app_error

    def to_user_message(self, app_error: BaseAppError) -> str:
        if app_error.retriable:
            return f"{app_error.user_message} You can try again."
        return app_error.user_message

    def _log(self, app_error: BaseAppError, exception: BaseException) -> None:
        # Expected conditions such as a busy gate are warnings without a traceback
        is_warning = app_error.severity is ErrorSeverity.LOW
        self._error_logger.log(
            logging.WARNING if is_warning else logging.ERROR,
            "[%s] %s",
            app_error.code.value,
            app_error.user_message,
            extra={
                "app_code": app_error.code.value,
                "error_type": app_error.type.value,
                "severity": app_error.severity.value,
                "retriable": app_error.retriable,
            },
            exc_info=None if is_warning else exception,
        )

    def _route_unhandled(self, exception: BaseException | None, context: dict[str, Any]) -> bool:
        if not isinstance(exception, Exception):
            return False
        try:
            self.handle(exception, context)
        except Exception:
            logger.exception("Error handler failed while reporting an unhandled exception")
            return False
        return True

    def install_hooks(self) -> None:
        """Send unhandled exceptions from sys.excepthook and threading.excepthook to handle()."""

        def excepthook(exc_type: type[BaseException], exc_value: BaseException, exc_traceback: Any) -> None:
            if not self._route_unhandled(exc_value, {"source": "sys.excepthook"}):
                self._original_excepthook(exc_type, exc_value, exc_traceback)

        def thread_excepthook(args: threading.ExceptHookArgs) -> None:
            thread_name = args.thread.name if args.thread else "unknown"
            if not self._route_unhandled(args.exc_value, {"source": "threading.excepthook", "thread": thread_name}):
                self._original_threading_excepthook(args)

        sys.excepthook = excepthook
        threading.excepthook = thread_excepthook

    def restore_hooks(self) -> None:
        sys.excepthook = self._original_excepthook
        threading.excepthook = self._original_threading_excepthook


def get_error_handler() -> ErrorHandler:
    return ErrorHandler()


def setup_error_handling() -> ErrorHandler:
    """Create the error handler and install the unhandled-exception hooks."""
    handler = get_error_handler()
    handler.install_hooks()
    return handler


def init_logging(level: int = logging.INFO) -> None:
    """Configure root logging and make sure the error logger exists."""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    get_error_handler()
