"""
Error taxonomy for ENDEcode.

Four kinds of failure reach the user: invalid input caught before any backend
call (ValidationError), a rejected backend command (BackendError), an
operation requested while another one runs (AlreadyBusyError) and a broken
preferences document (ConfigError). Anything else is mapped onto the taxonomy
by map_exception().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    VALIDATION = "validation"
    BACKEND = "backend"
    CONCURRENCY = "concurrency"
    CONFIG = "config"
    FILE = "file"
    SYSTEM = "system"


class ErrorCode(Enum):
    """Stable identifiers written to the error log."""

    # Input
    INVALID_INPUT = "INVALID_INPUT"
    REQUIRED_FIELD_MISSING = "REQUIRED_FIELD_MISSING"
    VALUE_OUT_OF_RANGE = "VALUE_OUT_OF_RANGE"
    NO_FOLDER_SELECTED = "NO_FOLDER_SELECTED"

    # Command channel
    BACKEND_FAILURE = "BACKEND_FAILURE"
    COMMAND_UNAVAILABLE = "COMMAND_UNAVAILABLE"

    ALREADY_BUSY = "ALREADY_BUSY"

    # Preferences
    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_PARSE_ERROR = "CONFIG_PARSE_ERROR"

    # Host environment
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    TIMEOUT = "TIMEOUT"
    OS_ERROR = "OS_ERROR"

    UNKNOWN = "UNKNOWN"


class ErrorSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def _merged(context: dict[str, Any] | None, **extra: Any) -> dict[str, Any]:
    merged = dict(context or {})
    merged.update({key: value for key, value in extra.items() if value is not None})
    return merged


@dataclass
class BaseAppError(Exception):
    """
    Exception carrying everything needed to report a failure.

    ``user_message`` is what the console shows; ``technical_message`` and
    ``context`` only go to the error log.
    """

    type: ErrorType
    code: ErrorCode
    user_message: str
    technical_message: str | None = None
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    retriable: bool = False
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        Exception.__init__(self, self.user_message)

    def __str__(self) -> str:
        return self.user_message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self.type.value}, code={self.code.value}, message='{self.user_message}')"

    def to_dict(self) -> dict[str, Any]:
        """Plain-value form of the error, enum members replaced by their values."""
        data = {}
        for item in fields(self):
            value = getattr(self, item.name)
            data[item.name] = value.value if isinstance(value, Enum) else value
        return data


class ValidationError(BaseAppError):
    """Caller input rejected before any backend call."""

    def __init__(
        self,
        code: ErrorCode,
        user_message: str,
        field: str | None = None,
        technical_message: str | None = None,
        severity: ErrorSeverity = ErrorSeverity.LOW,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            ErrorType.VALIDATION,
            code,
            user_message,
            technical_message,
            severity,
            False,
            _merged(context, field=field),
        )

    @property
    def field(self) -> str | None:
        return self.context.get("field")


class BackendError(BaseAppError):
    """A command sent through the channel failed or does not exist."""

    def __init__(
        self,
        user_message: str,
        original_error: Exception | None = None,
        code: ErrorCode = ErrorCode.BACKEND_FAILURE,
        command: str | None = None,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        context: dict[str, Any] | None = None,
    ):
        technical = f"{type(original_error).__name__}: {original_error}" if original_error is not None else None
        super().__init__(
            ErrorType.BACKEND,
            code,
            user_message,
            technical,
            severity,
            True,
            _merged(context, command=command),
        )
        self.original_error = original_error

    @property
    def command(self) -> str | None:
        return self.context.get("command")


class AlreadyBusyError(BaseAppError):
    """Raised by the operation gate when a second operation is requested."""

    def __init__(self, active_operation: str | None, requested_operation: str | None = None):
        super().__init__(
            ErrorType.CONCURRENCY,
            ErrorCode.ALREADY_BUSY,
            "Another operation is already in progress",
            f"Cannot start '{requested_operation}' while '{active_operation}' is running",
            ErrorSeverity.LOW,
            True,
            {"active_operation": active_operation, "requested_operation": requested_operation},
        )

    @property
    def active_operation(self) -> str | None:
        return self.context.get("active_operation")

    @property
    def requested_operation(self) -> str | None:
        return self.context.get("requested_operation")


ConcurrencyError = AlreadyBusyError


class ConfigError(BaseAppError):
    """An imported or stored preferences document could not be used."""

    def __init__(
        self,
        code: ErrorCode,
        user_message: str,
        technical_message: str | None = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(ErrorType.CONFIG, code, user_message, technical_message, severity, False, _merged(context))


class HostError(BaseAppError):
    """File system or interpreter failure outside the application's own checks."""

    def __init__(
        self,
        code: ErrorCode,
        user_message: str,
        technical_message: str | None = None,
        error_type: ErrorType = ErrorType.SYSTEM,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(error_type, code, user_message, technical_message, ErrorSeverity.HIGH, False, _merged(context))


# Checked in order, so subclasses come before OSError
_HOST_ERRORS: tuple[tuple[type[Exception], ErrorType, ErrorCode, str], ...] = (
    (FileNotFoundError, ErrorType.FILE, ErrorCode.FILE_NOT_FOUND, "File not found"),
    (PermissionError, ErrorType.FILE, ErrorCode.PERMISSION_DENIED, "Permission denied"),
    (TimeoutError, ErrorType.SYSTEM, ErrorCode.TIMEOUT, "Operation timed out"),
    (OSError, ErrorType.SYSTEM, ErrorCode.OS_ERROR, "System error occurred"),
)


def map_exception(exc: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
    """
    Convert any exception into a BaseAppError.

    Application errors are returned as they are, with keys from ``context``
    added where they are not already set.
    """
    if isinstance(exc, BaseAppError):
        for key, value in (context or {}).items():
            exc.context.setdefault(key, value)
        return exc

    technical = f"{type(exc).__name__}: {exc}"

    if isinstance(exc, ValueError):
        return ValidationError(
            ErrorCode.INVALID_INPUT, str(exc) or "Invalid input provided", technical_message=technical, context=context
        )

    for exc_class, error_type, code, default_message in _HOST_ERRORS:
        if isinstance(exc, exc_class):
            return HostError(code, str(exc) or default_message, technical, error_type, context)

    logger.warning("Unmapped exception type %s: %s", type(exc).__name__, exc)
    return HostError(ErrorCode.UNKNOWN, "An unexpected error occurred", technical, context=context)


def from_exception(exc: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
    return map_exception(exc, context)
