"""
Tests for the error taxonomy and exception mapping.
"""

from core.errors import (
    AlreadyBusyError,
    BackendError,
    ConfigError,
    ErrorCode,
    ErrorSeverity,
    ErrorType,
    ValidationError,
    map_exception,
)


class TestErrorClasses:
    def test_validation_error_records_field(self) -> None:
        error = ValidationError(code=ErrorCode.REQUIRED_FIELD_MISSING, user_message="Base text is required", field="base_text")

        assert error.type is ErrorType.VALIDATION
        assert error.field == "base_text"
        assert error.severity is ErrorSeverity.LOW
        assert not error.retriable
        assert str(error) == "Base text is required"

    def test_backend_error_technical_message(self) -> None:
        error = BackendError("encode_text failed", original_error=OSError("nope"), command="encode_text")

        assert error.type is ErrorType.BACKEND
        assert error.technical_message == "OSError: nope"
        assert error.command == "encode_text"
        assert error.retriable

    def test_already_busy_error(self) -> None:
        error = AlreadyBusyError("Encrypting Files", "Decrypting Files")

        assert error.code is ErrorCode.ALREADY_BUSY
        assert error.user_message == "Another operation is already in progress"
        assert "Decrypting Files" in error.technical_message
        assert "Encrypting Files" in error.technical_message

    def test_to_dict(self) -> None:
        error = ConfigError(code=ErrorCode.CONFIG_INVALID, user_message="Preferences file is invalid")

        data = error.to_dict()

        assert data["type"] == "config"
        assert data["code"] == "CONFIG_INVALID"
        assert data["user_message"] == "Preferences file is invalid"
        assert data["retriable"] is False

    def test_repr(self) -> None:
        error = ConfigError(code=ErrorCode.CONFIG_PARSE_ERROR, user_message="bad json")
        assert repr(error) == "ConfigError(type=config, code=CONFIG_PARSE_ERROR, message='bad json')"


class TestMapException:
    def test_app_error_passes_through_with_extra_context(self) -> None:
        error = BackendError("failed", command="encode_text")

        mapped = map_exception(error, {"operation": "Quick Test", "command": "other"})

        assert mapped is error
        assert mapped.context["operation"] == "Quick Test"
        assert mapped.context["command"] == "encode_text"

    def test_value_error_becomes_validation_error(self) -> None:
        mapped = map_exception(ValueError("bad number"))

        assert isinstance(mapped, ValidationError)
        assert mapped.code is ErrorCode.INVALID_INPUT
        assert mapped.user_message == "bad number"

    def test_file_errors(self) -> None:
        assert map_exception(FileNotFoundError("x")).code is ErrorCode.FILE_NOT_FOUND
        mapped = map_exception(PermissionError())
        assert mapped.code is ErrorCode.PERMISSION_DENIED
        assert mapped.type is ErrorType.FILE
        assert mapped.user_message == "Permission denied"

    def test_unknown_exception(self) -> None:
        mapped = map_exception(KeyError("k"), {"operation": "Encrypting Files"})

        assert mapped.code is ErrorCode.UNKNOWN
        assert mapped.user_message == "An unexpected error occurred"
        assert mapped.context == {"operation": "Encrypting Files"}
