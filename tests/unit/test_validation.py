"""
Tests for input validation performed before backend calls.
"""

import pytest

from core.backend_interface import BatchOptions
from core.errors import ErrorCode, ValidationError
from core.validation import (
    parse_positive_int,
    require_folder,
    require_text,
    validate_batch_options,
    validate_encrypt_request,
)


class TestRequireFolder:
    def test_returns_folder(self) -> None:
        assert require_folder("/photos") == "/photos"

    @pytest.mark.parametrize("folder", [None, "", "   "])
    def test_missing_folder(self, folder) -> None:
        with pytest.raises(ValidationError) as exc_info:
            require_folder(folder)

        assert exc_info.value.code is ErrorCode.NO_FOLDER_SELECTED
        assert exc_info.value.user_message == "No folder selected"
        assert exc_info.value.field == "folder"


class TestRequireText:
    def test_strips_text(self) -> None:
        assert require_text("  hello  ", "inject_text", "Watermark text") == "hello"

    def test_empty_text(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            require_text("   ", "inject_text", "Watermark text")

        assert exc_info.value.code is ErrorCode.REQUIRED_FIELD_MISSING
        assert exc_info.value.user_message == "Watermark text is required"
        assert exc_info.value.field == "inject_text"


class TestParsePositiveInt:
    @pytest.mark.parametrize("raw, expected", [(3, 3), ("12", 12), (" 7 ", 7)])
    def test_valid_values(self, raw, expected) -> None:
        assert parse_positive_int(raw, "num_copies", "Number of copies") == expected

    def test_empty_optional_is_none(self) -> None:
        assert parse_positive_int("", "photo_number", "Photo number", required=False) is None
        assert parse_positive_int(None, "photo_number", "Photo number", required=False) is None

    def test_empty_required(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_positive_int("", "num_copies", "Number of copies")
        assert exc_info.value.code is ErrorCode.REQUIRED_FIELD_MISSING

    @pytest.mark.parametrize("raw", ["abc", "1.5"])
    def test_not_an_integer(self, raw) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_positive_int(raw, "num_copies", "Number of copies")

        assert exc_info.value.code is ErrorCode.INVALID_INPUT
        assert exc_info.value.user_message == "Number of copies must be a positive integer"

    @pytest.mark.parametrize("raw", [0, "-3", True])
    def test_out_of_range(self, raw) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_positive_int(raw, "num_copies", "Number of copies")

        assert exc_info.value.code is ErrorCode.VALUE_OUT_OF_RANGE


class TestRequestValidation:
    def test_validate_encrypt_request(self) -> None:
        assert validate_encrypt_request("/photos", " wm ") == ("/photos", "wm")

    def test_encrypt_checks_folder_before_text(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_encrypt_request(None, "")
        assert exc_info.value.code is ErrorCode.NO_FOLDER_SELECTED

    def test_validate_batch_options_normalizes(self) -> None:
        options = BatchOptions(
            source_folder="/photos",
            num_copies="4",
            base_text="  Client ",
            add_watermark=True,
            watermark_text="   ",
            photo_number="",
        )

        validated = validate_batch_options(options)

        assert validated.num_copies == 4
        assert validated.base_text == "Client"
        assert validated.watermark_text is None
        assert validated.photo_number is None
        assert validated.add_watermark is True

    def test_validate_batch_options_requires_base_text(self) -> None:
        options = BatchOptions(source_folder="/photos", num_copies=1, base_text="")

        with pytest.raises(ValidationError) as exc_info:
            validate_batch_options(options)

        assert exc_info.value.field == "base_text"

    def test_validate_batch_options_rejects_zero_copies(self) -> None:
        options = BatchOptions(source_folder="/photos", num_copies=0, base_text="x")

        with pytest.raises(ValidationError) as exc_info:
            validate_batch_options(options)

        assert exc_info.value.field == "num_copies"
