"""
Input validation applied before any backend call.

Validators raise ValidationError with the offending field so the UI can
report a precise message; they never touch application state.
"""

from __future__ import annotations

from typing import Any

from .backend_interface import BatchOptions
from .errors import ErrorCode, ValidationError


def require_folder(folder: str | None, field: str = "folder") -> str:
    """Return the selected folder or raise if none is selected."""
    if not folder or not str(folder).strip():
        raise ValidationError(
            code=ErrorCode.NO_FOLDER_SELECTED,
            user_message="No folder selected",
            field=field,
        )
    return str(folder)


def require_text(text: str | None, field: str, label: str) -> str:
    """Return stripped text or raise if it is empty."""
    value = (text or "").strip()
    if not value:
        raise ValidationError(
            code=ErrorCode.REQUIRED_FIELD_MISSING,
            user_message=f"{label} is required",
            field=field,
        )
    return value


def parse_positive_int(value: Any, field: str, label: str, *, required: bool = True) -> int | None:
    """
    Parse a positive integer from user input.

    Args:
        value: Raw input (int or string)
        field: Field name for error reporting
        label: Human-readable name used in messages
        required: Whether an empty value is an error

    Returns:
        The parsed integer, or None for an empty optional value
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(
                code=ErrorCode.REQUIRED_FIELD_MISSING,
                user_message=f"{label} is required",
                field=field,
            )
        return None

    try:
        number = int(str(value).strip()) if not isinstance(value, int) else value
    except ValueError:
        raise ValidationError(
            code=ErrorCode.INVALID_INPUT,
            user_message=f"{label} must be a positive integer",
            field=field,
            technical_message=f"Could not parse {value!r}",
        ) from None

    if isinstance(number, bool) or number < 1:
        raise ValidationError(
            code=ErrorCode.VALUE_OUT_OF_RANGE,
            user_message=f"{label} must be at least 1",
            field=field,
        )
    return number


def validate_encrypt_request(folder: str | None, text: str | None) -> tuple[str, str]:
    return require_folder(folder), require_text(text, "inject_text", "Watermark text")


def validate_batch_options(options: BatchOptions) -> BatchOptions:
    """
    Validate and normalize batch options.

    Returns:
        New BatchOptions with stripped text and parsed numbers
    """
    folder = require_folder(options.source_folder, field="source_folder")
    base_text = require_text(options.base_text, "base_text", "Base text")
    num_copies = parse_positive_int(options.num_copies, "num_copies", "Number of copies")
    photo_number = parse_positive_int(options.photo_number, "photo_number", "Photo number", required=False)
    watermark_text = (options.watermark_text or "").strip() or None

    return BatchOptions(
        source_folder=folder,
        num_copies=num_copies or 1,
        base_text=base_text,
        add_swap=bool(options.add_swap),
        add_watermark=bool(options.add_watermark),
        create_zip=bool(options.create_zip),
        watermark_text=watermark_text,
        photo_number=photo_number,
    )
