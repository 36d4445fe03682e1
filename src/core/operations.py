"""
Watermark operation workflows.

Each workflow is a plain function taking an OperationContext first, so it can
be bound with functools.partial and handed to an OperationWorker. Workflows
report per-file progress and log lines through the context; per-file backend
errors are counted rather than aborting the whole run.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from .backend_interface import BackendInterface, BatchOptions
from .errors import BackendError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]  # percent
LogCallback = Callable[[str, str], None]  # (level, message)

# Console levels understood by the log console
INFO = "INFO"
SUCCESS = "SUCCESS"
WARNING = "WARNING"
ERROR = "ERROR"


class CancellationToken:
    """Cooperative cancellation flag shared between the GUI and a worker."""

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()


class OperationContext:
    """Channel from a running workflow back to its worker."""

    def __init__(
        self,
        progress_cb: ProgressCallback | None = None,
        log_cb: LogCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self._progress_cb = progress_cb
        self._log_cb = log_cb
        self.cancel_token = cancel_token or CancellationToken()

    def progress(self, percent: float) -> None:
        if self._progress_cb:
            self._progress_cb(percent)

    def log(self, level: str, message: str) -> None:
        if self._log_cb:
            self._log_cb(level, message)

    def is_cancelled(self) -> bool:
        return self.cancel_token.is_cancelled()


Job = Callable[[OperationContext], object]


@dataclass
class EncryptResult:
    total: int = 0
    encrypted: int = 0
    already_watermarked: int = 0
    errors: int = 0

    def summary(self) -> dict[str, int]:
        return {
            "Total Files": self.total,
            "Encrypted": self.encrypted,
            "Already Watermarked": self.already_watermarked,
            "Errors": self.errors,
        }


@dataclass
class DecryptResult:
    total: int = 0
    with_watermarks: int = 0
    no_watermarks: int = 0
    errors: int = 0
    watermarks: dict[str, str] = field(default_factory=dict)

    def summary(self) -> dict[str, int]:
        return {
            "Total Files": self.total,
            "With Watermarks": self.with_watermarks,
            "No Watermarks": self.no_watermarks,
            "Errors": self.errors,
        }


@dataclass
class BatchResult:
    success: bool
    output_dir: str
    zipped: bool = False


@dataclass
class RemovalResult:
    report: str


@dataclass
class QuickTestResult:
    text: str
    encoded: str
    decoded: str
    marker: str

    @property
    def passed(self) -> bool:
        return self.decoded == self.text


def _file_name(path: str) -> str:
    return Path(path).name or path


def _list_files(ctx: OperationContext, backend: BackendInterface, folder: str) -> list[str]:
    files = backend.get_supported_files(folder)
    if not files:
        ctx.log(WARNING, "No supported files found")
    else:
        ctx.log(INFO, f"Found {len(files)} supported files")
    return files


def encrypt_files(ctx: OperationContext, backend: BackendInterface, folder: str, text: str) -> EncryptResult:
    """
    Add a tail watermark carrying text to every supported file in folder.

    Raises:
        BackendError: If the folder cannot be listed
    """
    ctx.log(INFO, f"Folder: {folder}")
    ctx.log(INFO, f'Watermark: "{text}"')

    result = EncryptResult()
    files = _list_files(ctx, backend, folder)
    result.total = len(files)

    for index, path in enumerate(files, start=1):
        if ctx.is_cancelled():
            break
        name = _file_name(path)
        try:
            if backend.add_tail_watermark(path, text):
                ctx.log(SUCCESS, name)
                result.encrypted += 1
            else:
                ctx.log(WARNING, f"{name} (already watermarked)")
                result.already_watermarked += 1
        except BackendError as e:
            ctx.log(ERROR, f"{name}: {e.user_message}")
            result.errors += 1
        ctx.progress(index / len(files) * 100)

    return result


def decrypt_files(ctx: OperationContext, backend: BackendInterface, folder: str) -> DecryptResult:
    """
    Extract the tail watermark of every supported file in folder.

    Raises:
        BackendError: If the folder cannot be listed
    """
    ctx.log(INFO, f"Folder: {folder}")

    result = DecryptResult()
    files = _list_files(ctx, backend, folder)
    result.total = len(files)

    for index, path in enumerate(files, start=1):
        if ctx.is_cancelled():
            break
        name = _file_name(path)
        try:
            watermark = backend.extract_tail_watermark(path)
        except BackendError as e:
            ctx.log(ERROR, f"{name}: {e.user_message}")
            result.errors += 1
        else:
            if watermark:
                ctx.log(SUCCESS, f'{name}: "{watermark}"')
                result.with_watermarks += 1
                result.watermarks[path] = watermark
            else:
                ctx.log(INFO, f"{name}: No watermark")
                result.no_watermarks += 1
        ctx.progress(index / len(files) * 100)

    return result


def batch_copy_and_encode(ctx: OperationContext, backend: BackendInterface, options: BatchOptions) -> BatchResult:
    """Run a batch copy-and-encode and report where the copies went."""
    ctx.log(INFO, "Starting batch operation:")
    ctx.log(INFO, f"  Source: {options.source_folder}")
    ctx.log(INFO, f'  Base text: "{options.base_text}"')
    ctx.log(INFO, f"  Copies: {options.num_copies}")
    ctx.log(
        INFO,
        f"  Options: swap={options.add_swap}, watermark={options.add_watermark}, zip={options.create_zip}",
    )
    if options.watermark_text:
        ctx.log(INFO, f'  Watermark text: "{options.watermark_text}"')
    if options.photo_number:
        ctx.log(INFO, f"  Photo number: {options.photo_number}")

    success = backend.batch_copy_and_encode(options)
    result = BatchResult(success=success, output_dir=options.output_folder, zipped=success and options.create_zip)

    if success:
        ctx.log(INFO, f"Output location: {result.output_dir}")
        if result.zipped:
            ctx.log(INFO, "ZIP archives created in the output folder")
    return result


def remove_watermarks(ctx: OperationContext, backend: BackendInterface, folder: str) -> RemovalResult:
    ctx.log(INFO, f"Removing tail watermarks in: {folder}")
    report = backend.remove_tail_watermarks(folder)
    for line in report.splitlines():
        if line.strip():
            ctx.log(INFO, line)
    return RemovalResult(report=report)


def quick_test(ctx: OperationContext, backend: BackendInterface, text: str) -> QuickTestResult:
    """Round-trip text through encode/decode and build a watermark marker."""
    ctx.log(INFO, f'Running encode/decode test with: "{text}"')

    encoded = backend.encode_text(text)
    ctx.log(INFO, f"Encoded: {encoded}")
    decoded = backend.decode_text(encoded)
    ctx.log(INFO, f"Decoded: {decoded}")
    marker = backend.add_watermark_marker(text)
    preview = f"{marker[:16]}..." if len(marker) > 16 else marker
    ctx.log(INFO, f"Watermark: {preview}")

    result = QuickTestResult(text=text, encoded=encoded, decoded=decoded, marker=marker)
    if result.passed:
        ctx.log(SUCCESS, f'Quick test PASSED for "{text}"')
    else:
        ctx.log(ERROR, f'Quick test FAILED: expected "{text}", got "{decoded}"')
    return result
