"""
Backend interface for the watermarking commands.

This module provides a thread-safe, typed wrapper around an opaque command
channel. Every rejection from the channel surfaces as a BackendError with a
human-readable message.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .command_channel import CommandChannel
from .errors import BackendError, BaseAppError
from .state_store import Preferences


@dataclass
class BatchOptions:
    """Parameters of a batch copy-and-encode run."""

    source_folder: str
    num_copies: int
    base_text: str
    add_swap: bool = False
    add_watermark: bool = False
    create_zip: bool = False
    watermark_text: str | None = None
    photo_number: int | None = None

    @property
    def output_folder(self) -> str:
        """Folder the backend writes copies into."""
        source = Path(self.source_folder)
        return str(source.parent / f"{source.name}-Copies")

    def to_command_args(self) -> dict[str, Any]:
        return {
            "sourceFolder": self.source_folder,
            "numCopies": self.num_copies,
            "baseText": self.base_text,
            "addSwap": self.add_swap,
            "addWatermark": self.add_watermark,
            "createZip": self.create_zip,
            "watermarkText": self.watermark_text,
            "photoNumber": self.photo_number,
        }


class BackendInterface:
    """
    Typed access to the backend command channel.

    Calls are serialized with a lock so the interface can be shared between
    the GUI thread and an operation worker.
    """

    def __init__(self, channel: CommandChannel) -> None:
        self._channel = channel
        self._lock = threading.RLock()
        self._logger = logging.getLogger(__name__)

    def _invoke(self, command: str, **args: Any) -> Any:
        with self._lock:
            try:
                return self._channel(command, args)
            except BaseAppError:
                raise
            except Exception as e:
                error_msg = f"{command} failed: {e!s}" if str(e) else f"{command} failed"
                self._logger.debug(error_msg)
                raise BackendError(error_msg, original_error=e, command=command) from e

    def encode_text(self, text: str) -> str:
        return str(self._invoke("encode_text", text=text))

    def decode_text(self, text: str) -> str:
        return str(self._invoke("decode_text", text=text))

    def add_watermark_marker(self, text: str) -> str:
        return str(self._invoke("add_watermark_marker", text=text))

    def get_supported_files(self, directory: str) -> list[str]:
        """List supported files below directory, sorted."""
        return [str(path) for path in self._invoke("get_supported_files", dir=directory) or []]

    def add_tail_watermark(self, path: str, text: str) -> bool:
        """Append a watermark; False when the file already carries one."""
        return bool(self._invoke("add_tail_watermark", path=path, text=text))

    def extract_tail_watermark(self, path: str) -> str | None:
        result = self._invoke("extract_tail_watermark", path=path)
        return str(result) if result else None

    def remove_tail_watermarks(self, directory: str) -> str:
        """Strip watermarks from every supported file; returns the backend's report."""
        return str(self._invoke("remove_tail_watermarks", dir=directory))

    def batch_copy_and_encode(self, options: BatchOptions) -> bool:
        return bool(self._invoke("batch_copy_and_encode", **options.to_command_args()))

    def load_preferences(self) -> Preferences:
        """Load stored preferences; missing fields take their defaults."""
        data = self._invoke("load_preferences")
        if isinstance(data, Preferences):
            return data
        if data is not None and not isinstance(data, dict):
            raise BackendError(f"load_preferences returned unexpected data: {type(data).__name__}")
        return Preferences.from_dict(data)

    def save_preferences(self, prefs: Preferences) -> None:
        self._invoke("save_preferences", prefs=prefs.to_dict())
