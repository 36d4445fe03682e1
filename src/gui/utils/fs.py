"""Opening folders in the native file manager."""

import logging
import platform
import subprocess
from pathlib import Path

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices

logger = logging.getLogger(__name__)

_FALLBACK_COMMANDS = {
    "windows": "explorer",
    "darwin": "open",
    "linux": "xdg-open",
}


def open_in_file_manager(path: Path) -> bool:
    """Open a directory in the OS file manager.

    QDesktopServices is tried first; a platform command is used when it
    declines the URL.

    Args:
        path: Existing directory to open.

    Returns:
        True if some method reported success, False otherwise.
    """
    if not path.is_dir():
        logger.warning(f"Cannot open non-directory path in file manager: {path}")
        return False

    abs_path = path.resolve()
    if QDesktopServices.openUrl(QUrl.fromLocalFile(str(abs_path))):
        logger.debug(f"Opened {abs_path} using QDesktopServices")
        return True

    command = _FALLBACK_COMMANDS.get(platform.system().lower())
    if command is None:
        return False

    try:
        result = subprocess.run([command, str(abs_path)], check=False, capture_output=True)
    except (subprocess.SubprocessError, FileNotFoundError) as e:
        logger.error(f"Fallback '{command}' failed for {abs_path}: {e}")
        return False

    # explorer.exe returns 1 even on success
    return result.returncode == 0 or command == "explorer"
