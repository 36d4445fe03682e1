"""
Reusable GUI widgets for the ENDEcode application.

This module contains custom widgets that can be reused across different
parts of the application.
"""

from .folder_picker import FolderPicker
from .log_console import LogConsole
from .progress_bar import ProgressBarWidget
from .status_indicator import StatusIndicatorWidget, StatusState

__all__ = ["FolderPicker", "LogConsole", "ProgressBarWidget", "StatusIndicatorWidget", "StatusState"]
