"""
Shared pytest configuration.

Runs Qt headless and keeps QStandardPaths (log files, QSettings) away from the
real user profile.
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QStandardPaths  # noqa: E402

QStandardPaths.setTestModeEnabled(True)
