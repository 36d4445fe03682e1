"""
Folder picker showing and changing the selected source folder.
"""

import logging
from pathlib import Path

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QFileDialog, QHBoxLayout, QLabel, QPushButton, QWidget

from core.state_store import EventKind, StateStore
from core.subscription_bus import Unsubscribe
from gui.utils.fs import open_in_file_manager

logger = logging.getLogger(__name__)

NO_FOLDER_TEXT = "No folder selected"


class FolderPicker(QWidget):
    """
    Select the source folder through a native dialog.

    The picker writes to the StateStore and redraws from its
    SELECTED_PATH_CHANGED notifications, so other writers stay in sync.

    Signals:
        message(str, str): Console level and message
    """

    message = Signal(str, str)

    def __init__(self, store: StateStore, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._store = store
        self._unsubscribe: Unsubscribe | None = None
        self._setup_ui()
        self._unsubscribe = store.subscribe(EventKind.SELECTED_PATH_CHANGED, self._on_selected_path_changed)
        self._update_ui(store.selected_path)

    def _setup_ui(self) -> None:
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(8)

        self.select_button = QPushButton("Select Folder")
        self.select_button.setAccessibleName("Select source folder")
        self.select_button.setToolTip("Choose the folder containing files to process")
        self.select_button.clicked.connect(self.browse)
        layout.addWidget(self.select_button)

        self.path_label = QLabel(NO_FOLDER_TEXT)
        self.path_label.setObjectName("selectedPathLabel")
        self.path_label.setAccessibleName("Selected folder")
        layout.addWidget(self.path_label, 1)

        self.open_button = QPushButton("Open")
        self.open_button.setAccessibleName("Open folder in file manager")
        self.open_button.clicked.connect(self.open_selected)
        layout.addWidget(self.open_button)

    def restore_last_path(self) -> None:
        """Select the remembered folder from the previous session, if any."""
        last_path = self._store.preferences.last_selected_path
        if last_path and not self._store.selected_path:
            self._store.set_selected_path(last_path)

    def browse(self) -> None:
        start_dir = self._store.selected_path or str(Path.home())
        folder = QFileDialog.getExistingDirectory(self, "Select Source Folder", start_dir)
        if folder:
            self.select(folder)

    def select(self, folder: str) -> None:
        self._store.set_selected_path(folder)
        self.message.emit("SUCCESS", f"Selected folder: {folder}")

    def open_selected(self) -> None:
        selected = self._store.selected_path
        if not selected:
            self.message.emit("WARNING", NO_FOLDER_TEXT)
            return
        if not open_in_file_manager(Path(selected)):
            self.message.emit("WARNING", f"Could not open folder: {selected}")

    def _on_selected_path_changed(self, path: str | None) -> None:
        self._update_ui(path)

    def _update_ui(self, path: str | None) -> None:
        self.path_label.setText(path or NO_FOLDER_TEXT)
        self.path_label.setToolTip(path or "")
        self.open_button.setEnabled(bool(path))

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
