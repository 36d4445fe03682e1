"""
Input forms for the watermark operations.

Forms collect input and forward it to the OperationHandler; they disable
their action buttons while any operation is running.
"""

from PySide6.QtWidgets import (
    QCheckBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLineEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from core.backend_interface import BatchOptions
from core.state_store import EventKind, StateStore, WorkingStatus
from core.subscription_bus import Unsubscribe
from gui.operation_handler import DEFAULT_QUICK_TEST_TEXT, OperationHandler


class _OperationForm(QGroupBox):
    """Group box whose action buttons follow the working status."""

    def __init__(self, title: str, store: StateStore, handler: OperationHandler, parent: QWidget | None = None) -> None:
        super().__init__(title, parent)
        self._store = store
        self._handler = handler
        self._action_buttons: list[QPushButton] = []
        self._unsubscribe: Unsubscribe = store.subscribe(EventKind.WORKING_STATUS_CHANGED, self._on_working_changed)

    def _add_action(self, button: QPushButton) -> QPushButton:
        self._action_buttons.append(button)
        button.setEnabled(not self._store.is_working)
        return button

    def _on_working_changed(self, status: WorkingStatus) -> None:
        for button in self._action_buttons:
            button.setEnabled(not status.is_working)

    def detach(self) -> None:
        self._unsubscribe()


class FileOperationsForm(_OperationForm):
    """Encrypt or decrypt every supported file of the selected folder."""

    def __init__(self, store: StateStore, handler: OperationHandler, parent: QWidget | None = None) -> None:
        super().__init__("File Operations", store, handler, parent)

        layout = QVBoxLayout(self)
        self.inject_text_input = QLineEdit()
        self.inject_text_input.setPlaceholderText("Watermark text to embed")
        self.inject_text_input.setAccessibleName("Watermark text")
        self.inject_text_input.returnPressed.connect(self.encrypt)
        layout.addWidget(self.inject_text_input)

        buttons = QHBoxLayout()
        self.encrypt_button = self._add_action(QPushButton("Encrypt Files"))
        self.encrypt_button.clicked.connect(self.encrypt)
        buttons.addWidget(self.encrypt_button)
        self.decrypt_button = self._add_action(QPushButton("Decrypt Files"))
        self.decrypt_button.clicked.connect(self.decrypt)
        buttons.addWidget(self.decrypt_button)
        layout.addLayout(buttons)

    def encrypt(self) -> bool:
        return self._handler.encrypt(self.inject_text_input.text())

    def decrypt(self) -> bool:
        return self._handler.decrypt()


class BatchForm(_OperationForm):
    """Copy the selected folder several times, encoding each copy."""

    def __init__(self, store: StateStore, handler: OperationHandler, parent: QWidget | None = None) -> None:
        super().__init__("Batch Copy && Encode", store, handler, parent)

        form = QFormLayout(self)
        self.base_text_input = QLineEdit()
        self.base_text_input.setPlaceholderText("Base text for each copy")
        form.addRow("Base text:", self.base_text_input)

        self.num_copies_input = QSpinBox()
        self.num_copies_input.setRange(1, 999)
        self.num_copies_input.setValue(1)
        form.addRow("Copies:", self.num_copies_input)

        options = QHBoxLayout()
        self.add_swap_checkbox = QCheckBox("Swap")
        self.add_watermark_checkbox = QCheckBox("Visible watermark")
        self.create_zip_checkbox = QCheckBox("Create ZIP")
        for checkbox in (self.add_swap_checkbox, self.add_watermark_checkbox, self.create_zip_checkbox):
            options.addWidget(checkbox)
        form.addRow("Options:", options)

        self.watermark_text_input = QLineEdit()
        self.watermark_text_input.setPlaceholderText("Optional")
        form.addRow("Watermark text:", self.watermark_text_input)

        self.photo_number_input = QLineEdit()
        self.photo_number_input.setPlaceholderText("Optional")
        form.addRow("Photo number:", self.photo_number_input)

        self.run_button = self._add_action(QPushButton("Run Batch"))
        self.run_button.clicked.connect(self.run)
        form.addRow(self.run_button)

    def options(self) -> BatchOptions:
        """Collect the raw form values; validation happens in the handler."""
        return BatchOptions(
            source_folder=self._store.selected_path or "",
            num_copies=self.num_copies_input.value(),
            base_text=self.base_text_input.text(),
            add_swap=self.add_swap_checkbox.isChecked(),
            add_watermark=self.add_watermark_checkbox.isChecked(),
            create_zip=self.create_zip_checkbox.isChecked(),
            watermark_text=self.watermark_text_input.text(),
            photo_number=self.photo_number_input.text(),  # type: ignore[arg-type]
        )

    def run(self) -> bool:
        return self._handler.run_batch(self.options())


class QuickTestForm(_OperationForm):
    """Encode and decode a short text to check the backend."""

    def __init__(self, store: StateStore, handler: OperationHandler, parent: QWidget | None = None) -> None:
        super().__init__("Quick Test", store, handler, parent)

        layout = QHBoxLayout(self)
        self.test_text_input = QLineEdit()
        self.test_text_input.setPlaceholderText(DEFAULT_QUICK_TEST_TEXT)
        self.test_text_input.returnPressed.connect(self.run)
        layout.addWidget(self.test_text_input, 1)

        self.run_button = self._add_action(QPushButton("Run Test"))
        self.run_button.clicked.connect(self.run)
        layout.addWidget(self.run_button)

    def current_text(self) -> str:
        return self.test_text_input.text().strip()

    def run(self) -> bool:
        return self._handler.quick_test(self.current_text())

    def run_with_text(self, text: str) -> bool:
        self.test_text_input.setText(text)
        return self.run()


class RemovalForm(_OperationForm):
    """Strip tail watermarks from the selected folder."""

    def __init__(self, store: StateStore, handler: OperationHandler, parent: QWidget | None = None) -> None:
        super().__init__("Remove Watermarks", store, handler, parent)

        layout = QHBoxLayout(self)
        self.remove_button = self._add_action(QPushButton("Remove Tail Watermarks"))
        self.remove_button.clicked.connect(self.run)
        layout.addWidget(self.remove_button)
        layout.addStretch()

    def run(self) -> bool:
        return self._handler.remove_watermarks()
