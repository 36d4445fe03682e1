"""
Progress bar widget driven by a ProgressScheduler.

The widget holds no timing logic of its own: it mirrors the scheduler's
percentage and visibility, and paints the indeterminate shimmer at the
offset the scheduler reports while pulsing.
"""

from PySide6.QtCore import QRectF, Slot
from PySide6.QtGui import QColor, QPainter, QPaintEvent
from PySide6.QtWidgets import QProgressBar, QWidget

from core.progress_scheduler import ProgressScheduler

# Integer range of the underlying QProgressBar; percentages keep one decimal
_SCALE = 10


class ProgressBarWidget(QProgressBar):
    """QProgressBar bound to a ProgressScheduler."""

    def __init__(self, scheduler: ProgressScheduler, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._scheduler = scheduler
        self._pulse_active = False
        self._pulse_offset = 0.0
        self._pulse_color = QColor(13, 110, 253, 115)

        self.setObjectName("progressBar")
        self.setAccessibleName("Operation progress")
        self.setAccessibleDescription("Shows the progress of the running operation")
        self.setRange(0, 100 * _SCALE)
        self.setValue(0)
        self.setFormat("%p%")
        self.setVisible(scheduler.is_visible)

        scheduler.progressChanged.connect(self._on_progress_changed)
        scheduler.visibilityChanged.connect(self.setVisible)
        scheduler.pulseActiveChanged.connect(self._on_pulse_active_changed)
        scheduler.pulseOffsetChanged.connect(self._on_pulse_offset_changed)

    @property
    def scheduler(self) -> ProgressScheduler:
        return self._scheduler

    def percentage(self) -> float:
        return self.value() / _SCALE

    def set_pulse_color(self, color: QColor) -> None:
        self._pulse_color = color
        self.update()

    @Slot(float)
    def _on_progress_changed(self, percentage: float) -> None:
        self.setValue(round(percentage * _SCALE))

    @Slot(bool)
    def _on_pulse_active_changed(self, active: bool) -> None:
        self._pulse_active = active
        self.setTextVisible(not active)
        self.update()

    @Slot(float)
    def _on_pulse_offset_changed(self, offset: float) -> None:
        self._pulse_offset = offset
        self.update()

    def paintEvent(self, event: QPaintEvent) -> None:
        super().paintEvent(event)
        if not self._pulse_active:
            return

        rect = QRectF(self.rect())
        width = rect.width() * self._scheduler.pulse_width / 100.0
        x = rect.left() + rect.width() * self._pulse_offset / 100.0
        shimmer = QRectF(x, rect.top(), width, rect.height()).intersected(rect)
        if shimmer.isEmpty():
            return

        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            painter.setPen(QColor(0, 0, 0, 0))
            painter.setBrush(self._pulse_color)
            painter.drawRoundedRect(shimmer, 3, 3)
        finally:
            painter.end()
