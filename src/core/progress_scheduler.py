"""
Staged progress animation for operations without granular progress reporting.

The scheduler walks a fixed table of checkpoints, easing the displayed
percentage towards each target on a frame timer. Its timing is independent of
the backend call it accompanies: callers start a run next to the real work and
may feed real progress through set_progress() at any time.
"""

from __future__ import annotations

import itertools
import logging
import math
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum, auto
from time import monotonic
from typing import Any

from PySide6.QtCore import QObject, QTimer, Signal, Slot

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MS = 3000
ANIMATION_WINDOW_MS = 200
RESET_DELAY_MS = 500
FRAME_INTERVAL_MS = 16

PULSE_WIDTH = 30.0
PULSE_CYCLE_MS = 1500


@dataclass(frozen=True)
class Checkpoint:
    """Target percentage reached at a cumulative delay from run start."""

    target: float
    delay_ms: float


def default_checkpoints(total_duration_ms: float = DEFAULT_DURATION_MS) -> tuple[Checkpoint, ...]:
    """Return the standard checkpoint table ending at total_duration_ms."""
    return (
        Checkpoint(10, 100),
        Checkpoint(25, 300),
        Checkpoint(50, 800),
        Checkpoint(75, 1200),
        Checkpoint(90, 1800),
        Checkpoint(100, total_duration_ms),
    )


def ease_out_cubic(t: float) -> float:
    """Ease-out cubic curve on [0, 1]."""
    t = max(0.0, min(1.0, t))
    return 1 - (1 - t) ** 3


def ease_in_out(t: float) -> float:
    """Smoothstep curve on [0, 1]."""
    t = max(0.0, min(1.0, t))
    return t * t * (3 - 2 * t)


def clamp_percentage(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def pulse_offset(phase: float) -> float:
    """
    Left edge (in percent of the track) of the shimmer at a cycle phase.

    The shimmer travels from one width left of the track to four widths
    right of its own start and back again over one cycle.
    """
    half = phase * 2 if phase < 0.5 else (1 - phase) * 2
    return PULSE_WIDTH * (-1 + 5 * ease_in_out(half))


class SchedulerState(Enum):
    IDLE = auto()
    RUNNING = auto()
    PULSING = auto()


class _Phase(Enum):
    WAITING = auto()
    ANIMATING = auto()
    RESETTING = auto()


class ProgressRun:
    """
    One pass through the checkpoint table.

    The completion future resolves once the sequence has reached 100 and the
    reset delay has elapsed. A cancelled or superseded run never resolves.
    """

    def __init__(
        self,
        scheduler: ProgressScheduler,
        run_id: int,
        start_time: float,
        checkpoints: tuple[Checkpoint, ...],
    ) -> None:
        self.run_id = run_id
        self.start_time = start_time
        self.checkpoints = checkpoints
        self.checkpoint_index = 0
        self.percentage = 0.0
        self.future: Future[None] = Future()

        self._scheduler = scheduler
        self._cancelled = False
        self._phase = _Phase.WAITING
        self._anim_start_ms = 0.0
        self._anim_from = 0.0
        self._last_end_ms = 0.0
        self._reset_at_ms = 0.0

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def done(self) -> bool:
        """Whether the run completed its full sequence."""
        return self.future.done()

    def add_done_callback(self, fn: Callable[[Future[None]], Any]) -> None:
        self.future.add_done_callback(fn)

    def cancel(self) -> None:
        """Stop this run; its future will never resolve."""
        self._scheduler._cancel_run(self)

    def __repr__(self) -> str:
        return f"ProgressRun(id={self.run_id}, checkpoint={self.checkpoint_index}, percentage={self.percentage:.1f})"


class ProgressScheduler(QObject):
    """
    Drive a perceived-progress indicator across a fixed sequence of checkpoints.

    Signals:
        progressChanged(float): Displayed percentage (always within [0, 100])
        checkpointReached(int, float): Checkpoint index and its target
        visibilityChanged(bool): Indicator shown or hidden
        pulseOffsetChanged(float): Shimmer position while pulsing
        pulseActiveChanged(bool): Indeterminate mode started or stopped
        runFinished(int): Run id whose future just resolved
        runCancelled(int): Run id that was cancelled or superseded
    """

    progressChanged = Signal(float)
    checkpointReached = Signal(int, float)
    visibilityChanged = Signal(bool)
    pulseOffsetChanged = Signal(float)
    pulseActiveChanged = Signal(bool)
    runFinished = Signal(int)
    runCancelled = Signal(int)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: Callable[[], float] = monotonic,
        frame_interval_ms: int = FRAME_INTERVAL_MS,
        animation_ms: float = ANIMATION_WINDOW_MS,
        reset_delay_ms: float = RESET_DELAY_MS,
        checkpoint_factory: Callable[[float], tuple[Checkpoint, ...]] = default_checkpoints,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            parent: Parent QObject for lifetime management
            clock: Monotonic clock returning seconds
            frame_interval_ms: Interval between animation frames
            animation_ms: Interpolation window per checkpoint
            reset_delay_ms: Pause after reaching 100 before resetting to 0
            checkpoint_factory: Builds the checkpoint table for a total duration
        """
        super().__init__(parent)
        self._clock = clock
        self._animation_ms = max(0.0, float(animation_ms))
        self._reset_delay_ms = max(0.0, float(reset_delay_ms))
        self._checkpoint_factory = checkpoint_factory

        self._state = SchedulerState.IDLE
        self._percentage = 0.0
        self._visible = False
        self._current_run: ProgressRun | None = None
        self._run_ids = itertools.count(1)
        self._pulse_start = 0.0

        self._timer = QTimer(self)
        self._timer.setInterval(max(1, int(frame_interval_ms)))
        self._timer.timeout.connect(self._on_frame)

        self.setObjectName("ProgressScheduler")

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def percentage(self) -> float:
        return self._percentage

    @property
    def is_visible(self) -> bool:
        return self._visible

    @property
    def current_run(self) -> ProgressRun | None:
        return self._current_run

    @property
    def pulse_width(self) -> float:
        return PULSE_WIDTH

    def start(self, total_duration_ms: float = DEFAULT_DURATION_MS) -> ProgressRun:
        """
        Start a new simulated progress sequence.

        Any run still in progress is cancelled first, so only the new run's
        future can resolve.

        Args:
            total_duration_ms: Cumulative delay of the final (100%) checkpoint

        Returns:
            The new run, carrying its completion future and cancel handle
        """
        if self._state is SchedulerState.PULSING:
            self.stop_pulse()
        if self._current_run is not None:
            logger.debug(f"Superseding progress run {self._current_run.run_id}")
            self._cancel_run(self._current_run, reset=False)

        run = ProgressRun(
            self,
            next(self._run_ids),
            self._clock(),
            tuple(self._checkpoint_factory(total_duration_ms)),
        )
        self._current_run = run
        self._state = SchedulerState.RUNNING

        self._apply_percentage(0.0, run)
        self.show()
        self._timer.start()
        self._advance(run)
        return run

    def cancel(self) -> None:
        """Cancel the current run, if any."""
        if self._current_run is not None:
            self._cancel_run(self._current_run)

    @Slot(float)
    def set_progress(self, value: float) -> None:
        """Set the displayed percentage directly, bypassing interpolation. During a run it never lowers the value."""
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric progress value: {value!r}")
            return
        if math.isnan(number):
            return
        self._apply_percentage(number, self._current_run)

    def show(self) -> None:
        self._set_visible(True)

    def hide(self) -> None:
        self._set_visible(False)

    def pulse(self) -> None:
        """Enter indeterminate mode; runs until stop_pulse() is called."""
        if self._current_run is not None:
            self._cancel_run(self._current_run, reset=False)
        if self._state is SchedulerState.PULSING:
            return

        self._state = SchedulerState.PULSING
        self._pulse_start = self._clock()
        self.show()
        self.pulseActiveChanged.emit(True)
        self._timer.start()
        self._pulse_frame()

    def stop_pulse(self) -> None:
        if self._state is not SchedulerState.PULSING:
            return
        self._state = SchedulerState.IDLE
        self._timer.stop()
        self.pulseActiveChanged.emit(False)
        self._apply_percentage(0.0)
        self.hide()

    @Slot()
    def _on_frame(self) -> None:
        if self._state is SchedulerState.PULSING:
            self._pulse_frame()
            return

        run = self._current_run
        if run is None:
            self._timer.stop()
            return
        self._advance(run)

    def _advance(self, run: ProgressRun) -> None:
        """Bring run up to date with the clock; inert once run is no longer current."""
        now_ms = (self._clock() - run.start_time) * 1000.0

        while run is self._current_run:
            if run._phase is _Phase.WAITING:
                checkpoint = run.checkpoints[run.checkpoint_index]
                begin_ms = max(checkpoint.delay_ms, run._last_end_ms)
                if now_ms < begin_ms:
                    return
                run._phase = _Phase.ANIMATING
                run._anim_start_ms = begin_ms
                run._anim_from = self._percentage

            elif run._phase is _Phase.ANIMATING:
                checkpoint = run.checkpoints[run.checkpoint_index]
                elapsed = now_ms - run._anim_start_ms
                t = elapsed / self._animation_ms if self._animation_ms else 1.0

                if t < 1.0:
                    eased = ease_out_cubic(t)
                    self._apply_percentage(run._anim_from + (checkpoint.target - run._anim_from) * eased, run)
                    return

                self._apply_percentage(checkpoint.target, run)
                index = run.checkpoint_index
                run._last_end_ms = run._anim_start_ms + self._animation_ms
                run.checkpoint_index += 1
                if run.checkpoint_index >= len(run.checkpoints):
                    run._phase = _Phase.RESETTING
                    run._reset_at_ms = run._last_end_ms + self._reset_delay_ms
                else:
                    run._phase = _Phase.WAITING
                if run is self._current_run:
                    self.checkpointReached.emit(index, float(checkpoint.target))

            else:
                if now_ms < run._reset_at_ms:
                    return
                self._finish(run)
                return

    def _finish(self, run: ProgressRun) -> None:
        self._current_run = None
        self._state = SchedulerState.IDLE
        self._timer.stop()
        self._apply_percentage(0.0)
        self.hide()

        if not run.future.done():
            run.future.set_result(None)
        logger.debug(f"Progress run {run.run_id} finished")
        self.runFinished.emit(run.run_id)

    def _cancel_run(self, run: ProgressRun, reset: bool = True) -> None:
        if run.done() or run._cancelled:
            return
        run._cancelled = True
        if run is not self._current_run:
            return

        self._current_run = None
        self._state = SchedulerState.IDLE
        self._timer.stop()
        if reset:
            self._apply_percentage(0.0)
            self.hide()
        logger.debug(f"Progress run {run.run_id} cancelled")
        self.runCancelled.emit(run.run_id)

    def _pulse_frame(self) -> None:
        elapsed_ms = (self._clock() - self._pulse_start) * 1000.0
        phase = (elapsed_ms % PULSE_CYCLE_MS) / PULSE_CYCLE_MS
        self.pulseOffsetChanged.emit(pulse_offset(phase))

    def _apply_percentage(self, value: float, run: ProgressRun | None = None) -> None:
        value = clamp_percentage(value)
        if run is not None:
            # Within a run the displayed value only moves forward
            value = max(value, run.percentage)
            run.percentage = value
        self._percentage = value
        self.progressChanged.emit(value)

    def _set_visible(self, visible: bool) -> None:
        if visible == self._visible:
            return
        self._visible = visible
        self.visibilityChanged.emit(visible)
