from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Protocol

from PyQt6.QtCore import QObject, pyqtSignal

from timetracker.core.errors import SessionOwnerError
from timetracker.core.models import FocusSession, TimerState
from timetracker.core.owner import SessionOwner


logger = logging.getLogger(__name__)

COMPLETE_TITLE = "Timer complete"
COMPLETE_MESSAGE = "Focus session finished. Time for a break!"
SAVE_FAILED_TITLE = "Error"


class EnginePhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETING = "completing"


class SoundPlayer(Protocol):
    def play(self) -> None: ...


class ScreenLocker(Protocol):
    def lock(self) -> None: ...


class Notifier(Protocol):
    def notify(self, title: str, message: str, error: bool = False) -> None: ...


class CompletionCoordinator(QObject):
    """Session state machine that runs the completion bundle once per interval.

    Idle -> Running <-> Paused -> Completing -> Idle; an explicit stop goes
    straight back to Idle. Completion can be observed twice (push signal and a
    zero-remaining poll); the per-interval flag makes the second a no-op until
    the next Idle -> Running transition.
    """

    phase_changed = pyqtSignal(str)
    session_completed = pyqtSignal(object)

    def __init__(
        self,
        owner: SessionOwner,
        notifier: Notifier,
        sound: SoundPlayer | None = None,
        locker: ScreenLocker | None = None,
        resync: Callable[[], None] | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._owner = owner
        self._notifier = notifier
        self._sound = sound
        self._locker = locker
        self._resync = resync
        self._phase = EnginePhase.IDLE
        self._completed = False
        self._interval: tuple[int, int | None] | None = None

    @property
    def phase(self) -> EnginePhase:
        return self._phase

    @property
    def completed(self) -> bool:
        return self._completed

    def set_resync(self, resync: Callable[[], None]) -> None:
        self._resync = resync

    def begin_interval(self, duration: int, task_id: int | None) -> None:
        """Record an interval the owner just acknowledged starting."""
        if self._phase != EnginePhase.IDLE:
            return
        self._completed = False
        self._interval = (duration, task_id)
        self._set_phase(EnginePhase.RUNNING)

    def observe(self, state: TimerState) -> None:
        if self._phase == EnginePhase.COMPLETING:
            return
        if self._phase in {EnginePhase.RUNNING, EnginePhase.PAUSED}:
            if state.is_finished:
                self._complete(state.duration, state.task_id)
            elif not state.is_running:
                # stopped elsewhere: no completion side effects
                self._set_phase(EnginePhase.IDLE)
            else:
                self._interval = (state.duration, state.task_id)
                self._set_phase(EnginePhase.PAUSED if state.is_paused else EnginePhase.RUNNING)
            return
        if state.is_running and not state.is_finished:
            self._completed = False
            self._interval = (state.duration, state.task_id)
            self._set_phase(EnginePhase.PAUSED if state.is_paused else EnginePhase.RUNNING)
        elif state.is_finished and not self._completed:
            self._complete(state.duration, state.task_id)

    def on_completion_signal(self) -> None:
        if self._completed or self._phase == EnginePhase.COMPLETING:
            logger.debug("Duplicate completion signal ignored")
            return
        if self._interval is None or self._phase == EnginePhase.IDLE:
            # nothing known about this interval yet; let the owner's state decide
            logger.info("Completion signal for an unknown interval, re-syncing")
            self._run_resync()
            return
        duration, task_id = self._interval
        self._complete(duration, task_id)

    def mark_stopped(self) -> None:
        if self._phase in {EnginePhase.RUNNING, EnginePhase.PAUSED}:
            self._set_phase(EnginePhase.IDLE)

    def _complete(self, duration: int, task_id: int | None) -> None:
        if self._completed:
            logger.debug("Interval already completed, skipping side effects")
            return
        self._completed = True
        self._interval = (duration, task_id)
        self._set_phase(EnginePhase.COMPLETING)

        record: FocusSession | None = None
        try:
            record = self._owner.complete_session(duration, task_id)
        except SessionOwnerError as exc:
            logger.error("Failed to save focus session (%ss, task=%s): %s", duration, task_id, exc)
            self._attempt("error notice", lambda: self._notifier.notify(SAVE_FAILED_TITLE, str(exc), error=True))
        else:
            logger.info("Focus session %s saved (%ss)", record.id, record.planned_duration)
            if self._sound is not None:
                self._attempt("sound", self._sound.play)
        if self._locker is not None:
            self._attempt("screen lock", self._locker.lock)
        if record is not None:
            self._attempt("completion notice", lambda: self._notifier.notify(COMPLETE_TITLE, COMPLETE_MESSAGE))

        self.session_completed.emit(record)
        self._run_resync()
        self._set_phase(EnginePhase.IDLE)

    def _run_resync(self) -> None:
        if self._resync is not None:
            self._resync()

    def _attempt(self, name: str, action: Callable[[], None]) -> None:
        try:
            action()
        except Exception:
            logger.exception("Completion %s failed", name)

    def _set_phase(self, phase: EnginePhase) -> None:
        if phase == self._phase:
            return
        self._phase = phase
        self.phase_changed.emit(phase.value)
