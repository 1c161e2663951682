from __future__ import annotations

import logging
import sqlite3
import time
from datetime import datetime
from typing import Callable, Protocol

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from timetracker.core.clock import remaining
from timetracker.core.errors import ActionRejected, PersistenceError
from timetracker.core.models import FocusSession, TimerState
from timetracker.data.storage import Storage


logger = logging.getLogger(__name__)

OWNER_TICK_MS = 1000


class Subscription:
    """Handle for a completion-signal subscription; `cancel()` is idempotent."""

    def __init__(self, cancel: Callable[[], None]) -> None:
        self._cancel = cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._cancel()


class SessionOwner(Protocol):
    """Authority that holds the real timer state and advances it on its own."""

    def start_session(self, duration: int, task_id: int | None = None) -> None: ...

    def pause_session(self) -> None: ...

    def resume_session(self) -> None: ...

    def stop_session(self) -> None: ...

    def get_session_state(self) -> TimerState: ...

    def complete_session(self, duration: int, task_id: int | None = None) -> FocusSession: ...

    def subscribe_completion(self, callback: Callable[[], None]) -> Subscription: ...


class LocalSessionOwner(QObject):
    """In-process session owner driven by its own ticker and a monotonic clock."""

    completed = pyqtSignal()

    def __init__(
        self,
        storage: Storage,
        clock: Callable[[], float] = time.monotonic,
        tick_interval_ms: int = OWNER_TICK_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._storage = storage
        self._clock = clock
        self._ticker = QTimer(self)
        self._ticker.setInterval(tick_interval_ms)
        self._ticker.timeout.connect(self.tick)
        self._reset()

    def _reset(self) -> None:
        self._running = False
        self._finished = False
        self._duration_sec = 0
        self._task_id: int | None = None
        self._started_at: str | None = None
        self._started_monotonic = 0.0
        self._paused_total_sec = 0.0
        self._paused_since: float | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    def start_session(self, duration: int, task_id: int | None = None, now: float | None = None) -> None:
        if self._running:
            raise ActionRejected("A focus session is already running")
        if duration <= 0:
            raise ActionRejected("Duration must be positive")
        if now is None:
            now = self._clock()
        self._reset()
        self._running = True
        self._duration_sec = int(duration)
        self._task_id = task_id
        self._started_at = datetime.now().isoformat(timespec="seconds")
        self._started_monotonic = now
        self._ticker.start()
        logger.info("Focus session started: %ss (task=%s)", self._duration_sec, task_id)

    def pause_session(self, now: float | None = None) -> None:
        if not self._running:
            raise ActionRejected("No focus session is running")
        if self._paused_since is not None:
            raise ActionRejected("Focus session is already paused")
        self._paused_since = self._clock() if now is None else now

    def resume_session(self, now: float | None = None) -> None:
        if not self._running or self._paused_since is None:
            raise ActionRejected("Focus session is not paused")
        if now is None:
            now = self._clock()
        self._paused_total_sec += max(0.0, now - self._paused_since)
        self._paused_since = None

    def stop_session(self) -> None:
        if not self._running:
            raise ActionRejected("No focus session is running")
        self._ticker.stop()
        self._reset()
        logger.info("Focus session stopped")

    def get_session_state(self, now: float | None = None) -> TimerState:
        if self._running:
            return TimerState(
                is_running=True,
                is_paused=self._paused_since is not None,
                duration=self._duration_sec,
                time_remaining=self._remaining(now),
                task_id=self._task_id,
                started_at=self._started_at,
            )
        if self._finished:
            return TimerState(
                duration=self._duration_sec,
                time_remaining=0,
                task_id=self._task_id,
                started_at=self._started_at,
            )
        return TimerState.idle()

    def tick(self, now: float | None = None) -> None:
        if not self._running or self._paused_since is not None:
            return
        if self._remaining(now) > 0:
            return
        self._ticker.stop()
        self._running = False
        self._finished = True
        logger.info("Focus session finished after %ss", self._duration_sec)
        self.completed.emit()

    def complete_session(self, duration: int, task_id: int | None = None) -> FocusSession:
        try:
            record = self._storage.insert_session(duration_sec=duration, task_id=task_id)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not save focus session: {exc}") from exc
        if self._finished or (self._running and self._remaining(None) == 0):
            self._ticker.stop()
            self._reset()
        return record

    def subscribe_completion(self, callback: Callable[[], None]) -> Subscription:
        self.completed.connect(callback)
        return Subscription(lambda: self.completed.disconnect(callback))

    def _remaining(self, now: float | None) -> int:
        if now is None:
            now = self._clock()
        paused = self._paused_total_sec
        if self._paused_since is not None:
            paused += max(0.0, now - self._paused_since)
        return remaining(self._duration_sec, self._started_monotonic, now, paused)
