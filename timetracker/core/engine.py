from __future__ import annotations

import logging
from typing import Callable

from PyQt6.QtCore import QObject, QTimer

from timetracker.core.completion import CompletionCoordinator, EnginePhase, Notifier, ScreenLocker, SoundPlayer
from timetracker.core.errors import SessionOwnerError, SyncFailed
from timetracker.core.models import ActionResult, DisplayState, TimerState
from timetracker.core.owner import SessionOwner
from timetracker.core.synchronizer import SessionSynchronizer


logger = logging.getLogger(__name__)

POLL_INTERVAL_MS = 1000


class FocusEngine(QObject):
    """Client-side view of a focus timer owned by a `SessionOwner`.

    Actions are forwarded to the owner and followed by a sync once the owner
    has answered. While a session exists the owner is polled on its own
    timer; the countdown fills the gaps between polls for display.
    """

    def __init__(
        self,
        owner: SessionOwner,
        notifier: Notifier,
        sound: SoundPlayer | None = None,
        locker: ScreenLocker | None = None,
        poll_interval_ms: int = POLL_INTERVAL_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._owner = owner
        self._view_active = True
        self.synchronizer = SessionSynchronizer(owner, self)
        self.coordinator = CompletionCoordinator(owner, notifier, sound, locker, resync=self._resync, parent=self)
        self.synchronizer.state_synced.connect(self.coordinator.observe)

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(poll_interval_ms)
        self._poll_timer.timeout.connect(self.poll)

        self._subscription = owner.subscribe_completion(self.coordinator.on_completion_signal)

    @property
    def state(self) -> TimerState:
        return self.synchronizer.state

    @property
    def phase(self) -> EnginePhase:
        return self.coordinator.phase

    @property
    def is_polling(self) -> bool:
        return self._poll_timer.isActive()

    def current_display_state(self, now: float | None = None) -> DisplayState:
        state = self.synchronizer.state
        remaining = self.synchronizer.countdown.project(now) if state.is_running else state.time_remaining
        return DisplayState(remaining_seconds=remaining, is_running=state.is_running, is_paused=state.is_paused)

    def start(self, duration_seconds: int, task_id: int | None = None) -> ActionResult:
        return self._run_action(
            "start",
            lambda: self._owner.start_session(duration_seconds, task_id),
            on_ack=lambda: self.coordinator.begin_interval(duration_seconds, task_id),
        )

    def pause(self) -> ActionResult:
        return self._run_action("pause", self._owner.pause_session)

    def resume(self) -> ActionResult:
        return self._run_action("resume", self._owner.resume_session)

    def stop(self) -> ActionResult:
        return self._run_action("stop", self._owner.stop_session, on_ack=self.coordinator.mark_stopped)

    def toggle_pause(self) -> ActionResult:
        if self.synchronizer.state.is_paused:
            return self.resume()
        return self.pause()

    def poll(self, now: float | None = None) -> None:
        try:
            self.synchronizer.sync(now)
        except SyncFailed:
            pass  # reported by the synchronizer, retried next tick
        self._update_polling()

    def set_view_active(self, active: bool) -> None:
        self._view_active = active
        if not active:
            self._poll_timer.stop()
            return
        self.poll()

    def close(self) -> None:
        self._poll_timer.stop()
        self._subscription.cancel()

    def _run_action(self, name: str, request: Callable[[], None], on_ack: Callable[[], None] | None = None) -> ActionResult:
        try:
            request()
        except (SessionOwnerError, OSError) as exc:
            logger.warning("Timer %s rejected: %s", name, exc)
            return ActionResult.failure(str(exc))
        if on_ack is not None:
            on_ack()
        try:
            self.synchronizer.sync()
        except SyncFailed as exc:
            self._update_polling()
            return ActionResult(ok=True, error=str(exc))
        self._update_polling()
        return ActionResult.success()

    def _resync(self) -> None:
        try:
            self.synchronizer.sync()
        except SyncFailed:
            pass  # the next poll or view activation picks the state up again

    def _update_polling(self) -> None:
        active = self.synchronizer.state.is_running or self.coordinator.phase in {
            EnginePhase.RUNNING,
            EnginePhase.PAUSED,
        }
        if self._view_active and active:
            if not self._poll_timer.isActive():
                self._poll_timer.start()
        elif self._poll_timer.isActive():
            self._poll_timer.stop()
