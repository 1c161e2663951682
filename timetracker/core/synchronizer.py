from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, pyqtSignal

from timetracker.core.clock import Countdown
from timetracker.core.errors import OwnerUnavailable, SessionOwnerError, SyncFailed
from timetracker.core.models import TimerState
from timetracker.core.owner import SessionOwner


logger = logging.getLogger(__name__)


class SessionSynchronizer(QObject):
    """Keeps a read-only mirror of the owner's `TimerState`.

    Every successful fetch overwrites the mirror as-is; a failed fetch leaves
    it untouched so the display keeps its last known value.
    """

    state_synced = pyqtSignal(object)
    sync_failed = pyqtSignal(str)

    def __init__(self, owner: SessionOwner, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._owner = owner
        self._state = TimerState.idle()
        self._countdown = Countdown()
        self.consecutive_failures = 0
        self.last_error: str | None = None

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def countdown(self) -> Countdown:
        return self._countdown

    def sync(self, now: float | None = None) -> TimerState:
        try:
            fetched = self._fetch()
        except SessionOwnerError as exc:
            self.consecutive_failures += 1
            self.last_error = str(exc) or exc.__class__.__name__
            log = logger.warning if self.consecutive_failures == 1 else logger.debug
            log("Timer sync failed (%s in a row): %s", self.consecutive_failures, self.last_error)
            self.sync_failed.emit(self.last_error)
            raise SyncFailed(exc) from exc

        self._state = fetched
        self._countdown.anchor(
            fetched.time_remaining,
            running=fetched.is_running and not fetched.is_paused,
            now=now,
        )
        self.consecutive_failures = 0
        self.last_error = None
        self.state_synced.emit(fetched)
        return fetched

    def _fetch(self) -> TimerState:
        try:
            return self._owner.get_session_state()
        except OSError as exc:
            raise OwnerUnavailable(str(exc) or exc.__class__.__name__) from exc
