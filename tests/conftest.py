from __future__ import annotations

from dataclasses import replace

import pytest
from PyQt6.QtCore import QCoreApplication

from timetracker.core.errors import ActionRejected, OwnerUnavailable, PersistenceError
from timetracker.core.models import FocusSession, TimerState
from timetracker.core.owner import Subscription


@pytest.fixture(scope="session", autouse=True)
def qapp() -> QCoreApplication:
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


class FakeOwner:
    """Scriptable session owner; tests set `state` directly to play the remote side."""

    def __init__(self) -> None:
        self.state = TimerState.idle()
        self.unreachable = False
        self.fail_persist = False
        self.sessions: list[FocusSession] = []
        self.fetches = 0
        self._callbacks: list = []

    def start_session(self, duration: int, task_id: int | None = None) -> None:
        if self.state.is_running:
            raise ActionRejected("A focus session is already running")
        self.state = TimerState(is_running=True, duration=duration, time_remaining=duration, task_id=task_id)

    def pause_session(self) -> None:
        if not self.state.is_running or self.state.is_paused:
            raise ActionRejected("No running session to pause")
        self.state = replace(self.state, is_paused=True)

    def resume_session(self) -> None:
        if not self.state.is_paused:
            raise ActionRejected("Focus session is not paused")
        self.state = replace(self.state, is_paused=False)

    def stop_session(self) -> None:
        if not self.state.is_running:
            raise ActionRejected("No focus session is running")
        self.state = TimerState.idle()

    def get_session_state(self) -> TimerState:
        self.fetches += 1
        if self.unreachable:
            raise OwnerUnavailable("owner unreachable")
        return self.state

    def complete_session(self, duration: int, task_id: int | None = None) -> FocusSession:
        if self.fail_persist:
            raise PersistenceError("disk full")
        record = FocusSession(
            id=len(self.sessions) + 1,
            planned_duration=duration,
            task_id=task_id,
            started_at="2026-01-01T10:00:00",
            completed_at="2026-01-01T10:25:00",
        )
        self.sessions.append(record)
        self.state = TimerState.idle()
        return record

    def subscribe_completion(self, callback) -> Subscription:
        self._callbacks.append(callback)
        return Subscription(lambda: self._callbacks.remove(callback))

    def advance_to(self, remaining: int) -> None:
        self.state = replace(self.state, time_remaining=remaining)

    def finish(self) -> None:
        self.state = TimerState(duration=self.state.duration, time_remaining=0, task_id=self.state.task_id)

    def signal_completion(self) -> None:
        for callback in list(self._callbacks):
            callback()

    @property
    def subscribers(self) -> int:
        return len(self._callbacks)


class RecordingNotifier:
    def __init__(self) -> None:
        self.notices: list[tuple[str, str, bool]] = []

    def notify(self, title: str, message: str, error: bool = False) -> None:
        self.notices.append((title, message, error))


class RecordingEffect:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = 0

    def _run(self) -> None:
        self.calls += 1
        if self.fail:
            raise RuntimeError("device busy")

    def play(self) -> None:
        self._run()

    def lock(self) -> None:
        self._run()


@pytest.fixture
def owner() -> FakeOwner:
    return FakeOwner()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def sound() -> RecordingEffect:
    return RecordingEffect()


@pytest.fixture
def locker() -> RecordingEffect:
    return RecordingEffect()
