from __future__ import annotations

import time


def remaining(duration: float, started_at: float, now: float, accumulated_pause: float = 0.0) -> int:
    """Seconds left of an interval started at `started_at`, minus paused time.

    Pure projection: never blocks, never raises, always within [0, duration].
    """
    total = max(0, int(duration))
    elapsed = max(0.0, now - started_at - max(0.0, accumulated_pause))
    return total - min(total, int(elapsed))


def format_clock(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class Countdown:
    """Smooth display countdown between authoritative samples."""

    def __init__(self) -> None:
        self._remaining_sec = 0
        self._running = False
        self._anchored_monotonic: float | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    def anchor(self, remaining_seconds: int, running: bool, now: float | None = None) -> None:
        if now is None:
            now = time.monotonic()
        self._remaining_sec = max(0, int(remaining_seconds))
        self._running = running
        self._anchored_monotonic = now if running else None

    def project(self, now: float | None = None) -> int:
        if self._anchored_monotonic is None:
            return self._remaining_sec
        if now is None:
            now = time.monotonic()
        return remaining(self._remaining_sec, self._anchored_monotonic, now)
