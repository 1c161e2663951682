from __future__ import annotations

from dataclasses import dataclass, replace

from timetracker.core.clock import format_clock


REMINDER_PRESETS_MIN = (30, 60, 90)
DEFAULT_REMINDER_INTERVAL_MIN = 60
CUSTOM_INTERVAL_RANGE_MIN = (1, 1440)


@dataclass(frozen=True)
class TimerState:
    """Owner-side timer state; the client only ever holds a copy."""

    is_running: bool = False
    is_paused: bool = False
    duration: int = 0
    time_remaining: int = 0
    task_id: int | None = None
    started_at: str | None = None

    def __post_init__(self) -> None:
        if self.duration < 0 or not 0 <= self.time_remaining <= self.duration:
            raise ValueError(
                f"time_remaining must be within [0, duration], got {self.time_remaining}/{self.duration}"
            )
        if self.is_paused and not self.is_running:
            raise ValueError("A paused timer must be running")

    @classmethod
    def idle(cls) -> TimerState:
        return cls()

    @property
    def is_finished(self) -> bool:
        return self.duration > 0 and self.time_remaining == 0


@dataclass(frozen=True)
class FocusSession:
    id: int
    planned_duration: int
    task_id: int | None
    started_at: str
    completed_at: str


@dataclass(frozen=True)
class ReminderConfig:
    enabled: bool = True
    interval_minutes: int = DEFAULT_REMINDER_INTERVAL_MIN
    custom_interval_minutes: int | None = None
    last_reminder: str | None = None

    @staticmethod
    def is_valid_custom(value: int | None) -> bool:
        low, high = CUSTOM_INTERVAL_RANGE_MIN
        return value is not None and low <= value <= high

    @property
    def effective_interval_minutes(self) -> int:
        if self.is_valid_custom(self.custom_interval_minutes):
            return int(self.custom_interval_minutes)  # type: ignore[arg-type]
        if self.interval_minutes > 0:
            return self.interval_minutes
        return DEFAULT_REMINDER_INTERVAL_MIN

    @property
    def effective_interval_seconds(self) -> int:
        return self.effective_interval_minutes * 60

    def validate(self) -> ReminderConfig:
        if self.interval_minutes <= 0:
            raise ValueError("Reminder interval must be positive")
        if self.custom_interval_minutes is not None and not self.is_valid_custom(self.custom_interval_minutes):
            low, high = CUSTOM_INTERVAL_RANGE_MIN
            raise ValueError(f"Custom interval must be between {low} and {high} minutes")
        return self

    def with_last_reminder(self, stamp: str) -> ReminderConfig:
        return replace(self, last_reminder=stamp)


@dataclass(frozen=True)
class DisplayState:
    remaining_seconds: int
    is_running: bool
    is_paused: bool

    @property
    def label(self) -> str:
        return format_clock(self.remaining_seconds)


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    error: str | None = None

    @classmethod
    def success(cls) -> ActionResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> ActionResult:
        return cls(ok=False, error=error)
