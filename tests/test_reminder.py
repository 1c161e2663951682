import pytest

from timetracker.core.models import ReminderConfig
from timetracker.core.reminder import ReminderScheduler


HOUR = 3600.0


def count_firings(scheduler: ReminderScheduler, start: float, end: float, step: float = 30.0) -> list[float]:
    fired: list[float] = []
    now = start
    while now <= end:
        if scheduler.check(now):
            fired.append(now)
        now += step
    return fired


def test_fires_once_per_interval() -> None:
    scheduler = ReminderScheduler()
    scheduler.apply_config(ReminderConfig(enabled=True, interval_minutes=60), now=0.0)

    assert count_firings(scheduler, 0.0, 3 * HOUR) == [HOUR, 2 * HOUR, 3 * HOUR]


def test_toggles_that_net_to_enabled_keep_schedule() -> None:
    scheduler = ReminderScheduler()
    enabled = ReminderConfig(enabled=True, interval_minutes=60)
    disabled = ReminderConfig(enabled=False, interval_minutes=60)
    toggles = {600.0: disabled, 900.0: enabled, 1800.0: disabled, 1830.0: enabled}
    scheduler.apply_config(enabled, now=0.0)

    fired: list[float] = []
    now = 0.0
    while now <= 2 * HOUR:
        if now in toggles:
            scheduler.apply_config(toggles[now], now=now)
        if scheduler.check(now):
            fired.append(now)
        now += 30.0

    assert fired == [HOUR, 2 * HOUR]



def test_disabled_scheduler_never_fires() -> None:
    scheduler = ReminderScheduler()
    scheduler.apply_config(ReminderConfig(enabled=False), now=0.0)

    assert count_firings(scheduler, 0.0, 2 * HOUR) == []


def test_interval_change_applies_to_next_firing() -> None:
    scheduler = ReminderScheduler()
    scheduler.apply_config(ReminderConfig(enabled=True, interval_minutes=60), now=0.0)

    scheduler.apply_config(ReminderConfig(enabled=True, interval_minutes=30), now=1000.0)

    assert scheduler.anchor == 0.0
    assert scheduler.check(1799.0) is False
    assert scheduler.check(1800.0) is True


def test_custom_interval_overrides_preset() -> None:
    scheduler = ReminderScheduler()
    scheduler.apply_config(ReminderConfig(enabled=True, interval_minutes=60, custom_interval_minutes=1), now=0.0)

    assert scheduler.check(59.0) is False
    assert scheduler.check(60.0) is True


def test_long_gap_fires_once_and_stays_aligned() -> None:
    scheduler = ReminderScheduler()
    scheduler.apply_config(ReminderConfig(enabled=True, interval_minutes=60), now=0.0)

    assert scheduler.check(3 * HOUR + 10.0) is True
    assert scheduler.check(3 * HOUR + 20.0) is False
    assert scheduler.anchor == 3 * HOUR
    assert scheduler.check(4 * HOUR) is True


def test_reenable_after_long_pause_starts_fresh() -> None:
    scheduler = ReminderScheduler()
    scheduler.apply_config(ReminderConfig(enabled=True, interval_minutes=60), now=0.0)
    scheduler.apply_config(ReminderConfig(enabled=False), now=100.0)

    scheduler.apply_config(ReminderConfig(enabled=True, interval_minutes=60), now=5 * HOUR)

    assert scheduler.check(5 * HOUR + 1.0) is False
    assert scheduler.anchor == 5 * HOUR


def test_fired_signal_is_emitted() -> None:
    scheduler = ReminderScheduler()
    received: list[bool] = []
    scheduler.fired.connect(lambda: received.append(True))
    scheduler.apply_config(ReminderConfig(enabled=True, interval_minutes=30), now=0.0)

    scheduler.check(1800.0)

    assert received == [True]


def test_invalid_config_is_rejected() -> None:
    scheduler = ReminderScheduler()
    with pytest.raises(ValueError):
        scheduler.apply_config(ReminderConfig(enabled=True, custom_interval_minutes=1441), now=0.0)
    assert scheduler.enabled is False
