from timetracker.core.clock import Countdown, format_clock, remaining


def test_remaining_counts_down_from_start() -> None:
    assert remaining(1500, started_at=100.0, now=100.0) == 1500
    assert remaining(1500, started_at=100.0, now=160.4) == 1440


def test_remaining_subtracts_paused_time() -> None:
    assert remaining(60, started_at=0.0, now=30.0, accumulated_pause=20.0) == 50


def test_remaining_is_clamped() -> None:
    assert remaining(60, started_at=0.0, now=500.0) == 0
    assert remaining(60, started_at=10.0, now=5.0) == 60
    assert remaining(60, started_at=0.0, now=10.0, accumulated_pause=99.0) == 60


def test_countdown_projects_only_while_running() -> None:
    countdown = Countdown()
    countdown.anchor(900, running=True, now=50.0)
    assert countdown.project(53.2) == 897

    countdown.anchor(897, running=False, now=53.2)
    assert countdown.project(400.0) == 897


def test_format_clock() -> None:
    assert format_clock(1500) == "25:00"
    assert format_clock(61) == "01:01"
    assert format_clock(-5) == "00:00"
