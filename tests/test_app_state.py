import pytest

from timetracker.core.app_state import DEFAULT_DURATION_MIN, AppState
from timetracker.data.storage import Storage


def make_state(tmp_path) -> tuple[AppState, Storage]:
    storage = Storage(tmp_path / "app.db")
    storage.init_db()
    state = AppState()
    state.load_from_storage(storage)
    return state, storage


def test_duration_setting_persists(tmp_path) -> None:
    state, storage = make_state(tmp_path)
    changes: list[tuple[str, object]] = []
    state.settings_changed.connect(lambda key, value: changes.append((key, value)))
    assert state.duration_minutes == DEFAULT_DURATION_MIN

    state.set_duration_minutes(45)

    assert changes == [("duration_minutes", 45)]

    again = AppState()
    again.load_from_storage(storage)
    assert again.duration_minutes == 45


def test_invalid_duration_is_rejected(tmp_path) -> None:
    state, _storage = make_state(tmp_path)
    with pytest.raises(ValueError):
        state.set_duration_minutes(0)


def test_save_reminder_config_with_custom_interval(tmp_path) -> None:
    state, storage = make_state(tmp_path)
    emitted: list[object] = []
    state.reminder_config_changed.connect(emitted.append)

    config = state.save_reminder_config(enabled=True, interval_minutes=60, custom_interval_minutes=1440)

    assert config.effective_interval_minutes == 1440
    assert storage.get_reminder_config() == config
    assert emitted == [config]


@pytest.mark.parametrize("custom", [0, 1441])
def test_save_reminder_config_rejects_custom_out_of_range(tmp_path, custom: int) -> None:
    state, storage = make_state(tmp_path)

    with pytest.raises(ValueError):
        state.save_reminder_config(enabled=True, interval_minutes=60, custom_interval_minutes=custom)
    assert storage.get_reminder_config().custom_interval_minutes is None


def test_preset_interval_must_be_known(tmp_path) -> None:
    state, _storage = make_state(tmp_path)
    with pytest.raises(ValueError):
        state.save_reminder_config(enabled=True, interval_minutes=45)
    assert state.save_reminder_config(enabled=False, interval_minutes=90).interval_minutes == 90


def test_record_reminder_fired_updates_last_reminder(tmp_path) -> None:
    state, storage = make_state(tmp_path)

    state.record_reminder_fired()

    assert state.reminder_config.last_reminder is not None
    assert storage.get_reminder_config().last_reminder == state.reminder_config.last_reminder


def test_record_reminder_fired_survives_storage_error(tmp_path) -> None:
    state, storage = make_state(tmp_path)
    with storage._transaction() as conn:
        conn.execute("DROP TABLE water_reminders")

    assert state.record_reminder_fired() is False
    assert state.reminder_config.last_reminder is not None
