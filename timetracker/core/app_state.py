from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Any

from PyQt6.QtCore import QObject, pyqtSignal

from timetracker.core.models import REMINDER_PRESETS_MIN, ReminderConfig
from timetracker.data.storage import Storage


logger = logging.getLogger(__name__)

DURATION_PRESETS_MIN = (1, 15, 25, 45, 60)
DEFAULT_DURATION_MIN = 15
MAX_DURATION_MIN = 240


class AppState(QObject):
    settings_changed = pyqtSignal(str, object)
    reminder_config_changed = pyqtSignal(object)

    def __init__(self) -> None:
        super().__init__()
        self.settings: dict[str, Any] = {}
        self.reminder_config = ReminderConfig()
        self._storage: Storage | None = None

    def load_from_storage(self, storage: Storage) -> None:
        self._storage = storage
        raw_settings = storage.get_setting("settings", {})
        self.settings = raw_settings if isinstance(raw_settings, dict) else {}
        self.reminder_config = storage.get_reminder_config()
        self.reminder_config_changed.emit(self.reminder_config)

    def save_setting(self, key: str, value: Any) -> None:
        self.settings[key] = value
        if self._storage:
            self._storage.set_setting("settings", self.settings)
        self.settings_changed.emit(key, value)

    @property
    def duration_minutes(self) -> int:
        value = self.settings.get("duration_minutes", DEFAULT_DURATION_MIN)
        if not isinstance(value, int) or not 1 <= value <= MAX_DURATION_MIN:
            return DEFAULT_DURATION_MIN
        return value

    def set_duration_minutes(self, minutes: int) -> None:
        if not 1 <= minutes <= MAX_DURATION_MIN:
            raise ValueError(f"Duration must be between 1 and {MAX_DURATION_MIN} minutes")
        self.save_setting("duration_minutes", minutes)

    @property
    def sound_path(self) -> str | None:
        value = self.settings.get("sound_path")
        return value if isinstance(value, str) and value else None

    @property
    def lock_screen_on_complete(self) -> bool:
        return bool(self.settings.get("lock_screen_on_complete", True))

    def save_reminder_config(
        self,
        enabled: bool,
        interval_minutes: int,
        custom_interval_minutes: int | None = None,
    ) -> ReminderConfig:
        """Validate and persist reminder settings; a custom interval replaces the preset."""
        if custom_interval_minutes is None and interval_minutes not in REMINDER_PRESETS_MIN:
            raise ValueError(f"Reminder interval must be one of {', '.join(map(str, REMINDER_PRESETS_MIN))}")
        config = ReminderConfig(
            enabled=enabled,
            interval_minutes=custom_interval_minutes or interval_minutes,
            custom_interval_minutes=custom_interval_minutes,
            last_reminder=self.reminder_config.last_reminder,
        ).validate()
        if self._storage:
            self._storage.save_reminder_config(config)
        self.reminder_config = config
        self.reminder_config_changed.emit(config)
        return config

    def record_reminder_fired(self) -> bool:
        """Stamp the last firing; returns False when the stamp could not be stored."""
        stamp = datetime.now().isoformat(timespec="seconds")
        self.reminder_config = self.reminder_config.with_last_reminder(stamp)
        if not self._storage:
            return True
        try:
            self._storage.save_reminder_config(self.reminder_config)
        except sqlite3.Error:
            logger.exception("Could not store last water reminder time")
            return False
        return True
