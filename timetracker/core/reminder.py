from __future__ import annotations

import logging
import time
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from timetracker.core.models import ReminderConfig


logger = logging.getLogger(__name__)

REMINDER_CHECK_MS = 1000
REMINDER_TITLE = "Water Reminder"
REMINDER_MESSAGE = "It's time to drink water!"


class ReminderScheduler(QObject):
    """Recurring reminder measured in wall-clock time from the last firing.

    The check loop only samples the clock; firings are decided from elapsed
    time, so a slow or irregular loop never shifts the schedule.
    """

    fired = pyqtSignal()

    def __init__(
        self,
        config: ReminderConfig | None = None,
        clock: Callable[[], float] = time.time,
        check_interval_ms: int = REMINDER_CHECK_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._clock = clock
        self._config = ReminderConfig(enabled=False)
        self._enabled = False
        self._anchor: float | None = None
        self._checker = QTimer(self)
        self._checker.setInterval(check_interval_ms)
        self._checker.timeout.connect(self.check)
        if config is not None:
            self.apply_config(config)

    @property
    def config(self) -> ReminderConfig:
        return self._config

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def anchor(self) -> float | None:
        return self._anchor

    def apply_config(self, config: ReminderConfig, now: float | None = None) -> None:
        config.validate()
        if now is None:
            now = self._clock()
        self._config = config
        if not config.enabled:
            if self._enabled:
                logger.info("Water reminder disabled")
            self._enabled = False
            return
        if not self._enabled:
            interval = config.effective_interval_seconds
            if self._anchor is None or not 0 <= now - self._anchor < interval:
                self._anchor = now
            logger.info("Water reminder enabled every %s min", config.effective_interval_minutes)
        self._enabled = True

    def check(self, now: float | None = None) -> bool:
        if not self._enabled or self._anchor is None:
            return False
        if now is None:
            now = self._clock()
        elapsed = now - self._anchor
        if elapsed < 0:
            self._anchor = now
            return False
        interval = self._config.effective_interval_seconds
        if elapsed < interval:
            return False
        self._anchor += interval * int(elapsed // interval)
        logger.debug("Water reminder fired")
        self.fired.emit()
        return True

    def start(self) -> None:
        self._checker.start()

    def stop(self) -> None:
        self._checker.stop()
