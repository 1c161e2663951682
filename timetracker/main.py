from __future__ import annotations

"""Точка входа приложения Time Tracker.

Модуль настраивает логирование, подключает хранилище, создает владельца
сессии, движок таймера и напоминание о воде, затем запускает окно.
"""

import logging
import os
import sys
from pathlib import Path

from PyQt6.QtWidgets import QApplication, QStyle, QSystemTrayIcon


from timetracker.core.app_state import AppState
from timetracker.core.engine import FocusEngine
from timetracker.core.owner import LocalSessionOwner
from timetracker.core.reminder import REMINDER_MESSAGE, REMINDER_TITLE, ReminderScheduler
from timetracker.data.storage import Storage
from timetracker.system.effects import DesktopNotifier, NotificationSound, ScreenLocker
from timetracker.ui.timer_window import TimerWindow


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Настраивает корневой логгер; уровень берется из TIMETRACKER_LOG_LEVEL."""
    logging.basicConfig(
        level=os.getenv("TIMETRACKER_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )


def default_db_path() -> Path:
    """Возвращает путь к SQLite-файлу: TIMETRACKER_DB или app.db в текущей директории."""
    override = os.getenv("TIMETRACKER_DB")
    if override:
        return Path(override)
    return Path.cwd() / "app.db"


def main() -> int:
    """Создает зависимости приложения и запускает главный UI-цикл."""
    configure_logging()
    app = QApplication(sys.argv)

    storage = Storage(default_db_path())
    storage.init_db()

    app_state = AppState()
    app_state.load_from_storage(storage)

    tray: QSystemTrayIcon | None = None
    if QSystemTrayIcon.isSystemTrayAvailable():
        tray = QSystemTrayIcon(app.style().standardIcon(QStyle.StandardPixmap.SP_ComputerIcon), app)
        tray.setToolTip("Time Tracker")
        tray.show()
    notifier = DesktopNotifier(tray)

    owner = LocalSessionOwner(storage)
    engine = FocusEngine(
        owner,
        notifier,
        sound=NotificationSound(app_state.sound_path),
        locker=ScreenLocker() if app_state.lock_screen_on_complete else None,
    )

    reminder = ReminderScheduler()
    app_state.reminder_config_changed.connect(reminder.apply_config)
    reminder.apply_config(app_state.reminder_config)

    def on_reminder() -> None:
        # a failed timestamp write is logged by AppState; the notice still goes out
        app_state.record_reminder_fired()
        try:
            notifier.notify(REMINDER_TITLE, REMINDER_MESSAGE)
        except RuntimeError:
            logger.exception("Water reminder notification failed")

    reminder.fired.connect(on_reminder)
    reminder.start()

    window = TimerWindow(engine=engine, app_state=app_state)
    app.aboutToQuit.connect(engine.close)
    app.aboutToQuit.connect(reminder.stop)

    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
