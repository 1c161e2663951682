from __future__ import annotations

"""Побочные эффекты завершения: звук, блокировка экрана и системные уведомления."""

import logging
import shutil
import sys
from pathlib import Path
from typing import Callable

from PyQt6.QtCore import QObject, QProcess, QUrl, pyqtSignal
from PyQt6.QtMultimedia import QSoundEffect
from PyQt6.QtWidgets import QApplication, QSystemTrayIcon


logger = logging.getLogger(__name__)

APP_NAME = "Time Tracker"
LINUX_LOCK_COMMANDS = (
    ("gnome-screensaver-command", "--lock"),
    ("loginctl", "lock-session"),
    ("xdg-screensaver", "lock"),
)


def start_detached(command: list[str]) -> None:
    """Запускает внешнюю команду без ожидания, чтобы не блокировать цикл событий Qt."""
    started, _pid = QProcess.startDetached(command[0], command[1:])
    if not started:
        raise RuntimeError(f"Could not start {command[0]}")


class NotificationSound:
    """Plays a WAV file if configured, otherwise the platform beep."""

    def __init__(self, sound_path: str | Path | None = None, volume: float = 0.5) -> None:
        self._effect: QSoundEffect | None = None
        if sound_path:
            path = Path(sound_path)
            if not path.exists():
                logger.warning("Notification sound %s not found, using system beep", path)
            else:
                self._effect = QSoundEffect()
                self._effect.setSource(QUrl.fromLocalFile(str(path)))
                self._effect.setVolume(volume)

    def play(self) -> None:
        if self._effect is not None:
            if self._effect.status() == QSoundEffect.Status.Error:
                raise RuntimeError(f"Cannot play {self._effect.source().toLocalFile()}")
            self._effect.play()
            return
        QApplication.beep()


class ScreenLocker:
    def __init__(self, launcher: Callable[[list[str]], None] = start_detached) -> None:
        self._launch = launcher

    def lock(self) -> None:
        command = self._command()
        if command is None:
            raise RuntimeError(f"No screen lock command available on {sys.platform}")
        self._launch(command)

    def _command(self) -> list[str] | None:
        if sys.platform.startswith("win"):
            return ["rundll32.exe", "user32.dll,LockWorkStation"]
        if sys.platform == "darwin":
            return ["pmset", "displaysleepnow"]
        for program, arg in LINUX_LOCK_COMMANDS:
            path = shutil.which(program)
            if path:
                return [path, arg]
        return None


class DesktopNotifier(QObject):
    """Tray balloon when a tray icon is shown, `notify-send` otherwise."""

    posted = pyqtSignal(str, str, bool)

    def __init__(
        self,
        tray: QSystemTrayIcon | None = None,
        launcher: Callable[[list[str]], None] = start_detached,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._tray = tray
        self._launch = launcher

    def notify(self, title: str, message: str, error: bool = False) -> None:
        self.posted.emit(title, message, error)
        if self._tray is not None and self._tray.isVisible():
            icon = (
                QSystemTrayIcon.MessageIcon.Critical if error else QSystemTrayIcon.MessageIcon.Information
            )
            self._tray.showMessage(title, message, icon)
            return
        notify_send = shutil.which("notify-send")
        if notify_send:
            urgency = "critical" if error else "normal"
            self._launch([notify_send, "-a", APP_NAME, "-u", urgency, title, message])
            return
        logger.info("%s: %s", title, message)
