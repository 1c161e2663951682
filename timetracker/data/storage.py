from __future__ import annotations

"""SQLite-слой хранения: завершенные фокус-сессии, настройки и напоминания."""

import json
import sqlite3
from contextlib import closing, contextmanager
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Iterator

from timetracker.core.models import FocusSession, ReminderConfig


SCHEMA_VERSION = 1


class Storage:
    """Инкапсулирует подключение к SQLite и транзакционные операции."""
    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA journal_mode = WAL;")
        except sqlite3.DatabaseError:
            pass
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_db(self) -> None:
        """Создает все таблицы приложения при первом запуске."""
        with self._transaction() as conn:
            conn.execute("CREATE TABLE IF NOT EXISTS schema_version (version INTEGER NOT NULL)")
            row = conn.execute("SELECT version FROM schema_version LIMIT 1").fetchone()
            if not row:
                conn.execute("INSERT INTO schema_version(version) VALUES (?)", (SCHEMA_VERSION,))
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS pomodoro_sessions(
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    task_id INTEGER,
                    duration_sec INTEGER NOT NULL,
                    started_at TEXT NOT NULL,
                    completed_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS settings(
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS water_reminders(
                    id INTEGER PRIMARY KEY CHECK(id = 1),
                    enabled INTEGER NOT NULL,
                    interval_mins INTEGER NOT NULL,
                    custom_interval_mins INTEGER,
                    last_reminder TEXT
                )
                """
            )

    def get_setting(self, key: str, default: Any = None) -> Any:
        with closing(self._connect()) as conn:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        if not row:
            return default
        raw = row["value"]
        try:
            return json.loads(raw)
        except (TypeError, json.JSONDecodeError):
            return raw

    def set_setting(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO settings(key, value) VALUES(?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, payload),
            )

    def insert_session(self, duration_sec: int, task_id: int | None, completed_at: datetime | None = None) -> FocusSession:
        """Сохраняет завершенный интервал; начало вычисляется от длительности."""
        finished = completed_at or datetime.now()
        started = finished - timedelta(seconds=duration_sec)
        started_at = started.isoformat(timespec="seconds")
        completed_iso = finished.isoformat(timespec="seconds")
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO pomodoro_sessions(task_id, duration_sec, started_at, completed_at)
                VALUES (?, ?, ?, ?)
                """,
                (task_id, duration_sec, started_at, completed_iso),
            )
            session_id = int(cursor.lastrowid)
        return FocusSession(
            id=session_id,
            planned_duration=duration_sec,
            task_id=task_id,
            started_at=started_at,
            completed_at=completed_iso,
        )

    def list_sessions(self, start: date | None = None, end: date | None = None, limit: int = 100) -> list[FocusSession]:
        """Возвращает сессии за период (включительно) в обратном хронологическом порядке."""
        query = "SELECT id, task_id, duration_sec, started_at, completed_at FROM pomodoro_sessions"
        params: tuple[Any, ...]
        if start is not None and end is not None:
            query += " WHERE date(completed_at) BETWEEN ? AND ? ORDER BY completed_at DESC, id DESC LIMIT ?"
            params = (start.isoformat(), end.isoformat(), limit)
        else:
            query += " ORDER BY completed_at DESC, id DESC LIMIT ?"
            params = (limit,)
        with closing(self._connect()) as conn:
            rows = conn.execute(query, params).fetchall()
        return [
            FocusSession(
                id=row["id"],
                planned_duration=row["duration_sec"],
                task_id=row["task_id"],
                started_at=row["started_at"],
                completed_at=row["completed_at"],
            )
            for row in rows
        ]

    def get_reminder_config(self) -> ReminderConfig:
        with closing(self._connect()) as conn:
            row = conn.execute(
                "SELECT enabled, interval_mins, custom_interval_mins, last_reminder FROM water_reminders WHERE id = 1"
            ).fetchone()
        if not row:
            return ReminderConfig()
        return ReminderConfig(
            enabled=bool(row["enabled"]),
            interval_minutes=row["interval_mins"],
            custom_interval_minutes=row["custom_interval_mins"],
            last_reminder=row["last_reminder"],
        )

    def save_reminder_config(self, config: ReminderConfig) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO water_reminders(id, enabled, interval_mins, custom_interval_mins, last_reminder)
                VALUES (1, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    enabled=excluded.enabled,
                    interval_mins=excluded.interval_mins,
                    custom_interval_mins=excluded.custom_interval_mins,
                    last_reminder=excluded.last_reminder
                """,
                (int(config.enabled), config.interval_minutes, config.custom_interval_minutes, config.last_reminder),
            )
