"""
Lokalna baza danych SQLite dla modułu Pomodoro.
Przechowuje historię zakończonych sesji (także sesji lokalnych, id == 0).
"""

import sqlite3
from pathlib import Path
from typing import List, Optional, Dict
from datetime import datetime
from loguru import logger

from .pomodoro_models import Session, SessionType, SessionStatus, parse_utc_datetime, utc_now
from .pomodoro_stats import today_stats


def _timestamp(value: Optional[datetime]) -> Optional[str]:
    """Stała szerokość zapisu UTC - porównania tekstowe w SQL zachowują kolejność"""
    if value is None:
        return None
    return parse_utc_datetime(value).strftime('%Y-%m-%dT%H:%M:%S.%fZ')


class PomodoroLocalDatabase:
    """Manager lokalnej bazy SQLite dla historii sesji"""

    def __init__(self, db_path: str):
        """
        Inicjalizacja lokalnej bazy danych.

        Args:
            db_path: Ścieżka do pliku bazy SQLite
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_database()
        logger.info(f"[POMODORO] Local database initialized: {self.db_path}")

    def _init_database(self):
        """Tworzy tabele jeśli nie istnieją"""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS session_logs (
                    log_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    remote_id INTEGER NOT NULL DEFAULT 0,
                    session_type TEXT NOT NULL,
                    status TEXT NOT NULL,
                    started_at TEXT NOT NULL,
                    ended_at TEXT,
                    duration_minutes INTEGER NOT NULL,
                    recorded_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_logs_started
                ON session_logs(started_at)
            """)

            conn.commit()

    @staticmethod
    def _row_to_session(row: sqlite3.Row) -> Session:
        return Session(
            id=row['remote_id'],
            type=SessionType(row['session_type']),
            status=SessionStatus(row['status']),
            start_time=parse_utc_datetime(row['started_at']),
            end_time=parse_utc_datetime(row['ended_at']),
            duration_minutes=row['duration_minutes'],
        )

    def record_session(self, session: Session) -> bool:
        """
        Zapisuje zakończoną sesję.

        Returns:
            True jeśli sukces
        """
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute("""
                    INSERT INTO session_logs (
                        remote_id, session_type, status, started_at, ended_at,
                        duration_minutes, recorded_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """, (
                    session.id,
                    session.type.value,
                    session.status.value,
                    _timestamp(session.start_time),
                    _timestamp(session.end_time),
                    session.duration_minutes,
                    _timestamp(utc_now()),
                ))
                conn.commit()

            logger.debug(f"[POMODORO] Session logged: {session.type.value} ({session.status.value})")
            return True

        except sqlite3.Error as e:
            logger.error(f"[POMODORO] Failed to record session: {e}")
            return False

    def get_sessions(self, start: datetime, end: datetime) -> List[Session]:
        """Sesje rozpoczęte w zakresie [start, end], od najnowszej"""
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.row_factory = sqlite3.Row
                rows = conn.execute("""
                    SELECT * FROM session_logs
                    WHERE started_at >= ? AND started_at <= ?
                    ORDER BY started_at DESC
                """, (_timestamp(start), _timestamp(end))).fetchall()
                return [self._row_to_session(row) for row in rows]

        except sqlite3.Error as e:
            logger.error(f"[POMODORO] Failed to get sessions: {e}")
            return []

    def get_recent_sessions(self, limit: int = 10) -> List[Session]:
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.row_factory = sqlite3.Row
                rows = conn.execute(
                    "SELECT * FROM session_logs ORDER BY started_at DESC LIMIT ?",
                    (limit,),
                ).fetchall()
                return [self._row_to_session(row) for row in rows]

        except sqlite3.Error as e:
            logger.error(f"[POMODORO] Failed to get recent sessions: {e}")
            return []

    def get_today_stats(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """
        Statystyki dzisiejszych sesji z lokalnej historii.

        Returns:
            {
                'total_work_time': int (minuty),
                'total_break_time': int (minuty),
                'completed_sessions': int,
                'total_sessions': int
            }
        """
        now = now or utc_now()
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        end = now.replace(hour=23, minute=59, second=59, microsecond=999999)
        return today_stats(self.get_sessions(start, end), now)

    def clear_all(self):
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM session_logs")
            conn.commit()
        logger.info("[POMODORO] Local session history cleared")
