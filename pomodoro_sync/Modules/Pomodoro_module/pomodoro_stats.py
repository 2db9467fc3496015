"""
Statystyki sesji Pomodoro (dzienne i tygodniowe).

Czas pracy / przerw liczony w minutach z duration_minutes
zakończonych (completed) sesji.
"""
from datetime import datetime, timedelta, date
from typing import Dict, Any, Iterable, List, Optional
from loguru import logger
from PyQt6.QtCore import QObject, pyqtSignal

from .pomodoro_models import Session, SessionType, SessionStatus, utc_now
from .call_dispatcher import APIResponse


def _day_bounds(day: date, tz) -> tuple:
    start = datetime(day.year, day.month, day.day, tzinfo=tz)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def today_stats(sessions: Iterable[Session], now: Optional[datetime] = None) -> Dict[str, int]:
    """
    Statystyki dla dnia `now` (domyślnie dzisiaj, UTC).

    Returns:
        {'total_work_time', 'total_break_time', 'completed_sessions', 'total_sessions'}
    """
    now = now or utc_now()
    start, end = _day_bounds(now.date(), now.tzinfo)
    todays = [s for s in sessions if start <= s.start_time.astimezone(now.tzinfo) <= end]
    completed = [s for s in todays if s.status == SessionStatus.COMPLETED]

    return {
        'total_work_time': sum(s.duration_minutes for s in completed if s.type == SessionType.WORK),
        'total_break_time': sum(s.duration_minutes for s in completed if s.type == SessionType.BREAK),
        'completed_sessions': len(completed),
        'total_sessions': len(todays),
    }


def weekly_stats(sessions: Iterable[Session], now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Statystyki z ostatnich 7 dni (dzień bieżący + 6 poprzednich).

    Returns:
        {'daily_stats': [{'date', 'work_time', 'break_time', 'sessions'}, ...] (od najstarszego),
         'total_work_time', 'total_break_time', 'total_sessions'}
    """
    now = now or utc_now()
    days: Dict[str, Dict[str, Any]] = {}
    for offset in range(6, -1, -1):
        key = (now - timedelta(days=offset)).date().isoformat()
        days[key] = {'date': key, 'work_time': 0, 'break_time': 0, 'sessions': 0}

    for session in sessions:
        if session.status != SessionStatus.COMPLETED:
            continue
        bucket = days.get(session.start_time.astimezone(now.tzinfo).date().isoformat())
        if bucket is None:
            continue
        if session.type == SessionType.WORK:
            bucket['work_time'] += session.duration_minutes
        else:
            bucket['break_time'] += session.duration_minutes
        bucket['sessions'] += 1

    daily: List[Dict[str, Any]] = list(days.values())
    return {
        'daily_stats': daily,
        'total_work_time': sum(d['work_time'] for d in daily),
        'total_break_time': sum(d['break_time'] for d in daily),
        'total_sessions': sum(d['sessions'] for d in daily),
    }


class PomodoroStatsService(QObject):
    """Pobiera sesje z magazynu i publikuje statystyki"""

    today_stats_updated = pyqtSignal(dict)
    weekly_stats_updated = pyqtSignal(dict)

    def __init__(self, store, dispatcher, now_fn=utc_now, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.store = store
        self.dispatcher = dispatcher
        self.now_fn = now_fn

    def refresh_today(self):
        now = self.now_fn()
        start, end = _day_bounds(now.date(), now.tzinfo)

        def on_result(response: APIResponse):
            if not response.success:
                logger.warning(f"[POMODORO] Failed to load today stats: {response.error}")
                return
            self.today_stats_updated.emit(today_stats(response.data, now))

        self.dispatcher.submit(lambda: self.store.get_sessions_by_date_range(start, end), on_result)

    def refresh_weekly(self):
        now = self.now_fn()
        start, _ = _day_bounds((now - timedelta(days=6)).date(), now.tzinfo)

        def on_result(response: APIResponse):
            if not response.success:
                logger.warning(f"[POMODORO] Failed to load weekly stats: {response.error}")
                return
            self.weekly_stats_updated.emit(weekly_stats(response.data, now))

        self.dispatcher.submit(lambda: self.store.get_sessions_by_date_range(start, now), on_result)

    def refresh(self):
        self.refresh_today()
        self.refresh_weekly()
