"""
Odtwarzanie stanu timera z aktywnej sesji backendu (start / przeładowanie).
"""
from datetime import datetime
from typing import Optional

from .pomodoro_models import Session, SessionStatus, TimerState, parse_utc_datetime, utc_now
from .pomodoro_utils import elapsed_seconds, remaining_seconds, minutes_to_seconds


def recover_timer_state(session: Session, now: Optional[datetime] = None) -> TimerState:
    """
    Zbuduj TimerState dla aktywnej sesji.

    Upływ czasu liczony jest od start_time (także dla sesji wstrzymanej).
    Czasy bez strefy traktowane są jako UTC, nie czas lokalny.

    Example:
        sesja 25 min, start 600 s temu -> remaining_time == 900
    """
    now = parse_utc_datetime(now) if now is not None else utc_now()
    start = parse_utc_datetime(session.start_time)
    elapsed = elapsed_seconds(start, now)

    return TimerState(
        current_session=session,
        remaining_time=min(remaining_seconds(session.duration_minutes, elapsed),
                           minutes_to_seconds(session.duration_minutes)),
        is_running=session.status == SessionStatus.RUNNING,
        is_paused=session.status == SessionStatus.PAUSED,
        session_type=session.type,
        total_duration=minutes_to_seconds(session.duration_minutes),
    )


def should_restart_clock(state: TimerState) -> bool:
    """Zegar wznawiany tylko dla sesji running z czasem > 0"""
    return state.is_running and state.remaining_time > 0
