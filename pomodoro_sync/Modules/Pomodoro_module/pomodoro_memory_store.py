"""
In-memory magazyn sesji i ustawień.

Implementuje ten sam kontrakt co PomodoroAPIClient i te same reguły
przejść co backend - używany w testach i w trybie bez serwera.
"""
from datetime import datetime
from dataclasses import replace
from threading import Lock
from typing import Callable, Dict, List, Optional
from loguru import logger

from .pomodoro_models import (
    Session,
    SessionType,
    SessionStatus,
    SessionAction,
    PomodoroSettings,
    utc_now,
)
from .pomodoro_errors import SessionNotFoundError, SessionConflictError, BackendUnreachableError


class InMemorySessionStore:
    """
    Magazyn sesji w pamięci procesu.

    Reguły:
    - tylko jedna aktywna (running/paused) sesja naraz
    - pause tylko z running, resume tylko z paused
    - complete z running lub paused, cancel z każdego stanu poza completed
    """

    def __init__(self, now_fn: Callable[[], datetime] = utc_now):
        self._now = now_fn
        self._lock = Lock()
        self._sessions: Dict[int, Session] = {}
        self._next_id = 1
        self._settings = PomodoroSettings()
        # Symulacja awarii sieci w testach
        self.reachable = True
        self.calls: List[str] = []

    def _check_reachable(self, call: str):
        self.calls.append(call)
        if not self.reachable:
            raise BackendUnreachableError("Store unreachable")

    def _active(self) -> Optional[Session]:
        active = [s for s in self._sessions.values() if s.is_active]
        if not active:
            return None
        return max(active, key=lambda s: s.start_time)

    def _get(self, session_id: int) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found", status_code=404)
        return session

    # =========================================================================
    # SESJE
    # =========================================================================

    def create_session(self, session_type: SessionType, duration_minutes: int) -> Session:
        with self._lock:
            self._check_reachable('create')
            if self._active() is not None:
                raise SessionConflictError(
                    "Cannot start a new session while another session is active",
                    status_code=400,
                )

            now = self._now()
            session = Session(
                id=self._next_id,
                type=session_type,
                status=SessionStatus.RUNNING,
                start_time=now,
                duration_minutes=duration_minutes,
                created_at=now,
                updated_at=now,
            )
            self._sessions[session.id] = session
            self._next_id += 1
            logger.debug(f"[POMODORO] Store: created session {session.id} ({session_type.value})")
            return replace(session)

    def get_active_session(self) -> Optional[Session]:
        with self._lock:
            self._check_reachable('active')
            active = self._active()
            return replace(active) if active else None

    def transition_session(self, session_id: int, action: SessionAction) -> Session:
        with self._lock:
            self._check_reachable(action.value)
            session = self._get(session_id)
            now = self._now()

            if action == SessionAction.PAUSE:
                if session.status != SessionStatus.RUNNING:
                    raise SessionConflictError("Can only pause running sessions", status_code=400)
                session.status = SessionStatus.PAUSED
                session.end_time = now
            elif action == SessionAction.RESUME:
                if session.status != SessionStatus.PAUSED:
                    raise SessionConflictError("Can only resume paused sessions", status_code=400)
                session.status = SessionStatus.RUNNING
                session.end_time = None
            elif action == SessionAction.COMPLETE:
                if not session.is_active:
                    raise SessionConflictError("Can only complete running or paused sessions", status_code=400)
                session.status = SessionStatus.COMPLETED
                session.end_time = now
            elif action == SessionAction.CANCEL:
                if session.status == SessionStatus.COMPLETED:
                    raise SessionConflictError("Cannot cancel completed sessions", status_code=400)
                session.status = SessionStatus.CANCELLED
                session.end_time = now

            session.updated_at = now
            return replace(session)

    def get_sessions_by_date_range(self, start: datetime, end: datetime) -> List[Session]:
        with self._lock:
            self._check_reachable('date-range')
            found = [s for s in self._sessions.values() if start <= s.start_time <= end]
            return [replace(s) for s in sorted(found, key=lambda s: s.start_time, reverse=True)]

    # =========================================================================
    # USTAWIENIA
    # =========================================================================

    def get_settings(self) -> PomodoroSettings:
        with self._lock:
            self._check_reachable('get-settings')
            return replace(self._settings)

    def update_settings(self, settings: PomodoroSettings) -> PomodoroSettings:
        with self._lock:
            self._check_reachable('update-settings')
            self._settings = replace(settings, offline_mode=False)
            return replace(settings)

    def reset_settings(self) -> PomodoroSettings:
        with self._lock:
            self._check_reachable('reset-settings')
            self._settings = PomodoroSettings()
            return replace(self._settings)

    def health_check(self) -> bool:
        self.calls.append('health')
        return self.reachable
