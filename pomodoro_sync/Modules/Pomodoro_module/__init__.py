"""
Moduł Pomodoro - cykl życia sesji i synchronizacja z backendem
=============================================================
"""

from .pomodoro_models import (
    Session,
    SessionType,
    SessionStatus,
    SessionAction,
    PomodoroSettings,
    TimerState,
    parse_utc_datetime,
)

from .pomodoro_errors import (
    PomodoroAPIError,
    SessionNotFoundError,
    SessionConflictError,
    BackendUnreachableError,
)

from .call_dispatcher import (
    APIResponse,
    ThreadedDispatcher,
    InlineDispatcher,
)

from .pomodoro_api_client import PomodoroAPIClient
from .pomodoro_memory_store import InMemorySessionStore
from .pomodoro_clock import TimerClock
from .connectivity_monitor import ConnectivityMonitor
from .pomodoro_settings_provider import PomodoroSettingsProvider
from .session_reconciliation import recover_timer_state
from .pomodoro_logic import PomodoroTimerService, next_auto_session
from .pomodoro_local_database import PomodoroLocalDatabase
from .pomodoro_stats import PomodoroStatsService, today_stats, weekly_stats

__all__ = [
    # Models
    'Session',
    'SessionType',
    'SessionStatus',
    'SessionAction',
    'PomodoroSettings',
    'TimerState',
    'parse_utc_datetime',

    # Errors
    'PomodoroAPIError',
    'SessionNotFoundError',
    'SessionConflictError',
    'BackendUnreachableError',

    # Store / dispatch
    'APIResponse',
    'ThreadedDispatcher',
    'InlineDispatcher',
    'PomodoroAPIClient',
    'InMemorySessionStore',

    # Lifecycle
    'TimerClock',
    'ConnectivityMonitor',
    'PomodoroSettingsProvider',
    'recover_timer_state',
    'PomodoroTimerService',
    'next_auto_session',

    # History / stats
    'PomodoroLocalDatabase',
    'PomodoroStatsService',
    'today_stats',
    'weekly_stats',
]
