"""
Wyjątki komunikacji z magazynem sesji Pomodoro.

PomodoroAPIError
 ├── SessionNotFoundError     - nieznane id sesji (HTTP 404)
 ├── SessionConflictError     - akcja niedozwolona dla statusu / druga aktywna sesja (HTTP 400/409)
 └── BackendUnreachableError  - brak sieci, timeout, błąd 5xx
"""
from typing import Optional


class PomodoroAPIError(Exception):
    """Bazowy wyjątek dla błędów backendu"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SessionNotFoundError(PomodoroAPIError):
    """Sesja o podanym id nie istnieje"""


class SessionConflictError(PomodoroAPIError):
    """Przejście niedozwolone dla bieżącego statusu sesji"""


class BackendUnreachableError(PomodoroAPIError):
    """Backend niedostępny (sieć, timeout, błąd serwera)"""


def is_user_facing(error: Optional[Exception]) -> bool:
    """NotFound i Conflict są pokazywane użytkownikowi, reszta degraduje po cichu"""
    return isinstance(error, (SessionNotFoundError, SessionConflictError))
