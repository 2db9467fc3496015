"""
API Client dla synchronizacji sesji Pomodoro z serwerem.

Ten moduł odpowiada za komunikację HTTP z backendem sesji i ustawień.
Obsługuje:
- Tworzenie sesji (work / break) i przejścia (pause, resume, complete, cancel)
- Pobieranie aktywnej sesji (rekonsyliacja przy starcie)
- Pobieranie sesji z zakresu dat (statystyki)
- Odczyt / zapis / reset ustawień
- Health check

Błędy HTTP są mapowane na wyjątki z pomodoro_errors:
404 -> SessionNotFoundError, 400/409 -> SessionConflictError,
5xx / błąd sieci / timeout -> BackendUnreachableError.
"""

import requests
from typing import Optional, List, Any
from datetime import datetime
from loguru import logger

from .pomodoro_models import (
    Session,
    SessionType,
    SessionAction,
    PomodoroSettings,
    format_utc_datetime,
)
from .pomodoro_errors import (
    PomodoroAPIError,
    SessionNotFoundError,
    SessionConflictError,
    BackendUnreachableError,
)


class PomodoroAPIClient:
    """
    Klient API magazynu sesji Pomodoro.

    Metody są synchroniczne (requests) - wywołuj je przez dispatcher,
    żeby nie blokować wątku Qt.
    """

    def __init__(self, base_url: str, timeout: float = 10.0, health_timeout: float = 5.0):
        """
        Inicjalizacja API client.

        Args:
            base_url: URL serwera (np. "http://localhost:5000")
            timeout: Timeout zwykłych zapytań w sekundach
            health_timeout: Timeout health checka w sekundach
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.health_timeout = health_timeout
        self.session = requests.Session()

        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })

        logger.info(f"[POMODORO] API Client initialized with base_url: {self.base_url}")

    def close(self):
        self.session.close()

    # =========================================================================
    # HTTP HELPERS
    # =========================================================================

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Wykonaj request HTTP; błędy sieciowe zamieniane na BackendUnreachableError.
        """
        kwargs.setdefault('timeout', self.timeout)
        url = f"{self.base_url}{path}"
        try:
            return self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning(f"[POMODORO] Network error {method} {path}: {e}")
            raise BackendUnreachableError(f"Network error: {e}") from e

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text or response.reason or f"HTTP {response.status_code}"

        if isinstance(payload, dict):
            return str(payload.get('detail') or payload.get('message') or payload.get('title') or payload)
        return str(payload)

    def _raise_for_status(self, response: requests.Response) -> None:
        """Mapuje status HTTP na wyjątek domenowy"""
        status = response.status_code
        if status < 400:
            return

        message = self._error_message(response)
        logger.error(f"[POMODORO] HTTP Error {status}: {message}")

        if status == 404:
            raise SessionNotFoundError(message, status_code=status)
        if status in (400, 409):
            raise SessionConflictError(message, status_code=status)
        if status >= 500:
            raise BackendUnreachableError(message, status_code=status)
        raise PomodoroAPIError(message, status_code=status)

    @staticmethod
    def _json(response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise PomodoroAPIError(f"Invalid JSON in response: {e}", status_code=response.status_code) from e

    # =========================================================================
    # SESJE
    # =========================================================================

    def create_session(self, session_type: SessionType, duration_minutes: int) -> Session:
        """
        Utwórz nową sesję na serwerze.

        Raises:
            SessionConflictError: Jeśli istnieje już aktywna sesja
        """
        endpoint = 'start-work' if session_type == SessionType.WORK else 'start-break'
        logger.debug(f"[POMODORO] Creating {session_type.value} session ({duration_minutes} min)")

        response = self._request(
            'POST',
            f"/api/sessions/{endpoint}",
            json={'durationMinutes': duration_minutes},
        )
        self._raise_for_status(response)
        return Session.from_dict(self._json(response))

    def get_active_session(self) -> Optional[Session]:
        """
        Pobierz aktywną (running/paused) sesję.

        Returns:
            Session lub None jeśli brak aktywnej sesji
        """
        response = self._request('GET', "/api/sessions/active")

        if response.status_code in (204, 404):
            return None

        self._raise_for_status(response)
        data = self._json(response)
        return Session.from_dict(data) if data else None

    def transition_session(self, session_id: int, action: SessionAction) -> Session:
        """
        Wykonaj przejście sesji (pause / resume / complete / cancel).

        Raises:
            SessionNotFoundError: Nieznane id sesji
            SessionConflictError: Status sesji nie pozwala na akcję
        """
        logger.debug(f"[POMODORO] Session {session_id} -> {action.value}")

        response = self._request('POST', f"/api/sessions/{session_id}/{action.value}", json={})
        self._raise_for_status(response)
        return Session.from_dict(self._json(response))

    def get_sessions_by_date_range(self, start: datetime, end: datetime) -> List[Session]:
        """Pobierz sesje rozpoczęte w podanym zakresie dat"""
        response = self._request(
            'GET',
            "/api/sessions/date-range",
            params={
                'startDate': format_utc_datetime(start),
                'endDate': format_utc_datetime(end),
            },
        )
        self._raise_for_status(response)
        return [Session.from_dict(item) for item in (self._json(response) or [])]

    # =========================================================================
    # USTAWIENIA
    # =========================================================================

    def get_settings(self) -> PomodoroSettings:
        response = self._request('GET', "/api/settings")
        self._raise_for_status(response)
        return PomodoroSettings.from_dict(self._json(response) or {})

    def update_settings(self, settings: PomodoroSettings) -> PomodoroSettings:
        response = self._request('PUT', "/api/settings", json=settings.to_dict())
        self._raise_for_status(response)
        return PomodoroSettings.from_dict(self._json(response) or {}, offline_mode=settings.offline_mode)

    def reset_settings(self) -> PomodoroSettings:
        response = self._request('POST', "/api/settings/reset", json={})
        self._raise_for_status(response)
        return PomodoroSettings.from_dict(self._json(response) or {})

    # =========================================================================
    # HEALTH CHECK
    # =========================================================================

    def health_check(self) -> bool:
        """
        Sprawdź połączenie z serwerem.

        Returns:
            True jeśli serwer odpowiada, False w przeciwnym razie
        """
        try:
            response = self.session.get(f"{self.base_url}/api/health", timeout=self.health_timeout)
            return response.status_code == 200
        except requests.exceptions.RequestException as e:
            logger.debug(f"[POMODORO] Health check failed: {e}")
            return False
