"""
Pomodoro Models - Modele danych dla sesji Pomodoro
==================================================

Session       - rekord sesji (lokalny lub z backendu)
TimerState    - ulotny stan odliczania po stronie klienta (nigdy nie zapisywany)
PomodoroSettings - ustawienia czasu trwania i zachowania

Format JSON backendu używa kluczy camelCase (startTime, durationMinutes, ...).
Wszystkie znaczniki czasu są przechowywane jako datetime UTC (aware).
"""
from datetime import datetime, timezone
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union, Dict, Any
from loguru import logger

from .pomodoro_utils import minutes_to_seconds, format_seconds_to_mmss, progress_percentage


class SessionType(Enum):
    """Typy sesji Pomodoro"""
    WORK = "work"
    BREAK = "break"


class SessionStatus(Enum):
    """Statusy sesji"""
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SessionAction(Enum):
    """Przejścia sesji obsługiwane przez backend"""
    PAUSE = "pause"
    RESUME = "resume"
    COMPLETE = "complete"
    CANCEL = "cancel"


ACTIVE_STATUSES = (SessionStatus.RUNNING, SessionStatus.PAUSED)


def parse_utc_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parsuje znacznik czasu z backendu do datetime UTC.

    Backend zwraca czasy UTC bez sufiksu strefy ("2024-05-01T10:00:00"),
    więc wartość bez informacji o strefie jest traktowana jako UTC,
    a nie czas lokalny. Wartości ze strefą są konwertowane do UTC.

    Args:
        value: String ISO, obiekt datetime lub None

    Returns:
        datetime (tz=UTC) lub None
    """
    if value is None:
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        try:
            value = datetime.fromisoformat(text)
        except ValueError as e:
            logger.warning(f"[POMODORO] Failed to parse datetime: {text}, error: {e}")
            return None

    if not isinstance(value, datetime):
        return None

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_utc_datetime(value: Optional[datetime]) -> Optional[str]:
    """Serializuje datetime do ISO 8601 z sufiksem Z"""
    if value is None:
        return None
    value = parse_utc_datetime(value)
    return value.isoformat().replace('+00:00', 'Z')


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Session:
    """
    Rekord sesji Pomodoro.

    id == 0 oznacza sesję tylko lokalną (jeszcze/nigdy niezapisaną na serwerze).
    created_at / updated_at ustawia backend, nie klient.
    """
    type: SessionType
    status: SessionStatus
    start_time: datetime
    duration_minutes: int
    id: int = 0
    end_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def is_local_only(self) -> bool:
        return self.id <= 0

    @property
    def duration_seconds(self) -> int:
        return minutes_to_seconds(self.duration_minutes)

    def to_dict(self) -> Dict[str, Any]:
        """Konwertuj na słownik w formacie API (camelCase)"""
        return {
            'id': self.id,
            'type': self.type.value,
            'status': self.status.value,
            'startTime': format_utc_datetime(self.start_time),
            'endTime': format_utc_datetime(self.end_time),
            'durationMinutes': self.duration_minutes,
            'createdAt': format_utc_datetime(self.created_at),
            'updatedAt': format_utc_datetime(self.updated_at),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'Session':
        start_time = parse_utc_datetime(data.get('startTime'))
        if start_time is None:
            raise ValueError(f"Session payload without valid startTime: {data!r}")

        return Session(
            id=int(data.get('id') or 0),
            type=SessionType(data['type']),
            status=SessionStatus(data['status']),
            start_time=start_time,
            end_time=parse_utc_datetime(data.get('endTime')),
            duration_minutes=int(data['durationMinutes']),
            created_at=parse_utc_datetime(data.get('createdAt')),
            updated_at=parse_utc_datetime(data.get('updatedAt')),
        )


@dataclass
class PomodoroSettings:
    """Ustawienia Pomodoro (czasy w minutach)"""
    work_duration: int = 25
    break_duration: int = 5
    long_break_duration: int = 15
    sessions_until_long_break: int = 4
    auto_start_breaks: bool = False
    auto_start_pomodoros: bool = False
    sound_enabled: bool = True
    # Ręczny tryb offline - tylko po stronie klienta, nie wysyłany na serwer
    offline_mode: bool = False

    _WIRE_KEYS = {
        'workDuration': 'work_duration',
        'breakDuration': 'break_duration',
        'longBreakDuration': 'long_break_duration',
        'sessionsUntilLongBreak': 'sessions_until_long_break',
        'autoStartBreaks': 'auto_start_breaks',
        'autoStartPomodoros': 'auto_start_pomodoros',
        'soundEnabled': 'sound_enabled',
    }

    def to_dict(self) -> Dict[str, Any]:
        """Konwertuje ustawienia do DTO backendu (bez offline_mode)"""
        return {wire: getattr(self, attr) for wire, attr in self._WIRE_KEYS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], offline_mode: bool = False) -> 'PomodoroSettings':
        """Tworzy ustawienia z DTO; brakujące klucze biorą wartości domyślne"""
        values = {attr: data[wire] for wire, attr in cls._WIRE_KEYS.items() if wire in data}
        return cls(offline_mode=offline_mode, **values)


@dataclass
class TimerState:
    """
    Stan odliczania po stronie klienta.

    Niezmienniki: 0 <= remaining_time <= total_duration,
    is_running i is_paused nigdy nie są jednocześnie True.
    """
    current_session: Optional[Session] = None
    remaining_time: int = 0
    is_running: bool = False
    is_paused: bool = False
    session_type: SessionType = SessionType.WORK
    total_duration: int = field(default_factory=lambda: minutes_to_seconds(25))

    @property
    def is_idle(self) -> bool:
        return not self.is_running and not self.is_paused

    @property
    def progress_percentage(self) -> float:
        return progress_percentage(self.remaining_time, self.total_duration)

    @property
    def time_display(self) -> str:
        return format_seconds_to_mmss(self.remaining_time)

    def copy(self) -> 'TimerState':
        session = replace(self.current_session) if self.current_session else None
        return replace(self, current_session=session)
