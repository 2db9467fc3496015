"""
Pomodoro Utility Functions
===========================
Helper functions dla modułu Pomodoro.

JEDNOSTKI CZASU:
- Session.duration_minutes, PomodoroSettings: MINUTY
- TimerState.remaining_time / total_duration: SEKUNDY
- Używaj tych funkcji do konwersji między formatami
"""

from datetime import datetime


def minutes_to_seconds(minutes: int) -> int:
    """
    Konwertuj minuty na sekundy.

    Example:
        >>> minutes_to_seconds(25)
        1500
    """
    return minutes * 60


def seconds_to_minutes(seconds: int) -> int:
    """
    Konwertuj sekundy na minuty (zaokrąglone w dół).

    Example:
        >>> seconds_to_minutes(1559)
        25
    """
    return seconds // 60


def format_seconds_to_mmss(seconds: int) -> str:
    """
    Formatuj sekundy do wyświetlenia MM:SS.

    Example:
        >>> format_seconds_to_mmss(1500)
        '25:00'
        >>> format_seconds_to_mmss(90)
        '01:30'
    """
    seconds = max(0, seconds)
    minutes = seconds // 60
    secs = seconds % 60
    return f"{minutes:02d}:{secs:02d}"


def progress_percentage(remaining_seconds: int, total_seconds: int) -> float:
    """
    Oblicz procent ukończonego odliczania.

    Example:
        >>> progress_percentage(750, 1500)
        50.0
        >>> progress_percentage(0, 0)
        0.0
    """
    if total_seconds <= 0:
        return 0.0
    elapsed = total_seconds - remaining_seconds
    return min(100.0, max(0.0, (elapsed / total_seconds) * 100))


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """Pełne sekundy między dwoma znacznikami czasu (zaokrąglone w dół)"""
    return int((end - start).total_seconds() // 1)


def remaining_seconds(duration_minutes: int, elapsed: int) -> int:
    """
    Pozostały czas sesji, nigdy ujemny.

    Example:
        >>> remaining_seconds(25, 600)
        900
        >>> remaining_seconds(25, 4000)
        0
    """
    return max(0, minutes_to_seconds(duration_minutes) - elapsed)
