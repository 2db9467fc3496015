"""
Pomodoro Sync - rdzeń klienta timera Pomodoro
"""

__version__ = "0.1.0"
