"""
Settings Provider - ustawienia Pomodoro z fallbackiem na wartości domyślne
"""
from dataclasses import replace
from typing import Optional
from loguru import logger
from PyQt6.QtCore import QObject, pyqtSignal

from .pomodoro_models import PomodoroSettings
from .pomodoro_errors import BackendUnreachableError
from .call_dispatcher import APIResponse
from .connectivity_monitor import ConnectivityMonitor


class PomodoroSettingsProvider(QObject):
    """
    Przechowuje bieżące ustawienia i synchronizuje je z backendem.

    Błąd zapisu/odczytu nigdy nie blokuje klienta: zostaje wartość lokalna
    lub wbudowane ustawienia domyślne.
    """

    settings_changed = pyqtSignal(object)  # PomodoroSettings

    def __init__(self, store, dispatcher, connectivity: Optional[ConnectivityMonitor] = None,
                 initial: Optional[PomodoroSettings] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.store = store
        self.dispatcher = dispatcher
        self.connectivity = connectivity
        self._settings = initial or PomodoroSettings()

    @property
    def current(self) -> PomodoroSettings:
        return self._settings

    def _apply(self, settings: PomodoroSettings):
        self._settings = settings
        self.settings_changed.emit(replace(settings))

    def _note_failure(self, response: APIResponse, operation: str):
        logger.warning(f"[POMODORO] Settings {operation} failed: {response.error}")
        if self.connectivity and isinstance(response.exception, BackendUnreachableError):
            self.connectivity.set_offline_mode(True)

    # =========================================================================
    # OPERACJE
    # =========================================================================

    def load(self):
        """Pobierz ustawienia z backendu; przy błędzie użyj domyślnych"""
        offline_mode = self._settings.offline_mode

        def on_result(response: APIResponse):
            if response.success:
                logger.info("[POMODORO] Settings loaded from backend")
                self._apply(replace(response.data, offline_mode=offline_mode))
            else:
                self._note_failure(response, "load")
                self._apply(PomodoroSettings(offline_mode=offline_mode))

        self.dispatcher.submit(self.store.get_settings, on_result)

    def update(self, settings: PomodoroSettings):
        """Zapisz ustawienia: lokalnie od razu, potem na serwerze"""
        self._apply(replace(settings))

        def on_result(response: APIResponse):
            if response.success:
                self._apply(replace(response.data, offline_mode=self._settings.offline_mode))
            else:
                self._note_failure(response, "update")

        self.dispatcher.submit(lambda: self.store.update_settings(settings), on_result)

    def reset(self):
        """Przywróć ustawienia domyślne na serwerze (lokalnie przy błędzie)"""
        offline_mode = self._settings.offline_mode

        def on_result(response: APIResponse):
            if response.success:
                self._apply(replace(response.data, offline_mode=offline_mode))
            else:
                self._note_failure(response, "reset")
                self._apply(PomodoroSettings(offline_mode=offline_mode))

        self.dispatcher.submit(self.store.reset_settings, on_result)

    def set_offline_mode(self, enabled: bool):
        """Ręczny tryb offline - tylko lokalnie, przekazywany do monitora"""
        self._apply(replace(self._settings, offline_mode=enabled))
        if self.connectivity:
            self.connectivity.set_offline_mode(enabled)
