"""
Connectivity Monitor - pojedyncza flaga offline dla klienta Pomodoro
===================================================================

Źródła zmian flagi:
- zdarzenia platformy (QNetworkInformation.reachabilityChanged)
- jawne przełączenie (tryb offline w ustawieniach, refresh())
- błąd BackendUnreachableError zgłoszony przez cykl życia sesji

check_api_health() tylko raportuje wynik - nie zmienia flagi.
"""
from typing import Callable, Optional
from loguru import logger
from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtNetwork import QNetworkInformation

from .call_dispatcher import APIResponse


class ConnectivityMonitor(QObject):
    """Śledzi stan połączenia z backendem"""

    offline_changed = pyqtSignal(bool)  # is_offline
    health_checked = pyqtSignal(bool)   # reachable

    def __init__(self, store, dispatcher, initially_online: bool = True,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self.store = store
        self.dispatcher = dispatcher
        self._offline = not initially_online
        self._network_info: Optional[QNetworkInformation] = None

        logger.info(f"[POMODORO] ConnectivityMonitor initialized (offline={self._offline})")

    @property
    def is_offline(self) -> bool:
        return self._offline

    # =========================================================================
    # ZDARZENIA PLATFORMY
    # =========================================================================

    def attach_platform_signals(self) -> bool:
        """
        Podłącz zdarzenia online/offline systemu.

        Returns:
            False jeśli platforma nie udostępnia backendu QNetworkInformation
        """
        if not QNetworkInformation.loadDefaultBackend():
            logger.warning("[POMODORO] No QNetworkInformation backend, platform events disabled")
            return False

        self._network_info = QNetworkInformation.instance()
        if self._network_info is None:
            return False

        self._network_info.reachabilityChanged.connect(self._on_reachability_changed)
        # Stan początkowy z platformy
        self._on_reachability_changed(self._network_info.reachability())
        logger.info(f"[POMODORO] Platform network events attached ({self._network_info.backendName()})")
        return True

    def _on_reachability_changed(self, reachability):
        if reachability == QNetworkInformation.Reachability.Online:
            self.on_network_up()
        elif reachability == QNetworkInformation.Reachability.Disconnected:
            self.on_network_down()

    def on_network_up(self):
        logger.info("[POMODORO] Network up")
        self._set_offline(False)

    def on_network_down(self):
        logger.warning("[POMODORO] Network down")
        self._set_offline(True)

    # =========================================================================
    # HEALTH CHECK
    # =========================================================================

    def check_api_health(self, callback: Optional[Callable[[bool], None]] = None):
        """
        Asynchroniczny health check backendu.

        Wynik trafia do sygnału health_checked i do callbacka.
        """
        def on_result(response: APIResponse):
            reachable = bool(response.success and response.data)
            logger.debug(f"[POMODORO] Health check result: {reachable}")
            self.health_checked.emit(reachable)
            if callback:
                callback(reachable)

        self.dispatcher.submit(self.store.health_check, on_result)

    def refresh(self):
        """Ręczne sprawdzenie połączenia: wynik health checka ustawia flagę"""
        self.check_api_health(lambda reachable: self.set_offline_mode(not reachable))

    def set_offline_mode(self, offline: bool):
        self._set_offline(offline)

    def _set_offline(self, offline: bool):
        if self._offline == offline:
            return
        self._offline = offline
        logger.info(f"[POMODORO] Offline mode: {offline}")
        self.offline_changed.emit(offline)
