"""
Call Dispatcher - wykonywanie wywołań magazynu sesji poza wątkiem Qt
====================================================================

ThreadedDispatcher - każde wywołanie w osobnym QThread, wynik wraca
                     do wątku głównego przez sygnał (queued connection)
InlineDispatcher   - wywołanie synchroniczne (testy, narzędzia headless)

Oba zwracają wynik jako APIResponse do callbacka; wyjątki nie wychodzą
poza dispatcher.
"""
from typing import Any, Callable, Dict, Optional, Tuple
from loguru import logger
from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from .pomodoro_errors import PomodoroAPIError


class APIResponse:
    """Wrapper dla odpowiedzi API"""

    def __init__(self, success: bool, data: Any = None, error: Optional[str] = None,
                 status_code: Optional[int] = None, exception: Optional[Exception] = None):
        self.success = success
        self.data = data
        self.error = error
        self.status_code = status_code
        self.exception = exception

    def __repr__(self) -> str:
        if self.success:
            return f"<APIResponse success=True status={self.status_code}>"
        return f"<APIResponse success=False error='{self.error}' status={self.status_code}>"


ResultCallback = Callable[[APIResponse], None]


def run_call(fn: Callable[[], Any]) -> APIResponse:
    """Wykonaj wywołanie i opakuj wynik lub wyjątek w APIResponse"""
    try:
        return APIResponse(success=True, data=fn())
    except PomodoroAPIError as e:
        return APIResponse(success=False, error=str(e), status_code=e.status_code, exception=e)
    except Exception as e:
        logger.exception(f"[POMODORO] Unexpected error in remote call: {e}")
        return APIResponse(success=False, error=str(e), exception=e)


class RemoteCallWorker(QThread):
    """Worker thread dla pojedynczego wywołania"""

    result_ready = pyqtSignal(int, object)  # (call_id, APIResponse)

    def __init__(self, call_id: int, fn: Callable[[], Any]):
        super().__init__()
        self.call_id = call_id
        self.fn = fn

    def run(self):
        self.result_ready.emit(self.call_id, run_call(self.fn))


class ThreadedDispatcher(QObject):
    """
    Uruchamia wywołania w tle.

    Callback jest zawsze wywoływany w wątku, w którym żyje dispatcher
    (wątek główny Qt), więc może bezpiecznie modyfikować stan timera.
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._next_id = 0
        self._calls: Dict[int, Tuple[RemoteCallWorker, Optional[ResultCallback]]] = {}

    @property
    def pending_count(self) -> int:
        return len(self._calls)

    def submit(self, fn: Callable[[], Any], callback: Optional[ResultCallback] = None) -> int:
        self._next_id += 1
        call_id = self._next_id

        worker = RemoteCallWorker(call_id, fn)
        worker.result_ready.connect(self._on_result_ready)
        self._calls[call_id] = (worker, callback)
        worker.start()
        return call_id

    @pyqtSlot(int, object)
    def _on_result_ready(self, call_id: int, response: APIResponse):
        entry = self._calls.pop(call_id, None)
        if entry is None:
            return

        worker, callback = entry
        try:
            if callback:
                callback(response)
        finally:
            worker.wait()
            worker.deleteLater()

    def shutdown(self, timeout_ms: int = 3000):
        """Poczekaj na zakończenie wątków (wyniki są porzucane)"""
        for worker, _ in list(self._calls.values()):
            if worker.isRunning():
                worker.wait(timeout_ms)
        self._calls.clear()


class InlineDispatcher:
    """Wykonuje wywołania synchronicznie w wątku wywołującym"""

    def __init__(self):
        self.submitted = 0

    @property
    def pending_count(self) -> int:
        return 0

    def submit(self, fn: Callable[[], Any], callback: Optional[ResultCallback] = None) -> int:
        self.submitted += 1
        response = run_call(fn)
        if callback:
            callback(response)
        return self.submitted

    def shutdown(self, timeout_ms: int = 3000):
        pass
