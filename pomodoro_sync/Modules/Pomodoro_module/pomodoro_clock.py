"""
Zegar odliczania - jeden tick co sekundę (QTimer)
"""
from typing import Optional
from PyQt6.QtCore import QObject, QTimer, pyqtSignal


class TimerClock(QObject):
    """
    Driver interwału dla cyklu życia sesji.

    Co najwyżej jeden aktywny interwał; start() na działającym zegarze
    restartuje odliczanie do następnego ticka.
    """

    tick = pyqtSignal()

    def __init__(self, interval_ms: int = 1000, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.interval_ms = interval_ms
        self.timer = QTimer(self)
        self.timer.setInterval(interval_ms)
        self.timer.timeout.connect(self.tick.emit)

    def start(self):
        self.timer.start(self.interval_ms)

    def stop(self):
        self.timer.stop()

    def is_active(self) -> bool:
        return self.timer.isActive()
