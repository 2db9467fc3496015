"""
Pytest fixtures for Pomodoro Sync tests
"""
import pytest
from PyQt6.QtCore import QCoreApplication

from pomodoro_sync.Modules.Pomodoro_module import (
    InMemorySessionStore,
    InlineDispatcher,
    ConnectivityMonitor,
    PomodoroSettingsProvider,
    PomodoroSettings,
    PomodoroTimerService,
)

from qt_helpers import FakeNow, FakeScheduler, ManualClock


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """Jedna instancja QCoreApplication dla całej sesji testów"""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def now():
    return FakeNow()


@pytest.fixture
def store(now):
    return InMemorySessionStore(now_fn=now)


@pytest.fixture
def dispatcher():
    return InlineDispatcher()


@pytest.fixture
def connectivity(store, dispatcher):
    return ConnectivityMonitor(store, dispatcher)


@pytest.fixture
def settings_provider(store, dispatcher, connectivity):
    return PomodoroSettingsProvider(store, dispatcher, connectivity, initial=PomodoroSettings())


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def timer(store, dispatcher, settings_provider, connectivity, clock, scheduler, now):
    return PomodoroTimerService(
        store,
        dispatcher,
        settings_provider,
        connectivity=connectivity,
        clock=clock,
        scheduler=scheduler,
        now_fn=now,
    )


@pytest.fixture
def emitted():
    """Rejestrator sygnałów: emitted.connect(signal, 'name') -> emitted['name']"""

    class Recorder(dict):
        def connect(self, signal, name):
            self[name] = []
            signal.connect(lambda *args: self[name].append(args[0] if len(args) == 1 else args))

    return Recorder()
