"""
Unit tests for service wiring in the entry point
"""
from unittest.mock import MagicMock, patch

from pomodoro_sync import main
from pomodoro_sync.Modules.Pomodoro_module import InlineDispatcher, InMemorySessionStore


class ClosableStore(InMemorySessionStore):

    def close(self):
        pass


class TestBuildServices:

    def build(self, qt_app, store):
        with patch.object(main, "PomodoroAPIClient", return_value=store), \
                patch.object(main, "ThreadedDispatcher", side_effect=lambda **kwargs: InlineDispatcher()), \
                patch.object(main, "PomodoroLocalDatabase", MagicMock()), \
                patch.object(main.ConnectivityMonitor, "attach_platform_signals", return_value=False):
            return main.build_services(qt_app)

    def test_startup_health_check_sets_offline(self, qt_app):
        store = ClosableStore()
        store.reachable = False

        timer = self.build(qt_app, store)

        assert 'health' in store.calls
        assert timer.connectivity.is_offline

    def test_startup_health_check_keeps_online(self, qt_app):
        store = ClosableStore()

        timer = self.build(qt_app, store)

        assert 'health' in store.calls
        assert not timer.connectivity.is_offline
