"""
Unit tests for ConnectivityMonitor
"""
from unittest.mock import MagicMock, patch

from PyQt6.QtNetwork import QNetworkInformation

from pomodoro_sync.Modules.Pomodoro_module import ConnectivityMonitor
from pomodoro_sync.Modules.Pomodoro_module import connectivity_monitor


class TestOfflineFlag:

    def test_initial_value(self, store, dispatcher):
        assert not ConnectivityMonitor(store, dispatcher).is_offline
        assert ConnectivityMonitor(store, dispatcher, initially_online=False).is_offline

    def test_platform_events(self, connectivity, emitted):
        emitted.connect(connectivity.offline_changed, 'changes')

        connectivity.on_network_down()
        assert connectivity.is_offline

        connectivity.on_network_up()
        assert not connectivity.is_offline

        assert emitted['changes'] == [True, False]

    def test_emits_only_on_change(self, connectivity, emitted):
        emitted.connect(connectivity.offline_changed, 'changes')

        connectivity.set_offline_mode(False)
        connectivity.set_offline_mode(True)
        connectivity.set_offline_mode(True)

        assert emitted['changes'] == [True]

    def test_reachability_mapping(self, connectivity):
        connectivity._on_reachability_changed(QNetworkInformation.Reachability.Disconnected)
        assert connectivity.is_offline

        connectivity._on_reachability_changed(QNetworkInformation.Reachability.Online)
        assert not connectivity.is_offline

    @staticmethod
    def fake_network_information(backend_loaded=True, reachability=None):
        fake = MagicMock()
        fake.Reachability = QNetworkInformation.Reachability
        fake.loadDefaultBackend.return_value = backend_loaded
        fake.instance.return_value.reachability.return_value = reachability
        fake.instance.return_value.backendName.return_value = "fake"
        return fake

    def test_attach_seeds_offline_from_platform(self, connectivity):
        fake = self.fake_network_information(reachability=QNetworkInformation.Reachability.Disconnected)
        with patch.object(connectivity_monitor, "QNetworkInformation", fake):
            assert connectivity.attach_platform_signals() is True

        assert connectivity.is_offline
        fake.instance.return_value.reachabilityChanged.connect.assert_called_once()

    def test_attach_seeds_online_from_platform(self, store, dispatcher):
        monitor = ConnectivityMonitor(store, dispatcher, initially_online=False)
        fake = self.fake_network_information(reachability=QNetworkInformation.Reachability.Online)
        with patch.object(connectivity_monitor, "QNetworkInformation", fake):
            monitor.attach_platform_signals()

        assert not monitor.is_offline

    def test_attach_without_backend(self, connectivity):
        fake = self.fake_network_information(backend_loaded=False)
        with patch.object(connectivity_monitor, "QNetworkInformation", fake):
            assert connectivity.attach_platform_signals() is False

        assert not connectivity.is_offline


class TestHealthCheck:

    def test_reports_without_changing_flag(self, connectivity, store, emitted):
        emitted.connect(connectivity.health_checked, 'health')
        store.reachable = False
        results = []

        connectivity.check_api_health(results.append)

        assert results == [False]
        assert emitted['health'] == [False]
        assert not connectivity.is_offline

    def test_refresh_applies_result(self, connectivity, store):
        store.reachable = False
        connectivity.refresh()
        assert connectivity.is_offline

        store.reachable = True
        connectivity.refresh()
        assert not connectivity.is_offline
