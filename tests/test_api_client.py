"""
Unit tests for PomodoroAPIClient
Tests: endpoints, payloads, HTTP status -> exception mapping
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests

from pomodoro_sync.Modules.Pomodoro_module import (
    PomodoroAPIClient,
    PomodoroAPIError,
    SessionNotFoundError,
    SessionConflictError,
    BackendUnreachableError,
    SessionType,
    SessionStatus,
    SessionAction,
    PomodoroSettings,
)


SESSION_PAYLOAD = {
    "id": 3,
    "type": "work",
    "status": "running",
    "startTime": "2024-05-01T10:00:00",
    "endTime": None,
    "durationMinutes": 25,
    "createdAt": "2024-05-01T10:00:00",
    "updatedAt": "2024-05-01T10:00:00",
}


def make_response(status_code=200, payload=None, text=""):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.reason = "Reason"
    if payload is None:
        response.content = text.encode()
        response.text = text
        response.json.side_effect = ValueError("no json")
    else:
        response.content = b"{...}"
        response.text = str(payload)
        response.json.return_value = payload
    return response


@pytest.fixture
def client():
    api = PomodoroAPIClient("http://localhost:5000/", timeout=3.0)
    yield api
    api.close()


class TestSessions:

    def test_create_work_session(self, client):
        with patch.object(requests.Session, "request", return_value=make_response(200, SESSION_PAYLOAD)) as request:
            session = client.create_session(SessionType.WORK, 25)

        request.assert_called_once_with(
            "POST",
            "http://localhost:5000/api/sessions/start-work",
            json={"durationMinutes": 25},
            timeout=3.0,
        )
        assert session.id == 3
        assert session.status == SessionStatus.RUNNING
        assert session.start_time == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_create_break_uses_break_endpoint(self, client):
        payload = dict(SESSION_PAYLOAD, type="break", durationMinutes=5)
        with patch.object(requests.Session, "request", return_value=make_response(200, payload)) as request:
            session = client.create_session(SessionType.BREAK, 5)

        assert request.call_args[0][1].endswith("/api/sessions/start-break")
        assert session.type == SessionType.BREAK

    def test_create_conflict(self, client):
        response = make_response(400, {"message": "Cannot start a new session while another session is active"})
        with patch.object(requests.Session, "request", return_value=response):
            with pytest.raises(SessionConflictError) as exc_info:
                client.create_session(SessionType.WORK, 25)

        assert exc_info.value.status_code == 400
        assert "another session" in str(exc_info.value)

    def test_active_session_404_is_none(self, client):
        with patch.object(requests.Session, "request", return_value=make_response(404, {"message": "No active session"})):
            assert client.get_active_session() is None

    def test_active_session(self, client):
        with patch.object(requests.Session, "request", return_value=make_response(200, SESSION_PAYLOAD)) as request:
            session = client.get_active_session()

        assert request.call_args[0] == ("GET", "http://localhost:5000/api/sessions/active")
        assert session.id == 3

    def test_transition(self, client):
        payload = dict(SESSION_PAYLOAD, status="paused", endTime="2024-05-01T10:05:00")
        with patch.object(requests.Session, "request", return_value=make_response(200, payload)) as request:
            session = client.transition_session(3, SessionAction.PAUSE)

        assert request.call_args[0] == ("POST", "http://localhost:5000/api/sessions/3/pause")
        assert session.status == SessionStatus.PAUSED
        assert session.end_time is not None

    def test_transition_not_found(self, client):
        with patch.object(requests.Session, "request", return_value=make_response(404, {"message": "Session 9 not found"})):
            with pytest.raises(SessionNotFoundError):
                client.transition_session(9, SessionAction.COMPLETE)

    def test_transition_409_conflict(self, client):
        with patch.object(requests.Session, "request", return_value=make_response(409, text="conflict")):
            with pytest.raises(SessionConflictError):
                client.transition_session(3, SessionAction.RESUME)

    def test_date_range(self, client):
        start = datetime(2024, 5, 1, tzinfo=timezone.utc)
        end = datetime(2024, 5, 1, 23, 59, 59, tzinfo=timezone.utc)
        with patch.object(requests.Session, "request", return_value=make_response(200, [SESSION_PAYLOAD])) as request:
            sessions = client.get_sessions_by_date_range(start, end)

        assert request.call_args[1]["params"] == {
            "startDate": "2024-05-01T00:00:00Z",
            "endDate": "2024-05-01T23:59:59Z",
        }
        assert [s.id for s in sessions] == [3]


class TestErrorMapping:

    @pytest.mark.parametrize("status", [500, 502, 503])
    def test_server_errors_are_unreachable(self, client, status):
        with patch.object(requests.Session, "request", return_value=make_response(status, text="boom")):
            with pytest.raises(BackendUnreachableError):
                client.get_active_session()

    def test_connection_error_is_unreachable(self, client):
        with patch.object(requests.Session, "request", side_effect=requests.exceptions.ConnectionError("refused")):
            with pytest.raises(BackendUnreachableError):
                client.create_session(SessionType.WORK, 25)

    def test_timeout_is_unreachable(self, client):
        with patch.object(requests.Session, "request", side_effect=requests.exceptions.Timeout("slow")):
            with pytest.raises(BackendUnreachableError):
                client.get_settings()

    def test_other_client_errors(self, client):
        with patch.object(requests.Session, "request", return_value=make_response(422, {"detail": "bad"})):
            with pytest.raises(PomodoroAPIError) as exc_info:
                client.get_settings()

        assert type(exc_info.value) is PomodoroAPIError
        assert exc_info.value.status_code == 422


class TestSettings:

    def test_get_settings(self, client):
        payload = {"workDuration": 50, "breakDuration": 10, "soundEnabled": False, "id": 1}
        with patch.object(requests.Session, "request", return_value=make_response(200, payload)):
            settings = client.get_settings()

        assert settings.work_duration == 50
        assert settings.break_duration == 10
        assert settings.sound_enabled is False
        assert settings.long_break_duration == 15

    def test_update_settings_sends_wire_format(self, client):
        settings = PomodoroSettings(work_duration=30, offline_mode=True)
        with patch.object(requests.Session, "request", return_value=make_response(200, settings.to_dict())) as request:
            saved = client.update_settings(settings)

        method, url = request.call_args[0]
        body = request.call_args[1]["json"]
        assert (method, url) == ("PUT", "http://localhost:5000/api/settings")
        assert body["workDuration"] == 30
        assert "offlineMode" not in body
        assert saved.offline_mode is True

    def test_reset_settings(self, client):
        with patch.object(requests.Session, "request", return_value=make_response(200, PomodoroSettings().to_dict())) as request:
            settings = client.reset_settings()

        assert request.call_args[0] == ("POST", "http://localhost:5000/api/settings/reset")
        assert settings == PomodoroSettings()


class TestHealthCheck:

    def test_healthy(self, client):
        with patch.object(requests.Session, "get", return_value=make_response(200, {"status": "Healthy"})) as get:
            assert client.health_check() is True
        get.assert_called_once_with("http://localhost:5000/api/health", timeout=5.0)

    def test_unhealthy_status(self, client):
        with patch.object(requests.Session, "get", return_value=make_response(503, text="down")):
            assert client.health_check() is False

    def test_network_error(self, client):
        with patch.object(requests.Session, "get", side_effect=requests.exceptions.ConnectionError()):
            assert client.health_check() is False
