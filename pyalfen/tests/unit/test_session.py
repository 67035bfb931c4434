import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from pyalfen.exceptions import AlfenTransportError, AuthenticationError
from pyalfen.session import ALFEN_CONTENT_TYPE, SessionManager, SessionState
from conftest import FakeAlfenHttp, make_response


@pytest.fixture(name="manager")
def fixture_manager(http):
    return SessionManager("https://10.0.1.50/", "secret", timeout=3, http=http)


def test_login_wire_format():
    http = MagicMock()
    http.post.return_value = make_response(200, {})
    manager = SessionManager("https://10.0.1.50", "p\"w<d>", timeout=3, http=http)
    manager.login()
    args, kwargs = http.post.call_args
    assert args[0] == "https://10.0.1.50/api/login"
    assert json.loads(kwargs["data"]) == {"username": "admin", "password": "p\"w<d>"}
    assert kwargs["headers"] == {"Content-Type": ALFEN_CONTENT_TYPE}
    assert kwargs["verify"] is False
    assert kwargs["timeout"] == 3
    assert manager.state is SessionState.AUTHENTICATED


def test_login_rejected(manager, http):
    http.login_status = 403
    with pytest.raises(AuthenticationError):
        manager.login()
    assert manager.state is SessionState.IDLE


def test_login_unreachable(connection_error):
    http = MagicMock()
    http.post.side_effect = connection_error
    manager = SessionManager("https://10.0.1.50", "secret", http=http)
    with pytest.raises(AuthenticationError) as excinfo:
        manager.login()
    assert excinfo.value.__cause__ is connection_error
    assert not manager.authenticated


def test_expired_session_relogs_and_retries_once(manager, http):
    manager.login()
    http.expire_next = 1
    r = manager.execute_authenticated(lambda: manager.get("/api/info"))
    assert r.status_code == 200
    assert http.count("GET", "/api/info") == 2
    assert http.count("POST", "/api/login") == 2  # initial login + re-login
    assert manager.state is SessionState.AUTHENTICATED


def test_relogin_failure_stops_without_retry(manager, http):
    http.expire_next = 1
    http.login_status = 500
    with pytest.raises(AuthenticationError):
        manager.execute_authenticated(lambda: manager.get("/api/info"))
    assert http.count("GET", "/api/info") == 1
    assert http.count("POST", "/api/login") == 1


def test_second_401_is_returned_not_retried():
    http = FakeAlfenHttp()
    manager = SessionManager("https://10.0.1.50", "secret", http=http)
    # every fetch is answered with 401, even right after a login
    http.expire_next = 10
    r = manager.execute_authenticated(lambda: manager.get("/api/info"))
    assert r.status_code == 401
    assert http.count("GET", "/api/info") == 2
    assert http.count("POST", "/api/login") == 1


def test_transport_error_is_wrapped_and_not_retried(manager, http, connection_error):
    manager.login()
    http.fail_next = connection_error
    with pytest.raises(AlfenTransportError) as excinfo:
        manager.execute_authenticated(lambda: manager.get("/api/info"))
    assert excinfo.value.__cause__ is connection_error
    assert http.count("GET", "/api/info") == 1


def test_logout_is_best_effort(manager, http):
    manager.login()
    assert manager.logout() is True
    assert manager.state is SessionState.IDLE
    http.logout_error = requests.exceptions.Timeout("timed out")
    assert manager.logout() is False
    assert manager.state is SessionState.IDLE


def test_logout_bad_status():
    http = MagicMock()
    http.post.return_value = make_response(500, {}, "Internal Server Error")
    manager = SessionManager("https://10.0.1.50", "secret", http=http)
    assert manager.logout() is False
    args, kwargs = http.post.call_args
    assert args[0] == "https://10.0.1.50/api/logout"
    assert kwargs["data"] is None


def test_password_not_logged(manager, caplog):
    caplog.set_level("DEBUG", logger="pyalfen")
    manager.login()
    manager.logout()
    assert "secret" not in caplog.text


def test_login_and_logout_responses_are_closed(manager, http):
    manager.login()
    manager.logout()
    http.login_status = 403
    with pytest.raises(AuthenticationError):
        manager.login()
    assert len(http.sent) == 3
    for r in http.sent:
        r.close.assert_called_once()


def test_close_only_closes_own_http_session(manager, http):
    manager.close()
    assert not http.closed
    own = FakeAlfenHttp()
    with patch("pyalfen.session.requests.Session", return_value=own):
        manager = SessionManager("https://10.0.1.50", "secret")
    manager.close()
    assert own.closed
