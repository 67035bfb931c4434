"""Pytest configuration and fixtures."""
import json
import threading
from unittest.mock import MagicMock

import pytest
import requests

from pyalfen import Alfen

PROPERTIES = {
    "2056_0": 42,
    "2057_0": "Watchdog",
    "2060_0": 123456,
    "2062_0": 16,
    "2221_3": 230.1,
    "2221_4": 231.2,
    "2221_5": 229.8,
    "2221_16": 11040.5,
    "2221_22": 1234567,
    "2221_A": 15.9,
    "2221_B": 16.0,
    "2221_C": 15.8,
    "2501_2": 11,
    "312E_0": 3,
}

INFO = {
    "Identity": "ACE0123456",
    "SCNNetwork": "",
    "FWVersion": "6.4.0-4210",
    "LastConfig": 1700000000,
    "Model": "NG910",
    "ObjectId": "OID-1",
    "Type": "Wallbox",
}


def make_response(status_code=200, payload=None, reason="OK"):
    r = MagicMock()
    r.status_code = status_code
    r.reason = reason
    r.json.return_value = payload
    r.text = json.dumps(payload)
    return r


class FakeAlfenHttp:
    """Stand-in for requests.Session that behaves like an Alfen charger"""

    def __init__(self, password="secret"):
        self.password = password
        self.properties = dict(PROPERTIES)
        self.logged_in = False
        self.login_status = None  # force a login status code
        self.logout_error = None  # exception raised by logout
        self.expire_next = 0  # number of requests to answer with 401
        self.fail_next = None  # exception raised by the next get
        self.calls = []
        self.sent = []  # login and logout responses handed out
        self.closed = False
        self.lock = threading.Lock()

    def mount(self, prefix, adapter):
        pass

    def close(self):
        self.closed = True

    def count(self, method, path):
        return len([c for c in self.calls if c[0] == method and c[1] == path])

    def _path(self, url):
        return "/" + url.split("://", 1)[1].split("/", 1)[1]

    def _unauthorized(self):
        if self.expire_next > 0:
            self.expire_next -= 1
            self.logged_in = False
        if not self.logged_in:
            return make_response(401, {}, "Unauthorized")
        return None

    def get(self, url, verify=True, timeout=None):
        path = self._path(url)
        with self.lock:
            self.calls.append(("GET", path.split("?")[0], path))
        if self.fail_next is not None:
            exc, self.fail_next = self.fail_next, None
            raise exc
        denied = self._unauthorized()
        if denied is not None:
            return denied
        if path.startswith("/api/prop?ids="):
            ids = path.split("=", 1)[1].split(",")
            props = [{"id": i, "access": 1, "type": 2, "len": 0, "cat": "generic", "value": self.properties[i]}
                     for i in ids if i in self.properties]
            return make_response(200, {"version": 2, "offset": 0, "total": len(props), "properties": props})
        if path == "/api/info":
            return make_response(200, dict(INFO))
        return make_response(404, {}, "Not Found")

    def post(self, url, data=None, headers=None, verify=True, timeout=None):
        path = self._path(url)
        with self.lock:
            self.calls.append(("POST", path, data))
        if path == "/api/login":
            body = json.loads(data)
            if self.login_status is not None:
                r = make_response(self.login_status, {}, "Forbidden")
            elif body == {"username": "admin", "password": self.password}:
                self.logged_in = True
                r = make_response(200, {})
            else:
                r = make_response(401, {}, "Unauthorized")
            self.sent.append(r)
            return r
        if path == "/api/logout":
            if self.logout_error is not None:
                raise self.logout_error
            self.logged_in = False
            r = make_response(200, {})
            self.sent.append(r)
            return r
        denied = self._unauthorized()
        if denied is not None:
            return denied
        if path == "/api/prop":
            for prop_id, prop in json.loads(data).items():
                self.properties[prop_id] = float(prop["value"])
            return make_response(200, {})
        return make_response(404, {}, "Not Found")


@pytest.fixture(name="http")
def fixture_http():
    return FakeAlfenHttp()


@pytest.fixture(name="charger")
def fixture_charger(http):
    return Alfen("10.0.1.50", "secret", http=http)


@pytest.fixture(name="connection_error")
def fixture_connection_error():
    return requests.exceptions.ConnectionError("connection refused")
