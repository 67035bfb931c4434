# pyAlfen Module - Session Manager
# -*- coding: utf-8 -*-
"""
 Authenticated session with the Alfen wallbox

 The charger keeps a cookie based login session that it may drop at any
 time. Every request goes through execute_authenticated() which holds one
 lock for the whole "request -> 401 -> login -> retry" sequence, so two
 callers can never race to log in and invalidate each other.

 Classes
    SessionState                # IDLE, AUTHENTICATING, AUTHENTICATED
    SessionManager(uri, password, timeout, poolmaxsize, http)

 Functions
    login()                     # Log in, raises AuthenticationError
    logout()                    # Best effort log out, returns True on success
    execute_authenticated(fn)   # Run one request with single re-login on 401
    get(api) / post(api, data)  # Raw requests against the charger (no auth handling)
"""
import enum
import json
import logging
import threading
from http import HTTPStatus
from typing import Callable, Optional, Union, Tuple

import requests
from requests import Response

from pyalfen.exceptions import AlfenTransportError, AuthenticationError

log = logging.getLogger(__name__)

ALFEN_CONTENT_TYPE = "alfen/json; charset=utf-8"
ALFEN_USERNAME = "admin"


class SessionState(enum.Enum):
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class SessionManager:

    def __init__(self, uri: str, password: str, timeout: Union[int, Tuple[int, int]] = 5,
                 poolmaxsize: int = 10, http: Optional[requests.Session] = None):
        self.uri = uri.rstrip("/")
        self.password = password
        self.timeout = timeout
        self.state = SessionState.IDLE
        self._lock = threading.Lock()  # serializes all device traffic
        self._owns_http = http is None
        if http is None:
            # Create session object for http connection re-use and cookie persistence
            http = requests.Session()
            # noinspection PyUnresolvedReferences
            a = requests.adapters.HTTPAdapter(pool_maxsize=max(poolmaxsize, 1))
            http.mount('https://', a)
            http.mount('http://', a)
        self.http = http

    @property
    def authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    def get(self, api: str) -> Response:
        return self.http.get(self.uri + api, verify=False, timeout=self.timeout)

    def post(self, api: str, data: Optional[str] = None) -> Response:
        return self.http.post(self.uri + api, data=data, headers={'Content-Type': ALFEN_CONTENT_TYPE},
                              verify=False, timeout=self.timeout)

    def login(self):
        with self._lock:
            self._login()

    def _login(self):
        log.debug('start of login')
        self.state = SessionState.AUTHENTICATING
        pload = json.dumps({"username": ALFEN_USERNAME, "password": self.password})
        try:
            r = self.post('/api/login', pload)
        except requests.RequestException as exc:
            self.state = SessionState.IDLE
            log.debug(f'error during login: {exc}')
            raise AuthenticationError(f"Unable to connect to Alfen charger at {self.uri}: {exc}") from exc
        try:
            if r.status_code != HTTPStatus.OK:
                self.state = SessionState.IDLE
                raise AuthenticationError(f"login failed: {r.status_code} {r.reason}")
        finally:
            r.close()
        self.state = SessionState.AUTHENTICATED
        log.debug('end of login')

    def logout(self) -> bool:
        """Log out of the charger, failures are logged and reported as False"""
        with self._lock:
            log.debug('start of logout')
            self.state = SessionState.IDLE
            try:
                r = self.post('/api/logout')
            except requests.RequestException as exc:
                log.warning(f'logout failed: {exc}')
                return False
            try:
                if r.status_code != HTTPStatus.OK:
                    log.warning(f'logout failed: {r.status_code} {r.reason}')
                    return False
            finally:
                r.close()
            log.debug('end of logout')
            return True

    def close(self):
        """Close the http session if it was created here"""
        if self._owns_http:
            log.debug('closing http session')
            self.http.close()

    def _send(self, action: Callable[[], Response]) -> Response:
        try:
            return action()
        except requests.RequestException as exc:
            log.debug(f'ERROR request to Alfen charger at {self.uri} failed: {exc}')
            raise AlfenTransportError(f"Request to Alfen charger at {self.uri} failed: {exc}") from exc

    def execute_authenticated(self, action: Callable[[], Response]) -> Response:
        """
        Run action() with the session lock held

        On a 401 response log in again and run action() once more. The second
        response is returned whatever its status.
        """
        with self._lock:
            r = self._send(action)
            if r.status_code == HTTPStatus.UNAUTHORIZED:
                # re-authenticate and retry in case of a logout
                log.warning('Session no longer valid - re-authenticating')
                self.state = SessionState.IDLE
                r.close()
                self._login()
                r = self._send(action)
            return r
