# pyAlfen Module
# -*- coding: utf-8 -*-
"""
 Python module to interface with the local HTTP API of Alfen EV chargers (Eve wallboxes)

 Features
    * Cookie based login with transparent re-login when the charger drops the session
    * One lock per charger so re-authentication never races another request
    * Will cache property reads for 5s so many readings share one call to the charger
    * Concurrent readers of an expired cache wait for a single refresh
    * Will re-use http connections to the charger for reduced load
    * Accepts the self-signed certificates used by the chargers

 Classes
    Alfen(host, password, timeout, cacheexpire, poolmaxsize, property_ids, http, autoconnect)

 Parameters
    host                      # Hostname, IP or URI of the charger (https:// is assumed)
    password                  # Password of the "admin" user
    timeout = 5               # Timeout for HTTPS calls in seconds
    cacheexpire = 5           # Set property cache timeout in seconds
    poolmaxsize = 10          # Pool max size for http connection re-use
    property_ids = READ_PROPS # Property ids fetched on every cache refresh
    http = None               # Optional requests.Session to use
    autoconnect = True        # Log in while constructing

 Functions
    read_numeric_property(id) # Return a number property from the cache
    read_string_property(id)  # Return a string property from the cache
    write_property(id, value) # Write one property (bypasses the cache)
    info()                    # Return DeviceInfo (model, firmware, object id)
    status()                  # Return ChargeStatus
    enabled()                 # True if the current limit is above the switch off current
    enable(enable)            # Set the current limit to 16A (True) or 5A (False)
    max_current(current)      # Set the station current limit in A
    get_max_current()         # Return the station current limit in A
    get_phases()              # Return the allowed phases of connector 1
    set_phases(phases)        # Switch between 1 and 3 phase charging
    current_power()           # Return active power in W
    total_energy()            # Return meter reading in kWh
    currents()                # Return (L1, L2, L3) currents in A
    voltages()                # Return (L1, L2, L3) voltages in V
    bootups() / boot_reason() / uptime()
    diagnose()                # Return dictionary of identity and boot data
    is_connected()            # Returns True if properties can be read
    shutdown()                # Reset to 3 phases and 16A then log out (never raises)

 Requirements
    This module requires the following modules: requests, urllib3
    pip install requests urllib3
"""
import json
import logging
import sys
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Sequence, Tuple, Union

# noinspection PyPackageRequirements
import urllib3
from requests import Response

from pyalfen.cache import PropertyCache
from pyalfen.config import AlfenConfig, default_scheme
from pyalfen.exceptions import (PyAlfenException, AlfenApiError, UnauthorizedRetryExhausted,
                                AlfenTransportError, AuthenticationError, PropertyNotFound,
                                PropertyTypeError, UnhandledStatusCode, InvalidConfigurationParameter)
from pyalfen.properties import (PropertySnapshot, PropertyValue, get_property, READ_PROPS, BOOTUPS,
                                BOOT_REASON, UPTIME, MAX_STATION_CURRENT, VOLTAGE_L1_SOCKET1,
                                VOLTAGE_L2_SOCKET1, VOLTAGE_L3_SOCKET1, ACTIVE_POWER_TOTAL,
                                METER_READING_SOCKET1, CURRENT_L1_SOCKET1, CURRENT_L2_SOCKET1,
                                CURRENT_L3_SOCKET1, STATE, CONNECTOR1_MAX_ALLOWED_PHASES,
                                LOAD_BALANCING_ENABLE_PHASE_SWITCHING, INSTALLATION_MAX_ALLOWED_PHASES)
from pyalfen.session import SessionManager, SessionState
from pyalfen.status import ChargeStatus, map_status

version_tuple = (0, 1, 0)
version = __version__ = '%d.%d.%d' % version_tuple

urllib3.disable_warnings()  # Disable SSL warnings

log = logging.getLogger(__name__)
log.debug('%s version %s', __name__, __version__)
log.debug('Python %s on %s', sys.version, sys.platform)

STATUS_ON = "1"
SWITCH_OFF_CURRENT = 5  # A, "disabled" is any current limit at or below this
MAX_CURRENT = 16  # A


def set_debug(toggle=True, color=True):
    """Enable verbose logging"""
    if toggle:
        if color:
            logging.basicConfig(format='\x1b[31;1m%(levelname)s:%(message)s\x1b[0m', level=logging.DEBUG)
        else:
            logging.basicConfig(format='%(levelname)s:%(message)s', level=logging.DEBUG)
        log.setLevel(logging.DEBUG)
        log.debug("%s [%s]\n" % (__name__, __version__))
    else:
        log.setLevel(logging.NOTSET)


@dataclass(frozen=True)
class DeviceInfo:
    identity: str = ""
    scn_network: str = ""
    firmware_version: str = ""
    last_config: int = 0
    model: str = ""
    object_id: str = ""
    type: str = ""

    @classmethod
    def from_json(cls, payload: dict) -> "DeviceInfo":
        return cls(identity=payload.get("Identity", ""), scn_network=payload.get("SCNNetwork", ""),
                   firmware_version=payload.get("FWVersion", ""), last_config=payload.get("LastConfig", 0),
                   model=payload.get("Model", ""), object_id=payload.get("ObjectId", ""),
                   type=payload.get("Type", ""))


def stringify(value: Any) -> str:
    """Format a value the way the charger expects it in a property write"""
    if isinstance(value, bool):
        return STATUS_ON if value else "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# pylint: disable=too-many-public-methods
class Alfen(object):
    def __init__(self, host: str, password: str = "", timeout: Union[int, Tuple[int, int]] = 5,
                 cacheexpire: float = 5, poolmaxsize: int = 10, property_ids: Sequence[str] = READ_PROPS,
                 http=None, autoconnect: bool = True):
        """
        Represents one Alfen charger.

        Args:
            host         = Hostname, IP or URI of the charger (e.g. 10.0.1.99)
            password     = Password of the "admin" user
            timeout      = Seconds for the timeout on http requests
            cacheexpire  = Seconds to expire the cached property snapshot
            poolmaxsize  = Pool max size for http connection re-use
            property_ids = Property ids fetched on every cache refresh
            http         = Optional requests.Session (a new one is created if None)
            autoconnect  = If True, log in now and raise AuthenticationError on failure
        """
        self.uri = default_scheme(host)
        self.timeout = timeout
        self.cacheexpire = cacheexpire
        self.property_ids = tuple(property_ids)
        self.session = SessionManager(self.uri, password, timeout=timeout, poolmaxsize=poolmaxsize, http=http)
        self.cache = PropertyCache(self._fetch_properties, cacheexpire)
        if autoconnect:
            try:
                self.session.login()
            except PyAlfenException:
                self.session.close()
                raise

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()

    def is_connected(self) -> bool:
        """Return True if able to read properties from the charger"""
        try:
            self.cache.get_snapshot()
            return True
        except PyAlfenException as exc:
            log.debug(f"Unable to read properties: {exc}")
            return False

    # Gateway

    def _check_response(self, r: Response, what: str):
        if r.status_code == HTTPStatus.UNAUTHORIZED:
            raise UnauthorizedRetryExhausted(f"error {what}: still unauthorized after re-authenticating")
        if r.status_code != HTTPStatus.OK:
            raise AlfenApiError(f"error {what}: {r.status_code} {r.reason}", status_code=r.status_code)

    def _json(self, r: Response, what: str) -> dict:
        self._check_response(r, what)
        try:
            payload = r.json()
        except ValueError as exc:
            raise AlfenApiError(f"error {what}: unable to parse '{r.text}' as JSON: {exc}",
                                status_code=r.status_code) from exc
        if not isinstance(payload, dict):
            raise AlfenApiError(f"error {what}: unexpected payload {payload!r}", status_code=r.status_code)
        return payload

    def _fetch_properties(self) -> PropertySnapshot:
        log.debug('start of getProperties')
        api = "/api/prop?ids=" + ",".join(self.property_ids)
        r = self.session.execute_authenticated(lambda: self.session.get(api))
        snapshot = PropertySnapshot.from_json(self._json(r, "getting properties"))
        log.debug('end of getProperties')
        return snapshot

    def get_property(self, property_id: str) -> PropertyValue:
        return get_property(self.cache.get_snapshot(), property_id)

    def read_numeric_property(self, property_id: str) -> float:
        return self.get_property(property_id).as_number()

    def read_string_property(self, property_id: str) -> str:
        return self.get_property(property_id).as_string()

    def write_property(self, property_id: str, value: Any):
        """
        Write a single property

        The read cache is left alone, so reads may show the old value until the
        cached snapshot expires.
        """
        value = stringify(value)
        log.debug(f'start of setProperty {property_id} to {value}')
        data = json.dumps({property_id: {"id": property_id, "value": value}})
        r = self.session.execute_authenticated(lambda: self.session.post("/api/prop", data))
        if r.status_code == HTTPStatus.UNAUTHORIZED:
            raise UnauthorizedRetryExhausted(f"error setting property {property_id}: still unauthorized "
                                             "after re-authenticating")
        log.debug(f'end of setProperty {property_id} to {value}')

    def info(self) -> DeviceInfo:
        """Return charger identity, never cached"""
        log.debug('start of getInfo')
        r = self.session.execute_authenticated(lambda: self.session.get("/api/info"))
        info = DeviceInfo.from_json(self._json(r, "getting info"))
        log.debug('end of getInfo')
        return info

    # Charger

    def status(self) -> ChargeStatus:
        return map_status(self.get_property(STATE).raw)

    def enabled(self) -> bool:
        return self.read_numeric_property(MAX_STATION_CURRENT) > SWITCH_OFF_CURRENT

    def enable(self, enable: bool = True):
        if enable:
            self.max_current(MAX_CURRENT)
        else:
            self.max_current(SWITCH_OFF_CURRENT)

    def max_current(self, current: int):
        self.write_property(MAX_STATION_CURRENT, current)

    def get_max_current(self) -> float:
        return self.read_numeric_property(MAX_STATION_CURRENT)

    def get_phases(self) -> int:
        return int(self.read_numeric_property(CONNECTOR1_MAX_ALLOWED_PHASES))

    def set_phases(self, phases: int):
        """
        Switch phases: enable phase switching, then set the allowed phases

        Nothing is rolled back if the second write fails after the first one
        went through.
        """
        self.write_property(LOAD_BALANCING_ENABLE_PHASE_SWITCHING, STATUS_ON)
        self.write_property(INSTALLATION_MAX_ALLOWED_PHASES, phases)

    def current_power(self) -> float:
        return self.read_numeric_property(ACTIVE_POWER_TOTAL)

    def total_energy(self) -> float:
        """Meter reading in kWh"""
        return self.read_numeric_property(METER_READING_SOCKET1) / 1000

    def currents(self) -> Tuple[float, float, float]:
        return (self.read_numeric_property(CURRENT_L1_SOCKET1),
                self.read_numeric_property(CURRENT_L2_SOCKET1),
                self.read_numeric_property(CURRENT_L3_SOCKET1))

    def voltages(self) -> Tuple[float, float, float]:
        return (self.read_numeric_property(VOLTAGE_L1_SOCKET1),
                self.read_numeric_property(VOLTAGE_L2_SOCKET1),
                self.read_numeric_property(VOLTAGE_L3_SOCKET1))

    def bootups(self) -> int:
        return int(self.read_numeric_property(BOOTUPS))

    def boot_reason(self) -> str:
        return self.read_string_property(BOOT_REASON)

    def uptime(self) -> int:
        return int(self.read_numeric_property(UPTIME))

    def diagnose(self) -> dict:
        """
        Return identity and boot information

        The info call must succeed, boot statistics are left out when they
        cannot be read.
        """
        info = self.info()
        output = {
            'model': info.model,
            'firmware': info.firmware_version,
            'object_id': info.object_id,
        }
        for name, getter in (('bootups', self.bootups), ('boot_reason', self.boot_reason),
                             ('uptime', self.uptime)):
            try:
                output[name] = getter()
            except PyAlfenException as exc:
                log.debug(f"Unable to read {name}: {exc}")
        return output

    def shutdown(self):
        """Reset the charger to 3 phases and full current, then log out and close the http session. Never raises."""
        log.debug("resetting charger to 3p")
        try:
            self.set_phases(3)
        except PyAlfenException as exc:
            log.error(f"Unable to reset charger to 3p: {exc}")
        log.debug(f"resetting charger current to {MAX_CURRENT}A")
        try:
            self.max_current(MAX_CURRENT)
        except PyAlfenException as exc:
            log.error(f"Unable to reset charger current to {MAX_CURRENT}A: {exc}")
        self.session.logout()
        self.session.close()


def new_alfen(config: AlfenConfig, http=None, autoconnect: bool = True) -> Alfen:
    """Create an Alfen client from an AlfenConfig"""
    return Alfen(config.uri, config.password, timeout=config.timeout, cacheexpire=config.cacheexpire,
                 poolmaxsize=config.poolmaxsize, property_ids=config.property_ids, http=http,
                 autoconnect=autoconnect)
