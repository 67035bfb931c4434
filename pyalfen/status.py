import enum
import logging

from pyalfen.exceptions import UnhandledStatusCode

log = logging.getLogger(__name__)


class ChargeStatus(enum.Enum):
    """IEC 61851 vehicle state as seen by the charger"""
    NO_VEHICLE = "A"
    CONNECTED = "B"
    CHARGING = "C"
    ERROR = "E"


class DeviceState(enum.IntEnum):
    # see https://github.com/leeyuentuen/alfen_wallbox/blob/master/custom_components/alfen_wallbox/sensor.py
    AVAILABLE = 4
    CABLE_CONNECTED = 7
    EV_CONNECTED = 8
    PREPARING_CHARGING = 9
    WAIT_VEHICLE_CHARGING = 10
    CHARGING_NORMAL = 11
    FINISH_WAIT_VEHICLE = 16
    FINISH_WAIT_DISCONNECT = 17
    ERROR_CHARGING = 21
    ERROR_TOO_MANY_RESTARTS = 26
    INOPERATIVE = 34
    LOAD_BALANCING_FORCED_OFF = 36


STATUS_MAP = {
    DeviceState.AVAILABLE: ChargeStatus.NO_VEHICLE,
    DeviceState.CABLE_CONNECTED: ChargeStatus.CONNECTED,
    DeviceState.EV_CONNECTED: ChargeStatus.CONNECTED,
    DeviceState.PREPARING_CHARGING: ChargeStatus.CONNECTED,
    DeviceState.WAIT_VEHICLE_CHARGING: ChargeStatus.CONNECTED,
    DeviceState.FINISH_WAIT_VEHICLE: ChargeStatus.CONNECTED,
    DeviceState.FINISH_WAIT_DISCONNECT: ChargeStatus.CONNECTED,
    DeviceState.LOAD_BALANCING_FORCED_OFF: ChargeStatus.CONNECTED,
    DeviceState.CHARGING_NORMAL: ChargeStatus.CHARGING,
    DeviceState.ERROR_CHARGING: ChargeStatus.ERROR,
    DeviceState.ERROR_TOO_MANY_RESTARTS: ChargeStatus.ERROR,
    DeviceState.INOPERATIVE: ChargeStatus.ERROR,
}


def map_status(raw_code) -> ChargeStatus:
    """
    Map a raw charger state code to a ChargeStatus

    Unknown codes raise UnhandledStatusCode instead of falling back to a
    default category.
    """
    code = raw_code
    # JSON numbers may arrive as 11.0
    if isinstance(code, float) and code.is_integer():
        code = int(code)
    if isinstance(code, bool) or not isinstance(code, int):
        raise UnhandledStatusCode(raw_code)
    status = STATUS_MAP.get(code)
    if status is None:
        raise UnhandledStatusCode(raw_code)
    log.debug(f"mapped value {raw_code} to status {status.value}")
    return status
