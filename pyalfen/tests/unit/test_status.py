import pytest

from pyalfen.exceptions import UnhandledStatusCode
from pyalfen.status import ChargeStatus, DeviceState, map_status


def test_charging():
    assert map_status(11) == ChargeStatus.CHARGING


def test_available_means_no_vehicle():
    assert map_status(4) == ChargeStatus.NO_VEHICLE


@pytest.mark.parametrize("code", [7, 8, 9, 10, 16, 17, 36])
def test_connected_states(code):
    assert map_status(code) == ChargeStatus.CONNECTED


@pytest.mark.parametrize("code", [21, 26, 34])
def test_error_states(code):
    assert map_status(code) == ChargeStatus.ERROR


def test_integral_float_from_json():
    assert map_status(11.0) == ChargeStatus.CHARGING
    assert map_status(DeviceState.INOPERATIVE) == ChargeStatus.ERROR


@pytest.mark.parametrize("code", [999, 0, 5, 11.5, "11", None, True])
def test_unknown_codes_are_not_defaulted(code):
    with pytest.raises(UnhandledStatusCode) as excinfo:
        map_status(code)
    assert excinfo.value.code == code
    assert "unhandled status" in str(excinfo.value)
