# pyAlfen Module - Property Model
# -*- coding: utf-8 -*-
"""
 Alfen wallbox property model

 The charger exposes its state and settings as a flat list of properties
 identified by "<object>_<index>" ids. One bulk GET /api/prop returns a
 page of them:

    {"version": 2, "offset": 0, "total": 14,
     "properties": [{"id": "2501_2", "access": 1, "type": 5, "len": 0,
                     "cat": "generic", "value": 11}, ...]}

 Classes
    Property            # One wire property
    PropertySnapshot    # Immutable result of one bulk fetch
    PropertyValue       # Tagged scalar value (number, string or boolean)

 Functions
    get_property(snapshot, id)  # Find a property value in a snapshot
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Tuple, Union

from pyalfen.exceptions import AlfenApiError, PropertyNotFound, PropertyTypeError

log = logging.getLogger(__name__)

# Read only properties
BOOTUPS = "2056_0"
BOOT_REASON = "2057_0"
UPTIME = "2060_0"
MAX_STATION_CURRENT = "2062_0"
VOLTAGE_L1_SOCKET1 = "2221_3"
VOLTAGE_L2_SOCKET1 = "2221_4"
VOLTAGE_L3_SOCKET1 = "2221_5"
ACTIVE_POWER_TOTAL = "2221_16"
METER_READING_SOCKET1 = "2221_22"
CURRENT_L1_SOCKET1 = "2221_A"
CURRENT_L2_SOCKET1 = "2221_B"
CURRENT_L3_SOCKET1 = "2221_C"
STATE = "2501_2"
CONNECTOR1_MAX_ALLOWED_PHASES = "312E_0"

# Properties fetched together on every cache refresh
READ_PROPS = (
    BOOTUPS,
    BOOT_REASON,
    UPTIME,
    MAX_STATION_CURRENT,
    VOLTAGE_L1_SOCKET1,
    VOLTAGE_L2_SOCKET1,
    VOLTAGE_L3_SOCKET1,
    ACTIVE_POWER_TOTAL,
    METER_READING_SOCKET1,
    CURRENT_L1_SOCKET1,
    CURRENT_L2_SOCKET1,
    CURRENT_L3_SOCKET1,
    STATE,
    CONNECTOR1_MAX_ALLOWED_PHASES,
)

# Writable properties
LOAD_BALANCING_ENABLE_PHASE_SWITCHING = "2185_0"
INSTALLATION_MAX_ALLOWED_PHASES = "2189_0"


class ValueKind(enum.Enum):
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class PropertyValue:
    """A property value tagged with its scalar kind"""
    kind: ValueKind
    raw: Union[float, int, str, bool]
    property_id: str = ""

    @classmethod
    def from_wire(cls, value: Any, property_id: str = "") -> "PropertyValue":
        # bool is a subclass of int, test it first
        if isinstance(value, bool):
            return cls(ValueKind.BOOLEAN, value, property_id)
        if isinstance(value, (int, float)):
            return cls(ValueKind.NUMBER, value, property_id)
        if isinstance(value, str):
            return cls(ValueKind.STRING, value, property_id)
        raise PropertyTypeError(f"property {property_id} has unsupported value {value!r}")

    def _expect(self, kind: ValueKind):
        if self.kind is not kind:
            raise PropertyTypeError(f"property {self.property_id} is a {self.kind.value}, "
                                    f"not a {kind.value}: {self.raw!r}")

    def as_number(self) -> float:
        self._expect(ValueKind.NUMBER)
        return float(self.raw)

    def as_string(self) -> str:
        self._expect(ValueKind.STRING)
        return self.raw

    def as_bool(self) -> bool:
        self._expect(ValueKind.BOOLEAN)
        return self.raw


@dataclass(frozen=True)
class Property:
    id: str
    value: Any
    access: int = 0
    type: int = 0
    len: int = 0
    cat: str = ""

    @classmethod
    def from_json(cls, data: dict) -> "Property":
        return cls(id=data["id"], value=data.get("value"), access=data.get("access", 0),
                   type=data.get("type", 0), len=data.get("len", 0), cat=data.get("cat", ""))


@dataclass(frozen=True)
class PropertySnapshot:
    """Properties returned by one bulk fetch, never mutated after creation"""
    properties: Tuple[Property, ...] = ()
    version: int = 0
    offset: int = 0
    total: int = 0

    @classmethod
    def from_json(cls, payload: dict) -> "PropertySnapshot":
        try:
            props = tuple(Property.from_json(p) for p in payload.get("properties") or [])
            return cls(properties=props, version=payload.get("version", 0),
                       offset=payload.get("offset", 0), total=payload.get("total", 0))
        except (AttributeError, KeyError, TypeError) as exc:
            raise AlfenApiError(f"unable to parse properties payload {payload!r}: {exc}") from exc

    def ids(self) -> Tuple[str, ...]:
        return tuple(p.id for p in self.properties)


def get_property(snapshot: PropertySnapshot, property_id: str) -> PropertyValue:
    """
    Return the value of the first property matching property_id

    Raises PropertyNotFound carrying the id and the snapshot if it is absent.
    """
    for prop in snapshot.properties:
        if prop.id == property_id:
            return PropertyValue.from_wire(prop.value, property_id)
    log.debug('ERROR unable to find %s in snapshot: %r' % (property_id, snapshot))
    raise PropertyNotFound(property_id, snapshot)
