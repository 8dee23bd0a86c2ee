"""
Tracked object records parsed from the Space-Track satellite catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from shared.errors import ParseError, ValidationError
from shared.logging import get_logger


logger = get_logger("satcat.catalog.models")


class ObjectType(Enum):
    """Classification of a tracked object."""

    ROCKET_BODY = "RocketBody"
    PAYLOAD = "Payload"
    DEBRIS = "Debris"
    UNKNOWN = "Unknown"

    @classmethod
    def from_wire(cls, value: Any) -> "ObjectType":
        """Map a remote ``OBJECT_TYPE`` value; unrecognised values become UNKNOWN."""
        object_type = _WIRE_OBJECT_TYPES.get(value) if isinstance(value, str) else None
        if object_type is None:
            logger.warning("Unknown object type, mapping to Unknown", object_type=value)
            return cls.UNKNOWN
        return object_type

    @classmethod
    def parse(cls, name: str) -> "ObjectType":
        """Parse a public or wire name, case-insensitively."""
        key = name.strip().upper().replace("_", " ")
        for object_type in cls:
            if key == object_type.value.upper() or key == object_type.name.replace("_", " "):
                return object_type
        raise ValidationError(
            f"Unknown object type: {name!r}",
            details={"object_type": name, "allowed": [object_type.value for object_type in cls]},
        )


_WIRE_OBJECT_TYPES = {
    "ROCKET BODY": ObjectType.ROCKET_BODY,
    "PAYLOAD": ObjectType.PAYLOAD,
    "DEBRIS": ObjectType.DEBRIS,
    "UNKNOWN": ObjectType.UNKNOWN,
}

ORBIT_FIELDS = ("PERIOD", "INCLINATION", "APOGEE", "PERIGEE")


@dataclass(frozen=True)
class OrbitSummary:
    """Period (minutes), inclination (degrees), apogee and perigee (km)."""

    period: float
    inclination: float
    apogee: float
    perigee: float

    @classmethod
    def from_wire(cls, record: Mapping[str, Any]) -> Optional["OrbitSummary"]:
        """
        Build the summary only when all four orbit fields are present and
        numeric. A malformed orbit leaves the summary absent; the object
        itself is still catalogued.
        """
        if any(record.get(field) is None for field in ORBIT_FIELDS):
            return None
        try:
            return cls(
                period=_parse_float(record["PERIOD"], "PERIOD"),
                inclination=_parse_float(record["INCLINATION"], "INCLINATION"),
                apogee=_parse_float(record["APOGEE"], "APOGEE"),
                perigee=_parse_float(record["PERIGEE"], "PERIGEE"),
            )
        except ParseError as exc:
            logger.warning(
                "Malformed orbit fields, dropping orbit summary",
                object_id=record.get("NORAD_CAT_ID"),
                error=exc.message,
                details=exc.details,
            )
            return None


@dataclass(frozen=True)
class TrackedObject:
    """A single entry of the satellite catalog."""

    object_id: int
    object_type: ObjectType
    name: str
    launch: str
    decay: Optional[str] = None
    orbit: Optional[OrbitSummary] = None

    @classmethod
    def from_wire(cls, record: Mapping[str, Any]) -> "TrackedObject":
        """Parse one element of the remote satcat JSON array."""
        if not isinstance(record, Mapping):
            raise ParseError("Catalog record is not an object", details={"record": repr(record)[:200]})

        name = record.get("OBJECT_NAME")
        launch = record.get("LAUNCH")
        decay = record.get("DECAY")
        if not isinstance(name, str):
            raise ParseError("Catalog record missing OBJECT_NAME", details={"record": dict(record)})
        if not isinstance(launch, str):
            raise ParseError("Catalog record missing LAUNCH", details={"record": dict(record)})
        if decay is not None and not isinstance(decay, str):
            raise ParseError("Catalog record has malformed DECAY", details={"decay": decay})

        return cls(
            object_id=_parse_object_id(record.get("NORAD_CAT_ID")),
            object_type=ObjectType.from_wire(record.get("OBJECT_TYPE")),
            name=name,
            launch=launch,
            decay=decay,
            orbit=OrbitSummary.from_wire(record),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the remote field names, as served to clients."""
        payload: Dict[str, Any] = {
            "NORAD_CAT_ID": self.object_id,
            "OBJECT_TYPE": self.object_type.value,
            "OBJECT_NAME": self.name,
            "LAUNCH": self.launch,
            "DECAY": self.decay,
        }
        if self.orbit is not None:
            payload.update(
                PERIOD=self.orbit.period,
                INCLINATION=self.orbit.inclination,
                APOGEE=self.orbit.apogee,
                PERIGEE=self.orbit.perigee,
            )
        return payload


def _parse_object_id(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        object_id = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        object_id = int(value.strip())
    else:
        raise ParseError("Malformed NORAD_CAT_ID", details={"value": value})

    if object_id <= 0:
        raise ParseError("NORAD_CAT_ID must be positive", details={"value": value})
    return object_id


def _parse_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise ParseError(f"Malformed {field}", details={"value": value})
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"Malformed {field}", details={"value": value}) from exc
