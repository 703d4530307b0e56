# edgex_bridge/model/event.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from edgex_bridge.core.errors import EventDecodeError

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class Reading:
    """
    One named telemetry value with its provenance.

    Timestamps are milliseconds since epoch as sent by the device service.
    """
    id: str = ""
    name: str = ""
    value: str = ""
    device: str = ""
    created: int = 0
    modified: int = 0
    origin: int = 0
    pushed: int = 0

    def meta(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "created": self.created,
            "modified": self.modified,
            "origin": self.origin,
            "pushed": self.pushed,
            "device": self.device,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any], *, where: str = "reading") -> "Reading":
        return cls(
            id=_get_str(d, "id", where),
            name=_get_str(d, "name", where),
            value=_get_str(d, "value", where),
            device=_get_str(d, "device", where),
            created=_get_int(d, "created", where),
            modified=_get_int(d, "modified", where),
            origin=_get_int(d, "origin", where),
            pushed=_get_int(d, "pushed", where),
        )


@dataclass(frozen=True)
class Event:
    """
    A telemetry envelope: one device, an ordered sequence of readings.
    """
    id: str = ""
    device: str = ""
    created: int = 0
    modified: int = 0
    origin: int = 0
    pushed: int = 0
    readings: Tuple[Reading, ...] = field(default_factory=tuple)

    def meta(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "pushed": self.pushed,
            "device": self.device,
            "created": self.created,
            "modified": self.modified,
            "origin": self.origin,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Event":
        raw_readings = _lookup(d, "readings")
        if raw_readings is None:
            raw_readings = []
        if not isinstance(raw_readings, list):
            raise EventDecodeError(
                f"event.readings: expected array, got {type(raw_readings).__name__}"
            )

        readings = []
        for i, r in enumerate(raw_readings):
            where = f"event.readings[{i}]"
            if r is None:
                readings.append(Reading())
                continue
            if not isinstance(r, dict):
                raise EventDecodeError(f"{where}: expected object, got {type(r).__name__}")
            readings.append(Reading.from_dict(r, where=where))

        return cls(
            id=_get_str(d, "id", "event"),
            device=_get_str(d, "device", "event"),
            created=_get_int(d, "created", "event"),
            modified=_get_int(d, "modified", "event"),
            origin=_get_int(d, "origin", "event"),
            pushed=_get_int(d, "pushed", "event"),
            readings=tuple(readings),
        )

    @classmethod
    def from_json(cls, raw: bytes | str) -> "Event":
        """
        Decode one serialized event (one message frame).

        Raises EventDecodeError for invalid JSON, a non-object root or
        mistyped fields. Missing or null fields keep their zero values and
        unknown fields are ignored.
        """
        if isinstance(raw, (bytes, bytearray)):
            # invalid UTF-8 inside strings becomes U+FFFD
            raw = bytes(raw).decode("utf-8", errors="replace")

        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as e:
            raise EventDecodeError(f"invalid JSON: {e}") from None

        if not isinstance(data, dict):
            raise EventDecodeError(f"event: expected object, got {type(data).__name__}")

        return cls.from_dict(data)


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _lookup(d: Mapping[str, Any], name: str) -> Any:
    # exact key first, then a case-insensitive match (device services are not consistent)
    if name in d:
        return d[name]
    for key, value in d.items():
        if isinstance(key, str) and key.lower() == name:
            return value
    return None


def _get_str(d: Mapping[str, Any], name: str, where: str) -> str:
    v = _lookup(d, name)
    if v is None:
        return ""
    if not isinstance(v, str):
        raise EventDecodeError(f"{where}.{name}: expected string, got {type(v).__name__}")
    return v


def _get_int(d: Mapping[str, Any], name: str, where: str) -> int:
    v = _lookup(d, name)
    if v is None:
        return 0
    if isinstance(v, bool) or not isinstance(v, int):
        raise EventDecodeError(f"{where}.{name}: expected integer, got {type(v).__name__}")
    if not INT64_MIN <= v <= INT64_MAX:
        raise EventDecodeError(f"{where}.{name}: {v} out of int64 range")
    return v
