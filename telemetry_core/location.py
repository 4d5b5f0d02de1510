"""Location history requests and responses."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Optional


class LocationRequestError(Exception):
    """Raised when a location history request is invalid."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(\.\d+)?(Z|[+-]\d{2}:\d{2})"
)


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp into an aware datetime; empty gives None."""
    if not value:
        return None
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise LocationRequestError("invalid query parameters")
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    fraction = match.group(7)
    micro = int((fraction[1:] + "000000")[:6]) if fraction else 0
    zone = match.group(8)
    if zone == "Z":
        tz = timezone.utc
    else:
        off_hours, off_minutes = int(zone[1:3]), int(zone[4:6])
        if off_hours > 23 or off_minutes > 59:
            raise LocationRequestError("invalid query parameters")
        offset = timedelta(hours=off_hours, minutes=off_minutes)
        tz = timezone(-offset if zone[0] == "-" else offset)
    try:
        return datetime(year, month, day, hour, minute, second, micro, tzinfo=tz)
    except ValueError:
        raise LocationRequestError("invalid query parameters") from None


def _format_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += f".{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or timedelta(0)
    if not offset:
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "-" if minutes < 0 else "+"
    minutes = abs(minutes)
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class LocationHistoryRequest:
    """Query for a device's location history within a space."""

    device_id: str = ""
    space_slug: str = ""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def validate(self, now: Optional[datetime] = None) -> "LocationHistoryRequest":
        """Check required fields and return a copy with the end filled in.

        A missing end becomes now (the current UTC time by default).
        """
        if not self.device_id:
            raise LocationRequestError("device_id is required")
        if not self.space_slug:
            raise LocationRequestError("space_slug is required")
        if self.start is None:
            raise LocationRequestError("start time is required")
        end = self.end
        if end is None:
            end = now if now is not None else datetime.now(timezone.utc)
        if end < self.start:
            raise LocationRequestError("end time must be after start time")
        return replace(self, end=end)


@dataclass(frozen=True)
class LocationResponse:
    """One recorded position of a device."""

    timestamp: datetime
    latitude: float
    longitude: float
    device_id: str

    def to_dict(self) -> dict:
        return {
            "timestamp": _format_timestamp(self.timestamp),
            "latitude": self.latitude,
            "longitude": self.longitude,
            "device_id": self.device_id,
        }