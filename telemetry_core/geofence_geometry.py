"""Geofence geometry: polygon features, bounding boxes and device checks."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence, Union

BBOX_FORMAT_ERROR = "Invalid bbox format. Expected: west,south,east,north"

Feature = Union[str, bytes, bytearray, dict]


class GeofenceError(Exception):
    """Raised when geofence input is malformed."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class GeofenceCheck:
    """Whether one device lies inside a tested geofence."""

    device_id: str = ""
    is_inside: bool = False


def _decode_feature(feature: Feature) -> Any:
    if isinstance(feature, (str, bytes, bytearray)):
        try:
            return json.loads(feature)
        except ValueError as exc:
            raise GeofenceError(f"failed to unmarshal feature geometry: {exc}") from exc
    return feature


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coordinates(value: Any) -> Optional[list]:
    """Check a Polygon's coordinates: a list of rings of positions of numbers."""
    if value is None:
        return None
    bad = GeofenceError("failed to unmarshal feature geometry: invalid coordinates")
    if not isinstance(value, list):
        raise bad
    rings = []
    for ring in value:
        if ring is None:
            rings.append(None)
            continue
        if not isinstance(ring, list):
            raise bad
        positions = []
        for position in ring:
            if position is None:
                positions.append(None)
                continue
            if not isinstance(position, list) or not all(_is_number(v) for v in position):
                raise bad
            positions.append([float(v) for v in position])
        rings.append(positions)
    return rings


def features_to_multipolygon(features: Sequence[Feature]) -> dict:
    """Combine Polygon geometries into one MultiPolygon geometry.

    Each feature may be a decoded mapping or its JSON text.
    """
    if not features:
        raise GeofenceError("no features provided")

    polygons = []
    for feature in features:
        geometry = _decode_feature(feature)
        if geometry is None:
            geometry = {}
        if not isinstance(geometry, dict):
            raise GeofenceError(
                "failed to unmarshal feature geometry: object expected"
            )
        geom_type = geometry.get("type")
        if geom_type is None:
            geom_type = ""
        if not isinstance(geom_type, str):
            raise GeofenceError("failed to unmarshal feature geometry: invalid type")
        coordinates = _coordinates(geometry.get("coordinates"))
        if geom_type != "Polygon":
            raise GeofenceError(f"expected Polygon geometry, got {geom_type}")
        polygons.append(coordinates)

    return {"type": "MultiPolygon", "coordinates": polygons}


def parse_bbox(value: str) -> Optional[tuple[float, float, float, float]]:
    """Parse "west,south,east,north" into four floats; empty gives None."""
    if not value:
        return None
    parts = value.split(",")
    if len(parts) != 4:
        raise GeofenceError(BBOX_FORMAT_ERROR)
    try:
        west, south, east, north = (float(part.strip()) for part in parts)
    except ValueError:
        raise GeofenceError(BBOX_FORMAT_ERROR) from None
    return west, south, east, north


def evaluate_geofence_test(
    type_zone: str, checks: Iterable[GeofenceCheck]
) -> tuple[bool, str]:
    """Judge device positions against a zone; return (passed, message).

    A safe zone fails when a device is outside it, a danger zone when a
    device is inside it.
    """
    if not type_zone:
        raise GeofenceError("type_zone is required")
    checks = list(checks)
    if not checks:
        return True, "No devices found in space"
    for check in checks:
        if type_zone == "safe" and not check.is_inside:
            return False, "Device is outside the safe geofence"
        if type_zone == "danger" and check.is_inside:
            return False, "Device is inside the danger geofence"
    return True, f"All {len(checks)} devices passed geofence test"