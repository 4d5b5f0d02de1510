"""Widget data requests: display types and query validation."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional


class DisplayType(str, enum.Enum):
    """How a dashboard widget shows an entity's data."""

    GAUGE = "gauge"
    SLIDER = "slider"
    VALUE = "value"
    CHART = "chart"
    HISTOGRAM = "histogram"
    TABLE = "table"
    SWITCH = "switch"
    MAP = "map"

    def __str__(self) -> str:
        return self.value

    def requires_time_range(self) -> bool:
        """Return True for types that need start_time and end_time."""
        return self in (DisplayType.CHART, DisplayType.HISTOGRAM, DisplayType.TABLE)


class WidgetRequestError(Exception):
    """Raised when a widget data request is invalid."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class WidgetDataRequest:
    entity_id: str
    display_type: DisplayType
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    org_slug: str = ""
    space_slug: str = ""
    device_id: str = ""


def _first(query: Mapping[str, Any], name: str) -> str:
    value = query.get(name)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    for item in value:
        return str(item)
    return ""


def _parse_time(text: str) -> Optional[datetime]:
    if not text:
        return None
    normalized = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    if "T" not in normalized and "t" not in normalized:
        raise WidgetRequestError("invalid query parameters")
    try:
        parsed = datetime.fromisoformat(normalized.replace("t", "T"))
    except ValueError:
        raise WidgetRequestError("invalid query parameters") from None
    if parsed.tzinfo is None:
        raise WidgetRequestError("invalid query parameters")
    return parsed


def parse_widget_request(entity_id: str, query: Mapping[str, Any]) -> WidgetDataRequest:
    """Validate a widget data request from its path entity id and query."""
    if not entity_id:
        raise WidgetRequestError("entity_id is required")

    start_time = _parse_time(_first(query, "start_time"))
    end_time = _parse_time(_first(query, "end_time"))

    raw_type = _first(query, "display_type")
    if not raw_type:
        raise WidgetRequestError("display_type is required")

    try:
        display_type = DisplayType(raw_type)
    except ValueError:
        raise WidgetRequestError(f"unknown display_type: {raw_type}") from None

    if display_type.requires_time_range() and (start_time is None or end_time is None):
        raise WidgetRequestError(f"{display_type} requires start_time and end_time")

    return WidgetDataRequest(
        entity_id=entity_id,
        display_type=display_type,
        start_time=start_time,
        end_time=end_time,
        org_slug=_first(query, "org_slug"),
        space_slug=_first(query, "space_slug"),
        device_id=_first(query, "device_id"),
    )