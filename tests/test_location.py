from datetime import datetime, timezone

import pytest

from telemetry_core.location import (
    LocationHistoryRequest,
    LocationRequestError,
    LocationResponse,
    parse_timestamp,
)

START = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def test_parse_utc_timestamp():
    assert parse_timestamp("2024-01-15T10:30:00Z") == START


def test_parse_offset_timestamp_equals_utc_instant():
    assert parse_timestamp("2024-01-15T12:30:00+02:00") == parse_timestamp(
        "2024-01-15T10:30:00Z"
    )


def test_parse_keeps_fraction():
    parsed = parse_timestamp("2024-01-15T10:30:00.25Z")
    assert parsed.microsecond == 250000
    assert parsed.tzinfo is not None


def test_parse_empty_is_none():
    assert parse_timestamp("") is None


@pytest.mark.parametrize(
    "value",
    ["2024-01-15", "2024-01-15T10:30:00", "yesterday", "2024-13-15T10:30:00Z"],
)
def test_parse_invalid(value):
    with pytest.raises(LocationRequestError, match="invalid query parameters"):
        parse_timestamp(value)


def test_validate_requires_device_id():
    with pytest.raises(LocationRequestError, match="device_id is required"):
        LocationHistoryRequest(space_slug="home", start=START).validate()


def test_validate_requires_space_slug():
    with pytest.raises(LocationRequestError, match="space_slug is required"):
        LocationHistoryRequest(device_id="device-123", start=START).validate()


def test_validate_requires_start():
    with pytest.raises(LocationRequestError, match="start time is required"):
        LocationHistoryRequest(device_id="device-123", space_slug="home").validate()


def test_validate_rejects_end_before_start():
    request = LocationHistoryRequest(
        device_id="device-123",
        space_slug="home",
        start=START,
        end=parse_timestamp("2024-01-14T10:30:00Z"),
    )
    with pytest.raises(LocationRequestError, match="end time must be after start time"):
        request.validate()


def test_validate_fills_end_from_now():
    now = parse_timestamp("2024-02-01T00:00:00Z")
    request = LocationHistoryRequest(device_id="device-123", space_slug="home", start=START)
    validated = request.validate(now=now)
    assert validated.end == now
    assert request.end is None


def test_validate_default_end_is_current_time():
    request = LocationHistoryRequest(device_id="device-123", space_slug="home", start=START)
    before = datetime.now(timezone.utc)
    validated = request.validate()
    assert validated.end >= before
    assert validated.end.tzinfo is not None


def test_validate_keeps_given_end():
    end = parse_timestamp("2024-01-16T10:30:00Z")
    request = LocationHistoryRequest(
        device_id="device-123", space_slug="home", start=START, end=end
    )
    assert request.validate() == request


def test_response_to_dict():
    response = LocationResponse(
        timestamp=START, latitude=37.7749, longitude=-122.4194, device_id="device-123"
    )
    assert response.to_dict() == {
        "timestamp": "2024-01-15T10:30:00Z",
        "latitude": 37.7749,
        "longitude": -122.4194,
        "device_id": "device-123",
    }


def test_response_timestamp_round_trips():
    moment = parse_timestamp("2024-01-15T10:30:00.5+02:00")
    response = LocationResponse(
        timestamp=moment, latitude=1.0, longitude=2.0, device_id="device-123"
    )
    assert parse_timestamp(response.to_dict()["timestamp"]) == moment