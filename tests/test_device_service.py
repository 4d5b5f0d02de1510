import pytest
import requests
import responses

from telemetry_core.device_service import (
    DeviceServiceClient,
    DeviceServiceError,
    DeviceSpaceInfo,
)

BASE = "http://devices.example.com/api"
DEVICE = "11111111-2222-3333-4444-555555555555"
URL = f"{BASE}/device-spaces/{DEVICE}/internal"


def make_client():
    return DeviceServiceClient(base_url=BASE)


def test_default_base_url(monkeypatch):
    monkeypatch.delenv("DEVICE_SERVICE_BASE_URL", raising=False)
    assert DeviceServiceClient().base_url == "http://device/api"


def test_base_url_from_environment(monkeypatch):
    monkeypatch.setenv("DEVICE_SERVICE_BASE_URL", BASE)
    assert DeviceServiceClient().base_url == BASE


def test_explicit_base_url_wins(monkeypatch):
    monkeypatch.setenv("DEVICE_SERVICE_BASE_URL", "http://other.example.com")
    assert DeviceServiceClient(base_url=BASE).base_url == BASE


def test_direct_object_response():
    payload = {"id": "ds-1", "name": "Pump", "space_id": "sp-1", "space_slug": "main"}
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, json=payload, status=200)
        info = make_client().get_device_space(DEVICE, "acme", "sp-1")
        sent = rsps.calls[0].request.headers
    assert info == DeviceSpaceInfo(id="ds-1", name="Pump", space_id="sp-1", space_slug="main")
    assert sent["X-Organization"] == "acme"
    assert sent["X-Space"] == "sp-1"


def test_paginated_response_returns_first_result():
    payload = {
        "count": 2,
        "results": [{"id": "ds-1", "name": "First"}, {"id": "ds-2", "name": "Second"}],
    }
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, json=payload, status=200)
        info = make_client().get_device_space(DEVICE, "acme", "sp-1")
    assert info.id == "ds-1"
    assert info.name == "First"


def test_empty_results_returns_none():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, json={"count": 0, "results": []}, status=200)
        assert make_client().get_device_space(DEVICE, "acme", "sp-1") is None


def test_object_without_id_returns_none():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, json={"name": "Pump"}, status=200)
        assert make_client().get_device_space(DEVICE, "acme", "sp-1") is None


def test_invalid_json_returns_none():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, body="not json", status=200)
        assert make_client().get_device_space(DEVICE, "acme", "sp-1") is None


def test_not_found_returns_none():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, json={"detail": "missing"}, status=404)
        assert make_client().get_device_space(DEVICE, "acme", "sp-1") is None


def test_error_status_raises_with_body():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, body="boom", status=500)
        with pytest.raises(DeviceServiceError) as info:
            make_client().get_device_space(DEVICE, "acme", "sp-1")
    assert info.value.status_code == 500
    assert str(info.value) == "device-service returned status 500: boom"


def test_connection_error_raises():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, body=requests.ConnectionError("refused"))
        with pytest.raises(DeviceServiceError, match="failed to call device-service"):
            make_client().get_device_space(DEVICE, "acme", "sp-1")


@pytest.mark.parametrize(
    "args, message",
    [
        (("", "acme", "sp-1"), "device_id is required"),
        ((DEVICE, "", "sp-1"), "organization is required"),
        ((DEVICE, "acme", ""), "space_id is required"),
    ],
)
def test_missing_arguments_raise(args, message):
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        with pytest.raises(DeviceServiceError, match=message):
            make_client().get_device_space(*args)
        assert len(rsps.calls) == 0