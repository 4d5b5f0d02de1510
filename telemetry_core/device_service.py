"""HTTP client for looking up device spaces in the device service."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://device/api"


@dataclass(frozen=True)
class DeviceSpaceInfo:
    """A device's placement within a space, as reported by the device service."""

    id: str = ""
    name: str = ""
    space_id: str = ""
    space_slug: str = ""


class DeviceServiceError(Exception):
    """Raised when the device service cannot be queried."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class _Undecodable(Exception):
    pass


def _string_field(obj: dict, key: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _Undecodable(key)
    return value


def _decode_info(obj: Any) -> DeviceSpaceInfo:
    if obj is None:
        return DeviceSpaceInfo()
    if not isinstance(obj, dict):
        raise _Undecodable("object expected")
    return DeviceSpaceInfo(
        id=_string_field(obj, "id"),
        name=_string_field(obj, "name"),
        space_id=_string_field(obj, "space_id"),
        space_slug=_string_field(obj, "space_slug"),
    )


def _decode_results(obj: Any) -> list[DeviceSpaceInfo]:
    if not isinstance(obj, dict):
        raise _Undecodable("object expected")
    count = obj.get("count")
    if count is not None and (isinstance(count, bool) or not isinstance(count, (int, float))):
        raise _Undecodable("count")
    results = obj.get("results")
    if results is None:
        return []
    if not isinstance(results, list):
        raise _Undecodable("results")
    return [_decode_info(item) for item in results]


class DeviceServiceClient:
    """Talks to the device service over HTTP."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url:
            base_url = os.environ.get("DEVICE_SERVICE_BASE_URL") or DEFAULT_BASE_URL
        self.base_url = base_url
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()

    def get_device_space(
        self, device_id: str, organization: str, space_id: str
    ) -> Optional[DeviceSpaceInfo]:
        """Fetch the device space of a device, or None if none is known."""
        if not device_id:
            logger.info("device_id is empty")
            raise DeviceServiceError("device_id is required")
        if not organization:
            logger.info("organization is empty")
            raise DeviceServiceError("organization is required")
        if not space_id:
            logger.info("space_id is empty")
            raise DeviceServiceError("space_id is required")

        url = f"{self.base_url}/device-spaces/{device_id}/internal"
        headers = {"X-Organization": organization, "X-Space": space_id}
        try:
            response = self._session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("failed to call device-service %s: %s", url, exc)
            raise DeviceServiceError(f"failed to call device-service: {exc}") from exc

        with response:
            if response.status_code == 404:
                logger.info("device not found in device-service: %s", device_id)
                return None
            if response.status_code != 200:
                body = response.text
                logger.warning(
                    "device-service returned status %d for %s: %s",
                    response.status_code,
                    device_id,
                    body,
                )
                raise DeviceServiceError(
                    f"device-service returned status {response.status_code}: {body}",
                    status_code=response.status_code,
                )
            try:
                body_bytes = response.content
            except requests.RequestException as exc:
                raise DeviceServiceError(f"failed to read response body: {exc}") from exc

        try:
            data = json.loads(body_bytes)
        except ValueError:
            logger.info("no device space found in response: %s", device_id)
            return None

        try:
            info = _decode_info(data)
            if info.id:
                return info
        except _Undecodable:
            pass

        try:
            results = _decode_results(data)
            if results:
                return results[0]
        except _Undecodable:
            pass

        logger.info("no device space found in response: %s", device_id)
        return None