"""Request bodies and query filters of the automations and actions API."""

from __future__ import annotations

import json
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

INVALID_BODY = "invalid request body"

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_HEX = "[0-9a-fA-F]"
_STANDARD = f"{_HEX}{{8}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{12}}"
_UUID_FORMS = (
    re.compile(_STANDARD),
    re.compile("(?i:urn:uuid:)" + _STANDARD),
    re.compile(r"\{" + _STANDARD + r"\}"),
    re.compile(f"{_HEX}{{32}}"),
)

Payload = Union[Mapping[str, Any], str, bytes, bytearray, None]


class ValidationError(Exception):
    """Raised when a request body or query parameter is invalid."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class EventRuleRequest:
    """Event rule settings carried inside an automation request."""

    rule_key: Optional[str] = None
    definition: Any = None
    is_active: Optional[bool] = None
    repeat_able: Optional[bool] = None
    cooldown_sec: Optional[int] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class AutomationRequest:
    """Body of a request that creates or updates an automation."""

    name: Optional[str] = None
    title: Optional[str] = None
    device_id: str = ""
    space_id: Optional[uuid.UUID] = None
    action_ids: list[str] = field(default_factory=list)
    event_rule: Optional[EventRuleRequest] = None


@dataclass(frozen=True)
class ActionRequest:
    """Body of a request that creates or updates an action."""

    name: str = ""
    key: str = ""
    data: Optional[dict] = None


def _parse_uuid(text: str) -> Optional[uuid.UUID]:
    if any(form.fullmatch(text) for form in _UUID_FORMS):
        return uuid.UUID(re.sub(r"(?i:^urn:uuid:)|[{}-]", "", text))
    return None


def _parse_bool(text: str) -> Optional[bool]:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return None


def parse_status_list(value: str) -> list[bool]:
    """Parse a comma-separated list of booleans such as "true,false"."""
    statuses = []
    if not value or not value.strip():
        return statuses
    for item in value.strip().split(","):
        trimmed = item.strip()
        if not trimmed:
            continue
        parsed = _parse_bool(trimmed)
        if parsed is None:
            raise ValidationError(f"invalid status value: '{item}'")
        statuses.append(parsed)
    return statuses


def parse_device_filter(value: str) -> Optional[str]:
    """Return the trimmed device_id filter if it is a UUID, else None."""
    trimmed = (value or "").strip()
    if trimmed and _parse_uuid(trimmed) is not None:
        return trimmed
    return None


def _decode(payload: Payload) -> dict:
    if payload is None:
        return {}
    if isinstance(payload, (str, bytes, bytearray)):
        if not payload.strip():
            return {}
        try:
            payload = json.loads(payload)
        except ValueError:
            raise ValidationError(INVALID_BODY) from None
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ValidationError(INVALID_BODY)
    return dict(payload)


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    if name in data:
        return data[name]
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == name:
            return value
    return None


def _opt_str(data: Mapping[str, Any], name: str) -> Optional[str]:
    value = _lookup(data, name)
    if value is None or isinstance(value, str):
        return value
    raise ValidationError(INVALID_BODY)


def _opt_bool(data: Mapping[str, Any], name: str) -> Optional[bool]:
    value = _lookup(data, name)
    if value is None or isinstance(value, bool):
        return value
    raise ValidationError(INVALID_BODY)


def _opt_int(data: Mapping[str, Any], name: str) -> Optional[int]:
    value = _lookup(data, name)
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise ValidationError(INVALID_BODY)


def _decode_event_rule(value: Any) -> Optional[EventRuleRequest]:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValidationError(INVALID_BODY)
    return EventRuleRequest(
        rule_key=_opt_str(value, "rule_key"),
        definition=_lookup(value, "definition"),
        is_active=_opt_bool(value, "is_active"),
        repeat_able=_opt_bool(value, "repeat_able"),
        cooldown_sec=_opt_int(value, "cooldown_sec"),
        description=_opt_str(value, "description"),
    )


def _decode_action_ids(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(INVALID_BODY)
    return list(value)


def _decode_space_id(value: Any) -> Optional[uuid.UUID]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(INVALID_BODY)
    parsed = _parse_uuid(value)
    if parsed is None:
        raise ValidationError(INVALID_BODY)
    return parsed


def validate_automation_request(payload: Payload) -> AutomationRequest:
    """Decode and check an automation body, given as a mapping or JSON text."""
    data = _decode(payload)
    request = AutomationRequest(
        name=_opt_str(data, "name"),
        title=_opt_str(data, "title"),
        device_id=_opt_str(data, "device_id") or "",
        space_id=_decode_space_id(_lookup(data, "space_id")),
        action_ids=_decode_action_ids(_lookup(data, "action_ids")),
        event_rule=_decode_event_rule(_lookup(data, "event_rule")),
    )

    if request.name is None or not request.name.strip():
        raise ValidationError("name is required")
    if not request.device_id.strip():
        raise ValidationError("device_id is required")
    if _parse_uuid(request.device_id) is None:
        raise ValidationError("invalid device_id format")
    if any(_parse_uuid(action_id) is None for action_id in request.action_ids):
        raise ValidationError("invalid action_id format")
    rule = request.event_rule
    if rule is not None and (rule.rule_key is None or not rule.rule_key.strip()):
        raise ValidationError(
            "event_rule.rule_key is required when event_rule is provided"
        )
    return request


def validate_action_request(payload: Payload) -> ActionRequest:
    """Decode and check an action body, given as a mapping or JSON text."""
    data = _decode(payload)
    raw_data = _lookup(data, "data")
    if raw_data is not None and not isinstance(raw_data, Mapping):
        raise ValidationError(INVALID_BODY)
    request = ActionRequest(
        name=_opt_str(data, "name") or "",
        key=_opt_str(data, "key") or "",
        data=dict(raw_data) if raw_data is not None else None,
    )
    if not request.name.strip():
        raise ValidationError("name is required")
    if not request.key.strip():
        raise ValidationError("key is required")
    return request