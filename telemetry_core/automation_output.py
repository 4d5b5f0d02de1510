"""Response shapes of automations and actions returned by the API."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from telemetry_core.device_service import DeviceSpaceInfo


@dataclass(frozen=True)
class Action:
    """An action an automation can trigger; data is stored as JSON text."""

    id: str = ""
    name: str = ""
    key: str = ""
    data: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AutomationEventRule:
    """The event rule attached to an automation."""

    event_rule_id: str = ""
    rule_key: str = ""
    definition: Any = None
    is_active: Optional[bool] = None
    repeat_able: Optional[bool] = None
    cooldown_sec: Optional[int] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class Automation:
    """An automation together with its event rule and actions."""

    id: str = ""
    name: Optional[str] = None
    title: Optional[str] = None
    device_id: str = ""
    space_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    event_rule: Optional[AutomationEventRule] = None
    actions: list[Action] = field(default_factory=list)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant: {name}")


def decode_action_data(data: str) -> Any:
    """Decode stored action data as JSON, falling back to the raw text."""
    try:
        return json.loads(data, parse_constant=_reject_constant)
    except ValueError:
        return data


def action_to_dict(action: Action) -> dict:
    """Return the API representation of an action."""
    result: dict[str, Any] = {
        "id": action.id,
        "name": action.name,
        "key": action.key,
        "created_at": action.created_at,
    }
    if action.data is not None:
        result["data"] = decode_action_data(action.data)
    return result


def _event_rule_to_dict(rule: AutomationEventRule) -> dict:
    result: dict[str, Any] = {
        "event_rule_id": rule.event_rule_id,
        "rule_key": rule.rule_key,
    }
    optional = {
        "definition": rule.definition,
        "is_active": rule.is_active,
        "repeat_able": rule.repeat_able,
        "cooldown_sec": rule.cooldown_sec,
        "description": rule.description,
    }
    result.update({key: value for key, value in optional.items() if value is not None})
    return result


def automation_to_dict(automation: Automation) -> dict:
    """Return the API representation of an automation."""
    result: dict[str, Any] = {
        "id": automation.id,
        "name": automation.name,
        "title": automation.title,
        "device_id": automation.device_id,
        "updated_at": automation.updated_at,
        "created_at": automation.created_at,
    }
    if automation.event_rule is not None:
        result["event_rule"] = _event_rule_to_dict(automation.event_rule)
    if automation.actions:
        result["actions"] = [action_to_dict(action) for action in automation.actions]
    return result


def with_device_space(result: dict, info: Optional[DeviceSpaceInfo]) -> dict:
    """Add the device space to an automation mapping when one is known.

    The mapping is changed in place and also returned.
    """
    if info is not None:
        result["device_space"] = {"id": info.id, "name": info.name}
    return result