"""Event rule definitions for device models, read from YAML files."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any

import yaml

logger = logging.getLogger(__name__)


class EventRulesError(Exception):
    """Raised when event rules cannot be loaded."""


@dataclass
class EventRuleConfig:
    rule_key: str = ""
    operator: str = ""
    operand: str = ""
    event_type: str = ""
    event_level: str = ""
    description: str = ""
    status: str = ""
    is_active: bool = False

    @classmethod
    def from_mapping(cls, data: Any) -> "EventRuleConfig":
        mapping = _as_mapping(data, "rule")
        is_active = mapping.get("is_active", False)
        if is_active is None:
            is_active = False
        if not isinstance(is_active, bool):
            raise EventRulesError(f"is_active must be a boolean, got {is_active!r}")
        return cls(
            rule_key=_as_str(mapping.get("rule_key")),
            operator=_as_str(mapping.get("operator")),
            operand=_as_str(mapping.get("operand")),
            event_type=_as_str(mapping.get("event_type")),
            event_level=_as_str(mapping.get("event_level")),
            description=_as_str(mapping.get("description")),
            status=_as_str(mapping.get("status")),
            is_active=is_active,
        )


@dataclass
class DeviceModelRules:
    device_model: str = ""
    display_name: str = ""
    rules: list[EventRuleConfig] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Any) -> "DeviceModelRules":
        mapping = _as_mapping(data, "device model")
        return cls(
            device_model=_as_str(mapping.get("device_model")),
            display_name=_as_str(mapping.get("display_name")),
            rules=[EventRuleConfig.from_mapping(r) for r in _as_list(mapping.get("rules"))],
        )


@dataclass
class EventRulesConfig:
    device_models: list[DeviceModelRules] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Any) -> "EventRulesConfig":
        mapping = _as_mapping(data, "event rules")
        return cls(
            device_models=[
                DeviceModelRules.from_mapping(m)
                for m in _as_list(mapping.get("device_models"))
            ]
        )


def _as_mapping(data: Any, what: str) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise EventRulesError(f"{what} must be a mapping, got {type(data).__name__}")
    return data


def _as_list(data: Any) -> list:
    if data is None:
        return []
    if not isinstance(data, list):
        raise EventRulesError(f"expected a list, got {type(data).__name__}")
    return data


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        raise EventRulesError(f"expected a scalar, got {type(value).__name__}")
    return str(value)


def is_path_allowed(path: str) -> bool:
    """Return True if path lies under the configs/event_rules directory."""
    target = os.path.normpath(path)
    prefixes = ["configs/event_rules", "configs" + os.sep + "event_rules"]
    return any(target.startswith(os.path.abspath(prefix)) for prefix in prefixes)


def _checked_read(path: str, read_error: str) -> Any:
    abs_path = os.path.normpath(os.path.abspath(path))
    if not is_path_allowed(abs_path):
        raise EventRulesError(
            "path traversal detected: file must be within configs directory: " + path
        )
    try:
        with open(abs_path, encoding="utf-8") as handle:
            text = handle.read()
    except OSError as exc:
        raise EventRulesError(f"{read_error}: {exc}") from exc
    return text


def load_event_rules_config(path: str) -> EventRulesConfig:
    """Load aggregated event rules from one YAML file."""
    if not path:
        raise EventRulesError("event rules config path is empty")
    text = _checked_read(path, "failed to read event rules config file")
    try:
        return EventRulesConfig.from_mapping(yaml.safe_load(text))
    except (yaml.YAMLError, EventRulesError) as exc:
        raise EventRulesError(f"failed to parse event rules config: {exc}") from exc


def _load_device_model_rules(path: str) -> DeviceModelRules:
    text = _checked_read(path, "failed to read file")
    try:
        return DeviceModelRules.from_mapping(yaml.safe_load(text))
    except (yaml.YAMLError, EventRulesError) as exc:
        raise EventRulesError(f"failed to parse device model rules: {exc}") from exc


def load_event_rules_from_dir(directory: str) -> EventRulesConfig:
    """Load one device model's rules from each YAML file in a directory."""
    if not directory:
        raise EventRulesError("event rules directory is empty")
    try:
        names = sorted(os.listdir(directory))
    except OSError as exc:
        raise EventRulesError(f"failed to read event rules directory: {exc}") from exc

    config = EventRulesConfig()
    for name in names:
        path = os.path.join(directory, name)
        if os.path.isdir(path):
            continue
        if os.path.splitext(name)[1] not in (".yaml", ".yml"):
            continue
        try:
            config.device_models.append(_load_device_model_rules(path))
        except EventRulesError as exc:
            logger.warning("failed to load %s: %s", name, exc)

    if not config.device_models:
        raise EventRulesError(f"no valid event rules found in directory: {directory}")
    return config