"""Service configuration loaded from a YAML file and the environment."""

import dataclasses
import os
import re
import typing
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

import yaml
from dotenv import load_dotenv


class ConfigError(Exception):
    """Raised when configuration cannot be read or is invalid."""


def _duration(default: float = 0.0) -> Any:
    return field(default=default, metadata={"duration": True})


@dataclass
class ServerConfig:
    log_level: str = ""
    api_port: int = 0
    alerts_processors_path: str = ""
    event_rules_dir: str = ""


@dataclass
class AmqpConfig:
    broker_url: str = ""
    consumer_tag: str = ""
    prefetch_count: int = 0
    allowed_vhosts: list[str] = field(default_factory=list)
    reconnect_delay: float = _duration()


@dataclass
class OrgEventsConfig:
    exchange: str = ""
    queue: str = ""
    routing_key: str = ""
    consumer_tag: str = ""


@dataclass
class DbConfig:
    """Database settings; durations are in seconds."""

    name: str = ""
    username: str = ""
    password: str = ""
    host: str = ""
    port: int = 0
    batch_size: int = 0
    flush_interval: float = _duration()
    max_connections: int = 0
    max_idle_conns: int = 0
    conn_max_lifetime: float = _duration()
    shutdown_timeout: float = _duration()


@dataclass
class Config:
    server: ServerConfig = field(default_factory=ServerConfig)
    amqp: AmqpConfig = field(default_factory=AmqpConfig)
    org_events: OrgEventsConfig = field(default_factory=OrgEventsConfig)
    db: DbConfig = field(default_factory=DbConfig)


def default_db() -> DbConfig:
    """Return the default database configuration."""
    return DbConfig(
        batch_size=1000,
        flush_interval=1.0,
        max_connections=25,
        max_idle_conns=5,
        conn_max_lifetime=5 * 60.0,
    )


_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: Any) -> float:
    """Parse a duration such as "1h30m" or "250ms" into seconds.

    Plain numbers are taken as nanoseconds; timedeltas are converted.
    """
    if isinstance(value, bool):
        raise ConfigError(f"invalid duration: {value!r}")
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, (int, float)):
        return value / 1e9
    if not isinstance(value, str):
        raise ConfigError(f"invalid duration: {value!r}")

    text = value
    if not text:
        raise ConfigError('invalid duration: ""')
    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if text == "0":
        return 0.0
    if not text:
        raise ConfigError(f"invalid duration: {value!r}")

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _PART.match(text, pos)
        if match is None:
            raise ConfigError(f"invalid duration: {value!r}")
        total += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()
    return sign * total


def _format_duration(seconds: float) -> str:
    return f"{seconds:g}s"


def _coerce(spec: dataclasses.Field, value: Any) -> Any:
    if spec.metadata.get("duration"):
        return parse_duration(value)
    if spec.type is str:
        if isinstance(value, (dict, list)):
            raise ConfigError(f"'{spec.name}' expected a string")
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)
    if spec.type is int:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            if value == "":
                return 0
            try:
                return int(value, 0)
            except ValueError:
                raise ConfigError(
                    f"cannot parse '{spec.name}' as int: {value!r}"
                ) from None
        raise ConfigError(f"cannot parse '{spec.name}' as int: {value!r}")
    if typing.get_origin(spec.type) is list:
        if isinstance(value, str):
            return value.split(",") if value else []
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        raise ConfigError(f"'{spec.name}' expected a list")
    return value


def _build_section(name: str, cls: type, raw: Any) -> Any:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{name}' expected a map, got {type(raw).__name__}")
    values = {str(key).lower(): item for key, item in raw.items()}
    kwargs = {}
    for spec in dataclasses.fields(cls):
        value = values.get(spec.name)
        env_value = os.environ.get(f"{name}_{spec.name}".upper())
        if env_value:
            value = env_value
        if value is None:
            continue
        kwargs[spec.name] = _coerce(spec, value)
    return cls(**kwargs)


def validate_config(config: Config) -> None:
    """Check configuration values, filling in the default shutdown timeout."""
    if config.amqp.broker_url:
        try:
            urlparse(config.amqp.broker_url)
        except ValueError as exc:
            raise ConfigError(f"invalid AMQP broker URL: {exc}") from exc
    else:
        raise ConfigError("AMQP broker URL is required")

    port = config.server.api_port
    if port <= 0 or port > 65535:
        raise ConfigError(f"invalid API port: {port}")

    db = config.db
    if db.batch_size <= 0:
        raise ConfigError(f"batch size must be positive: {db.batch_size}")
    if db.flush_interval <= 0:
        raise ConfigError(
            f"flush interval must be positive: {_format_duration(db.flush_interval)}"
        )
    if db.max_connections <= 0:
        raise ConfigError(f"max connections must be positive: {db.max_connections}")
    if db.max_idle_conns < 0:
        raise ConfigError(
            f"max idle connections must be non-negative: {db.max_idle_conns}"
        )
    if db.max_idle_conns > db.max_connections:
        raise ConfigError(
            f"max idle connections ({db.max_idle_conns}) cannot exceed "
            f"max connections ({db.max_connections})"
        )
    if db.conn_max_lifetime < 0:
        raise ConfigError(
            "conn max lifetime must be non-negative: "
            f"{_format_duration(db.conn_max_lifetime)}"
        )
    if db.shutdown_timeout == 0:
        db.shutdown_timeout = 30.0
    if db.shutdown_timeout < 0:
        raise ConfigError(
            "shutdown timeout must be non-negative: "
            f"{_format_duration(db.shutdown_timeout)}"
        )

    if config.amqp.prefetch_count <= 0:
        raise ConfigError(
            f"prefetch count must be positive: {config.amqp.prefetch_count}"
        )


def load_config(
    config_path: str = "configs/config.yaml", env_file: Optional[str] = ".env"
) -> Config:
    """Load configuration from a YAML file, a dotenv file and the environment.

    A missing config file is tolerated. Environment variables named
    SECTION_KEY (e.g. SERVER_API_PORT) override values from the file.
    """
    data: Any = {}
    path = Path(config_path)
    if path.is_file():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"error reading config file: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("error reading config file: top level must be a map")

    if env_file is not None:
        load_dotenv(env_file)

    sections = {str(key).lower(): value for key, value in data.items()}
    try:
        kwargs = {
            spec.name: _build_section(spec.name, spec.type, sections.get(spec.name))
            for spec in dataclasses.fields(Config)
        }
    except ConfigError as exc:
        raise ConfigError(f"unmarshal error: {exc}") from exc
    config = Config(**kwargs)

    try:
        validate_config(config)
    except ConfigError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
    return config