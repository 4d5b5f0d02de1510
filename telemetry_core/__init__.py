"""Configuration, request parsing, pagination, geofence and automation helpers for a telemetry service."""

__version__ = "0.1.0"