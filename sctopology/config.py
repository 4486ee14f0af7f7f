"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from sctopology.errors import ConfigError
from sctopology.hosting.resources import MAX_RESOURCE_NAME_LENGTH, is_valid_resource_name
from sctopology.models.config import (
    APIConfig,
    LogConfig,
    SCTopologyConfig,
    ServiceControlConfig,
    ServicePulseConfig,
    TransportConfig,
)
from sctopology.observability.logging import LOG_FORMATS

_TRANSPORTS = {"rabbitmq", "none"}

# "<name>-rabbitmq-password" is the longest name derived from the instance name.
MAX_INSTANCE_NAME_LENGTH = MAX_RESOURCE_NAME_LENGTH - len("-rabbitmq-password")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"SCTOPOLOGY_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = _env(key, str(default))
    try:
        val = int(raw)
    except ValueError as exc:
        raise ConfigError(f"SCTOPOLOGY_{key} must be an integer, got {raw!r}") from exc
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_port(key: str, default: int) -> int:
    return _env_int(key, default, min_val=1, max_val=65535)


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ConfigError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    if value.lower() not in LOG_FORMATS:
        raise ConfigError(f"Invalid log format: {value}. Must be one of {LOG_FORMATS}")
    return value.lower()


def _validate_transport(value: str) -> str:
    if value.lower() not in _TRANSPORTS:
        raise ConfigError(f"Invalid transport: {value}. Must be one of {_TRANSPORTS}")
    return value.lower()


def _validate_resource_name(value: str) -> str:
    if len(value) > MAX_INSTANCE_NAME_LENGTH or not is_valid_resource_name(value):
        raise ConfigError(f"Invalid resource name: {value!r}")
    return value


def load_config() -> SCTopologyConfig:
    """Load configuration from SCTOPOLOGY_* environment variables."""
    return SCTopologyConfig(
        service_control=ServiceControlConfig(
            name=_validate_resource_name(_env("NAME", "servicecontrol")),
            port=_env_port("PORT", 33333),
            registry=_env("REGISTRY", "docker.io"),
            image_tag=_env("IMAGE_TAG", "6.6"),
            audit_enabled=_env_bool("AUDIT_ENABLED", True),
            audit_port=_env_port("AUDIT_PORT", 44444),
            monitoring_enabled=_env_bool("MONITORING_ENABLED", True),
            monitoring_port=_env_port("MONITORING_PORT", 33633),
        ),
        transport=TransportConfig(
            kind=_validate_transport(_env("TRANSPORT", "rabbitmq")),
            management_port=_env_port("RABBITMQ_MANAGEMENT_PORT", 15672),
        ),
        service_pulse=ServicePulseConfig(
            enabled=_env_bool("SERVICEPULSE_ENABLED", True),
            port=_env_port("SERVICEPULSE_PORT", 9090),
            tag=_env("SERVICEPULSE_TAG", "2.0"),
        ),
        api=APIConfig(
            host=_env("API_HOST", "127.0.0.1"),
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            format=_validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
