"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ServiceControlConfig:
    """Control resource and its audit/monitoring companions."""

    name: str = "servicecontrol"
    port: int = 33333
    registry: str = "docker.io"
    image_tag: str = "6.6"
    audit_enabled: bool = True
    audit_port: int = 44444
    monitoring_enabled: bool = True
    monitoring_port: int = 33633


@dataclass
class TransportConfig:
    """Messaging transport configuration."""

    kind: str = "rabbitmq"
    management_port: int = 15672


@dataclass
class ServicePulseConfig:
    """ServicePulse dashboard configuration."""

    enabled: bool = True
    port: int = 9090
    tag: str = "2.0"


@dataclass
class APIConfig:
    """Read-only REST API configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass
class SCTopologyConfig:
    """Top-level sctopology configuration."""

    service_control: ServiceControlConfig = field(default_factory=ServiceControlConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)
    service_pulse: ServicePulseConfig = field(default_factory=ServicePulseConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
