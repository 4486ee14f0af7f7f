"""Composition of the default ServiceControl topology from configuration.

Mirrors the reference application host: ServiceControl with ServicePulse,
a RabbitMQ transport, monitoring and audit, attached in that order.
"""

from __future__ import annotations

from sctopology.config import load_config
from sctopology.hosting import Topology, TopologyBuilder
from sctopology.models.config import SCTopologyConfig
from sctopology.observability.logging import get_logger
from sctopology.servicecontrol import (
    add_service_control,
    with_audit,
    with_monitoring,
    with_rabbitmq_transport,
    with_service_pulse,
)


def compose(builder: TopologyBuilder, config: SCTopologyConfig) -> None:
    """Register every configured resource on *builder*."""
    log = get_logger("app")
    sc_cfg = config.service_control

    sc = add_service_control(
        builder,
        sc_cfg.name,
        port=sc_cfg.port,
        tag=sc_cfg.image_tag,
        registry=sc_cfg.registry,
    )

    if config.service_pulse.enabled:
        with_service_pulse(sc, port=config.service_pulse.port, tag=config.service_pulse.tag)

    if config.transport.kind == "rabbitmq":
        with_rabbitmq_transport(sc, management_port=config.transport.management_port)
    else:
        log.warning("no_transport_configured", name=sc_cfg.name)

    if sc_cfg.monitoring_enabled:
        with_monitoring(sc, port=sc_cfg.monitoring_port, tag=sc_cfg.image_tag, registry=sc_cfg.registry)

    if sc_cfg.audit_enabled:
        with_audit(sc, port=sc_cfg.audit_port, tag=sc_cfg.image_tag, registry=sc_cfg.registry)


def build_topology(config: SCTopologyConfig | None = None) -> Topology:
    """Build the topology described by *config* (loaded from the environment if omitted)."""
    config = config or load_config()
    builder = TopologyBuilder()
    compose(builder, config)
    return builder.build()
