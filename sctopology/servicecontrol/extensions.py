"""Functions that add ServiceControl and its companions to a TopologyBuilder.

Typical composition::

    builder = TopologyBuilder()
    sc = add_service_control(builder, "servicecontrol")
    with_service_pulse(sc)
    with_rabbitmq_transport(sc)
    with_monitoring(sc)
    with_audit(sc)

    builder.add_project("billing", "src/Billing").with_reference(transport(sc), "transport").wait_for(sc)
"""

from __future__ import annotations

import structlog

from sctopology.errors import DuplicateResourceError, InvalidArgumentError, require
from sctopology.hosting.builder import ResourceBuilder, TopologyBuilder
from sctopology.hosting.rabbitmq import add_rabbitmq, with_management_plugin
from sctopology.hosting.resources import ContainerResource, Resource, validate_port
from sctopology.models.resources import UrlDisplayLocation
from sctopology.servicecontrol import images
from sctopology.servicecontrol.resource import ServiceControlResource

_log = structlog.get_logger(component="servicecontrol")

SERVICE_CONTROL_PORT = 33333
AUDIT_PORT = 44444
MONITORING_PORT = 33633
SERVICE_PULSE_PORT = 9090
RAVENDB_PORT = 8080
RABBITMQ_MANAGEMENT_PORT = 15672

RABBITMQ_TRANSPORT_TYPE = "RabbitMQ.QuorumConventionalRouting"
SETUP_AND_RUN = "--setup-and-run"
CONFIGURATION_HEALTH_PATH = "/api/configuration"
MONITORING_HEALTH_PATH = "connection"


def _check(builder: ResourceBuilder[ServiceControlResource]) -> ServiceControlResource:
    require(builder, "builder")
    if not isinstance(builder.resource, ServiceControlResource):
        raise InvalidArgumentError(f"Resource '{builder.resource.name}' is not a ServiceControl resource")
    return builder.resource


def add_service_control(
    builder: TopologyBuilder,
    name: str,
    port: int = SERVICE_CONTROL_PORT,
    tag: str = images.TAG,
    registry: str = images.REGISTRY,
) -> ResourceBuilder[ServiceControlResource]:
    """Add a ServiceControl instance backed by its own RavenDB container.

    Registers ``<name>-ravendb`` first; ServiceControl waits for it and
    checks ``/api/configuration`` for health.

    Raises:
        InvalidArgumentError: *builder* or *name* is missing, *name* is
            already registered (nothing is added then), or *port* is
            outside 1..65535.
    """
    require(builder, "builder")
    require(name, "name")
    validate_port(port)
    if builder.get(name) is not None:
        raise DuplicateResourceError(name)

    ravendb = (
        builder.add_container(f"{name}-ravendb", images.RAVENDB_IMAGE, tag)
        .with_image_registry(registry)
        .with_http_endpoint(target_port=RAVENDB_PORT, port=RAVENDB_PORT)
        .with_url_for_endpoint("http", display_text="Management Studio")
    )

    service_control = ServiceControlResource(name, ravendb.resource)
    sc = (
        builder.add_resource(service_control)
        .with_image(images.SERVICE_CONTROL_IMAGE, tag)
        .with_image_registry(registry)
        .with_http_endpoint(target_port=SERVICE_CONTROL_PORT, port=port)
        .with_args(SETUP_AND_RUN)
        .with_url_for_endpoint("http", location=UrlDisplayLocation.DETAILS_ONLY)
        .with_http_health_check(CONFIGURATION_HEALTH_PATH)
        .wait_for(ravendb)
    )
    _log.info("service_control_added", name=name, port=port, tag=tag)
    return sc


def with_rabbitmq_transport(
    builder: ResourceBuilder[ServiceControlResource],
    management_port: int | None = RABBITMQ_MANAGEMENT_PORT,
) -> ResourceBuilder[ServiceControlResource]:
    """Add a ``<name>-rabbitmq`` broker and use it as the transport."""
    service_control = _check(builder)

    rabbit = add_rabbitmq(builder.application_builder, f"{service_control.name}-rabbitmq")
    with_management_plugin(rabbit, management_port)
    rabbit.with_url_for_endpoint("management", display_text="RabbitMQ Management").with_parent_relationship(
        service_control
    )

    service_control.attach_transport(rabbit.resource, RABBITMQ_TRANSPORT_TYPE)
    return builder.wait_for(rabbit)


def with_audit(
    builder: ResourceBuilder[ServiceControlResource],
    port: int | None = AUDIT_PORT,
    tag: str = images.TAG,
    registry: str = images.REGISTRY,
) -> ResourceBuilder[ServiceControlResource]:
    """Add a ``<name>-audit`` instance and register it as a remote instance."""
    service_control = _check(builder)

    audit = _add_instance(
        builder,
        f"{service_control.name}-audit",
        images.SERVICE_CONTROL_AUDIT_IMAGE,
        tag,
        registry,
        AUDIT_PORT,
        port,
    ).with_http_health_check(CONFIGURATION_HEALTH_PATH)

    service_control.attach_audit(audit.resource)
    return builder


def with_monitoring(
    builder: ResourceBuilder[ServiceControlResource],
    port: int | None = MONITORING_PORT,
    tag: str = images.TAG,
    registry: str = images.REGISTRY,
) -> ResourceBuilder[ServiceControlResource]:
    """Add a ``<name>-monitoring`` instance."""
    service_control = _check(builder)

    monitoring = _add_instance(
        builder,
        f"{service_control.name}-monitoring",
        images.SERVICE_CONTROL_MONITORING_IMAGE,
        tag,
        registry,
        MONITORING_PORT,
        port,
    ).with_http_health_check(MONITORING_HEALTH_PATH)

    service_control.attach_monitoring(monitoring.resource)
    return builder


def with_service_pulse(
    builder: ResourceBuilder[ServiceControlResource],
    port: int | None = SERVICE_PULSE_PORT,
    tag: str = images.SERVICE_PULSE_TAG,
    registry: str = images.SERVICE_PULSE_REGISTRY,
) -> ResourceBuilder[ServiceControlResource]:
    """Add the ``<name>-servicepulse`` dashboard.

    ServicePulse is not grouped under ServiceControl in the display tree.
    """
    service_control = _check(builder)

    service_pulse = (
        builder.application_builder.add_container(
            f"{service_control.name}-servicepulse", images.SERVICE_PULSE_IMAGE, tag
        )
        .with_image_registry(registry)
        .with_http_endpoint(target_port=SERVICE_PULSE_PORT, port=port)
        .with_url_for_endpoint("http", display_text="ServicePulse")
        .wait_for(builder)
    )

    service_control.attach_service_pulse(service_pulse.resource)
    return builder


def transport(builder: ResourceBuilder[ServiceControlResource]) -> ResourceBuilder[Resource]:
    """Builder of the attached transport, for ``with_reference`` from applications.

    Raises:
        InvalidStateError: no transport has been attached.
    """
    service_control = _check(builder)
    broker = service_control.transport
    if not isinstance(broker, Resource):
        raise InvalidArgumentError(f"Transport of '{service_control.name}' is not a registered resource")
    return ResourceBuilder(builder.application_builder, broker)


def _add_instance(
    builder: ResourceBuilder[ServiceControlResource],
    name: str,
    image: str,
    tag: str,
    registry: str,
    target_port: int,
    port: int | None,
) -> ResourceBuilder[ContainerResource]:
    return (
        builder.application_builder.add_container(name, image, tag)
        .with_image_registry(registry)
        .with_http_endpoint(target_port=target_port, port=port)
        .with_args(SETUP_AND_RUN)
        .with_url_for_endpoint("http", location=UrlDisplayLocation.DETAILS_ONLY)
        .wait_for(builder)
        .with_parent_relationship(builder)
    )
