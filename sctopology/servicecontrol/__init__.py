"""ServiceControl topology: control resource, companions and transport.

Exports:
    ServiceControlResource  -- control resource with attach operations.
    add_service_control     -- register ServiceControl and its RavenDB.
    with_rabbitmq_transport -- add a RabbitMQ broker as the transport.
    with_audit              -- add the audit companion.
    with_monitoring         -- add the monitoring companion.
    with_service_pulse      -- add the ServicePulse dashboard.
    transport               -- builder of the attached transport.
"""

from sctopology.servicecontrol.extensions import (
    RABBITMQ_TRANSPORT_TYPE,
    add_service_control,
    transport,
    with_audit,
    with_monitoring,
    with_rabbitmq_transport,
    with_service_pulse,
)
from sctopology.servicecontrol.resource import ServiceControlResource

__all__ = [
    "RABBITMQ_TRANSPORT_TYPE",
    "ServiceControlResource",
    "add_service_control",
    "transport",
    "with_audit",
    "with_monitoring",
    "with_rabbitmq_transport",
    "with_service_pulse",
]
