"""The ServiceControl control resource and its companion wiring.

ServiceControl is the central unit; RavenDB backs it, a messaging transport
feeds it, and up to three companions hang off it:

    audit       -- ServiceControl.Audit, ingests the audit queue
    monitoring  -- ServiceControl.Monitoring, endpoint throughput metrics
    servicepulse -- the ServicePulse dashboard

Attach calls only record references. Each affected resource receives an
environment callback that reads this resource's state when the topology is
built, so companions and transport may be attached in any order and the
final configuration is the same.
"""

from __future__ import annotations

from functools import partial

import structlog

from sctopology.errors import InvalidArgumentError, InvalidStateError, require
from sctopology.hosting.resources import ContainerResource, ResourceWithConnectionString
from sctopology.models.expressions import ReferenceExpression
from sctopology.observability.metrics import companions_attached_total

_log = structlog.get_logger(component="servicecontrol.resource")

TRANSPORT_CONNECTION_STRING_ENV = "CONNECTIONSTRING"
TRANSPORT_TYPE_ENV = "TRANSPORTTYPE"
RAVENDB_CONNECTION_STRING_ENV = "RAVENDB_CONNECTIONSTRING"
REMOTE_INSTANCES_ENV = "REMOTEINSTANCES"
SERVICE_CONTROL_URL_ENV = "SERVICECONTROL_URL"
MONITORING_URL_ENV = "MONITORING_URL"
ENABLE_REVERSE_PROXY_ENV = "ENABLE_REVERSE_PROXY"

_REMOTE_INSTANCES_FORMAT = '[{{"api_uri":"{0}"}}]'


class ServiceControlResource(ContainerResource, ResourceWithConnectionString):
    """Control resource: owns references to persistence, transport and companions.

    The RavenDB resource is fixed at construction and shown as a child of this
    resource. Everything else is optional and set through ``attach_*``. There
    is no detach. Attach calls must come from a single thread.

    The connection string of a ServiceControl resource is the connection
    string of its transport, so applications can reference it directly.
    """

    def __init__(self, name: str, ravendb: ContainerResource) -> None:
        require(name, "name")
        require(ravendb, "ravendb")
        super().__init__(name)
        self._ravendb = ravendb
        self._transport: ResourceWithConnectionString | None = None
        self._transport_type: str | None = None
        self._audit: ContainerResource | None = None
        self._monitoring: ContainerResource | None = None
        self._service_pulse: ContainerResource | None = None

        ravendb.set_parent(self)
        self.add_environment_callback(self._configure_service_control)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def ravendb(self) -> ContainerResource:
        return self._ravendb

    @property
    def transport(self) -> ResourceWithConnectionString:
        if self._transport is None:
            raise InvalidStateError("Transport not configured")
        return self._transport

    @property
    def transport_type(self) -> str | None:
        return self._transport_type

    @property
    def audit(self) -> ContainerResource | None:
        return self._audit

    @property
    def monitoring(self) -> ContainerResource | None:
        return self._monitoring

    @property
    def service_pulse(self) -> ContainerResource | None:
        return self._service_pulse

    @property
    def connection_string_expression(self) -> ReferenceExpression:
        if self._transport is None:
            raise InvalidStateError("Transport not configured")
        return self._transport.connection_string_expression

    # ------------------------------------------------------------------
    # Attach operations
    # ------------------------------------------------------------------

    def attach_transport(
        self,
        transport: ResourceWithConnectionString,
        transport_type: str | None = None,
    ) -> None:
        """Use *transport* for this instance and its audit/monitoring companions.

        Attaching again replaces the previous transport.
        """
        require(transport, "transport")
        if not isinstance(transport, ResourceWithConnectionString):
            raise InvalidArgumentError(f"Transport '{transport!r}' does not expose a connection string")
        if isinstance(transport, ServiceControlResource):
            raise InvalidArgumentError(f"Transport of '{self.name}' cannot be a ServiceControl resource")
        if self._transport is not None and self._transport is not transport:
            _log.warning("transport_replaced", name=self.name, previous=self._transport.name, current=transport.name)
        self._transport = transport
        if transport_type is not None:
            self.attach_transport_type(transport_type)
        _log.info("transport_attached", name=self.name, transport=transport.name, transport_type=transport_type)

    def attach_transport_type(self, transport_type: str) -> None:
        require(transport_type, "transport_type")
        self._transport_type = transport_type

    def attach_audit(self, audit: ContainerResource) -> None:
        require(audit, "audit")
        self._track_companion("audit", self._audit, audit)
        self._audit = audit
        audit.add_environment_callback(partial(self._configure_instance, audit))
        companions_attached_total.labels(role="audit").inc()

    def attach_monitoring(self, monitoring: ContainerResource) -> None:
        require(monitoring, "monitoring")
        self._track_companion("monitoring", self._monitoring, monitoring)
        self._monitoring = monitoring
        monitoring.add_environment_callback(partial(self._configure_instance, monitoring))
        companions_attached_total.labels(role="monitoring").inc()

    def attach_service_pulse(self, service_pulse: ContainerResource) -> None:
        require(service_pulse, "service_pulse")
        self._track_companion("servicepulse", self._service_pulse, service_pulse)
        self._service_pulse = service_pulse
        service_pulse.add_environment_callback(partial(self._configure_service_pulse, service_pulse))
        companions_attached_total.labels(role="servicepulse").inc()

    def _track_companion(
        self,
        role: str,
        current: ContainerResource | None,
        new: ContainerResource,
    ) -> None:
        if current is not None and current is not new:
            _log.warning("companion_replaced", name=self.name, role=role, previous=current.name, current=new.name)
        _log.info("companion_attached", name=self.name, role=role, companion=new.name)

    # ------------------------------------------------------------------
    # Environment callbacks, evaluated at build time
    # ------------------------------------------------------------------

    def _apply_transport(self, env: dict[str, object]) -> None:
        if self._transport_type is not None:
            env[TRANSPORT_TYPE_ENV] = self._transport_type
        if self._transport is not None:
            env[TRANSPORT_CONNECTION_STRING_ENV] = self._transport

    def _configure_service_control(self, env: dict[str, object]) -> None:
        env[RAVENDB_CONNECTION_STRING_ENV] = self._ravendb.get_endpoint("http")
        self._apply_transport(env)
        if self._audit is not None:
            env[REMOTE_INSTANCES_ENV] = ReferenceExpression(
                _REMOTE_INSTANCES_FORMAT,
                (self._audit.get_endpoint("http"),),
            )

    def _configure_instance(self, companion: ContainerResource, env: dict[str, object]) -> None:
        # audit and monitoring share the same database and transport settings
        if companion is not self._audit and companion is not self._monitoring:
            return  # replaced
        env[RAVENDB_CONNECTION_STRING_ENV] = self._ravendb.get_endpoint("http")
        self._apply_transport(env)

    def _configure_service_pulse(self, companion: ContainerResource, env: dict[str, object]) -> None:
        if companion is not self._service_pulse:
            return  # replaced
        env[SERVICE_CONTROL_URL_ENV] = self.get_endpoint("http")
        env[ENABLE_REVERSE_PROXY_ENV] = "true"
        if self._monitoring is not None:
            env[MONITORING_URL_ENV] = self._monitoring.get_endpoint("http")
