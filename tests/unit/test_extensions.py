"""Tests for the ServiceControl extension functions on a TopologyBuilder."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from sctopology.errors import DuplicateResourceError, InvalidArgumentError, InvalidStateError
from sctopology.hosting import TopologyBuilder
from sctopology.hosting.rabbitmq import RabbitMQServerResource
from sctopology.models.resources import HealthCheck, HealthCheckKind, UrlDisplayLocation
from sctopology.servicecontrol import (
    RABBITMQ_TRANSPORT_TYPE,
    ServiceControlResource,
    add_service_control,
    transport,
    with_audit,
    with_monitoring,
    with_rabbitmq_transport,
    with_service_pulse,
)


def _make_sc(name: str = "servicecontrol", **kwargs):
    builder = TopologyBuilder()
    return builder, add_service_control(builder, name, **kwargs)


class TestAddServiceControl:
    def test_registers_ravendb_then_control(self) -> None:
        builder, sc = _make_sc()
        assert [r.name for r in builder.resources] == ["servicecontrol-ravendb", "servicecontrol"]
        assert isinstance(sc.resource, ServiceControlResource)

    def test_control_container(self) -> None:
        _, sc = _make_sc()
        control = sc.resource
        assert control.image.reference == "docker.io/particular/servicecontrol:6.6"
        assert control.args == ["--setup-and-run"]
        assert control.endpoints["http"].target_port == 33333
        assert control.endpoints["http"].port == 33333
        assert control.endpoints["http"].display.location is UrlDisplayLocation.DETAILS_ONLY
        assert control.health_checks == [HealthCheck(HealthCheckKind.HTTP, "/api/configuration", "http")]
        assert control.wait_for == ["servicecontrol-ravendb"]

    def test_ravendb_container(self) -> None:
        _, sc = _make_sc()
        raven = sc.resource.ravendb
        assert raven.image.reference == "docker.io/particular/servicecontrol-ravendb:6.6"
        assert raven.endpoints["http"].target_port == 8080
        assert raven.endpoints["http"].port == 8080
        assert raven.endpoints["http"].display.display_text == "Management Studio"
        assert raven.parent == "servicecontrol"

    def test_port_override_keeps_target_port(self) -> None:
        _, sc = _make_sc(port=40000)
        endpoint = sc.resource.endpoints["http"]
        assert endpoint.port == 40000
        assert endpoint.target_port == 33333

    def test_tag_and_registry_override(self) -> None:
        _, sc = _make_sc(tag="6.7", registry="mirror.local")
        assert sc.resource.image.reference == "mirror.local/particular/servicecontrol:6.7"
        assert sc.resource.ravendb.image.reference == "mirror.local/particular/servicecontrol-ravendb:6.7"

    @pytest.mark.parametrize("port", [0, 70000])
    def test_invalid_port(self, port: int) -> None:
        with pytest.raises(InvalidArgumentError):
            _make_sc(port=port)

    def test_missing_name(self) -> None:
        with pytest.raises(InvalidArgumentError):
            add_service_control(TopologyBuilder(), "")

    def test_missing_builder(self) -> None:
        with pytest.raises(InvalidArgumentError):
            add_service_control(None, "servicecontrol")  # type: ignore[arg-type]

    def test_same_name_twice(self) -> None:
        builder, _ = _make_sc()
        with pytest.raises(InvalidArgumentError):
            add_service_control(builder, "servicecontrol")

    def test_name_taken_by_other_resource_adds_nothing(self) -> None:
        builder = TopologyBuilder()
        builder.add_container("servicecontrol", "nginx")
        with pytest.raises(DuplicateResourceError):
            add_service_control(builder, "servicecontrol")
        assert builder.get("servicecontrol-ravendb") is None
        assert [r.name for r in builder.resources] == ["servicecontrol"]

    def test_logs_creation(self) -> None:
        with capture_logs() as logs:
            _make_sc()
        assert any(e["event"] == "service_control_added" and e["name"] == "servicecontrol" for e in logs)


class TestWithRabbitMqTransport:
    def test_broker_registered_and_attached(self) -> None:
        builder, sc = _make_sc()
        with_rabbitmq_transport(sc)
        broker = builder.get("servicecontrol-rabbitmq")
        assert isinstance(broker, RabbitMQServerResource)
        assert sc.resource.transport is broker
        assert sc.resource.transport_type == RABBITMQ_TRANSPORT_TYPE == "RabbitMQ.QuorumConventionalRouting"

    def test_broker_container(self) -> None:
        builder, sc = _make_sc()
        with_rabbitmq_transport(sc)
        broker = builder.get("servicecontrol-rabbitmq")
        assert broker.image.reference == "docker.io/library/rabbitmq:4.1-management"
        assert broker.endpoints["tcp"].target_port == 5672
        management = broker.endpoints["management"]
        assert management.target_port == 15672
        assert management.port == 15672
        assert management.display.display_text == "RabbitMQ Management"
        assert broker.parent == "servicecontrol"

    def test_generated_password_parameter(self) -> None:
        builder, sc = _make_sc()
        with_rabbitmq_transport(sc)
        password = builder.get("servicecontrol-rabbitmq-password")
        assert password is not None
        assert password.secret is True
        assert len(password.value) >= 16

    def test_control_waits_for_broker(self) -> None:
        _, sc = _make_sc()
        with_rabbitmq_transport(sc)
        assert sc.resource.wait_for == ["servicecontrol-ravendb", "servicecontrol-rabbitmq"]

    def test_transport_accessor(self) -> None:
        builder, sc = _make_sc()
        with_rabbitmq_transport(sc)
        rb = transport(sc)
        assert rb.resource is builder.get("servicecontrol-rabbitmq")
        assert rb.application_builder is builder

    def test_transport_accessor_before_attach(self) -> None:
        _, sc = _make_sc()
        with pytest.raises(InvalidStateError):
            transport(sc)

    def test_rejects_non_service_control_builder(self) -> None:
        builder = TopologyBuilder()
        plain = builder.add_container("web", "nginx")
        with pytest.raises(InvalidArgumentError):
            with_rabbitmq_transport(plain)  # type: ignore[arg-type]


class TestCompanions:
    def test_audit_container(self) -> None:
        builder, sc = _make_sc()
        with_audit(sc)
        audit = builder.get("servicecontrol-audit")
        assert sc.resource.audit is audit
        assert audit.image.reference == "docker.io/particular/servicecontrol-audit:6.6"
        assert audit.endpoints["http"].target_port == 44444
        assert audit.endpoints["http"].port == 44444
        assert audit.args == ["--setup-and-run"]
        assert audit.health_checks == [HealthCheck(HealthCheckKind.HTTP, "/api/configuration", "http")]
        assert audit.wait_for == ["servicecontrol"]
        assert audit.parent == "servicecontrol"

    def test_monitoring_container(self) -> None:
        builder, sc = _make_sc()
        with_monitoring(sc, port=None)
        monitoring = builder.get("servicecontrol-monitoring")
        assert sc.resource.monitoring is monitoring
        assert monitoring.image.reference == "docker.io/particular/servicecontrol-monitoring:6.6"
        assert monitoring.endpoints["http"].target_port == 33633
        assert monitoring.endpoints["http"].port is None
        assert monitoring.health_checks == [HealthCheck(HealthCheckKind.HTTP, "connection", "http")]
        assert monitoring.parent == "servicecontrol"

    def test_service_pulse_container(self) -> None:
        builder, sc = _make_sc()
        with_service_pulse(sc, port=9191)
        pulse = builder.get("servicecontrol-servicepulse")
        assert sc.resource.service_pulse is pulse
        assert pulse.image.reference == "docker.io/particular/servicepulse:2.0"
        assert pulse.endpoints["http"].target_port == 9090
        assert pulse.endpoints["http"].port == 9191
        assert pulse.endpoints["http"].display.display_text == "ServicePulse"
        assert pulse.wait_for == ["servicecontrol"]
        assert pulse.parent is None

    def test_functions_return_same_builder(self) -> None:
        _, sc = _make_sc()
        assert with_audit(sc) is sc
        assert with_monitoring(sc) is sc
        assert with_service_pulse(sc) is sc
        assert with_rabbitmq_transport(sc) is sc

    def test_second_audit_name_collides(self) -> None:
        _, sc = _make_sc()
        with_audit(sc)
        with pytest.raises(InvalidArgumentError):
            with_audit(sc)
