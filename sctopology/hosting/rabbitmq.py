"""RabbitMQ broker resource.

The broker is someone else's container: this module only describes it
(image, ports, credentials) and exposes its AMQP connection string.
"""

from __future__ import annotations

import secrets

import structlog

from sctopology.errors import InvalidArgumentError
from sctopology.hosting.builder import ResourceBuilder, TopologyBuilder
from sctopology.hosting.resources import (
    ContainerResource,
    ParameterResource,
    ResourceWithConnectionString,
)
from sctopology.models.expressions import EndpointProperty, ReferenceExpression
from sctopology.models.resources import ContainerImage

_log = structlog.get_logger(component="hosting.rabbitmq")

REGISTRY = "docker.io"
IMAGE = "library/rabbitmq"
TAG = "4.1"
MANAGEMENT_TAG_SUFFIX = "-management"

AMQP_PORT = 5672
MANAGEMENT_PORT = 15672
DEFAULT_USER_NAME = "guest"


class RabbitMQServerResource(ContainerResource, ResourceWithConnectionString):
    """A RabbitMQ container with an ``amqp://`` connection string."""

    PRIMARY_ENDPOINT = "tcp"

    def __init__(self, name: str, user_name: str | ParameterResource, password: ParameterResource) -> None:
        super().__init__(name, ContainerImage(image=IMAGE, tag=TAG, registry=REGISTRY))
        if password is None:
            raise InvalidArgumentError("'password' must not be empty")
        self.user_name = user_name
        self.password = password

    @property
    def connection_string_expression(self) -> ReferenceExpression:
        endpoint = self.get_endpoint(self.PRIMARY_ENDPOINT)
        return ReferenceExpression(
            "amqp://{0}:{1}@{2}:{3}",
            (
                self.user_name,
                self.password,
                endpoint.with_property(EndpointProperty.HOST),
                endpoint.with_property(EndpointProperty.PORT),
            ),
        )


def add_rabbitmq(
    builder: TopologyBuilder,
    name: str,
    port: int | None = None,
    user_name: str | ParameterResource | None = None,
    password: ParameterResource | None = None,
) -> ResourceBuilder[RabbitMQServerResource]:
    """Register a RabbitMQ broker.

    Without an explicit *password* a secret ``<name>-password`` parameter with
    a generated value is added as well.
    """
    if password is None:
        password = builder.add_parameter(f"{name}-password", secrets.token_urlsafe(18), secret=True).resource
    broker = RabbitMQServerResource(name, user_name or DEFAULT_USER_NAME, password)
    rabbit = (
        builder.add_resource(broker)
        .with_endpoint(RabbitMQServerResource.PRIMARY_ENDPOINT, target_port=AMQP_PORT, port=port, scheme="tcp")
        .with_environment("RABBITMQ_DEFAULT_USER", broker.user_name)
        .with_environment("RABBITMQ_DEFAULT_PASS", broker.password)
    )
    _log.info("rabbitmq_added", name=name, port=port)
    return rabbit


def with_management_plugin(
    rabbit: ResourceBuilder[RabbitMQServerResource],
    port: int | None = None,
) -> ResourceBuilder[RabbitMQServerResource]:
    """Switch to the management image and expose the management UI on *port*."""
    image = rabbit.resource.image
    if image is not None and not image.tag.endswith(MANAGEMENT_TAG_SUFFIX):
        rabbit.with_image_tag(f"{image.tag}{MANAGEMENT_TAG_SUFFIX}")
    return rabbit.with_http_endpoint(target_port=MANAGEMENT_PORT, port=port, name="management")
