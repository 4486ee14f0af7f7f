"""Resources of the application model.

Resources are plain mutable objects while the topology is being composed.
They are touched only by the single call sequence that assembles the
topology; none of them is safe for concurrent mutation.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import ClassVar

from sctopology.errors import InvalidArgumentError, require
from sctopology.models.expressions import EndpointProperty, EndpointReference, ReferenceExpression
from sctopology.models.resources import (
    ContainerImage,
    Endpoint,
    HealthCheck,
    Relationship,
    RelationshipType,
    ResourceKind,
)

EnvironmentCallback = Callable[[dict[str, object]], None]

_RESOURCE_NAME = re.compile(r"^[A-Za-z](?:[A-Za-z0-9]|-(?!-))*$")
MAX_RESOURCE_NAME_LENGTH = 64


def is_valid_resource_name(name: str) -> bool:
    """ASCII letters, digits and single hyphens; starts with a letter, no trailing hyphen."""
    return (
        0 < len(name) <= MAX_RESOURCE_NAME_LENGTH
        and _RESOURCE_NAME.match(name) is not None
        and not name.endswith("-")
    )


def validate_port(port: int | None, argument: str = "port") -> int | None:
    if port is None:
        return None
    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
        raise InvalidArgumentError(f"'{argument}' must be an integer in 1..65535, got {port!r}")
    return port


class Resource:
    """Base of every named resource in the application model."""

    kind: ClassVar[ResourceKind]

    def __init__(self, name: str) -> None:
        require(name, "name")
        self.name = name
        self.relationships: list[Relationship] = []
        self.wait_for: list[str] = []
        self.health_checks: list[HealthCheck] = []

    @property
    def parent(self) -> str | None:
        """Name of the display parent, if any."""
        for rel in self.relationships:
            if rel.type is RelationshipType.PARENT:
                return rel.resource
        return None

    def set_parent(self, parent: Resource) -> None:
        """Group this resource under *parent* for display. Replaces any previous parent."""
        require(parent, "parent")
        self.relationships = [r for r in self.relationships if r.type is not RelationshipType.PARENT]
        self.relationships.append(Relationship(resource=parent.name, type=RelationshipType.PARENT))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class ResourceWithConnectionString(ABC):
    """Mixin for resources other resources can connect to."""

    name: str

    @property
    @abstractmethod
    def connection_string_expression(self) -> ReferenceExpression:
        """Expression that renders to this resource's connection string."""


class ResourceWithEnvironment(Resource):
    """A resource that runs as a process: endpoints, args and environment."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.endpoints: dict[str, Endpoint] = {}
        self.args: list[str] = []
        self.environment: dict[str, object] = {}
        self._environment_callbacks: list[EnvironmentCallback] = []

    def add_endpoint(self, endpoint: Endpoint) -> None:
        if endpoint.name in self.endpoints:
            raise InvalidArgumentError(f"Endpoint '{endpoint.name}' already exists on resource '{self.name}'")
        self.endpoints[endpoint.name] = endpoint

    def get_endpoint(self, name: str = "http") -> EndpointReference:
        """Return a reference to endpoint *name*.

        The endpoint does not have to exist yet; dangling references are
        reported when the topology is built.
        """
        return EndpointReference(resource=self.name, endpoint=name, prop=EndpointProperty.URL)

    def set_environment(self, key: str, value: object) -> None:
        require(key, "key")
        if value is None:
            raise InvalidArgumentError(f"Environment variable '{key}' must have a value")
        self.environment[key] = value

    def add_environment_callback(self, callback: EnvironmentCallback) -> None:
        self._environment_callbacks.append(callback)

    def resolve_environment(self) -> dict[str, object]:
        """Static values first, then callbacks in registration order."""
        env = dict(self.environment)
        for callback in self._environment_callbacks:
            callback(env)
        return env


class ContainerResource(ResourceWithEnvironment):
    kind = ResourceKind.CONTAINER

    def __init__(self, name: str, image: ContainerImage | None = None) -> None:
        super().__init__(name)
        self.image = image


class ProjectResource(ResourceWithEnvironment):
    """A locally built service that consumes other resources."""

    kind = ResourceKind.PROJECT

    def __init__(self, name: str, path: str) -> None:
        super().__init__(name)
        require(path, "path")
        self.path = path


class ParameterResource(Resource):
    """A named input value, optionally secret."""

    kind = ResourceKind.PARAMETER

    def __init__(self, name: str, value: str, secret: bool = False) -> None:
        super().__init__(name)
        if value is None:
            raise InvalidArgumentError(f"Parameter '{name}' must have a value")
        self.value = value
        self.secret = secret
