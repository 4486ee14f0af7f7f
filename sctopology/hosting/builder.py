"""Fluent builder for the application model.

Usage::

    builder = TopologyBuilder()
    db = builder.add_container("orders-db", "postgres", "17").with_http_endpoint(target_port=5432)
    api = builder.add_project("orders", "src/orders").wait_for(db)
    topology = builder.build()

``build()`` is the single finalize step: every environment callback is
evaluated there, after all resources have been attached, so the order of
builder calls never changes the resulting configuration.
"""

from __future__ import annotations

import dataclasses
from typing import Generic, TypeVar

import structlog

from sctopology.errors import (
    DuplicateResourceError,
    InvalidArgumentError,
    InvalidStateError,
    require,
)
from sctopology.hosting.resources import (
    ContainerResource,
    EnvironmentCallback,
    ParameterResource,
    ProjectResource,
    Resource,
    ResourceWithConnectionString,
    ResourceWithEnvironment,
    is_valid_resource_name,
    validate_port,
)
from sctopology.hosting.topology import Topology, iter_endpoint_references
from sctopology.models.expressions import EndpointReference
from sctopology.models.resources import (
    ContainerImage,
    Endpoint,
    HealthCheck,
    HealthCheckKind,
    Relationship,
    RelationshipType,
    UrlDisplay,
    UrlDisplayLocation,
)
from sctopology.observability.metrics import resources_added_total, topology_builds_total

_log = structlog.get_logger(component="hosting.builder")

R = TypeVar("R", bound=Resource)


class ResourceBuilder(Generic[R]):
    """Wraps a registered resource and returns itself from every ``with_*`` call."""

    def __init__(self, application_builder: TopologyBuilder, resource: R) -> None:
        self.application_builder = application_builder
        self.resource = resource

    # ------------------------------------------------------------------
    # Container image
    # ------------------------------------------------------------------

    def with_image(self, image: str, tag: str = "latest") -> ResourceBuilder[R]:
        container = self._container()
        require(image, "image")
        require(tag, "tag")
        registry = container.image.registry if container.image else None
        container.image = ContainerImage(image=image, tag=tag, registry=registry)
        return self

    def with_image_registry(self, registry: str) -> ResourceBuilder[R]:
        container = self._container()
        require(registry, "registry")
        if container.image is None:
            raise InvalidStateError(f"Resource '{container.name}' has no image to set a registry on")
        container.image = dataclasses.replace(container.image, registry=registry)
        return self

    def with_image_tag(self, tag: str) -> ResourceBuilder[R]:
        container = self._container()
        require(tag, "tag")
        if container.image is None:
            raise InvalidStateError(f"Resource '{container.name}' has no image to set a tag on")
        container.image = dataclasses.replace(container.image, tag=tag)
        return self

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def with_endpoint(
        self,
        name: str,
        target_port: int,
        port: int | None = None,
        scheme: str = "tcp",
    ) -> ResourceBuilder[R]:
        require(name, "name")
        target = validate_port(target_port, "target_port")
        if target is None:
            raise InvalidArgumentError("'target_port' must not be empty")
        self._process().add_endpoint(
            Endpoint(
                name=name,
                target_port=target,
                port=validate_port(port),
                scheme=scheme,
                transport="http" if scheme in ("http", "https") else "tcp",
            )
        )
        return self

    def with_http_endpoint(
        self,
        target_port: int,
        port: int | None = None,
        name: str = "http",
    ) -> ResourceBuilder[R]:
        return self.with_endpoint(name, target_port=target_port, port=port, scheme="http")

    def with_url_for_endpoint(
        self,
        endpoint: str,
        display_text: str | None = None,
        location: UrlDisplayLocation = UrlDisplayLocation.SUMMARY_AND_DETAILS,
    ) -> ResourceBuilder[R]:
        process = self._process()
        current = process.endpoints.get(endpoint)
        if current is None:
            raise InvalidArgumentError(f"Resource '{process.name}' has no endpoint '{endpoint}'")
        display = UrlDisplay(display_text=display_text, location=location)
        process.endpoints[endpoint] = dataclasses.replace(current, display=display)
        return self

    def get_endpoint(self, name: str = "http") -> EndpointReference:
        return self._process().get_endpoint(name)

    # ------------------------------------------------------------------
    # Process configuration
    # ------------------------------------------------------------------

    def with_environment(self, key: str, value: object) -> ResourceBuilder[R]:
        if isinstance(value, ResourceBuilder):
            value = value.resource
        self._process().set_environment(key, value)
        return self

    def with_environment_callback(self, callback: EnvironmentCallback) -> ResourceBuilder[R]:
        require(callback, "callback")
        self._process().add_environment_callback(callback)
        return self

    def with_args(self, *args: str) -> ResourceBuilder[R]:
        self._process().args.extend(args)
        return self

    def with_reference(
        self,
        source: ResourceBuilder[Resource] | Resource,
        connection_name: str | None = None,
    ) -> ResourceBuilder[R]:
        """Inject *source*'s connection string as ``ConnectionStrings__<connection_name>``."""
        target = source.resource if isinstance(source, ResourceBuilder) else source
        if not isinstance(target, ResourceWithConnectionString):
            raise InvalidArgumentError(f"Resource '{getattr(target, 'name', target)}' has no connection string")
        name = connection_name or target.name
        self._process().set_environment(f"ConnectionStrings__{name}", target)
        self.resource.relationships.append(Relationship(resource=target.name, type=RelationshipType.REFERENCE))
        return self

    # ------------------------------------------------------------------
    # Orchestration hints
    # ------------------------------------------------------------------

    def with_http_health_check(self, path: str = "/", endpoint: str = "http") -> ResourceBuilder[R]:
        require(path, "path")
        self.resource.health_checks.append(HealthCheck(kind=HealthCheckKind.HTTP, path=path, endpoint=endpoint))
        return self

    def wait_for(self, other: ResourceBuilder[Resource] | Resource) -> ResourceBuilder[R]:
        dependency = other.resource if isinstance(other, ResourceBuilder) else other
        require(dependency, "other")
        if dependency.name == self.resource.name:
            raise InvalidArgumentError(f"Resource '{self.resource.name}' cannot wait for itself")
        if dependency.name not in self.resource.wait_for:
            self.resource.wait_for.append(dependency.name)
        return self

    def with_parent_relationship(self, parent: ResourceBuilder[Resource] | Resource) -> ResourceBuilder[R]:
        target = parent.resource if isinstance(parent, ResourceBuilder) else parent
        if target is not None and target.name == self.resource.name:
            raise InvalidArgumentError(f"Resource '{self.resource.name}' cannot be its own parent")
        self.resource.set_parent(target)
        return self

    # ------------------------------------------------------------------

    def _process(self) -> ResourceWithEnvironment:
        if not isinstance(self.resource, ResourceWithEnvironment):
            raise InvalidStateError(f"Resource '{self.resource.name}' does not run as a process")
        return self.resource

    def _container(self) -> ContainerResource:
        if not isinstance(self.resource, ContainerResource):
            raise InvalidStateError(f"Resource '{self.resource.name}' is not a container")
        return self.resource

    def __repr__(self) -> str:
        return f"ResourceBuilder({self.resource!r})"


class TopologyBuilder:
    """Collects resources and produces an immutable Topology.

    Not thread-safe: a topology is composed by one call sequence.
    """

    def __init__(self) -> None:
        self._resources: dict[str, Resource] = {}

    @property
    def resources(self) -> list[Resource]:
        return list(self._resources.values())

    def get(self, name: str) -> Resource | None:
        return self._resources.get(name)

    def add_resource(self, resource: R) -> ResourceBuilder[R]:
        require(resource, "resource")
        if not is_valid_resource_name(resource.name):
            raise InvalidArgumentError(
                f"Invalid resource name {resource.name!r}: use letters, digits and single hyphens, "
                "start with a letter, at most 64 characters"
            )
        if resource.name in self._resources:
            raise DuplicateResourceError(resource.name)
        self._resources[resource.name] = resource
        resources_added_total.labels(kind=resource.kind.value).inc()
        _log.debug("resource_added", name=resource.name, kind=resource.kind.value)
        return ResourceBuilder(self, resource)

    def add_container(self, name: str, image: str, tag: str = "latest") -> ResourceBuilder[ContainerResource]:
        require(image, "image")
        return self.add_resource(ContainerResource(name, ContainerImage(image=image, tag=tag)))

    def add_project(self, name: str, path: str) -> ResourceBuilder[ProjectResource]:
        return self.add_resource(ProjectResource(name, path))

    def add_parameter(self, name: str, value: str, secret: bool = False) -> ResourceBuilder[ParameterResource]:
        return self.add_resource(ParameterResource(name, value, secret=secret))

    def build(self) -> Topology:
        """Resolve every environment once and freeze the result.

        Raises:
            InvalidStateError: a resource refers to a resource or endpoint
                that is not part of the topology.
        """
        environments: dict[str, dict[str, object]] = {}
        for resource in self._resources.values():
            if isinstance(resource, ResourceWithEnvironment):
                environments[resource.name] = resource.resolve_environment()

        self._validate(environments)

        topology = Topology.freeze(list(self._resources.values()), environments)
        topology_builds_total.inc()
        _log.info("topology_built", resources=len(self._resources))
        return topology

    def _validate(self, environments: dict[str, dict[str, object]]) -> None:
        for resource in self._resources.values():
            for dependency in resource.wait_for:
                if dependency not in self._resources:
                    raise InvalidStateError(f"Resource '{resource.name}' waits for unknown resource '{dependency}'")
            for rel in resource.relationships:
                if rel.resource not in self._resources:
                    raise InvalidStateError(
                        f"Resource '{resource.name}' has a {rel.type.value} relationship "
                        f"to unknown resource '{rel.resource}'"
                    )

        for owner, env in environments.items():
            for key, value in env.items():
                for ref in iter_endpoint_references(value):
                    target = self._resources.get(ref.resource)
                    if not isinstance(target, ResourceWithEnvironment) or ref.endpoint not in target.endpoints:
                        raise InvalidStateError(
                            f"Environment variable '{key}' of '{owner}' refers to missing endpoint "
                            f"'{ref.resource}/{ref.endpoint}'"
                        )
