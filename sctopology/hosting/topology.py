"""Immutable result of TopologyBuilder.build()."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from sctopology.errors import ResourceNotFoundError
from sctopology.hosting.resources import Resource, ResourceWithConnectionString
from sctopology.models.expressions import EndpointReference, ReferenceExpression


@dataclass(frozen=True)
class Topology:
    """Resources in registration order plus their resolved environments.

    Environment values are still symbolic (endpoint references, expressions,
    parameters); see ``sctopology.hosting.manifest`` for rendering.
    """

    resources: tuple[Resource, ...]
    environments: Mapping[str, Mapping[str, object]]

    @classmethod
    def freeze(cls, resources: list[Resource], environments: dict[str, dict[str, object]]) -> Topology:
        return cls(
            resources=tuple(resources),
            environments=MappingProxyType(
                {name: MappingProxyType(dict(env)) for name, env in environments.items()}
            ),
        )

    def __contains__(self, name: object) -> bool:
        return any(r.name == name for r in self.resources)

    def get(self, name: str) -> Resource:
        for resource in self.resources:
            if resource.name == name:
                return resource
        raise ResourceNotFoundError(name)

    def environment(self, name: str) -> Mapping[str, object]:
        """Resolved environment of *name*; empty for resources without one."""
        self.get(name)
        return self.environments.get(name, MappingProxyType({}))

    def children(self, name: str) -> list[Resource]:
        """Resources displayed under *name*."""
        return [r for r in self.resources if r.parent == name]


def iter_endpoint_references(value: object) -> Iterator[EndpointReference]:
    """Yield every endpoint reference reachable from an environment value."""
    if isinstance(value, EndpointReference):
        yield value
    elif isinstance(value, ReferenceExpression):
        for item in value.values:
            yield from iter_endpoint_references(item)
    elif isinstance(value, ResourceWithConnectionString):
        yield from iter_endpoint_references(value.connection_string_expression)
