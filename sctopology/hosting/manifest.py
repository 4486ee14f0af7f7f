"""Rendering of a Topology into a deployment manifest or concrete values.

Two renderings exist for every environment value:

- manifest: placeholders such as ``{orders-db.bindings.http.url}``,
  ``{broker-password.value}`` or ``{broker.connectionString}`` that a
  deployment tool substitutes later;
- resolved: concrete values on the container network, where every
  resource is reachable by its name on its target port.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

import structlog

from sctopology.errors import InvalidStateError
from sctopology.hosting.resources import (
    ContainerResource,
    ParameterResource,
    ProjectResource,
    Resource,
    ResourceWithConnectionString,
    ResourceWithEnvironment,
)
from sctopology.hosting.topology import Topology
from sctopology.models.expressions import EndpointProperty, EndpointReference, ReferenceExpression
from sctopology.models.resources import Endpoint

_log = structlog.get_logger(component="hosting.manifest")

REDACTED = "***"


class RenderMode(StrEnum):
    MANIFEST = "manifest"
    RESOLVED = "resolved"


def render_value(
    value: object,
    topology: Topology,
    mode: RenderMode = RenderMode.MANIFEST,
    redact: bool = False,
) -> str:
    """Render a single environment value to a string."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, int | float):
        return str(value)
    if isinstance(value, EndpointReference):
        if mode is RenderMode.MANIFEST:
            return value.placeholder
        return _resolve_endpoint(value, topology)
    if isinstance(value, ReferenceExpression):
        rendered = [render_value(v, topology, mode, redact) for v in value.values]
        return value.format.format(*rendered)
    if isinstance(value, ParameterResource):
        if mode is RenderMode.MANIFEST:
            return f"{{{value.name}.value}}"
        return REDACTED if (redact and value.secret) else value.value
    if isinstance(value, ResourceWithConnectionString):
        if mode is RenderMode.MANIFEST:
            return f"{{{value.name}.connectionString}}"
        return render_value(value.connection_string_expression, topology, mode, redact)
    raise InvalidStateError(f"Cannot render environment value of type {type(value).__name__}")


def _resolve_endpoint(ref: EndpointReference, topology: Topology) -> str:
    resource = topology.get(ref.resource)
    endpoint = resource.endpoints.get(ref.endpoint) if isinstance(resource, ResourceWithEnvironment) else None
    if endpoint is None:
        raise InvalidStateError(f"Resource '{ref.resource}' has no endpoint '{ref.endpoint}'")
    if ref.prop is EndpointProperty.HOST:
        return ref.resource
    if ref.prop is EndpointProperty.PORT:
        return str(endpoint.target_port)
    return f"{endpoint.scheme}://{ref.resource}:{endpoint.target_port}"


def resolve_environment(topology: Topology, name: str, redact: bool = False) -> dict[str, str]:
    """Concrete environment of resource *name*, sorted by key."""
    env = topology.environment(name)
    return {key: render_value(env[key], topology, RenderMode.RESOLVED, redact) for key in sorted(env)}


def _render_bindings(endpoints: dict[str, Endpoint]) -> dict[str, dict[str, Any]]:
    bindings: dict[str, dict[str, Any]] = {}
    for endpoint in endpoints.values():
        binding: dict[str, Any] = {
            "scheme": endpoint.scheme,
            "protocol": "tcp",
            "transport": endpoint.transport,
            "targetPort": endpoint.target_port,
        }
        if endpoint.port is not None:
            binding["port"] = endpoint.port
        bindings[endpoint.name] = binding
    return bindings


def _render_resource(resource: Resource, topology: Topology) -> dict[str, Any]:
    if isinstance(resource, ParameterResource):
        return {
            "type": resource.kind.value,
            "value": f"{{{resource.name}.inputs.value}}",
            "inputs": {"value": {"type": "string", "secret": resource.secret}},
        }

    entry: dict[str, Any] = {"type": resource.kind.value}
    if isinstance(resource, ResourceWithConnectionString):
        try:
            entry["connectionString"] = render_value(resource.connection_string_expression, topology)
        except InvalidStateError:
            _log.debug("connection_string_unavailable", resource=resource.name)
    if isinstance(resource, ContainerResource) and resource.image is not None:
        entry["image"] = resource.image.reference
    if isinstance(resource, ProjectResource):
        entry["path"] = resource.path
    if isinstance(resource, ResourceWithEnvironment):
        if resource.args:
            entry["args"] = list(resource.args)
        env = topology.environment(resource.name)
        if env:
            entry["env"] = {key: render_value(env[key], topology) for key in sorted(env)}
        if resource.endpoints:
            entry["bindings"] = _render_bindings(resource.endpoints)
    return entry


def render_manifest(topology: Topology) -> dict[str, Any]:
    """Render *topology* as ``{"resources": {name: entry}}`` in registration order."""
    return {"resources": {r.name: _render_resource(r, topology) for r in topology.resources}}


def describe_resource(topology: Topology, name: str, redact: bool = True) -> dict[str, Any]:
    """Summary of one resource for the CLI and the API."""
    resource = topology.get(name)
    info: dict[str, Any] = {
        "name": resource.name,
        "type": resource.kind.value,
        "parent": resource.parent,
        "children": [child.name for child in topology.children(resource.name)],
        "wait_for": list(resource.wait_for),
        "health_checks": [
            {"kind": hc.kind.value, "path": hc.path, "endpoint": hc.endpoint} for hc in resource.health_checks
        ],
        "image": None,
        "endpoints": [],
        "environment": {},
    }
    if isinstance(resource, ContainerResource) and resource.image is not None:
        info["image"] = resource.image.reference
    if isinstance(resource, ResourceWithEnvironment):
        info["endpoints"] = [
            {
                "name": ep.name,
                "scheme": ep.scheme,
                "target_port": ep.target_port,
                "port": ep.port,
                "display_text": ep.display.display_text if ep.display else None,
                "display_location": ep.display.location.value if ep.display else None,
            }
            for ep in resource.endpoints.values()
        ]
        info["environment"] = resolve_environment(topology, resource.name, redact=redact)
    return info
