"""Metadata attached to resources in the application model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ResourceKind(StrEnum):
    """Manifest type of a resource."""

    CONTAINER = "container.v0"
    PROJECT = "project.v0"
    PARAMETER = "parameter.v0"


class UrlDisplayLocation(StrEnum):
    """Where a dashboard shows an endpoint URL."""

    SUMMARY_AND_DETAILS = "summary_and_details"
    DETAILS_ONLY = "details_only"


class HealthCheckKind(StrEnum):
    """How the orchestrator probes a resource."""

    HTTP = "http"


class RelationshipType(StrEnum):
    """Non-owning association between two resources."""

    PARENT = "Parent"
    REFERENCE = "Reference"


@dataclass(frozen=True)
class ContainerImage:
    """Fully qualified container image."""

    image: str
    tag: str = "latest"
    registry: str | None = None

    @property
    def reference(self) -> str:
        """Return ``registry/image:tag``, omitting the registry when unset."""
        prefix = f"{self.registry}/" if self.registry else ""
        return f"{prefix}{self.image}:{self.tag}"


@dataclass(frozen=True)
class UrlDisplay:
    """Presentation hint for an endpoint URL."""

    display_text: str | None = None
    location: UrlDisplayLocation = UrlDisplayLocation.SUMMARY_AND_DETAILS


@dataclass(frozen=True)
class Endpoint:
    """A network endpoint exposed by a resource.

    ``target_port`` is the container-internal port and is fixed per image.
    ``port`` is the host port; None lets the orchestrator allocate one.
    """

    name: str
    target_port: int
    port: int | None = None
    scheme: str = "http"
    transport: str = "http"
    display: UrlDisplay | None = None


@dataclass(frozen=True)
class HealthCheck:
    """Health probe registered for a resource; executed by the orchestrator."""

    kind: HealthCheckKind
    path: str
    endpoint: str = "http"


@dataclass(frozen=True)
class Relationship:
    """Points at another resource by name; never owns it."""

    resource: str
    type: RelationshipType = RelationshipType.PARENT
