"""Core data structures for sctopology."""

from sctopology.models.config import SCTopologyConfig
from sctopology.models.expressions import EndpointProperty, EndpointReference, ReferenceExpression
from sctopology.models.resources import (
    ContainerImage,
    Endpoint,
    HealthCheck,
    HealthCheckKind,
    Relationship,
    RelationshipType,
    ResourceKind,
    UrlDisplay,
    UrlDisplayLocation,
)

__all__ = [
    "ContainerImage",
    "Endpoint",
    "EndpointProperty",
    "EndpointReference",
    "HealthCheck",
    "HealthCheckKind",
    "ReferenceExpression",
    "Relationship",
    "RelationshipType",
    "ResourceKind",
    "SCTopologyConfig",
    "UrlDisplay",
    "UrlDisplayLocation",
]
