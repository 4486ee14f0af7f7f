"""Deferred values used in resource environments.

Values are kept symbolic until the topology is rendered: the manifest shows
placeholders, the resolver substitutes concrete container-network addresses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class EndpointProperty(StrEnum):
    """Part of an endpoint an expression refers to."""

    URL = "url"
    HOST = "host"
    PORT = "port"


@dataclass(frozen=True)
class EndpointReference:
    """Reference to a named endpoint on another resource."""

    resource: str
    endpoint: str = "http"
    prop: EndpointProperty = EndpointProperty.URL

    def with_property(self, prop: EndpointProperty) -> EndpointReference:
        return EndpointReference(resource=self.resource, endpoint=self.endpoint, prop=prop)

    @property
    def placeholder(self) -> str:
        return f"{{{self.resource}.bindings.{self.endpoint}.{self.prop.value}}}"


@dataclass(frozen=True)
class ReferenceExpression:
    """A ``str.format`` template with positional deferred values.

    Example::

        ReferenceExpression('[{{"api_uri":"{0}"}}]', (EndpointReference("sc-audit"),))
    """

    format: str
    values: tuple[object, ...] = ()
