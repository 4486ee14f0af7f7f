"""In-process application model.

Describes containers, projects and parameters, the endpoints they expose,
the environment they receive and the order they wait on each other. Nothing
here starts a process; the Topology is handed to an external orchestrator.
"""

from sctopology.hosting.builder import ResourceBuilder, TopologyBuilder
from sctopology.hosting.manifest import RenderMode, describe_resource, render_manifest, resolve_environment
from sctopology.hosting.rabbitmq import RabbitMQServerResource, add_rabbitmq, with_management_plugin
from sctopology.hosting.resources import (
    ContainerResource,
    ParameterResource,
    ProjectResource,
    Resource,
    ResourceWithConnectionString,
    ResourceWithEnvironment,
)
from sctopology.hosting.topology import Topology

__all__ = [
    "ContainerResource",
    "ParameterResource",
    "ProjectResource",
    "RabbitMQServerResource",
    "RenderMode",
    "Resource",
    "ResourceBuilder",
    "ResourceWithConnectionString",
    "ResourceWithEnvironment",
    "Topology",
    "TopologyBuilder",
    "add_rabbitmq",
    "describe_resource",
    "render_manifest",
    "resolve_environment",
    "with_management_plugin",
]
