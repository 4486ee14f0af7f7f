"""Exception types raised while composing a topology.

Every error aborts topology construction; nothing here is retried.
"""

from __future__ import annotations


class TopologyError(Exception):
    """Base class for all sctopology errors."""


class InvalidArgumentError(TopologyError, ValueError):
    """A required argument was missing, empty or out of range."""


class DuplicateResourceError(InvalidArgumentError):
    """A resource with the same name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Resource '{name}' is already registered")
        self.name = name


class InvalidStateError(TopologyError, RuntimeError):
    """An operation was attempted before the resource was ready for it."""


class ConfigError(TopologyError, ValueError):
    """Invalid SCTOPOLOGY_* environment configuration."""


def require(value: object, argument: str) -> None:
    """Raise InvalidArgumentError if *value* is None or an empty string."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidArgumentError(f"'{argument}' must not be empty")


class ResourceNotFoundError(TopologyError, KeyError):
    """No resource with the requested name exists in the topology."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Resource '{name}' not found")
        self.name = name

    def __str__(self) -> str:
        return str(self.args[0])
