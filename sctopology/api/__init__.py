"""Read-only REST API over a built topology.

Exposes:
    create_app -- FastAPI application factory.
"""

from sctopology.api.app import create_app

__all__ = ["create_app"]
