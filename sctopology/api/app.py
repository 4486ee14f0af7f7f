"""FastAPI application factory for the read-only topology API.

Usage::

    from sctopology.api.app import create_app

    app = create_app(topology=build_topology(config), config=config)
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sctopology.api.routes import router
from sctopology.api.schemas import ErrorResponse
from sctopology.hosting import Topology

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api/v1"


def create_app(topology: Topology, config: Any = None) -> FastAPI:
    """Create the API serving *topology*.

    Args:
        topology: Built Topology to expose.
        config:   Optional SCTopologyConfig, kept on ``app.state`` for handlers.
    """
    from sctopology import __version__

    app = FastAPI(
        title="sctopology",
        summary="ServiceControl topology API",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    app.state.topology = topology
    app.state.config = config

    app.include_router(router, prefix=_API_PREFIX)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        _request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        error = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=error, detail=str(exc.detail)).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = exc.errors()
        detail = str(errors[0].get("msg", "")) if errors else "Invalid request"
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="INVALID_REQUEST", detail=detail).model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                detail="An unexpected error occurred.",
            ).model_dump(),
        )

    return app
