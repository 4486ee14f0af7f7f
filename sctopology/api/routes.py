"""Routes of the read-only topology API."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from sctopology.api.schemas import ErrorResponse, HealthResponse, ResourceDetail, ResourceSummary
from sctopology.errors import ResourceNotFoundError
from sctopology.hosting import Topology, describe_resource, render_manifest

router = APIRouter()


def _topology(request: Request) -> Topology:
    return request.app.state.topology


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    from sctopology import __version__

    return HealthResponse(version=__version__, resources=len(_topology(request).resources))


@router.get("/manifest")
async def manifest(request: Request) -> dict[str, Any]:
    return render_manifest(_topology(request))


@router.get("/resources", response_model=list[ResourceSummary])
async def list_resources(request: Request) -> list[ResourceSummary]:
    return [
        ResourceSummary(name=r.name, type=r.kind.value, parent=r.parent) for r in _topology(request).resources
    ]


@router.get(
    "/resources/{name}",
    response_model=ResourceDetail,
    responses={404: {"model": ErrorResponse}},
)
async def get_resource(name: str, request: Request) -> ResourceDetail | JSONResponse:
    try:
        info = describe_resource(_topology(request), name, redact=True)
    except ResourceNotFoundError as exc:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error="RESOURCE_NOT_FOUND", detail=str(exc)).model_dump(),
        )
    return ResourceDetail.model_validate(info)


@router.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
