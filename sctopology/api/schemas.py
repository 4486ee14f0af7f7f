"""Pydantic response models for the read-only topology API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    error: str
    detail: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    resources: int


class EndpointInfo(BaseModel):
    name: str
    scheme: str
    target_port: int
    port: int | None = None
    display_text: str | None = None
    display_location: str | None = None


class HealthCheckInfo(BaseModel):
    kind: str
    path: str
    endpoint: str


class ResourceSummary(BaseModel):
    name: str
    type: str
    parent: str | None = None


class ResourceDetail(ResourceSummary):
    """Full view of one resource; secret parameter values are redacted."""

    image: str | None = None
    children: list[str] = Field(default_factory=list)
    wait_for: list[str] = Field(default_factory=list)
    health_checks: list[HealthCheckInfo] = Field(default_factory=list)
    endpoints: list[EndpointInfo] = Field(default_factory=list)
    environment: dict[str, str] = Field(default_factory=dict)
