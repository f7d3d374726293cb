"""Schemas for health check endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class ServiceHealth(BaseModel):
    """Result of one dependency check."""

    service: str
    status: str
    latency_ms: float | None = None
    details: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str
    shutting_down: bool = False
    services: list[ServiceHealth]
