"""Health check endpoints for production monitoring."""

from __future__ import annotations

import time

from fastapi import APIRouter, Request

from greda_gbc.middleware import is_shutdown_requested
from greda_gbc.schemas.health import HealthResponse, ServiceHealth
from greda_gbc.services import catalog
from greda_gbc.store import data_store

router = APIRouter(tags=["health"])


async def _check_service(name: str, check_fn) -> ServiceHealth:
    """Run a health check function and return a ServiceHealth result."""
    start = time.monotonic()
    try:
        await check_fn()
        latency = (time.monotonic() - start) * 1000
        return ServiceHealth(service=name, status="healthy", latency_ms=round(latency, 2))
    except Exception as exc:
        latency = (time.monotonic() - start) * 1000
        return ServiceHealth(
            service=name,
            status="unhealthy",
            latency_ms=round(latency, 2),
            details=str(exc)[:200],
        )


async def _check_catalog() -> None:
    """The scoring ruleset must add up to the certification ceiling."""
    total = sum(catalog.SECTION_MAX_SCORES.values())
    if total != catalog.MAX_POSSIBLE_SCORE:
        raise RuntimeError(f"catalog sums to {total}, expected {catalog.MAX_POSSIBLE_SCORE}")


async def _check_store() -> None:
    data_store.list_assessments(include_archived=True)


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Basic health check: is the application running?"""
    settings = request.app.state.settings
    services = [await _check_service("catalog", _check_catalog)]
    overall = "healthy" if all(s.status == "healthy" for s in services) else "degraded"

    return HealthResponse(
        status=overall,
        version=settings.app_version,
        environment=settings.environment,
        services=services,
    )


@router.get("/health/ready", response_model=HealthResponse)
async def readiness_check(request: Request) -> HealthResponse:
    """Readiness check: catalog and store reachable, not shutting down."""
    settings = request.app.state.settings
    services = [
        await _check_service("catalog", _check_catalog),
        await _check_service("store", _check_store),
    ]

    shutting_down = is_shutdown_requested()
    ready = all(s.status == "healthy" for s in services) and not shutting_down
    return HealthResponse(
        status="healthy" if ready else "unhealthy",
        version=settings.app_version,
        environment=settings.environment,
        shutting_down=shutting_down,
        services=services,
    )


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
