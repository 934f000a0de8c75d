"""Health check endpoints."""

from __future__ import annotations

import os
from typing import Literal

from fastapi import APIRouter, Request

from holdermap import __version__
from holdermap.api.schemas import HealthResponse
from holdermap.cache.backends import FileSystemBackend
from holdermap.cache.client import AsyncRedisClient
from holdermap.cache.keys import CacheKeys
from holdermap.resolution.registry import ResolverRegistry

router = APIRouter(tags=["health"])

ServiceStatus = Literal["up", "down", "unknown"]


def _screenshot_backend(registry: ResolverRegistry | None) -> FileSystemBackend | None:
    backend = registry.image_cache.backend if registry else None
    return backend if isinstance(backend, FileSystemBackend) else None


def _check_screenshots(backend: FileSystemBackend | None) -> ServiceStatus:
    """Captures are only cached if the directory is writable."""
    if backend is None:
        return "unknown"
    directory = backend.directory
    return "up" if directory.is_dir() and os.access(directory, os.W_OK) else "down"


def _check_fallback(backend: FileSystemBackend | None) -> ServiceStatus:
    """The generic image is created on the first failed capture."""
    if backend is None:
        return "unknown"
    return "up" if backend.path_for(CacheKeys.fallback()).is_file() else "unknown"


async def _check_redis(client: AsyncRedisClient | None) -> ServiceStatus:
    if client is None:
        return "unknown"
    try:
        return "up" if await client.ping() else "down"
    except Exception:
        return "down"


@router.get(
    "/health",
    response_model=HealthResponse,
    operation_id="getHealth",
    summary="Health check",
    description="Check the health status of the API and its dependencies.",
)
async def health_check(request: Request) -> HealthResponse:
    """Check API health status.

    Unhealthy when captures cannot be cached, degraded when Redis is down.
    """
    backend = _screenshot_backend(getattr(request.app.state, "resolver_registry", None))
    services: dict[str, ServiceStatus] = {
        "screenshots": _check_screenshots(backend),
        "fallback": _check_fallback(backend),
        "redis": await _check_redis(getattr(request.app.state, "cache_client", None)),
    }

    overall_status: Literal["healthy", "degraded", "unhealthy"] = "healthy"
    if services["screenshots"] == "down":
        overall_status = "unhealthy"
    elif services["redis"] == "down":
        overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=__version__,
        services=services,
    )


@router.get(
    "/ready",
    operation_id="getReady",
    summary="Readiness check",
    description="Check if the API is ready to serve traffic.",
)
async def readiness_check(request: Request) -> dict[str, bool]:
    """Ready once the registry exists and captures can be cached."""
    registry = getattr(request.app.state, "resolver_registry", None)
    ready = registry is not None and _check_screenshots(_screenshot_backend(registry)) != "down"
    return {"ready": ready}
