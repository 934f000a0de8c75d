"""FastAPI dependency injection."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from holdermap.cache.client import AsyncRedisClient
from holdermap.config import HoldermapSettings
from holdermap.config import get_settings as _get_settings
from holdermap.resolution.registry import ResolverRegistry
from holdermap.services.report import TokenReportService


def get_settings() -> HoldermapSettings:
    """Get cached application settings."""
    return _get_settings()


async def get_cache_client(request: Request) -> AsyncRedisClient | None:
    """Get Redis cache client from app state."""
    return getattr(request.app.state, "cache_client", None)


async def get_resolver_registry(request: Request) -> ResolverRegistry:
    """Get resolver registry from app state."""
    return request.app.state.resolver_registry


async def get_report_service(
    registry: ResolverRegistry = Depends(get_resolver_registry),
) -> TokenReportService:
    """Get token report service over the shared registry."""
    return TokenReportService(registry)


# Type aliases for cleaner dependency injection
Settings = Annotated[HoldermapSettings, Depends(get_settings)]
CacheClient = Annotated[AsyncRedisClient | None, Depends(get_cache_client)]
Resolvers = Annotated[ResolverRegistry, Depends(get_resolver_registry)]
ReportService = Annotated[TokenReportService, Depends(get_report_service)]
