"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from holdermap import __version__
from holdermap.api.routes import health_router, tokens_router
from holdermap.api.schemas import APIError
from holdermap.api.schemas.base import ErrorCode
from holdermap.cache.client import AsyncRedisClient
from holdermap.config import HoldermapSettings, configure_logging, get_settings
from holdermap.core.exceptions import CacheError, UpstreamNotFoundError, ValidationError
from holdermap.resolution.registry import ResolverRegistry

logger = logging.getLogger(__name__)


async def _connect_redis(settings: HoldermapSettings) -> AsyncRedisClient | None:
    """Shared market-data cache, or None to keep it in process memory."""
    if not settings.redis_url:
        return None

    client = AsyncRedisClient(str(settings.redis_url))
    try:
        await client.connect()
    except CacheError as e:
        logger.warning(f"Redis unavailable, caching market data in memory: {e}")
        return None
    return client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Startup builds the one resolver registry every request shares: HTTP
    clients, the browser driver and both caches. Shutdown closes them.
    """
    settings = get_settings()
    configure_logging(settings)

    app.state.cache_client = await _connect_redis(settings)
    app.state.resolver_registry = ResolverRegistry.from_settings(
        settings, redis_client=app.state.cache_client
    )
    logger.info(f"Holdermap API {__version__} started, screenshots in {settings.screenshot_dir}")

    try:
        yield
    finally:
        logger.info("Shutting down application...")
        await app.state.resolver_registry.close_all()
        if app.state.cache_client:
            await app.state.cache_client.close()
        logger.info("Application shutdown complete")


def _error_response(
    status_code: int, code: ErrorCode, message: str, details: dict
) -> JSONResponse:
    body = APIError.build(code, message, details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions to APIError responses.

    Upstream outages never reach here: the resolvers degrade instead of
    raising, so only caller mistakes and confirmed absences are errors.
    """

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _error_response(422, "validation_error", exc.message, exc.details)

    @app.exception_handler(UpstreamNotFoundError)
    async def not_found_handler(request: Request, exc: UpstreamNotFoundError) -> JSONResponse:
        return _error_response(
            404, "not_found", exc.message, {**exc.details, "source": str(exc.source)}
        )


def create_app(
    *,
    title: str = "Holdermap API",
    description: str = "Token bubble maps, chain detection and market data",
    version: str = __version__,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        title: API title for OpenAPI docs
        description: API description for OpenAPI docs
        version: API version
        cors_origins: Allowed CORS origins (default: any origin)

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=title,
        description=description,
        version=version,
        lifespan=lifespan,
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["X-Image-Origin", "X-Chain"],
    )

    register_exception_handlers(app)

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(tokens_router, prefix="/api/v1")

    return app


# For uvicorn direct execution
app = create_app()
