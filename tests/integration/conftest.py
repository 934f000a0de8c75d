"""Integration test fixtures: the HTTP API over a browserless registry."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import pytest
import respx
from httpx import ASGITransport, AsyncClient

from holdermap.capture.browser import Viewport

MAP_PNG = b"\x89PNG\r\n\x1a\nintegration-map"


# ============================================================================
# Browser Fixtures
# ============================================================================


class StaticSession:
    """Browser session that renders nothing and screenshots a fixed image."""

    def __init__(self, image: bytes) -> None:
        self.image = image
        self.visited: list[str] = []

    async def navigate(self, url: str, timeout: float) -> None:
        self.visited.append(url)

    async def wait(self, seconds: float) -> None:
        pass

    async def evaluate(self, script: str) -> Any:
        return False

    async def press(self, key: str) -> None:
        pass

    async def set_content(self, html: str) -> None:
        pass

    async def screenshot(self, viewport: Viewport, timeout: float) -> bytes:
        return self.image


class StaticBrowser:
    """Browser handing out static sessions, counting how many were opened."""

    def __init__(self, image: bytes = MAP_PNG) -> None:
        self.image = image
        self.sessions: list[StaticSession] = []

    @asynccontextmanager
    async def session(self) -> AsyncIterator[StaticSession]:
        session = StaticSession(self.image)
        self.sessions.append(session)
        yield session


@pytest.fixture
def map_png() -> bytes:
    return MAP_PNG


@pytest.fixture
def static_browser() -> StaticBrowser:
    return StaticBrowser()


# ============================================================================
# HTTP Mocking Fixtures
# ============================================================================


@pytest.fixture
def respx_mock():
    """Mock outbound Bubblemaps and CoinGecko calls; the ASGI app is not intercepted."""
    with respx.mock(assert_all_called=False) as router:
        yield router


# ============================================================================
# FastAPI Test Client Fixtures
# ============================================================================


@pytest.fixture
async def test_app(mock_settings, static_browser):
    """Create test FastAPI application with a browserless registry."""
    from fastapi import FastAPI

    from holdermap.api.app import register_exception_handlers
    from holdermap.api.dependencies import (
        get_cache_client,
        get_resolver_registry,
        get_settings,
    )
    from holdermap.api.routes import health_router, tokens_router
    from holdermap.resolution.registry import ResolverRegistry

    # Create a minimal app for testing
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(tokens_router, prefix="/api/v1")

    # Store in app state (for routes that access state directly)
    app.state.cache_client = None
    registry = ResolverRegistry.from_settings(mock_settings, browser=static_browser)
    app.state.resolver_registry = registry

    # Override dependency injection functions
    async def override_resolver_registry():
        return registry

    async def override_cache_client():
        return None

    app.dependency_overrides[get_settings] = lambda: mock_settings
    app.dependency_overrides[get_resolver_registry] = override_resolver_registry
    app.dependency_overrides[get_cache_client] = override_cache_client

    yield app

    # Cleanup
    app.dependency_overrides.clear()
    await registry.close_all()


@pytest.fixture
async def test_client(test_app) -> AsyncIterator[AsyncClient]:
    """Create async HTTP test client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ============================================================================
# Marker Registration
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as an integration test over the HTTP API",
    )
