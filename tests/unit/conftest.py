"""Unit test fixtures with HTTP mocking and fake browsers."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import pytest
import respx
from httpx import Response

from holdermap.capture.browser import Viewport
from holdermap.capture.overlays import (
    CLEANUP_BACKDROPS_JS,
    OVERLAY_PRESENT_JS,
    REMOVE_DIALOGS_JS,
)
from holdermap.resolution.base import ClientConfig, RateLimitConfig

# ============================================================================
# HTTP Mocking Fixtures
# ============================================================================


@pytest.fixture
def respx_mock():
    """Provide a respx mock router for HTTP mocking.

    Use this when you need fine-grained control over mocked responses.
    The mock is automatically started and stopped by respx.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ============================================================================
# Client Configuration Fixtures
# ============================================================================


@pytest.fixture
def client_config() -> ClientConfig:
    """Create a client config for testing."""
    return ClientConfig(
        api_key="test-api-key",
        timeout=5.0,
        rate_limit=RateLimitConfig(
            requests_per_second=100.0,  # High limit for tests
            burst_size=20,
            retry_on_429=True,
            max_429_retries=2,
            backoff_base=0.0,
        ),
    )


@pytest.fixture
def client_config_no_key() -> ClientConfig:
    """Create a client config without API key."""
    return ClientConfig(
        api_key=None,
        timeout=5.0,
        rate_limit=RateLimitConfig(requests_per_second=100.0, burst_size=20),
    )


# ============================================================================
# Mock Response Helpers
# ============================================================================


def mock_json_response(data: Any, status_code: int = 200) -> Response:
    """Create a mock JSON response."""
    return Response(status_code=status_code, json=data)


def mock_rate_limit_response(retry_after: int = 0) -> Response:
    """Create a mock 429 rate limit response."""
    return Response(
        status_code=429,
        json={"error": "Rate limit exceeded"},
        headers={"Retry-After": str(retry_after)},
    )


@pytest.fixture
def mock_responses():
    """Provide helper functions for creating mock responses."""
    return {
        "json": mock_json_response,
        "rate_limit": mock_rate_limit_response,
    }


# ============================================================================
# Time Fixtures
# ============================================================================


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep replacement that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


# ============================================================================
# Fake Browser
# ============================================================================


class FakeSession:
    """Scripted browser session recording every call."""

    def __init__(
        self,
        image: bytes = b"\x89PNG-live",
        *,
        navigate_error: Exception | None = None,
        screenshot_error: Exception | None = None,
        dialogs_present: bool = False,
        overlay_persists: bool = False,
    ) -> None:
        self.image = image
        self.navigate_error = navigate_error
        self.screenshot_error = screenshot_error
        self.dialogs_present = dialogs_present
        self.overlay_persists = overlay_persists
        self.calls: list[tuple[str, Any]] = []
        self.content: str | None = None

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def navigate(self, url: str, timeout: float) -> None:
        self.calls.append(("navigate", url))
        if self.navigate_error:
            raise self.navigate_error

    async def wait(self, seconds: float) -> None:
        self.calls.append(("wait", seconds))

    async def evaluate(self, script: str) -> Any:
        if script == REMOVE_DIALOGS_JS:
            self.calls.append(("evaluate", "remove_dialogs"))
            return self.dialogs_present
        if script == OVERLAY_PRESENT_JS:
            self.calls.append(("evaluate", "overlay_present"))
            return self.overlay_persists
        if script == CLEANUP_BACKDROPS_JS:
            self.calls.append(("evaluate", "cleanup_backdrops"))
            return False
        raise AssertionError(f"Unexpected script: {script[:40]}")

    async def press(self, key: str) -> None:
        self.calls.append(("press", key))

    async def set_content(self, html: str) -> None:
        self.calls.append(("set_content", None))
        self.content = html

    async def screenshot(self, viewport: Viewport, timeout: float) -> bytes:
        self.calls.append(("screenshot", viewport))
        if self.screenshot_error:
            raise self.screenshot_error
        return self.image


class FakeBrowser:
    """Hands out scripted sessions in order and counts open/close."""

    def __init__(
        self,
        *sessions: FakeSession,
        launch_error: Exception | None = None,
    ) -> None:
        self._pending = list(sessions)
        self.launch_error = launch_error
        self.opened: list[FakeSession] = []
        self.closed = 0

    def queue(self, *sessions: FakeSession) -> None:
        self._pending.extend(sessions)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[FakeSession]:
        if self.launch_error:
            raise self.launch_error
        if not self._pending:
            raise AssertionError("No scripted browser session left")
        session = self._pending.pop(0)
        self.opened.append(session)
        try:
            yield session
        finally:
            self.closed += 1


def failing_sessions(count: int, error: Exception | None = None) -> list[FakeSession]:
    """Sessions whose screenshot always fails, e.g. after a navigation timeout."""
    return [
        FakeSession(
            navigate_error=error or TimeoutError("Navigation timeout of 30000 ms exceeded"),
            screenshot_error=RuntimeError("Target page, context or browser has been closed"),
        )
        for _ in range(count)
    ]


@pytest.fixture
def make_session() -> type[FakeSession]:
    """Factory for scripted browser sessions."""
    return FakeSession


@pytest.fixture
def make_browser() -> type[FakeBrowser]:
    """Factory for fake browsers handing out scripted sessions."""
    return FakeBrowser


@pytest.fixture
def make_failing_sessions():
    """Factory for sessions whose every capture attempt fails."""
    return failing_sessions
