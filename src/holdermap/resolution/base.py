"""Abstract base upstream client with HTTP client management and rate limiting."""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, ClassVar

import httpx
from pydantic import BaseModel

from holdermap.core.exceptions import RateLimitError, UpstreamUnavailableError
from holdermap.core.types import SourceName

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    requests_per_second: float = 1.0
    requests_per_minute: float | None = None
    burst_size: int = 1
    retry_on_429: bool = True
    max_429_retries: int = 3
    backoff_base: float = 1.0
    backoff_factor: float = 2.0
    max_backoff: float = 30.0


@dataclass
class RateLimitState:
    """Tracks rate limit state for a client."""

    request_times: deque[float] = field(default_factory=deque)
    retry_after_until: float = 0.0
    consecutive_429s: int = 0


class ClientConfig(BaseModel):
    """Configuration for an upstream client."""

    api_key: str | None = None
    base_url: str | None = None
    timeout: float = 10.0
    rate_limit: RateLimitConfig | None = None


class AsyncRateLimiter:
    """Async rate limiter over a sliding request window."""

    def __init__(self, config: RateLimitConfig) -> None:
        self.config = config
        self._state = RateLimitState()
        self._lock = asyncio.Lock()
        self._semaphore: asyncio.Semaphore | None = None

    async def acquire(self) -> None:
        """Acquire a permit to make a request."""
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.config.burst_size)

        async with self._semaphore:
            async with self._lock:
                await self._wait_for_permit()
                self._record_request()

    async def _wait_for_permit(self) -> None:
        """Wait until a request is permitted."""
        now = time.monotonic()

        # Check if we're in a 429 backoff period
        if now < self._state.retry_after_until:
            wait_time = self._state.retry_after_until - now
            await asyncio.sleep(wait_time)
            now = time.monotonic()

        self._cleanup_old_requests(now)

        wait_time = 0.0

        # Per-second limit
        if self.config.requests_per_second:
            window_start = now - 1.0
            recent = [t for t in self._state.request_times if t > window_start]
            if len(recent) >= self.config.requests_per_second:
                wait_time = max(wait_time, recent[0] + 1.0 - now)

        # Per-minute limit
        if self.config.requests_per_minute:
            window_start = now - 60.0
            recent = [t for t in self._state.request_times if t > window_start]
            if len(recent) >= self.config.requests_per_minute:
                wait_time = max(wait_time, recent[0] + 60.0 - now)

        if wait_time > 0:
            await asyncio.sleep(wait_time)

    def _record_request(self) -> None:
        self._state.request_times.append(time.monotonic())

    def _cleanup_old_requests(self, now: float) -> None:
        """Remove request times older than 1 minute."""
        cutoff = now - 60.0
        while self._state.request_times and self._state.request_times[0] < cutoff:
            self._state.request_times.popleft()

    def handle_429(self, retry_after: float | None = None) -> float:
        """Handle a 429 response, returning the wait time."""
        self._state.consecutive_429s += 1

        if retry_after is not None:
            wait_time = retry_after
        else:
            # Exponential backoff
            wait_time = min(
                self.config.backoff_base
                * self.config.backoff_factor ** (self._state.consecutive_429s - 1),
                self.config.max_backoff,
            )

        self._state.retry_after_until = time.monotonic() + wait_time
        return wait_time

    def reset_429_state(self) -> None:
        """Reset 429 tracking after a non-429 response."""
        self._state.consecutive_429s = 0

    @property
    def should_retry_429(self) -> bool:
        """Whether another 429 retry should be attempted."""
        return (
            self.config.retry_on_429
            and self._state.consecutive_429s < self.config.max_429_retries
        )


class AbstractUpstreamClient(ABC):
    """
    Abstract base class for upstream HTTP collaborators.

    Provides:
    - HTTP client management with connection pooling
    - Rate limiting with 429 handling
    - Transport errors mapped to UpstreamUnavailableError
    """

    SOURCE_NAME: ClassVar[SourceName]
    BASE_URL: ClassVar[str]
    DEFAULT_RATE_LIMIT: ClassVar[RateLimitConfig] = RateLimitConfig(
        requests_per_second=1.0,
        burst_size=1,
    )

    def __init__(self, config: ClientConfig | None = None) -> None:
        self.config = config or ClientConfig()
        self._client: httpx.AsyncClient | None = None
        self._rate_limiter = AsyncRateLimiter(
            self.config.rate_limit or self.DEFAULT_RATE_LIMIT
        )

    @property
    def source_name(self) -> SourceName:
        return self.SOURCE_NAME

    @asynccontextmanager
    async def _get_client(self) -> AsyncIterator[httpx.AsyncClient]:
        """Get or create HTTP client with proper lifecycle."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url or self.BASE_URL,
                timeout=httpx.Timeout(self.config.timeout),
                headers=self._get_default_headers(),
                follow_redirects=True,
            )

        try:
            yield self._client
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(
                message=f"HTTP error: {e}",
                source=self.source_name.value,
            ) from e

    def _get_default_headers(self) -> dict[str, str]:
        """Get default headers for requests. Override to add auth."""
        return {
            "User-Agent": "holdermap/0.1",
            "Accept": "application/json",
        }

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _make_request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make an HTTP request with rate limiting and 429 handling.

        Raises:
            UpstreamUnavailableError: Transport failure or timeout.
            RateLimitError: Still rate limited after the allowed retries.
        """
        await self._rate_limiter.acquire()

        async with self._get_client() as client:
            while True:
                response = await client.request(method, url, **kwargs)

                if response.status_code == 429:
                    retry_after = response.headers.get("Retry-After")
                    retry_after_s = float(retry_after) if retry_after else None
                    if self._rate_limiter.should_retry_429:
                        wait_time = self._rate_limiter.handle_429(retry_after_s)
                        logger.warning(
                            f"{self.source_name} rate limited, retrying in {wait_time:.1f}s"
                        )
                        await asyncio.sleep(wait_time)
                        continue
                    self._rate_limiter.reset_429_state()
                    raise RateLimitError(
                        message="Rate limit exceeded",
                        source=self.source_name.value,
                        retry_after=retry_after_s,
                    )

                self._rate_limiter.reset_429_state()
                break

        return response

    async def __aenter__(self) -> "AbstractUpstreamClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
