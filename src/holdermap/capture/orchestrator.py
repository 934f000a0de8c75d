"""
Capture orchestrator: a bubble map screenshot for every request.

The chat flow always has something to show. A request is served from the
image cache when fresh, otherwise captured live with bounded retries, and
when every attempt fails the generic fallback image is returned instead.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from holdermap.cache.base import ArtifactCache, CacheEntry
from holdermap.cache.keys import CacheKeys
from holdermap.capture.browser import Browser, Viewport
from holdermap.capture.fallback import render_fallback_html, render_placeholder_png
from holdermap.capture.overlays import (
    OverlayDismissalStrategy,
    default_strategies,
    dismiss_overlays,
)
from holdermap.config import HoldermapSettings
from holdermap.core.exceptions import (
    CacheError,
    ExhaustedRetriesError,
    TransientCaptureError,
    ValidationError,
)
from holdermap.core.models import CaptureRequest, CaptureResult
from holdermap.core.types import CaptureOrigin

logger = logging.getLogger(__name__)

MapUrlBuilder = Callable[[str, str], str]
Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class CaptureConfig:
    """Capture tuning. All durations are in seconds."""

    max_attempts: int = 3
    retry_base_delay: float = 2.0
    navigation_timeout: float = 30.0
    stabilization_delay: float = 10.0
    screenshot_timeout: float = 15.0
    image_ttl: float = 3600.0
    viewport: Viewport = field(default_factory=lambda: Viewport(1280, 800))
    fallback_viewport: Viewport = field(default_factory=lambda: Viewport(800, 600))

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")

    @classmethod
    def from_settings(cls, settings: HoldermapSettings) -> CaptureConfig:
        return cls(
            max_attempts=settings.capture_max_attempts,
            retry_base_delay=settings.capture_retry_base_delay,
            navigation_timeout=settings.navigation_timeout,
            stabilization_delay=settings.stabilization_delay,
            screenshot_timeout=settings.screenshot_timeout,
            image_ttl=settings.image_cache_ttl,
            viewport=Viewport(settings.viewport_width, settings.viewport_height),
            fallback_viewport=Viewport(settings.fallback_width, settings.fallback_height),
        )

    def backoff_delay(self, attempt: int) -> float:
        """Delay after failed attempt n (1-based): base * 2**(n-1)."""
        return self.retry_base_delay * 2 ** (attempt - 1)


class CaptureOrchestrator:
    """
    Produces a displayable map image for (address, chain).

    Order of resolution:
      1. fresh cache entry for the request
      2. up to `max_attempts` live captures, with exponential backoff
      3. the generic fallback image (reused once it exists)

    A fallback result is also written under the request's own key, so it is
    served from cache until that entry goes stale.

    Usage:
        orchestrator = CaptureOrchestrator(browser, cache, map_url_builder=client.map_url)
        image = await orchestrator.capture("0xabc...", "eth")
    """

    def __init__(
        self,
        browser: Browser,
        cache: ArtifactCache,
        *,
        map_url_builder: MapUrlBuilder,
        config: CaptureConfig | None = None,
        strategies: Sequence[OverlayDismissalStrategy] | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._browser = browser
        self._cache = cache
        self._map_url = map_url_builder
        self.config = config or CaptureConfig()
        self.strategies = list(strategies) if strategies is not None else default_strategies()
        self._sleep = sleep
        self._fallback_image: bytes | None = None

    async def capture(self, address: str, chain: str) -> bytes:
        """Return image bytes for the token's bubble map.

        Raises:
            ValidationError: Empty address or chain. Nothing else is raised.
        """
        result = await self.capture_result(address, chain)
        return result.image

    async def capture_result(self, address: str, chain: str) -> CaptureResult:
        """Like `capture`, also reporting whether the image is cached, live or fallback."""
        if not address or not chain:
            raise ValidationError("address and chain must not be empty")

        request = CaptureRequest(address=address, chain=chain)
        key = request.cache_key

        entry = await self._read(key)
        if entry is not None:
            logger.info(f"Using cached screenshot for {key}")
            return CaptureResult(image=entry.payload, origin=CaptureOrigin.CACHE)

        url = self._map_url(address, chain)
        last_error: TransientCaptureError | None = None

        for attempt in range(1, self.config.max_attempts + 1):
            logger.info(
                f"Screenshot attempt {attempt}/{self.config.max_attempts} for {address} on {chain}"
            )
            try:
                image = await self._attempt(url, attempt)
            except Exception as e:
                last_error = TransientCaptureError(str(e), attempt)
                last_error.__cause__ = e
                logger.error(f"Screenshot attempt {attempt} failed: {e}")
                if attempt < self.config.max_attempts:
                    delay = self.config.backoff_delay(attempt)
                    logger.info(f"Waiting {delay:g}s before retry")
                    await self._sleep(delay)
                continue

            await self._write(key, image, ttl=self.config.image_ttl)
            logger.info(f"Screenshot captured for {key}")
            return CaptureResult(image=image, origin=CaptureOrigin.LIVE)

        exhausted = ExhaustedRetriesError(
            f"All {self.config.max_attempts} screenshot attempts failed for {key}",
            attempts=self.config.max_attempts,
            last_error=last_error,
        )
        logger.error(f"{exhausted.message}, using fallback image")

        image = await self._get_fallback(request, url)
        await self._write(key, image, ttl=self.config.image_ttl)
        return CaptureResult(image=image, origin=CaptureOrigin.FALLBACK, failure=exhausted)

    async def _attempt(self, url: str, attempt: int) -> bytes:
        """One live capture in a fresh browser session."""
        async with self._browser.session() as session:
            logger.info(f"Navigating to {url}")
            try:
                await session.navigate(url, timeout=self.config.navigation_timeout)
            except Exception as e:
                # A partially loaded map is still worth screenshotting
                logger.error(f"Navigation error: {e}")

            await session.wait(self.config.stabilization_delay)
            await dismiss_overlays(session, self.strategies)

            image = await session.screenshot(
                self.config.viewport, timeout=self.config.screenshot_timeout
            )
            if not image:
                raise TransientCaptureError("Screenshot returned no data", attempt)
            return image

    async def _get_fallback(self, request: CaptureRequest, url: str) -> bytes:
        """Reuse the generic fallback image, synthesizing it only if absent."""
        if self._fallback_image is not None:
            return self._fallback_image

        # The fallback never goes stale
        entry = await self._read(CacheKeys.fallback(), allow_stale=True)
        if entry is not None:
            logger.info("Using existing fallback image")
            self._fallback_image = entry.payload
            return entry.payload

        image = await self._synthesize_fallback(request, url)
        self._fallback_image = image
        await self._write(CacheKeys.fallback(), image, ttl=self.config.image_ttl)
        return image

    async def _synthesize_fallback(self, request: CaptureRequest, url: str) -> bytes:
        logger.info("Creating fallback image")
        try:
            async with self._browser.session() as session:
                await session.set_content(
                    render_fallback_html(request.address, request.chain, url)
                )
                image = await session.screenshot(
                    self.config.fallback_viewport, timeout=self.config.screenshot_timeout
                )
            if image:
                return image
            logger.error("Fallback screenshot returned no data")
        except Exception as e:
            logger.error(f"Failed to render fallback page: {e}")

        viewport = self.config.fallback_viewport
        return render_placeholder_png(
            request.address, request.chain, viewport.width, viewport.height
        )

    async def _read(self, key: str, *, allow_stale: bool = False) -> CacheEntry | None:
        try:
            return await self._cache.get(key, allow_stale=allow_stale)
        except CacheError as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

    async def _write(self, key: str, image: bytes, *, ttl: float) -> None:
        try:
            await self._cache.put(key, image, ttl=ttl)
        except CacheError as e:
            logger.warning(f"Cache write failed for {key}: {e}")
