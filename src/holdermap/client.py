"""Main library client for standalone usage."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from holdermap.config import HoldermapSettings
from holdermap.core.models import MarketDataRecord, TokenReport
from holdermap.detection.address import AddressDetector, DetectionResult
from holdermap.resolution.registry import ResolverRegistry
from holdermap.services.report import TokenReportService

if TYPE_CHECKING:
    from holdermap.cache.client import AsyncRedisClient
    from holdermap.capture.browser import Browser

logger = logging.getLogger(__name__)


class HoldermapClient:
    """
    Main client for the holdermap library.

    Resolves a token's network, bubble map image and market data without
    the web server, e.g. from a chat bot handler.

    Usage:
        async with HoldermapClient() as client:
            chain = await client.detect_chain("0x6982508145454ce325ddbe47a25d4ec3d2311933")
            image = await client.capture_map("0x6982...", chain)
            report = await client.build_report("0x6982...")

    Settings are loaded from environment variables or can be passed explicitly.
    """

    def __init__(
        self,
        settings: HoldermapSettings | None = None,
        *,
        use_cache: bool = True,
        browser: Browser | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Application settings. If not provided, loaded from environment.
            use_cache: Whether to use Redis for market data if configured.
            browser: Browser override, mainly for tests.
        """
        self._settings = settings or HoldermapSettings()
        self._use_cache = use_cache
        self._browser = browser
        self._registry: ResolverRegistry | None = None
        self._redis: AsyncRedisClient | None = None
        self._detector = AddressDetector()

    async def __aenter__(self) -> HoldermapClient:
        """Initialize resources on context entry."""
        await self._initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Clean up resources on context exit."""
        await self.close()

    async def _initialize(self) -> None:
        """Initialize client resources."""
        if self._use_cache and self._settings.redis_url:
            try:
                from holdermap.cache.client import AsyncRedisClient

                self._redis = AsyncRedisClient(str(self._settings.redis_url))
                await self._redis.connect()
                logger.info("Redis cache initialized")
            except Exception as e:
                logger.warning(f"Failed to initialize Redis: {e}")
                self._redis = None

        self._registry = ResolverRegistry.from_settings(
            self._settings,
            redis_client=self._redis,
            browser=self._browser,
        )

    async def close(self) -> None:
        """Close all resources."""
        if self._registry:
            await self._registry.close_all()
            self._registry = None

        if self._redis:
            await self._redis.close()
            self._redis = None

    @property
    def registry(self) -> ResolverRegistry:
        if self._registry is None:
            raise RuntimeError(
                "Client not initialized. Use 'async with HoldermapClient() as client:'"
            )
        return self._registry

    def detect_address(self, text: str) -> DetectionResult:
        """Find a contract address in a chat message."""
        return self._detector.detect(text)

    async def detect_chain(self, address: str) -> str:
        """Network of a contract address, the default chain if none matches."""
        return await self.registry.chain_resolver.detect(address)

    async def capture_map(self, address: str, chain: str) -> bytes:
        """Bubble map image bytes; always an image, possibly the fallback."""
        return await self.registry.capture_orchestrator.capture(address, chain)

    async def market_data(self, address: str, chain: str) -> MarketDataRecord | None:
        """Price statistics, or None when unavailable."""
        return await self.registry.market_resolver.resolve(address, chain)

    async def build_report(self, address: str, chain: str | None = None) -> TokenReport:
        """Network, map image and market data for a token in one call."""
        return await TokenReportService(self.registry).build_report(address, chain)


# Convenience functions for one-off resolutions
async def build_report(
    address: str,
    chain: str | None = None,
    *,
    settings: HoldermapSettings | None = None,
) -> TokenReport:
    """
    Build a token report (convenience function).

    For multiple reports, use HoldermapClient to reuse connections.
    """
    async with HoldermapClient(settings) as client:
        return await client.build_report(address, chain)


async def detect_chain(
    address: str,
    *,
    settings: HoldermapSettings | None = None,
) -> str:
    """
    Detect a token's network (convenience function).

    For multiple lookups, use HoldermapClient to reuse connections.
    """
    async with HoldermapClient(settings) as client:
        return await client.detect_chain(address)
