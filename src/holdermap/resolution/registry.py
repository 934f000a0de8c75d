"""Registry wiring upstream clients, caches and resolvers together."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from holdermap.cache.backends import FileSystemBackend, MemoryBackend, RedisBackend
from holdermap.cache.base import ArtifactCache
from holdermap.capture.browser import Browser, LaunchOptions, PlaywrightBrowser, Viewport
from holdermap.capture.orchestrator import CaptureConfig, CaptureOrchestrator
from holdermap.capture.overlays import default_strategies
from holdermap.resolution.base import ClientConfig
from holdermap.resolution.bubblemaps import BubblemapsClient
from holdermap.resolution.chain import ChainResolver
from holdermap.resolution.coingecko import CoinGeckoClient
from holdermap.resolution.market import MarketDataResolver

if TYPE_CHECKING:
    from holdermap.cache.client import AsyncRedisClient
    from holdermap.config import HoldermapSettings

logger = logging.getLogger(__name__)


class ResolverRegistry:
    """
    Owns every long-lived collaborator of the resolution layer.

    Built once per process (app lifespan or HoldermapClient) and closed on
    shutdown. The image cache always lives on disk; market data goes to
    Redis when a connected client is supplied, memory otherwise.
    """

    def __init__(
        self,
        *,
        bubblemaps: BubblemapsClient,
        coingecko: CoinGeckoClient,
        browser: Browser,
        image_cache: ArtifactCache,
        market_cache: ArtifactCache,
        capture_config: CaptureConfig | None = None,
        overlay_settle_delay: float = 0.5,
        candidate_chains: list[str] | None = None,
        default_chain: str = "eth",
    ) -> None:
        self.bubblemaps = bubblemaps
        self.coingecko = coingecko
        self.browser = browser
        self.image_cache = image_cache
        self.market_cache = market_cache

        self.chain_resolver = ChainResolver(
            bubblemaps,
            candidate_chains=candidate_chains,
            default_chain=default_chain,
        )
        self.market_resolver = MarketDataResolver(coingecko, market_cache)
        self.capture_orchestrator = CaptureOrchestrator(
            browser,
            image_cache,
            map_url_builder=bubblemaps.map_url,
            config=capture_config,
            strategies=default_strategies(overlay_settle_delay),
        )

    @classmethod
    def from_settings(
        cls,
        settings: HoldermapSettings,
        *,
        redis_client: AsyncRedisClient | None = None,
        browser: Browser | None = None,
    ) -> ResolverRegistry:
        """Create a registry configured from settings.

        Args:
            settings: Application settings
            redis_client: Connected Redis client for the market-data cache
            browser: Browser override; a Playwright browser by default
        """
        bubblemaps = BubblemapsClient(
            ClientConfig(
                base_url=settings.bubblemaps_api_url,
                timeout=settings.bubblemaps_timeout,
            ),
            app_url=settings.bubblemaps_app_url,
        )
        coingecko = CoinGeckoClient(
            ClientConfig(
                api_key=settings.coingecko_api_key,
                base_url=settings.coingecko_base_url,
                timeout=settings.coingecko_timeout,
            )
        )

        if browser is None:
            browser = PlaywrightBrowser(
                LaunchOptions(
                    headless=settings.headless,
                    timeout=settings.browser_launch_timeout,
                    executable_path=settings.chromium_executable_path,
                ),
                viewport=Viewport(settings.viewport_width, settings.viewport_height),
                navigation_timeout=settings.navigation_timeout,
            )

        image_cache = ArtifactCache(
            FileSystemBackend(settings.screenshot_dir, ttl=settings.image_cache_ttl),
            default_ttl=settings.image_cache_ttl,
        )

        if redis_client is not None and redis_client.is_connected:
            logger.info("Using Redis for market data cache")
            market_backend = RedisBackend(redis_client)
        else:
            market_backend = MemoryBackend()
        market_cache = ArtifactCache(market_backend, default_ttl=settings.market_data_ttl)

        return cls(
            bubblemaps=bubblemaps,
            coingecko=coingecko,
            browser=browser,
            image_cache=image_cache,
            market_cache=market_cache,
            capture_config=CaptureConfig.from_settings(settings),
            overlay_settle_delay=settings.overlay_settle_delay,
            default_chain=settings.default_chain,
        )

    async def close_all(self) -> None:
        """Close HTTP clients, the browser driver and cache backends."""
        await self.bubblemaps.close()
        await self.coingecko.close()
        close_browser = getattr(self.browser, "close", None)
        if close_browser is not None:
            await close_browser()
        await self.image_cache.close()
        await self.market_cache.close()
