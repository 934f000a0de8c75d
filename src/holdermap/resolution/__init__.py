"""Resolution layer for external artifacts: networks, market data, maps."""

from holdermap.resolution.base import (
    AbstractUpstreamClient,
    AsyncRateLimiter,
    ClientConfig,
    RateLimitConfig,
)
from holdermap.resolution.bubblemaps import BubblemapsClient
from holdermap.resolution.chain import ChainProbe, ChainResolver
from holdermap.resolution.coingecko import CoinGeckoClient
from holdermap.resolution.market import (
    MarketDataResolver,
    MarketDataSource,
    parse_market_snapshot,
)
from holdermap.resolution.registry import ResolverRegistry

__all__ = [
    # Base
    "AbstractUpstreamClient",
    "AsyncRateLimiter",
    "ClientConfig",
    "RateLimitConfig",
    # Clients
    "BubblemapsClient",
    "CoinGeckoClient",
    # Resolvers
    "ChainProbe",
    "ChainResolver",
    "MarketDataResolver",
    "MarketDataSource",
    "parse_market_snapshot",
    # Registry
    "ResolverRegistry",
]
