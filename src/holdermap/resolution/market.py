"""Market data resolver: price statistics for a token, memoized briefly."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

from holdermap.cache.base import ArtifactCache
from holdermap.cache.decorators import cached
from holdermap.cache.keys import CacheKeys
from holdermap.core.chains import coingecko_platform
from holdermap.core.exceptions import HoldermapError, ValidationError
from holdermap.core.models import MarketDataRecord

logger = logging.getLogger(__name__)


class MarketDataSource(Protocol):
    """Price-data collaborator."""

    async def lookup_catalog_id(self, address: str, platform: str) -> str | None: ...

    async def fetch_market_snapshot(self, coin_id: str) -> dict[str, Any] | None: ...


def _to_decimal(value: Any) -> Decimal:
    """Convert a JSON number to Decimal, absent or malformed values to 0."""
    if value is None or isinstance(value, bool):
        return Decimal(0)
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal(0)


def parse_market_snapshot(snapshot: dict[str, Any]) -> MarketDataRecord | None:
    """Extract the record from a coin document; None without market data."""
    market_data = snapshot.get("market_data")
    if not isinstance(market_data, dict):
        return None

    def usd(field: str) -> Any:
        values = market_data.get(field)
        return values.get("usd") if isinstance(values, dict) else None

    return MarketDataRecord(
        price=_to_decimal(usd("current_price")),
        price_change_24h=_to_decimal(market_data.get("price_change_percentage_24h")),
        market_cap=_to_decimal(usd("market_cap")),
        volume_24h=_to_decimal(usd("total_volume")),
    )


class MarketDataResolver:
    """
    Resolves price, 24h change, market cap and 24h volume for a token.

    Positive results are cached for ten minutes under
    (platform, lower-cased address). Negative results are not cached, so an
    unlisted token is looked up again on every call.

    `resolve` never raises for upstream trouble: a missing listing, a missing
    market data section, a transport error or a rate limit all give None.
    """

    def __init__(
        self,
        source: MarketDataSource,
        cache: ArtifactCache | None = None,
    ) -> None:
        self._source = source
        self._cache = cache

    async def resolve(self, address: str, chain: str) -> MarketDataRecord | None:
        """Resolve market data for a token on an internal chain id.

        Raises:
            ValidationError: Empty address or chain.
        """
        if not address or not chain:
            raise ValidationError("address and chain must not be empty")

        platform = coingecko_platform(chain)
        if not platform:
            logger.warning(f"Chain {chain} not supported by CoinGecko")
            return None

        try:
            return await self._fetch(platform, address)
        except HoldermapError as e:
            logger.error(f"Market data lookup failed for {address} on {chain}: {e}")
            return None
        except ValueError as e:
            # Malformed JSON from upstream
            logger.error(f"Unreadable market data for {address} on {chain}: {e}")
            return None

    @cached(
        lambda platform, address: CacheKeys.market_data(platform, address),
        model=MarketDataRecord,
    )
    async def _fetch(self, platform: str, address: str) -> MarketDataRecord | None:
        logger.info(f"Fetching market data for {address} on {platform} from CoinGecko")

        coin_id = await self._source.lookup_catalog_id(address, platform)
        if not coin_id:
            logger.warning(f"Token {address} not found on CoinGecko")
            return None

        snapshot = await self._source.fetch_market_snapshot(coin_id)
        record = parse_market_snapshot(snapshot) if snapshot else None
        if record is None:
            logger.warning(f"Market data for token {address} not available")
            return None

        return record
