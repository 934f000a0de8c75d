"""CoinGecko client for catalog lookup and market snapshots."""

from __future__ import annotations

import logging
from typing import Any, ClassVar

import httpx

from holdermap.core.exceptions import UpstreamUnavailableError
from holdermap.core.types import SourceName
from holdermap.resolution.base import AbstractUpstreamClient, ClientConfig, RateLimitConfig

logger = logging.getLogger(__name__)


class CoinGeckoClient(AbstractUpstreamClient):
    """
    CoinGecko public API client.

    API Documentation: https://docs.coingecko.com/reference/introduction
    """

    SOURCE_NAME: ClassVar[SourceName] = SourceName.COINGECKO
    BASE_URL: ClassVar[str] = "https://api.coingecko.com/api/v3"
    # Public tier allows roughly 30 calls per minute
    DEFAULT_RATE_LIMIT: ClassVar[RateLimitConfig] = RateLimitConfig(
        requests_per_second=2.0,
        requests_per_minute=30.0,
        burst_size=2,
        max_429_retries=1,
    )

    SNAPSHOT_PARAMS: ClassVar[dict[str, str]] = {
        "localization": "false",
        "tickers": "false",
        "market_data": "true",
        "community_data": "false",
        "developer_data": "false",
        "sparkline": "false",
    }

    def __init__(self, config: ClientConfig | None = None) -> None:
        super().__init__(config)

    def _get_default_headers(self) -> dict[str, str]:
        headers = super()._get_default_headers()
        if self.config.api_key:
            headers["x-cg-demo-api-key"] = self.config.api_key
        return headers

    async def lookup_catalog_id(self, address: str, platform: str) -> str | None:
        """
        Find the CoinGecko coin id for a contract on an asset platform.

        Returns:
            The coin id, or None if CoinGecko does not list the contract (404).

        Raises:
            UpstreamUnavailableError: Transport failure, timeout or error status.
            RateLimitError: Rate limited after retries.
        """
        logger.debug(f"Looking up CoinGecko id for {address} on {platform}")
        response = await self._make_request(
            "GET",
            f"/coins/{platform}/contract/{address.lower()}",
        )

        if response.status_code == 404:
            return None

        self._raise_for_status(response)
        data = response.json()
        coin_id = data.get("id") if isinstance(data, dict) else None
        return coin_id or None

    async def fetch_market_snapshot(self, coin_id: str) -> dict[str, Any] | None:
        """
        Fetch the coin document with its market data section.

        Returns:
            The coin document, or None if the coin id is unknown (404).

        Raises:
            UpstreamUnavailableError: Transport failure, timeout or error status.
            RateLimitError: Rate limited after retries.
        """
        response = await self._make_request(
            "GET",
            f"/coins/{coin_id}",
            params=self.SNAPSHOT_PARAMS,
        )

        if response.status_code == 404:
            return None

        self._raise_for_status(response)
        data = response.json()
        return data if isinstance(data, dict) else None

    def _raise_for_status(self, response: httpx.Response) -> None:
        if not response.is_success:
            raise UpstreamUnavailableError(
                message=f"CoinGecko returned {response.status_code} for {response.request.url}",
                source=self.source_name.value,
                status_code=response.status_code,
            )
