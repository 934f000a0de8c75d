"""Bubblemaps API client: map URLs, map data and contract validation."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, ClassVar

from holdermap.core.exceptions import ResolutionError
from holdermap.core.models import HolderShare, MapSummary
from holdermap.core.types import SourceName
from holdermap.resolution.base import AbstractUpstreamClient, ClientConfig, RateLimitConfig

logger = logging.getLogger(__name__)


class BubblemapsClient(AbstractUpstreamClient):
    """
    Bubblemaps legacy API client (free, no API key required).

    Doubles as the network validation probe: a contract is "on" a chain
    when the map metadata endpoint reports status OK for it.
    """

    SOURCE_NAME: ClassVar[SourceName] = SourceName.BUBBLEMAPS
    BASE_URL: ClassVar[str] = "https://api-legacy.bubblemaps.io"
    APP_URL: ClassVar[str] = "https://app.bubblemaps.io/"
    # Chain detection fires one probe per candidate network at once
    DEFAULT_RATE_LIMIT: ClassVar[RateLimitConfig] = RateLimitConfig(
        requests_per_second=10.0,
        burst_size=10,
        max_429_retries=2,
    )

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        app_url: str | None = None,
    ) -> None:
        super().__init__(config)
        self.app_url = app_url or self.APP_URL
        if not self.app_url.endswith("/"):
            self.app_url += "/"

    def map_url(self, address: str, chain: str) -> str:
        """URL of the token's bubble map page."""
        return f"{self.app_url}{chain}/token/{address}"

    async def fetch_map_metadata(self, address: str, chain: str) -> dict[str, Any] | None:
        """
        Fetch map metadata for a token.

        Returns:
            The metadata, or None when the map is not computed for this chain
            (status KO) or the API answered with an error status.

        Raises:
            UpstreamUnavailableError: Transport failure or timeout.
            RateLimitError: Rate limited after retries.
        """
        logger.debug(f"Fetching map metadata for {address} on {chain}")
        response = await self._make_request(
            "GET",
            "/map-metadata",
            params={"token": address, "chain": chain},
        )

        if not response.is_success:
            logger.debug(
                f"Map metadata for {address} on {chain} returned {response.status_code}"
            )
            return None

        data = response.json()
        if not isinstance(data, dict):
            return None
        if data.get("status") == "KO":
            logger.debug(
                f"Metadata not available for {address} on {chain}: {data.get('message')}"
            )
            return None
        return data

    async def validate_contract(self, address: str, chain: str) -> bool:
        """Whether Bubblemaps knows this contract on this chain.

        Raises:
            UpstreamUnavailableError: Transport failure or timeout.
            RateLimitError: Rate limited after retries.
        """
        metadata = await self.fetch_map_metadata(address, chain)
        return metadata is not None and metadata.get("status") == "OK"

    async def fetch_map_data(self, address: str, chain: str) -> dict[str, Any] | None:
        """Fetch the holder graph for a token; None on any failure."""
        try:
            logger.info(f"Fetching map data for token {address} on chain {chain}")
            response = await self._make_request(
                "GET",
                "/map-data",
                params={"token": address, "chain": chain},
            )
            if not response.is_success:
                logger.warning(
                    f"Map data for {address} on {chain} returned {response.status_code}"
                )
                return None
            return response.json()
        except (ResolutionError, ValueError) as e:
            logger.error(f"Failed to fetch map data for {address} on {chain}: {e}")
            return None

    async def fetch_map_summary(self, address: str, chain: str) -> MapSummary | None:
        """Map data and metadata fetched together, summarised; None if either is missing."""
        map_data, metadata = await asyncio.gather(
            self.fetch_map_data(address, chain),
            self._metadata_or_none(address, chain),
        )
        if not isinstance(map_data, dict) or metadata is None:
            return None
        return parse_map_summary(map_data, metadata)

    async def _metadata_or_none(self, address: str, chain: str) -> dict[str, Any] | None:
        try:
            return await self.fetch_map_metadata(address, chain)
        except (ResolutionError, ValueError) as e:
            logger.error(f"Failed to fetch map metadata for {address} on {chain}: {e}")
            return None


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_map_summary(
    map_data: dict[str, Any], metadata: dict[str, Any], top: int = 5
) -> MapSummary:
    """Summarise a holder graph and its metadata.

    Top holders are the `top` largest nodes by percentage of supply.
    """
    holders = [
        HolderShare(
            address=str(node.get("address", "")),
            name=node.get("name") or None,
            percentage=_to_float(node.get("percentage")) or 0.0,
        )
        for node in map_data.get("nodes") or []
        if isinstance(node, dict)
    ]
    holders.sort(key=lambda holder: holder.percentage, reverse=True)

    supply = metadata.get("identified_supply")
    if not isinstance(supply, dict):
        supply = {}

    return MapSummary(
        full_name=map_data.get("full_name"),
        symbol=map_data.get("symbol"),
        decentralisation_score=_to_float(metadata.get("decentralisation_score")),
        percent_in_cexs=_to_float(supply.get("percent_in_cexs")) or 0.0,
        percent_in_contracts=_to_float(supply.get("percent_in_contracts")) or 0.0,
        top_holders=holders[:top],
        updated_at=map_data.get("dt_update") or metadata.get("dt_update"),
    )
