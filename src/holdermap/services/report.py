"""Token report service: one call for everything the chat flow shows."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from holdermap.core.addresses import ContractAddress
from holdermap.core.exceptions import ValidationError
from holdermap.core.models import TokenReport

if TYPE_CHECKING:
    from holdermap.resolution.registry import ResolverRegistry

logger = logging.getLogger(__name__)


class TokenReportService:
    """
    Builds a TokenReport for a contract address.

    Flow:
    1. Validate the address
    2. Detect the network unless one is given
    3. Capture the map image, resolve market data and summarise the holder
       map concurrently

    None of these can fail the report: capture always yields an image, and
    market data and the holder summary degrade to None.
    """

    def __init__(self, resolver_registry: "ResolverRegistry") -> None:
        self._registry = resolver_registry

    async def detect_chain(self, address: str) -> str:
        """Network for a validated address.

        Raises:
            ValidationError: Not an EVM or Solana address.
        """
        contract = self._parse(address)
        return await self._registry.chain_resolver.detect(contract.value)

    async def build_report(self, address: str, chain: str | None = None) -> TokenReport:
        """
        Build the full report for a token.

        Args:
            address: EVM or Solana contract address
            chain: Internal chain id; detected when not given

        Raises:
            ValidationError: Not an EVM or Solana address.
        """
        contract = self._parse(address)
        if chain is None:
            chain = await self._registry.chain_resolver.detect(contract.value)

        logger.info(f"Building report for {contract.value} on {chain}")
        capture, market_data, map_summary = await asyncio.gather(
            self._registry.capture_orchestrator.capture_result(contract.value, chain),
            self._registry.market_resolver.resolve(contract.value, chain),
            self._registry.bubblemaps.fetch_map_summary(contract.value, chain),
        )

        return TokenReport(
            address=contract.value,
            chain=chain,
            map_url=self._registry.bubblemaps.map_url(contract.value, chain),
            image=capture.image,
            image_origin=capture.origin,
            market_data=market_data,
            map_summary=map_summary,
        )

    @staticmethod
    def _parse(address: str) -> ContractAddress:
        try:
            return ContractAddress.parse(address)
        except ValueError as e:
            raise ValidationError(f"Invalid contract address: {address}") from e
