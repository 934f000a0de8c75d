"""Chain resolver: which network does a contract address live on."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from holdermap.core.addresses import is_evm_address, is_solana_address
from holdermap.core.chains import DEFAULT_CHAIN, evm_chain_ids
from holdermap.core.exceptions import ValidationError
from holdermap.core.models import ChainProbeResult
from holdermap.core.types import Chain

logger = logging.getLogger(__name__)


class ChainProbe(Protocol):
    """Validates that a contract exists on one network."""

    async def validate_contract(self, address: str, chain: str) -> bool: ...


class ChainResolver:
    """
    Determines the network of a contract address by probing candidates.

    All probes run concurrently and the resolver waits for every one of them
    before deciding. The winner is the first valid chain in the *declared*
    candidate order, so the answer does not depend on which probe returned
    first. Latency is therefore that of the slowest probe.

    A probe that raises counts as invalid for that chain only.
    """

    def __init__(
        self,
        probe: ChainProbe,
        *,
        candidate_chains: Sequence[str] | None = None,
        default_chain: str = DEFAULT_CHAIN,
    ) -> None:
        self._probe = probe
        self.candidate_chains = list(candidate_chains or evm_chain_ids())
        self.default_chain = default_chain

    async def resolve(
        self,
        address: str,
        candidate_chains: Sequence[str],
        default_chain: str,
    ) -> str:
        """Return the first candidate whose probe is valid, else `default_chain`.

        Raises:
            ValidationError: Empty address or empty candidate list.
        """
        results = await self.probe_all(address, candidate_chains)

        for result in results:
            if result.valid:
                logger.info(f"Chain detected for {address}: {result.chain}")
                return result.chain

        logger.info(f"No chain detected for {address}, using default: {default_chain}")
        return default_chain

    async def probe_all(
        self,
        address: str,
        candidate_chains: Sequence[str],
    ) -> list[ChainProbeResult]:
        """Probe every candidate concurrently; results keep the declared order.

        Raises:
            ValidationError: Empty address or empty candidate list.
        """
        if not address:
            raise ValidationError("address must not be empty")
        if not candidate_chains:
            raise ValidationError("candidate_chains must not be empty")

        tasks = [self._try_probe(address, chain) for chain in candidate_chains]
        return list(await asyncio.gather(*tasks))

    async def detect(self, address: str) -> str:
        """Resolve the chain for an address using its encoding first.

        Solana addresses need no probing. EVM addresses are probed across
        the configured candidates. Anything else gets the default chain.
        """
        if is_solana_address(address):
            return Chain.SOLANA.value
        if not is_evm_address(address):
            return self.default_chain

        logger.info(f"Attempting to detect chain for EVM address: {address}")
        return await self.resolve(address, self.candidate_chains, self.default_chain)

    async def _try_probe(self, address: str, chain: str) -> ChainProbeResult:
        """Run a single probe with error handling."""
        try:
            valid = await self._probe.validate_contract(address, chain)
            return ChainProbeResult(chain=chain, valid=bool(valid))
        except Exception as e:
            logger.warning(f"Probe failed for {address} on {chain}: {e}")
            return ChainProbeResult(chain=chain, valid=False, error=str(e))
