"""Supported chain table and lookups."""

from __future__ import annotations

from .models import ChainInfo
from .types import Chain

SUPPORTED_CHAINS: tuple[ChainInfo, ...] = (
    ChainInfo(id=Chain.ETHEREUM, name="Ethereum", coingecko_id="ethereum"),
    ChainInfo(id=Chain.BSC, name="BNB Smart Chain", coingecko_id="binance-smart-chain"),
    ChainInfo(id=Chain.FANTOM, name="Fantom", coingecko_id="fantom"),
    ChainInfo(id=Chain.AVALANCHE, name="Avalanche", coingecko_id="avalanche"),
    ChainInfo(id=Chain.CRONOS, name="Cronos", coingecko_id="cronos"),
    ChainInfo(id=Chain.ARBITRUM, name="Arbitrum", coingecko_id="arbitrum-one"),
    ChainInfo(id=Chain.POLYGON, name="Polygon", coingecko_id="polygon-pos"),
    ChainInfo(id=Chain.BASE, name="Base", coingecko_id="base"),
    ChainInfo(id=Chain.SOLANA, name="Solana", coingecko_id="solana"),
    # Not listed on CoinGecko
    ChainInfo(id=Chain.SONIC, name="Sonic", coingecko_id=None),
)

DEFAULT_CHAIN = Chain.ETHEREUM

_BY_ID: dict[str, ChainInfo] = {chain.id: chain for chain in SUPPORTED_CHAINS}


def get_chain(chain_id: str) -> ChainInfo | None:
    """Look up a supported chain by id (case-insensitive)."""
    if not chain_id:
        return None
    return _BY_ID.get(chain_id.lower())


def is_supported_chain(chain_id: str) -> bool:
    return get_chain(chain_id) is not None


def coingecko_platform(chain_id: str) -> str | None:
    """Map an internal chain id to its CoinGecko asset platform."""
    chain = get_chain(chain_id)
    return chain.coingecko_id if chain else None


def evm_chain_ids() -> list[str]:
    """Chains probed for 0x addresses, in priority order."""
    return [chain.id for chain in SUPPORTED_CHAINS if chain.id != Chain.SOLANA]
