"""Core enums and type definitions."""

from enum import StrEnum


class Chain(StrEnum):
    """Networks supported by the bubble map service."""

    ETHEREUM = "eth"
    BSC = "bsc"
    FANTOM = "ftm"
    AVALANCHE = "avax"
    CRONOS = "cro"
    ARBITRUM = "arbi"
    POLYGON = "poly"
    BASE = "base"
    SOLANA = "sol"
    SONIC = "sonic"


class SourceName(StrEnum):
    """Upstream services the resolution layer talks to."""

    BUBBLEMAPS = "bubblemaps"
    COINGECKO = "coingecko"
    BROWSER = "browser"


class CaptureOrigin(StrEnum):
    """Where a captured image came from."""

    CACHE = "cache"
    LIVE = "live"
    FALLBACK = "fallback"


class AddressKind(StrEnum):
    """Address encodings recognised by detection."""

    EVM = "evm"
    SOLANA = "solana"
    UNKNOWN = "unknown"
