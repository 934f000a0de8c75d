"""Core types, models, and utilities."""

from .addresses import (
    ContractAddress,
    classify_address,
    is_evm_address,
    is_solana_address,
    is_valid_contract_address,
)
from .chains import (
    DEFAULT_CHAIN,
    SUPPORTED_CHAINS,
    coingecko_platform,
    evm_chain_ids,
    get_chain,
    is_supported_chain,
)
from .exceptions import (
    CacheError,
    CaptureError,
    ExhaustedRetriesError,
    HoldermapError,
    RateLimitError,
    ResolutionError,
    TransientCaptureError,
    UpstreamNotFoundError,
    UpstreamUnavailableError,
    ValidationError,
)
from .models import (
    CaptureRequest,
    CaptureResult,
    ChainInfo,
    ChainProbeResult,
    HolderShare,
    MapSummary,
    MarketDataRecord,
    TokenReport,
)
from .types import AddressKind, CaptureOrigin, Chain, SourceName

__all__ = [
    # Types
    "AddressKind",
    "CaptureOrigin",
    "Chain",
    "SourceName",
    # Addresses
    "ContractAddress",
    "classify_address",
    "is_evm_address",
    "is_solana_address",
    "is_valid_contract_address",
    # Chains
    "DEFAULT_CHAIN",
    "SUPPORTED_CHAINS",
    "coingecko_platform",
    "evm_chain_ids",
    "get_chain",
    "is_supported_chain",
    # Models
    "CaptureRequest",
    "CaptureResult",
    "ChainInfo",
    "ChainProbeResult",
    "HolderShare",
    "MapSummary",
    "MarketDataRecord",
    "TokenReport",
    # Exceptions
    "CacheError",
    "CaptureError",
    "ExhaustedRetriesError",
    "HoldermapError",
    "RateLimitError",
    "ResolutionError",
    "TransientCaptureError",
    "UpstreamNotFoundError",
    "UpstreamUnavailableError",
    "ValidationError",
]
