"""Holdermap - bubble maps, chain detection and market data for token chat bots."""

__version__ = "0.1.0"

from holdermap.client import HoldermapClient, build_report, detect_chain  # noqa: E402
from holdermap.core.models import (  # noqa: E402
    CaptureResult,
    ChainInfo,
    MarketDataRecord,
    TokenReport,
)
from holdermap.core.types import AddressKind, CaptureOrigin, Chain, SourceName  # noqa: E402

__all__ = [
    # Client
    "HoldermapClient",
    "build_report",
    "detect_chain",
    # Types
    "AddressKind",
    "CaptureOrigin",
    "Chain",
    "SourceName",
    # Models
    "CaptureResult",
    "ChainInfo",
    "MarketDataRecord",
    "TokenReport",
    # Version
    "__version__",
]
