"""Domain models for resolved artifacts."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ExhaustedRetriesError
from .types import CaptureOrigin


class ChainInfo(BaseModel):
    """A supported network and its identifiers in external services."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Internal chain identifier (e.g. 'eth')")
    name: str = Field(..., description="Human-readable network name")
    coingecko_id: str | None = Field(
        default=None, description="CoinGecko asset platform id, None if unsupported"
    )


class CaptureRequest(BaseModel):
    """Immutable identity of a screenshot capture job."""

    model_config = ConfigDict(frozen=True)

    address: str = Field(..., min_length=1, description="Token contract address")
    chain: str = Field(..., min_length=1, description="Internal chain identifier")

    @property
    def cache_key(self) -> str:
        """Key under which the captured image is cached."""
        return f"{self.chain}_{self.address}"


class CaptureResult(BaseModel):
    """Displayable image bytes plus where they came from."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    image: bytes
    origin: CaptureOrigin
    failure: ExhaustedRetriesError | None = Field(
        default=None, description="Why live capture gave up, for fallback images"
    )


class ChainProbeResult(BaseModel):
    """Outcome of validating an address against one candidate network."""

    chain: str
    valid: bool
    error: str | None = None


class MarketDataRecord(BaseModel):
    """Price and market statistics for a token."""

    model_config = ConfigDict(frozen=True)

    price: Decimal = Field(default=Decimal(0), description="Current price in USD")
    price_change_24h: Decimal = Field(
        default=Decimal(0), description="24h price change percentage"
    )
    market_cap: Decimal = Field(default=Decimal(0), description="Market capitalisation in USD")
    volume_24h: Decimal = Field(default=Decimal(0), description="24h trading volume in USD")


class HolderShare(BaseModel):
    """One wallet on the bubble map and its share of supply."""

    model_config = ConfigDict(frozen=True)

    address: str
    name: str | None = None
    percentage: float = 0.0


class MapSummary(BaseModel):
    """Holder distribution computed by Bubblemaps for a token."""

    model_config = ConfigDict(frozen=True)

    full_name: str | None = None
    symbol: str | None = None
    decentralisation_score: float | None = Field(
        default=None, description="Bubblemaps decentralisation score, 0-100"
    )
    percent_in_cexs: float = Field(default=0.0, description="Supply held by exchanges")
    percent_in_contracts: float = Field(default=0.0, description="Supply held by contracts")
    top_holders: list[HolderShare] = Field(default_factory=list)
    updated_at: str | None = Field(default=None, description="Map computation time as sent")


class TokenReport(BaseModel):
    """Everything the resolution layer knows about one token."""

    address: str
    chain: str
    map_url: str
    image: bytes
    image_origin: CaptureOrigin
    market_data: MarketDataRecord | None = None
    map_summary: MapSummary | None = None
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
