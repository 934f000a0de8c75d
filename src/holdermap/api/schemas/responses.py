"""Response schemas for API endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from holdermap.api.schemas.base import APIBaseSchema
from holdermap.core.types import AddressKind, CaptureOrigin


# Chain schemas
class ChainResponse(APIBaseSchema):
    """A supported network."""

    id: str
    name: str
    coingecko_id: str | None = None


class ChainListResponse(APIBaseSchema):
    """All supported networks and the default."""

    chains: list[ChainResponse]
    default_chain: str


class ChainDetectionResponse(APIBaseSchema):
    """Network detected for a contract address."""

    address: str
    address_kind: AddressKind
    chain: str


# Market data schemas
class MarketDataResponse(APIBaseSchema):
    """Price statistics for a token, USD."""

    address: str
    chain: str
    price: float
    price_change_24h: float
    market_cap: float
    volume_24h: float


# Holder map schemas
class HolderShareResponse(APIBaseSchema):
    """A wallet and its share of supply, percent."""

    address: str
    name: str | None = None
    percentage: float


class MapSummaryResponse(APIBaseSchema):
    """Holder distribution from Bubblemaps."""

    full_name: str | None = None
    symbol: str | None = None
    decentralisation_score: float | None = None
    percent_in_cexs: float
    percent_in_contracts: float
    top_holders: list[HolderShareResponse]
    updated_at: str | None = None


# Report schemas
class TokenReportResponse(APIBaseSchema):
    """Everything known about a token; the image is served separately."""

    address: str
    chain: str
    map_url: str
    image_url: str
    image_origin: CaptureOrigin
    market_data: MarketDataResponse | None = None
    map_summary: MapSummaryResponse | None = None
    generated_at: datetime


# Health check
class HealthResponse(APIBaseSchema):
    """Health check response."""

    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    services: dict[str, Literal["up", "down", "unknown"]]
