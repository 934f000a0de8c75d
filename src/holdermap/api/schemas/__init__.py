"""API schema definitions."""

from holdermap.api.schemas.base import (
    APIBaseSchema,
    APIError,
    ErrorDetail,
)
from holdermap.api.schemas.responses import (
    ChainDetectionResponse,
    ChainListResponse,
    ChainResponse,
    HealthResponse,
    HolderShareResponse,
    MapSummaryResponse,
    MarketDataResponse,
    TokenReportResponse,
)

__all__ = [
    # Base
    "APIBaseSchema",
    "APIError",
    "ErrorDetail",
    # Responses
    "ChainDetectionResponse",
    "ChainListResponse",
    "ChainResponse",
    "HealthResponse",
    "HolderShareResponse",
    "MapSummaryResponse",
    "MarketDataResponse",
    "TokenReportResponse",
]
