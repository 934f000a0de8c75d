"""Token endpoints: supported chains, chain detection, market data, maps."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Request, Response

from holdermap.api.dependencies import ReportService, Resolvers, Settings
from holdermap.api.schemas import (
    ChainDetectionResponse,
    ChainListResponse,
    ChainResponse,
    MapSummaryResponse,
    MarketDataResponse,
    TokenReportResponse,
)
from holdermap.core.addresses import ContractAddress
from holdermap.core.chains import SUPPORTED_CHAINS, is_supported_chain
from holdermap.core.exceptions import UpstreamNotFoundError, ValidationError
from holdermap.core.models import MarketDataRecord
from holdermap.core.types import SourceName
from holdermap.resolution.registry import ResolverRegistry

router = APIRouter(tags=["tokens"])

ChainParam = Annotated[
    str | None,
    Query(description="Internal chain id; detected from the address when omitted"),
]


def _parse_address(address: str) -> ContractAddress:
    try:
        return ContractAddress.parse(address)
    except ValueError as e:
        raise ValidationError(
            f"Invalid contract address: {address}", {"field": "address"}
        ) from e


def _check_chain(chain: str) -> str:
    if not is_supported_chain(chain):
        raise ValidationError(f"Unsupported chain: {chain}", {"field": "chain"})
    return chain.lower()


async def _resolve_chain(
    registry: ResolverRegistry, contract: ContractAddress, chain: str | None
) -> str:
    if chain is None:
        return await registry.chain_resolver.detect(contract.value)
    return _check_chain(chain)


def _market_response(
    address: str, chain: str, record: MarketDataRecord
) -> MarketDataResponse:
    return MarketDataResponse(
        address=address,
        chain=chain,
        price=float(record.price),
        price_change_24h=float(record.price_change_24h),
        market_cap=float(record.market_cap),
        volume_24h=float(record.volume_24h),
    )


@router.get(
    "/chains",
    response_model=ChainListResponse,
    operation_id="listChains",
    summary="Supported chains",
    description="List the networks tokens can be resolved on.",
)
async def list_chains(settings: Settings) -> ChainListResponse:
    return ChainListResponse(
        chains=[
            ChainResponse(id=chain.id, name=chain.name, coingecko_id=chain.coingecko_id)
            for chain in SUPPORTED_CHAINS
        ],
        default_chain=settings.default_chain,
    )


@router.get(
    "/tokens/{address}/chain",
    response_model=ChainDetectionResponse,
    operation_id="detectChain",
    summary="Detect token chain",
    description="Detect the network of a contract address by probing candidates.",
)
async def detect_chain(address: str, registry: Resolvers) -> ChainDetectionResponse:
    """Detect the chain of a contract address; falls back to the default chain."""
    contract = _parse_address(address)
    chain = await registry.chain_resolver.detect(contract.value)
    return ChainDetectionResponse(
        address=contract.value,
        address_kind=contract.kind,
        chain=chain,
    )


@router.get(
    "/tokens/{address}/market",
    response_model=MarketDataResponse,
    operation_id="getMarketData",
    summary="Token market data",
    description="Price, 24h change, market cap and 24h volume in USD.",
    responses={404: {"description": "No market data for this token"}},
)
async def get_market_data(
    address: str,
    registry: Resolvers,
    chain: ChainParam = None,
) -> MarketDataResponse:
    contract = _parse_address(address)
    resolved_chain = await _resolve_chain(registry, contract, chain)

    record = await registry.market_resolver.resolve(contract.value, resolved_chain)
    if record is None:
        raise UpstreamNotFoundError(
            f"No market data for {contract.value} on {resolved_chain}",
            source=SourceName.COINGECKO,
        )
    return _market_response(contract.value, resolved_chain, record)


@router.get(
    "/tokens/{address}/map.png",
    operation_id="getMapImage",
    summary="Bubble map image",
    description="PNG screenshot of the token's bubble map, or the fallback image.",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def get_map_image(
    address: str,
    registry: Resolvers,
    chain: ChainParam = None,
) -> Response:
    contract = _parse_address(address)
    resolved_chain = await _resolve_chain(registry, contract, chain)

    result = await registry.capture_orchestrator.capture_result(
        contract.value, resolved_chain
    )
    return Response(
        content=result.image,
        media_type="image/png",
        headers={
            "X-Image-Origin": result.origin.value,
            "X-Chain": resolved_chain,
        },
    )


@router.get(
    "/tokens/{address}/report",
    response_model=TokenReportResponse,
    operation_id="getTokenReport",
    summary="Token report",
    description="Chain, map link, image origin and market data in one response.",
)
async def get_token_report(
    address: str,
    request: Request,
    report_service: ReportService,
    chain: ChainParam = None,
) -> TokenReportResponse:
    contract = _parse_address(address)
    if chain is not None:
        chain = _check_chain(chain)

    report = await report_service.build_report(contract.value, chain)
    image_url = request.url_for("get_map_image", address=report.address)

    return TokenReportResponse(
        address=report.address,
        chain=report.chain,
        map_url=report.map_url,
        image_url=str(image_url.include_query_params(chain=report.chain)),
        image_origin=report.image_origin,
        market_data=(
            _market_response(report.address, report.chain, report.market_data)
            if report.market_data
            else None
        ),
        map_summary=(
            MapSummaryResponse.model_validate(report.map_summary)
            if report.map_summary
            else None
        ),
        generated_at=report.generated_at,
    )
