"""Tests for Bubblemaps client."""

from __future__ import annotations

import httpx
import pytest
import respx
from httpx import Response

from holdermap.core.exceptions import RateLimitError, UpstreamUnavailableError
from holdermap.core.types import SourceName
from holdermap.resolution.base import ClientConfig, RateLimitConfig
from holdermap.resolution.bubblemaps import BubblemapsClient, parse_map_summary

METADATA_URL = "https://api-legacy.bubblemaps.io/map-metadata"
MAP_DATA_URL = "https://api-legacy.bubblemaps.io/map-data"


@pytest.fixture
def client(client_config) -> BubblemapsClient:
    """Create a Bubblemaps client."""
    return BubblemapsClient(client_config)


@pytest.fixture
def client_no_retry() -> BubblemapsClient:
    """Create a Bubblemaps client with no 429 retries."""
    config = ClientConfig(rate_limit=RateLimitConfig(requests_per_second=100.0, retry_on_429=False))
    return BubblemapsClient(config)


@pytest.fixture
def metadata_ok() -> dict:
    """Sample metadata response for a computed map."""
    return {"status": "OK", "dt_update": "2025-01-10T12:00:00", "identified_supply": 0.42}


# ============================================================================
# Client Configuration Tests
# ============================================================================


class TestBubblemapsClientConfig:
    """Tests for Bubblemaps client configuration."""

    def test_source_name(self, client: BubblemapsClient):
        assert client.source_name == SourceName.BUBBLEMAPS

    def test_base_url(self, client: BubblemapsClient):
        assert "bubblemaps.io" in client.BASE_URL

    def test_map_url(self, client: BubblemapsClient, evm_address: str):
        """Map URLs follow the app's chain/token path."""
        assert (
            client.map_url(evm_address, "bsc")
            == f"https://app.bubblemaps.io/bsc/token/{evm_address}"
        )

    def test_custom_app_url_gets_trailing_slash(self, evm_address: str):
        client = BubblemapsClient(app_url="https://maps.example.test")

        assert client.map_url(evm_address, "eth") == (
            f"https://maps.example.test/eth/token/{evm_address}"
        )


# ============================================================================
# Contract Validation Tests
# ============================================================================


class TestBubblemapsValidateContract:
    """Tests for the chain validation probe."""

    @respx.mock
    async def test_status_ok_is_valid(
        self, client: BubblemapsClient, evm_address: str, metadata_ok: dict
    ):
        route = respx.get(METADATA_URL).mock(return_value=Response(200, json=metadata_ok))

        assert await client.validate_contract(evm_address, "eth") is True

        params = route.calls.last.request.url.params
        assert params["token"] == evm_address
        assert params["chain"] == "eth"

    @respx.mock
    async def test_status_ko_is_invalid(self, client: BubblemapsClient, evm_address: str):
        respx.get(METADATA_URL).mock(
            return_value=Response(200, json={"status": "KO", "message": "Not computed"})
        )

        assert await client.validate_contract(evm_address, "ftm") is False

    @respx.mock
    async def test_error_status_is_invalid(self, client: BubblemapsClient, evm_address: str):
        respx.get(METADATA_URL).mock(return_value=Response(500))

        assert await client.validate_contract(evm_address, "eth") is False

    @respx.mock
    async def test_missing_status_is_invalid(self, client: BubblemapsClient, evm_address: str):
        respx.get(METADATA_URL).mock(return_value=Response(200, json={"dt_update": "x"}))

        assert await client.validate_contract(evm_address, "eth") is False

    @respx.mock
    async def test_transport_error_raises(self, client: BubblemapsClient, evm_address: str):
        """Transport failures surface so the resolver can count them as invalid."""
        respx.get(METADATA_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await client.validate_contract(evm_address, "eth")

        assert exc_info.value.source == "bubblemaps"

    @respx.mock
    async def test_rate_limit_raises(self, client_no_retry: BubblemapsClient, evm_address: str):
        respx.get(METADATA_URL).mock(
            return_value=Response(429, headers={"Retry-After": "30"})
        )

        with pytest.raises(RateLimitError) as exc_info:
            await client_no_retry.validate_contract(evm_address, "eth")

        assert exc_info.value.retry_after == 30.0


# ============================================================================
# Map Data Tests
# ============================================================================


class TestBubblemapsFetchMapData:
    """Tests for fetching the holder graph."""

    @respx.mock
    async def test_returns_graph(self, client: BubblemapsClient, evm_address: str):
        graph = {"nodes": [{"address": "0x1", "amount": 10}], "links": []}
        respx.get(MAP_DATA_URL).mock(return_value=Response(200, json=graph))

        assert await client.fetch_map_data(evm_address, "eth") == graph

    @respx.mock
    async def test_error_status_returns_none(self, client: BubblemapsClient, evm_address: str):
        respx.get(MAP_DATA_URL).mock(return_value=Response(404))

        assert await client.fetch_map_data(evm_address, "eth") is None

    @respx.mock
    async def test_transport_error_returns_none(
        self, client: BubblemapsClient, evm_address: str
    ):
        respx.get(MAP_DATA_URL).mock(side_effect=httpx.ReadTimeout("slow"))

        assert await client.fetch_map_data(evm_address, "eth") is None

    @respx.mock
    async def test_malformed_json_returns_none(
        self, client: BubblemapsClient, evm_address: str
    ):
        respx.get(MAP_DATA_URL).mock(return_value=Response(200, content=b"not json"))

        assert await client.fetch_map_data(evm_address, "eth") is None


# ============================================================================
# Map Summary Tests
# ============================================================================


class TestParseMapSummary:
    """Tests for summarising a holder graph."""

    def test_top_holders_by_percentage(self):
        map_data = {
            "nodes": [
                {"address": "0x1", "percentage": 1.0},
                {"address": "0x2", "percentage": 9.5, "name": "Bybit"},
                {"address": "0x3", "percentage": 4.0},
            ]
        }

        summary = parse_map_summary(map_data, {"status": "OK"}, top=2)

        assert [holder.address for holder in summary.top_holders] == ["0x2", "0x3"]
        assert summary.top_holders[0].name == "Bybit"
        assert summary.top_holders[1].name is None

    def test_supply_distribution(self):
        metadata = {
            "status": "OK",
            "decentralisation_score": 42,
            "identified_supply": {"percent_in_cexs": 12.5, "percent_in_contracts": 30},
            "dt_update": "2025-01-10T12:00:00",
        }

        summary = parse_map_summary({"nodes": []}, metadata)

        assert summary.decentralisation_score == 42.0
        assert summary.percent_in_cexs == 12.5
        assert summary.percent_in_contracts == 30.0
        # Metadata timestamp is used when the graph has none
        assert summary.updated_at == "2025-01-10T12:00:00"

    def test_missing_fields_default(self):
        summary = parse_map_summary(
            {"nodes": [{"address": "0x1"}, "junk"]},
            {"status": "OK", "identified_supply": 0.42, "decentralisation_score": "n/a"},
        )

        assert summary.decentralisation_score is None
        assert summary.percent_in_cexs == 0.0
        assert summary.percent_in_contracts == 0.0
        assert [holder.percentage for holder in summary.top_holders] == [0.0]
        assert summary.full_name is None


class TestBubblemapsFetchMapSummary:
    """Tests for fetching map data and metadata together."""

    @respx.mock
    async def test_summary(self, client: BubblemapsClient, evm_address: str, metadata_ok: dict):
        respx.get(MAP_DATA_URL).mock(
            return_value=Response(
                200,
                json={"symbol": "PEPE", "nodes": [{"address": "0x1", "percentage": 3.2}]},
            )
        )
        respx.get(METADATA_URL).mock(return_value=Response(200, json=metadata_ok))

        summary = await client.fetch_map_summary(evm_address, "eth")

        assert summary is not None
        assert summary.symbol == "PEPE"
        assert summary.top_holders[0].percentage == pytest.approx(3.2)
        assert summary.updated_at == "2025-01-10T12:00:00"

    @respx.mock
    async def test_uncomputed_map_returns_none(self, client: BubblemapsClient, evm_address: str):
        respx.get(MAP_DATA_URL).mock(return_value=Response(200, json={"nodes": []}))
        respx.get(METADATA_URL).mock(return_value=Response(200, json={"status": "KO"}))

        assert await client.fetch_map_summary(evm_address, "eth") is None

    @respx.mock
    async def test_metadata_transport_error_returns_none(
        self, client: BubblemapsClient, evm_address: str
    ):
        respx.get(MAP_DATA_URL).mock(return_value=Response(200, json={"nodes": []}))
        respx.get(METADATA_URL).mock(side_effect=httpx.ConnectError("refused"))

        assert await client.fetch_map_summary(evm_address, "eth") is None

    @respx.mock
    async def test_missing_map_data_returns_none(
        self, client: BubblemapsClient, evm_address: str, metadata_ok: dict
    ):
        respx.get(MAP_DATA_URL).mock(return_value=Response(404))
        respx.get(METADATA_URL).mock(return_value=Response(200, json=metadata_ok))

        assert await client.fetch_map_summary(evm_address, "eth") is None
