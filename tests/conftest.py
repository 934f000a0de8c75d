"""Shared test fixtures for all tests."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

from holdermap.config import HoldermapSettings
from holdermap.core.models import MarketDataRecord

# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def evm_address() -> str:
    """A mixed-case EVM contract address (PEPE)."""
    return "0x6982508145454Ce325dDbE47a25d4ec3d2311933"


@pytest.fixture
def other_evm_address() -> str:
    return "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"


@pytest.fixture
def solana_address() -> str:
    """A Solana mint address (BONK)."""
    return "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


@pytest.fixture
def sample_market_record() -> MarketDataRecord:
    """Create a fully populated market data record."""
    return MarketDataRecord(
        price=Decimal("0.00001234"),
        price_change_24h=Decimal("-3.5"),
        market_cap=Decimal("5190000000"),
        volume_24h=Decimal("812000000"),
    )


@pytest.fixture
def coingecko_coin_response() -> dict:
    """Sample CoinGecko /coins/{id} response with market data."""
    return {
        "id": "pepe",
        "symbol": "pepe",
        "name": "Pepe",
        "market_data": {
            "current_price": {"usd": 0.00001234, "eur": 0.0000114},
            "price_change_percentage_24h": -3.5,
            "market_cap": {"usd": 5190000000, "eur": 4800000000},
            "total_volume": {"usd": 812000000, "eur": 750000000},
        },
    }


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def screenshot_dir(tmp_path: Path) -> Path:
    """Per-test screenshot directory."""
    return tmp_path / "screenshots"


@pytest.fixture
def mock_settings(screenshot_dir: Path) -> HoldermapSettings:
    """Create settings for testing with instant capture timings."""
    return HoldermapSettings(
        screenshot_dir=screenshot_dir,
        redis_url=None,
        capture_retry_base_delay=0.0,
        stabilization_delay=0.0,
        overlay_settle_delay=0.0,
        coingecko_api_key="test-coingecko-key",
        debug=True,
        log_level="DEBUG",
    )
