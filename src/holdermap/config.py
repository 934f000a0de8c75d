"""Application configuration using Pydantic Settings."""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class HoldermapSettings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="HOLDERMAP_",
    )

    # Cache
    screenshot_dir: Path = Field(
        default=Path("screenshots"),
        description="Flat directory holding cached map images and the fallback image",
    )
    image_cache_ttl: float = Field(
        default=3600.0,
        gt=0,
        description="Freshness window for cached map images, in seconds",
    )
    market_data_ttl: float = Field(
        default=600.0,
        gt=0,
        description="Freshness window for cached market data, in seconds",
    )
    redis_url: RedisDsn | None = Field(
        default=None,
        description="Redis URL for a shared market-data cache (optional, memory otherwise)",
    )

    # Capture
    capture_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Screenshot attempts before falling back",
    )
    capture_retry_base_delay: float = Field(
        default=2.0,
        ge=0,
        description="Backoff base in seconds; attempt n waits base * 2**(n-1)",
    )
    navigation_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Page navigation timeout in seconds",
    )
    browser_launch_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Browser launch timeout in seconds",
    )
    stabilization_delay: float = Field(
        default=10.0,
        ge=0,
        description="Seconds to let the bubble map render before screenshotting",
    )
    overlay_settle_delay: float = Field(
        default=0.5,
        ge=0,
        description="Seconds to wait after an overlay dismissal",
    )
    screenshot_timeout: float = Field(
        default=15.0,
        gt=0,
        description="Screenshot timeout in seconds",
    )
    viewport_width: int = Field(default=1280, gt=0)
    viewport_height: int = Field(default=800, gt=0)
    fallback_width: int = Field(default=800, gt=0)
    fallback_height: int = Field(default=600, gt=0)
    headless: bool = Field(default=True, description="Run Chromium headless")
    chromium_executable_path: str | None = Field(
        default=None,
        description="Custom Chromium executable (optional)",
    )

    # External APIs - Bubblemaps
    bubblemaps_app_url: str = Field(
        default="https://app.bubblemaps.io/",
        description="Bubble map web app base URL",
    )
    bubblemaps_api_url: str = Field(
        default="https://api-legacy.bubblemaps.io",
        description="Bubblemaps API base URL",
    )
    bubblemaps_timeout: float = Field(default=10.0, gt=0)

    # External APIs - CoinGecko
    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko API base URL",
    )
    coingecko_api_key: str | None = Field(
        default=None,
        description="CoinGecko demo API key (optional, increases rate limits)",
    )
    coingecko_timeout: float = Field(default=5.0, gt=0)

    # Chains
    default_chain: str = Field(
        default="eth",
        description="Chain used when detection finds nothing",
    )

    # App settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )


@lru_cache
def get_settings() -> HoldermapSettings:
    """Get cached settings instance."""
    return HoldermapSettings()


def configure_logging(settings: HoldermapSettings) -> None:
    """Apply the configured log level to the root logger."""
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger().setLevel(level)
