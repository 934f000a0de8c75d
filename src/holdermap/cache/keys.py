"""Cache key builders for consistent key formatting."""

from holdermap.core.models import CaptureRequest


class CacheKeys:
    """Cache key builders for consistent key formatting."""

    FALLBACK = "fallback"

    @classmethod
    def capture(cls, chain: str, address: str) -> str:
        """Key (and file stem) for a token's map screenshot."""
        return CaptureRequest(address=address, chain=chain).cache_key

    @classmethod
    def fallback(cls) -> str:
        """Key for the generic fallback image."""
        return cls.FALLBACK

    @classmethod
    def market_data(cls, platform: str, address: str) -> str:
        """Key for market data, address lower-cased."""
        return f"{platform}:{address.lower()}"
