"""API route modules."""

from holdermap.api.routes.health import router as health_router
from holdermap.api.routes.tokens import router as tokens_router

__all__ = [
    "health_router",
    "tokens_router",
]
