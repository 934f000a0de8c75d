"""FastAPI application and routes."""

from holdermap.api.app import app, create_app

__all__ = [
    "app",
    "create_app",
]
