"""Service layer for orchestrating business logic."""

from holdermap.services.report import TokenReportService

__all__ = [
    "TokenReportService",
]
