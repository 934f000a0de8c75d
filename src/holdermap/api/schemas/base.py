"""Base schema configuration and the error envelope for API models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


def to_camel_case(string: str) -> str:
    """Convert snake_case to camelCase (`price_change_24h` -> `priceChange24h`)."""
    head, *rest = string.split("_")
    return head + "".join(word.capitalize() for word in rest)


class APIBaseSchema(BaseModel):
    """
    Base schema for all API models.

    Bot frontends are JavaScript, so fields serialize with camelCase aliases.
    Snake_case names are still accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel_case,
        populate_by_name=True,
        from_attributes=True,
    )


ErrorCode = Literal["validation_error", "not_found"]


class ErrorDetail(APIBaseSchema):
    """What went wrong, and with which request field if any."""

    code: ErrorCode
    message: str
    field: str | None = None
    details: dict[str, Any] | None = None


class APIError(APIBaseSchema):
    """Standard API error response: `{"error": {...}}`."""

    error: ErrorDetail

    @classmethod
    def build(cls, code: ErrorCode, message: str, details: dict[str, Any]) -> APIError:
        """Envelope for a domain error, lifting `field` out of its details."""
        extra = {k: v for k, v in details.items() if k != "field"}
        return cls(
            error=ErrorDetail(
                code=code,
                message=message,
                field=details.get("field"),
                details=extra or None,
            )
        )
