"""API-specific response schemas (Pydantic v2).

The market-data endpoints return ``Dataset`` JSON directly; only the
auxiliary endpoints need their own envelopes.
"""

from __future__ import annotations

from pydantic import BaseModel

from market_returns.core.models import CategoryInfo, Instrument


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    error: str
    detail: str | None = None


class HealthResponse(BaseModel):
    """Liveness plus basic registry statistics."""

    status: str
    version: str
    markets: int


class CategoryResponse(CategoryInfo):
    """Category metadata with its key."""

    key: str


class MarketsResponse(BaseModel):
    """Active registry and category display order."""

    markets: list[Instrument]
    categories: list[CategoryResponse]
