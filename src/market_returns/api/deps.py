"""Request-scoped state and API-key enforcement for the FastAPI app."""

from __future__ import annotations

import secrets
from dataclasses import dataclass

from fastapi import Request
from fastapi.responses import JSONResponse

from market_returns.api.schemas import ErrorResponse
from market_returns.core.config import ReturnsConfig
from market_returns.core.models import SourceTag
from market_returns.sources import PriceSource

API_KEY_HEADER = "X-API-Key"

# Served without a key
PUBLIC_PATHS = frozenset({"/api/health"})


@dataclass
class AppState:
    """Shared application state, attached to app.state during lifespan."""

    config: ReturnsConfig
    # Optional adapter table override; None builds real sources per request
    sources: dict[SourceTag, PriceSource] | None = None


def get_app_state(request: Request) -> AppState:
    """Dependency: the AppState created by the lifespan handler."""
    return request.app.state.app_state


def get_config(request: Request) -> ReturnsConfig:
    """Dependency: the active configuration."""
    return get_app_state(request).config


async def require_api_key(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests lacking the configured ``X-API-Key``.

    The key is read from the loaded config on every request, so it applies
    however the app was built. With ``api.api_key`` unset this is a no-op.
    """
    expected = get_config(request).api.api_key
    if not expected or request.url.path in PUBLIC_PATHS:
        return await call_next(request)

    supplied = request.headers.get(API_KEY_HEADER, "")
    if not secrets.compare_digest(supplied.encode(), expected.encode()):
        body = ErrorResponse(
            error="Unauthorized",
            detail=f"Missing or invalid {API_KEY_HEADER} header",
        )
        return JSONResponse(status_code=401, content=body.model_dump())
    return await call_next(request)
