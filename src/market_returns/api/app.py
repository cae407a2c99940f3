"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from market_returns.api.deps import AppState, require_api_key
from market_returns.api.routes import router
from market_returns.api.schemas import ErrorResponse
from market_returns.core.config import ReturnsConfig, load_config
from market_returns.core.exceptions import (
    ConfigError,
    MarketReturnsError,
    SnapshotError,
)
from market_returns.core.models import SourceTag
from market_returns.sources import PriceSource


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    config = app.state._pending_config or load_config()
    app.state.app_state = AppState(config=config, sources=app.state._pending_sources)
    yield


def create_app(
    config: ReturnsConfig | None = None,
    sources: dict[SourceTag, PriceSource] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``sources`` replaces the real provider adapters (tests, offline demos).
    """
    import market_returns

    app = FastAPI(
        title="Market Returns API",
        description="Monthly, quarterly and yearly returns for tracked markets",
        version=market_returns.__version__,
        lifespan=lifespan,
    )

    # Stash config so lifespan can retrieve it
    app.state._pending_config = config
    app.state._pending_sources = sources

    # Added before CORS; the last middleware added runs outermost
    app.middleware("http")(require_api_key)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    @app.exception_handler(MarketReturnsError)
    async def returns_exception_handler(request: Request, exc: MarketReturnsError):
        status_map = {
            ConfigError: 500,
            SnapshotError: 500,
        }
        status = status_map.get(type(exc), 502)
        body = ErrorResponse(error=type(exc).__name__, detail=str(exc))
        return JSONResponse(status_code=status, content=body.model_dump())

    return app
