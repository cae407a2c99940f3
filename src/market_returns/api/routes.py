"""FastAPI route definitions for the market-returns API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

import market_returns
from market_returns.api.deps import AppState, get_app_state, get_config
from market_returns.api.schemas import (
    CategoryResponse,
    ErrorResponse,
    HealthResponse,
    MarketsResponse,
)
from market_returns.core.config import ReturnsConfig
from market_returns.core.exceptions import SnapshotError
from market_returns.engine import BatchOrchestrator
from market_returns.registry import sorted_categories
from market_returns.snapshot import read_snapshot_bytes

router = APIRouter()

_JSON = "application/json"


# -- Health --


@router.get("/health", response_model=HealthResponse)
async def health_check(config: ReturnsConfig = Depends(get_config)):
    """Liveness and registry size."""
    return HealthResponse(
        status="ok",
        version=market_returns.__version__,
        markets=len(config.registry()),
    )


# -- Registry --


@router.get("/markets", response_model=MarketsResponse, response_model_by_alias=True)
async def list_markets(config: ReturnsConfig = Depends(get_config)):
    """Tracked markets and categories in display order."""
    return MarketsResponse(
        markets=config.registry(),
        categories=[
            CategoryResponse(key=str(key), **info.model_dump())
            for key, info in sorted_categories()
        ],
    )


# -- Market data --


@router.get(
    "/market-data",
    responses={
        500: {"model": ErrorResponse, "description": "Misconfiguration"},
        502: {"model": ErrorResponse, "description": "Pipeline failure"},
    },
)
async def market_data(state: AppState = Depends(get_app_state)):
    """Run the full pipeline and return the Dataset.

    Misconfiguration (e.g. FRED markets without a key) propagates as
    ConfigError and is rendered as HTTP 500 by the app's exception handler.
    """
    orchestrator = BatchOrchestrator(
        state.config.sources,
        registry=state.config.registry(),
        sources=state.sources,
    )
    dataset = await orchestrator.run()
    return Response(content=dataset.to_json(), media_type=_JSON)


@router.get(
    "/market-data/snapshot",
    responses={404: {"description": "No snapshot has been written yet"}},
)
async def market_data_snapshot(config: ReturnsConfig = Depends(get_config)):
    """Most recently persisted Dataset, served byte-for-byte."""
    try:
        content = read_snapshot_bytes(config.snapshot.path)
    except SnapshotError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return Response(content=content, media_type=_JSON)
