"""Shared pytest fixtures for market-returns."""

from __future__ import annotations

import asyncio
import os
from datetime import date, datetime, timezone
from pathlib import Path

import pytest
import yaml

from market_returns.core.config import (
    FredConfig,
    ReturnsConfig,
    SnapshotConfig,
    SourcesConfig,
)
from market_returns.core.exceptions import SourceUnavailable
from market_returns.core.models import (
    Instrument,
    MarketCategory,
    PriceSeries,
    SourceTag,
)


class FakeSource:
    """In-memory PriceSource used in place of a real provider."""

    def __init__(
        self,
        tag: SourceTag,
        series: dict[str, PriceSeries] | None = None,
        failures: dict[str, Exception] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.tag = tag
        self._series = series or {}
        self._failures = failures or {}
        self._delays = delays or {}
        self.calls: list[tuple[str, date]] = []

    async def fetch(self, series_id: str, start_date: date) -> PriceSeries:
        self.calls.append((series_id, start_date))
        await asyncio.sleep(self._delays.get(series_id, 0))
        if series_id in self._failures:
            raise self._failures[series_id]
        return dict(self._series.get(series_id, {}))


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 7, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sources_config() -> SourcesConfig:
    return SourcesConfig(fred=FredConfig(api_key="test-key"))


@pytest.fixture
def spy_market() -> Instrument:
    return Instrument(
        id="sp500",
        name="S&P 500",
        category=MarketCategory.EQUITIES,
        source=SourceTag.YAHOO,
        source_id="^GSPC",
    )


@pytest.fixture
def three_source_registry() -> list[Instrument]:
    """One registry spanning all three providers."""
    return [
        Instrument(
            id="sp500",
            name="S&P 500",
            category=MarketCategory.EQUITIES,
            source=SourceTag.YAHOO,
            source_id="^GSPC",
        ),
        Instrument(
            id="gold_fred",
            name="Gold (FRED)",
            category=MarketCategory.COMMODITIES,
            source=SourceTag.FRED,
            source_id="GOLDPMGBD228NLBM",
        ),
        Instrument(
            id="btc",
            name="Bitcoin",
            category=MarketCategory.CRYPTO,
            source=SourceTag.COINGECKO,
            source_id="bitcoin",
        ),
        Instrument(
            id="tlt",
            name="20+ Yr Treasury",
            category=MarketCategory.BONDS,
            source=SourceTag.YAHOO,
            source_id="TLT",
        ),
    ]


@pytest.fixture
def sample_series() -> PriceSeries:
    return {
        "2023-11": 50.0,
        "2023-12": 55.0,
        "2024-01": 100.0,
        "2024-02": 110.0,
        "2024-03": 105.0,
    }


@pytest.fixture
def fake_sources(three_source_registry) -> dict[SourceTag, FakeSource]:
    return {
        SourceTag.YAHOO: FakeSource(
            SourceTag.YAHOO,
            series={
                "^GSPC": {"2023-12": 4700.0, "2024-01": 4850.0, "2024-02": 5100.0},
                "TLT": {"2024-01": 95.0, "2024-02": 93.0},
            },
        ),
        SourceTag.FRED: FakeSource(
            SourceTag.FRED,
            series={"GOLDPMGBD228NLBM": {"2024-01": 2040.0, "2024-02": 2030.0}},
        ),
        SourceTag.COINGECKO: FakeSource(
            SourceTag.COINGECKO,
            failures={
                "bitcoin": SourceUnavailable(
                    "CoinGecko API error: HTTP 429 for bitcoin",
                    context={"source": "COINGECKO", "status_code": 429},
                )
            },
        ),
    }


@pytest.fixture
def make_source():
    """Factory for FakeSource instances."""
    return FakeSource


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate from developer env vars and any market-returns.yml in cwd."""
    for key in list(os.environ):
        if key.startswith("MARKET_RETURNS_") or key == "FRED_API_KEY":
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def snapshot_path(tmp_path) -> Path:
    return tmp_path / "data" / "market-data.json"


@pytest.fixture
def returns_config(sources_config, three_source_registry, snapshot_path) -> ReturnsConfig:
    return ReturnsConfig(
        sources=sources_config,
        snapshot=SnapshotConfig(path=str(snapshot_path)),
        markets=three_source_registry,
    )


@pytest.fixture
def config_file(tmp_path, returns_config) -> Path:
    """YAML file equivalent to ``returns_config``."""
    path = tmp_path / "market-returns.yml"
    data = returns_config.model_dump(mode="json", by_alias=True)
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    return path
