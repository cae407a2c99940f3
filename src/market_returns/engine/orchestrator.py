"""Batch orchestrator: fetch, normalize and aggregate every tracked market.

One task per instrument, grouped by provider so each group uses its
provider's start date. Each task catches its own failure and reports it as
an ``InstrumentOutcome``; tasks share nothing, so the only synchronization
is the final join before the Dataset is assembled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from market_returns.core.config import SourcesConfig
from market_returns.core.exceptions import ConfigError
from market_returns.core.models import (
    Dataset,
    DatasetMetadata,
    Instrument,
    MarketId,
    ReturnSet,
    SourceTag,
)
from market_returns.registry import MARKETS, group_by_source
from market_returns.returns import build_return_set
from market_returns.sources import PriceSource, SourceClient, create_sources

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstrumentOutcome:
    """Result of one instrument's fetch → normalize → aggregate pipeline."""

    instrument_id: MarketId
    source: SourceTag
    returns: ReturnSet
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BatchReport:
    """Dataset plus per-instrument outcomes, in registry order."""

    dataset: Dataset
    outcomes: list[InstrumentOutcome] = field(default_factory=list)

    @property
    def failures(self) -> list[InstrumentOutcome]:
        return [o for o in self.outcomes if not o.ok]


def data_range(
    registry: list[Instrument], returns: dict[MarketId, ReturnSet]
) -> tuple[str, str]:
    """First/last monthly period of the first instrument (registry order) with data.

    Returns ``("", "")`` when no instrument produced monthly data.
    """
    for market in registry:
        result = returns.get(market.id)
        if result is not None and result.monthly:
            return result.monthly[0].period, result.monthly[-1].period
    return "", ""


class BatchOrchestrator:
    """Runs the full return pipeline for a registry of instruments.

    Parameters
    ----------
    config : SourcesConfig
        Provider settings, including the FRED credential and per-provider
        start dates.
    registry : list[Instrument] | None
        Instruments to process. Defaults to the built-in ``MARKETS``.
    sources : dict[SourceTag, PriceSource] | None
        Adapter table. Built from ``config`` on each run when None.
    clock : Callable[[], datetime] | None
        Source of the ``lastUpdated`` timestamp (UTC now by default).

    Raises
    ------
    ConfigError
        At construction, if the registry contains FRED instruments and no
        FRED API key is configured. No request is issued in that case.
    """

    def __init__(
        self,
        config: SourcesConfig,
        registry: list[Instrument] | None = None,
        sources: dict[SourceTag, PriceSource] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._registry = list(registry) if registry is not None else list(MARKETS)
        self._sources = sources
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._validate()

    @property
    def registry(self) -> list[Instrument]:
        return list(self._registry)

    def _validate(self) -> None:
        needs_fred = any(m.source == SourceTag.FRED for m in self._registry)
        if needs_fred and not self._config.fred.api_key:
            raise ConfigError(
                "FRED_API_KEY not configured",
                context={"field": "sources.fred.api_key", "value": None},
            )
        if self._sources is not None:
            missing = {m.source for m in self._registry} - set(self._sources)
            if missing:
                raise ConfigError(
                    f"No adapter for sources: {sorted(missing)}",
                    context={"field": "sources", "value": sorted(missing)},
                )

    def start_date_for(self, source: SourceTag) -> date:
        """Earliest date requested from a provider group."""
        if source == SourceTag.FRED:
            return self._config.fred.start_date
        if source == SourceTag.COINGECKO:
            return self._config.coingecko.start_date
        return self._config.yahoo.start_date

    async def run(self, timeout: float | None = None) -> Dataset:
        """Process every instrument and return the assembled Dataset."""
        report = await self.run_detailed(timeout=timeout)
        return report.dataset

    async def run_detailed(self, timeout: float | None = None) -> BatchReport:
        """Process every instrument, keeping per-instrument outcomes.

        ``timeout`` is a deadline for the whole batch; exceeding it raises
        ``TimeoutError``. Individual adapters are never cancelled on their own.
        """
        if timeout is None:
            return await self._run_batch()
        async with asyncio.timeout(timeout):
            return await self._run_batch()

    async def _run_batch(self) -> BatchReport:
        if self._sources is not None:
            outcomes = await self._run_groups(self._sources)
        else:
            async with SourceClient(timeout=self._config.request_timeout) as client:
                outcomes = await self._run_groups(create_sources(self._config, client))

        by_id = {o.instrument_id: o for o in outcomes}
        ordered = [by_id[m.id] for m in self._registry]
        returns = {o.instrument_id: o.returns for o in ordered}
        data_start, data_end = data_range(self._registry, returns)

        failed = sum(1 for o in ordered if not o.ok)
        logger.info(
            "Batch complete: %d instruments, %d failed, range %s..%s",
            len(ordered),
            failed,
            data_start or "-",
            data_end or "-",
        )

        dataset = Dataset(
            markets=self._registry,
            returns=returns,
            metadata=DatasetMetadata(
                last_updated=self._clock(),
                data_start=data_start,
                data_end=data_end,
            ),
        )
        return BatchReport(dataset=dataset, outcomes=ordered)

    async def _run_groups(
        self, sources: dict[SourceTag, PriceSource]
    ) -> list[InstrumentOutcome]:
        groups = group_by_source(self._registry)
        async with asyncio.TaskGroup() as tg:
            group_tasks = [
                tg.create_task(
                    self._run_group(sources[tag], markets, self.start_date_for(tag))
                )
                for tag, markets in groups.items()
            ]
        return [o for task in group_tasks for o in task.result()]

    async def _run_group(
        self,
        source: PriceSource,
        markets: list[Instrument],
        start_date: date,
    ) -> list[InstrumentOutcome]:
        logger.info(
            "Fetching %d %s markets from %s", len(markets), source.tag, start_date
        )
        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(self._run_instrument(source, market, start_date))
                for market in markets
            ]
        return [task.result() for task in tasks]

    async def _run_instrument(
        self,
        source: PriceSource,
        market: Instrument,
        start_date: date,
    ) -> InstrumentOutcome:
        """Fetch and aggregate one market; any failure yields an empty set."""
        try:
            series = await source.fetch(market.source_id, start_date)
            returns = build_return_set(series)
        except Exception as e:
            logger.warning(
                "%s %s (%s) failed: %s", market.source, market.id, market.source_id, e
            )
            return InstrumentOutcome(
                instrument_id=market.id,
                source=market.source,
                returns=ReturnSet.empty(),
                error=f"{type(e).__name__}: {e}",
            )

        logger.info(
            "%s: %d months, %d quarters, %d years",
            market.id,
            len(returns.monthly),
            len(returns.quarterly),
            len(returns.yearly),
        )
        return InstrumentOutcome(
            instrument_id=market.id, source=market.source, returns=returns
        )
