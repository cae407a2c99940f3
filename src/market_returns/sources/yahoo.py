"""Yahoo Finance chart source.

Uses the unauthenticated ``/v8/finance/chart/`` endpoint with a monthly
interval and adjusted closes. API-level failures arrive as HTTP 200 with
``chart.error`` set, so the payload is checked explicitly.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any
from urllib.parse import quote

from market_returns.core.config import YahooConfig
from market_returns.core.exceptions import SourceUnavailable
from market_returns.core.models import PriceSeries, SourceTag
from market_returns.sources.base import bucket_by_month, unix_seconds
from market_returns.sources.http import SourceClient, make_limiter

logger = logging.getLogger(__name__)


def parse_chart(result: dict[str, Any]) -> PriceSeries:
    """Parse one ``chart.result[0]`` object into monthly prices.

    Prefers ``indicators.adjclose[0].adjclose``; falls back to the raw
    ``indicators.quote[0].close`` when adjusted closes are absent.
    Null prices (holidays, missing data) and malformed timestamps are skipped
    point by point; the rest of the series is kept.
    """
    timestamps = result.get("timestamp") or []
    if not isinstance(timestamps, list) or not timestamps:
        return {}

    indicators = result.get("indicators") or {}
    adjclose_data = indicators.get("adjclose") or []
    prices: list[float | None] = (
        adjclose_data[0].get("adjclose") or [] if adjclose_data else []
    )
    if not prices:
        quotes = indicators.get("quote") or [{}]
        prices = quotes[0].get("close") or []

    return bucket_by_month(zip(timestamps, prices), SourceTag.YAHOO)


class YahooSource:
    """Fetches monthly adjusted closes from Yahoo Finance's chart API."""

    tag = SourceTag.YAHOO

    def __init__(self, config: YahooConfig, client: SourceClient) -> None:
        self._config = config
        self._client = client
        self._limiter = make_limiter(config.rate_limit)

    async def fetch(self, series_id: str, start_date: date) -> PriceSeries:
        url = f"{self._config.base_url}/{quote(series_id, safe='')}"
        params = {
            "period1": str(unix_seconds(start_date)),
            "period2": str(int(datetime.now(timezone.utc).timestamp())),
            "interval": "1mo",
            "includeAdjustedClose": "true",
        }
        data = await self._client.get_json(
            url,
            source=self.tag,
            series_id=series_id,
            params=params,
            headers={"User-Agent": self._config.user_agent},
            limiter=self._limiter,
        )

        chart = data.get("chart") if isinstance(data, dict) else None
        if not isinstance(chart, dict):
            raise SourceUnavailable(
                f"Yahoo response missing chart for {series_id}",
                context={"source": str(self.tag), "series_id": series_id},
            )

        if chart.get("error"):
            err = chart["error"]
            description = err.get("description") if isinstance(err, dict) else err
            raise SourceUnavailable(
                f"Yahoo API error: {description}",
                context={
                    "source": str(self.tag),
                    "series_id": series_id,
                    "code": err.get("code") if isinstance(err, dict) else None,
                },
            )

        results = chart.get("result")
        if not results:
            raise SourceUnavailable(
                f"Yahoo returned no results for {series_id}",
                context={"source": str(self.tag), "series_id": series_id},
            )

        return parse_chart(results[0])
