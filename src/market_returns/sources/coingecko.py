"""CoinGecko market_chart/range source.

Returns ``[timestamp_millis, price]`` pairs at whatever granularity the
free tier provides for the range; they are bucketed to the last price of
each month. History is short, so the orchestrator gives this group a later
start date.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any

from market_returns.core.config import CoinGeckoConfig
from market_returns.core.exceptions import SourceUnavailable
from market_returns.core.models import PriceSeries, SourceTag
from market_returns.sources.base import bucket_by_month, unix_seconds
from market_returns.sources.http import SourceClient, make_limiter

logger = logging.getLogger(__name__)


def parse_market_chart(payload: dict[str, Any]) -> PriceSeries:
    """Bucket ``payload["prices"]`` into monthly last prices."""
    points = []
    for pair in payload.get("prices") or []:
        if not isinstance(pair, (list, tuple)) or len(pair) < 2:
            logger.debug("COINGECKO: dropping malformed point %r", pair)
            continue
        ts_millis, price = pair[0], pair[1]
        if not isinstance(ts_millis, (int, float)) or isinstance(ts_millis, bool):
            logger.debug("COINGECKO: dropping point with bad timestamp %r", pair)
            continue
        points.append((ts_millis / 1000, price))
    return bucket_by_month(points, SourceTag.COINGECKO)


def _error_message(payload: dict[str, Any]) -> str | None:
    if payload.get("error"):
        return str(payload["error"])
    status = payload.get("status")
    if isinstance(status, dict) and status.get("error_code"):
        return str(status.get("error_message") or status["error_code"])
    return None


class CoinGeckoSource:
    """Fetches USD price history from CoinGecko's range endpoint."""

    tag = SourceTag.COINGECKO

    def __init__(self, config: CoinGeckoConfig, client: SourceClient) -> None:
        self._config = config
        self._client = client
        self._limiter = make_limiter(config.rate_limit)

    async def fetch(self, series_id: str, start_date: date) -> PriceSeries:
        url = f"{self._config.base_url}/{series_id}/market_chart/range"
        params = {
            "vs_currency": "usd",
            "from": str(unix_seconds(start_date)),
            "to": str(int(datetime.now(timezone.utc).timestamp())),
        }
        data = await self._client.get_json(
            url,
            source=self.tag,
            series_id=series_id,
            params=params,
            headers={"Accept": "application/json"},
            limiter=self._limiter,
        )

        if not isinstance(data, dict):
            raise SourceUnavailable(
                f"CoinGecko returned unexpected payload for {series_id}",
                context={"source": str(self.tag), "series_id": series_id},
            )

        message = _error_message(data)
        if message is not None:
            raise SourceUnavailable(
                f"CoinGecko API error: {message}",
                context={"source": str(self.tag), "series_id": series_id},
            )
        if not isinstance(data.get("prices"), list):
            raise SourceUnavailable(
                f"CoinGecko response missing prices for {series_id}",
                context={"source": str(self.tag), "series_id": series_id},
            )

        return parse_market_chart(data)
