"""FRED (St. Louis Fed) observations source.

One range query per series, monthly frequency with end-of-period
aggregation. FRED marks missing observations with the string ``"."``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from market_returns.core.config import FredConfig
from market_returns.core.exceptions import ConfigError, ParseAnomaly, SourceUnavailable
from market_returns.core.models import PriceSeries, SourceTag
from market_returns.sources.base import coerce_price, month_key_from_date_string
from market_returns.sources.http import SourceClient, make_limiter

logger = logging.getLogger(__name__)

MISSING_VALUE = "."


def parse_observations(observations: list[dict[str, Any]]) -> PriceSeries:
    """Reduce FRED observations to ``{"YYYY-MM": value}``.

    Missing markers are filtered out first. Dates that don't start with
    ``YYYY-MM`` and values that aren't numbers are dropped one at a time;
    the rest of the series is kept. Later dates win within a month.
    """
    series: PriceSeries = {}
    present = [obs for obs in observations if obs.get("value") != MISSING_VALUE]
    for obs in sorted(present, key=lambda o: str(o.get("date", ""))):
        try:
            period = month_key_from_date_string(str(obs.get("date", "")))
            value = coerce_price(obs.get("value"))
        except ParseAnomaly as e:
            logger.debug("FRED: skipping observation %r (%s)", obs, e)
            continue
        series[period] = value
    return series


class FredSource:
    """Fetches monthly end-of-period observations from the FRED API."""

    tag = SourceTag.FRED

    def __init__(self, config: FredConfig, client: SourceClient) -> None:
        self._config = config
        self._client = client
        self._limiter = make_limiter(config.rate_limit)

    async def fetch(self, series_id: str, start_date: date) -> PriceSeries:
        if not self._config.api_key:
            raise ConfigError(
                "FRED API key not configured",
                context={"field": "sources.fred.api_key", "value": None},
            )

        params = {
            "series_id": series_id,
            "api_key": self._config.api_key,
            "file_type": "json",
            "observation_start": start_date.isoformat(),
            "frequency": "m",
            "aggregation_method": "eop",
        }
        if self._config.observation_end is not None:
            params["observation_end"] = self._config.observation_end.isoformat()
        data = await self._client.get_json(
            self._config.base_url,
            source=self.tag,
            series_id=series_id,
            params=params,
            limiter=self._limiter,
        )

        if not isinstance(data, dict):
            raise SourceUnavailable(
                f"FRED returned unexpected payload for {series_id}",
                context={"source": str(self.tag), "series_id": series_id},
            )
        if data.get("error_message") or data.get("error_code"):
            raise SourceUnavailable(
                f"FRED API error: {data.get('error_message', data.get('error_code'))}",
                context={
                    "source": str(self.tag),
                    "series_id": series_id,
                    "status_code": data.get("error_code"),
                },
            )

        observations = data.get("observations")
        if not isinstance(observations, list):
            raise SourceUnavailable(
                f"FRED response missing observations for {series_id}",
                context={"source": str(self.tag), "series_id": series_id},
            )
        return parse_observations(observations)
