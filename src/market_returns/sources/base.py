"""Price source protocol and shared normalization helpers.

Architecture
------------
Every provider is reduced to the same capability:

    fetch(series_id, start_date) -> PriceSeries   ({"YYYY-MM": last price})

Providers are not subclasses of a common base. The orchestrator looks the
adapter up by the instrument's ``source`` tag in a ``{SourceTag: PriceSource}``
mapping (see ``market_returns.sources.create_sources``), so downstream code
never branches on provider.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable
from datetime import date, datetime, timezone
from typing import Any, Protocol, runtime_checkable

import pandas as pd

from market_returns.core.exceptions import ParseAnomaly
from market_returns.core.models import PeriodKey, PriceSeries, SourceTag

logger = logging.getLogger(__name__)

_MONTH_PREFIX = re.compile(r"^(\d{4})-(\d{2})")


@runtime_checkable
class PriceSource(Protocol):
    """Fetches one instrument's history and reduces it to monthly prices.

    Raises
    ------
    SourceUnavailable
        Non-success HTTP status, transport failure, or an explicit error
        payload from the provider.
    """

    tag: SourceTag

    async def fetch(self, series_id: str, start_date: date) -> PriceSeries: ...


def coerce_timestamp(raw: Any) -> pd.Timestamp:
    """Interpret a raw unix-seconds value as a UTC timestamp.

    Raises ParseAnomaly for None, booleans, non-numbers, NaN/infinity and
    values outside the representable datetime range.
    """
    if raw is None or isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ParseAnomaly(f"not a timestamp: {raw!r}", context={"raw": raw})
    if not math.isfinite(raw):
        raise ParseAnomaly(f"non-finite timestamp: {raw!r}", context={"raw": raw})
    try:
        return pd.Timestamp(raw, unit="s", tz="UTC")
    except (OverflowError, ValueError) as e:
        raise ParseAnomaly(
            f"timestamp out of range: {raw!r}", context={"raw": raw}
        ) from e


def month_key_from_date_string(raw: str) -> PeriodKey:
    """Truncate ``YYYY-MM-DD`` to ``YYYY-MM``.

    Raises ParseAnomaly if ``raw`` doesn't start with a valid year and month.
    """
    match = _MONTH_PREFIX.match(raw)
    if match is None or not 1 <= int(match.group(2)) <= 12:
        raise ParseAnomaly(f"not a date: {raw!r}", context={"raw": raw})
    return f"{match.group(1)}-{match.group(2)}"


def coerce_price(raw: Any) -> float:
    """Interpret a raw upstream value as a price.

    Accepts numbers and numeric strings. Raises ParseAnomaly for None,
    booleans, unparseable strings, NaN and infinities.
    """
    if raw is None or isinstance(raw, bool):
        raise ParseAnomaly(f"not a price: {raw!r}", context={"raw": raw})
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise ParseAnomaly(f"not a price: {raw!r}", context={"raw": raw}) from e
    if not math.isfinite(value):
        raise ParseAnomaly(f"non-finite price: {raw!r}", context={"raw": raw})
    return value


def bucket_by_month(
    points: Iterable[tuple[Any, Any]],
    source: SourceTag,
) -> PriceSeries:
    """Reduce ``(unix_seconds, raw_price)`` points to last price per UTC month.

    Points are ordered by timestamp before resampling, so a later observation
    always wins within a month regardless of the order the provider returned
    them in. A point with a bad timestamp or price is skipped on its own.
    """
    stamps: list[pd.Timestamp] = []
    prices: list[float] = []
    for raw_ts, raw_price in points:
        try:
            stamp = coerce_timestamp(raw_ts)
            price = coerce_price(raw_price)
        except ParseAnomaly as e:
            logger.debug("%s: skipping point (%s)", source, e)
            continue
        stamps.append(stamp)
        prices.append(price)

    if not prices:
        return {}

    observed = pd.Series(prices, index=pd.DatetimeIndex(stamps), dtype="float64")
    monthly = observed.sort_index(kind="stable").resample("ME").last().dropna()
    return {ts.strftime("%Y-%m"): float(price) for ts, price in monthly.items()}


def unix_seconds(d: date) -> int:
    """Midnight UTC of ``d`` as unix seconds."""
    return int(datetime(d.year, d.month, d.day, tzinfo=timezone.utc).timestamp())
