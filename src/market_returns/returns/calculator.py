"""Month-over-month returns from a monthly price series.

Prices are held as a float ``pd.Series`` on an ascending monthly
``PeriodIndex``. Period keys become ``YYYY-MM`` strings again only when
``PeriodReturn`` rows are emitted.
"""

from __future__ import annotations

import math
from collections.abc import Callable

import numpy as np
import pandas as pd

from market_returns.core.models import PeriodKey, PeriodReturn, PriceSeries


def round2(x: float) -> float:
    """Round to 2 decimals, halves toward +infinity.

    Matches ``Math.round(x * 100) / 100`` so snapshots produced by either
    implementation agree to the cent.
    """
    return math.floor(x * 100 + 0.5) / 100


def monthly_prices(series: PriceSeries) -> pd.Series:
    """``{"YYYY-MM": price}`` as a float Series on an ascending ``PeriodIndex``."""
    index = pd.to_datetime(list(series), format="%Y-%m").to_period("M")
    prices = pd.Series(list(series.values()), index=index, dtype="float64")
    return prices.sort_index()


def available(prices: pd.Series) -> pd.Series:
    """Zero and non-finite prices masked to NaN (no usable price)."""
    return prices.where(np.isfinite(prices) & prices.ne(0))


def percent_changes(prices: pd.Series) -> pd.Series:
    """Unrounded percent change of each row versus the previous row.

    NaN for the first row and wherever either endpoint is unavailable.
    Computed as ``(curr - prev) / prev * 100`` so half-cent boundaries round
    the same way as the scalar formula.
    """
    usable = available(prices)
    return usable.diff() / usable.shift() * 100


def _optional(value: float) -> float | None:
    return None if pd.isna(value) else float(value)


def _rounded(value: float) -> float | None:
    return None if pd.isna(value) else round2(float(value))


def month_key(period: pd.Period) -> PeriodKey:
    """``Period("2024-05", "M")`` -> ``"2024-05"``."""
    return period.strftime("%Y-%m")


def period_returns(
    prices: pd.Series,
    key: Callable[[pd.Period], PeriodKey],
) -> list[PeriodReturn]:
    """One ``PeriodReturn`` per row of ``prices``; the first row has no return."""
    values = available(prices)
    changes = percent_changes(prices)
    return [
        PeriodReturn(period=key(period), value=_optional(value), return_pct=_rounded(change))
        for period, value, change in zip(prices.index, values, changes)
    ]


def compute_monthly_returns(series: PriceSeries) -> dict[PeriodKey, float | None]:
    """Percent change of each month versus the previous month present.

    Months are ordered chronologically. The first month has no predecessor
    and is omitted, so a series of N months yields N-1 entries.
    """
    changes = percent_changes(monthly_prices(series)).iloc[1:]
    return {month_key(period): _rounded(change) for period, change in changes.items()}


def monthly_period_returns(series: PriceSeries) -> list[PeriodReturn]:
    """Ascending monthly ``PeriodReturn`` list; the first month has a None return."""
    return period_returns(monthly_prices(series), month_key)
