"""Quarterly and yearly returns built straight from monthly prices.

Each bucket's representative value is the price of its chronologically last
month present; the return compares consecutive buckets' representative
values. Monthly returns are never compounded, so rounding error cannot
accumulate. Partial buckets (one or two months) are emitted as-is.
"""

from __future__ import annotations

import pandas as pd

from market_returns.core.models import PeriodKey, PeriodReturn, PriceSeries, ReturnSet
from market_returns.returns.calculator import month_key, monthly_prices, period_returns


def quarter_key(period: pd.Period) -> PeriodKey:
    """``Period("2024Q2")`` (or any month in it) -> ``"2024-Q2"``."""
    return f"{period.year}-Q{period.quarter}"


def year_key(period: pd.Period) -> PeriodKey:
    """``Period("2024")`` (or any month in it) -> ``"2024"``."""
    return str(period.year)


def last_per_bucket(prices: pd.Series, freq: str) -> pd.Series:
    """Last monthly price in each ``freq`` period ("Q" or "Y"), ascending."""
    return prices.groupby(prices.index.asfreq(freq)).last()


def aggregate_quarterly(series: PriceSeries) -> list[PeriodReturn]:
    """Quarter-over-quarter returns keyed ``YYYY-Qn``, ascending."""
    return period_returns(last_per_bucket(monthly_prices(series), "Q"), quarter_key)


def aggregate_yearly(series: PriceSeries) -> list[PeriodReturn]:
    """Year-over-year returns keyed ``YYYY``, ascending."""
    return period_returns(last_per_bucket(monthly_prices(series), "Y"), year_key)


def build_return_set(series: PriceSeries) -> ReturnSet:
    """All three granularities for one instrument."""
    prices = monthly_prices(series)
    return ReturnSet(
        monthly=period_returns(prices, month_key),
        quarterly=period_returns(last_per_bucket(prices, "Q"), quarter_key),
        yearly=period_returns(last_per_bucket(prices, "Y"), year_key),
    )
