"""Return calculator and period aggregator."""

from market_returns.returns.aggregator import (
    aggregate_quarterly,
    aggregate_yearly,
    build_return_set,
    last_per_bucket,
    quarter_key,
    year_key,
)
from market_returns.returns.calculator import (
    available,
    compute_monthly_returns,
    month_key,
    monthly_period_returns,
    monthly_prices,
    percent_changes,
    period_returns,
    round2,
)

__all__ = [
    "round2",
    "monthly_prices",
    "available",
    "percent_changes",
    "period_returns",
    "compute_monthly_returns",
    "monthly_period_returns",
    "aggregate_quarterly",
    "aggregate_yearly",
    "build_return_set",
    "last_per_bucket",
    "month_key",
    "quarter_key",
    "year_key",
]
