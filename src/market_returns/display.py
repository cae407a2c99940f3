"""Formatting helpers shared by the CLI and API consumers."""

from __future__ import annotations

from collections.abc import Iterable

from market_returns.core.models import PeriodKey

NO_DATA = "—"


def format_return(return_pct: float | None) -> str:
    """``12.345`` -> ``"+12.3%"``, ``None`` -> ``"—"``."""
    if return_pct is None:
        return NO_DATA
    sign = "+" if return_pct >= 0 else ""
    return f"{sign}{return_pct:.1f}%"


def period_year(period: PeriodKey) -> int:
    """``"2024-05"``, ``"2024-Q2"`` and ``"2024"`` all -> ``2024``."""
    return int(period.split("-")[0])


def year_range(periods: Iterable[PeriodKey]) -> tuple[int, int]:
    """Min and max year across period keys of any granularity.

    Raises ValueError on empty input.
    """
    years = [period_year(p) for p in periods]
    if not years:
        raise ValueError("year_range() requires at least one period")
    return min(years), max(years)
