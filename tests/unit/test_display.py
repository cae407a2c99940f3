"""Tests for market_returns.display."""

import pytest

from market_returns.display import NO_DATA, format_return, period_year, year_range


class TestFormatReturn:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (12.345, "+12.3%"),
            (0.0, "+0.0%"),
            (-4.56, "-4.6%"),
            (None, NO_DATA),
        ],
    )
    def test_format(self, value, expected):
        assert format_return(value) == expected


class TestPeriodYear:
    @pytest.mark.parametrize("period", ["2024-05", "2024-Q2", "2024"])
    def test_any_granularity(self, period):
        assert period_year(period) == 2024


class TestYearRange:
    def test_mixed_granularity(self):
        assert year_range(["2021-03", "2019-Q4", "2023"]) == (2019, 2023)

    def test_single(self):
        assert year_range(["2024-01"]) == (2024, 2024)

    def test_empty(self):
        with pytest.raises(ValueError):
            year_range([])
