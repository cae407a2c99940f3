"""Tests for market_returns.core.exceptions."""

import pytest

from market_returns.core.exceptions import (
    ConfigError,
    MarketReturnsError,
    ParseAnomaly,
    SnapshotError,
    SourceUnavailable,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc_type", [ConfigError, SourceUnavailable, ParseAnomaly, SnapshotError]
    )
    def test_subclass_of_base(self, exc_type):
        assert issubclass(exc_type, MarketReturnsError)

    def test_source_unavailable_is_not_config_error(self):
        assert not issubclass(SourceUnavailable, ConfigError)


class TestExceptionContext:
    def test_context_preserved(self):
        exc = SourceUnavailable(
            "Yahoo API error: HTTP 404 for EFA",
            context={"source": "YAHOO", "series_id": "EFA", "status_code": 404},
        )
        assert exc.context["series_id"] == "EFA"
        assert exc.context["status_code"] == 404

    def test_default_context_is_empty_dict(self):
        assert MarketReturnsError("boom").context == {}

    def test_context_none_becomes_empty_dict(self):
        assert SnapshotError("disk full", context=None).context == {}

    def test_str_returns_message(self):
        assert str(ConfigError("FRED_API_KEY not configured")) == "FRED_API_KEY not configured"

    def test_can_be_caught_as_base(self):
        with pytest.raises(MarketReturnsError):
            raise ParseAnomaly("bad value", context={"raw": "."})
