"""Provider adapters: FRED, Yahoo Finance, CoinGecko.

Each adapter exposes ``fetch(series_id, start_date) -> PriceSeries`` and a
pure parse function for its raw payload. ``create_sources`` builds the
``{SourceTag: PriceSource}`` table the orchestrator dispatches through.
"""

from market_returns.core.config import SourcesConfig
from market_returns.core.models import SourceTag
from market_returns.sources.base import (
    PriceSource,
    bucket_by_month,
    coerce_price,
    coerce_timestamp,
    month_key_from_date_string,
)
from market_returns.sources.coingecko import CoinGeckoSource, parse_market_chart
from market_returns.sources.fred import MISSING_VALUE, FredSource, parse_observations
from market_returns.sources.http import SourceClient, make_limiter
from market_returns.sources.yahoo import YahooSource, parse_chart


def create_sources(
    config: SourcesConfig, client: SourceClient
) -> dict[SourceTag, PriceSource]:
    """Build one adapter per provider, all sharing ``client``."""
    return {
        SourceTag.FRED: FredSource(config.fred, client),
        SourceTag.YAHOO: YahooSource(config.yahoo, client),
        SourceTag.COINGECKO: CoinGeckoSource(config.coingecko, client),
    }


__all__ = [
    "PriceSource",
    "SourceClient",
    "make_limiter",
    "create_sources",
    # Adapters
    "FredSource",
    "YahooSource",
    "CoinGeckoSource",
    # Parsers
    "parse_observations",
    "parse_chart",
    "parse_market_chart",
    "MISSING_VALUE",
    # Helpers
    "bucket_by_month",
    "coerce_price",
    "coerce_timestamp",
    "month_key_from_date_string",
]
