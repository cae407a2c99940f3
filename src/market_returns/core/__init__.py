"""market_returns.core: foundation types, config, and exceptions."""

from market_returns.core.config import (
    APIConfig,
    CoinGeckoConfig,
    FredConfig,
    LoggingConfig,
    ReturnsConfig,
    SnapshotConfig,
    SourcesConfig,
    YahooConfig,
    load_config,
)
from market_returns.core.exceptions import (
    ConfigError,
    MarketReturnsError,
    ParseAnomaly,
    SnapshotError,
    SourceUnavailable,
)
from market_returns.core.models import (
    CategoryInfo,
    Dataset,
    DatasetMetadata,
    Instrument,
    MarketCategory,
    MarketId,
    PeriodKey,
    PeriodReturn,
    PeriodType,
    PriceSeries,
    ReturnSet,
    SourceTag,
)

__all__ = [
    # Type aliases
    "MarketId",
    "PeriodKey",
    "PriceSeries",
    # Enums
    "SourceTag",
    "MarketCategory",
    "PeriodType",
    # Models
    "Instrument",
    "CategoryInfo",
    "PeriodReturn",
    "ReturnSet",
    "DatasetMetadata",
    "Dataset",
    # Config
    "ReturnsConfig",
    "SourcesConfig",
    "FredConfig",
    "YahooConfig",
    "CoinGeckoConfig",
    "SnapshotConfig",
    "APIConfig",
    "LoggingConfig",
    "load_config",
    # Exceptions
    "MarketReturnsError",
    "ConfigError",
    "SourceUnavailable",
    "ParseAnomaly",
    "SnapshotError",
]
