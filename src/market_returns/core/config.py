"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from market_returns.core.exceptions import ConfigError
from market_returns.core.models import Instrument

_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
)


class _SourceSettings(BaseModel):
    """Settings shared by every provider."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    start_date: date = date(2000, 1, 1)
    rate_limit: float = 5.0

    @field_validator("rate_limit")
    @classmethod
    def rate_limit_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("rate_limit must be > 0 (requests per second)")
        return v


class FredConfig(_SourceSettings):
    """FRED observations API. The only credentialed provider."""

    base_url: str = "https://api.stlouisfed.org/fred/series/observations"
    api_key: str | None = None
    # Upper bound for observations; None means up to the latest release
    observation_end: date | None = None
    # FRED allows 120 requests/minute per key
    rate_limit: float = 2.0


class YahooConfig(_SourceSettings):
    """Yahoo Finance chart API (unauthenticated)."""

    base_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    user_agent: str = _BROWSER_USER_AGENT


class CoinGeckoConfig(_SourceSettings):
    """CoinGecko market_chart/range API (free tier)."""

    base_url: str = "https://api.coingecko.com/api/v3/coins"
    # Free tier history is short; crypto series start here
    start_date: date = date(2015, 1, 1)
    rate_limit: float = 0.5


class SourcesConfig(BaseModel):
    """Aggregated provider configuration."""

    model_config = ConfigDict(frozen=True)

    fred: FredConfig = FredConfig()
    yahoo: YahooConfig = YahooConfig()
    coingecko: CoinGeckoConfig = CoinGeckoConfig()
    request_timeout: float | None = 30.0

    @field_validator("request_timeout")
    @classmethod
    def timeout_positive(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("request_timeout must be > 0 or null")
        return v


class SnapshotConfig(BaseModel):
    """On-disk dataset snapshot."""

    model_config = ConfigDict(frozen=True)

    path: str = "./data/market-data.json"


class APIConfig(BaseModel):
    """FastAPI server configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8000
    api_key: str | None = None


class LoggingConfig(BaseModel):
    """Root logger settings applied by the CLI."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return upper


class ReturnsConfig(BaseModel):
    """Root configuration for market-returns."""

    model_config = ConfigDict(frozen=True)

    sources: SourcesConfig = SourcesConfig()
    snapshot: SnapshotConfig = SnapshotConfig()
    api: APIConfig = APIConfig()
    logging: LoggingConfig = LoggingConfig()
    markets: list[Instrument] | None = None

    @field_validator("markets")
    @classmethod
    def unique_market_ids(cls, v: list[Instrument] | None) -> list[Instrument] | None:
        if v is None:
            return v
        seen: set[str] = set()
        for market in v:
            if market.id in seen:
                raise ValueError(f"duplicate market id: {market.id!r}")
            seen.add(market.id)
        return v

    def registry(self) -> list[Instrument]:
        """Active instrument registry: the configured override or the default."""
        if self.markets is not None:
            return list(self.markets)
        from market_returns.registry import MARKETS

        return list(MARKETS)


def load_config(
    config_path: str | None = None,
    env_prefix: str = "MARKET_RETURNS_",
) -> ReturnsConfig:
    """Load configuration from environment + YAML file + defaults.

    Resolution order (highest priority first):
    1. Environment variables (MARKET_RETURNS_SOURCES__FRED__API_KEY, etc.)
    2. YAML file at config_path
    3. Built-in defaults

    Nested keys use double-underscore in env vars:
        MARKET_RETURNS_SOURCES__YAHOO__RATE_LIMIT=2  ->  sources.yahoo.rate_limit = 2

    The bare ``FRED_API_KEY`` variable fills ``sources.fred.api_key`` when
    nothing else sets it.
    """
    try:
        yaml_path = _resolve_config_path(config_path)
        base: dict = {}
        if yaml_path is not None:
            base = _load_yaml(yaml_path)

        merged = _merge_env_vars(base, env_prefix)
        _apply_fred_key_fallback(merged)
        return ReturnsConfig.model_validate(merged)
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(str(e), context={"source": "load_config"}) from e


def _resolve_config_path(explicit: str | None) -> Path | None:
    """Determine config file path."""
    if explicit is not None:
        p = Path(explicit)
        if not p.exists():
            raise ConfigError(
                f"Config file not found: {explicit}",
                context={"field": "config_path", "value": explicit},
            )
        return p

    env_path = os.environ.get("MARKET_RETURNS_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.exists():
            raise ConfigError(
                f"Config file from MARKET_RETURNS_CONFIG not found: {env_path}",
                context={"field": "MARKET_RETURNS_CONFIG", "value": env_path},
            )
        return p

    default = Path("market-returns.yml")
    if default.exists():
        return default

    return None


def _load_yaml(path: Path) -> dict:
    """Load and parse YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"YAML config must be a mapping, got {type(data).__name__}",
                context={"field": "config_file", "value": str(path)},
            )
        return data
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e


def _merge_env_vars(base: dict, prefix: str) -> dict:
    """Overlay environment variables onto base config dict.

    Double-underscore separates nesting levels.
    Values are auto-cast: "true"/"false" -> bool, numeric strings -> int/float.
    """
    result = dict(base)

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        parts = [p.lower() for p in remainder.split("__")]

        # Skip the CONFIG env var itself
        if parts == ["config"]:
            continue

        # API keys stay strings even when they look numeric
        cast_value = value if parts[-1] == "api_key" else _auto_cast(value)

        target = result
        for part in parts[:-1]:
            if not isinstance(target.get(part), dict):
                target[part] = {}
            target = target[part]
        target[parts[-1]] = cast_value

    return result


def _apply_fred_key_fallback(merged: dict) -> None:
    """Fill sources.fred.api_key from FRED_API_KEY if unset."""
    fallback = os.environ.get("FRED_API_KEY")
    if not fallback:
        return
    sources = merged.setdefault("sources", {})
    fred = sources.setdefault("fred", {})
    if not fred.get("api_key"):
        fred["api_key"] = fallback


def _auto_cast(value: str) -> str | int | float | bool:
    """Auto-cast string values from environment variables."""
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value
