"""Tests for market_returns.core.config."""

from datetime import date

import pytest
from pydantic import ValidationError

from market_returns.core.config import (
    CoinGeckoConfig,
    FredConfig,
    LoggingConfig,
    ReturnsConfig,
    SourcesConfig,
    _auto_cast,
    _merge_env_vars,
    load_config,
)
from market_returns.core.exceptions import ConfigError
from market_returns.core.models import SourceTag


pytestmark = pytest.mark.usefixtures("clean_env")


class TestSourceConfigs:
    def test_defaults(self):
        c = SourcesConfig()
        assert c.fred.api_key is None
        assert c.fred.start_date == date(2000, 1, 1)
        assert c.yahoo.start_date == date(2000, 1, 1)
        assert c.coingecko.start_date == date(2015, 1, 1)
        assert c.request_timeout == 30.0

    def test_rate_limit_positive(self):
        with pytest.raises(ValidationError, match="rate_limit must be > 0"):
            CoinGeckoConfig(rate_limit=0)

    def test_timeout_may_be_disabled(self):
        assert SourcesConfig(request_timeout=None).request_timeout is None

    def test_negative_timeout_rejected(self):
        with pytest.raises(ValidationError, match="request_timeout"):
            SourcesConfig(request_timeout=-1)


class TestLoggingConfig:
    def test_level_normalized(self):
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_unknown_level(self):
        with pytest.raises(ValidationError, match="unknown log level"):
            LoggingConfig(level="chatty")


class TestRegistryOverride:
    def test_default_registry(self):
        registry = ReturnsConfig().registry()
        assert len(registry) == 27
        assert registry[0].id == "sp500"

    def test_override(self):
        config = ReturnsConfig.model_validate(
            {
                "markets": [
                    {
                        "id": "gdp",
                        "name": "GDP",
                        "category": "equities",
                        "source": "FRED",
                        "sourceId": "GDP",
                    }
                ]
            }
        )
        assert [m.id for m in config.registry()] == ["gdp"]
        assert config.registry()[0].source == SourceTag.FRED

    def test_duplicate_ids_rejected(self):
        market = {"id": "a", "name": "A", "category": "bonds", "source": "YAHOO", "sourceId": "A"}
        with pytest.raises(ValidationError, match="duplicate market id"):
            ReturnsConfig.model_validate({"markets": [market, market]})


class TestLoadConfig:
    def test_defaults(self):
        config = load_config()
        assert config.snapshot.path == "./data/market-data.json"
        assert config.sources.fred.api_key is None

    def test_yaml_loading(self, tmp_path):
        yaml_file = tmp_path / "config.yml"
        yaml_file.write_text(
            "sources:\n"
            "  fred:\n"
            "    api_key: 'yaml-key'\n"
            "  coingecko:\n"
            "    start_date: 2017-01-01\n"
            "snapshot:\n"
            "  path: /tmp/out.json\n"
        )
        config = load_config(config_path=str(yaml_file))
        assert config.sources.fred.api_key == "yaml-key"
        assert config.sources.coingecko.start_date == date(2017, 1, 1)
        assert config.snapshot.path == "/tmp/out.json"

    def test_default_file_in_cwd(self, tmp_path):
        (tmp_path / "market-returns.yml").write_text("api:\n  port: 9001\n")
        assert load_config().api.port == 9001

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        yaml_file = tmp_path / "config.yml"
        yaml_file.write_text("sources:\n  yahoo:\n    rate_limit: 2\n")
        monkeypatch.setenv("MARKET_RETURNS_SOURCES__YAHOO__RATE_LIMIT", "8")
        config = load_config(config_path=str(yaml_file))
        assert config.sources.yahoo.rate_limit == 8

    def test_numeric_api_key_stays_string(self, monkeypatch):
        monkeypatch.setenv("MARKET_RETURNS_SOURCES__FRED__API_KEY", "123456")
        assert load_config().sources.fred.api_key == "123456"

    def test_bare_fred_api_key_fallback(self, monkeypatch):
        monkeypatch.setenv("FRED_API_KEY", "abc")
        assert load_config().sources.fred.api_key == "abc"

    def test_prefixed_key_wins_over_bare(self, monkeypatch):
        monkeypatch.setenv("FRED_API_KEY", "bare")
        monkeypatch.setenv("MARKET_RETURNS_SOURCES__FRED__API_KEY", "prefixed")
        assert load_config().sources.fred.api_key == "prefixed"

    def test_missing_config_file_raises(self):
        with pytest.raises(ConfigError, match="not found"):
            load_config(config_path="/nonexistent/file.yml")

    def test_non_mapping_yaml_raises(self, tmp_path):
        yaml_file = tmp_path / "config.yml"
        yaml_file.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="must be a mapping"):
            load_config(config_path=str(yaml_file))

    def test_invalid_value_wrapped_as_config_error(self, monkeypatch):
        monkeypatch.setenv("MARKET_RETURNS_LOGGING__LEVEL", "chatty")
        with pytest.raises(ConfigError):
            load_config()

    def test_config_is_frozen(self):
        config = load_config()
        with pytest.raises(ValidationError):
            config.sources = SourcesConfig(fred=FredConfig(api_key="x"))


class TestAutoCast:
    def test_bools(self):
        assert _auto_cast("true") is True
        assert _auto_cast("FALSE") is False

    def test_numbers(self):
        assert _auto_cast("42") == 42
        assert _auto_cast("0.5") == 0.5

    def test_string(self):
        assert _auto_cast("hello") == "hello"


class TestMergeEnvVars:
    def test_creates_nested_structure(self, monkeypatch):
        monkeypatch.setenv("TEST_SOURCES__COINGECKO__RATE_LIMIT", "0.25")
        result = _merge_env_vars({}, "TEST_")
        assert result["sources"]["coingecko"]["rate_limit"] == 0.25

    def test_skips_config_key(self, monkeypatch):
        monkeypatch.setenv("TEST_CONFIG", "/some/path")
        assert "config" not in _merge_env_vars({}, "TEST_")
