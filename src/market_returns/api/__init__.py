"""HTTP API serving live and persisted market-return datasets."""

from market_returns.api.app import create_app

__all__ = ["create_app"]
