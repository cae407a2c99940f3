"""Custom exception hierarchy for market-returns."""

from typing import Any


class MarketReturnsError(Exception):
    """Base exception for all market-returns errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(MarketReturnsError):
    """Invalid or missing configuration.

    Raised by load_config() and by BatchOrchestrator construction (e.g. a
    FRED instrument is registered but no API key is configured). Fatal:
    no fetch is attempted.

    Context keys:
        field: str — the config field that failed validation
        value: Any — the invalid value (redacted for secrets)
    """


class SourceUnavailable(MarketReturnsError):
    """Upstream provider failed: non-success HTTP status, transport error,
    or an explicit error payload inside an otherwise successful response.

    Policy: caught at the instrument boundary. The instrument gets an empty
    return set for this run; sibling instruments are unaffected.

    Context keys:
        source: str — "FRED", "YAHOO" or "COINGECKO"
        series_id: str — the provider-specific identifier
        url: str — the URL that was being fetched
        status_code: int | None — HTTP status code if applicable
    """


class ParseAnomaly(MarketReturnsError):
    """A raw value could not be interpreted as a price or a date.

    Raised by the coercion helpers in ``market_returns.sources.base``.
    Policy: recovered locally. Parsers catch it, log it at DEBUG and skip
    the offending point; the rest of the series is kept.

    Context keys:
        raw: Any — the offending value
    """


class SnapshotError(MarketReturnsError):
    """Persisted dataset snapshot could not be written, read, or validated.

    Policy: raise immediately. A half-written snapshot is worse than none.

    Context keys:
        path: str — snapshot file path
        operation: str — "read" or "write"
    """
