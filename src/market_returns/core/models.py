"""Pydantic data models: the engine's type contracts.

Field names are snake_case in Python and camelCase on the wire
(``returnPct``, ``sourceId``, ``lastUpdated``...), so the JSON produced here
is the shape consumed by the heatmap UI and stored in snapshots.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator
from pydantic.alias_generators import to_camel

# --- Type Aliases ---

MarketId = str
PeriodKey = str

# Period key ("YYYY-MM") -> last observed price in that month.
PriceSeries = dict[PeriodKey, float]

# --- Enumerations ---


class SourceTag(StrEnum):
    """Upstream time-series providers."""

    FRED = "FRED"
    YAHOO = "YAHOO"
    COINGECKO = "COINGECKO"


class MarketCategory(StrEnum):
    """Asset-class grouping used by the heatmap."""

    EQUITIES = "equities"
    SECTORS = "sectors"
    BONDS = "bonds"
    COMMODITIES = "commodities"
    ENERGY = "energy"
    REAL_ESTATE = "real-estate"
    FOREX = "forex"
    CRYPTO = "crypto"


class PeriodType(StrEnum):
    """Return granularities."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class _WireModel(BaseModel):
    """Base for models serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# --- Registry Models ---


class Instrument(_WireModel):
    """One tracked market series."""

    id: MarketId
    name: str
    category: MarketCategory
    description: str = ""
    color: str = "#737373"
    source: SourceTag
    source_id: str

    @field_validator("id", "source_id")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class CategoryInfo(BaseModel):
    """Display metadata for a market category."""

    model_config = ConfigDict(frozen=True)

    label: str
    color: str
    order: int


# --- Return Models ---


class PeriodReturn(_WireModel):
    """Representative price and percent return for one period bucket.

    ``period`` is ``YYYY-MM``, ``YYYY-Qn`` or ``YYYY``. ``return_pct`` is
    rounded to 2 decimals, or None for the first period and whenever an
    endpoint price is unavailable.
    """

    period: PeriodKey
    value: float | None = None
    return_pct: float | None = None


class ReturnSet(_WireModel):
    """Monthly, quarterly and yearly returns for one instrument."""

    monthly: list[PeriodReturn] = []
    quarterly: list[PeriodReturn] = []
    yearly: list[PeriodReturn] = []

    @classmethod
    def empty(cls) -> ReturnSet:
        return cls(monthly=[], quarterly=[], yearly=[])

    @property
    def is_empty(self) -> bool:
        return not (self.monthly or self.quarterly or self.yearly)

    def for_period(self, period_type: PeriodType) -> list[PeriodReturn]:
        return getattr(self, period_type.value)


# --- Dataset ---


class DatasetMetadata(_WireModel):
    """Run metadata.

    ``data_start``/``data_end`` come from the first instrument (registry
    order) with monthly data. They are a display range, not a global min/max.
    """

    last_updated: datetime
    data_start: str = ""
    data_end: str = ""

    @field_serializer("last_updated")
    def _iso_utc(self, v: datetime) -> str:
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        v = v.astimezone(timezone.utc)
        return v.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Dataset(_WireModel):
    """Full engine output: registry, per-instrument returns, metadata."""

    markets: list[Instrument]
    returns: dict[MarketId, ReturnSet]
    metadata: DatasetMetadata

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to the wire/snapshot JSON shape.

        The live API response and the persisted snapshot both go through
        this method so they stay byte-compatible.
        """
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, data: str | bytes) -> Dataset:
        return cls.model_validate_json(data)
