"""Tests for market_returns.core.models."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from market_returns.core.models import (
    Dataset,
    DatasetMetadata,
    Instrument,
    MarketCategory,
    PeriodReturn,
    PeriodType,
    ReturnSet,
    SourceTag,
)


class TestInstrument:
    def test_accepts_camel_case(self):
        m = Instrument.model_validate(
            {
                "id": "btc",
                "name": "Bitcoin",
                "category": "crypto",
                "source": "COINGECKO",
                "sourceId": "bitcoin",
            }
        )
        assert m.source_id == "bitcoin"
        assert m.source == SourceTag.COINGECKO

    def test_serializes_camel_case(self, spy_market):
        data = spy_market.model_dump(by_alias=True, mode="json")
        assert data["sourceId"] == "^GSPC"
        assert data["source"] == "YAHOO"
        assert data["category"] == "equities"

    def test_unknown_source_rejected(self):
        with pytest.raises(ValidationError):
            Instrument(
                id="x", name="X", category=MarketCategory.EQUITIES, source="BLOOMBERG", source_id="X"
            )

    def test_blank_id_rejected(self):
        with pytest.raises(ValidationError, match="must not be blank"):
            Instrument(
                id=" ", name="X", category=MarketCategory.EQUITIES, source=SourceTag.YAHOO, source_id="X"
            )

    def test_frozen(self, spy_market):
        with pytest.raises(ValidationError):
            spy_market.id = "other"


class TestPeriodReturn:
    def test_wire_names(self):
        r = PeriodReturn(period="2024-Q1", value=105.0, return_pct=16.67)
        assert r.model_dump(by_alias=True) == {
            "period": "2024-Q1",
            "value": 105.0,
            "returnPct": 16.67,
        }

    def test_nulls_serialized(self):
        r = PeriodReturn(period="2024")
        assert json.loads(r.model_dump_json(by_alias=True)) == {
            "period": "2024",
            "value": None,
            "returnPct": None,
        }


class TestReturnSet:
    def test_empty(self):
        empty = ReturnSet.empty()
        assert empty.is_empty
        assert empty.model_dump() == {"monthly": [], "quarterly": [], "yearly": []}

    def test_for_period(self):
        rs = ReturnSet(quarterly=[PeriodReturn(period="2024-Q1")])
        assert rs.for_period(PeriodType.QUARTERLY)[0].period == "2024-Q1"
        assert rs.for_period(PeriodType.MONTHLY) == []


class TestDataset:
    @pytest.fixture
    def dataset(self, spy_market) -> Dataset:
        return Dataset(
            markets=[spy_market],
            returns={
                "sp500": ReturnSet(
                    monthly=[
                        PeriodReturn(period="2024-01", value=4850.0),
                        PeriodReturn(period="2024-02", value=5100.0, return_pct=5.15),
                    ],
                    quarterly=[PeriodReturn(period="2024-Q1", value=5100.0)],
                    yearly=[PeriodReturn(period="2024", value=5100.0)],
                )
            },
            metadata=DatasetMetadata(
                last_updated=datetime(2024, 3, 1, 9, 30, 0, 123456, tzinfo=timezone.utc),
                data_start="2024-01",
                data_end="2024-02",
            ),
        )

    def test_wire_shape(self, dataset):
        data = json.loads(dataset.to_json())
        assert set(data) == {"markets", "returns", "metadata"}
        assert data["metadata"] == {
            "lastUpdated": "2024-03-01T09:30:00.123Z",
            "dataStart": "2024-01",
            "dataEnd": "2024-02",
        }
        assert data["markets"][0]["sourceId"] == "^GSPC"
        assert data["returns"]["sp500"]["monthly"][0] == {
            "period": "2024-01",
            "value": 4850.0,
            "returnPct": None,
        }

    def test_round_trip_preserves_values_and_nulls(self, dataset):
        restored = Dataset.from_json(dataset.to_json())
        assert restored.returns == dataset.returns
        assert restored.markets == dataset.markets
        assert restored.returns["sp500"].monthly[0].return_pct is None
        assert restored.to_json() == dataset.to_json()

    def test_naive_timestamp_treated_as_utc(self):
        meta = DatasetMetadata(last_updated=datetime(2024, 1, 1, 0, 0))
        assert meta.model_dump(by_alias=True, mode="json")["lastUpdated"] == "2024-01-01T00:00:00.000Z"

    def test_offset_timestamp_normalized_to_utc(self):
        tz = timezone(timedelta(hours=-5))
        meta = DatasetMetadata(last_updated=datetime(2024, 1, 1, 19, 0, tzinfo=tz))
        assert meta.model_dump(by_alias=True, mode="json")["lastUpdated"] == "2024-01-02T00:00:00.000Z"
