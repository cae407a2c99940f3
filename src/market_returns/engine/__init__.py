"""Batch orchestration of the return pipeline."""

from market_returns.engine.orchestrator import (
    BatchOrchestrator,
    BatchReport,
    InstrumentOutcome,
    data_range,
)

__all__ = ["BatchOrchestrator", "BatchReport", "InstrumentOutcome", "data_range"]
