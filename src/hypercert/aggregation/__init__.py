"""Aggregation of contribution records into weights, outcomes and timeframes."""

from hypercert.aggregation.engine import (
    aggregate_outcome_metrics,
    build_contributor_stats,
    build_contributor_weights,
    derive_work_timeframe,
)

__all__ = [
    "aggregate_outcome_metrics",
    "build_contributor_stats",
    "build_contributor_weights",
    "derive_work_timeframe",
]
