"""Aggregation engine — reduces contribution records to weights and outcomes.

Three reductions over the same record list:

    aggregate_outcome_metrics  -> summed outcome metrics + attestation count
    build_contributor_stats    -> one weight entry per contributor address
    derive_work_timeframe      -> earliest start / latest end

All functions are pure and O(N) in the number of records. Input order is
significant: units and labels come from the first occurrence seen.
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Optional, Sequence

from hypercert.models.metadata import OutcomeMetrics, PredefinedMetric
from hypercert.models.records import ContributionRecord, ContributorStats, ContributorWeight

ATTESTATION_COUNT_KEY = "attestation_count"


def titleize(key: str) -> str:
    """Turn a metric key into a label: ``trees_planted`` -> ``Trees Planted``."""
    return " ".join(word[:1].upper() + word[1:] for word in key.split("_") if word)


def is_numeric(value: Any) -> bool:
    """True for real numbers that are not NaN. Booleans do not count."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return not math.isnan(value)


def _is_finite(value: Any) -> bool:
    return is_numeric(value) and math.isfinite(value)


def aggregate_outcome_metrics(records: Sequence[ContributionRecord]) -> OutcomeMetrics:
    """Sum each metric key across records.

    Non-numeric and NaN values are skipped. The unit of a key is the one
    seen first. An ``attestation_count`` metric equal to the number of
    records is always present, even for an empty input.
    """
    totals: dict[str, Any] = {}
    units: dict[str, str] = {}

    for record in records:
        for key, metric in (record.metrics or {}).items():
            if not is_numeric(metric.value):
                continue
            totals[key] = totals.get(key, 0) + metric.value
            units.setdefault(key, metric.unit)

    predefined: dict[str, PredefinedMetric] = {
        key: PredefinedMetric(
            value=total,
            unit=units[key],
            aggregation="sum",
            label=titleize(key),
        )
        for key, total in totals.items()
    }
    predefined[ATTESTATION_COUNT_KEY] = PredefinedMetric(
        value=len(records),
        unit="count",
        aggregation="count",
        label="Attestation count",
    )
    return OutcomeMetrics(predefined=predefined, custom={})


def build_contributor_stats(records: Sequence[ContributionRecord]) -> list[ContributorStats]:
    """Group records by contributor address.

    Addresses are grouped case-insensitively and reported in the spelling
    first seen, in first-seen order. ``action_count`` is the number of
    records, ``action_value`` the sum of every numeric metric value, and
    ``label`` the first non-empty contributor name.
    """
    order: list[str] = []
    addresses: dict[str, str] = {}
    counts: dict[str, int] = {}
    values: dict[str, Any] = {}
    labels: dict[str, Optional[str]] = {}

    for record in records:
        key = record.contributor_address.lower()
        if key not in addresses:
            order.append(key)
            addresses[key] = record.contributor_address
            counts[key] = 0
            values[key] = 0
            labels[key] = None

        counts[key] += 1
        for metric in (record.metrics or {}).values():
            if is_numeric(metric.value):
                values[key] += metric.value
        if labels[key] is None and record.contributor_name:
            labels[key] = record.contributor_name

    return [
        ContributorStats(
            address=addresses[key],
            label=labels[key],
            action_count=counts[key],
            action_value=values[key],
        )
        for key in order
    ]


def build_contributor_weights(records: Sequence[ContributionRecord]) -> list[ContributorWeight]:
    """Contributor weights ready to feed into distribution."""
    return [
        ContributorWeight(
            address=stats.address,
            label=stats.label,
            action_count=stats.action_count,
            action_value=stats.action_value,
        )
        for stats in build_contributor_stats(records)
    ]


def derive_work_timeframe(
    records: Sequence[ContributionRecord],
) -> tuple[Optional[float], Optional[float]]:
    """Return ``(start, end)`` spanning the records' work.

    Start is the earliest ``created_at`` (``approved_at`` when absent),
    end the latest ``approved_at`` (``created_at`` when absent). Returns
    ``(None, None)`` when there are no records or no finite timestamps.
    """
    starts = []
    ends = []
    for record in records:
        start = record.created_at if record.created_at is not None else record.approved_at
        end = record.approved_at if record.approved_at is not None else record.created_at
        if _is_finite(start):
            starts.append(start)
        if _is_finite(end):
            ends.append(end)

    return (min(starts) if starts else None, max(ends) if ends else None)


def collect_work_scopes(records: Sequence[ContributionRecord]) -> list[str]:
    """Union of record work scopes, in first-seen order."""
    seen: dict[str, None] = {}
    for record in records:
        for scope in record.work_scope or ():
            seen.setdefault(scope, None)
    return list(seen)


def first_domain(records: Sequence[ContributionRecord]) -> Optional[str]:
    """The first non-empty domain tag across records."""
    for record in records:
        if record.domain:
            return record.domain
    return None
