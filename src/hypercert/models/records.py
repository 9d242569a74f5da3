"""Contribution record models — the read-only input from the indexer.

A ContributionRecord is one approved unit of work tied to a contributor
address. Records are immutable and consumed as-is; this package never
fetches or stores them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class MetricValue:
    """A single reported outcome measurement.

    ``value`` is kept exactly as supplied. Aggregation decides whether
    it is usable (numeric and not NaN).
    """
    value: Any
    unit: str


@dataclass(frozen=True)
class ContributionRecord:
    """A verified contribution, as supplied by the indexing service."""
    id: str
    work_id: str
    garden_id: str
    contributor_address: str
    title: str
    work_scope: tuple[str, ...] = ()
    created_at: Optional[float] = None
    approved_at: Optional[float] = None
    contributor_name: Optional[str] = None
    domain: Optional[str] = None
    metrics: Mapping[str, MetricValue] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ContributionRecord:
        """Build a record from an indexer JSON node (camelCase keys)."""
        raw_metrics = data.get("metrics") or {}
        metrics = {
            key: MetricValue(value=item.get("value"), unit=item.get("unit", ""))
            for key, item in raw_metrics.items()
            if isinstance(item, Mapping)
        }
        return cls(
            id=str(data.get("id") or data.get("uid") or ""),
            work_id=str(data.get("workUid") or data.get("workId") or ""),
            garden_id=str(data.get("gardenId") or ""),
            contributor_address=str(
                data.get("gardenerAddress") or data.get("contributorAddress") or ""
            ),
            contributor_name=data.get("gardenerName") or data.get("contributorName"),
            title=str(data.get("title") or ""),
            work_scope=tuple(data.get("workScope") or ()),
            created_at=data.get("createdAt"),
            approved_at=data.get("approvedAt"),
            domain=data.get("domain") or None,
            metrics=metrics,
        )


@dataclass(frozen=True)
class ContributorWeight:
    """Per-contributor weight used as distribution input.

    One per distinct contributor address. ``action_count`` and
    ``action_value`` may be absent for hand-built inputs; distribution
    treats a missing weight as zero.
    """
    address: str
    label: Optional[str] = None
    action_count: Optional[float] = None
    action_value: Optional[float] = None


# Aggregation output has the same shape as distribution input.
ContributorStats = ContributorWeight
