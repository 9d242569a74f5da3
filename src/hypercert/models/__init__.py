"""Data models for the certificate mint pipeline."""

from hypercert.models.records import (
    ContributionRecord,
    ContributorStats,
    ContributorWeight,
    MetricValue,
)
from hypercert.models.allocation import (
    AllocationEntry,
    ByCount,
    ByValue,
    Custom,
    DistributionMode,
    DistributionRequest,
    Equal,
    request_from_mode,
)
from hypercert.models.metadata import (
    AttestationRef,
    CertificateMetadata,
    CustomMetric,
    GreenGoodsExtension,
    HypercertBlock,
    HypercertDraft,
    OutcomeMetrics,
    PredefinedMetric,
    ScopeDefinition,
    TimeframeDefinition,
)

__all__ = [
    "ContributionRecord",
    "ContributorStats",
    "ContributorWeight",
    "MetricValue",
    "AllocationEntry",
    "ByCount",
    "ByValue",
    "Custom",
    "DistributionMode",
    "DistributionRequest",
    "Equal",
    "request_from_mode",
    "AttestationRef",
    "CertificateMetadata",
    "CustomMetric",
    "GreenGoodsExtension",
    "HypercertBlock",
    "HypercertDraft",
    "OutcomeMetrics",
    "PredefinedMetric",
    "ScopeDefinition",
    "TimeframeDefinition",
]
