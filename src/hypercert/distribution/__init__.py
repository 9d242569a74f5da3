"""Unit distribution and allowlist validation."""

from hypercert.distribution.engine import DistributionEngine, calculate_distribution
from hypercert.distribution.validator import (
    ValidationResult,
    require_valid_allowlist,
    sum_units,
    validate_allowlist,
)

__all__ = [
    "DistributionEngine",
    "calculate_distribution",
    "ValidationResult",
    "require_valid_allowlist",
    "sum_units",
    "validate_allowlist",
]
