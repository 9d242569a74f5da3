"""Allowlist validation — structural checks before commitment.

A valid allowlist is non-empty, conserves the total supply exactly, and
gives every entry a positive unit count. Checks run in that order and
the first failure is reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from hypercert.constants import TOTAL_UNITS
from hypercert.errors import (
    ConservationViolation,
    EmptyAllowlist,
    HypercertError,
    NonPositiveUnits,
)
from hypercert.models.allocation import AllocationEntry


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of allowlist validation.

    ``code`` names the failed check (the exception class name) so callers
    can branch without parsing the message.
    """
    valid: bool
    error: Optional[str] = None
    code: Optional[str] = None


def sum_units(entries: Iterable[AllocationEntry]) -> int:
    """Exact integer sum of entry units."""
    return sum((entry.units for entry in entries), 0)


def _first_violation(
    entries: Sequence[AllocationEntry], total_units: int,
) -> Optional[HypercertError]:
    if not entries:
        return EmptyAllowlist()
    total = sum_units(entries)
    if total != total_units:
        return ConservationViolation(expected=total_units, actual=total)
    for entry in entries:
        if entry.units <= 0:
            return NonPositiveUnits(entry.address, entry.units)
    return None


def validate_allowlist(
    entries: Sequence[AllocationEntry],
    total_units: int = TOTAL_UNITS,
) -> ValidationResult:
    """Check an allowlist without raising."""
    violation = _first_violation(entries, total_units)
    if violation is None:
        return ValidationResult(valid=True)
    return ValidationResult(
        valid=False,
        error=str(violation),
        code=type(violation).__name__,
    )


def require_valid_allowlist(
    entries: Sequence[AllocationEntry],
    total_units: int = TOTAL_UNITS,
) -> None:
    """Raise the matching error if the allowlist is invalid."""
    violation = _first_violation(entries, total_units)
    if violation is not None:
        raise violation
