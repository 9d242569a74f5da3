"""Distribution engine — turns contributor weights into integer unit allocations.

Every policy produces units that sum to exactly TOTAL_UNITS:

    Equal:    base = TOTAL // N, remainder handed out one unit at a time
    ByCount:  units_i = floor(TOTAL * count_i / sum(count))
    ByValue:  units_i = floor(TOTAL * value_i / sum(value))
    Custom:   caller-supplied entries, checked for conservation only

Remainder units go to contributors in descending original weight, ties
kept in input order (a stable sort), cycling if the remainder exceeds
the contributor count. Proportional policies with zero total weight fall
back to Equal.

Arithmetic is integer-only. Weights are read as exact Decimals and
scaled to a common integer denominator before any division, so the same
ordered input always yields the same allocation, unit for unit.

Entries whose share comes out at zero are not claimants and are left out
of the result.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Optional, Sequence

from hypercert.constants import TOTAL_UNITS
from hypercert.distribution.validator import sum_units
from hypercert.errors import (
    ConservationViolation,
    EmptyContributorSet,
    MissingCustomEntries,
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
from hypercert.models.records import ContributorWeight


class DistributionEngine:
    """Allocates the fixed supply across contributors.

    Usage:
        engine = DistributionEngine()
        entries = engine.distribute(ByCount(contributors=tuple(weights)))
    """

    def __init__(self, total_units: int = TOTAL_UNITS) -> None:
        self._total_units = total_units

    @property
    def total_units(self) -> int:
        return self._total_units

    def distribute(self, request: DistributionRequest) -> list[AllocationEntry]:
        """Allocate units according to the request variant."""
        if isinstance(request, Custom):
            return self._custom(request.entries)
        if isinstance(request, Equal):
            return self._equal(request.contributors)
        if isinstance(request, ByCount):
            return self._proportional(
                request.contributors,
                [c.action_count for c in request.contributors],
            )
        if isinstance(request, ByValue):
            return self._proportional(
                request.contributors,
                [c.action_value for c in request.contributors],
            )
        raise TypeError(f"Unknown distribution request: {type(request).__name__}")

    # ------------------------------------------------------------------
    # Policies
    # ------------------------------------------------------------------

    def _equal(self, contributors: Sequence[ContributorWeight]) -> list[AllocationEntry]:
        if not contributors:
            raise EmptyContributorSet()
        count = len(contributors)
        base = self._total_units // count
        units = [base] * count
        remainder = self._total_units - base * count
        _distribute_remainder(units, [1] * count, remainder)
        return _to_entries(contributors, units)

    def _proportional(
        self,
        contributors: Sequence[ContributorWeight],
        raw_weights: Sequence[Optional[float]],
    ) -> list[AllocationEntry]:
        if not contributors:
            raise EmptyContributorSet()

        weights = _exact_weights(raw_weights)
        total_weight = sum(weights)
        if total_weight == 0:
            return self._equal(contributors)

        units = [self._total_units * w // total_weight for w in weights]
        remainder = self._total_units - sum(units)
        _distribute_remainder(units, weights, remainder)
        return _to_entries(contributors, units)

    def _custom(self, entries: Sequence[AllocationEntry]) -> list[AllocationEntry]:
        if not entries:
            raise MissingCustomEntries()
        total = sum_units(entries)
        if total != self._total_units:
            raise ConservationViolation(expected=self._total_units, actual=total)
        return list(entries)


def calculate_distribution(
    contributors: Sequence[ContributorWeight],
    mode: DistributionMode | str,
    custom_entries: Optional[Sequence[AllocationEntry]] = None,
    total_units: int = TOTAL_UNITS,
) -> list[AllocationEntry]:
    """Allocate from the string mode form used by editors and the CLI."""
    request = request_from_mode(mode, contributors, custom_entries)
    return DistributionEngine(total_units).distribute(request)


def _exact_weights(raw_weights: Sequence[Optional[float]]) -> list[int]:
    """Clamp weights at zero and scale them to integers over a common denominator.

    Floats are read through ``str`` so 0.1 is one tenth, not its binary
    approximation. Missing and non-finite weights count as zero.
    """
    ratios: list[tuple[int, int]] = []
    for raw in raw_weights:
        if raw is None or isinstance(raw, bool):
            ratios.append((0, 1))
            continue
        value = raw if isinstance(raw, Decimal) else Decimal(str(raw))
        if not value.is_finite() or value <= 0:
            ratios.append((0, 1))
            continue
        ratios.append(value.as_integer_ratio())

    denominator = math.lcm(*(d for _, d in ratios)) if ratios else 1
    return [n * (denominator // d) for n, d in ratios]


def _distribute_remainder(units: list[int], weights: Sequence[int], remainder: int) -> None:
    """Hand out ``remainder`` units one at a time, heaviest weight first."""
    if remainder <= 0 or not units:
        return
    order = sorted(range(len(units)), key=lambda i: -weights[i])
    rounds, extra = divmod(remainder, len(order))
    for position, index in enumerate(order):
        units[index] += rounds + (1 if position < extra else 0)


def _to_entries(
    contributors: Sequence[ContributorWeight], units: Sequence[int],
) -> list[AllocationEntry]:
    return [
        AllocationEntry(address=c.address, units=u, label=c.label)
        for c, u in zip(contributors, units)
        if u > 0
    ]
