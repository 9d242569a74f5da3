"""Tests for allowlist validation — emptiness, conservation and positivity."""

import pytest

from hypercert.constants import TOTAL_UNITS
from hypercert.distribution.validator import (
    require_valid_allowlist,
    sum_units,
    validate_allowlist,
)
from hypercert.errors import (
    AllocationValueError,
    ConservationError,
    ConservationViolation,
    EmptyAllowlist,
    NonPositiveUnits,
)
from hypercert.models.allocation import AllocationEntry

ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"
CAROL = "0x3333333333333333333333333333333333333333"


def _make_entries(*units: int) -> list[AllocationEntry]:
    addresses = [ALICE, BOB, CAROL]
    return [AllocationEntry(address=addresses[i], units=u) for i, u in enumerate(units)]


class TestValidateAllowlist:
    def test_valid(self) -> None:
        result = validate_allowlist(_make_entries(50_000_000, 50_000_000))
        assert result.valid
        assert result.error is None
        assert result.code is None

    def test_empty(self) -> None:
        result = validate_allowlist([])
        assert not result.valid
        assert result.code == "EmptyAllowlist"
        assert result.error == "Allowlist cannot be empty"

    def test_sum_mismatch(self) -> None:
        result = validate_allowlist(_make_entries(50_000_000, 49_999_999))
        assert not result.valid
        assert result.code == "ConservationViolation"
        assert "99999999" in result.error

    def test_zero_unit_entry(self) -> None:
        result = validate_allowlist(_make_entries(TOTAL_UNITS, 0))
        assert not result.valid
        assert result.code == "NonPositiveUnits"

    def test_negative_entry_balanced_by_surplus(self) -> None:
        result = validate_allowlist(_make_entries(TOTAL_UNITS + 5, -5))
        assert not result.valid
        assert result.code == "NonPositiveUnits"

    def test_conservation_checked_before_positivity(self) -> None:
        result = validate_allowlist(_make_entries(10, 0))
        assert result.code == "ConservationViolation"

    def test_custom_total(self) -> None:
        assert validate_allowlist(_make_entries(3, 7), total_units=10).valid

    def test_large_units_exact(self) -> None:
        big = 2 ** 200
        assert validate_allowlist(_make_entries(big - 1, 1), total_units=big).valid


class TestRequireValidAllowlist:
    def test_valid_returns_none(self) -> None:
        assert require_valid_allowlist(_make_entries(TOTAL_UNITS)) is None

    def test_empty_raises(self) -> None:
        with pytest.raises(EmptyAllowlist):
            require_valid_allowlist([])

    def test_conservation_raises(self) -> None:
        with pytest.raises(ConservationError):
            require_valid_allowlist(_make_entries(1, 2))

    def test_zero_units_raises(self) -> None:
        with pytest.raises(NonPositiveUnits) as exc_info:
            require_valid_allowlist(_make_entries(TOTAL_UNITS, 0))
        assert exc_info.value.address == BOB
        assert exc_info.value.units == 0

    def test_non_positive_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            require_valid_allowlist(_make_entries(TOTAL_UNITS, 0))
        with pytest.raises(AllocationValueError):
            require_valid_allowlist(_make_entries(TOTAL_UNITS, 0))

    def test_violation_carries_totals(self) -> None:
        with pytest.raises(ConservationViolation) as exc_info:
            require_valid_allowlist(_make_entries(40, 50), total_units=100)
        assert exc_info.value.expected == 100
        assert exc_info.value.actual == 90


class TestSumUnits:
    def test_empty(self) -> None:
        assert sum_units([]) == 0

    def test_sum(self) -> None:
        assert sum_units(_make_entries(1, 2, 3)) == 6
