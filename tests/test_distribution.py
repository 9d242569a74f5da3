"""Tests for DistributionEngine — integer unit allocation across contributors."""

import pytest

from hypercert.constants import TOTAL_UNITS
from hypercert.distribution.engine import DistributionEngine, calculate_distribution
from hypercert.errors import (
    ConservationViolation,
    EmptyContributorSet,
    InputError,
    MissingCustomEntries,
    UnknownDistributionMode,
)
from hypercert.models.allocation import (
    AllocationEntry,
    ByCount,
    ByValue,
    Custom,
    DistributionMode,
    Equal,
    request_from_mode,
)
from hypercert.models.records import ContributorWeight


@pytest.fixture
def engine():
    return DistributionEngine()


def _addr(n: int) -> str:
    return "0x" + f"{n:040x}"


def _make_weights(
    counts: list[float | None] | None = None,
    values: list[float | None] | None = None,
    n: int | None = None,
) -> tuple[ContributorWeight, ...]:
    size = n or len(counts or values or [])
    counts = counts or [None] * size
    values = values or [None] * size
    return tuple(
        ContributorWeight(
            address=_addr(i + 1),
            label=f"Contributor {i + 1}",
            action_count=counts[i],
            action_value=values[i],
        )
        for i in range(size)
    )


class TestEqual:
    def test_three_contributors(self, engine) -> None:
        entries = engine.distribute(Equal(contributors=_make_weights(n=3)))
        units = [e.units for e in entries]
        assert sorted(units) == [33333333, 33333333, 33333334]
        assert sum(units) == TOTAL_UNITS
        assert units.count(33333334) == 1

    def test_extra_unit_goes_to_first_on_tie(self, engine) -> None:
        entries = engine.distribute(Equal(contributors=_make_weights(n=3)))
        assert entries[0].units == 33333334

    def test_single_contributor_gets_everything(self, engine) -> None:
        entries = engine.distribute(Equal(contributors=_make_weights(n=1)))
        assert entries == [AllocationEntry(_addr(1), TOTAL_UNITS, "Contributor 1")]

    def test_preserves_order_and_labels(self, engine) -> None:
        weights = _make_weights(n=4)
        entries = engine.distribute(Equal(contributors=weights))
        assert [e.address for e in entries] == [w.address for w in weights]
        assert [e.label for e in entries] == [w.label for w in weights]

    def test_empty_raises(self, engine) -> None:
        with pytest.raises(EmptyContributorSet):
            engine.distribute(Equal(contributors=()))

    def test_empty_is_input_error(self, engine) -> None:
        with pytest.raises(InputError):
            engine.distribute(ByCount(contributors=()))

    @pytest.mark.parametrize("n", [1, 2, 3, 7, 10, 99, 1000])
    def test_conservation(self, engine, n) -> None:
        entries = engine.distribute(Equal(contributors=_make_weights(n=n)))
        assert sum(e.units for e in entries) == TOTAL_UNITS
        assert all(e.units > 0 for e in entries)
        assert len(entries) == n

    def test_small_total_omits_zero_shares(self) -> None:
        engine = DistributionEngine(total_units=2)
        entries = engine.distribute(Equal(contributors=_make_weights(n=3)))
        assert [e.units for e in entries] == [1, 1]
        assert [e.address for e in entries] == [_addr(1), _addr(2)]


class TestByCount:
    def test_one_to_three(self, engine) -> None:
        entries = engine.distribute(ByCount(contributors=_make_weights(counts=[1, 3])))
        assert entries[1].units > 50_000_000
        assert entries[0].units == 25_000_000
        assert entries[1].units == 75_000_000
        assert sum(e.units for e in entries) == TOTAL_UNITS

    def test_remainder_to_heaviest(self, engine) -> None:
        entries = engine.distribute(ByCount(contributors=_make_weights(counts=[1, 1, 2])))
        # 25,000,000 / 25,000,000 / 50,000,000 is exact; no remainder
        assert [e.units for e in entries] == [25_000_000, 25_000_000, 50_000_000]

        entries = engine.distribute(ByCount(contributors=_make_weights(counts=[1, 2])))
        # 33,333,333.33 / 66,666,666.67 -> floors leave one unit for the heavier
        assert [e.units for e in entries] == [33_333_333, 66_666_667]

    def test_ties_resolve_by_input_order(self, engine) -> None:
        entries = engine.distribute(ByCount(contributors=_make_weights(counts=[2, 1, 2])))
        # floors: 40,000,000 / 20,000,000 / 40,000,000 exact
        assert sum(e.units for e in entries) == TOTAL_UNITS

        entries = engine.distribute(ByCount(contributors=_make_weights(counts=[1, 1, 1])))
        assert [e.units for e in entries] == [33333334, 33333333, 33333333]

    def test_all_zero_falls_back_to_equal(self, engine) -> None:
        weights = _make_weights(counts=[0, 0, 0])
        assert engine.distribute(ByCount(contributors=weights)) == engine.distribute(
            Equal(contributors=weights)
        )

    def test_missing_counts_fall_back_to_equal(self, engine) -> None:
        weights = _make_weights(n=3)
        assert engine.distribute(ByCount(contributors=weights)) == engine.distribute(
            Equal(contributors=weights)
        )

    def test_negative_weights_clamped(self, engine) -> None:
        entries = engine.distribute(ByCount(contributors=_make_weights(counts=[-5, 1])))
        assert entries == [AllocationEntry(_addr(2), TOTAL_UNITS, "Contributor 2")]

    def test_zero_weight_contributor_omitted(self, engine) -> None:
        entries = engine.distribute(ByCount(contributors=_make_weights(counts=[0, 4])))
        assert len(entries) == 1
        assert entries[0].address == _addr(2)
        assert entries[0].units == TOTAL_UNITS

    def test_deterministic(self, engine) -> None:
        weights = _make_weights(counts=[3, 7, 11, 13, 2])
        first = engine.distribute(ByCount(contributors=weights))
        second = engine.distribute(ByCount(contributors=weights))
        assert first == second


class TestByValue:
    def test_fractional_values_exact(self, engine) -> None:
        entries = engine.distribute(ByValue(contributors=_make_weights(values=[0.1, 0.2])))
        # One third and two thirds, with the remainder to the heavier
        assert [e.units for e in entries] == [33_333_333, 66_666_667]

    def test_mixed_int_and_float(self, engine) -> None:
        entries = engine.distribute(ByValue(contributors=_make_weights(values=[1, 0.5, 2.5])))
        assert [e.units for e in entries] == [25_000_000, 12_500_000, 62_500_000]

    def test_nan_and_inf_count_as_zero(self, engine) -> None:
        entries = engine.distribute(
            ByValue(contributors=_make_weights(values=[float("nan"), float("inf"), 5.0]))
        )
        assert [e.address for e in entries] == [_addr(3)]

    def test_all_zero_falls_back_to_equal(self, engine) -> None:
        weights = _make_weights(values=[0.0, 0.0])
        assert engine.distribute(ByValue(contributors=weights)) == engine.distribute(
            Equal(contributors=weights)
        )

    def test_uses_value_not_count(self, engine) -> None:
        weights = _make_weights(counts=[10, 1], values=[1, 3])
        entries = engine.distribute(ByValue(contributors=weights))
        assert entries[1].units > entries[0].units

    @pytest.mark.parametrize("values", [
        [1, 1, 1],
        [0.3, 0.3, 0.4],
        [1e-9, 1, 1e9],
        [7, 11, 13, 17, 19, 23],
        [123.456, 789.012],
    ])
    def test_conservation(self, engine, values) -> None:
        entries = engine.distribute(ByValue(contributors=_make_weights(values=values)))
        assert sum(e.units for e in entries) == TOTAL_UNITS
        assert all(e.units > 0 for e in entries)


class TestCustom:
    def test_passthrough(self, engine) -> None:
        entries = (
            AllocationEntry(_addr(1), 60_000_000),
            AllocationEntry(_addr(2), 40_000_000),
        )
        assert engine.distribute(Custom(entries=entries)) == list(entries)

    def test_short_by_one_unit(self, engine) -> None:
        entries = (
            AllocationEntry(_addr(1), 50_000_000),
            AllocationEntry(_addr(2), 49_999_999),
        )
        with pytest.raises(ConservationViolation) as exc_info:
            engine.distribute(Custom(entries=entries))
        assert exc_info.value.expected == TOTAL_UNITS
        assert exc_info.value.actual == 99_999_999

    def test_empty_raises(self, engine) -> None:
        with pytest.raises(MissingCustomEntries):
            engine.distribute(Custom(entries=()))

    def test_unknown_request_type(self, engine) -> None:
        with pytest.raises(TypeError):
            engine.distribute("equal")


class TestRequestFromMode:
    def test_variants(self) -> None:
        weights = _make_weights(n=2)
        assert isinstance(request_from_mode("equal", weights), Equal)
        assert isinstance(request_from_mode("count", weights), ByCount)
        assert isinstance(request_from_mode("proportional", weights), ByCount)
        assert isinstance(request_from_mode("value", weights), ByValue)
        assert isinstance(request_from_mode(DistributionMode.CUSTOM, weights), Custom)

    def test_custom_without_entries_is_empty(self) -> None:
        request = request_from_mode("custom")
        assert request == Custom(entries=())

    def test_unknown_mode(self) -> None:
        with pytest.raises(UnknownDistributionMode) as exc_info:
            request_from_mode("random")
        assert isinstance(exc_info.value, ValueError)
        assert exc_info.value.mode == "random"

    def test_calculate_distribution(self) -> None:
        entries = calculate_distribution(_make_weights(counts=[1, 3]), "count")
        assert [e.units for e in entries] == [25_000_000, 75_000_000]

    def test_calculate_distribution_custom_total(self) -> None:
        entries = calculate_distribution(_make_weights(n=3), "equal", total_units=10)
        assert [e.units for e in entries] == [4, 3, 3]
