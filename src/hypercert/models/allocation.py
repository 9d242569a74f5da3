"""Allocation models — allowlist entries and distribution requests.

Units are Python ints (unbounded), so uint256 values round-trip without
loss. No float ever represents a unit count.

A distribution request is a tagged union. Each variant carries exactly
the payload its policy needs, so a proportional request cannot arrive
without contributors and a custom request cannot arrive without entries:

    Equal(contributors) | ByCount(contributors) | ByValue(contributors) | Custom(entries)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

from hypercert.errors import UnknownDistributionMode
from hypercert.models.records import ContributorWeight


@dataclass(frozen=True)
class AllocationEntry:
    """One recipient and the units allocated to them."""
    address: str
    units: int
    label: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Render for JSON. Units are a decimal string to keep precision."""
        data: dict[str, Any] = {"address": self.address, "units": str(self.units)}
        if self.label is not None:
            data["label"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AllocationEntry:
        return cls(
            address=str(data["address"]),
            units=int(data["units"]),
            label=data.get("label"),
        )


class DistributionMode(str, enum.Enum):
    """String form of the distribution policy, as chosen in the editor."""
    EQUAL = "equal"
    COUNT = "count"
    PROPORTIONAL = "proportional"  # Historical alias of COUNT
    VALUE = "value"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Equal:
    contributors: tuple[ContributorWeight, ...]


@dataclass(frozen=True)
class ByCount:
    contributors: tuple[ContributorWeight, ...]


@dataclass(frozen=True)
class ByValue:
    contributors: tuple[ContributorWeight, ...]


@dataclass(frozen=True)
class Custom:
    entries: tuple[AllocationEntry, ...]


DistributionRequest = Union[Equal, ByCount, ByValue, Custom]


def request_from_mode(
    mode: DistributionMode | str,
    contributors: Sequence[ContributorWeight] = (),
    custom_entries: Optional[Sequence[AllocationEntry]] = None,
) -> DistributionRequest:
    """Build the request variant for a string mode and its side payload.

    Custom mode with no entries yields an empty ``Custom``; the engine
    rejects it with MissingCustomEntries.
    """
    try:
        mode = DistributionMode(mode)
    except ValueError:
        raise UnknownDistributionMode(mode) from None
    if mode == DistributionMode.CUSTOM:
        return Custom(entries=tuple(custom_entries or ()))
    if mode == DistributionMode.EQUAL:
        return Equal(contributors=tuple(contributors))
    if mode == DistributionMode.VALUE:
        return ByValue(contributors=tuple(contributors))
    return ByCount(contributors=tuple(contributors))
