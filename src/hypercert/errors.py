"""Error taxonomy for the allocation and commitment pipeline.

Four categories, all raised synchronously and never retried here:

- InputError: the caller supplied nothing to work with.
- ConservationError: units do not sum to TOTAL_UNITS.
- AllocationValueError: a single value is malformed (units, address).
- NotFoundError: a lookup against a built tree found nothing.

Deciding whether to re-run under another mode or surface a message to a
user belongs to the calling workflow.
"""

from __future__ import annotations


class HypercertError(Exception):
    """Base class for every error raised by this package."""


class InputError(HypercertError):
    """Raised when required input is empty or missing."""


class EmptyContributorSet(InputError):
    def __init__(self) -> None:
        super().__init__("Cannot distribute units without contributors")


class EmptyAllowlist(InputError):
    def __init__(self) -> None:
        super().__init__("Allowlist cannot be empty")


class MissingCustomEntries(InputError):
    def __init__(self) -> None:
        super().__init__("Custom distribution requires entries")


class ConservationError(HypercertError):
    """Raised when an allocation does not conserve the total supply."""


class ConservationViolation(ConservationError):
    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Distribution must total {expected} units (got {actual})"
        )


class AllocationValueError(HypercertError, ValueError):
    """Raised when an individual entry carries a malformed value."""


class NonPositiveUnits(AllocationValueError):
    def __init__(self, address: str, units: int) -> None:
        self.address = address
        self.units = units
        super().__init__(f"Entry for {address} has non-positive units: {units}")


class InvalidAddress(AllocationValueError):
    def __init__(self, address: object) -> None:
        self.address = address
        super().__init__(f"Invalid address: {address!r}")


class DuplicateAddress(AllocationValueError):
    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Duplicate allowlist address after normalization: {address}")


class UnknownDistributionMode(AllocationValueError):
    def __init__(self, mode: object) -> None:
        self.mode = mode
        super().__init__(f"Unknown distribution mode: {mode!r}")


class NotFoundError(HypercertError, LookupError):
    """Raised when a requested item is absent."""


class EntryNotFound(NotFoundError):
    def __init__(self, address: str, units: int) -> None:
        self.address = address
        self.units = units
        super().__init__(f"Entry not found in tree: {address} ({units} units)")
