"""Fixed protocol constants shared by every stage of the mint pipeline."""

from __future__ import annotations

# Full fractional supply of one certificate. Every allocation sums to this.
TOTAL_UNITS = 100_000_000

DEFAULT_PROTOCOL_VERSION = "1.0.0"

# Domain tag used when no contribution record carries one.
DEFAULT_DOMAIN = "mutual_credit"

DEFAULT_IMPACT_SCOPE: tuple[str, ...] = ("all",)
DEFAULT_RIGHTS: tuple[str, ...] = ("Public Display",)

# Encoded end of an open-ended impact timeframe.
INDEFINITE_TIMEFRAME_END = 0

# Leaf encoding shared with the on-chain allowlist verifier.
LEAF_ENCODING: tuple[str, str] = ("address", "uint256")
