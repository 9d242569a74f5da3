"""Mint transaction encoder — call data for registering an allowlist on-chain.

Encodes a call to the minter's

    createAllowlist(address account, uint256 totalUnits, bytes32 merkleRoot,
                    string metadataUri, uint8 transferRestrictions)

This is encoding only. Nothing is signed or sent; the caller hands the
payload to whatever wallet or bundler broadcasts it.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from eth_abi import encode as abi_encode
from eth_utils import function_signature_to_4byte_selector

from hypercert.crypto.merkle import normalize_address
from hypercert.errors import AllocationValueError

CREATE_ALLOWLIST_SIGNATURE = "createAllowlist(address,uint256,bytes32,string,uint8)"
CREATE_ALLOWLIST_TYPES = ["address", "uint256", "bytes32", "string", "uint8"]


class TransferRestrictions(enum.IntEnum):
    """On-chain policy for moving fractions after they are claimed."""
    ALLOW_ALL = 0
    DISALLOW_ALL = 1
    FROM_CREATOR_ONLY = 2


@dataclass(frozen=True)
class MintCall:
    """An encoded contract call, ready for a signer."""
    function_name: str
    args: tuple[Any, ...]
    data: str  # 0x-prefixed selector + ABI-encoded arguments

    @property
    def selector(self) -> str:
        return self.data[:10]


def _root_bytes(merkle_root: str) -> bytes:
    try:
        raw = bytes.fromhex(merkle_root.removeprefix("0x"))
    except (AttributeError, ValueError) as exc:
        raise AllocationValueError(f"Merkle root is not hex: {merkle_root!r}") from exc
    if len(raw) != 32:
        raise AllocationValueError(f"Merkle root must be 32 bytes, got {len(raw)}")
    return raw


def encode_create_allowlist(
    account: str,
    total_units: int,
    merkle_root: str,
    metadata_uri: str,
    transfer_restrictions: TransferRestrictions = TransferRestrictions.ALLOW_ALL,
) -> MintCall:
    """Encode the allowlist registration call."""
    owner = normalize_address(account)
    root = _root_bytes(merkle_root)
    if isinstance(total_units, bool) or not isinstance(total_units, int) or total_units <= 0:
        raise AllocationValueError(f"Total units must be a positive integer: {total_units!r}")
    if not metadata_uri:
        raise AllocationValueError("Metadata URI is required")
    restriction = TransferRestrictions(transfer_restrictions)

    args = (owner, total_units, root, metadata_uri, int(restriction))
    selector = function_signature_to_4byte_selector(CREATE_ALLOWLIST_SIGNATURE)
    encoded = abi_encode(CREATE_ALLOWLIST_TYPES, list(args))
    return MintCall(
        function_name="createAllowlist",
        args=args,
        data="0x" + (selector + encoded).hex(),
    )
