"""Allowlist Merkle tree — the commitment an on-chain minter verifies claims against.

The byte-level convention is the "standard" Merkle tree used by the
on-chain allowlist verifier, and must match it exactly:

- Leaf: keccak256(keccak256(abi.encode(address, uint256))), i.e. the
  ABI-encoded (checksummed address, units) pair hashed twice.
- Node: keccak256 of the two children concatenated in ascending byte
  order (sorted-pair hashing), so proofs carry no left/right flags.
- Leaves are sorted ascending by hash and laid out in a flat array of
  length 2n - 1, leaves filling the tail in reverse order; node i has
  children 2i + 1 and 2i + 2 and the root sits at index 0.
- A proof is the list of sibling hashes walking from the leaf to the root.

Addresses are normalised to their checksummed form before hashing. Two
entries that normalise to the same address are rejected rather than
silently producing two leaves for one account.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from eth_abi import encode as abi_encode
from eth_utils import keccak
from web3 import Web3

from hypercert.constants import LEAF_ENCODING
from hypercert.errors import (
    AllocationValueError,
    DuplicateAddress,
    EmptyAllowlist,
    EntryNotFound,
    HypercertError,
    InvalidAddress,
)
from hypercert.models.allocation import AllocationEntry

TREE_FORMAT = "standard-v1"
_UINT256_LIMIT = 2 ** 256


def normalize_address(address: Any) -> str:
    """Return the checksummed form of an account address.

    Raises InvalidAddress for anything that is not a 20-byte hex address,
    including mixed-case input with a wrong checksum.
    """
    if not isinstance(address, str) or not Web3.is_address(address):
        raise InvalidAddress(address)
    return Web3.to_checksum_address(address)


def _check_units(units: Any) -> int:
    if isinstance(units, bool) or not isinstance(units, int):
        raise AllocationValueError(f"Units must be an integer: {units!r}")
    if units < 0 or units >= _UINT256_LIMIT:
        raise AllocationValueError(f"Units out of uint256 range: {units}")
    return units


def leaf_hash(address: str, units: int) -> bytes:
    """Double-hashed leaf for a normalised (address, units) pair."""
    encoded = abi_encode(list(LEAF_ENCODING), [address, units])
    return keccak(keccak(encoded))


def node_hash(a: bytes, b: bytes) -> bytes:
    """Sorted-pair parent hash."""
    left, right = (a, b) if a <= b else (b, a)
    return keccak(left + right)


def _to_hex(value: bytes) -> str:
    return "0x" + value.hex()


def _from_hex32(value: Any) -> bytes:
    if not isinstance(value, str):
        raise TypeError(f"Expected hex string, got {type(value).__name__}")
    raw = bytes.fromhex(value.removeprefix("0x"))
    if len(raw) != 32:
        raise ValueError(f"Expected 32-byte hash, got {len(raw)} bytes")
    return raw


def _build_layout(hashes: Sequence[bytes]) -> list[bytes]:
    """Flat tree array for leaf hashes already in sorted order."""
    size = 2 * len(hashes) - 1
    tree: list[bytes] = [b""] * size
    for i, leaf in enumerate(hashes):
        tree[size - 1 - i] = leaf
    for i in range(size - 1 - len(hashes), -1, -1):
        tree[i] = node_hash(tree[2 * i + 1], tree[2 * i + 2])
    return tree


@dataclass(frozen=True)
class AllowlistMerkleTree:
    """A built commitment over an allowlist.

    ``leaves`` mirrors the input allowlist order with normalised
    addresses. ``tree_indices[i]`` is the position of leaf i in the flat
    ``layout`` array.

    Usage:
        tree = AllowlistMerkleTree.build(entries)
        proof = tree.proof_for(entries[0])
        assert verify_proof(tree.root, entries[0], proof)
    """
    leaves: tuple[AllocationEntry, ...]
    layout: tuple[bytes, ...]
    tree_indices: tuple[int, ...]

    @classmethod
    def build(cls, entries: Sequence[AllocationEntry]) -> AllowlistMerkleTree:
        if not entries:
            raise EmptyAllowlist()

        leaves: list[AllocationEntry] = []
        seen: set[str] = set()
        for entry in entries:
            address = normalize_address(entry.address)
            if address in seen:
                raise DuplicateAddress(address)
            seen.add(address)
            leaves.append(
                AllocationEntry(address=address, units=_check_units(entry.units), label=entry.label)
            )

        hashed = sorted(
            ((leaf_hash(leaf.address, leaf.units), i) for i, leaf in enumerate(leaves)),
            key=lambda item: item[0],
        )
        layout = _build_layout([h for h, _ in hashed])

        tree_indices = [0] * len(leaves)
        for leaf_index, (_, value_index) in enumerate(hashed):
            tree_indices[value_index] = len(layout) - 1 - leaf_index

        return cls(
            leaves=tuple(leaves),
            layout=tuple(layout),
            tree_indices=tuple(tree_indices),
        )

    @property
    def root(self) -> str:
        return _to_hex(self.layout[0])

    def proof_at(self, leaf_position: int) -> list[str]:
        """Sibling path for the leaf at ``leaf_position`` in input order."""
        index = self.tree_indices[leaf_position]
        proof: list[str] = []
        while index > 0:
            sibling = index + 1 if index % 2 == 1 else index - 1
            proof.append(_to_hex(self.layout[sibling]))
            index = (index - 1) // 2
        return proof

    def proof_for(self, entry: AllocationEntry) -> list[str]:
        """Proof for an entry; raises EntryNotFound if the pair is not a leaf."""
        address = normalize_address(entry.address)
        for position, leaf in enumerate(self.leaves):
            if leaf.address == address and leaf.units == entry.units:
                return self.proof_at(position)
        raise EntryNotFound(address, entry.units)

    def dump(self) -> dict[str, Any]:
        """Serialise in the standard-v1 shape used for allowlist upload."""
        return {
            "format": TREE_FORMAT,
            "leafEncoding": list(LEAF_ENCODING),
            "tree": [_to_hex(node) for node in self.layout],
            "values": [
                {"value": [leaf.address, str(leaf.units)], "treeIndex": index}
                for leaf, index in zip(self.leaves, self.tree_indices)
            ],
        }

    @classmethod
    def load(cls, data: Mapping[str, Any]) -> AllowlistMerkleTree:
        """Rebuild from ``dump`` output, checking it is internally consistent."""
        if data.get("format") != TREE_FORMAT:
            raise AllocationValueError(f"Unsupported tree format: {data.get('format')!r}")
        if list(data.get("leafEncoding", [])) != list(LEAF_ENCODING):
            raise AllocationValueError(f"Unsupported leaf encoding: {data.get('leafEncoding')!r}")

        entries = [
            AllocationEntry(address=item["value"][0], units=int(item["value"][1]))
            for item in data.get("values", [])
        ]
        tree = cls.build(entries)
        dumped = tree.dump()
        if dumped["tree"] != [str(node).lower() for node in data.get("tree", [])]:
            raise AllocationValueError("Merkle tree does not match its values")
        if [v["treeIndex"] for v in dumped["values"]] != [
            v.get("treeIndex") for v in data.get("values", [])
        ]:
            raise AllocationValueError("Merkle tree indices do not match its values")
        return tree


def generate_merkle_tree(entries: Sequence[AllocationEntry]) -> AllowlistMerkleTree:
    """Build the commitment tree for a validated allowlist."""
    return AllowlistMerkleTree.build(entries)


def generate_proof(tree: AllowlistMerkleTree, entry: AllocationEntry) -> list[str]:
    """Ordered sibling hashes proving ``entry`` is in ``tree``."""
    return tree.proof_for(entry)


def verify_proof(root: str, entry: AllocationEntry, proof: Sequence[str]) -> bool:
    """Check an (address, units) claim against a root.

    Proofs arrive from untrusted third parties, so any malformed input
    (bad address, out-of-range units, non-hex or wrong-length hashes)
    yields False instead of an exception.
    """
    try:
        expected = _from_hex32(root)
        address = normalize_address(entry.address)
        units = _check_units(entry.units)
        computed = leaf_hash(address, units)
        for sibling in proof:
            computed = node_hash(computed, _from_hex32(sibling))
    except (HypercertError, ValueError, TypeError, AttributeError):
        return False
    return computed == expected
