"""Cryptographic commitment — allowlist Merkle tree, mint call encoding, revert decoding."""

from hypercert.crypto.merkle import (
    AllowlistMerkleTree,
    generate_merkle_tree,
    generate_proof,
    normalize_address,
    verify_proof,
)
from hypercert.crypto.encoder import MintCall, TransferRestrictions, encode_create_allowlist
from hypercert.crypto.revert import RevertDecoder

__all__ = [
    "AllowlistMerkleTree",
    "generate_merkle_tree",
    "generate_proof",
    "normalize_address",
    "verify_proof",
    "MintCall",
    "TransferRestrictions",
    "encode_create_allowlist",
    "RevertDecoder",
]
