"""Tests for the createAllowlist call encoder."""

import pytest
from eth_abi import decode
from eth_utils import function_signature_to_4byte_selector

from hypercert.constants import TOTAL_UNITS
from hypercert.crypto.encoder import (
    CREATE_ALLOWLIST_SIGNATURE,
    CREATE_ALLOWLIST_TYPES,
    TransferRestrictions,
    encode_create_allowlist,
)
from hypercert.errors import AllocationValueError, InvalidAddress

OWNER = "0x1111111111111111111111111111111111111111"
ROOT = "0x" + "ab" * 32
URI = "ipfs://bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi"


def _decode_args(data: str) -> tuple:
    return decode(CREATE_ALLOWLIST_TYPES, bytes.fromhex(data[10:]))


class TestEncodeCreateAllowlist:
    def test_selector(self) -> None:
        call = encode_create_allowlist(OWNER, TOTAL_UNITS, ROOT, URI)
        expected = "0x" + function_signature_to_4byte_selector(CREATE_ALLOWLIST_SIGNATURE).hex()
        assert call.selector == expected
        assert call.function_name == "createAllowlist"

    def test_arguments_round_trip(self) -> None:
        call = encode_create_allowlist(
            OWNER, TOTAL_UNITS, ROOT, URI, TransferRestrictions.FROM_CREATOR_ONLY,
        )
        account, units, root, uri, restriction = _decode_args(call.data)
        assert account.lower() == OWNER
        assert units == TOTAL_UNITS
        assert root == bytes.fromhex(ROOT[2:])
        assert uri == URI
        assert restriction == 2

    def test_default_restriction_allows_all(self) -> None:
        call = encode_create_allowlist(OWNER, TOTAL_UNITS, ROOT, URI)
        assert call.args[-1] == 0

    def test_root_without_prefix(self) -> None:
        call = encode_create_allowlist(OWNER, TOTAL_UNITS, ROOT[2:], URI)
        assert call.args[2] == bytes.fromhex(ROOT[2:])

    def test_owner_is_checksummed(self) -> None:
        owner = "0x52908400098527886e0f7030069857d2e4169ee7"
        call = encode_create_allowlist(owner, TOTAL_UNITS, ROOT, URI)
        assert call.args[0] == "0x52908400098527886E0F7030069857D2E4169EE7"

    def test_invalid_owner(self) -> None:
        with pytest.raises(InvalidAddress):
            encode_create_allowlist("0xnope", TOTAL_UNITS, ROOT, URI)

    @pytest.mark.parametrize("root", ["0x1234", "0x" + "zz" * 32, None])
    def test_invalid_root(self, root) -> None:
        with pytest.raises(AllocationValueError):
            encode_create_allowlist(OWNER, TOTAL_UNITS, root, URI)

    @pytest.mark.parametrize("units", [0, -1, 1.0, True])
    def test_invalid_units(self, units) -> None:
        with pytest.raises(AllocationValueError):
            encode_create_allowlist(OWNER, units, ROOT, URI)

    def test_missing_uri(self) -> None:
        with pytest.raises(AllocationValueError):
            encode_create_allowlist(OWNER, TOTAL_UNITS, ROOT, "")

    def test_unknown_restriction(self) -> None:
        with pytest.raises(ValueError):
            encode_create_allowlist(OWNER, TOTAL_UNITS, ROOT, URI, 7)
