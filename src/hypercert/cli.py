"""Hypercert CLI — prepare, verify and encode certificate mints.

Usage:
    hypercert prepare --records records.json --draft draft.json --mode count
    hypercert proof --tree tree.json --address 0xAbc... --units 50000000
    hypercert verify --root 0x... --address 0xAbc... --units 50000000 --proof 0x... 0x...
    hypercert encode --owner 0xAbc... --root 0x... --uri ipfs://... --chain-id 84532
    hypercert minter --chain-id 84532
    hypercert decode-revert "execution reverted: 0x..."

Settings are read from the environment (and a ``.env`` file at the
repository root when present):

    HYPERCERT_CONFIG_DIR   config directory (default: config/)
    HYPERCERT_CHAIN_ID     chain used by ``encode`` and ``minter``
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from hypercert.crypto.encoder import TransferRestrictions
from hypercert.crypto.merkle import AllowlistMerkleTree
from hypercert.crypto.revert import RevertDecoder
from hypercert.errors import HypercertError
from hypercert.models.allocation import AllocationEntry, DistributionMode
from hypercert.models.metadata import HypercertDraft
from hypercert.models.records import ContributionRecord
from hypercert.policy.resolver import ParamsResolver
from hypercert.service import HypercertService, ServiceResult


ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG = ROOT / "config"


def _make_service(config_dir: Path) -> HypercertService:
    return HypercertService(ParamsResolver.from_config_dir(config_dir))


def _read_json(path: Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def _report(result: ServiceResult) -> int:
    if result.success:
        _print_json(result.data)
        return 0
    print(f"Failed: {'; '.join(result.errors)}", file=sys.stderr)
    return 1


def _chain_id(args: argparse.Namespace) -> int | None:
    if args.chain_id is not None:
        return args.chain_id
    env_value = os.getenv("HYPERCERT_CHAIN_ID")
    return int(env_value) if env_value else None


def cmd_prepare(args: argparse.Namespace) -> int:
    service = _make_service(args.config)
    raw_records = _read_json(args.records)
    if isinstance(raw_records, dict):
        raw_records = raw_records.get("records", [])
    records = [ContributionRecord.from_dict(r) for r in raw_records]
    draft = HypercertDraft.from_dict(_read_json(args.draft))

    custom_entries = None
    if args.custom:
        custom_entries = [AllocationEntry.from_dict(e) for e in _read_json(args.custom)]

    result = service.prepare_mint(
        draft,
        records,
        mode=DistributionMode(args.mode),
        custom_entries=custom_entries,
        image_uri=args.image_uri,
        garden_name=args.garden_name,
    )
    if result.success and args.owner and args.metadata_uri:
        call = service.encode_mint(args.owner, result.data["merkle_root"], args.metadata_uri)
        if not call.success:
            return _report(call)
        result.data["call"] = call.data

    if result.success and args.output:
        args.output.write_text(json.dumps(result.data, indent=2), encoding="utf-8")
        print(f"Wrote mint bundle: {args.output} (root {result.data['merkle_root']})")
        return 0
    return _report(result)


def cmd_proof(args: argparse.Namespace) -> int:
    try:
        tree = AllowlistMerkleTree.load(_read_json(args.tree))
        proof = tree.proof_for(AllocationEntry(address=args.address, units=args.units))
    except HypercertError as exc:
        print(f"Failed: {exc}", file=sys.stderr)
        return 1
    except (KeyError, TypeError, ValueError) as exc:
        print(f"Failed: malformed tree file {args.tree}: {exc!r}", file=sys.stderr)
        return 1
    _print_json({"root": tree.root, "proof": proof})
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    valid = HypercertService.verify_claim(args.root, args.address, args.units, args.proof)
    _print_json({"valid": valid})
    return 0 if valid else 1


def cmd_encode(args: argparse.Namespace) -> int:
    service = _make_service(args.config)
    result = service.encode_mint(
        owner=args.owner,
        merkle_root=args.root,
        metadata_uri=args.uri,
        transfer_restrictions=TransferRestrictions[args.restriction.upper()],
        chain_id=_chain_id(args),
    )
    return _report(result)


def cmd_minter(args: argparse.Namespace) -> int:
    service = _make_service(args.config)
    chain_id = _chain_id(args)
    if chain_id is None:
        print("Failed: no chain id given (use --chain-id or HYPERCERT_CHAIN_ID)", file=sys.stderr)
        return 1
    try:
        address = service.resolver.minter_address(chain_id)
    except KeyError as exc:
        print(f"Failed: {exc.args[0]}", file=sys.stderr)
        return 1
    _print_json({"chain_id": chain_id, "minter": address})
    return 0


def cmd_decode_revert(args: argparse.Namespace) -> int:
    parsed = RevertDecoder().parse(args.error)
    _print_json({
        "name": parsed.name,
        "message": parsed.message,
        "action": parsed.action,
        "known": parsed.is_known,
        "raw": parsed.raw,
    })
    return 0 if parsed.is_known else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hypercert",
        description="Hypercert allowlist and mint preparation CLI",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(os.getenv("HYPERCERT_CONFIG_DIR") or DEFAULT_CONFIG),
        help="Path to config directory (default: config/)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline steps")
    sub = parser.add_subparsers(dest="command")

    # prepare
    p_prep = sub.add_parser("prepare", help="Build allowlist, Merkle root and metadata")
    p_prep.add_argument("--records", type=Path, required=True, help="Contribution records JSON")
    p_prep.add_argument("--draft", type=Path, required=True, help="Certificate draft JSON")
    p_prep.add_argument(
        "--mode", default=DistributionMode.EQUAL.value,
        choices=[m.value for m in DistributionMode],
        help="Distribution mode (default: equal)",
    )
    p_prep.add_argument("--custom", type=Path, help="Custom allowlist entries JSON (mode custom)")
    p_prep.add_argument("--image-uri", help="Certificate image URI (default: generated SVG)")
    p_prep.add_argument("--garden-name", help="Garden name shown on the generated image")
    p_prep.add_argument("--owner", help="Certificate owner; with --metadata-uri adds call data")
    p_prep.add_argument("--metadata-uri", help="Uploaded metadata URI for the call data")
    p_prep.add_argument("--output", type=Path, help="Write the bundle here instead of stdout")

    # proof
    p_proof = sub.add_parser("proof", help="Look up the claim proof for an allowlist entry")
    p_proof.add_argument("--tree", type=Path, required=True, help="Dumped Merkle tree JSON")
    p_proof.add_argument("--address", required=True, help="Claimant address")
    p_proof.add_argument("--units", type=int, required=True, help="Claimed units")

    # verify
    p_verify = sub.add_parser("verify", help="Verify a claim proof against a root")
    p_verify.add_argument("--root", required=True, help="Merkle root (0x hex)")
    p_verify.add_argument("--address", required=True, help="Claimant address")
    p_verify.add_argument("--units", type=int, required=True, help="Claimed units")
    p_verify.add_argument("--proof", nargs="*", default=[], help="Sibling hashes, leaf to root")

    # encode
    p_enc = sub.add_parser("encode", help="Encode the createAllowlist call")
    p_enc.add_argument("--owner", required=True, help="Certificate owner address")
    p_enc.add_argument("--root", required=True, help="Merkle root (0x hex)")
    p_enc.add_argument("--uri", required=True, help="Metadata URI")
    p_enc.add_argument(
        "--restriction", default="allow_all",
        choices=[r.name.lower() for r in TransferRestrictions],
        help="Transfer restriction (default: allow_all)",
    )
    p_enc.add_argument("--chain-id", type=int, help="Chain id for the minter address")

    # minter
    p_min = sub.add_parser("minter", help="Show the configured minter for a chain")
    p_min.add_argument("--chain-id", type=int, help="Chain id")

    # decode-revert
    p_rev = sub.add_parser("decode-revert", help="Explain a minter revert")
    p_rev.add_argument("error", help="Revert selector or error message")

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv(ROOT / ".env")
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "prepare": cmd_prepare,
        "proof": cmd_proof,
        "verify": cmd_verify,
        "encode": cmd_encode,
        "minter": cmd_minter,
        "decode-revert": cmd_decode_revert,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
