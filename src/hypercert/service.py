"""Hypercert service — unified facade for the mint preparation pipeline.

Orchestrates the pure stages in order:

    records -> contributor weights -> allocation -> validated allowlist
            -> Merkle root + proofs
            -> metadata document
    root + metadata URI -> encoded mint call

Stages raise typed errors from ``hypercert.errors``; the facade turns
them into a ServiceResult so callers (CLI, workflows) branch on
``success`` instead of catching. Uploading the metadata and allowlist,
signing and broadcasting all happen outside this package.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from hypercert.aggregation.engine import build_contributor_weights
from hypercert.crypto.encoder import TransferRestrictions, encode_create_allowlist
from hypercert.crypto.merkle import generate_merkle_tree, verify_proof
from hypercert.distribution.engine import DistributionEngine
from hypercert.distribution.validator import require_valid_allowlist
from hypercert.errors import HypercertError
from hypercert.metadata.composer import MetadataComposer
from hypercert.metadata.formatter import MetadataFormatter, format_hypercert_data
from hypercert.metadata.validation import validate_metadata
from hypercert.models.allocation import (
    AllocationEntry,
    DistributionMode,
    request_from_mode,
)
from hypercert.models.metadata import HypercertDraft
from hypercert.models.records import ContributionRecord
from hypercert.policy.resolver import ParamsResolver

logger = logging.getLogger(__name__)


@dataclass
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


def _failure(exc: HypercertError) -> ServiceResult:
    return ServiceResult(
        success=False,
        errors=[str(exc)],
        data={"code": type(exc).__name__},
    )


class HypercertService:
    """Prepares everything a certificate mint needs.

    Usage:
        service = HypercertService(ParamsResolver.from_config_dir(config_dir))
        result = service.prepare_mint(draft, records, mode="count")
        if result.success:
            root = result.data["merkle_root"]
            document = result.data["metadata"]
    """

    def __init__(
        self,
        resolver: Optional[ParamsResolver] = None,
        formatter: Optional[MetadataFormatter] = format_hypercert_data,
    ) -> None:
        self._resolver = resolver or ParamsResolver.defaults()
        self._engine = DistributionEngine()
        self._composer = MetadataComposer(
            protocol_version=self._resolver.protocol_version,
            default_domain=self._resolver.default_domain,
            rights=self._resolver.default_rights,
            default_impact_scope=self._resolver.default_impact_scope,
            formatter=formatter,
        )

    @property
    def resolver(self) -> ParamsResolver:
        return self._resolver

    def allocate(
        self,
        records: Sequence[ContributionRecord],
        mode: DistributionMode | str = DistributionMode.EQUAL,
        custom_entries: Optional[Sequence[AllocationEntry]] = None,
    ) -> list[AllocationEntry]:
        """Distribute and validate. Raises on any violation."""
        weights = build_contributor_weights(records)
        request = request_from_mode(mode, weights, custom_entries)
        entries = self._engine.distribute(request)
        require_valid_allowlist(entries, self._engine.total_units)
        logger.debug(
            "Allocated %d units across %d entries (mode=%s)",
            self._engine.total_units, len(entries), DistributionMode(mode).value,
        )
        return entries

    def prepare_mint(
        self,
        draft: HypercertDraft,
        records: Sequence[ContributionRecord],
        mode: DistributionMode | str = DistributionMode.EQUAL,
        custom_entries: Optional[Sequence[AllocationEntry]] = None,
        image_uri: Optional[str] = None,
        garden_name: Optional[str] = None,
    ) -> ServiceResult:
        """Build the allowlist, its commitment and the metadata document.

        A non-empty ``draft.allowlist`` overrides the mode and is used as
        a custom distribution.
        """
        if draft.allowlist and custom_entries is None:
            mode, custom_entries = DistributionMode.CUSTOM, draft.allowlist

        try:
            entries = self.allocate(records, mode, custom_entries)
            tree = generate_merkle_tree(entries)
        except HypercertError as exc:
            logger.debug("Mint preparation rejected: %s", exc)
            return _failure(exc)

        logger.debug("Built allowlist tree with root %s", tree.root)

        composition = self._composer.compose(
            draft, records, allowlist=tree.leaves, image_uri=image_uri, garden_name=garden_name,
        )
        if composition.used_fallback:
            logger.warning(
                "Metadata formatter unavailable, using local document: %s",
                composition.base.reason,
            )

        document = composition.metadata.to_dict()
        validation = validate_metadata(document)
        if not validation.valid:
            return ServiceResult(
                success=False,
                errors=[f"{path}: {message}" for path, message in validation.errors.items()],
                data={"code": "InvalidMetadata", "metadata": document},
            )

        return ServiceResult(
            success=True,
            data={
                "total_units": self._engine.total_units,
                "allowlist": [leaf.to_dict() for leaf in tree.leaves],
                "merkle_root": tree.root,
                "tree": tree.dump(),
                "proofs": {
                    leaf.address: tree.proof_at(i) for i, leaf in enumerate(tree.leaves)
                },
                "metadata": document,
                "metadata_source": "local" if composition.used_fallback else "formatter",
            },
        )

    def encode_mint(
        self,
        owner: str,
        merkle_root: str,
        metadata_uri: str,
        transfer_restrictions: TransferRestrictions = TransferRestrictions.ALLOW_ALL,
        chain_id: Optional[int] = None,
    ) -> ServiceResult:
        """Encode the allowlist registration call, with its target if known."""
        try:
            call = encode_create_allowlist(
                owner,
                self._engine.total_units,
                merkle_root,
                metadata_uri,
                transfer_restrictions,
            )
        except HypercertError as exc:
            return _failure(exc)

        data: dict[str, Any] = {"function": call.function_name, "data": call.data}
        if chain_id is not None:
            try:
                data["to"] = self._resolver.minter_address(chain_id)
            except KeyError as exc:
                return ServiceResult(success=False, errors=[str(exc)], data={"code": "UnknownChain"})
        return ServiceResult(success=True, data=data)

    @staticmethod
    def verify_claim(root: str, address: str, units: int, proof: Sequence[str]) -> bool:
        """Check a claim proof. Never raises."""
        return verify_proof(root, AllocationEntry(address=address, units=units), proof)
