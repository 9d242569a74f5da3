"""Certificate metadata models — the externally published document.

Field names in ``to_dict`` output follow the fixed hypercert metadata
schema (scope, timeframe, contributor and rights definitions) plus the
vendor extension block under ``hidden_properties``. Explorers and
marketplaces parse these names, so they must not drift.

A document is created once per mint attempt and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from hypercert.models.allocation import AllocationEntry


@dataclass(frozen=True)
class PredefinedMetric:
    value: float
    unit: str
    aggregation: str  # "sum" | "count" | "average" | "max"
    label: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "unit": self.unit,
            "aggregation": self.aggregation,
            "label": self.label,
        }


@dataclass(frozen=True)
class CustomMetric:
    value: float
    unit: str
    label: str

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "unit": self.unit, "label": self.label}


@dataclass(frozen=True)
class OutcomeMetrics:
    """Aggregated or hand-entered outcome figures."""
    predefined: Mapping[str, PredefinedMetric] = field(default_factory=dict)
    custom: Mapping[str, CustomMetric] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "predefined": {k: m.to_dict() for k, m in self.predefined.items()},
            "custom": {k: m.to_dict() for k, m in self.custom.items()},
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> OutcomeMetrics:
        if not data:
            return cls()
        predefined = {
            key: PredefinedMetric(
                value=item["value"],
                unit=item.get("unit", ""),
                aggregation=item.get("aggregation", "sum"),
                label=item.get("label", key),
            )
            for key, item in (data.get("predefined") or {}).items()
        }
        custom = {
            key: CustomMetric(
                value=item["value"],
                unit=item.get("unit", ""),
                label=item.get("label", key),
            )
            for key, item in (data.get("custom") or {}).items()
        }
        return cls(predefined=predefined, custom=custom)


@dataclass(frozen=True)
class AttestationRef:
    """Reference from the certificate back to one contribution record."""
    uid: str
    title: str
    domain: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"uid": self.uid, "title": self.title}
        if self.domain is not None:
            data["domain"] = self.domain
        return data


@dataclass(frozen=True)
class ScopeDefinition:
    name: str
    value: tuple[str, ...]
    excludes: Optional[tuple[str, ...]] = None
    display_value: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "value": list(self.value)}
        if self.excludes is not None:
            data["excludes"] = list(self.excludes)
        if self.display_value is not None:
            data["display_value"] = self.display_value
        return data


@dataclass(frozen=True)
class TimeframeDefinition:
    """A [start, end] pair of Unix seconds. End 0 means indefinite."""
    name: str
    value: tuple[int, int]
    display_value: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": list(self.value),
            "display_value": self.display_value,
        }


@dataclass(frozen=True)
class HypercertBlock:
    work_scope: ScopeDefinition
    impact_scope: ScopeDefinition
    work_timeframe: TimeframeDefinition
    impact_timeframe: TimeframeDefinition
    contributors: ScopeDefinition
    rights: ScopeDefinition

    def to_dict(self) -> dict[str, Any]:
        return {
            "work_scope": self.work_scope.to_dict(),
            "impact_scope": self.impact_scope.to_dict(),
            "work_timeframe": self.work_timeframe.to_dict(),
            "impact_timeframe": self.impact_timeframe.to_dict(),
            "contributors": self.contributors.to_dict(),
            "rights": self.rights.to_dict(),
        }


@dataclass(frozen=True)
class GreenGoodsExtension:
    """Vendor extension block linking the certificate to its garden."""
    garden_id: str
    attestation_refs: tuple[AttestationRef, ...]
    sdgs: tuple[int, ...]
    capitals: tuple[str, ...]
    outcomes: OutcomeMetrics
    domain: str
    protocol_version: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "gardenId": self.garden_id,
            "attestationRefs": [ref.to_dict() for ref in self.attestation_refs],
            "sdgs": list(self.sdgs),
            "capitals": list(self.capitals),
            "outcomes": self.outcomes.to_dict(),
            "domain": self.domain,
            "protocolVersion": self.protocol_version,
        }


@dataclass(frozen=True)
class CertificateMetadata:
    """The published certificate document.

    ``base`` is the standard part of the document as a plain mapping,
    either produced by an external formatter or built locally. The
    extension block is layered on top in ``to_dict``.
    """
    base: Mapping[str, Any]
    extension: GreenGoodsExtension

    @property
    def name(self) -> str:
        return self.base["name"]

    @property
    def description(self) -> str:
        return self.base["description"]

    @property
    def image(self) -> str:
        return self.base["image"]

    @property
    def external_url(self) -> Optional[str]:
        return self.base.get("external_url")

    @property
    def hypercert(self) -> Mapping[str, Any]:
        return self.base["hypercert"]

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.base)
        data["hidden_properties"] = self.extension.to_dict()
        return data


@dataclass(frozen=True)
class HypercertDraft:
    """Editor input for one certificate.

    Timeframe fields use 0 for "not set"; ``impact_timeframe_end`` of
    None means the impact is open-ended.
    """
    garden_id: str
    title: str
    description: str
    work_scopes: tuple[str, ...] = ()
    impact_scopes: tuple[str, ...] = ()
    work_timeframe_start: int = 0
    work_timeframe_end: int = 0
    impact_timeframe_start: int = 0
    impact_timeframe_end: Optional[int] = None
    sdgs: tuple[int, ...] = ()
    capitals: tuple[str, ...] = ()
    outcomes: OutcomeMetrics = field(default_factory=OutcomeMetrics)
    allowlist: tuple[AllocationEntry, ...] = ()
    external_url: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> HypercertDraft:
        """Build a draft from the editor's JSON (camelCase keys)."""
        return cls(
            garden_id=str(data.get("gardenId") or ""),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            work_scopes=tuple(data.get("workScopes") or ()),
            impact_scopes=tuple(data.get("impactScopes") or ()),
            work_timeframe_start=int(data.get("workTimeframeStart") or 0),
            work_timeframe_end=int(data.get("workTimeframeEnd") or 0),
            impact_timeframe_start=int(data.get("impactTimeframeStart") or 0),
            impact_timeframe_end=(
                int(data["impactTimeframeEnd"])
                if data.get("impactTimeframeEnd") is not None
                else None
            ),
            sdgs=tuple(int(s) for s in data.get("sdgs") or ()),
            capitals=tuple(data.get("capitals") or ()),
            outcomes=OutcomeMetrics.from_dict(data.get("outcomes")),
            allowlist=tuple(
                AllocationEntry.from_dict(e) for e in data.get("allowlist") or ()
            ),
            external_url=str(data.get("externalUrl") or ""),
        )
