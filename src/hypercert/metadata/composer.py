"""Metadata composer — assembles the published certificate document.

Values are resolved with a fixed precedence:

    explicit draft value  >  value derived from records  >  default

Work scope falls back to the union of record scopes; timeframes fall
back to ``derive_work_timeframe``; impact scope defaults to "all"; an
unset impact end is open-ended and encoded as 0.

The fallback image is an inline SVG data URI. Title and garden name are
XML-escaped before templating because viewers may render the document
as markup.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence
from urllib.parse import quote
from xml.sax.saxutils import escape

from hypercert.aggregation.engine import (
    aggregate_outcome_metrics,
    collect_work_scopes,
    derive_work_timeframe,
    first_domain,
)
from hypercert.constants import (
    DEFAULT_DOMAIN,
    DEFAULT_IMPACT_SCOPE,
    DEFAULT_PROTOCOL_VERSION,
    DEFAULT_RIGHTS,
    INDEFINITE_TIMEFRAME_END,
)
from hypercert.metadata.formatter import (
    BaseDocument,
    FormatterInput,
    LocalBase,
    MetadataFormatter,
    build_base_document,
    format_date,
    format_hypercert_data,
)
from hypercert.models.allocation import AllocationEntry
from hypercert.models.metadata import (
    AttestationRef,
    CertificateMetadata,
    GreenGoodsExtension,
    HypercertBlock,
    HypercertDraft,
    ScopeDefinition,
    TimeframeDefinition,
)
from hypercert.models.records import ContributionRecord

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}

_SVG_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<svg width="1200" height="1200" viewBox="0 0 1200 1200" fill="none" xmlns="http://www.w3.org/2000/svg">
  <defs>
    <linearGradient id="bg" x1="0" y1="0" x2="1" y2="1">
      <stop offset="0%" stop-color="#e5f8e5" />
      <stop offset="100%" stop-color="#cde6ff" />
    </linearGradient>
  </defs>
  <rect width="1200" height="1200" fill="url(#bg)" />
  <rect x="120" y="120" width="960" height="960" rx="48" fill="#ffffff" fill-opacity="0.92" />
  <text x="600" y="520" text-anchor="middle" font-family="'Inter', sans-serif" font-size="56" fill="#1f2937">
    {title}
  </text>
  {garden}
  <text x="600" y="760" text-anchor="middle" font-family="'Inter', sans-serif" font-size="24" fill="#9ca3af">Green Goods Hypercert</text>
</svg>"""

_SVG_GARDEN = (
    '<text x="600" y="600" text-anchor="middle" font-family="\'Inter\', sans-serif" '
    'font-size="32" fill="#4b5563">{garden}</text>'
)


def escape_xml(text: str) -> str:
    return escape(text, _XML_ENTITIES)


def build_fallback_image(title: str, garden_name: Optional[str] = None) -> str:
    """Deterministic SVG data URI for certificates without an image."""
    safe_title = escape_xml(title.strip() or "Hypercert")
    garden = ""
    if garden_name and garden_name.strip():
        garden = _SVG_GARDEN.format(garden=escape_xml(garden_name.strip()))
    svg = _SVG_TEMPLATE.format(title=safe_title, garden=garden)
    return "data:image/svg+xml;charset=utf-8," + quote(svg, safe="")


def _unique(values: Sequence[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def _scope(name: str, values: Sequence[str], fallback: Sequence[str]) -> ScopeDefinition:
    return ScopeDefinition(name=name, value=tuple(values) if values else tuple(fallback))


def _timeframe(
    name: str, start: Optional[int], end: Optional[int], allow_indefinite: bool = False,
) -> TimeframeDefinition:
    safe_start = start or 0
    if end is not None:
        safe_end = end
    else:
        safe_end = INDEFINITE_TIMEFRAME_END if allow_indefinite else safe_start

    display_start = format_date(safe_start) if safe_start else ""
    if safe_end == INDEFINITE_TIMEFRAME_END and allow_indefinite:
        display_end = "Indefinite"
    else:
        display_end = format_date(safe_end) if safe_end else ""

    if display_start and display_end:
        display = f"{display_start} – {display_end}"
    else:
        display = display_start or display_end
    return TimeframeDefinition(name=name, value=(safe_start, safe_end), display_value=display or name)


def build_local_document(data: FormatterInput) -> dict[str, Any]:
    """The locally built standard document."""
    document: dict[str, Any] = {
        "name": data.name,
        "description": data.description,
        "image": data.image,
    }
    if data.external_url:
        document["external_url"] = data.external_url
    block = HypercertBlock(
        work_scope=_scope("Work scope", data.work_scope, ()),
        impact_scope=_scope("Impact scope", data.impact_scope, DEFAULT_IMPACT_SCOPE),
        work_timeframe=_timeframe(
            "Work timeframe", data.work_timeframe_start, data.work_timeframe_end,
        ),
        impact_timeframe=_timeframe(
            "Impact timeframe",
            data.impact_timeframe_start,
            data.impact_timeframe_end or None,
            allow_indefinite=True,
        ),
        contributors=_scope("Contributors", data.contributors, data.contributors),
        rights=_scope("Rights", data.rights, DEFAULT_RIGHTS),
    )
    document["hypercert"] = block.to_dict()
    return document


@dataclass(frozen=True)
class MetadataComposition:
    """A composed document plus which path built its base."""
    metadata: CertificateMetadata
    base: BaseDocument

    @property
    def used_fallback(self) -> bool:
        return isinstance(self.base, LocalBase)


class MetadataComposer:
    """Composes certificate metadata from a draft and its records.

    Usage:
        composer = MetadataComposer()
        result = composer.compose(draft, records, allowlist=entries)
        document = result.metadata.to_dict()
    """

    def __init__(
        self,
        protocol_version: str = DEFAULT_PROTOCOL_VERSION,
        default_domain: str = DEFAULT_DOMAIN,
        rights: Sequence[str] = DEFAULT_RIGHTS,
        default_impact_scope: Sequence[str] = DEFAULT_IMPACT_SCOPE,
        formatter: Optional[MetadataFormatter] = format_hypercert_data,
    ) -> None:
        self._protocol_version = protocol_version
        self._default_domain = default_domain
        self._rights = tuple(rights)
        self._default_impact_scope = tuple(default_impact_scope)
        self._formatter = formatter

    def compose(
        self,
        draft: HypercertDraft,
        records: Sequence[ContributionRecord],
        allowlist: Optional[Sequence[AllocationEntry]] = None,
        image_uri: Optional[str] = None,
        garden_name: Optional[str] = None,
    ) -> MetadataComposition:
        data = self.formatter_input(draft, records, allowlist, image_uri, garden_name)
        base = build_base_document(data, self._formatter, build_local_document)
        extension = self._extension(draft, records)
        return MetadataComposition(
            metadata=CertificateMetadata(base=base.document, extension=extension),
            base=base,
        )

    def formatter_input(
        self,
        draft: HypercertDraft,
        records: Sequence[ContributionRecord],
        allowlist: Optional[Sequence[AllocationEntry]] = None,
        image_uri: Optional[str] = None,
        garden_name: Optional[str] = None,
    ) -> FormatterInput:
        """Resolve every standard field from draft, records and defaults."""
        if allowlist:
            contributors = _unique([entry.address for entry in allowlist])
        else:
            contributors = _unique([r.contributor_address for r in records])

        derived_start, derived_end = derive_work_timeframe(records)
        derived_start = int(derived_start) if derived_start is not None else None
        derived_end = int(derived_end) if derived_end is not None else None

        work_start = draft.work_timeframe_start or derived_start or 0
        work_end = (
            draft.work_timeframe_end
            or derived_end
            or draft.work_timeframe_start
            or work_start
        )
        impact_start = (
            draft.impact_timeframe_start
            or draft.work_timeframe_start
            or derived_start
            or 0
        )
        impact_end = (
            draft.impact_timeframe_end
            if draft.impact_timeframe_end is not None
            else INDEFINITE_TIMEFRAME_END
        )

        external_url = draft.external_url.strip() or None
        return FormatterInput(
            name=draft.title,
            description=draft.description,
            image=image_uri or build_fallback_image(draft.title, garden_name),
            version=self._protocol_version,
            work_scope=tuple(draft.work_scopes) or tuple(collect_work_scopes(records)),
            impact_scope=tuple(draft.impact_scopes) or self._default_impact_scope,
            work_timeframe_start=work_start,
            work_timeframe_end=work_end,
            impact_timeframe_start=impact_start,
            impact_timeframe_end=impact_end,
            contributors=contributors,
            rights=self._rights,
            external_url=external_url,
        )

    def _extension(
        self, draft: HypercertDraft, records: Sequence[ContributionRecord],
    ) -> GreenGoodsExtension:
        outcomes = (
            draft.outcomes
            if draft.outcomes.predefined
            else aggregate_outcome_metrics(records)
        )
        return GreenGoodsExtension(
            garden_id=draft.garden_id,
            attestation_refs=tuple(
                AttestationRef(uid=r.id, title=r.title, domain=r.domain) for r in records
            ),
            sdgs=tuple(draft.sdgs),
            capitals=tuple(draft.capitals),
            outcomes=outcomes,
            domain=first_domain(records) or self._default_domain,
            protocol_version=self._protocol_version,
        )


def format_hypercert_metadata(
    draft: HypercertDraft,
    records: Sequence[ContributionRecord],
    allowlist: Optional[Sequence[AllocationEntry]] = None,
    image_uri: Optional[str] = None,
    garden_name: Optional[str] = None,
) -> CertificateMetadata:
    """Compose metadata with default settings."""
    return MetadataComposer().compose(
        draft, records, allowlist=allowlist, image_uri=image_uri, garden_name=garden_name,
    ).metadata
