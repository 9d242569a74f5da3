"""Base document formatting — the standard part of the certificate metadata.

The base document can come from two places:

1. A formatter (by default ``format_hypercert_data``, or any callable
   with the same shape) that builds and validates the standard document.
2. The local builder, used when the formatter raises or returns nothing.

``build_base_document`` returns which path produced the document as an
explicit variant, never a bare ``None``:

    FormattedBase(document) | LocalBase(document, reason)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Union

from hypercert.metadata.validation import validate_metadata


@dataclass(frozen=True)
class FormatterInput:
    """Everything needed to build the standard document."""
    name: str
    description: str
    image: str
    version: str
    work_scope: tuple[str, ...]
    impact_scope: tuple[str, ...]
    work_timeframe_start: int
    work_timeframe_end: int
    impact_timeframe_start: int
    impact_timeframe_end: int
    contributors: tuple[str, ...]
    rights: tuple[str, ...]
    external_url: Optional[str] = None
    excluded_work_scope: tuple[str, ...] = ()
    excluded_impact_scope: tuple[str, ...] = ()
    excluded_rights: tuple[str, ...] = ()
    properties: tuple[Mapping[str, Any], ...] = field(default_factory=tuple)


MetadataFormatter = Callable[[FormatterInput], Optional[Mapping[str, Any]]]


@dataclass(frozen=True)
class FormattedBase:
    document: Mapping[str, Any]


@dataclass(frozen=True)
class LocalBase:
    document: Mapping[str, Any]
    reason: str


BaseDocument = Union[FormattedBase, LocalBase]


def format_date(timestamp: int) -> str:
    """Medium-style UTC date, e.g. ``Jan 1, 2024``.

    Returns an empty string for timestamps outside the representable
    range (for example milliseconds passed as seconds).
    """
    try:
        dt = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return ""
    return f"{dt:%b} {dt.day}, {dt.year}"


def format_hypercert_data(data: FormatterInput) -> Optional[dict[str, Any]]:
    """Build the standard document; None if it does not validate."""
    def scope(name: str, values: tuple[str, ...], excludes: tuple[str, ...]) -> dict[str, Any]:
        return {
            "name": name,
            "value": list(values),
            "excludes": list(excludes),
            "display_value": ", ".join(values),
        }

    def timeframe(name: str, start: int, end: int) -> dict[str, Any]:
        start_display = format_date(start)
        end_display = format_date(end) if end else "Indefinite"
        display = f"{start_display} → {end_display}" if start_display and end_display else name
        return {
            "name": name,
            "value": [start, end],
            "display_value": display,
        }

    document: dict[str, Any] = {
        "name": data.name,
        "description": data.description,
        "image": data.image,
        "version": data.version,
        "properties": [dict(p) for p in data.properties],
        "hypercert": {
            "impact_scope": scope("Impact Scope", data.impact_scope, data.excluded_impact_scope),
            "work_scope": scope("Work Scope", data.work_scope, data.excluded_work_scope),
            "work_timeframe": timeframe(
                "Work Timeframe", data.work_timeframe_start, data.work_timeframe_end,
            ),
            "impact_timeframe": timeframe(
                "Impact Timeframe", data.impact_timeframe_start, data.impact_timeframe_end,
            ),
            "contributors": {
                "name": "Contributors",
                "value": list(data.contributors),
                "display_value": ", ".join(data.contributors),
            },
            "rights": scope("Rights", data.rights, data.excluded_rights),
        },
    }
    if data.external_url:
        document["external_url"] = data.external_url

    if not validate_metadata(document).valid:
        return None
    return document


def build_base_document(
    data: FormatterInput,
    formatter: Optional[MetadataFormatter],
    local_builder: Callable[[FormatterInput], Mapping[str, Any]],
) -> BaseDocument:
    """Run the formatter, falling back to the local builder."""
    if formatter is None:
        return LocalBase(document=local_builder(data), reason="no formatter configured")
    try:
        document = formatter(data)
    except Exception as exc:  # third-party formatter; failure selects the local path
        return LocalBase(
            document=local_builder(data),
            reason=f"formatter failed: {type(exc).__name__}: {exc}",
        )
    if not document:
        return LocalBase(document=local_builder(data), reason="formatter returned no document")
    return FormattedBase(document=document)
