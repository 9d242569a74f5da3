"""Metadata validation — schema checks on the published certificate document.

Runs over the plain ``dict`` form of a document, so it applies equally
to locally composed metadata and documents produced elsewhere. Errors
are collected rather than raised and keyed by dotted field path:

    {"hypercert.work_scope.value": "must contain at least one value", ...}

The ``hidden_properties`` extension block is optional; when present it
is checked too.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping

SCOPE_FIELDS = ("work_scope", "impact_scope", "contributors", "rights")
TIMEFRAME_FIELDS = ("work_timeframe", "impact_timeframe")
SDG_RANGE = range(1, 18)

_UID_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")
_AGGREGATIONS = frozenset({"sum", "count", "average", "max"})


@dataclass(frozen=True)
class MetadataValidation:
    valid: bool
    errors: dict[str, str] = field(default_factory=dict)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _check_scope(path: str, scope: Any, errors: dict[str, str]) -> None:
    if not isinstance(scope, Mapping):
        errors[path] = "is required"
        return
    if not _non_empty_str(scope.get("name")):
        errors[f"{path}.name"] = "must not be empty"
    values = scope.get("value")
    if not isinstance(values, (list, tuple)) or not values:
        errors[f"{path}.value"] = "must contain at least one value"
    elif not all(_non_empty_str(v) for v in values):
        errors[f"{path}.value"] = "must not contain empty values"
    excludes = scope.get("excludes")
    if excludes is not None and not isinstance(excludes, (list, tuple)):
        errors[f"{path}.excludes"] = "must be a list"


def _check_timeframe(path: str, timeframe: Any, errors: dict[str, str]) -> None:
    if not isinstance(timeframe, Mapping):
        errors[path] = "is required"
        return
    if not _non_empty_str(timeframe.get("name")):
        errors[f"{path}.name"] = "must not be empty"
    if not _non_empty_str(timeframe.get("display_value")):
        errors[f"{path}.display_value"] = "must not be empty"
    value = timeframe.get("value")
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 2
        or not all(isinstance(v, int) and not isinstance(v, bool) for v in value)
    ):
        errors[f"{path}.value"] = "must be a [start, end] pair of integers"
    elif any(v < 0 for v in value):
        errors[f"{path}.value"] = "timestamps must not be negative"


def _check_outcomes(path: str, outcomes: Any, errors: dict[str, str]) -> None:
    if not isinstance(outcomes, Mapping):
        errors[path] = "is required"
        return
    for key, metric in (outcomes.get("predefined") or {}).items():
        if not isinstance(metric, Mapping) or metric.get("aggregation") not in _AGGREGATIONS:
            errors[f"{path}.predefined.{key}.aggregation"] = "must be sum, count, average or max"


def _check_extension(ext: Any, errors: dict[str, str]) -> None:
    path = "hidden_properties"
    if not isinstance(ext, Mapping):
        errors[path] = "must be an object"
        return
    if not _non_empty_str(ext.get("gardenId")):
        errors[f"{path}.gardenId"] = "must not be empty"
    if not _non_empty_str(ext.get("protocolVersion")):
        errors[f"{path}.protocolVersion"] = "must not be empty"

    refs = ext.get("attestationRefs")
    if not isinstance(refs, (list, tuple)) or not refs:
        errors[f"{path}.attestationRefs"] = "must contain at least one reference"
    else:
        for i, ref in enumerate(refs):
            if not isinstance(ref, Mapping) or not _UID_RE.match(str(ref.get("uid", ""))):
                errors[f"{path}.attestationRefs.{i}.uid"] = "must be a 32-byte hex UID"
            elif not _non_empty_str(ref.get("title")):
                errors[f"{path}.attestationRefs.{i}.title"] = "must not be empty"

    for sdg in ext.get("sdgs") or ():
        if isinstance(sdg, bool) or not isinstance(sdg, int) or sdg not in SDG_RANGE:
            errors[f"{path}.sdgs"] = f"SDG codes must be between 1 and 17 (got {sdg!r})"
            break

    _check_outcomes(f"{path}.outcomes", ext.get("outcomes"), errors)


def validate_metadata(document: Mapping[str, Any]) -> MetadataValidation:
    """Validate a certificate document against the published schema."""
    errors: dict[str, str] = {}

    for key in ("name", "description", "image"):
        if not _non_empty_str(document.get(key)):
            errors[key] = "must not be empty"

    external_url = document.get("external_url")
    if external_url is not None and not _non_empty_str(external_url):
        errors["external_url"] = "must not be blank when present"

    block = document.get("hypercert")
    if not isinstance(block, Mapping):
        errors["hypercert"] = "is required"
    else:
        for name in SCOPE_FIELDS:
            _check_scope(f"hypercert.{name}", block.get(name), errors)
        for name in TIMEFRAME_FIELDS:
            _check_timeframe(f"hypercert.{name}", block.get(name), errors)

    for i, prop in enumerate(document.get("properties") or ()):
        if not isinstance(prop, Mapping) or not _non_empty_str(prop.get("trait_type")):
            errors[f"properties.{i}.trait_type"] = "must not be empty"
        elif isinstance(prop.get("value"), bool) or not isinstance(prop.get("value"), (str, int, float)):
            errors[f"properties.{i}.value"] = "must be a string or number"

    if "hidden_properties" in document:
        _check_extension(document["hidden_properties"], errors)

    return MetadataValidation(valid=not errors, errors=errors)
