"""Certificate metadata composition and validation."""

from hypercert.metadata.composer import (
    MetadataComposer,
    MetadataComposition,
    build_fallback_image,
    format_hypercert_metadata,
)
from hypercert.metadata.formatter import FormattedBase, LocalBase, format_hypercert_data
from hypercert.metadata.validation import MetadataValidation, validate_metadata

__all__ = [
    "MetadataComposer",
    "MetadataComposition",
    "build_fallback_image",
    "format_hypercert_metadata",
    "FormattedBase",
    "LocalBase",
    "format_hypercert_data",
    "MetadataValidation",
    "validate_metadata",
]
