"""Reference narrator set loading."""

from isnad.services.reference.loader import (
    ReferenceLoadError,
    load_reference_narrators,
    parse_reference_narrators,
)

__all__ = [
    "ReferenceLoadError",
    "load_reference_narrators",
    "parse_reference_narrators",
]
