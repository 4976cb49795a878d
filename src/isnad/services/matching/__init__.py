"""Narrator name matching — resolves extracted names against rijāl references.

Components:
- normalizer: Arabic/English name normalisation
- similarity: Component-aware Arabic similarity and fuzzy English similarity
- markers: Non-narrator links (the Prophet ﷺ, collection compilers)
- index: Pre-normalised reference set
- matcher: Ranked candidate generation
"""

from isnad.services.matching.normalizer import (
    contains_phrase,
    normalize_arabic,
    normalize_english,
)
from isnad.services.matching.similarity import (
    ArabicNameComponents,
    ParsedArabicName,
    arabic_similarity,
    calculate_english_similarity,
    calculate_similarity,
    english_similarity,
    parse_name_components,
)
from isnad.services.matching.markers import (
    COMPILERS,
    CompilerInfo,
    MarkerKind,
    classify_marker,
    compiler_key,
    is_non_narrator_marker,
)
from isnad.services.matching.index import IndexedNarrator, ReferenceIndex
from isnad.services.matching.matcher import (
    DEFAULT_ARABIC_WEIGHT,
    NameMatcher,
    match_narrator_by_name,
)

__all__ = [
    "ArabicNameComponents",
    "COMPILERS",
    "CompilerInfo",
    "DEFAULT_ARABIC_WEIGHT",
    "IndexedNarrator",
    "MarkerKind",
    "NameMatcher",
    "ParsedArabicName",
    "ReferenceIndex",
    "arabic_similarity",
    "calculate_english_similarity",
    "calculate_similarity",
    "classify_marker",
    "compiler_key",
    "contains_phrase",
    "english_similarity",
    "is_non_narrator_marker",
    "match_narrator_by_name",
    "normalize_arabic",
    "normalize_english",
    "parse_name_components",
]
