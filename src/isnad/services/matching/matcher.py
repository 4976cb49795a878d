"""Name Matcher — ranks reference narrators against an extracted name pair.

For each reference narrator:
1. Best Arabic similarity over its Arabic variants (primary, full, alternates, kunya)
2. Best English similarity over its English variants
3. Confidence = ARABIC_WEIGHT * arabic + (1 - ARABIC_WEIGHT) * english when both
   query names are present, otherwise the supplied side alone

Ranking is descending confidence, then more scholarly opinions (better
documented narrator), then reference order. The matcher is a pure ranking
primitive: confidence floors and top-N truncation belong to the caller.

Never raises on odd input: blank names, markers, or an empty reference set
all yield an empty list.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from isnad.models.match import MatchCandidate
from isnad.models.narrator import ReferenceNarrator
from isnad.services.matching.index import IndexedNarrator, ReferenceIndex
from isnad.services.matching.markers import is_non_narrator_marker
from isnad.services.matching.normalizer import normalize_english
from isnad.services.matching.similarity import (
    ParsedArabicName,
    arabic_similarity,
    english_similarity,
)

logger = logging.getLogger(__name__)

DEFAULT_ARABIC_WEIGHT = 0.7
CONFIDENCE_PRECISION = 4


class NameMatcher:
    """Matches extracted narrator names against a fixed reference set.

    The reference set is indexed once at construction; the same matcher can
    serve any number of match calls.
    """

    def __init__(
        self,
        reference: ReferenceIndex | Iterable[ReferenceNarrator] | None,
        *,
        arabic_weight: float = DEFAULT_ARABIC_WEIGHT,
    ) -> None:
        if not 0.0 < arabic_weight < 1.0:
            raise ValueError(f"arabic_weight must be in (0, 1), got {arabic_weight}")
        if reference is None:
            reference = ()
        self._index = reference if isinstance(reference, ReferenceIndex) else ReferenceIndex(reference)
        self._arabic_weight = arabic_weight

    @property
    def index(self) -> ReferenceIndex:
        return self._index

    def _score_entry(
        self,
        entry: IndexedNarrator,
        arabic_query: ParsedArabicName | None,
        english_query: str,
    ) -> tuple[float, str]:
        """Confidence and the variant that produced it for one reference record."""
        arabic_score, arabic_variant = 0.0, ""
        if arabic_query is not None:
            for variant in entry.arabic_variants:
                score = arabic_similarity(arabic_query, variant)
                if score > arabic_score:
                    arabic_score, arabic_variant = score, variant.raw
                    if score == 1.0:
                        break

        english_score, english_variant = 0.0, ""
        if english_query:
            for variant in entry.english_variants:
                score = english_similarity(english_query, variant.normalized)
                if score > english_score:
                    english_score, english_variant = score, variant.raw
                    if score == 1.0:
                        break

        if arabic_query is not None and english_query:
            weighted_arabic = self._arabic_weight * arabic_score
            weighted_english = (1.0 - self._arabic_weight) * english_score
            confidence = weighted_arabic + weighted_english
            matched = arabic_variant if weighted_arabic >= weighted_english else english_variant
        elif arabic_query is not None:
            confidence, matched = arabic_score, arabic_variant
        else:
            confidence, matched = english_score, english_variant

        return round(min(1.0, confidence), CONFIDENCE_PRECISION), matched

    def match(self, arabic_name: str | None, english_name: str | None) -> list[MatchCandidate]:
        """Rank every reference narrator with a non-zero confidence.

        Args:
            arabic_name: Extracted Arabic name (may be empty)
            english_name: Extracted English name (may be empty)

        Returns:
            MatchCandidates sorted by descending confidence; empty when
            nothing scores, the names are blank, or the name is a marker
        """
        if is_non_narrator_marker(arabic_name, english_name):
            logger.debug("Refusing to match non-narrator marker %r / %r", arabic_name, english_name)
            return []

        parsed_arabic = ParsedArabicName.parse(arabic_name or "")
        arabic_query = parsed_arabic if parsed_arabic.normalized else None
        english_query = normalize_english(english_name)

        if arabic_query is None and not english_query:
            return []
        if not self._index:
            logger.debug("Empty reference set; no candidates")
            return []

        scored: list[tuple[float, int, int, MatchCandidate]] = []
        for entry in self._index:
            confidence, matched_name = self._score_entry(entry, arabic_query, english_query)
            if confidence <= 0.0:
                continue
            candidate = MatchCandidate(
                narrator_id=entry.narrator_id,
                confidence=confidence,
                matched_name=matched_name,
                narrator=entry.narrator,
            )
            scored.append((-confidence, -entry.narrator.opinion_count, entry.order, candidate))

        scored.sort(key=lambda item: item[:3])
        candidates = [item[3] for item in scored]

        logger.debug(
            "Matched %r / %r: %d candidate(s), best=%s",
            arabic_name,
            english_name,
            len(candidates),
            candidates[0].confidence if candidates else None,
        )
        return candidates


def match_narrator_by_name(
    arabic_name: str | None,
    english_name: str | None,
    reference_narrators: ReferenceIndex | Iterable[ReferenceNarrator] | None,
    *,
    arabic_weight: float = DEFAULT_ARABIC_WEIGHT,
) -> list[MatchCandidate]:
    """Rank reference narrators for one extracted name pair.

    Convenience wrapper that indexes the reference set for a single call.
    Reuse a NameMatcher when matching a whole chain.
    """
    matcher = NameMatcher(reference_narrators, arabic_weight=arabic_weight)
    return matcher.match(arabic_name, english_name)
