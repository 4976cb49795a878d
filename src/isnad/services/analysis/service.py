"""Chain Analysis — resolves and grades every link of an extracted chain.

Pipeline per link:
1. Source marker (the Prophet ﷺ): left unmatched, no tags, no grade
2. Compiler marker: pre-graded from the compiler table, never matched
3. Narrator: ranked by the NameMatcher, filtered to the suggestion floor and
   truncated to top-N; the best candidate is accepted at or above the
   auto-accept confidence, its reputation tags extracted and graded

The chain grade is then rolled up from the per-link grades. Links that stay
unmatched carry no grade, which can leave the chain ungraded.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field

from isnad.config import MatchingConfig
from isnad.models.chain import Chain, ChainNarrator
from isnad.models.extracted_narrator import ExtractedNarrator
from isnad.models.match import MatchCandidate, NarratorMatchResult
from isnad.models.narrator import ReferenceNarrator
from isnad.services.grading.calculator import calculate_narrator_grade
from isnad.services.grading.extractor import extract_reputation_tags
from isnad.services.matching.index import ReferenceIndex
from isnad.services.matching.markers import (
    COMPILERS,
    MarkerKind,
    classify_marker,
    compiler_key,
)
from isnad.services.matching.matcher import NameMatcher

logger = logging.getLogger(__name__)


class ChainAnalysisError(Exception):
    """Raised when an extracted chain is structurally invalid."""

    pass


class ChainAnalysis(BaseModel):
    """Outcome of analysing one extracted chain."""

    results: list[NarratorMatchResult] = Field(default_factory=list)
    chain: Chain
    chain_grade: float | None = None
    total: int = 0
    matched: int = 0
    unmatched: int = 0

    model_config = {"frozen": False, "extra": "forbid"}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "matches": [r.to_dict() for r in self.results],
            "chain": self.chain.model_dump(mode="json"),
            "chain_grade": self.chain_grade,
            "summary": {
                "total": self.total,
                "matched": self.matched,
                "unmatched": self.unmatched,
            },
        }


def compiler_narrator(key: str, position: int) -> ChainNarrator:
    """Build a pre-graded chain link for a collection compiler.

    Raises:
        KeyError: If the key is not in the compiler table
    """
    info = COMPILERS[key]
    tags = list(info.reputation)
    return ChainNarrator(
        position=position,
        arabic_name=info.arabic_name,
        english_name=info.english_name,
        reputation=tags,
        calculated_grade=calculate_narrator_grade(tags),
    )


def _coerce_extracted(
    links: Iterable[ExtractedNarrator | Mapping[str, Any]],
) -> list[ExtractedNarrator]:
    """Validate upstream links; duplicate positions fail the whole chain."""
    extracted = [
        link if isinstance(link, ExtractedNarrator) else ExtractedNarrator.model_validate(link)
        for link in links
    ]
    counts = Counter(n.position for n in extracted)
    duplicates = sorted(position for position, count in counts.items() if count > 1)
    if duplicates:
        raise ChainAnalysisError(f"Duplicate narrator positions in extracted chain: {duplicates}")
    return extracted


class ChainAnalysisService:
    """Matches and grades extracted chains against a reference set."""

    def __init__(
        self,
        config: MatchingConfig | None = None,
        matcher_factory: Callable[[ReferenceIndex, float], NameMatcher] | None = None,
    ) -> None:
        self._config = config or MatchingConfig()
        self._matcher_factory = matcher_factory or (
            lambda index, weight: NameMatcher(index, arabic_weight=weight)
        )

    @property
    def config(self) -> MatchingConfig:
        return self._config

    def suggest(self, matcher: NameMatcher, link: ExtractedNarrator) -> list[MatchCandidate]:
        """Candidates above the suggestion floor, truncated to top-N."""
        candidates = matcher.match(link.arabic_name, link.english_name)
        floor = self._config.suggestion_floor
        return [c for c in candidates if c.confidence >= floor][: self._config.top_n]

    def _resolve_marker(
        self, link: ExtractedNarrator, kind: MarkerKind
    ) -> tuple[NarratorMatchResult, ChainNarrator]:
        if kind == MarkerKind.COMPILER:
            key = compiler_key(link.arabic_name, link.english_name)
            if key is None:
                raise ChainAnalysisError(f"Position {link.position} is not a known compiler")
            chain_link = compiler_narrator(key, link.position).model_copy(
                update={"arabic_name": link.arabic_name, "english_name": link.english_name}
            )
        else:
            chain_link = ChainNarrator(
                position=link.position,
                arabic_name=link.arabic_name,
                english_name=link.english_name,
            )
        result = NarratorMatchResult(
            position=link.position,
            arabic_name=link.arabic_name,
            english_name=link.english_name,
            matched=False,
            marker=kind.value,
            suggested_tags=list(chain_link.reputation),
            calculated_grade=chain_link.calculated_grade,
        )
        logger.debug("Position %d is a %s marker; not matched", link.position, kind.value)
        return result, chain_link

    def _resolve_narrator(
        self, matcher: NameMatcher, link: ExtractedNarrator
    ) -> tuple[NarratorMatchResult, ChainNarrator]:
        candidates = self.suggest(matcher, link)
        best = candidates[0] if candidates else None

        if best is None or best.confidence < self._config.auto_accept_confidence:
            logger.debug(
                "Position %d unmatched (best=%s)",
                link.position,
                best.confidence if best else None,
            )
            result = NarratorMatchResult(
                position=link.position,
                arabic_name=link.arabic_name,
                english_name=link.english_name,
                candidates=candidates,
            )
            chain_link = ChainNarrator(
                position=link.position,
                arabic_name=link.arabic_name,
                english_name=link.english_name,
            )
            return result, chain_link

        tags = extract_reputation_tags(best.narrator)
        grade = calculate_narrator_grade(tags) if tags else None
        logger.debug(
            "Position %d accepted %s (confidence=%s, %d tag(s), grade=%s)",
            link.position,
            best.narrator_id,
            best.confidence,
            len(tags),
            grade,
        )
        result = NarratorMatchResult(
            position=link.position,
            arabic_name=link.arabic_name,
            english_name=link.english_name,
            matched=True,
            accepted=best,
            candidates=candidates,
            suggested_tags=tags,
            calculated_grade=grade,
        )
        chain_link = ChainNarrator(
            position=link.position,
            arabic_name=link.arabic_name,
            english_name=link.english_name,
            reputation=tags,
            calculated_grade=grade,
            matched=True,
            narrator_id=best.narrator_id,
            confidence=best.confidence,
            matched_name=best.matched_name,
        )
        return result, chain_link

    def analyze(
        self,
        extracted: Iterable[ExtractedNarrator | Mapping[str, Any]],
        reference: ReferenceIndex | Iterable[ReferenceNarrator],
        *,
        chain_text: str = "",
        title: str | None = None,
    ) -> ChainAnalysis:
        """Resolve and grade every link of an extracted chain.

        Args:
            extracted: Upstream links ({position|number, arabicName, englishName})
            reference: Reference narrators, or a prebuilt ReferenceIndex
            chain_text: Original chain text, carried onto the Chain
            title: Optional chain title

        Returns:
            ChainAnalysis with per-link results, the graded Chain and summary

        Raises:
            ChainAnalysisError: If positions repeat
            pydantic.ValidationError: If a link is malformed (e.g. position < 1)
        """
        links = _coerce_extracted(extracted)
        index = reference if isinstance(reference, ReferenceIndex) else ReferenceIndex(reference)
        matcher = self._matcher_factory(index, self._config.arabic_weight)

        results: list[NarratorMatchResult] = []
        chain_links: list[ChainNarrator] = []
        for link in links:
            kind = classify_marker(link.arabic_name, link.english_name)
            if kind is not None:
                result, chain_link = self._resolve_marker(link, kind)
            else:
                result, chain_link = self._resolve_narrator(matcher, link)
            results.append(result)
            chain_links.append(chain_link)

        chain = Chain(chain_text=chain_text, title=title, narrators=chain_links)
        chain_grade = chain.grade()
        matched = sum(1 for r in results if r.matched)

        analysis = ChainAnalysis(
            results=results,
            chain=chain,
            chain_grade=chain_grade,
            total=len(results),
            matched=matched,
            unmatched=len(results) - matched,
        )
        logger.info(
            "Analysed chain %s: %d link(s), %d matched, grade=%s",
            chain.chain_id,
            analysis.total,
            analysis.matched,
            chain_grade,
        )
        return analysis
