"""Name similarity — structured Arabic comparison and token-based English comparison.

Arabic names are compared component by component (ism, father, grandfather,
nisba/family, rest) because a shared nasab word means far more than a shared
ism. A first-name gate rejects pairs whose ism differs, so that
"إسحاق بن إبراهيم" never resolves to "إبراهيم بن أبي العباس".

All scores are in [0, 1]. Exact match after normalisation is 1.0; a query
contained in a longer variant (whole words, or a truncated last word of at
least PARTIAL_WORD_MIN_LENGTH characters) scores at least CONTAINMENT_FLOOR
and stays below 1.0.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rapidfuzz import fuzz

from isnad.services.matching.normalizer import (
    contains_phrase,
    normalize_arabic,
    normalize_english,
)

CONTAINMENT_FLOOR = 0.85
CONTAINMENT_SPAN = 0.10

FIRST_NAME_GATE = 0.8
FATHER_MISMATCH_THRESHOLD = 0.7
FATHER_MISMATCH_FACTOR = 0.4
ENGLISH_FUZZY_SCALE = 0.9

COMPONENT_WEIGHTS: dict[str, float] = {
    "first": 0.20,
    "father": 0.35,
    "grandfather": 0.25,
    "family": 0.15,
    "other": 0.05,
}

# Credit given when only one side carries the component.
ONE_SIDED_CREDIT: dict[str, float] = {
    "father": 0.0,
    "grandfather": 0.05,
    "family": 0.03,
}

RELATIONSHIP_WORDS = frozenset({"ابن", "بن", "بنت", "اب"})
KUNYA_PREFIXES = frozenset({"ابو", "ام"})


@dataclass(frozen=True)
class ArabicNameComponents:
    """Parsed parts of an Arabic name (normalised)."""

    first: str = ""
    father: str | None = None
    grandfather: str | None = None
    family: str | None = None
    other: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParsedArabicName:
    """A normalised Arabic name with its words and components."""

    raw: str
    normalized: str
    words: tuple[str, ...] = field(default_factory=tuple)
    components: ArabicNameComponents = field(default_factory=ArabicNameComponents)

    @classmethod
    def parse(cls, raw: str) -> ParsedArabicName:
        normalized = normalize_arabic(raw)
        words = tuple(w for w in normalized.split(" ") if len(w) > 1)
        return cls(
            raw=raw,
            normalized=normalized,
            words=words,
            components=parse_name_components(words),
        )


def parse_name_components(words: tuple[str, ...]) -> ArabicNameComponents:
    """Split normalised name words into ism / nasab / nisba parts.

    A leading kunya prefix (ابو, ام) makes the following word the first name.
    Otherwise the first name runs up to the first relationship word.
    """
    if not words:
        return ArabicNameComponents()

    if len(words) > 1 and words[0] in KUNYA_PREFIXES:
        first = words[1]
        i = 2
    else:
        end = len(words)
        for idx, word in enumerate(words):
            if word in RELATIONSHIP_WORDS:
                end = idx
                break
        first = " ".join(words[:end])
        i = end

    father: str | None = None
    grandfather: str | None = None
    family: str | None = None
    other: list[str] = []

    while i < len(words):
        word = words[i]
        if word in RELATIONSHIP_WORDS:
            i += 1
            if i >= len(words):
                break
            if i + 1 < len(words) and words[i + 1] in RELATIONSHIP_WORDS:
                father = words[i]
                i += 2
                if i < len(words):
                    grandfather = words[i]
                    i += 1
            else:
                if father is None:
                    father = words[i]
                elif grandfather is None:
                    grandfather = words[i]
                else:
                    other.append(words[i])
                i += 1
        else:
            is_last = i == len(words) - 1
            if word.startswith("ال") or (is_last and grandfather is None):
                if family is None:
                    family = word
                else:
                    other.append(word)
            else:
                other.append(word)
            i += 1

    return ArabicNameComponents(
        first=first,
        father=father,
        grandfather=grandfather,
        family=family,
        other=tuple(other),
    )


def containment_score(shorter: str, longer: str) -> float:
    """Score for a contained name: near-maximal, never 1.0."""
    ratio = min(len(shorter), len(longer)) / max(len(shorter), len(longer))
    return min(0.99, CONTAINMENT_FLOOR + CONTAINMENT_SPAN * ratio)


def word_similarity(word1: str, word2: str) -> float:
    """Typo-tolerant similarity between two single name parts."""
    if word1 == word2:
        return 1.0
    if not word1 or not word2:
        return 0.0
    if word1 in word2 or word2 in word1:
        return min(len(word1), len(word2)) / max(len(word1), len(word2))
    return fuzz.ratio(word1, word2) / 100.0


def _jaccard(words1: tuple[str, ...], words2: tuple[str, ...]) -> float:
    if not words1 or not words2:
        return 0.0
    set1, set2 = set(words1), set(words2)
    return len(set1 & set2) / len(set1 | set2)


def _component_similarity(a: ArabicNameComponents, b: ArabicNameComponents) -> float | None:
    """Weighted component agreement; None when no component is comparable."""
    total_weight = 0.0
    matched_weight = 0.0

    if a.first and b.first:
        total_weight += COMPONENT_WEIGHTS["first"]
        matched_weight += COMPONENT_WEIGHTS["first"] * word_similarity(a.first, b.first)

    for name in ("father", "grandfather", "family"):
        part_a = getattr(a, name)
        part_b = getattr(b, name)
        if part_a is None and part_b is None:
            continue
        total_weight += COMPONENT_WEIGHTS[name]
        if part_a is not None and part_b is not None:
            matched_weight += COMPONENT_WEIGHTS[name] * word_similarity(part_a, part_b)
        else:
            matched_weight += ONE_SIDED_CREDIT[name]

    if a.other or b.other:
        total_weight += COMPONENT_WEIGHTS["other"]
        best = 0.0
        for part_a in a.other:
            for part_b in b.other:
                best = max(best, word_similarity(part_a, part_b))
        matched_weight += COMPONENT_WEIGHTS["other"] * best

    if total_weight == 0:
        return None
    return matched_weight / total_weight


def arabic_similarity(query: ParsedArabicName, candidate: ParsedArabicName) -> float:
    """Similarity between two parsed Arabic names in [0, 1]."""
    if not query.normalized or not candidate.normalized:
        return 0.0
    if query.normalized == candidate.normalized:
        return 1.0

    if contains_phrase(candidate.normalized, query.normalized) or contains_phrase(
        query.normalized, candidate.normalized
    ):
        return containment_score(query.normalized, candidate.normalized)

    comp_q = query.components
    comp_c = candidate.components

    if comp_q.first and comp_c.first:
        if word_similarity(comp_q.first, comp_c.first) < FIRST_NAME_GATE:
            return 0.0

    similarity = _component_similarity(comp_q, comp_c)
    if similarity is None:
        return _jaccard(query.words, candidate.words)

    if comp_q.father is not None and comp_c.father is not None:
        if word_similarity(comp_q.father, comp_c.father) < FATHER_MISMATCH_THRESHOLD:
            return similarity * FATHER_MISMATCH_FACTOR

    return min(1.0, similarity)


def english_similarity(query: str, candidate: str) -> float:
    """Similarity between two normalised English transliterations in [0, 1]."""
    if not query or not candidate:
        return 0.0
    if query == candidate:
        return 1.0
    if contains_phrase(candidate, query) or contains_phrase(query, candidate):
        return containment_score(query, candidate)
    return fuzz.token_set_ratio(query, candidate) / 100.0 * ENGLISH_FUZZY_SCALE


def calculate_similarity(name1: str, name2: str) -> float:
    """Convenience: Arabic similarity between two raw strings."""
    return arabic_similarity(ParsedArabicName.parse(name1), ParsedArabicName.parse(name2))


def calculate_english_similarity(name1: str, name2: str) -> float:
    """Convenience: English similarity between two raw strings."""
    return english_similarity(normalize_english(name1), normalize_english(name2))
