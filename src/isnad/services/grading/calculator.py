"""Grade Calculator — numeric reliability for narrators and whole chains.

Narrator grade:
1. Count occurrences per distinct tag (agreement between critics)
2. Frequency-weighted average of tag weights
3. Category flags over the DISTINCT tags present
4. Conflict penalty: high+low → 2, else (high|low)+intermediate → 1
5. Theological flag stacks an independent +3
6. max(0, round_half_up((average - penalty) * 10) / 10)

Theological tags are orthogonal to reliability. When any reliability tag is
present they are left out of the average and only add their penalty; an
input made of theological tags alone is averaged over their own weights.

Chain grade: mean of the available narrator grades, only when strictly more
than half of the links are graded.

Both functions are pure. Empty input is data sparsity, never an error.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from isnad.services.grading.reputation import (
    RELIABILITY_CATEGORIES,
    REPUTATION_TABLE,
    ReputationTag,
    TagCategory,
    parse_reputation_tag,
)

CONTRADICTION_PENALTY = 2
MIXED_CATEGORY_PENALTY = 1
THEOLOGICAL_PENALTY = 3

EMPTY_GRADE = 0.0


@dataclass
class NarratorGradeExplanation:
    """Breakdown of a narrator grade calculation."""

    score: float
    tag_counts: dict[str, int] = field(default_factory=dict)
    total_count: int = 0
    weighted_average: float = 0.0
    has_high: bool = False
    has_intermediate: bool = False
    has_low: bool = False
    has_theological: bool = False
    contradiction_penalty: int = 0
    theological_penalty: int = 0

    @property
    def total_penalty(self) -> int:
        return self.contradiction_penalty + self.theological_penalty

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "score": self.score,
            "tag_counts": dict(sorted(self.tag_counts.items())),
            "total_count": self.total_count,
            "weighted_average": round(self.weighted_average, 4),
            "has_high": self.has_high,
            "has_intermediate": self.has_intermediate,
            "has_low": self.has_low,
            "has_theological": self.has_theological,
            "contradiction_penalty": self.contradiction_penalty,
            "theological_penalty": self.theological_penalty,
            "total_penalty": self.total_penalty,
        }


def round_grade(value: float) -> float:
    """Round to one decimal place, halves away from zero for positive values."""
    return math.floor(value * 10 + 0.5) / 10


def _weighted_average(counts: Counter[ReputationTag]) -> float:
    """Frequency-weighted mean of tag weights."""
    total_weighted = 0
    total_count = 0
    for tag, count in counts.items():
        total_weighted += REPUTATION_TABLE[tag].weight * count
        total_count += count
    return total_weighted / total_count


def explain_narrator_grade(tags: Iterable[ReputationTag | str]) -> NarratorGradeExplanation:
    """Calculate a narrator grade and return the full breakdown.

    Args:
        tags: Multiset of reputation tags; repeats are meaningful

    Returns:
        NarratorGradeExplanation with the score and every intermediate value

    Raises:
        UnknownReputationTagError: If any value is not a reputation tag
    """
    counts: Counter[ReputationTag] = Counter(parse_reputation_tag(t) for t in tags)
    if not counts:
        return NarratorGradeExplanation(score=EMPTY_GRADE)

    categories = {REPUTATION_TABLE[tag].category for tag in counts}
    has_high = TagCategory.HIGH in categories
    has_intermediate = TagCategory.INTERMEDIATE in categories
    has_low = TagCategory.LOW in categories
    has_theological = TagCategory.THEOLOGICAL in categories

    reliability_counts = Counter(
        {
            tag: count
            for tag, count in counts.items()
            if REPUTATION_TABLE[tag].category in RELIABILITY_CATEGORIES
        }
    )
    average = _weighted_average(reliability_counts or counts)

    contradiction = 0
    if has_high and has_low:
        contradiction = CONTRADICTION_PENALTY
    elif (has_high or has_low) and has_intermediate:
        contradiction = MIXED_CATEGORY_PENALTY

    theological = THEOLOGICAL_PENALTY if has_theological else 0

    score = max(0.0, round_grade(average - contradiction - theological))

    return NarratorGradeExplanation(
        score=score,
        tag_counts={tag.value: count for tag, count in counts.items()},
        total_count=sum(counts.values()),
        weighted_average=average,
        has_high=has_high,
        has_intermediate=has_intermediate,
        has_low=has_low,
        has_theological=has_theological,
        contradiction_penalty=contradiction,
        theological_penalty=theological,
    )


def calculate_narrator_grade(tags: Iterable[ReputationTag | str]) -> float:
    """Calculate a single narrator grade from reputation tags.

    Returns 0.0 for an empty multiset. Callers that must tell "no data"
    apart from "graded 0" check the input for emptiness.

    Raises:
        UnknownReputationTagError: If any value is not a reputation tag
    """
    return explain_narrator_grade(tags).score


def _grade_of(narrator: Any) -> float | None:
    """Read a precomputed grade from a chain link (model, mapping, or bare number)."""
    if narrator is None:
        return None
    if isinstance(narrator, bool):
        return None
    if isinstance(narrator, (int, float)):
        value = narrator
    elif isinstance(narrator, Mapping):
        value = narrator.get("calculated_grade", narrator.get("calculatedGrade"))
    else:
        value = getattr(narrator, "calculated_grade", None)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    # NaN and infinity count as ungraded
    if not math.isfinite(value):
        return None
    return float(value)


def calculate_chain_grade(narrators: Sequence[Any]) -> float | None:
    """Calculate the aggregate grade of a chain.

    Args:
        narrators: Ordered chain links, each carrying an optional
            calculated_grade (attribute or mapping key)

    Returns:
        Mean of the available grades rounded to one decimal, or None when
        the chain is empty or no more than half of its links are graded
    """
    if not narrators:
        return None

    grades = [g for g in (_grade_of(n) for n in narrators) if g is not None]

    if len(grades) * 2 <= len(narrators):
        return None

    return round_grade(sum(grades) / len(grades))
