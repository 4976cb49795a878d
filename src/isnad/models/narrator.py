"""ReferenceNarrator model — rijāl reference records used for name resolution.

Reference records are supplied by the storage layer and treated as read-only
for the duration of a matching call. Keys are accepted in snake_case or in
the camelCase used by the storage export (``primaryArabicName`` ...).
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

_REFERENCE_CONFIG: dict[str, Any] = {
    "frozen": True,
    "extra": "ignore",
    "alias_generator": to_camel,
    "populate_by_name": True,
}


class OpinionType(StrEnum):
    """Direction of a critic's verdict."""

    JARH = "jarh"
    TADIL = "ta'dil"
    NEUTRAL = "neutral"


class NameType(StrEnum):
    """Kind of alternate name."""

    ALTERNATE = "alternate"
    NICKNAME = "nickname"
    KUNYA = "kunya"
    TITLE = "title"


class NarratorName(BaseModel):
    """An alternate name recorded for a narrator."""

    arabic_name: str = Field(..., description="Alternate Arabic name")
    english_name: str | None = Field(default=None, description="Alternate English name")
    name_type: NameType = Field(default=NameType.ALTERNATE, description="Kind of name")
    is_primary: bool = Field(default=False)

    model_config = _REFERENCE_CONFIG


class ScholarlyOpinion(BaseModel):
    """A single critic's statement about a narrator."""

    scholar_name: str = Field(..., description="Critic who issued the opinion")
    opinion_text: str = Field(default="", description="Verdict text, usually Arabic")
    opinion_type: OpinionType = Field(default=OpinionType.NEUTRAL)
    source_reference: str | None = None
    source_book: str | None = None
    source_volume: str | None = None
    is_primary: bool = False

    model_config = _REFERENCE_CONFIG

    @field_validator("opinion_type", mode="before")
    @classmethod
    def normalize_opinion_type(cls, v: Any) -> Any:
        """Accept tadil/ta'dil/TA'DIL spellings."""
        if isinstance(v, str):
            folded = v.strip().lower().replace("’", "'")
            if folded in {"tadil", "ta'dil", "taadil"}:
                return OpinionType.TADIL
            return folded
        return v


class NarratorReputation(BaseModel):
    """An explicit reputation grade stored against a narrator."""

    grade: str = Field(..., description="Reputation tag spelling as stored")
    grade_source: str | None = None

    model_config = _REFERENCE_CONFIG


class ReferenceNarrator(BaseModel):
    """A narrator record from the rijāl reference database."""

    narrator_id: str = Field(..., alias="id", description="Stable narrator identifier")
    primary_arabic_name: str = Field(..., description="Primary Arabic name")
    primary_english_name: str = Field(default="", description="Primary English name")
    full_name_arabic: str | None = None
    full_name_english: str | None = None
    title: str | None = None
    kunya: str | None = None
    lineage: str | None = None
    alternate_names: list[NarratorName] = Field(default_factory=list)
    birth_year_ah: int | None = None
    death_year_ah: int | None = None
    death_year_ah_alternative: int | None = None
    death_year_ce: int | None = None
    place_of_residence: str | None = None
    place_of_death: str | None = None
    taqrib_category: str | None = None
    ibn_hajar_rank: str | None = None
    dhahabi_rank: str | None = None
    notes: str | None = None
    scholarly_opinions: list[ScholarlyOpinion] = Field(default_factory=list)
    reputation_grades: list[NarratorReputation] = Field(default_factory=list)

    model_config = _REFERENCE_CONFIG

    @field_validator("narrator_id", mode="before")
    @classmethod
    def validate_narrator_id(cls, v: Any) -> str:
        """Identifiers must be non-empty; numeric ids are stringified."""
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if not isinstance(v, str) or not v.strip():
            raise ValueError("narrator_id must be a non-empty string")
        return v

    @property
    def opinion_count(self) -> int:
        """Number of scholarly opinions recorded (documentation depth)."""
        return len(self.scholarly_opinions)

    def arabic_name_variants(self) -> list[str]:
        """Arabic names to match against: primary, full, alternates, kunya."""
        candidates = [
            self.primary_arabic_name,
            self.full_name_arabic,
            *(name.arabic_name for name in self.alternate_names),
            self.kunya,
        ]
        return _dedupe(candidates)

    def english_name_variants(self) -> list[str]:
        """English names to match against: primary, full, alternates."""
        candidates = [
            self.primary_english_name,
            self.full_name_english,
            *(name.english_name for name in self.alternate_names),
        ]
        return _dedupe(candidates)

    def summary_dict(self) -> dict[str, Any]:
        """Compact view for match display."""
        return {
            "id": self.narrator_id,
            "primary_arabic_name": self.primary_arabic_name,
            "primary_english_name": self.primary_english_name,
            "ibn_hajar_rank": self.ibn_hajar_rank,
            "dhahabi_rank": self.dhahabi_rank,
            "taqrib_category": self.taqrib_category,
            "scholarly_opinions_count": self.opinion_count,
        }


def _dedupe(values: list[str | None]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if not value or not value.strip() or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result
