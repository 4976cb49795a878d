"""Chain models — ordered isnād links with reputation tags and grades.

A chain's grade is always derived from its links on demand and never stored.
"""

from __future__ import annotations

import uuid
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from isnad.services.grading.calculator import calculate_chain_grade, calculate_narrator_grade
from isnad.services.grading.reputation import ReputationTag, parse_reputation_tag


class ChainNarrator(BaseModel):
    """One link of a chain, optionally resolved to a reference narrator."""

    position: int = Field(..., ge=1, validation_alias=AliasChoices("position", "number"))
    arabic_name: str = Field(default="", validation_alias=AliasChoices("arabic_name", "arabicName"))
    english_name: str = Field(
        default="", validation_alias=AliasChoices("english_name", "englishName")
    )
    reputation: list[ReputationTag] = Field(default_factory=list)
    calculated_grade: float | None = Field(
        default=None,
        ge=0.0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("calculated_grade", "calculatedGrade"),
    )
    matched: bool = False
    narrator_id: str | None = Field(
        default=None, validation_alias=AliasChoices("narrator_id", "narratorId")
    )
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    matched_name: str | None = Field(
        default=None, validation_alias=AliasChoices("matched_name", "matchedName")
    )

    model_config = {"frozen": False, "extra": "ignore"}

    @field_validator("reputation", mode="before")
    @classmethod
    def parse_reputation(cls, v: Any) -> Any:
        """Resolve tag spellings; unknown tags are rejected here, at construction."""
        if v is None:
            return []
        if not isinstance(v, list | tuple):
            raise ValueError("reputation must be a list of tags")
        return [parse_reputation_tag(tag) for tag in v]

    def with_computed_grade(self) -> ChainNarrator:
        """Return a copy graded from its own tags; untagged links stay ungraded."""
        if not self.reputation:
            return self.model_copy(update={"calculated_grade": None})
        return self.model_copy(
            update={"calculated_grade": calculate_narrator_grade(self.reputation)}
        )


class Chain(BaseModel):
    """An ordered chain of narration."""

    chain_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        validation_alias=AliasChoices("chain_id", "id"),
    )
    title: str | None = None
    chain_text: str = Field(default="", validation_alias=AliasChoices("chain_text", "chainText"))
    matn: str = ""
    narrators: list[ChainNarrator] = Field(default_factory=list)

    model_config = {"frozen": False, "extra": "ignore"}

    @model_validator(mode="after")
    def validate_unique_positions(self) -> Chain:
        """Positions identify links; duplicates are an upstream bug."""
        positions = [n.position for n in self.narrators]
        if len(positions) != len(set(positions)):
            raise ValueError(f"duplicate narrator positions in chain: {sorted(positions)}")
        return self

    def ordered_narrators(self) -> list[ChainNarrator]:
        """Links from the source (position 1) outward."""
        return sorted(self.narrators, key=lambda n: n.position)

    def grade(self) -> float | None:
        """Derive the chain grade from the links' current grades."""
        return calculate_chain_grade(self.narrators)

    def regrade(self) -> Chain:
        """Return a copy with every tagged link regraded from its tags.

        Links without tags keep whatever grade they already carry.
        """
        narrators = [n.with_computed_grade() if n.reputation else n for n in self.narrators]
        return self.model_copy(update={"narrators": narrators})
