"""Match models — ranked candidates and per-link resolution results."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from isnad.models.narrator import ReferenceNarrator
from isnad.services.grading.reputation import ReputationTag


class MatchCandidate(BaseModel):
    """A reference narrator proposed for an extracted name."""

    narrator_id: str = Field(..., description="Reference narrator identifier")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Match confidence")
    matched_name: str = Field(..., description="Name variant that produced the score")
    narrator: ReferenceNarrator = Field(..., description="The matched reference record")

    model_config = {"frozen": True, "extra": "forbid"}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display output."""
        return {
            "narrator_id": self.narrator_id,
            "confidence": self.confidence,
            "matched_name": self.matched_name,
            "narrator": self.narrator.summary_dict(),
        }


class NarratorMatchResult(BaseModel):
    """Resolution outcome for one extracted chain link."""

    position: int = Field(..., ge=1)
    arabic_name: str = ""
    english_name: str = ""
    matched: bool = False
    marker: str | None = Field(
        default=None, description="Non-narrator marker kind (source/compiler), if any"
    )
    accepted: MatchCandidate | None = None
    candidates: list[MatchCandidate] = Field(default_factory=list)
    suggested_tags: list[ReputationTag] = Field(default_factory=list)
    calculated_grade: float | None = None

    model_config = {"frozen": False, "extra": "forbid"}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display output."""
        return {
            "position": self.position,
            "arabic_name": self.arabic_name,
            "english_name": self.english_name,
            "matched": self.matched,
            "marker": self.marker,
            "accepted": self.accepted.to_dict() if self.accepted else None,
            "candidates": [c.to_dict() for c in self.candidates],
            "suggested_tags": [t.value for t in self.suggested_tags],
            "calculated_grade": self.calculated_grade,
        }
