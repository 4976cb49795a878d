"""Isnad domain models — Pydantic models for narrators, matches and chains."""

from isnad.models.chain import Chain, ChainNarrator
from isnad.models.extracted_narrator import ExtractedNarrator
from isnad.models.match import MatchCandidate, NarratorMatchResult
from isnad.models.narrator import (
    NameType,
    NarratorName,
    NarratorReputation,
    OpinionType,
    ReferenceNarrator,
    ScholarlyOpinion,
)

__all__ = [
    "Chain",
    "ChainNarrator",
    "ExtractedNarrator",
    "MatchCandidate",
    "NameType",
    "NarratorMatchResult",
    "NarratorName",
    "NarratorReputation",
    "OpinionType",
    "ReferenceNarrator",
    "ScholarlyOpinion",
]
