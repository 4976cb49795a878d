"""Narrator reliability grading — Jarḥ wa Taʿdīl tags to numeric grades.

Components:
- reputation: Closed tag vocabulary with its versioned weight table
- calculator: Narrator and chain grade calculation
- extractor: Tag multiset derivation from reference narrator data
"""

from isnad.services.grading.reputation import (
    REPUTATION_TABLE,
    REPUTATION_TABLE_VERSION,
    ReputationTableError,
    ReputationTag,
    TagCategory,
    TagInfo,
    UnknownReputationTagError,
    describe_grade,
    get_tag_category,
    get_tag_info,
    get_tag_weight,
    parse_reputation_tag,
    table_as_dict,
    tags_in_category,
)
from isnad.services.grading.calculator import (
    NarratorGradeExplanation,
    calculate_chain_grade,
    calculate_narrator_grade,
    explain_narrator_grade,
    round_grade,
)
from isnad.services.grading.extractor import extract_reputation_tags

__all__ = [
    "NarratorGradeExplanation",
    "REPUTATION_TABLE",
    "REPUTATION_TABLE_VERSION",
    "ReputationTableError",
    "ReputationTag",
    "TagCategory",
    "TagInfo",
    "UnknownReputationTagError",
    "calculate_chain_grade",
    "calculate_narrator_grade",
    "describe_grade",
    "explain_narrator_grade",
    "extract_reputation_tags",
    "get_tag_category",
    "get_tag_info",
    "get_tag_weight",
    "parse_reputation_tag",
    "round_grade",
    "table_as_dict",
    "tags_in_category",
]
