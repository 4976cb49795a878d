"""Reputation Tags — closed Jarḥ wa Taʿdīl vocabulary with fixed weights.

Every tag resolves to exactly one (weight, category) pair. The table is an
immutable mapping, checked for totality at import time: a tag missing from
the table is a programming error and the module refuses to load.

Persisted numeric grades depend on these weights. Any change to a weight or
category MUST bump REPUTATION_TABLE_VERSION.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Any

REPUTATION_TABLE_VERSION = "2"

MAX_TAG_WEIGHT = 10
MIN_TAG_WEIGHT = 0


class ReputationTableError(Exception):
    """Raised at import when the tag table is not a total, well-formed mapping."""

    pass


class UnknownReputationTagError(ValueError):
    """Raised when a value is not a member of the reputation tag enumeration.

    Unknown tags are a caller bug. They are never zero-weighted, since a
    silent zero would read as a genuine "weak" assessment.
    """

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Unknown reputation tag: {value!r}")


class TagCategory(StrEnum):
    """Category partition of the reputation vocabulary."""

    HIGH = "high"
    INTERMEDIATE = "intermediate"
    LOW = "low"
    THEOLOGICAL = "theological"


RELIABILITY_CATEGORIES = frozenset(
    {TagCategory.HIGH, TagCategory.INTERMEDIATE, TagCategory.LOW}
)


class ReputationTag(StrEnum):
    """Qualitative narrator grades as recorded by the rijāl critics."""

    COMPANION = "Companion"
    THIQAH_THABT = "Thiqah Thabt"
    THIQAH = "Thiqah"
    SADUQ = "Saduq"
    SADUQ_YAHIM = "Saduq Yahim"
    MAQBUL = "Maqbūl"
    LA_BASA_BIHI = "La Ba'sa Bihi"
    SADUQ_SAYYI_AL_HIFZ = "Saduq Sayyi' al-Hifz"
    MAJHUL_AL_AIN = "Majhul al-Ain"
    MAJHUL_AL_HAL = "Majhul al-Hal"
    DAIF = "Da'if"
    MATRUK = "Matruk"
    MUTTAHAM_BI_AL_KIDHB = "Muttaham bi al-Kidhb"
    KADHDHAB = "Kadhdhab"
    SHIA = "Shia"
    QADARI = "Qadari"
    MURJII = "Murji'i"
    KHAWARIJ = "Khawarij"
    JAHMI = "Jahmi"
    NASIBI = "Nasibi"
    RAFIDI = "Rafidi"


@dataclass(frozen=True)
class TagInfo:
    """Metadata for a reputation tag."""

    tag: ReputationTag
    weight: int
    category: TagCategory
    meaning: str


_TABLE_ENTRIES: tuple[TagInfo, ...] = (
    TagInfo(ReputationTag.COMPANION, 10, TagCategory.HIGH, "Companion of the Prophet"),
    TagInfo(
        ReputationTag.THIQAH_THABT,
        10,
        TagCategory.HIGH,
        "Absolutely trustworthy and extremely precise/firm",
    ),
    TagInfo(ReputationTag.THIQAH, 9, TagCategory.HIGH, "Trustworthy"),
    TagInfo(ReputationTag.SADUQ, 8, TagCategory.HIGH, "Truthful"),
    TagInfo(
        ReputationTag.SADUQ_YAHIM,
        7,
        TagCategory.HIGH,
        "Truthful, but makes occasional errors",
    ),
    TagInfo(ReputationTag.MAQBUL, 7, TagCategory.INTERMEDIATE, "Acceptable"),
    TagInfo(
        ReputationTag.LA_BASA_BIHI,
        7,
        TagCategory.INTERMEDIATE,
        "There is no harm in him",
    ),
    TagInfo(
        ReputationTag.SADUQ_SAYYI_AL_HIFZ,
        4,
        TagCategory.LOW,
        "Truthful, but with poor memory",
    ),
    TagInfo(ReputationTag.MAJHUL_AL_AIN, 0, TagCategory.LOW, "Unknown person"),
    TagInfo(ReputationTag.MAJHUL_AL_HAL, 0, TagCategory.LOW, "Unknown status"),
    TagInfo(ReputationTag.DAIF, 1, TagCategory.LOW, "Weak"),
    TagInfo(ReputationTag.MATRUK, 0, TagCategory.LOW, "Abandoned"),
    TagInfo(ReputationTag.MUTTAHAM_BI_AL_KIDHB, 0, TagCategory.LOW, "Accused of lying"),
    TagInfo(ReputationTag.KADHDHAB, 0, TagCategory.LOW, "Liar / fabricator"),
    TagInfo(ReputationTag.SHIA, 5, TagCategory.THEOLOGICAL, "Shi'i leanings"),
    TagInfo(ReputationTag.QADARI, 5, TagCategory.THEOLOGICAL, "Qadariyyah affiliation"),
    TagInfo(ReputationTag.MURJII, 5, TagCategory.THEOLOGICAL, "Murji'ah affiliation"),
    TagInfo(ReputationTag.KHAWARIJ, 4, TagCategory.THEOLOGICAL, "Khawarij affiliation"),
    TagInfo(ReputationTag.JAHMI, 3, TagCategory.THEOLOGICAL, "Jahmiyyah affiliation"),
    TagInfo(ReputationTag.NASIBI, 3, TagCategory.THEOLOGICAL, "Hostility to Ahl al-Bayt"),
    TagInfo(ReputationTag.RAFIDI, 2, TagCategory.THEOLOGICAL, "Rafidah affiliation"),
)


def _build_table(entries: tuple[TagInfo, ...]) -> MappingProxyType[ReputationTag, TagInfo]:
    """Build the immutable tag table, failing closed on any gap or duplicate."""
    table: dict[ReputationTag, TagInfo] = {}
    for info in entries:
        if info.tag in table:
            raise ReputationTableError(f"Duplicate table entry for {info.tag.value}")
        if not MIN_TAG_WEIGHT <= info.weight <= MAX_TAG_WEIGHT:
            raise ReputationTableError(
                f"Weight {info.weight} for {info.tag.value} outside "
                f"[{MIN_TAG_WEIGHT}, {MAX_TAG_WEIGHT}]"
            )
        table[info.tag] = info

    missing = [tag.value for tag in ReputationTag if tag not in table]
    if missing:
        raise ReputationTableError(f"Reputation table is not total, missing: {missing}")

    return MappingProxyType(table)


REPUTATION_TABLE: MappingProxyType[ReputationTag, TagInfo] = _build_table(_TABLE_ENTRIES)

# Spellings seen in stored data that are not the canonical enum value.
_LEGACY_ALIASES: MappingProxyType[str, ReputationTag] = MappingProxyType(
    {
        "MaqbÅ«l": ReputationTag.MAQBUL,
        "Maqbul": ReputationTag.MAQBUL,
        "Daif": ReputationTag.DAIF,
        "Dha'if": ReputationTag.DAIF,
        "Shi'i": ReputationTag.SHIA,
        "Khariji": ReputationTag.KHAWARIJ,
        "Murjia": ReputationTag.MURJII,
    }
)


def _fold(value: str) -> str:
    """Fold a tag spelling for lenient lookup (case, spacing, apostrophes)."""
    folded = value.strip().casefold()
    folded = re.sub(r"[‘’ʼʿʾ`]", "'", folded)
    folded = re.sub(r"[\s_\-]+", " ", folded)
    return folded


_FOLDED_LOOKUP: MappingProxyType[str, ReputationTag] = MappingProxyType(
    {
        **{_fold(tag.value): tag for tag in ReputationTag},
        **{_fold(alias): tag for alias, tag in _LEGACY_ALIASES.items()},
    }
)


def parse_reputation_tag(value: ReputationTag | str) -> ReputationTag:
    """Resolve a tag value or spelling to its enum member.

    Accepts the canonical value, case/spacing variants of it, and the legacy
    aliases found in stored data.

    Args:
        value: ReputationTag or its string spelling

    Returns:
        ReputationTag member

    Raises:
        UnknownReputationTagError: If the value names no tag
    """
    if isinstance(value, ReputationTag):
        return value
    if not isinstance(value, str):
        raise UnknownReputationTagError(value)

    if value in _LEGACY_ALIASES:
        return _LEGACY_ALIASES[value]
    try:
        return ReputationTag(value)
    except ValueError:
        pass

    tag = _FOLDED_LOOKUP.get(_fold(value))
    if tag is None:
        raise UnknownReputationTagError(value)
    return tag


def get_tag_info(tag: ReputationTag | str) -> TagInfo:
    """Get the table entry for a tag."""
    return REPUTATION_TABLE[parse_reputation_tag(tag)]


def get_tag_weight(tag: ReputationTag | str) -> int:
    """Get the integer weight (0-10) for a tag."""
    return get_tag_info(tag).weight


def get_tag_category(tag: ReputationTag | str) -> TagCategory:
    """Get the category for a tag."""
    return get_tag_info(tag).category


def tags_in_category(category: TagCategory) -> list[ReputationTag]:
    """List tags of one category in table order."""
    return [info.tag for info in _TABLE_ENTRIES if info.category == category]


GRADE_DESCRIPTIONS: list[tuple[float, str]] = [
    (8.0, "Excellent"),
    (6.0, "Good"),
    (4.0, "Fair"),
    (2.0, "Poor"),
]


def describe_grade(grade: float) -> str:
    """Map a numeric narrator or chain grade to its display band."""
    for threshold, label in GRADE_DESCRIPTIONS:
        if grade >= threshold:
            return label
    return "Very Poor"


def table_as_dict() -> dict[str, Any]:
    """Serialise the table with its version for export and pinning."""
    return {
        "version": REPUTATION_TABLE_VERSION,
        "tags": [
            {
                "tag": info.tag.value,
                "weight": info.weight,
                "category": info.category.value,
                "meaning": info.meaning,
            }
            for info in _TABLE_ENTRIES
        ],
    }
