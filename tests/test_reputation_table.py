"""Tests for the reputation tag table.

Covers:
- Table is total over the enumeration and immutable
- Canonical weights and categories
- Tag parsing: canonical values, case/spacing variants, legacy spellings
- Unknown tags fail loudly
- Grade description bands
- Versioned export
"""

from __future__ import annotations

import pytest

from isnad.services.grading.reputation import (
    MAX_TAG_WEIGHT,
    MIN_TAG_WEIGHT,
    REPUTATION_TABLE,
    REPUTATION_TABLE_VERSION,
    ReputationTag,
    TagCategory,
    UnknownReputationTagError,
    describe_grade,
    get_tag_category,
    get_tag_weight,
    parse_reputation_tag,
    table_as_dict,
    tags_in_category,
)


class TestTableIntegrity:
    """The tag table is a total, immutable mapping."""

    def test_every_tag_has_an_entry(self) -> None:
        """Each enumeration member resolves to exactly one entry."""
        assert set(REPUTATION_TABLE) == set(ReputationTag)
        assert len(REPUTATION_TABLE) == len(ReputationTag)

    def test_weights_within_bounds(self) -> None:
        """Every weight lies in the 0-10 scale."""
        for info in REPUTATION_TABLE.values():
            assert MIN_TAG_WEIGHT <= info.weight <= MAX_TAG_WEIGHT

    def test_table_is_read_only(self) -> None:
        """The table cannot be modified at runtime."""
        with pytest.raises(TypeError):
            REPUTATION_TABLE[ReputationTag.THIQAH] = REPUTATION_TABLE[ReputationTag.DAIF]  # type: ignore[index]


class TestCanonicalValues:
    """Weights and categories of the documented tags."""

    @pytest.mark.parametrize(
        ("tag", "weight", "category"),
        [
            (ReputationTag.COMPANION, 10, TagCategory.HIGH),
            (ReputationTag.THIQAH_THABT, 10, TagCategory.HIGH),
            (ReputationTag.THIQAH, 9, TagCategory.HIGH),
            (ReputationTag.SADUQ, 8, TagCategory.HIGH),
            (ReputationTag.SADUQ_YAHIM, 7, TagCategory.HIGH),
            (ReputationTag.MAQBUL, 7, TagCategory.INTERMEDIATE),
            (ReputationTag.LA_BASA_BIHI, 7, TagCategory.INTERMEDIATE),
            (ReputationTag.SADUQ_SAYYI_AL_HIFZ, 4, TagCategory.LOW),
            (ReputationTag.MAJHUL_AL_AIN, 0, TagCategory.LOW),
            (ReputationTag.MAJHUL_AL_HAL, 0, TagCategory.LOW),
            (ReputationTag.DAIF, 1, TagCategory.LOW),
            (ReputationTag.MATRUK, 0, TagCategory.LOW),
            (ReputationTag.MUTTAHAM_BI_AL_KIDHB, 0, TagCategory.LOW),
            (ReputationTag.KADHDHAB, 0, TagCategory.LOW),
            (ReputationTag.SHIA, 5, TagCategory.THEOLOGICAL),
            (ReputationTag.RAFIDI, 2, TagCategory.THEOLOGICAL),
        ],
    )
    def test_weight_and_category(
        self, tag: ReputationTag, weight: int, category: TagCategory
    ) -> None:
        """Documented tags carry their fixed weight and category."""
        assert get_tag_weight(tag) == weight
        assert get_tag_category(tag) == category

    def test_theological_category_members(self) -> None:
        """Seven sectarian tags form the theological category."""
        assert tags_in_category(TagCategory.THEOLOGICAL) == [
            ReputationTag.SHIA,
            ReputationTag.QADARI,
            ReputationTag.MURJII,
            ReputationTag.KHAWARIJ,
            ReputationTag.JAHMI,
            ReputationTag.NASIBI,
            ReputationTag.RAFIDI,
        ]


class TestParseReputationTag:
    """Resolution of tag spellings."""

    def test_canonical_value(self) -> None:
        """Canonical values resolve to their member."""
        assert parse_reputation_tag("Thiqah") is ReputationTag.THIQAH
        assert parse_reputation_tag("Da'if") is ReputationTag.DAIF

    def test_member_passes_through(self) -> None:
        """Enum members are returned unchanged."""
        assert parse_reputation_tag(ReputationTag.MATRUK) is ReputationTag.MATRUK

    def test_legacy_mis_encoded_maqbul(self) -> None:
        """The mis-encoded stored spelling resolves to Maqbūl."""
        assert parse_reputation_tag("MaqbÅ«l") is ReputationTag.MAQBUL
        assert parse_reputation_tag("Maqbul") is ReputationTag.MAQBUL

    def test_case_and_spacing_variants(self) -> None:
        """Case, underscores and curly apostrophes are tolerated."""
        assert parse_reputation_tag("thiqah thabt") is ReputationTag.THIQAH_THABT
        assert parse_reputation_tag("  MAJHUL_AL-HAL ") is ReputationTag.MAJHUL_AL_HAL
        assert parse_reputation_tag("Da’if") is ReputationTag.DAIF

    def test_unknown_tag_raises(self) -> None:
        """Unknown spellings are a caller bug, never a zero weight."""
        with pytest.raises(UnknownReputationTagError) as exc_info:
            parse_reputation_tag("Very Trustworthy")
        assert exc_info.value.value == "Very Trustworthy"

    def test_non_string_raises(self) -> None:
        """Non-string values are rejected."""
        with pytest.raises(UnknownReputationTagError):
            parse_reputation_tag(9)  # type: ignore[arg-type]

    def test_unknown_tag_is_value_error(self) -> None:
        """Unknown tag errors are ValueErrors, so model validation surfaces them."""
        assert issubclass(UnknownReputationTagError, ValueError)


class TestDescribeGrade:
    """Display bands for numeric grades."""

    @pytest.mark.parametrize(
        ("grade", "label"),
        [
            (10.0, "Excellent"),
            (8.0, "Excellent"),
            (7.9, "Good"),
            (6.0, "Good"),
            (4.0, "Fair"),
            (2.0, "Poor"),
            (1.9, "Very Poor"),
            (0.0, "Very Poor"),
        ],
    )
    def test_bands(self, grade: float, label: str) -> None:
        """Band thresholds are inclusive lower bounds."""
        assert describe_grade(grade) == label


class TestTableExport:
    """Versioned table export."""

    def test_export_carries_version(self) -> None:
        """Exports pin the table version alongside every tag."""
        exported = table_as_dict()

        assert exported["version"] == REPUTATION_TABLE_VERSION
        assert len(exported["tags"]) == len(ReputationTag)
        first = exported["tags"][0]
        assert first == {
            "tag": "Companion",
            "weight": 10,
            "category": "high",
            "meaning": "Companion of the Prophet",
        }
