"""Pytest configuration and fixtures for isnad tests.

Provides a small rijāl reference set in the storage export's camelCase shape
and keeps matching configuration environment variables out of every test.
"""

from __future__ import annotations

from typing import Any

import pytest

from isnad.config import (
    ENV_ARABIC_WEIGHT,
    ENV_MATCH_AUTO_ACCEPT,
    ENV_MATCH_SUGGESTION_FLOOR,
    ENV_MATCH_TOP_N,
)
from isnad.models.narrator import ReferenceNarrator

REFERENCE_RECORDS: list[dict[str, Any]] = [
    {
        "id": "abu-hurayrah",
        "primaryArabicName": "أبو هريرة",
        "primaryEnglishName": "Abu Hurayrah",
        "fullNameArabic": "عبد الرحمن بن صخر الدوسي",
        "fullNameEnglish": "Abd al-Rahman ibn Sakhr al-Dawsi",
        "reputationGrades": [{"grade": "Companion"}],
        "scholarlyOpinions": [
            {"scholarName": "Ibn Hajar", "opinionText": "صحابي جليل", "opinionType": "ta'dil"},
        ],
    },
    {
        "id": "malik",
        "primaryArabicName": "مالك بن أنس",
        "primaryEnglishName": "Malik ibn Anas",
        "kunya": "أبو عبد الله",
        "ibnHajarRank": "ثقة ثبت",
        "scholarlyOpinions": [
            {"scholarName": "Ibn Ma'in", "opinionText": "ثقة ثبت", "opinionType": "ta'dil"},
            {"scholarName": "al-Shafi'i", "opinionText": "إمام دار الهجرة", "opinionType": "tadil"},
        ],
    },
    {
        "id": "nafi",
        "primaryArabicName": "نافع مولى ابن عمر",
        "primaryEnglishName": "Nafi' mawla Ibn Umar",
        "ibnHajarRank": "ثقة ثبت فقيه مشهور",
    },
    {
        "id": "ibn-umar",
        "primaryArabicName": "عبد الله بن عمر",
        "primaryEnglishName": "Abdullah ibn Umar",
        "reputationGrades": [{"grade": "Companion"}],
    },
    {
        "id": "ibn-lahiah",
        "primaryArabicName": "عبد الله بن لهيعة",
        "primaryEnglishName": "Abdullah ibn Lahi'ah",
        "ibnHajarRank": "صدوق خلط بعد احتراق كتبه",
        "scholarlyOpinions": [
            {"scholarName": "al-Nasa'i", "opinionText": "ضعيف", "opinionType": "jarh"},
            {"scholarName": "Ahmad", "opinionText": "", "opinionType": "ta'dil"},
        ],
    },
    {
        "id": "abdullah-ibn-amr",
        "primaryArabicName": "عبد الله بن عمرو",
        "primaryEnglishName": "Abdullah ibn Amr",
    },
]


@pytest.fixture(autouse=True)
def clear_matching_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test against default matching configuration."""
    for env_var in (
        ENV_MATCH_SUGGESTION_FLOOR,
        ENV_MATCH_AUTO_ACCEPT,
        ENV_MATCH_TOP_N,
        ENV_ARABIC_WEIGHT,
    ):
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def reference_records() -> list[dict[str, Any]]:
    """Raw reference records as exported by storage."""
    return [dict(record) for record in REFERENCE_RECORDS]


@pytest.fixture
def reference_narrators() -> list[ReferenceNarrator]:
    """Validated reference narrators."""
    return [ReferenceNarrator.model_validate(record) for record in REFERENCE_RECORDS]


@pytest.fixture
def narrators_by_id(reference_narrators: list[ReferenceNarrator]) -> dict[str, ReferenceNarrator]:
    return {n.narrator_id: n for n in reference_narrators}
