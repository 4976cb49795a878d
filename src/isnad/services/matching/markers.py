"""Non-narrator markers — chain links that are not rijāl database entries.

The ultimate source of a chain (the Prophet ﷺ) and the collection compilers
(al-Bukhari, Muslim, ...) appear as links in extracted chains but are never
resolved against the narrator reference set. Callers filter them before
matching; the matcher also refuses them and returns no candidates.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from isnad.services.grading.reputation import ReputationTag
from isnad.services.matching.normalizer import normalize_arabic, normalize_english


class MarkerKind(StrEnum):
    """Kind of non-narrator link."""

    SOURCE = "source"
    COMPILER = "compiler"


@dataclass(frozen=True)
class CompilerInfo:
    """A hadith collection compiler, pre-graded."""

    key: str
    arabic_name: str
    english_name: str
    reputation: tuple[ReputationTag, ...]


COMPILERS: dict[str, CompilerInfo] = {
    "bukhari": CompilerInfo(
        "bukhari", "الْإِمَامُ الْبُخَارِيُّ", "Imam al-Bukhari", (ReputationTag.THIQAH,)
    ),
    "muslim": CompilerInfo(
        "muslim", "الْإِمَامُ مُسْلِمٌ", "Imam Muslim", (ReputationTag.THIQAH,)
    ),
    "tirmidhi": CompilerInfo(
        "tirmidhi", "الْإِمَامُ التِّرْمِذِيُّ", "Imam al-Tirmidhi", (ReputationTag.THIQAH,)
    ),
    "abu_dawood": CompilerInfo(
        "abu_dawood", "الْإِمَامُ أَبُو دَاوُدَ", "Imam Abu Dawood", (ReputationTag.THIQAH,)
    ),
    "nasai": CompilerInfo(
        "nasai", "الْإِمَامُ النَّسَائِيُّ", "Imam al-Nasai", (ReputationTag.THIQAH,)
    ),
    "ibn_majah": CompilerInfo(
        "ibn_majah", "الْإِمَامُ ابْنُ مَاجَهْ", "Imam Ibn Majah", (ReputationTag.THIQAH,)
    ),
}

_SOURCE_ARABIC = frozenset({"رسول الله", "النبي", "نبي الله"})
_SOURCE_ENGLISH = frozenset(
    {
        "the prophet",
        "prophet",
        "prophet muhammad",
        "the messenger of allah",
        "messenger of allah",
        "allahs messenger",
        "the messenger",
    }
)

# Bare "Muslim" is an ordinary given name and bare "Abu Dawud" also names
# al-Tayalisi, a mid-chain narrator; only their titled forms count.
_TITLE_REQUIRED = frozenset({"muslim", "abu_dawood"})

_COMPILER_ARABIC: dict[str, str] = {}
_COMPILER_ENGLISH: dict[str, str] = {}
for _key, _info in COMPILERS.items():
    _arabic = normalize_arabic(_info.arabic_name)
    _english = normalize_english(_info.english_name)
    _COMPILER_ARABIC[_arabic] = _key
    _COMPILER_ENGLISH[_english] = _key
    if _key not in _TITLE_REQUIRED:
        _COMPILER_ARABIC[_arabic.removeprefix("الامام ")] = _key
        _COMPILER_ENGLISH[_english.removeprefix("imam ")] = _key
del _key, _info, _arabic, _english


def _is_source(arabic: str, english: str) -> bool:
    if arabic:
        if arabic in _SOURCE_ARABIC:
            return True
        words = arabic.split(" ")
        if "رسول" in words and "الله" in words:
            return True
    return bool(english) and english in _SOURCE_ENGLISH


def compiler_key(arabic_name: str | None, english_name: str | None) -> str | None:
    """Return the compiler table key for a compiler link, else None."""
    arabic = normalize_arabic(arabic_name)
    if arabic in _COMPILER_ARABIC:
        return _COMPILER_ARABIC[arabic]
    english = normalize_english(english_name)
    return _COMPILER_ENGLISH.get(english)


def classify_marker(arabic_name: str | None, english_name: str | None) -> MarkerKind | None:
    """Classify a link as a non-narrator marker, or None for an ordinary narrator."""
    arabic = normalize_arabic(arabic_name)
    english = normalize_english(english_name)
    if _is_source(arabic, english):
        return MarkerKind.SOURCE
    if compiler_key(arabic_name, english_name) is not None:
        return MarkerKind.COMPILER
    return None


def is_non_narrator_marker(arabic_name: str | None, english_name: str | None) -> bool:
    """True when the link must not be sent to the name matcher."""
    return classify_marker(arabic_name, english_name) is not None
