"""Reputation tag extraction — derives a narrator's tag multiset from reference data.

Sources, each contributing its own occurrences (frequency matters to the
weighted average):
1. Explicit reputation grades stored against the narrator
2. Scholarly opinions: Arabic verdict keywords, longest phrase first
3. Opinion type fallback when an opinion carries no recognised keyword
4. Ibn Hajar rank (Taqrib al-Tahdhib wording)
5. al-Dhahabi rank
6. Taqrib category

All Arabic text is compared after normalisation, so harakat and alef/teh
marbuta spelling differences in the stored verdicts do not matter.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from isnad.services.grading.reputation import (
    ReputationTag,
    UnknownReputationTagError,
    parse_reputation_tag,
)
from isnad.services.matching.normalizer import normalize_arabic

if TYPE_CHECKING:
    from isnad.models.narrator import ReferenceNarrator, ScholarlyOpinion

logger = logging.getLogger(__name__)

# Verdict phrases as written by the critics, mapped to the tags they express.
_RAW_OPINION_KEYWORDS: dict[str, tuple[ReputationTag, ...]] = {
    # High reliability
    "صحابي": (ReputationTag.COMPANION,),
    "صحابة": (ReputationTag.COMPANION,),
    "صاحب": (ReputationTag.COMPANION,),
    "ثقة": (ReputationTag.THIQAH,),
    "ثقة ثبت": (ReputationTag.THIQAH_THABT,),
    "ثبت": (ReputationTag.THIQAH_THABT,),
    "صدوق": (ReputationTag.SADUQ,),
    "صحيح": (ReputationTag.SADUQ,),
    "مأمون": (ReputationTag.THIQAH,),
    "حافظ": (ReputationTag.THIQAH,),
    "إمام": (ReputationTag.THIQAH,),
    # Intermediate
    "مقبول": (ReputationTag.MAQBUL,),
    "لا بأس به": (ReputationTag.LA_BASA_BIHI,),
    "لا بأس": (ReputationTag.LA_BASA_BIHI,),
    # Low reliability
    "ضعيف": (ReputationTag.DAIF,),
    "متروك": (ReputationTag.MATRUK,),
    "كذاب": (ReputationTag.KADHDHAB,),
    "متهم": (ReputationTag.MUTTAHAM_BI_AL_KIDHB,),
    "مجهول": (ReputationTag.MAJHUL_AL_HAL,),
    "مجهول العين": (ReputationTag.MAJHUL_AL_AIN,),
    "صدوق سيء الحفظ": (ReputationTag.SADUQ_SAYYI_AL_HIFZ,),
    "صدوق يهم": (ReputationTag.SADUQ_YAHIM,),
}

# Normalised and ordered longest first so specific phrases claim their span
# before the shorter keywords they contain.
OPINION_KEYWORDS: tuple[tuple[str, tuple[ReputationTag, ...]], ...] = tuple(
    sorted(
        ((normalize_arabic(k), v) for k, v in _RAW_OPINION_KEYWORDS.items()),
        key=lambda item: len(item[0]),
        reverse=True,
    )
)

OPINION_TYPE_FALLBACK: dict[str, ReputationTag] = {
    "ta'dil": ReputationTag.THIQAH,
    "jarh": ReputationTag.DAIF,
}

_THIQAH = normalize_arabic("ثقة")
_THABT = normalize_arabic("ثبت")
_SADUQ = normalize_arabic("صدوق")
_SAYYI_SPELLINGS = (normalize_arabic("سيء"), normalize_arabic("سئ"))
_YAHIM = normalize_arabic("يهم")
_MAQBUL = normalize_arabic("مقبول")
_DAIF = normalize_arabic("ضعيف")
_MATRUK = normalize_arabic("متروك")
_MAJHUL = normalize_arabic("مجهول")


def _at_word_boundary(text: str, start: int, end: int) -> bool:
    """Normalised text is space separated, so a boundary is a space or an edge."""
    before_ok = start == 0 or text[start - 1] == " "
    after_ok = end >= len(text) or text[end] == " "
    return before_ok and after_ok


def _scan_opinion_text(text: str) -> list[ReputationTag]:
    """Find verdict keywords in one normalised opinion text.

    Every non-overlapping occurrence counts. Single-word keywords must sit on
    word boundaries; multi-word phrases are specific enough to match inside
    longer runs.
    """
    found: list[ReputationTag] = []
    claimed: set[int] = set()

    for keyword, tags in OPINION_KEYWORDS:
        multi_word = " " in keyword
        start = text.find(keyword)
        while start != -1:
            end = start + len(keyword)
            span = range(start, end)
            if not any(i in claimed for i in span) and (
                multi_word or _at_word_boundary(text, start, end)
            ):
                found.extend(tags)
                claimed.update(span)
            start = text.find(keyword, start + 1)

    return found


def extract_from_opinions(opinions: list[ScholarlyOpinion]) -> list[ReputationTag]:
    """Tags expressed by scholarly opinions, with the opinion-type fallback."""
    tags: list[ReputationTag] = []
    for opinion in opinions:
        found = _scan_opinion_text(normalize_arabic(opinion.opinion_text))
        if not found:
            fallback = OPINION_TYPE_FALLBACK.get(str(opinion.opinion_type))
            if fallback is not None:
                found = [fallback]
        tags.extend(found)
    return tags


def extract_from_ibn_hajar_rank(rank: str | None) -> list[ReputationTag]:
    """Parse an Ibn Hajar rank phrase (e.g. "صدوق يهم") into a tag."""
    text = normalize_arabic(rank)
    if not text:
        return []

    if _THIQAH in text or _THABT in text:
        return [ReputationTag.THIQAH_THABT if _THABT in text else ReputationTag.THIQAH]
    if _SADUQ in text:
        if any(spelling in text for spelling in _SAYYI_SPELLINGS):
            return [ReputationTag.SADUQ_SAYYI_AL_HIFZ]
        if _YAHIM in text:
            return [ReputationTag.SADUQ_YAHIM]
        return [ReputationTag.SADUQ]
    if _MAQBUL in text:
        return [ReputationTag.MAQBUL]
    if _DAIF in text:
        return [ReputationTag.DAIF]
    if _MATRUK in text:
        return [ReputationTag.MATRUK]
    if _MAJHUL in text:
        return [ReputationTag.MAJHUL_AL_HAL]
    return []


def extract_from_dhahabi_rank(rank: str | None) -> list[ReputationTag]:
    """Parse an al-Dhahabi rank phrase into a tag."""
    text = normalize_arabic(rank)
    if not text:
        return []

    if _THIQAH in text or _THABT in text:
        return [ReputationTag.THIQAH_THABT if _THABT in text else ReputationTag.THIQAH]
    if _SADUQ in text:
        return [ReputationTag.SADUQ]
    if _DAIF in text:
        return [ReputationTag.DAIF]
    return []


def extract_from_taqrib_category(category: str | None) -> list[ReputationTag]:
    text = normalize_arabic(category)
    if not text:
        return []

    if _THIQAH in text or _THABT in text:
        return [ReputationTag.THIQAH]
    if _SADUQ in text:
        return [ReputationTag.SADUQ]
    if _DAIF in text:
        return [ReputationTag.DAIF]
    return []


def extract_explicit_grades(narrator: ReferenceNarrator) -> list[ReputationTag]:
    """Stored reputation grades, one occurrence per record.

    Stored data is external: an unrecognised grade string is logged and
    skipped rather than failing the whole narrator.
    """
    tags: list[ReputationTag] = []
    for record in narrator.reputation_grades:
        try:
            tags.append(parse_reputation_tag(record.grade))
        except UnknownReputationTagError:
            logger.warning(
                "Skipping unknown stored grade %r for narrator %s",
                record.grade,
                narrator.narrator_id,
            )
    return tags


def extract_reputation_tags(narrator: ReferenceNarrator) -> list[ReputationTag]:
    """Derive the full reputation tag multiset for a reference narrator.

    Args:
        narrator: Reference narrator record

    Returns:
        Tags with duplicates preserved; empty when the record carries no
        usable reputation data
    """
    tags: list[ReputationTag] = []
    tags.extend(extract_explicit_grades(narrator))
    tags.extend(extract_from_opinions(narrator.scholarly_opinions))
    tags.extend(extract_from_ibn_hajar_rank(narrator.ibn_hajar_rank))
    tags.extend(extract_from_dhahabi_rank(narrator.dhahabi_rank))
    tags.extend(extract_from_taqrib_category(narrator.taqrib_category))

    logger.debug("Extracted %d reputation tag(s) for narrator %s", len(tags), narrator.narrator_id)
    return tags
