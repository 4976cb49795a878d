"""Name normalisation for Arabic script and English transliteration.

Arabic:
- strip harakat, superscript alef and tatweel
- unify alef forms (أ إ آ ٱ → ا), alef maqsura/yeh (ى → ي), teh marbuta (ة → ه)
- genitive kunya ابي → ابو so "Abi Hurayrah" and "Abu Hurayrah" coincide

English:
- NFKD fold of transliteration marks (ā ū ḥ ʿ ...)
- casefold, drop apostrophes/ayn marks, hyphens and underscores become spaces

Both collapse whitespace and strip. Normalisation is idempotent.
"""

from __future__ import annotations

import re
import unicodedata

_ARABIC_DIACRITICS = re.compile(r"[ؐ-ًؚ-ٰٟۖ-ۭـ]")
_ALEF_FORMS = re.compile(r"[آأإٱ]")
_YEH_FORMS = re.compile(r"ى")
_TEH_MARBUTA = re.compile(r"ة")
_ABI_KUNYA = re.compile(r"(?<!\S)ابي(?!\S)")
_ARABIC_PUNCTUATION = re.compile(r"[،؛؟۔\"'()\[\]{}«».,;:!?]")
_WHITESPACE = re.compile(r"\s+")

# Shortest trailing word fragment accepted as a truncated name part.
PARTIAL_WORD_MIN_LENGTH = 4

_ENGLISH_APOSTROPHES = re.compile(r"['‘’ʼʿʾ`]")
_ENGLISH_SEPARATORS = re.compile(r"[-_/]")
_ENGLISH_PUNCTUATION = re.compile(r"[^\w\s]")


def normalize_arabic(text: str | None) -> str:
    """Normalise an Arabic name for comparison.

    Args:
        text: Raw Arabic text, possibly vocalised

    Returns:
        Normalised text; empty string for None or blank input
    """
    if not text:
        return ""
    normalized = unicodedata.normalize("NFC", text)
    normalized = _ARABIC_DIACRITICS.sub("", normalized)
    normalized = _ALEF_FORMS.sub("ا", normalized)
    normalized = _YEH_FORMS.sub("ي", normalized)
    normalized = _TEH_MARBUTA.sub("ه", normalized)
    normalized = _ARABIC_PUNCTUATION.sub(" ", normalized)
    normalized = _WHITESPACE.sub(" ", normalized).strip()
    normalized = _ABI_KUNYA.sub("ابو", normalized)
    return normalized.lower()


def normalize_english(text: str | None) -> str:
    """Normalise an English transliteration for comparison."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    folded = _ENGLISH_APOSTROPHES.sub("", folded.casefold())
    folded = _ENGLISH_SEPARATORS.sub(" ", folded)
    folded = _ENGLISH_PUNCTUATION.sub(" ", folded)
    return _WHITESPACE.sub(" ", folded).strip()


def contains_phrase(longer: str, shorter: str) -> bool:
    """True when ``shorter`` occurs in ``longer`` as a substring starting on a word.

    Every word of ``shorter`` must be whole except the last, which may be a
    truncation ("hurayra" in "abu hurayrah", "الدوس" in "الدوسي") provided it
    is at least PARTIAL_WORD_MIN_LENGTH characters long. Shorter truncations
    only count as whole words, so "عمر" is not found inside "عمرو".
    """
    if not shorter or not longer:
        return False
    if f" {shorter} " in f" {longer} ":
        return True
    last_word = shorter.rsplit(" ", 1)[-1]
    if len(last_word) < PARTIAL_WORD_MIN_LENGTH:
        return False
    return f" {shorter}" in f" {longer}"
