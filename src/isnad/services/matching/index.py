"""Reference index — name variants normalised and parsed once per reference set.

Building the index is linear in the reference set; every later match call
reuses the parsed variants instead of re-normalising each record. The index
is immutable, so a matcher holding one sees a stable reference set for the
whole call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from isnad.models.narrator import ReferenceNarrator
from isnad.services.matching.normalizer import normalize_english
from isnad.services.matching.similarity import ParsedArabicName

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnglishVariant:
    """An English name variant with its normalised form."""

    raw: str
    normalized: str


@dataclass(frozen=True)
class IndexedNarrator:
    """A reference narrator with pre-parsed name variants."""

    order: int
    narrator: ReferenceNarrator
    arabic_variants: tuple[ParsedArabicName, ...]
    english_variants: tuple[EnglishVariant, ...]

    @property
    def narrator_id(self) -> str:
        return self.narrator.narrator_id


class ReferenceIndex:
    """Immutable, pre-normalised view over a reference narrator collection."""

    def __init__(self, narrators: Iterable[ReferenceNarrator]) -> None:
        entries: list[IndexedNarrator] = []
        for order, narrator in enumerate(narrators):
            arabic = tuple(
                parsed
                for parsed in (ParsedArabicName.parse(v) for v in narrator.arabic_name_variants())
                if parsed.normalized
            )
            english = tuple(
                EnglishVariant(raw=v, normalized=normalize_english(v))
                for v in narrator.english_name_variants()
                if normalize_english(v)
            )
            if not arabic and not english:
                logger.warning(
                    "Reference narrator %s has no usable name variants; it can never match",
                    narrator.narrator_id,
                )
            entries.append(
                IndexedNarrator(
                    order=order,
                    narrator=narrator,
                    arabic_variants=arabic,
                    english_variants=english,
                )
            )
        self._entries: tuple[IndexedNarrator, ...] = tuple(entries)
        logger.debug("Built reference index over %d narrators", len(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IndexedNarrator]:
        return iter(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def get(self, narrator_id: str) -> ReferenceNarrator | None:
        """Look up a reference narrator by identifier."""
        for entry in self._entries:
            if entry.narrator_id == narrator_id:
                return entry.narrator
        return None
