"""ExtractedNarrator model — one link of a chain as produced by upstream extraction."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field


class ExtractedNarrator(BaseModel):
    """A narrator name pair extracted from chain text.

    Position 1 is the ultimate source/speaker; later transmitters follow in
    increasing order. Instances are immutable; matching never modifies them.
    """

    position: int = Field(
        ...,
        ge=1,
        validation_alias=AliasChoices("position", "number"),
        description="1-based chain position (1 = source/speaker)",
    )
    arabic_name: str = Field(
        default="",
        validation_alias=AliasChoices("arabic_name", "arabicName"),
        description="Arabic name as extracted",
    )
    english_name: str = Field(
        default="",
        validation_alias=AliasChoices("english_name", "englishName"),
        description="English name as extracted",
    )

    model_config = {"frozen": True, "extra": "forbid"}
