"""Matching configuration loaded from environment variables.

Thresholds applied around the name matcher by chain analysis:
- ISNAD_MATCH_SUGGESTION_FLOOR: Minimum confidence for a suggested candidate (default 0.3)
- ISNAD_MATCH_AUTO_ACCEPT: Confidence at which the best candidate is accepted (default 0.5)
- ISNAD_MATCH_TOP_N: Maximum suggested candidates per link (default 3)
- ISNAD_ARABIC_WEIGHT: Share of the Arabic side in combined confidence (default 0.7)

Invalid values fail closed with MatchingConfigError; unset or blank values
fall back to defaults.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Final

logger = logging.getLogger(__name__)

ENV_MATCH_SUGGESTION_FLOOR: Final[str] = "ISNAD_MATCH_SUGGESTION_FLOOR"
ENV_MATCH_AUTO_ACCEPT: Final[str] = "ISNAD_MATCH_AUTO_ACCEPT"
ENV_MATCH_TOP_N: Final[str] = "ISNAD_MATCH_TOP_N"
ENV_ARABIC_WEIGHT: Final[str] = "ISNAD_ARABIC_WEIGHT"

DEFAULT_SUGGESTION_FLOOR: Final[float] = 0.3
DEFAULT_AUTO_ACCEPT: Final[float] = 0.5
DEFAULT_TOP_N: Final[int] = 3
DEFAULT_ARABIC_WEIGHT: Final[float] = 0.7


class MatchingConfigError(Exception):
    """Raised when matching configuration is invalid."""


@dataclass(frozen=True)
class MatchingConfig:
    """Matching thresholds (immutable).

    Attributes:
        suggestion_floor: Candidates below this confidence are not suggested.
        auto_accept_confidence: Best candidate at or above this is accepted.
        top_n: Maximum number of suggested candidates per link.
        arabic_weight: Weight of Arabic similarity when both names are present.
    """

    suggestion_floor: float = DEFAULT_SUGGESTION_FLOOR
    auto_accept_confidence: float = DEFAULT_AUTO_ACCEPT
    top_n: int = DEFAULT_TOP_N
    arabic_weight: float = DEFAULT_ARABIC_WEIGHT

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not 0.0 <= self.suggestion_floor <= 1.0:
            raise MatchingConfigError(
                f"suggestion_floor must be in [0, 1], got {self.suggestion_floor}"
            )
        if not 0.0 <= self.auto_accept_confidence <= 1.0:
            raise MatchingConfigError(
                f"auto_accept_confidence must be in [0, 1], got {self.auto_accept_confidence}"
            )
        if self.auto_accept_confidence < self.suggestion_floor:
            raise MatchingConfigError(
                f"auto_accept_confidence ({self.auto_accept_confidence}) must not be below "
                f"suggestion_floor ({self.suggestion_floor})"
            )
        if self.top_n < 1:
            raise MatchingConfigError(f"top_n must be a positive integer, got {self.top_n}")
        if not 0.0 < self.arabic_weight < 1.0:
            raise MatchingConfigError(f"arabic_weight must be in (0, 1), got {self.arabic_weight}")


def _get_env_raw(env_var: str) -> str | None:
    raw = os.environ.get(env_var)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


def _parse_float(env_var: str, default: float) -> float:
    """Parse a float from an environment variable.

    Raises:
        MatchingConfigError: If the value is set but not a number.
    """
    raw = _get_env_raw(env_var)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise MatchingConfigError(f"{env_var} must be a number, got '{raw}'") from e


def _parse_positive_int(env_var: str, default: int) -> int:
    """Parse a positive integer from an environment variable.

    Raises:
        MatchingConfigError: If the value is set but not a positive integer.
    """
    raw = _get_env_raw(env_var)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise MatchingConfigError(f"{env_var} must be a positive integer, got '{raw}'") from e
    if value <= 0:
        raise MatchingConfigError(f"{env_var} must be a positive integer, got {value}")
    return value


def load_matching_config() -> MatchingConfig:
    """Load matching configuration from environment variables.

    Returns:
        MatchingConfig with validated values.

    Raises:
        MatchingConfigError: If any value is invalid.
    """
    config = MatchingConfig(
        suggestion_floor=_parse_float(ENV_MATCH_SUGGESTION_FLOOR, DEFAULT_SUGGESTION_FLOOR),
        auto_accept_confidence=_parse_float(ENV_MATCH_AUTO_ACCEPT, DEFAULT_AUTO_ACCEPT),
        top_n=_parse_positive_int(ENV_MATCH_TOP_N, DEFAULT_TOP_N),
        arabic_weight=_parse_float(ENV_ARABIC_WEIGHT, DEFAULT_ARABIC_WEIGHT),
    )
    logger.debug("Loaded matching config: %s", config)
    return config
