"""Reference set loader with fail-closed validation.

Accepts the storage export as JSON, either a bare list of narrator records or
an object with a "narrators" list. Record keys may be snake_case or the
camelCase used by the export.

Strict by default: any malformed record or duplicate identifier fails the
whole load. With skip_invalid=True bad records are logged and dropped.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from isnad.models.narrator import ReferenceNarrator

logger = logging.getLogger(__name__)


class ReferenceLoadError(Exception):
    """Raised when a reference set cannot be read or validated."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


def _extract_records(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("narrators"), list):
        return payload["narrators"]
    raise ReferenceLoadError(
        "Reference data must be a list of narrators or an object with a 'narrators' list"
    )


def parse_reference_narrators(
    payload: Any, *, skip_invalid: bool = False
) -> list[ReferenceNarrator]:
    """Validate decoded JSON into reference narrators, preserving input order.

    Args:
        payload: Decoded JSON (list or {"narrators": [...]})
        skip_invalid: Drop malformed records with a warning instead of failing

    Returns:
        Validated ReferenceNarrator records

    Raises:
        ReferenceLoadError: On a malformed payload, or malformed records and
            duplicate identifiers when skip_invalid is False
    """
    records = _extract_records(payload)
    narrators: list[ReferenceNarrator] = []
    errors: list[str] = []
    seen_ids: set[str] = set()

    for i, record in enumerate(records):
        try:
            narrator = ReferenceNarrator.model_validate(record)
        except ValidationError as e:
            message = f"Record {i}: {e.error_count()} validation error(s): {e.errors()[0]['msg']}"
            if skip_invalid:
                logger.warning("Skipping invalid reference record: %s", message)
                continue
            errors.append(message)
            continue

        if narrator.narrator_id in seen_ids:
            message = f"Record {i}: duplicate narrator id {narrator.narrator_id!r}"
            if skip_invalid:
                logger.warning("Skipping reference record: %s", message)
                continue
            errors.append(message)
            continue

        seen_ids.add(narrator.narrator_id)
        narrators.append(narrator)

    if errors:
        raise ReferenceLoadError(
            f"Reference data has {len(errors)} invalid record(s)", errors=errors
        )

    logger.info("Loaded %d reference narrators", len(narrators))
    return narrators


def load_reference_narrators(
    path: str | Path, *, skip_invalid: bool = False
) -> list[ReferenceNarrator]:
    """Load a reference narrator set from a JSON file.

    Raises:
        ReferenceLoadError: If the file is missing, unreadable, not JSON, or
            fails validation
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ReferenceLoadError(f"Cannot read reference file {path}: {e}") from e

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ReferenceLoadError(f"Reference file {path} is not valid JSON: {e}") from e

    return parse_reference_narrators(payload, skip_invalid=skip_invalid)
