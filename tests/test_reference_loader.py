"""Tests for reference set loading.

Covers:
- Bare list and {"narrators": [...]} payloads
- Input order preserved
- Missing file, invalid JSON and wrong shape fail closed
- Malformed records and duplicate ids fail strict loads
- skip_invalid drops bad records with a warning
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from isnad.services.reference.loader import (
    ReferenceLoadError,
    load_reference_narrators,
    parse_reference_narrators,
)


def _write(tmp_path: Path, payload: Any) -> Path:
    """Helper to write a JSON payload to a temp file."""
    path = tmp_path / "narrators.json"
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return path


class TestLoadReferenceNarrators:
    """File-based loading."""

    def test_bare_list(self, tmp_path: Path, reference_records: list[dict[str, Any]]) -> None:
        """A JSON list loads in order."""
        narrators = load_reference_narrators(_write(tmp_path, reference_records))

        assert [n.narrator_id for n in narrators] == [r["id"] for r in reference_records]

    def test_wrapped_list(self, tmp_path: Path, reference_records: list[dict[str, Any]]) -> None:
        """An object with a narrators list loads too."""
        narrators = load_reference_narrators(
            _write(tmp_path, {"narrators": reference_records}), skip_invalid=False
        )
        assert len(narrators) == len(reference_records)

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file fails closed."""
        with pytest.raises(ReferenceLoadError):
            load_reference_narrators(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Unparseable content fails closed."""
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ReferenceLoadError):
            load_reference_narrators(path)

    def test_wrong_shape(self, tmp_path: Path) -> None:
        """A payload without a narrators list is rejected."""
        with pytest.raises(ReferenceLoadError):
            load_reference_narrators(_write(tmp_path, {"items": []}))


class TestParseReferenceNarrators:
    """Record validation."""

    def test_invalid_record_fails_strict_load(self) -> None:
        """A record without a primary Arabic name fails the whole load."""
        payload = [{"id": "ok", "primaryArabicName": "شعبة"}, {"id": "bad"}]

        with pytest.raises(ReferenceLoadError) as exc_info:
            parse_reference_narrators(payload)
        assert len(exc_info.value.errors) == 1
        assert exc_info.value.errors[0].startswith("Record 1")

    def test_duplicate_ids_fail_strict_load(self) -> None:
        """Identifiers must be unique."""
        payload = [
            {"id": "dup", "primaryArabicName": "شعبة"},
            {"id": "dup", "primaryArabicName": "سفيان"},
        ]
        with pytest.raises(ReferenceLoadError):
            parse_reference_narrators(payload)

    def test_skip_invalid(self, caplog: pytest.LogCaptureFixture) -> None:
        """Lenient loads keep the good records and log the rest."""
        payload = [
            {"id": "ok", "primaryArabicName": "شعبة"},
            {"id": "bad"},
            {"id": "ok", "primaryArabicName": "سفيان"},
        ]
        with caplog.at_level(logging.WARNING, logger="isnad.services.reference.loader"):
            narrators = parse_reference_narrators(payload, skip_invalid=True)

        assert [n.primary_arabic_name for n in narrators] == ["شعبة"]
        assert "Record 1" in caplog.text
        assert "duplicate" in caplog.text

    def test_empty_list(self) -> None:
        """An empty reference set is valid."""
        assert parse_reference_narrators([]) == []
