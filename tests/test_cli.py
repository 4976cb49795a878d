"""Tests for the isnad CLI.

Covers:
- tags: versioned table dump
- grade: score and breakdown, unknown tag exit code 2
- match: ranked candidates with floor/top-N, --all
- analyze: extracted chain from file, invalid JSON and bad reference exit 2
- chain: grading of tagged links from stdin
- Output is deterministic JSON
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any

import pytest

from isnad.cli import main
from isnad.services.grading.reputation import REPUTATION_TABLE_VERSION


def _run(capsys: pytest.CaptureFixture[str], argv: list[str]) -> tuple[int, dict[str, Any]]:
    """Helper to run the CLI and decode its JSON output."""
    code = main(argv)
    out = capsys.readouterr().out
    return code, json.loads(out)


@pytest.fixture
def reference_file(tmp_path: Path, reference_records: list[dict[str, Any]]) -> Path:
    path = tmp_path / "reference.json"
    path.write_text(json.dumps(reference_records, ensure_ascii=False), encoding="utf-8")
    return path


class TestTagsAndGrade:
    """Table and grade commands."""

    def test_tags(self, capsys: pytest.CaptureFixture[str]) -> None:
        """The table dump is versioned."""
        code, data = _run(capsys, ["tags"])

        assert code == 0
        assert data["version"] == REPUTATION_TABLE_VERSION
        assert {"tag": "Thiqah", "weight": 9, "category": "high", "meaning": "Trustworthy"} in data[
            "tags"
        ]

    def test_grade(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Grading prints score, description and breakdown."""
        code, data = _run(capsys, ["grade", "Thiqah", "Thiqah", "Da'if"])

        assert code == 0
        assert data["score"] == 4.3
        assert data["description"] == "Fair"
        assert data["contradiction_penalty"] == 2

    def test_grade_unknown_tag(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Unknown tags exit with code 2."""
        code, data = _run(capsys, ["grade", "Thiqah", "Reliable"])

        assert code == 2
        assert data["ok"] is False
        assert data["errors"][0]["code"] == "UNKNOWN_TAG"


class TestMatch:
    """match command."""

    def test_match(self, capsys: pytest.CaptureFixture[str], reference_file: Path) -> None:
        """Best candidate first, truncated to top-N."""
        code, data = _run(
            capsys, ["match", "--reference", str(reference_file), "--arabic", "مالك بن أنس"]
        )

        assert code == 0
        assert data["candidates"][0]["narrator_id"] == "malik"
        assert data["candidates"][0]["confidence"] == 1.0
        assert len(data["candidates"]) <= 3

    def test_match_top_n_from_env(
        self,
        capsys: pytest.CaptureFixture[str],
        reference_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """The environment controls truncation."""
        monkeypatch.setenv("ISNAD_MATCH_TOP_N", "1")
        code, data = _run(
            capsys, ["match", "--reference", str(reference_file), "--arabic", "عبد الله بن عمر"]
        )

        assert code == 0
        assert [c["narrator_id"] for c in data["candidates"]] == ["ibn-umar"]

    def test_match_all(self, capsys: pytest.CaptureFixture[str], reference_file: Path) -> None:
        """--all ignores the floor and top-N."""
        code, data = _run(
            capsys,
            ["match", "--reference", str(reference_file), "--arabic", "عبد الله بن عمر", "--all"],
        )

        assert code == 0
        assert "ibn-lahiah" in {c["narrator_id"] for c in data["candidates"]}

    def test_match_missing_reference(
        self, capsys: pytest.CaptureFixture[str], tmp_path: Path
    ) -> None:
        """A missing reference file exits with code 2."""
        code, data = _run(
            capsys, ["match", "--reference", str(tmp_path / "none.json"), "--arabic", "مالك"]
        )

        assert code == 2
        assert data["errors"][0]["code"] == "REFERENCE_LOAD_ERROR"

    def test_invalid_config(
        self,
        capsys: pytest.CaptureFixture[str],
        reference_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Invalid configuration exits with code 2."""
        monkeypatch.setenv("ISNAD_MATCH_TOP_N", "zero")
        code, data = _run(
            capsys, ["match", "--reference", str(reference_file), "--arabic", "مالك"]
        )

        assert code == 2
        assert data["errors"][0]["code"] == "CONFIG_ERROR"


class TestAnalyze:
    """analyze command."""

    def test_analyze_file(
        self, capsys: pytest.CaptureFixture[str], reference_file: Path, tmp_path: Path
    ) -> None:
        """An extracted chain file is matched and graded."""
        chain_path = tmp_path / "chain.json"
        chain_path.write_text(
            json.dumps(
                {
                    "chainText": "حدثنا مالك عن نافع عن ابن عمر",
                    "narrators": [
                        {"number": 1, "arabicName": "عبد الله بن عمر", "englishName": ""},
                        {"number": 2, "arabicName": "نافع", "englishName": "Nafi'"},
                        {"number": 3, "arabicName": "مالك بن أنس", "englishName": ""},
                    ],
                },
                ensure_ascii=False,
            ),
            encoding="utf-8",
        )

        code, data = _run(
            capsys,
            ["analyze", "--reference", str(reference_file), "--input", str(chain_path)],
        )

        assert code == 0
        assert data["ok"] is True
        assert data["summary"] == {"total": 3, "matched": 3, "unmatched": 0}
        # (10 + 10 + 9.7) / 3
        assert data["chain_grade"] == 9.9

    def test_analyze_invalid_json(
        self, capsys: pytest.CaptureFixture[str], reference_file: Path, tmp_path: Path
    ) -> None:
        """Malformed input exits with code 2."""
        bad = tmp_path / "bad.json"
        bad.write_text("[", encoding="utf-8")

        code, data = _run(
            capsys, ["analyze", "--reference", str(reference_file), "--input", str(bad)]
        )

        assert code == 2
        assert data["errors"][0]["code"] == "INVALID_JSON"

    def test_analyze_duplicate_positions(
        self,
        capsys: pytest.CaptureFixture[str],
        reference_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Duplicate positions exit with code 2."""
        links = [{"position": 1, "arabicName": "نافع"}, {"position": 1, "arabicName": "مالك"}]
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(links, ensure_ascii=False)))

        code, data = _run(capsys, ["analyze", "--reference", str(reference_file)])

        assert code == 2
        assert data["errors"][0]["code"] == "CHAIN_ERROR"


class TestChain:
    """chain command."""

    def test_chain_from_stdin(
        self, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Tagged links are graded and rolled up."""
        chain = {
            "id": "c-1",
            "narrators": [
                {"position": 2, "reputation": ["Thiqah"]},
                {"position": 1, "reputation": ["Companion"]},
                {"position": 3, "calculatedGrade": 8.0},
            ],
        }
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(chain)))

        code, data = _run(capsys, ["chain"])

        assert code == 0
        assert data["chain_id"] == "c-1"
        assert [n["calculated_grade"] for n in data["narrators"]] == [10.0, 9.0, 8.0]
        assert data["chain_grade"] == 9.0
        assert data["description"] == "Excellent"

    def test_chain_unknown_tag(
        self, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Unknown tags in a chain exit with code 2."""
        chain = {"narrators": [{"position": 1, "reputation": ["Great"]}]}
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(chain)))

        code, data = _run(capsys, ["chain"])

        assert code == 2
        assert data["errors"][0]["code"] == "VALIDATION_ERROR"

    def test_deterministic_output(
        self, capsys: pytest.CaptureFixture[str], reference_file: Path
    ) -> None:
        """Repeated runs print identical JSON."""
        argv = ["match", "--reference", str(reference_file), "--english", "Abdullah"]
        main(argv)
        first = capsys.readouterr().out
        main(argv)
        second = capsys.readouterr().out

        assert first == second

    def test_chain_non_finite_grade(
        self, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """An infinite precomputed grade is invalid input, not an internal error."""
        raw = '{"narrators": [{"position": 1, "calculatedGrade": Infinity}]}'
        monkeypatch.setattr("sys.stdin", io.StringIO(raw))

        code, data = _run(capsys, ["chain"])

        assert code == 2
        assert data["errors"][0]["code"] == "VALIDATION_ERROR"
