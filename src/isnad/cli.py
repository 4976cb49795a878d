"""Isnad CLI - Deterministic command-line interface for matching and grading.

Usage:
    isnad tags
    isnad grade TAG [TAG ...]
    isnad match --reference FILE [--arabic NAME] [--english NAME] [--all]
    isnad analyze --reference FILE [--input PATH]
    isnad chain [--input PATH]

Output is JSON on stdout with sorted keys; logs go to stderr.

Exit codes:
    0: Success
    1: Internal error
    2: Invalid input (unknown tag, malformed JSON, invalid reference data or config)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from pydantic import ValidationError

from isnad.config import MatchingConfigError, load_matching_config
from isnad.models.chain import Chain
from isnad.services.analysis.service import ChainAnalysisError, ChainAnalysisService
from isnad.services.grading.calculator import explain_narrator_grade
from isnad.services.grading.reputation import (
    REPUTATION_TABLE_VERSION,
    UnknownReputationTagError,
    describe_grade,
    table_as_dict,
)
from isnad.services.matching.matcher import NameMatcher
from isnad.services.reference.loader import ReferenceLoadError, load_reference_narrators

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _output_json(data: dict[str, Any]) -> None:
    """Output JSON to stdout with deterministic ordering."""
    print(json.dumps(data, sort_keys=True, indent=2, ensure_ascii=False))


def _make_error_result(code: str, message: str) -> dict[str, Any]:
    return {"ok": False, "errors": [{"code": code, "message": message}]}


def _load_json_input(input_path: str | None) -> tuple[Any, str | None]:
    """Load JSON from file or stdin.

    Returns:
        Tuple of (parsed_data, error_message). If error_message is not None,
        parsed_data should be ignored.
    """
    try:
        if input_path:
            with open(input_path, encoding="utf-8") as f:
                content = f.read()
        else:
            content = sys.stdin.read()

        if not content.strip():
            return None, "Empty input"

        return json.loads(content), None
    except FileNotFoundError:
        return None, f"File not found: {input_path}"
    except json.JSONDecodeError as e:
        return None, f"Invalid JSON: {e}"
    except OSError as e:
        return None, f"Cannot read input: {e}"


def cmd_tags(args: argparse.Namespace) -> int:
    """Dump the reputation tag table with its version."""
    _output_json(table_as_dict())
    return 0


def cmd_grade(args: argparse.Namespace) -> int:
    """Grade a narrator from tags given on the command line.

    Exit codes:
        0: Graded
        2: A tag is not in the reputation vocabulary
    """
    try:
        explanation = explain_narrator_grade(args.tags)
    except UnknownReputationTagError as e:
        _output_json(_make_error_result("UNKNOWN_TAG", str(e)))
        return 2

    result = explanation.to_dict()
    result["description"] = describe_grade(explanation.score)
    result["table_version"] = REPUTATION_TABLE_VERSION
    _output_json(result)
    return 0


def cmd_match(args: argparse.Namespace) -> int:
    """Rank reference narrators for one name pair.

    Without --all the suggestion floor and top-N from the environment apply.
    """
    config = load_matching_config()
    reference = load_reference_narrators(args.reference)
    matcher = NameMatcher(reference, arabic_weight=config.arabic_weight)

    candidates = matcher.match(args.arabic, args.english)
    if not args.all:
        candidates = [c for c in candidates if c.confidence >= config.suggestion_floor]
        candidates = candidates[: config.top_n]

    _output_json(
        {
            "arabic_name": args.arabic or "",
            "english_name": args.english or "",
            "candidates": [c.to_dict() for c in candidates],
        }
    )
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    """Match and grade an extracted chain.

    Input is a list of links or an object with "narrators" and optional
    "chainText"/"title".
    """
    data, error_msg = _load_json_input(args.input)
    if error_msg is not None:
        _output_json(_make_error_result("INVALID_JSON", error_msg))
        return 2

    if isinstance(data, dict):
        links = data.get("narrators")
        chain_text = data.get("chainText", data.get("chain_text", "")) or ""
        title = data.get("title")
    else:
        links, chain_text, title = data, "", None
    if not isinstance(links, list):
        _output_json(_make_error_result("INVALID_INPUT", "narrators array is required"))
        return 2

    config = load_matching_config()
    reference = load_reference_narrators(args.reference)
    service = ChainAnalysisService(config)
    analysis = service.analyze(links, reference, chain_text=chain_text, title=title)

    result = analysis.to_dict()
    result["ok"] = True
    _output_json(result)
    return 0


def cmd_chain(args: argparse.Namespace) -> int:
    """Grade a chain whose links carry tags and/or precomputed grades."""
    data, error_msg = _load_json_input(args.input)
    if error_msg is not None:
        _output_json(_make_error_result("INVALID_JSON", error_msg))
        return 2

    chain = Chain.model_validate(data).regrade()
    chain_grade = chain.grade()
    _output_json(
        {
            "chain_id": chain.chain_id,
            "narrators": [
                {
                    "position": n.position,
                    "arabic_name": n.arabic_name,
                    "english_name": n.english_name,
                    "reputation": [t.value for t in n.reputation],
                    "calculated_grade": n.calculated_grade,
                }
                for n in chain.ordered_narrators()
            ],
            "chain_grade": chain_grade,
            "description": describe_grade(chain_grade) if chain_grade is not None else None,
        }
    )
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="isnad",
        description="Isnad - narrator matching and reliability grading CLI",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging on stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("tags", help="Show the reputation tag table")

    grade_parser = subparsers.add_parser("grade", help="Grade a narrator from reputation tags")
    grade_parser.add_argument("tags", nargs="+", metavar="TAG", help="Reputation tag")

    match_parser = subparsers.add_parser("match", help="Match one name against a reference set")
    match_parser.add_argument(
        "--reference", required=True, metavar="FILE", help="Reference narrators JSON file"
    )
    match_parser.add_argument("--arabic", default="", metavar="NAME", help="Arabic name")
    match_parser.add_argument("--english", default="", metavar="NAME", help="English name")
    match_parser.add_argument(
        "--all",
        action="store_true",
        default=False,
        help="Show every non-zero candidate (ignore suggestion floor and top-N)",
    )

    analyze_parser = subparsers.add_parser("analyze", help="Match and grade an extracted chain")
    analyze_parser.add_argument(
        "--reference", required=True, metavar="FILE", help="Reference narrators JSON file"
    )
    analyze_parser.add_argument(
        "--input",
        required=False,
        default=None,
        metavar="PATH",
        help="Path to extracted chain JSON (reads from stdin if omitted)",
    )

    chain_parser = subparsers.add_parser("chain", help="Grade a chain of tagged links")
    chain_parser.add_argument(
        "--input",
        required=False,
        default=None,
        metavar="PATH",
        help="Path to chain JSON (reads from stdin if omitted)",
    )

    return parser


COMMAND_DISPATCH = {
    "tags": cmd_tags,
    "grade": cmd_grade,
    "match": cmd_match,
    "analyze": cmd_analyze,
    "chain": cmd_chain,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Exit codes:
        0: Success
        1: Internal error (unexpected)
        2: Invalid input
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return COMMAND_DISPATCH[args.command](args)
    except ReferenceLoadError as e:
        _output_json(_make_error_result("REFERENCE_LOAD_ERROR", str(e)))
        return 2
    except MatchingConfigError as e:
        _output_json(_make_error_result("CONFIG_ERROR", str(e)))
        return 2
    except ChainAnalysisError as e:
        _output_json(_make_error_result("CHAIN_ERROR", str(e)))
        return 2
    except ValidationError as e:
        _output_json(_make_error_result("VALIDATION_ERROR", str(e)))
        return 2
    except Exception as e:
        # Fail-closed: unexpected errors return exit code 1
        logger.exception("Unexpected error in %s command", args.command)
        _output_json(_make_error_result("INTERNAL_ERROR", str(e)))
        return 1


if __name__ == "__main__":
    sys.exit(main())
