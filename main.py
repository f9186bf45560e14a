import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console

from grading import (
    BlockNotFoundError,
    EmptySubmissionError,
    EvaluationConfig,
    UnsupportedKindError,
    evaluate,
    infer_kind,
    list_blocks,
    resolve_kind,
)
from ui import BlockListTable, ErrorPanel, VerdictPanel
from ui.styles import CONSOLE, ERROR_CONSOLE

logger = logging.getLogger(__name__)

# Process exit codes
EXIT_CORRECT = 0
EXIT_INCORRECT = 1
EXIT_NOT_FOUND = 2
EXIT_EMPTY_SUBMISSION = 3
EXIT_UNSUPPORTED_KIND = 4

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with subcommands."""
    parser = argparse.ArgumentParser(description="Interactive block answer grading")
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Evaluate subcommand
    eval_parser = subparsers.add_parser(
        "evaluate", parents=[common], help="Evaluate a submitted answer"
    )
    eval_parser.add_argument("content_file", type=Path, help="Content document (JSON)")
    eval_parser.add_argument(
        "--block",
        "-b",
        required=True,
        help="Id of the block to evaluate",
    )
    eval_parser.add_argument(
        "--kind",
        "-k",
        default=None,
        help="Exercise kind (gap_fill, matching, multiple_choice, ordering); "
        "inferred from the content when omitted",
    )
    answer_group = eval_parser.add_mutually_exclusive_group()
    answer_group.add_argument(
        "--answer",
        "-a",
        default=None,
        help="Submitted answer as JSON (plain text is taken as-is)",
    )
    answer_group.add_argument(
        "--answer-file",
        type=Path,
        default=None,
        help="File holding the submitted answer as JSON",
    )
    eval_parser.add_argument(
        "--lang",
        choices=["fa", "en"],
        default="fa",
        help="Feedback language (default: fa)",
    )
    eval_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the verdict as JSON instead of a panel",
    )

    # Inspect subcommand
    inspect_parser = subparsers.add_parser(
        "inspect", parents=[common], help="List the blocks of a content document"
    )
    inspect_parser.add_argument("content_file", type=Path, help="Content document (JSON)")

    return parser


def parse_answer(text: str) -> Any:
    """Decode a submitted answer given on the command line."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.debug("Answer is not JSON; passing it through as text")
        return text


def load_submission(args) -> Any:
    if args.answer_file is not None:
        return parse_answer(args.answer_file.read_text(encoding="utf-8"))
    if args.answer is not None:
        return parse_answer(args.answer)
    return None


def report_error(args, title: str, error: Exception, hint: str | None = None) -> None:
    if getattr(args, "json", False):
        print(json.dumps({"error": title, "message": str(error)}, ensure_ascii=False))
    else:
        ERROR_CONSOLE.print(ErrorPanel(title, str(error), hint))


def run_evaluate(args, console: Console = CONSOLE) -> int:
    """Run the evaluate subcommand and return the process exit code."""
    try:
        content = args.content_file.read_text(encoding="utf-8")
        submission = load_submission(args)
    except OSError as e:
        report_error(args, "Cannot read file", e, "Check the path and its permissions.")
        return EXIT_NOT_FOUND
    config = EvaluationConfig(language=args.lang)

    try:
        kind = resolve_kind(args.kind) if args.kind else infer_kind(content, args.block)
        verdict = evaluate(content, args.block, kind, submission, config)
    except UnsupportedKindError as e:
        report_error(args, "Unsupported kind", e, "Use gap_fill, matching, multiple_choice or ordering.")
        return EXIT_UNSUPPORTED_KIND
    except BlockNotFoundError as e:
        report_error(args, "Block not found", e, "Run the inspect command to list block ids.")
        return EXIT_NOT_FOUND
    except EmptySubmissionError as e:
        report_error(args, "Empty submission", e)
        return EXIT_EMPTY_SUBMISSION

    if args.json:
        print(json.dumps(verdict.to_payload(), ensure_ascii=False, indent=2))
    else:
        console.print(VerdictPanel(verdict, kind, args.block))

    return EXIT_CORRECT if verdict.is_correct else EXIT_INCORRECT


def run_inspect(args, console: Console = CONSOLE) -> int:
    """Run the inspect subcommand."""
    try:
        content = args.content_file.read_text(encoding="utf-8")
    except OSError as e:
        report_error(args, "Cannot read file", e, "Check the path and its permissions.")
        return EXIT_NOT_FOUND
    blocks = list_blocks(content)
    console.print(BlockListTable(blocks, source=args.content_file.name))
    return EXIT_CORRECT if blocks else EXIT_NOT_FOUND


def main(argv: list[str] | None = None) -> int:
    """Main entry point with CLI routing."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, getattr(args, "log_level", "WARNING")),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "evaluate":
        return run_evaluate(args)
    if args.command == "inspect":
        return run_inspect(args)

    parser.print_help()
    return EXIT_INCORRECT


if __name__ == "__main__":
    sys.exit(main())
