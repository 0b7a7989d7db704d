from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from larder.app import clean_remote, clone_remote, dump_remote, merge_ingredients
from larder.common import configure_logging
from larder.config import ConfigurationError
from larder.domain.errors import IdentificationError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from larder.domain.maintenance import RunReport

log = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be positive: {number}")
    return number


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="larder", description="Maintain the recipe graph of a recipe server"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every request")
    parser.add_argument(
        "-r",
        "--remote",
        type=str,
        help="Base URL of the remote to work on (defaults to LARDER_REMOTE or the config file)",
    )
    parser.add_argument(
        "--max-in-flight",
        type=_positive_int,
        help="Maximum number of concurrent requests per remote",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    clone = subparsers.add_parser("clone", help="Copy every recipe onto another remote")
    clone.add_argument("destination", help="Base URL of the remote to copy onto")

    dump = subparsers.add_parser("dump", help="Write an anonymized snapshot as JSON")
    dump.add_argument("-o", "--output", type=Path, help="File to write instead of stdout")

    subparsers.add_parser("clean", help="Delete ingredients and labels no recipe uses")

    merge = subparsers.add_parser("merge", help="Fold one ingredient into another")
    merge.add_argument("target", help="Ingredient to keep (id or name)")
    merge.add_argument("obsolete", help="Ingredient to remove (id or name)")

    return parser.parse_args(list(argv))


def _run(args: argparse.Namespace) -> RunReport:
    if args.command == "clone":
        report = clone_remote(args.remote, args.destination, max_in_flight=args.max_in_flight)
        log.info(
            "Clone finished: recipes=%s/%s, ingredients=%s",
            len(report.created_recipes),
            report.fetched_recipes,
            report.created_ingredients,
        )
        return report
    if args.command == "dump":
        report = dump_remote(args.remote, max_in_flight=args.max_in_flight)
        if report.document is not None:
            _write_document(report.document.to_payload(), args.output)
        return report
    if args.command == "clean":
        report = clean_remote(args.remote, max_in_flight=args.max_in_flight)
        log.info(
            "Clean finished: ingredients=%s, labels=%s",
            len(report.deleted_ingredients),
            len(report.deleted_labels),
        )
        return report
    if args.command == "merge":
        report = merge_ingredients(
            args.remote, args.target, args.obsolete, max_in_flight=args.max_in_flight
        )
        log.info(
            "Merge finished: moved=%s, obsolete_deleted=%s",
            len(report.moved),
            report.obsolete_deleted,
        )
        return report
    raise ValueError(f"Unsupported command: {args.command}")


def _write_document(payload: dict[str, object], output: Path | None) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    if output is None:
        sys.stdout.write(text)
        return
    output.write_text(text, encoding="utf-8")
    log.info("Wrote dump to %s", output)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        report = _run(parsed_args)
    except (ConfigurationError, IdentificationError) as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(EXIT_USAGE)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(EXIT_FAILURE)

    if report.warnings or report.failures:
        log.warning(
            "%s: %d warning(s), %d failure(s)",
            parsed_args.command,
            len(report.warnings),
            len(report.failures),
        )
    if not report.succeeded:
        log.error("%s failed: %s", parsed_args.command, report.fatal)
        sys.exit(EXIT_FAILURE)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
