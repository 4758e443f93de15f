from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import find_dotenv, load_dotenv

from personsync.app import run_reconciliation
from personsync.config import ConfigurationError, configure_logging, get_directory_config
from personsync.domain.csv_import import DEFAULT_HEADERS, HeaderMismatch, HeaderNames

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from personsync.app import ReconcileSummary

log = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Not an integer: {value}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError(f"Must be at least 1: {value}")
    return number


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="personsync",
        description="Reconcile a CSV of people against the person directory",
    )
    parser.add_argument("file", type=Path, help="CSV file with a header row")

    headers = parser.add_argument_group(
        "headers", "Column headers (give all three or none; defaults first_name/last_name/email)"
    )
    headers.add_argument("--first-name-header", type=str, help="Header of the first name column")
    headers.add_argument("--last-name-header", type=str, help="Header of the last name column")
    headers.add_argument("--email-header", type=str, help="Header of the email column")

    parser.add_argument(
        "--batch-size",
        type=_positive_int,
        default=None,
        help="Number of existence checks per batch (defaults to config)",
    )
    parser.add_argument(
        "--max-batches",
        type=_positive_int,
        help="Maximum number of check batches before stopping",
    )
    parser.add_argument(
        "--recheck-failed",
        action="store_true",
        help="Re-issue existence checks that failed once all batches ran",
    )
    parser.add_argument(
        "--process",
        action="store_true",
        help="Create or update every checked record in the directory",
    )
    parser.add_argument(
        "--attribute-key",
        type=str,
        help="Attribute set by processing (defaults to DIRECTORY_ATTRIBUTE_KEY)",
    )
    parser.add_argument(
        "--attribute-value",
        type=str,
        help="Attribute value set by processing (defaults to DIRECTORY_ATTRIBUTE_VALUE)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level name (DEBUG, INFO, WARNING, ...)",
    )

    args = parser.parse_args(list(argv))
    given = [args.first_name_header, args.last_name_header, args.email_header]
    if any(value is not None for value in given) and not all(value is not None for value in given):
        parser.error(
            "--first-name-header, --last-name-header and --email-header must be given together"
        )
    return args


def _header_names(args: argparse.Namespace) -> HeaderNames:
    if args.first_name_header is None:
        return DEFAULT_HEADERS
    return HeaderNames(
        first_name=args.first_name_header,
        last_name=args.last_name_header,
        email=args.email_header,
    )


def _log_summary(summary: ReconcileSummary) -> None:
    log.info(
        "Records: total=%s, skipped_rows=%s, batches=%s",
        summary.total,
        summary.skipped_rows,
        summary.batches,
    )
    log.info(
        "Existence: exists=%s, not_found=%s, check_error=%s, unchecked=%s",
        summary.exists,
        summary.not_found,
        summary.check_error,
        summary.unchecked,
    )
    log.info(
        "Processing: created=%s, updated=%s, errors=%s",
        summary.created,
        summary.updated,
        summary.processing_errors,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=parsed_args.log_level)

    try:
        headers = _header_names(parsed_args)
        config = get_directory_config()
        attribute_key = parsed_args.attribute_key or config.attribute_key
        attribute_value = parsed_args.attribute_value or config.attribute_value
        if parsed_args.process and (not attribute_key or not attribute_value):
            raise ValueError(  # noqa: TRY301
                "--process needs --attribute-key and --attribute-value "
                "(or DIRECTORY_ATTRIBUTE_KEY / DIRECTORY_ATTRIBUTE_VALUE)"
            )
        text = parsed_args.file.read_text(encoding="utf-8-sig")
    except (ConfigurationError, ValueError, OSError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        summary = run_reconciliation(
            text,
            config=config,
            headers=headers,
            batch_size=parsed_args.batch_size,
            max_batches=parsed_args.max_batches,
            recheck_failed=parsed_args.recheck_failed,
            process=parsed_args.process,
            attribute_key=attribute_key,
            attribute_value=attribute_value,
        )
    except HeaderMismatch:
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)

    _log_summary(summary)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run(argv: Sequence[str] | None = None) -> None:
    """Console script entry point: load ``.env`` from the working directory, then run."""
    load_dotenv(find_dotenv(usecwd=True))
    signal(SIGINT, sigint_handler)
    main(argv)


if __name__ == "__main__":
    run()
