"""Shared argument definitions and output handling for CLI commands."""

import argparse
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from ..io.formatters import generate_output_filename
from ..models.enums import OutputFormat


logger = logging.getLogger(__name__)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the input, output and logging options every command shares."""
    parser.add_argument(
        "input",
        type=Path,
        help="JSON export of backtest records (list or {\"backtests\": [...]})",
    )
    parser.add_argument(
        "--position-blocking",
        action="store_true",
        help="Reject a deal while another deal with the same symbol and algorithm is open",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=[fmt.value for fmt in OutputFormat],
        default=OutputFormat.TEXT.value,
        help="Report format (default: text)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the report to this file, or into this directory with a generated name",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on the first unusable cycle instead of skipping it",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file as JSON lines",
    )


def emit_report(
    content: str, command: str, output_format: OutputFormat, output: Path | None
) -> Path | None:
    """
    Print a report to stdout or write it to disk.

    Args:
        content: Formatted report.
        command: Command name used for generated filenames.
        output_format: Report format.
        output: Target file or directory; None prints to stdout.

    Returns:
        The written path, or None when printed.
    """
    if output is None:
        sys.stdout.write(content + "\n")
        return None

    if output.is_dir():
        output = output / generate_output_filename(
            command, output_format, datetime.now(UTC)
        )
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content + "\n", encoding="utf-8")
    logger.info("Report written to %s", output)
    return output
