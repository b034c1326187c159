"""
Concurrency limit impact command.

Summarizes the portfolio once per limit from 1 to ``--max-limit`` (default:
number of backtests) and once without a limit.

Usage:
    backtest-portfolio limit-impact backtests.json --max-limit 5 --format json
"""

import argparse
import logging

from ..backtest.limit_impact import compute_limit_impact
from ..backtest.metrics import compute_backtest_metrics
from ..io.formatters import format_limit_impact_json, format_limit_impact_text
from ..io.loader import load_backtests
from ..models.enums import OutputFormat
from ..models.exceptions import BacktestPortfolioError
from .common import add_common_arguments, emit_report
from .logging_setup import setup_logging


logger = logging.getLogger(__name__)


def configure_limit_impact_parser(parser: argparse.ArgumentParser) -> None:
    """Register the limit-impact command options."""
    add_common_arguments(parser)
    parser.add_argument(
        "--max-limit",
        type=int,
        default=None,
        help="Highest finite limit to evaluate (default: number of backtests)",
    )


def run_limit_impact_command(args: argparse.Namespace) -> int:
    """
    Execute the limit-impact command.

    Returns:
        Process exit code: 0 on success, 1 on invalid input or settings.
    """
    setup_logging(level=args.log_level, log_file=args.log_file)

    if args.max_limit is not None and args.max_limit < 1:
        logger.error("--max-limit must be at least 1, got %d", args.max_limit)
        return 1

    try:
        backtests = load_backtests(args.input, strict=args.strict)
    except BacktestPortfolioError as exc:
        logger.error("%s", exc)
        return 1

    metrics_list = [compute_backtest_metrics(info) for info in backtests]
    points = compute_limit_impact(
        metrics_list,
        max_limit=args.max_limit,
        position_blocking=args.position_blocking,
    )

    output_format = OutputFormat(args.output_format)
    if output_format == OutputFormat.JSON:
        content = format_limit_impact_json(points)
    else:
        content = format_limit_impact_text(points)

    emit_report(content, "limit-impact", output_format, args.output)

    return 0
