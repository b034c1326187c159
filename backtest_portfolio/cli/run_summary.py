"""
Portfolio summary command.

Loads an export of backtest records, computes per-backtest metrics and
summarizes the portfolio under the configured concurrency limit.

Usage:
    backtest-portfolio summarize backtests.json --max-concurrent 2

    # JSON report plus the admission timeline as CSV
    backtest-portfolio summarize backtests.json --format json \
        --output reports/ --timeline-csv reports/timeline.csv
"""

import argparse
import logging
from pathlib import Path

from pydantic import ValidationError

from ..backtest.metrics import compute_backtest_metrics
from ..backtest.summary import summarize_portfolio
from ..config.parameters import AggregationConfig, load_aggregation_config_file
from ..io.formatters import format_json_output, format_text_output, write_timeline_csv
from ..io.loader import load_backtests
from ..models.enums import OutputFormat
from ..models.exceptions import BacktestPortfolioError
from .common import add_common_arguments, emit_report
from .logging_setup import setup_logging


logger = logging.getLogger(__name__)


def configure_summarize_parser(parser: argparse.ArgumentParser) -> None:
    """Register the summarize command options."""
    add_common_arguments(parser)
    parser.add_argument(
        "--max-concurrent",
        type=int,
        default=None,
        help="Maximum concurrently open deals across all backtests (default: 3)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file with aggregation settings; command-line flags take precedence",
    )
    parser.add_argument(
        "--timeline-csv",
        type=Path,
        default=None,
        help="Write the per-deal admission timeline to this CSV file",
    )


def resolve_config(args: argparse.Namespace) -> AggregationConfig:
    """Build the aggregation config from an optional file plus CLI overrides."""
    base = (
        load_aggregation_config_file(args.config)
        if args.config is not None
        else AggregationConfig()
    )

    overrides: dict = {}
    if args.max_concurrent is not None:
        overrides["max_concurrent_positions"] = args.max_concurrent
    if args.position_blocking:
        overrides["position_blocking"] = True

    if not overrides:
        return base
    return AggregationConfig.model_validate({**base.model_dump(), **overrides})


def run_summarize_command(args: argparse.Namespace) -> int:
    """
    Execute the summarize command.

    Returns:
        Process exit code: 0 on success, 1 on invalid input or settings.
    """
    setup_logging(level=args.log_level, log_file=args.log_file)

    try:
        config = resolve_config(args)
        backtests = load_backtests(args.input, strict=args.strict)
    except (BacktestPortfolioError, ValidationError) as exc:
        logger.error("%s", exc)
        return 1

    metrics_list = [compute_backtest_metrics(info) for info in backtests]
    summary = summarize_portfolio(metrics_list, config)

    output_format = OutputFormat(args.output_format)
    if output_format == OutputFormat.JSON:
        content = format_json_output(summary, metrics_list)
    else:
        content = format_text_output(summary, metrics_list)

    emit_report(content, "summarize", output_format, args.output)

    if args.timeline_csv is not None:
        write_timeline_csv(summary.timeline_rows, args.timeline_csv)

    return 0
