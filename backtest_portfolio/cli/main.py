import argparse
import sys

from .run_limit_impact import configure_limit_impact_parser, run_limit_impact_command
from .run_summary import configure_summarize_parser, run_summarize_command


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the 'backtest-portfolio' CLI.
    """
    parser = argparse.ArgumentParser(
        prog="backtest-portfolio",
        description="Aggregate backtests into a concurrency-limited portfolio",
    )
    subparsers = parser.add_subparsers(
        dest="command", required=True, help="Subcommands"
    )

    # -------------------------------------------------------------------------
    # Subcommand: summarize
    # -------------------------------------------------------------------------
    summarize_parser = subparsers.add_parser(
        "summarize",
        help="Summarize a portfolio of backtests",
        description="Compute per-backtest metrics and the portfolio summary under a concurrency limit.",
    )
    configure_summarize_parser(summarize_parser)

    # -------------------------------------------------------------------------
    # Subcommand: limit-impact
    # -------------------------------------------------------------------------
    limit_parser = subparsers.add_parser(
        "limit-impact",
        help="Compare portfolio outcomes across concurrency limits",
        description="Summarize the portfolio once per concurrency limit and once unlimited.",
    )
    configure_limit_impact_parser(limit_parser)

    # -------------------------------------------------------------------------
    # Parse & Execute
    # -------------------------------------------------------------------------
    parsed_args = parser.parse_args(args)

    if parsed_args.command == "summarize":
        return run_summarize_command(parsed_args)
    if parsed_args.command == "limit-impact":
        return run_limit_impact_command(parsed_args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
