"""Command-line interface modules.

Available Commands:
-------------------

summarize
    Compute per-backtest metrics and the portfolio summary.

    Usage:
        backtest-portfolio summarize INPUT [options]

    Options:
        --max-concurrent N: Concurrency limit (default: 3)
        --position-blocking: One open deal per symbol and algorithm
        --config FILE: JSON aggregation settings (flags take precedence)
        --format {text|json}: Report format (default: text)
        --output PATH: Report file or directory (default: stdout)
        --timeline-csv PATH: Export the deal admission timeline
        --strict: Fail on unusable cycles instead of skipping them
        --log-level {DEBUG|INFO|WARNING|ERROR}: Logging level

limit-impact
    Summarize the portfolio for every limit 1..N and unlimited.

    Usage:
        backtest-portfolio limit-impact INPUT [--max-limit N] [options]

Input:
------

A JSON list of entries (or an object with a "backtests" list), each entry
holding "statistics", optional "detail" and "config", and "cycles".

Exit codes: 0 on success, 1 on unreadable input, schema violations or
invalid settings.
"""
