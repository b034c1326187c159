"""Portfolio aggregation engine for historical trading-strategy backtests.

Merges the deal streams of many backtests into concurrency-limited,
time-ordered portfolio metrics: equity curves, drawdown, exposure series and
per-deal admission decisions.
"""

__version__ = "0.1.0"
