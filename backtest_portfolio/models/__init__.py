"""Data models and entities."""

from backtest_portfolio.models.core import (
    MS_IN_DAY,
    BacktestInfo,
    ChartPoint,
    Deal,
    DealTimelineItem,
    DealTimelineRow,
    EquityEvent,
    TimeInterval,
)
from backtest_portfolio.models.enums import DealStatus, OutputFormat
from backtest_portfolio.models.exceptions import (
    BacktestPortfolioError,
    DataIntegrityError,
    InputFileError,
)

__all__ = [
    "MS_IN_DAY",
    "BacktestInfo",
    "ChartPoint",
    "Deal",
    "DealTimelineItem",
    "DealTimelineRow",
    "EquityEvent",
    "TimeInterval",
    "DealStatus",
    "OutputFormat",
    "BacktestPortfolioError",
    "DataIntegrityError",
    "InputFileError",
]
