"""Input loading and report formatting."""

from .formatters import (
    format_json_output,
    format_limit_impact_json,
    format_limit_impact_text,
    format_text_output,
    generate_output_filename,
    timeline_to_frame,
    write_timeline_csv,
)
from .loader import load_backtest_records, load_backtests


__all__ = [
    "format_json_output",
    "format_limit_impact_json",
    "format_limit_impact_text",
    "format_text_output",
    "generate_output_filename",
    "load_backtest_records",
    "load_backtests",
    "timeline_to_frame",
    "write_timeline_csv",
]
