"""
Logging configuration for the aggregation commands.

Console output goes through Rich when stderr is a terminal and through a plain
stream handler otherwise (pipes, CI). ``--log-file`` adds a JSON-lines file
log so that runs can be inspected after the fact.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


_PLAIN_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _console_handler() -> logging.Handler:
    if sys.stderr.isatty():
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt=_DATE_FORMAT))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def setup_logging(level: str = "WARNING", log_file: Path | None = None) -> None:
    """
    Configure the root logger for one CLI run.

    Replaces any handlers already installed, so calling it twice in the same
    process does not duplicate output.

    Args:
        level: Logging level name; unknown names fall back to WARNING.
        log_file: Optional path of a JSON-lines log; parent directories are
            created.

    Examples:
        >>> setup_logging(level="DEBUG", log_file=Path("logs/summarize.jsonl"))
        >>> logging.getLogger("backtest_portfolio").info("Loaded %d backtests", 3)
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()
    root_logger.addHandler(_console_handler())

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    root_logger.debug("Logging configured: level=%s, file=%s", level, log_file)


class JSONFormatter(logging.Formatter):
    """One JSON object per record: UTC timestamp, level, logger, message."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)
