"""
Loading of exported backtest records.

This module reads a JSON export of previously fetched backtest records and
turns it into normalized BacktestInfo objects. The export is either a list of
entries or an object with a ``backtests`` list; each entry carries the core
statistics, optional detail statistics, an optional config record and the
cycle list.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from ..backtest.enrichment import attach_deposit, enrich_statistics
from ..backtest.normalizer import normalize_backtest
from ..models.core import BacktestInfo
from ..models.exceptions import DataIntegrityError, InputFileError
from ..models.records import BacktestRecord


logger = logging.getLogger(__name__)


def load_backtest_records(path: Path) -> list[BacktestRecord]:
    """
    Read and validate the raw records of an export file.

    Args:
        path: Path to the JSON export.

    Returns:
        Validated records in file order.

    Raises:
        InputFileError: If the file is missing, unreadable, not valid JSON or
            not shaped as a list of entries.
        DataIntegrityError: If an entry does not match the record schema.
    """
    if not path.exists():
        raise InputFileError(f"Input file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            document = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise InputFileError(f"Cannot read input file {path}: {exc}") from exc

    if isinstance(document, dict):
        document = document.get("backtests")
    if not isinstance(document, list):
        raise InputFileError(
            f"Input file {path} must contain a list of backtests "
            "or an object with a 'backtests' list"
        )

    records: list[BacktestRecord] = []
    for position, entry in enumerate(document):
        try:
            records.append(BacktestRecord.model_validate(entry))
        except ValidationError as exc:
            raise DataIntegrityError(
                "Backtest entry does not match the record schema",
                context={
                    "entry": position,
                    "errors": exc.error_count(),
                    "first_error": exc.errors()[0]["msg"],
                },
            ) from exc

    logger.info("Loaded %d backtest records from %s", len(records), path)
    return records


def record_to_backtest(record: BacktestRecord, *, strict: bool = False) -> BacktestInfo:
    """Enrich one record and normalize it into a BacktestInfo."""
    statistics = enrich_statistics(record.statistics, record.detail)
    statistics = attach_deposit(statistics, record.config)
    return normalize_backtest(statistics, record.cycles, strict=strict)


def load_backtests(path: Path, *, strict: bool = False) -> list[BacktestInfo]:
    """
    Load an export file into normalized backtests.

    Args:
        path: Path to the JSON export.
        strict: Reject the first unusable cycle instead of skipping it.

    Returns:
        One BacktestInfo per entry, in file order.

    Raises:
        InputFileError: If the file cannot be read.
        DataIntegrityError: On schema violations, or on unusable cycles in
            strict mode.
    """
    backtests = [
        record_to_backtest(record, strict=strict)
        for record in load_backtest_records(path)
    ]

    skipped = sum(info.skipped_cycles for info in backtests)
    if skipped:
        logger.warning("Skipped %d unusable cycles while loading %s", skipped, path)

    return backtests
