"""
Pytest configuration and global fixtures.

This module provides shared test fixtures used across the test suite:
deal and backtest factories, raw record payloads as the remote service
returns them, and temporary export files.
"""

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from backtest_portfolio.models.core import MS_IN_DAY, BacktestInfo, Deal
from backtest_portfolio.models.enums import DealStatus


HOUR = 3_600_000
# Midnight UTC, 2023-01-08
T0 = 19_365 * MS_IN_DAY


@pytest.fixture()
def make_deal():
    """
    Provide a Deal factory with sensible defaults.

    Examples:
        >>> def test_something(make_deal):
        ...     deal = make_deal(1, "A", 0, 10, net=5.0)
        ...     assert deal.is_closed
    """

    def _create(
        deal_id,
        backtest_id,
        start,
        end,
        net=0.0,
        status=DealStatus.FINISHED,
        mae=0.0,
        mfe=0.0,
        symbol="",
        algorithm="",
    ):
        return Deal(
            id=deal_id,
            backtest_id=backtest_id,
            start=start,
            end=end,
            status=status,
            net=net if status.is_closed else 0.0,
            mae_absolute=mae,
            mfe_absolute=mfe,
            backtest_name=f"Backtest {backtest_id}",
            quote_currency="USDT",
            symbol=symbol,
            algorithm=algorithm,
        )

    return _create


@pytest.fixture()
def make_backtest():
    """Provide a BacktestInfo factory wrapping a list of deals."""

    def _create(backtest_id, deals, span_start=None, span_end=None, symbol=""):
        return BacktestInfo(
            id=backtest_id,
            name=f"Backtest {backtest_id}",
            symbol=symbol,
            quote_currency="USDT",
            span_start=span_start,
            span_end=span_end,
            deals=tuple(deals),
        )

    return _create


def _iso(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=UTC).isoformat().replace("+00:00", "Z")


@pytest.fixture()
def raw_cycle():
    """Provide a factory for raw cycle payloads (camelCase, as fetched)."""

    def _create(cycle_id, start_ms, end_ms, net, status="FINISHED", mae=-1.0, mfe=2.0):
        return {
            "id": cycle_id,
            "status": status,
            "date": _iso(end_ms),
            "netQuote": net,
            "maeAbsolute": mae,
            "mfeAbsolute": mfe,
            "orders": [
                {
                    "side": "BUY",
                    "type": "MARKET",
                    "status": "FILLED",
                    "createdAt": _iso(start_ms),
                    "executedAt": _iso(start_ms),
                }
            ],
        }

    return _create


@pytest.fixture()
def sample_export(raw_cycle):
    """
    Provide a two-backtest export document.

    Backtest 101 opens at T0 and T0+1h, backtest 202 at T0+2h; all deals
    last 8 hours, so a limit of 2 excludes the third one.
    """
    return {
        "backtests": [
            {
                "statistics": {
                    "id": 101,
                    "name": "BTC grid",
                    "symbol": "BTC/USDT",
                    "algorithm": "LONG",
                    "quote": "USDT",
                    "from": _iso(T0),
                    "to": _iso(T0 + 3 * MS_IN_DAY),
                },
                "cycles": [
                    raw_cycle(1, T0, T0 + 8 * HOUR, 12.5),
                    raw_cycle(2, T0 + HOUR, T0 + 9 * HOUR, -4.0),
                ],
            },
            {
                "statistics": {
                    "id": 202,
                    "name": "ETH dca",
                    "from": _iso(T0),
                    "to": _iso(T0 + 3 * MS_IN_DAY),
                },
                "detail": {"id": 202, "symbol": "ETH/USDT", "quote": "USDT"},
                "config": {"algorithm": "SHORT", "deposit": {"amount": 1000}},
                "cycles": [raw_cycle(7, T0 + 2 * HOUR, T0 + 10 * HOUR, 30.0)],
            },
        ]
    }


@pytest.fixture()
def export_file(tmp_path, sample_export) -> Path:
    """Write the sample export to a temporary JSON file."""
    path = tmp_path / "backtests.json"
    path.write_text(json.dumps(sample_export), encoding="utf-8")
    return path
