"""
Unit tests for portfolio summarization.

Covers the merged equity curve and aggregate drawdown, daily concurrency
statistics, no-trade days, average concurrency and the neutral summary for
empty input.
"""

import pytest

from backtest_portfolio.backtest.metrics import compute_backtest_metrics
from backtest_portfolio.backtest.summary import (
    build_portfolio_equity,
    compute_average_concurrency,
    compute_daily_concurrency,
    compute_percentile,
    summarize_portfolio,
)
from backtest_portfolio.config.parameters import AggregationConfig
from backtest_portfolio.models.core import MS_IN_DAY, ChartPoint
from backtest_portfolio.models.enums import DealStatus


pytestmark = pytest.mark.unit

HOUR = 3_600_000
DAY = MS_IN_DAY
T0 = 19_365 * DAY


@pytest.fixture()
def two_backtests(make_deal, make_backtest):
    """Backtest A gains 100 at t=10, backtest B loses 40 at t=12."""
    a = make_backtest("A", [make_deal(1, "A", 0, 10, net=100.0)])
    b = make_backtest("B", [make_deal(1, "B", 2, 12, net=-40.0)])
    return [compute_backtest_metrics(a), compute_backtest_metrics(b)]


@pytest.fixture()
def overnight_backtests(make_deal, make_backtest):
    """Two overlapping deals spanning two UTC days inside a five-day span."""
    a = make_backtest(
        "A",
        [make_deal(1, "A", T0, T0 + 12 * HOUR, net=5.0, mae=2.0)],
        span_start=T0,
        span_end=T0 + 5 * DAY,
    )
    b = make_backtest(
        "B",
        [make_deal(1, "B", T0 + 6 * HOUR, T0 + 30 * HOUR, net=-1.0, mae=3.0)],
        span_start=T0,
        span_end=T0 + 5 * DAY,
    )
    return [compute_backtest_metrics(a), compute_backtest_metrics(b)]


class TestPortfolioEquity:
    """Test cases for the merged equity curve."""

    def test_equity_points(self, two_backtests):
        summary = summarize_portfolio(two_backtests, AggregationConfig())

        points = [(p.time, p.value) for p in summary.portfolio_equity.points]
        assert points == [(0, 0.0), (10, 100.0), (12, 60.0)]
        assert summary.portfolio_equity.min_value == 0.0
        assert summary.portfolio_equity.max_value == 100.0

    def test_aggregate_drawdown_from_merged_curve(self, two_backtests):
        summary = summarize_portfolio(two_backtests, AggregationConfig())

        assert summary.aggregate_drawdown == pytest.approx(40.0)
        assert summary.aggregate_drawdown >= max(m.max_drawdown for m in two_backtests)

    def test_avg_max_drawdown_is_mean_of_backtests(self, two_backtests):
        summary = summarize_portfolio(two_backtests, AggregationConfig())
        assert summary.avg_max_drawdown == pytest.approx(20.0)

    def test_close_ties_ordered_by_deal_id_before_backtest_id(
        self, make_deal, make_backtest
    ):
        a = make_backtest(
            "A",
            [
                make_deal(1, "A", 0, 10, net=100.0),
                make_deal(3, "A", 10, 15, net=-100.0),
                make_deal(9, "A", 16, 20, net=10.0),
            ],
        )
        b = make_backtest("B", [make_deal(2, "B", 16, 20, net=-5.0)])
        metrics_list = [compute_backtest_metrics(a), compute_backtest_metrics(b)]

        summary = summarize_portfolio(
            metrics_list, AggregationConfig(max_concurrent_positions=5)
        )

        values = [p.value for p in summary.portfolio_equity.points]
        assert values == [0.0, 100.0, 0.0, -5.0, 5.0]
        assert summary.aggregate_drawdown == pytest.approx(105.0)

    def test_backtest_id_separates_equal_deal_ids(self, make_deal):
        deals = [
            make_deal(1, "B", 0, 10, net=-5.0),
            make_deal(1, "A", 0, 10, net=20.0),
        ]

        series = build_portfolio_equity(deals)

        assert [p.value for p in series.points] == [0.0, 20.0, 15.0]

    def test_span_start_anchors_first_point(self, make_deal):
        deals = [make_deal(1, "A", 50, 60, net=1.0)]

        series = build_portfolio_equity(deals, span_starts=[20, 40])

        assert series.points[0] == ChartPoint(time=20, value=0.0)

    def test_open_deals_do_not_move_equity(self, make_deal):
        deals = [
            make_deal(1, "A", 0, 10, status=DealStatus.STARTED),
            make_deal(2, "B", 5, 15, net=3.0),
        ]

        series = build_portfolio_equity(deals)

        assert [(p.time, p.value) for p in series.points] == [(0, 0.0), (15, 3.0)]

    def test_nothing_to_anchor(self):
        assert build_portfolio_equity([]).points == ()


class TestDailyConcurrency:
    """Test cases for per-day concurrency bucketing."""

    def test_records_split_at_midnight(self, overnight_backtests):
        summary = summarize_portfolio(overnight_backtests, AggregationConfig())
        records = summary.daily_concurrency.records

        assert [r.day_index for r in records] == [19_365, 19_366]
        assert [r.max_count for r in records] == [2, 1]
        assert records[0].active_duration_ms == 24 * HOUR
        assert records[0].avg_active_count == pytest.approx(1.25)
        assert records[1].active_duration_ms == 6 * HOUR
        assert records[1].day_start_ms == T0 + DAY

    def test_stats(self, overnight_backtests):
        stats = summarize_portfolio(overnight_backtests, AggregationConfig()).daily_concurrency.stats

        assert stats.mean_max == pytest.approx(1.5)
        assert stats.p75 == pytest.approx(1.75)
        assert stats.p90 == pytest.approx(1.9)
        assert stats.p95 == pytest.approx(1.95)
        assert (stats.limit_p75, stats.limit_p90, stats.limit_p95) == (2, 2, 2)

    def test_idle_days_are_not_recorded(self):
        series = [ChartPoint(0, 1), ChartPoint(HOUR, 0), ChartPoint(3 * DAY, 1), ChartPoint(3 * DAY + HOUR, 0)]

        daily = compute_daily_concurrency(series)

        assert [r.day_index for r in daily.records] == [0, 3]

    def test_empty_series(self):
        daily = compute_daily_concurrency([])
        assert daily.records == ()
        assert daily.stats.mean_max == 0.0

    def test_percentile_interpolation(self):
        assert compute_percentile([1, 2, 3, 4], 75) == pytest.approx(3.25)
        assert compute_percentile([5], 95) == pytest.approx(5.0)


class TestSummaryFigures:
    """Test cases for scalar summary figures."""

    def test_no_trade_days_within_spans(self, overnight_backtests):
        summary = summarize_portfolio(overnight_backtests, AggregationConfig())
        assert summary.no_trade_days == 3

    def test_average_concurrency(self, overnight_backtests):
        summary = summarize_portfolio(overnight_backtests, AggregationConfig())
        assert summary.avg_concurrent == pytest.approx(1.2)

    def test_average_concurrency_degenerate(self):
        assert compute_average_concurrency([]) == 0.0
        assert compute_average_concurrency([ChartPoint(5, 1)]) == 0.0

    def test_avg_net_per_day_over_span(self, overnight_backtests):
        summary = summarize_portfolio(overnight_backtests, AggregationConfig())
        assert summary.avg_net_per_day == pytest.approx(4.0 / 5)

    def test_pnl_to_risk(self, two_backtests):
        summary = summarize_portfolio(two_backtests, AggregationConfig())
        assert summary.pnl_to_risk == pytest.approx(60.0 / 40.0)

    def test_exposure_and_win_rate(self, overnight_backtests):
        summary = summarize_portfolio(overnight_backtests, AggregationConfig())

        assert summary.max_concurrent_exposure == pytest.approx(5.0)
        assert summary.win_rate_percent == pytest.approx(50.0)
        assert summary.avg_pnl_per_deal == pytest.approx(2.0)
        assert summary.avg_pnl_per_backtest == pytest.approx(2.0)

    def test_limit_excludes_deals_from_totals(self, overnight_backtests):
        summary = summarize_portfolio(
            overnight_backtests, AggregationConfig(max_concurrent_positions=1)
        )

        assert summary.total_deals == 1
        assert summary.excluded_deals == 1
        assert summary.total_pnl == pytest.approx(5.0)
        assert summary.max_concurrent == 1

    def test_counts_add_up(self, overnight_backtests):
        summary = summarize_portfolio(overnight_backtests, AggregationConfig())
        assert summary.total_profits + summary.total_losses + summary.open_deals == (
            summary.total_deals
        )

    def test_idle_days(self, make_deal, make_backtest):
        info = make_backtest(
            "A", [make_deal(1, "A", 0, DAY), make_deal(2, "A", 3 * DAY, 4 * DAY)]
        )

        summary = summarize_portfolio([compute_backtest_metrics(info)], AggregationConfig())

        assert summary.total_idle_days == pytest.approx(2.0)

    def test_config_is_kept(self, two_backtests):
        config = AggregationConfig(max_concurrent_positions=7)
        assert summarize_portfolio(two_backtests, config).config is config

    def test_idempotent(self, overnight_backtests):
        config = AggregationConfig(max_concurrent_positions=1)
        assert summarize_portfolio(overnight_backtests, config) == summarize_portfolio(
            overnight_backtests, config
        )


class TestEmptyPortfolio:
    """Test cases for summaries without any backtest."""

    def test_zeroed_summary(self):
        summary = summarize_portfolio([])

        assert summary.total_backtests == 0
        assert summary.total_pnl == 0.0
        assert summary.total_deals == 0
        assert summary.win_rate_percent is None
        assert summary.aggregate_drawdown == 0.0
        assert summary.avg_max_drawdown == 0.0
        assert summary.pnl_to_risk == 0.0
        assert summary.no_trade_days == 0
        assert summary.portfolio_equity.points == ()
        assert summary.daily_concurrency.records == ()
        assert summary.config == AggregationConfig()

    def test_backtests_without_deals(self, make_backtest):
        metrics = [compute_backtest_metrics(make_backtest("A", []))]

        summary = summarize_portfolio(metrics)

        assert summary.total_backtests == 1
        assert summary.total_deals == 0
        assert summary.avg_pnl_per_backtest == 0.0
