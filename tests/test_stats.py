"""Tests for aggregate stats and per-period breakdowns."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from tradejournal.models.trade import Trade
from tradejournal.services.analytics.stats import (
    activity_counts,
    breakdown_by,
    compute_stats,
    daily_pnl,
    monthly_trend,
    period_pnl_series,
    safe_pct,
    weekday_profit_loss,
)
from tradejournal.services.analytics.windows import Granularity

UTC = timezone.utc


def make_trade(when: datetime, net: float, **kwargs) -> Trade:
    return Trade(
        id=kwargs.pop("id", f"{when.isoformat()}-{net}"),
        date=when,
        amount=abs(net),
        outcome="profit" if net >= 0 else "loss",
        **kwargs,
    )


def jan(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 1, day, hour, tzinfo=UTC)


class TestSafePct:
    def test_regular(self):
        assert safe_pct(1, 4) == 25.0

    def test_zero_denominator(self):
        assert safe_pct(5, 0) == 0.0


class TestComputeStats:
    def test_empty_gives_zeros(self):
        stats = compute_stats([])
        assert stats.total_trades == 0
        assert stats.win_rate_pct == 0.0
        assert stats.profit_factor == 0.0

    def test_totals(self, week_of_trades):
        stats = compute_stats(week_of_trades)
        assert stats.total_trades == 3
        assert stats.winning_trades == 2
        assert stats.losing_trades == 1
        assert stats.total_profit == 150
        assert stats.total_loss == 30
        assert stats.net_pnl == 120
        assert stats.win_rate_pct == pytest.approx(200 / 3)
        assert stats.average_win == 75
        assert stats.average_loss == 30
        assert stats.largest_win == 100
        assert stats.largest_loss == 30
        assert stats.profit_factor == 5.0

    def test_no_losses_profit_factor_zero(self):
        stats = compute_stats([make_trade(jan(1), 10)])
        assert stats.profit_factor == 0.0
        assert stats.win_rate_pct == 100.0

    def test_consecutive_runs_follow_date_order(self):
        trades = [
            make_trade(jan(5), -1),
            make_trade(jan(1), 1),
            make_trade(jan(2), 1),
            make_trade(jan(3), 1),
            make_trade(jan(4), -1),
        ]
        stats = compute_stats(trades)
        assert stats.max_consecutive_wins == 3
        assert stats.max_consecutive_losses == 2

    def test_consecutive_runs_read_naive_dates_in_zone(self):
        new_york = ZoneInfo("America/New_York")
        trades = [
            make_trade(datetime(2024, 1, 2, 0, 30, tzinfo=UTC), -1),  # 19:30 New York
            make_trade(datetime(2024, 1, 1, 20), 1),  # 20:00 New York
            make_trade(datetime(2024, 1, 2, 1, 30, tzinfo=UTC), -1),  # 20:30 New York
        ]
        stats = compute_stats(trades, tz=new_york)
        assert stats.max_consecutive_losses == 1
        assert stats.max_consecutive_wins == 1


    def test_to_dict_rounds(self):
        stats = compute_stats([make_trade(jan(1), 10), make_trade(jan(2), -5), make_trade(jan(3), -5)])
        assert stats.to_dict()["win_rate_pct"] == 33.3


class TestBreakdownBy:
    def test_groups_by_pair(self):
        trades = [
            make_trade(jan(1), 10, pair="EURUSD"),
            make_trade(jan(2), -4, pair="EURUSD"),
            make_trade(jan(3), 7, pair="GBPJPY"),
        ]
        result = breakdown_by(trades, "pair")
        assert list(result) == ["EURUSD", "GBPJPY"]
        assert result["EURUSD"].net_pnl == 6
        assert result["GBPJPY"].total_trades == 1

    def test_missing_label_grouped(self):
        result = breakdown_by([make_trade(jan(1), 10)], "strategy")
        assert list(result) == ["unlabeled"]

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="Cannot break down by"):
            breakdown_by([], "notes")


class TestWeekdayProfitLoss:
    def test_always_seven_days(self):
        result = weekday_profit_loss([], UTC)
        assert [d["name"] for d in result] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert all(d["profit"] == 0 and d["loss"] == 0 for d in result)

    def test_profit_and_loss_split(self, week_of_trades):
        result = weekday_profit_loss(week_of_trades, UTC)
        assert result[0] == {"name": "Mon", "profit": 100, "loss": 0}
        assert result[1] == {"name": "Tue", "profit": 0, "loss": 30}
        assert result[2] == {"name": "Wed", "profit": 50, "loss": 0}


class TestPeriodPnlSeries:
    def test_daily_last_seven_days(self, week_of_trades, now):
        series = period_pnl_series(week_of_trades, Granularity.DAILY, now, UTC)
        assert len(series) == 7
        assert series[-1] == {"name": "Wed", "start": "2024-01-03", "net": 50}
        assert series[-3] == {"name": "Mon", "start": "2024-01-01", "net": 100}
        assert series[0]["start"] == "2023-12-28"
        assert series[0]["net"] == 0

    def test_weekly_eight_iso_weeks(self, week_of_trades, now):
        series = period_pnl_series(week_of_trades, "weekly", now, UTC)
        assert len(series) == 8
        assert series[-1] == {"name": "2024-W1", "start": "2024-01-01", "net": 120}
        assert series[-2]["name"] == "2023-W52"

    def test_monthly_crosses_year(self, now):
        trades = [make_trade(datetime(2023, 11, 20, tzinfo=UTC), 40)]
        series = period_pnl_series(trades, Granularity.MONTHLY, now, UTC)
        assert len(series) == 12
        assert series[0]["name"] == "2023-02"
        assert series[-3] == {"name": "2023-11", "start": "2023-11-01", "net": 40}
        assert series[-1]["name"] == "2024-01"

    def test_yearly_five_years(self, week_of_trades, now):
        series = period_pnl_series(week_of_trades, Granularity.YEARLY, now, UTC)
        assert [s["name"] for s in series] == ["2020", "2021", "2022", "2023", "2024"]
        assert series[-1]["net"] == 120


class TestDailyPnl:
    def test_days_with_trades_only(self):
        trades = [make_trade(jan(3), 5), make_trade(jan(1, 9), 10), make_trade(jan(1, 15), -4)]
        assert daily_pnl(trades, UTC) == [
            {"date": "2024-01-01", "net": 6, "trades": 2},
            {"date": "2024-01-03", "net": 5, "trades": 1},
        ]


class TestActivityCounts:
    def test_zero_filled_trailing_window(self, week_of_trades, now):
        result = activity_counts(week_of_trades, now, UTC, days=5)
        assert result == [
            {"date": "2023-12-30", "count": 0},
            {"date": "2023-12-31", "count": 0},
            {"date": "2024-01-01", "count": 1},
            {"date": "2024-01-02", "count": 1},
            {"date": "2024-01-03", "count": 1},
        ]

    def test_default_is_one_year(self, now):
        assert len(activity_counts([], now, UTC)) == 365


class TestMonthlyTrend:
    def test_up(self, now):
        trades = [make_trade(datetime(2023, 12, 10, tzinfo=UTC), 100), make_trade(jan(2), 150)]
        trend = monthly_trend(trades, now, UTC)
        assert trend.this_month == 150
        assert trend.previous_month == 100
        assert trend.change_pct == pytest.approx(50.0)
        assert trend.direction == "up"

    def test_down_from_loss(self, now):
        trades = [make_trade(datetime(2023, 12, 10, tzinfo=UTC), -100), make_trade(jan(2), -150)]
        trend = monthly_trend(trades, now, UTC)
        assert trend.change_pct == pytest.approx(-50.0)
        assert trend.direction == "down"

    def test_no_previous_month(self, now):
        trend = monthly_trend([make_trade(jan(2), 10)], now, UTC)
        assert trend.change_pct == 0.0
        assert trend.to_dict()["direction"] == "up"
