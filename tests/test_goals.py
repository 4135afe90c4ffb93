"""Tests for goal progress and the general target ring."""

from datetime import datetime, timezone

import pytest

from tradejournal.models.goals import GoalPeriod, Goals
from tradejournal.models.trade import Trade
from tradejournal.services.analytics.goals import goal_progress, target_progress

UTC = timezone.utc


def make_trade(when: datetime, net: float) -> Trade:
    return Trade(
        id=f"{when.isoformat()}-{net}",
        date=when,
        amount=abs(net),
        outcome="profit" if net >= 0 else "loss",
    )


def by_period(results) -> dict:
    return {r.period: r for r in results}


class TestTargetProgress:
    @pytest.mark.parametrize(
        "net, target, expected",
        [
            (50, 100, 50.0),
            (250, 100, 100.0),
            (-20, 100, 0.0),
            (50, 0, 0.0),
            (50, -10, 0.0),
        ],
    )
    def test_clamped(self, net, target, expected):
        assert target_progress(net, target) == expected


class TestGoalProgress:
    def test_one_entry_per_period(self, week_of_trades, now):
        results = goal_progress(week_of_trades, Goals(), now, UTC)
        assert [r.period for r in results] == list(GoalPeriod)

    def test_period_net_pnl(self, week_of_trades, now):
        goals = Goals(daily=100, weekly=240, monthly=1000, yearly=12000)
        results = by_period(goal_progress(week_of_trades, goals, now, UTC))

        daily = results[GoalPeriod.DAILY]
        assert daily.net_pnl == 50
        assert daily.percentage == 50.0
        assert daily.reached is False

        weekly = results[GoalPeriod.WEEKLY]
        assert weekly.net_pnl == 120
        assert weekly.percentage == 50.0

        assert results[GoalPeriod.MONTHLY].percentage == pytest.approx(12.0)
        assert results[GoalPeriod.YEARLY].percentage == pytest.approx(1.0)

    def test_zero_target_not_applicable(self, week_of_trades, now):
        results = by_period(goal_progress(week_of_trades, Goals(), now, UTC))
        assert results[GoalPeriod.DAILY].percentage == 0.0
        assert results[GoalPeriod.DAILY].applicable is False
        assert results[GoalPeriod.DAILY].reached is False

    def test_empty_history_with_goals(self, now):
        results = goal_progress([], Goals(daily=50, weekly=250, monthly=1000, yearly=12000), now, UTC)
        assert [r.percentage for r in results] == [0.0, 0.0, 0.0, 0.0]
        assert all(r.applicable and not r.reached and r.net_pnl == 0 for r in results)


    def test_overshoot_clamped(self, week_of_trades, now):
        results = by_period(goal_progress(week_of_trades, Goals(daily=10), now, UTC))
        assert results[GoalPeriod.DAILY].percentage == 100.0
        assert results[GoalPeriod.DAILY].reached is True

    def test_negative_period_keeps_signed_net(self, now):
        trades = [make_trade(datetime(2024, 1, 3, 9, tzinfo=UTC), -40)]
        results = by_period(goal_progress(trades, Goals(daily=100), now, UTC))
        assert results[GoalPeriod.DAILY].net_pnl == -40
        assert results[GoalPeriod.DAILY].percentage == 0.0

    def test_previous_periods_ignored(self, now):
        trades = [make_trade(datetime(2023, 12, 29, tzinfo=UTC), 500)]
        results = by_period(goal_progress(trades, Goals(weekly=100, monthly=100), now, UTC))
        assert results[GoalPeriod.WEEKLY].net_pnl == 0
        assert results[GoalPeriod.MONTHLY].net_pnl == 0

    def test_to_dict(self, week_of_trades, now):
        data = goal_progress(week_of_trades, Goals(weekly=240), now, UTC)[1].to_dict()
        assert data == {
            "period": "weekly",
            "target": 240,
            "net_pnl": 120,
            "percentage": 50.0,
            "applicable": True,
            "reached": False,
        }
