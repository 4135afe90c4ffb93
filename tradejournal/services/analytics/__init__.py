"""Trading-performance analytics over a validated trade list.

Pure, synchronous functions. Nothing here fetches trades or keeps state
between calls (except MilestoneTracker, which only remembers the last
snapshot it evaluated). The wall clock is read only when `now` is omitted.
"""

from tradejournal.services.analytics.equity import (
    DrawdownStats,
    EquityCurve,
    EquityPoint,
    compute_drawdown,
    current_equity,
    daily_drawdown,
)
from tradejournal.services.analytics.goals import GoalProgress, goal_progress, target_progress
from tradejournal.services.analytics.milestones import (
    MILESTONES,
    Milestone,
    MilestoneTracker,
    evaluate_milestones,
)
from tradejournal.services.analytics.report import DashboardReport, build_dashboard
from tradejournal.services.analytics.stats import TradeStats, compute_stats
from tradejournal.services.analytics.streaks import current_streak, period_net_pnl
from tradejournal.services.analytics.windows import Granularity, TimeWindow, filter_by_window

__all__ = [
    "DashboardReport",
    "DrawdownStats",
    "EquityCurve",
    "EquityPoint",
    "GoalProgress",
    "Granularity",
    "MILESTONES",
    "Milestone",
    "MilestoneTracker",
    "TimeWindow",
    "TradeStats",
    "build_dashboard",
    "compute_drawdown",
    "compute_stats",
    "current_equity",
    "current_streak",
    "daily_drawdown",
    "evaluate_milestones",
    "filter_by_window",
    "goal_progress",
    "period_net_pnl",
    "target_progress",
]
