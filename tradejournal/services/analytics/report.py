"""Dashboard report: every analytics view computed from one trade-list snapshot."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from tradejournal.models.goals import Goals
from tradejournal.models.trade import Trade
from tradejournal.services.analytics.equity import (
    DrawdownStats,
    EquityCurve,
    compute_drawdown,
    daily_drawdown,
)
from tradejournal.services.analytics.goals import GoalProgress, goal_progress, target_progress
from tradejournal.services.analytics.stats import (
    MonthlyTrend,
    TradeStats,
    activity_counts,
    breakdown_by,
    compute_stats,
    daily_pnl,
    monthly_trend,
    period_pnl_series,
    weekday_profit_loss,
)
from tradejournal.services.analytics.streaks import current_streak, longest_streak
from tradejournal.services.analytics.windows import (
    Granularity,
    TimeWindow,
    filter_by_window,
    resolve_now,
)

# Bar-chart granularity used for each dashboard window
_SERIES_FOR_WINDOW = {
    TimeWindow.ALL: Granularity.MONTHLY,
    TimeWindow.DAILY: Granularity.DAILY,
    TimeWindow.WEEKLY: Granularity.WEEKLY,
    TimeWindow.MONTHLY: Granularity.MONTHLY,
    TimeWindow.YEARLY: Granularity.YEARLY,
}


@dataclass
class DashboardReport:
    """Complete dashboard output. Window-scoped views use `window_trades`;
    drawdown, streaks and goals always use the full history."""

    generated_at: datetime
    window: TimeWindow
    initial_balance: float

    # Window-scoped
    stats: TradeStats
    equity_curve: EquityCurve
    weekday_breakdown: list[dict]
    pnl_series: list[dict]

    # Full history
    lifetime_stats: TradeStats
    drawdown: DrawdownStats
    daily_drawdown: float
    streaks: dict[str, int]
    longest_daily_streak: int
    goals: list[GoalProgress]
    target: float
    target_progress_pct: float
    monthly_trend: MonthlyTrend
    daily_pnl: list[dict] = field(default_factory=list)
    activity: list[dict] = field(default_factory=list)
    breakdowns: dict[str, dict[str, TradeStats]] = field(default_factory=dict)

    @property
    def current_equity(self) -> float:
        return self.drawdown.current_equity

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict for API response."""
        return {
            "generated_at": self.generated_at.isoformat(),
            "window": self.window.value,
            "initial_balance": round(self.initial_balance, 2),
            "current_equity": round(self.current_equity, 2),
            "stats": self.stats.to_dict(),
            "equity_curve": self.equity_curve.to_list(),
            "weekday_breakdown": self.weekday_breakdown,
            "pnl_series": self.pnl_series,
            "lifetime_stats": self.lifetime_stats.to_dict(),
            "drawdown": self.drawdown.to_dict(),
            "daily_drawdown": round(self.daily_drawdown, 2),
            "streaks": self.streaks,
            "longest_daily_streak": self.longest_daily_streak,
            "goals": [g.to_dict() for g in self.goals],
            "target": round(self.target, 2),
            "target_progress_pct": round(self.target_progress_pct, 1),
            "monthly_trend": self.monthly_trend.to_dict(),
            "daily_pnl": self.daily_pnl,
            "activity": self.activity,
            "breakdowns": {
                name: {label: s.to_dict() for label, s in groups.items()}
                for name, groups in self.breakdowns.items()
            },
        }


def build_dashboard(
    trades: Iterable[Trade],
    *,
    initial_balance: float,
    goals: Goals | None = None,
    now: datetime | None = None,
    window: TimeWindow | str = TimeWindow.ALL,
    tz: tzinfo | None = None,
    target: float = 0.0,
) -> DashboardReport:
    """Compute the whole dashboard from a validated trade list."""
    trades = list(trades)
    window = TimeWindow(window)
    now = resolve_now(now, tz)
    goals = goals or Goals()

    window_trades = filter_by_window(trades, window, now, tz)
    stats = compute_stats(window_trades, tz)
    lifetime = compute_stats(trades, tz)

    return DashboardReport(
        generated_at=now,
        window=window,
        initial_balance=initial_balance,
        stats=stats,
        equity_curve=EquityCurve(window_trades, initial_balance, tz),
        weekday_breakdown=weekday_profit_loss(window_trades, tz),
        pnl_series=period_pnl_series(trades, _SERIES_FOR_WINDOW[window], now, tz),
        lifetime_stats=lifetime,
        drawdown=compute_drawdown(trades, initial_balance, tz),
        daily_drawdown=daily_drawdown(trades, tz),
        streaks={
            g.value: current_streak(trades, g, tz)
            for g in (Granularity.DAILY, Granularity.WEEKLY, Granularity.MONTHLY)
        },
        longest_daily_streak=longest_streak(trades, Granularity.DAILY, tz),
        goals=goal_progress(trades, goals, now, tz),
        target=target,
        target_progress_pct=target_progress(stats.net_pnl, target),
        monthly_trend=monthly_trend(trades, now, tz),
        daily_pnl=daily_pnl(trades, tz),
        activity=activity_counts(trades, now, tz),
        breakdowns={
            name: breakdown_by(window_trades, name, tz) for name in ("pair", "market", "strategy")
        },
    )
