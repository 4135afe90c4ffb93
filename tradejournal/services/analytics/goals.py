"""Progress toward period profit goals."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, tzinfo

from tradejournal.models.goals import GoalPeriod, Goals
from tradejournal.models.trade import Trade
from tradejournal.services.analytics.stats import safe_pct
from tradejournal.services.analytics.streaks import period_net_pnl
from tradejournal.services.analytics.windows import Granularity, period_start


@dataclass(frozen=True)
class GoalProgress:
    """Net P/L of the current period against its target.

    net_pnl stays signed; percentage is clamped to [0, 100] for rendering.
    A zero target is not applicable and always reports 0%.
    """

    period: GoalPeriod
    target: float
    net_pnl: float
    percentage: float

    @property
    def applicable(self) -> bool:
        return self.target > 0

    @property
    def reached(self) -> bool:
        return self.applicable and self.net_pnl >= self.target

    def to_dict(self) -> dict:
        return {
            "period": self.period.value,
            "target": round(self.target, 2),
            "net_pnl": round(self.net_pnl, 2),
            "percentage": round(self.percentage, 1),
            "applicable": self.applicable,
            "reached": self.reached,
        }


def target_progress(net_pnl: float, target: float) -> float:
    """Progress-ring percentage, clamped to [0, 100]."""
    if target <= 0:
        return 0.0
    return min(100.0, max(0.0, safe_pct(net_pnl, target)))


def goal_progress(
    trades: Iterable[Trade],
    goals: Goals,
    now: datetime,
    tz: tzinfo | None = None,
) -> list[GoalProgress]:
    """Progress for each goal period, measured over the whole trade history
    restricted to the period containing `now`."""
    trades = list(trades)
    results = []
    for period in GoalPeriod:
        granularity = Granularity(period.value)
        buckets = period_net_pnl(trades, granularity, tz)
        net = buckets.get(period_start(now, granularity, tz), 0.0)
        target = goals.target_for(period)
        results.append(
            GoalProgress(
                period=period,
                target=target,
                net_pnl=net,
                percentage=target_progress(net, target),
            )
        )
    return results
