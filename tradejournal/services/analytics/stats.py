"""Aggregate P/L statistics and the per-period breakdowns behind dashboard widgets."""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo

from tradejournal.models.trade import Trade
from tradejournal.services.analytics.streaks import period_net_pnl
from tradejournal.services.analytics.windows import (
    Granularity,
    chronological,
    local_date,
    period_start,
)

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# Trailing buckets shown per granularity (days, ISO weeks, months, years)
SERIES_LENGTH: dict[Granularity, int] = {
    Granularity.DAILY: 7,
    Granularity.WEEKLY: 8,
    Granularity.MONTHLY: 12,
    Granularity.YEARLY: 5,
}

UNLABELED = "unlabeled"
BREAKDOWN_FIELDS = ("pair", "market", "strategy")


def safe_pct(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, or 0.0 when undefined."""
    if denominator == 0:
        return 0.0
    pct = numerator / denominator * 100
    return pct if math.isfinite(pct) else 0.0


@dataclass(frozen=True)
class TradeStats:
    """Aggregate stats for a list of trades. All money in account currency."""

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    total_profit: float = 0.0
    total_loss: float = 0.0
    net_pnl: float = 0.0
    win_rate_pct: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    profit_factor: float = 0.0
    max_consecutive_wins: int = 0
    max_consecutive_losses: int = 0

    def to_dict(self) -> dict:
        return {
            "total_trades": self.total_trades,
            "winning_trades": self.winning_trades,
            "losing_trades": self.losing_trades,
            "total_profit": round(self.total_profit, 2),
            "total_loss": round(self.total_loss, 2),
            "net_pnl": round(self.net_pnl, 2),
            "win_rate_pct": round(self.win_rate_pct, 1),
            "average_win": round(self.average_win, 2),
            "average_loss": round(self.average_loss, 2),
            "largest_win": round(self.largest_win, 2),
            "largest_loss": round(self.largest_loss, 2),
            "profit_factor": round(self.profit_factor, 2),
            "max_consecutive_wins": self.max_consecutive_wins,
            "max_consecutive_losses": self.max_consecutive_losses,
        }


def compute_stats(trades: Iterable[Trade], tz: tzinfo | None = None) -> TradeStats:
    """Win rate, totals, averages and consecutive runs. Empty input gives zeros."""
    trades = sorted(trades, key=chronological(tz))
    if not trades:
        return TradeStats()

    wins = [t.amount for t in trades if t.is_win]
    losses = [t.amount for t in trades if not t.is_win]
    total_profit = sum(wins)
    total_loss = sum(losses)

    max_wins = 0
    max_losses = 0
    current_wins = 0
    current_losses = 0
    for t in trades:
        if t.is_win:
            current_wins += 1
            current_losses = 0
            max_wins = max(max_wins, current_wins)
        else:
            current_losses += 1
            current_wins = 0
            max_losses = max(max_losses, current_losses)

    return TradeStats(
        total_trades=len(trades),
        winning_trades=len(wins),
        losing_trades=len(losses),
        total_profit=total_profit,
        total_loss=total_loss,
        net_pnl=total_profit - total_loss,
        win_rate_pct=safe_pct(len(wins), len(trades)),
        average_win=total_profit / len(wins) if wins else 0.0,
        average_loss=total_loss / len(losses) if losses else 0.0,
        largest_win=max(wins) if wins else 0.0,
        largest_loss=max(losses) if losses else 0.0,
        profit_factor=total_profit / total_loss if total_loss > 0 else 0.0,
        max_consecutive_wins=max_wins,
        max_consecutive_losses=max_losses,
    )


def breakdown_by(
    trades: Iterable[Trade],
    field: str,
    tz: tzinfo | None = None,
) -> dict[str, TradeStats]:
    """Stats per classification label (pair, market or strategy)."""
    if field not in BREAKDOWN_FIELDS:
        raise ValueError(f"Cannot break down by {field!r}; expected one of {BREAKDOWN_FIELDS}")

    groups: dict[str, list[Trade]] = {}
    for t in trades:
        label = getattr(t, field) or UNLABELED
        groups.setdefault(label, []).append(t)
    return {label: compute_stats(group, tz) for label, group in sorted(groups.items())}


def weekday_profit_loss(trades: Iterable[Trade], tz: tzinfo | None = None) -> list[dict]:
    """Profit and loss totals per weekday, always Mon through Sun."""
    profit = [0.0] * 7
    loss = [0.0] * 7
    for t in trades:
        idx = local_date(t.date, tz).weekday()
        if t.is_win:
            profit[idx] += t.amount
        else:
            loss[idx] += t.amount
    return [
        {"name": name, "profit": round(profit[i], 2), "loss": round(loss[i], 2)}
        for i, name in enumerate(WEEKDAY_NAMES)
    ]


def _shift_month(d: date, months: int) -> date:
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def _series_label(start: date, granularity: Granularity) -> str:
    if granularity == Granularity.DAILY:
        return WEEKDAY_NAMES[start.weekday()]
    if granularity == Granularity.WEEKLY:
        iso_year, iso_week, _ = start.isocalendar()
        return f"{iso_year}-W{iso_week}"
    if granularity == Granularity.MONTHLY:
        return f"{start.year}-{start.month:02d}"
    return str(start.year)


def period_pnl_series(
    trades: Iterable[Trade],
    granularity: Granularity | str,
    now: datetime,
    tz: tzinfo | None = None,
) -> list[dict]:
    """Zero-filled net P/L for the trailing periods ending with the current one.

    7 days, 8 ISO weeks, 12 months or 5 years, oldest first.
    """
    granularity = Granularity(granularity)
    buckets = period_net_pnl(trades, granularity, tz)
    current = period_start(now, granularity, tz)
    length = SERIES_LENGTH[granularity]

    starts = []
    for back in range(length - 1, -1, -1):
        if granularity == Granularity.DAILY:
            starts.append(current - timedelta(days=back))
        elif granularity == Granularity.WEEKLY:
            starts.append(current - timedelta(weeks=back))
        elif granularity == Granularity.MONTHLY:
            starts.append(_shift_month(current, -back))
        else:
            starts.append(date(current.year - back, 1, 1))

    return [
        {
            "name": _series_label(start, granularity),
            "start": start.isoformat(),
            "net": round(buckets.get(start, 0.0), 2),
        }
        for start in starts
    ]


def daily_pnl(trades: Iterable[Trade], tz: tzinfo | None = None) -> list[dict]:
    """Net P/L and trade count per calendar day that has trades, oldest first."""
    days: dict[date, list[float]] = {}
    for t in trades:
        days.setdefault(local_date(t.date, tz), []).append(t.net)
    return [
        {"date": d.isoformat(), "net": round(sum(nets), 2), "trades": len(nets)}
        for d, nets in sorted(days.items())
    ]


def activity_counts(
    trades: Iterable[Trade],
    now: datetime,
    tz: tzinfo | None = None,
    days: int = 365,
) -> list[dict]:
    """Trades per day over the trailing `days` days ending today, zero-filled."""
    counts: dict[date, int] = {}
    for t in trades:
        d = local_date(t.date, tz)
        counts[d] = counts.get(d, 0) + 1

    today = local_date(now, tz)
    return [
        {"date": d.isoformat(), "count": counts.get(d, 0)}
        for d in (today - timedelta(days=back) for back in range(days - 1, -1, -1))
    ]


@dataclass(frozen=True)
class MonthlyTrend:
    this_month: float
    previous_month: float
    change_pct: float

    @property
    def direction(self) -> str:
        return "up" if self.this_month >= self.previous_month else "down"

    def to_dict(self) -> dict:
        return {
            "this_month": round(self.this_month, 2),
            "previous_month": round(self.previous_month, 2),
            "change_pct": round(self.change_pct, 1),
            "direction": self.direction,
        }


def monthly_trend(trades: Iterable[Trade], now: datetime, tz: tzinfo | None = None) -> MonthlyTrend:
    """This month's net P/L against last month's."""
    buckets = period_net_pnl(trades, Granularity.MONTHLY, tz)
    this_start = period_start(now, Granularity.MONTHLY, tz)
    this_month = buckets.get(this_start, 0.0)
    previous_month = buckets.get(_shift_month(this_start, -1), 0.0)
    change = (
        safe_pct(this_month - previous_month, abs(previous_month))
        if previous_month != 0
        else 0.0
    )
    return MonthlyTrend(this_month=this_month, previous_month=previous_month, change_pct=change)
