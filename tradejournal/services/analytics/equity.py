"""Equity curve and drawdown over a trade history.

The curve is never cached: every iteration re-sorts the trades and replays
them from the starting balance.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime, tzinfo

from tradejournal.models.trade import Trade
from tradejournal.services.analytics.windows import chronological, local_date


@dataclass(frozen=True)
class EquityPoint:
    """Running balance right after a trade."""

    date: datetime
    equity: float
    net: float

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "equity": round(self.equity, 2),
            "net": round(self.net, 2),
        }


class EquityCurve:
    """Restartable sequence of EquityPoints, one per trade, oldest first.

    Trades are stable-sorted by date, so trades sharing a timestamp keep
    their relative input order.
    """

    def __init__(
        self,
        trades: Iterable[Trade],
        starting_balance: float,
        tz: tzinfo | None = None,
    ) -> None:
        self._trades = list(trades)
        self.starting_balance = starting_balance
        self.tz = tz

    def __iter__(self) -> Iterator[EquityPoint]:
        running = self.starting_balance
        for trade in sorted(self._trades, key=chronological(self.tz)):
            running += trade.net
            yield EquityPoint(date=trade.date, equity=running, net=trade.net)

    def __len__(self) -> int:
        return len(self._trades)

    @property
    def final_equity(self) -> float:
        return self.starting_balance + sum(t.net for t in self._trades)

    def to_list(self) -> list[dict]:
        return [point.to_dict() for point in self]


def current_equity(trades: Iterable[Trade], initial_balance: float) -> float:
    """initial balance + sum of net contributions, independent of order."""
    return initial_balance + sum(t.net for t in trades)


@dataclass(frozen=True)
class DrawdownStats:
    max_equity: float
    max_drawdown: float
    max_drawdown_pct: float
    current_equity: float

    def to_dict(self) -> dict:
        return {
            "max_equity": round(self.max_equity, 2),
            "max_drawdown": round(self.max_drawdown, 2),
            "max_drawdown_pct": round(self.max_drawdown_pct, 2),
            "current_equity": round(self.current_equity, 2),
        }


def compute_drawdown(
    trades: Iterable[Trade],
    initial_balance: float,
    tz: tzinfo | None = None,
) -> DrawdownStats:
    """Peak-to-trough drawdown in one forward pass over the equity curve.

    The peak starts at the initial balance. The drawdown at each point is
    measured from the most recent peak, not from the global maximum.
    """
    peak = initial_balance
    equity = initial_balance
    max_dd = 0.0
    max_dd_pct = 0.0

    for point in EquityCurve(trades, initial_balance, tz):
        equity = point.equity
        if equity > peak:
            peak = equity

        dd = peak - equity
        if dd > max_dd:
            max_dd = dd
            max_dd_pct = dd / peak * 100 if peak > 0 else 0.0

    return DrawdownStats(
        max_equity=peak,
        max_drawdown=max_dd,
        max_drawdown_pct=max_dd_pct,
        current_equity=equity,
    )


def daily_drawdown(trades: Iterable[Trade], tz: tzinfo | None = None) -> float:
    """Worst single calendar day's net loss, or 0.0 if no day was net negative.

    Independent of the running-peak drawdown above.
    """
    per_day: dict = {}
    for t in trades:
        key = local_date(t.date, tz)
        per_day[key] = per_day.get(key, 0.0) + t.net

    if not per_day:
        return 0.0
    return abs(min(0.0, min(per_day.values())))
