"""Winning-period streaks over bucketed net P/L."""

from collections.abc import Iterable
from datetime import date, tzinfo

from tradejournal.models.trade import Trade
from tradejournal.services.analytics.windows import Granularity, period_start


def period_net_pnl(
    trades: Iterable[Trade],
    granularity: Granularity | str,
    tz: tzinfo | None = None,
) -> dict[date, float]:
    """Net P/L per period, keyed by the period's first day.

    Periods without trades are absent from the mapping.
    """
    granularity = Granularity(granularity)
    buckets: dict[date, float] = {}
    for t in trades:
        key = period_start(t.date, granularity, tz)
        buckets[key] = buckets.get(key, 0.0) + t.net
    return buckets


def current_streak(
    trades: Iterable[Trade],
    granularity: Granularity | str = Granularity.DAILY,
    tz: tzinfo | None = None,
) -> int:
    """Consecutive strictly-positive periods, counted back from the most recent.

    Only periods that contain trades are walked, so a gap in trading does
    not break a streak. A net-zero period does.
    """
    buckets = period_net_pnl(trades, granularity, tz)
    streak = 0
    for key in sorted(buckets, reverse=True):
        if buckets[key] > 0:
            streak += 1
        else:
            break
    return streak


def longest_streak(
    trades: Iterable[Trade],
    granularity: Granularity | str = Granularity.DAILY,
    tz: tzinfo | None = None,
) -> int:
    """Longest run of strictly-positive periods anywhere in the history."""
    buckets = period_net_pnl(trades, granularity, tz)
    best = 0
    run = 0
    for key in sorted(buckets):
        if buckets[key] > 0:
            run += 1
            best = max(best, run)
        else:
            run = 0
    return best
