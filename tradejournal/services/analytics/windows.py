"""Calendar windows and period bucketing.

All calendar decisions (which day, ISO week, month or year a trade belongs
to) are made on the local calendar: the zone passed as `tz`, or the
evaluating process's local zone when `tz` is None. Aware datetimes are
converted; naive datetimes are taken as already local.

"Now" is always an explicit argument so results are deterministic.
"""

from collections.abc import Callable, Iterable
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum

from tradejournal.models.trade import Trade


class TimeWindow(str, Enum):
    ALL = "all"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Granularity(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def to_local(dt: datetime, tz: tzinfo | None = None) -> datetime:
    """Express a timestamp on the local calendar."""
    if dt.tzinfo is None:
        return dt
    # astimezone(None) converts to the system local zone
    return dt.astimezone(tz)


def local_date(dt: datetime, tz: tzinfo | None = None) -> date:
    return to_local(dt, tz).date()


def chronological(tz: tzinfo | None = None) -> Callable[[Trade], float]:
    """Sort key that orders naive and aware dates on one timeline.

    Naive dates are read in `tz` (system local when None), the same zone
    the calendar bucketing uses.
    """

    def key(trade: Trade) -> float:
        dt = trade.date
        if dt.tzinfo is None and tz is not None:
            dt = dt.replace(tzinfo=tz)
        return dt.timestamp()

    return key


def resolve_now(now: datetime | None, tz: tzinfo | None = None) -> datetime:
    """Use the injected timestamp, falling back to the wall clock."""
    if now is not None:
        return now
    return datetime.now(tz) if tz is not None else datetime.now()


def period_start(dt: datetime, granularity: Granularity | str, tz: tzinfo | None = None) -> date:
    """Bucket key for a timestamp: the first calendar day of its period.

    daily -> the day itself, weekly -> Monday of its ISO week,
    monthly -> first of the month, yearly -> January 1st.
    """
    granularity = Granularity(granularity)
    d = local_date(dt, tz)
    if granularity == Granularity.DAILY:
        return d
    if granularity == Granularity.WEEKLY:
        return d - timedelta(days=d.weekday())
    if granularity == Granularity.MONTHLY:
        return d.replace(day=1)
    return date(d.year, 1, 1)


def in_window(
    dt: datetime,
    window: TimeWindow | str,
    now: datetime,
    tz: tzinfo | None = None,
) -> bool:
    """Check whether a timestamp falls in the window containing `now`."""
    window = TimeWindow(window)
    if window == TimeWindow.ALL:
        return True

    d = local_date(dt, tz)
    today = local_date(now, tz)
    if window == TimeWindow.DAILY:
        return d == today
    if window == TimeWindow.WEEKLY:
        # (ISO year, ISO week) so the first days of January can belong
        # to the last week of the previous year
        return d.isocalendar()[:2] == today.isocalendar()[:2]
    if window == TimeWindow.MONTHLY:
        return (d.year, d.month) == (today.year, today.month)
    return d.year == today.year


def filter_by_window(
    trades: Iterable[Trade],
    window: TimeWindow | str,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[Trade]:
    """Trades whose date falls in the window containing `now`, input order kept."""
    window = TimeWindow(window)
    if window == TimeWindow.ALL:
        return list(trades)
    now = resolve_now(now, tz)
    return [t for t in trades if in_window(t.date, window, now, tz)]
