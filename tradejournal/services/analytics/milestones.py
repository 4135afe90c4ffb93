"""Achievement milestones unlocked by trade history.

The catalog is fixed and ordered. Unlocks are one-way: once an id is in the
unlocked set it is never removed, even if the history later falls back
below the threshold (e.g. after a trade is deleted).
"""

import hashlib
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import tzinfo

from tradejournal.models.trade import Trade
from tradejournal.services.analytics.stats import safe_pct
from tradejournal.services.analytics.streaks import current_streak
from tradejournal.services.analytics.windows import Granularity
from tradejournal.services.preferences import PreferencesStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MilestoneContext:
    """Derived figures the unlock predicates are evaluated against."""

    trade_count: int
    daily_streak: int
    net_profit: float

    @classmethod
    def from_trades(cls, trades: Iterable[Trade], tz: tzinfo | None = None) -> "MilestoneContext":
        trades = list(trades)
        return cls(
            trade_count=len(trades),
            daily_streak=current_streak(trades, Granularity.DAILY, tz),
            net_profit=sum(t.net for t in trades),
        )


@dataclass(frozen=True)
class Milestone:
    id: str
    title: str
    description: str
    icon: str  # trophy, star, award, zap
    reward: str
    predicate: Callable[[MilestoneContext], bool] = field(repr=False, compare=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "reward": self.reward,
        }


MILESTONES: tuple[Milestone, ...] = (
    Milestone(
        id="first_trade",
        title="First Steps Taken!",
        description="Log your first trade.",
        icon="star",
        reward="\U0001f331 Novice Badge",
        predicate=lambda ctx: ctx.trade_count >= 1,
    ),
    Milestone(
        id="streak_3",
        title="On Fire!",
        description="Maintain a 3-day winning streak.",
        icon="zap",
        reward="\U0001f525 Streak Warrior",
        predicate=lambda ctx: ctx.daily_streak >= 3,
    ),
    Milestone(
        id="trades_10",
        title="Getting Serious",
        description="Log 10 trades in your journal.",
        icon="award",
        reward="\U0001f4ca Data Collector",
        predicate=lambda ctx: ctx.trade_count >= 10,
    ),
    Milestone(
        id="profit_1k",
        title="Profitable Trader",
        description="Achieve $1,000 in net profit.",
        icon="trophy",
        reward="\U0001f4b0 1K Club",
        predicate=lambda ctx: ctx.net_profit >= 1000,
    ),
    Milestone(
        id="streak_7",
        title="Unstoppable",
        description="Maintain a 7-day winning streak.",
        icon="zap",
        reward="⚡ Godlike Streak",
        predicate=lambda ctx: ctx.daily_streak >= 7,
    ),
    Milestone(
        id="profit_10k",
        title="High Roller",
        description="Achieve $10,000 in net profit.",
        icon="trophy",
        reward="\U0001f48e Diamond Hands",
        predicate=lambda ctx: ctx.net_profit >= 10000,
    ),
)

MILESTONES_BY_ID = {m.id: m for m in MILESTONES}


@dataclass(frozen=True)
class MilestoneEvaluation:
    unlocked: frozenset[str]
    newly_unlocked: tuple[Milestone, ...] = ()


def evaluate_milestones(
    trades: Iterable[Trade],
    unlocked: Iterable[str],
    unlock_all: bool = False,
    tz: tzinfo | None = None,
) -> MilestoneEvaluation:
    """Walk the catalog in order and unlock the first locked milestone whose
    predicate holds. With unlock_all=True every qualifying one unlocks.
    """
    already = frozenset(unlocked)
    ctx = MilestoneContext.from_trades(trades, tz)

    newly = []
    for milestone in MILESTONES:
        if milestone.id in already or not milestone.predicate(ctx):
            continue
        newly.append(milestone)
        if not unlock_all:
            break

    return MilestoneEvaluation(
        unlocked=already | {m.id for m in newly},
        newly_unlocked=tuple(newly),
    )


def awards_summary(unlocked: Iterable[str]) -> dict:
    """Full catalog with unlocked flags, for the awards view."""
    unlocked = set(unlocked)
    items = [{**m.to_dict(), "unlocked": m.id in unlocked} for m in MILESTONES]
    count = sum(1 for item in items if item["unlocked"])
    return {
        "milestones": items,
        "unlocked_count": count,
        "total": len(MILESTONES),
        "progress_pct": round(safe_pct(count, len(MILESTONES)), 1),
    }


def trades_fingerprint(trades: Iterable[Trade]) -> str:
    """Order-independent digest of a trade list, used to skip repeat evaluations."""
    digest = hashlib.sha256()
    rows = sorted(
        (t.id, t.date.isoformat(), repr(t.amount), t.outcome.value) for t in trades
    )
    for row in rows:
        digest.update("|".join(row).encode())
        digest.update(b"\n")
    return digest.hexdigest()


class MilestoneTracker:
    """Re-evaluates milestones whenever a user's trade list changes.

    Evaluation runs at most once per distinct trade-list snapshot. New unlocks
    are persisted through the preferences store, then each one is announced to
    every subscribed listener exactly once.
    """

    def __init__(
        self,
        store: PreferencesStore,
        user: str = "default",
        unlock_all: bool = False,
        tz: tzinfo | None = None,
    ) -> None:
        self._store = store
        self.user = user
        self._unlock_all = unlock_all
        self._tz = tz
        self._listeners: list[Callable[[Milestone], None]] = []
        self._last_fingerprint: str | None = None

    @property
    def store(self) -> PreferencesStore:
        return self._store

    def subscribe(self, listener: Callable[[Milestone], None]) -> None:
        self._listeners.append(listener)

    @property
    def unlocked(self) -> frozenset[str]:
        return frozenset(self._store.load_unlocked(self.user))

    def on_trades_changed(self, trades: Iterable[Trade]) -> list[Milestone]:
        """Evaluate after an add/delete. Returns the milestones unlocked by this call."""
        trades = list(trades)
        fingerprint = trades_fingerprint(trades)
        if fingerprint == self._last_fingerprint:
            logger.debug("Trade list unchanged for %s, skipping milestone evaluation", self.user)
            return []
        self._last_fingerprint = fingerprint

        result = evaluate_milestones(
            trades,
            self._store.load_unlocked(self.user),
            unlock_all=self._unlock_all,
            tz=self._tz,
        )
        if not result.newly_unlocked:
            return []

        self._store.save_unlocked(self.user, result.unlocked)
        for milestone in result.newly_unlocked:
            logger.info("Milestone unlocked for %s: %s", self.user, milestone.id)
            for listener in self._listeners:
                listener(milestone)
        return list(result.newly_unlocked)
