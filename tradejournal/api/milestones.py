"""Milestone API routes: evaluate after a trade-list change, list awards."""

import logging
from collections import OrderedDict
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tradejournal.api.analytics import parse_or_422, report_rejected
from tradejournal.config import settings
from tradejournal.services.alerting import AlertService
from tradejournal.services.analytics.milestones import MilestoneTracker, awards_summary
from tradejournal.services.preferences import PreferencesStore, get_preferences_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/milestones", tags=["milestones"])

_alerts = AlertService()

# One tracker per user so repeat evaluations of the same snapshot are skipped.
# Least recently used trackers are evicted past MAX_TRACKERS; unlocks are
# persisted in the store, so an evicted user only loses the debounce state.
MAX_TRACKERS = 1024
_trackers: OrderedDict[str, MilestoneTracker] = OrderedDict()


class EvaluateRequest(BaseModel):
    user: str = Field(..., min_length=1, max_length=100)
    trades: list[Any] = Field(default_factory=list)
    strict: bool = False


def get_tracker(user: str, store: PreferencesStore) -> MilestoneTracker:
    tracker = _trackers.get(user)
    if tracker is None or tracker.store is not store:
        tracker = MilestoneTracker(
            store,
            user=user,
            unlock_all=settings.milestone_unlock_all,
            tz=settings.calendar_tz,
        )
        _trackers[user] = tracker
    _trackers.move_to_end(user)
    while len(_trackers) > MAX_TRACKERS:
        _trackers.popitem(last=False)
    return tracker


@router.post("/evaluate")
async def evaluate(
    req: EvaluateRequest,
    store: PreferencesStore = Depends(get_preferences_store),
):
    """Call after every add/delete with the user's complete trade list."""
    batch = parse_or_422(req)
    await report_rejected(req.user, batch)
    tracker = get_tracker(req.user, store)

    newly = tracker.on_trades_changed(batch.trades)
    for milestone in newly:
        await _alerts.milestone_unlocked(req.user, milestone)

    return {
        "newly_unlocked": [m.to_dict() for m in newly],
        **awards_summary(tracker.unlocked),
        "rejected": [m.to_dict() for m in batch.rejected],
    }


@router.get("/{user}")
async def list_awards(user: str, store: PreferencesStore = Depends(get_preferences_store)):
    """Catalog with the user's unlocked flags."""
    return awards_summary(store.load_unlocked(user))
