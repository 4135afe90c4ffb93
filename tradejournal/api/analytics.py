"""Analytics API routes: dashboard, equity curve and streaks for a posted trade list.

The caller supplies the trade list (fetched from its own trade store); these
routes only validate it and compute derived views.
"""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from tradejournal.config import settings
from tradejournal.models.goals import Goals
from tradejournal.models.trade import MalformedTradeError, TradeBatch, parse_trades
from tradejournal.services.alerting import AlertService
from tradejournal.services.analytics.equity import EquityCurve
from tradejournal.services.analytics.report import build_dashboard
from tradejournal.services.analytics.streaks import current_streak, longest_streak
from tradejournal.services.analytics.windows import (
    Granularity,
    TimeWindow,
    filter_by_window,
    resolve_now,
)
from tradejournal.services.preferences import PreferencesStore, get_preferences_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/analytics", tags=["analytics"])

_alerts = AlertService()


class TradesRequest(BaseModel):
    """Raw trade records plus evaluation options."""

    trades: list[Any] = Field(default_factory=list)
    now: datetime | None = None
    strict: bool = False
    user: str | None = Field(None, min_length=1, max_length=100)


class DashboardRequest(TradesRequest):
    window: TimeWindow = TimeWindow.ALL
    initial_balance: float | None = Field(None, allow_inf_nan=False)
    goals: Goals | None = None
    target: float | None = Field(None, ge=0, allow_inf_nan=False)


class EquityCurveRequest(TradesRequest):
    window: TimeWindow = TimeWindow.ALL
    initial_balance: float | None = Field(None, allow_inf_nan=False)


def parse_or_422(req: TradesRequest) -> TradeBatch:
    """Validate posted records; strict requests fail with every rejected record."""
    try:
        return parse_trades(req.trades, strict=req.strict)
    except MalformedTradeError as e:
        raise HTTPException(
            status_code=422,
            detail={"message": str(e), "rejected": [m.to_dict() for m in e.rejected]},
        )


async def report_rejected(user: str | None, batch: TradeBatch) -> None:
    """Send a data-integrity alert when any posted record was excluded."""
    if batch.rejected:
        await _alerts.data_integrity(user or "anonymous", batch.rejected)


@router.post("/dashboard")
async def dashboard(
    req: DashboardRequest,
    store: PreferencesStore = Depends(get_preferences_store),
):
    """Full dashboard for the posted trades.

    Balance, goals and target fall back to the user's stored preferences
    (or configured defaults) when not given in the request.
    """
    batch = parse_or_422(req)
    await report_rejected(req.user, batch)

    user = req.user or "default"
    initial_balance = (
        req.initial_balance if req.initial_balance is not None
        else store.load_initial_balance(user)
    )
    goals = req.goals or store.load_goals(user)
    target = req.target if req.target is not None else store.load_target(user)

    report = build_dashboard(
        batch.trades,
        initial_balance=initial_balance,
        goals=goals,
        now=req.now,
        window=req.window,
        tz=settings.calendar_tz,
        target=target,
    )

    reached = [g for g in report.goals if g.reached]
    for progress in reached:
        logger.info("Goal reached for %s: %s", user, progress.period.value)

    result = report.to_dict()
    result["rejected"] = [m.to_dict() for m in batch.rejected]
    return result


@router.post("/equity-curve")
async def equity_curve(
    req: EquityCurveRequest,
    store: PreferencesStore = Depends(get_preferences_store),
):
    """Running balance after each trade in the window, oldest first."""
    batch = parse_or_422(req)
    await report_rejected(req.user, batch)

    initial_balance = (
        req.initial_balance if req.initial_balance is not None
        else store.load_initial_balance(req.user or "default")
    )
    tz = settings.calendar_tz
    trades = filter_by_window(batch.trades, req.window, resolve_now(req.now, tz), tz)
    curve = EquityCurve(trades, initial_balance, tz)
    return {
        "window": req.window.value,
        "initial_balance": round(initial_balance, 2),
        "final_equity": round(curve.final_equity, 2),
        "points": curve.to_list(),
        "rejected": [m.to_dict() for m in batch.rejected],
    }


@router.post("/streaks")
async def streaks(req: TradesRequest):
    """Current winning streak per granularity."""
    batch = parse_or_422(req)
    await report_rejected(req.user, batch)
    tz = settings.calendar_tz
    return {
        "daily": current_streak(batch.trades, Granularity.DAILY, tz),
        "weekly": current_streak(batch.trades, Granularity.WEEKLY, tz),
        "monthly": current_streak(batch.trades, Granularity.MONTHLY, tz),
        "longest_daily": longest_streak(batch.trades, Granularity.DAILY, tz),
        "rejected": [m.to_dict() for m in batch.rejected],
    }
