"""Validated data models for the trade journal."""

from tradejournal.models.goals import GoalPeriod, Goals
from tradejournal.models.trade import (
    MalformedTrade,
    MalformedTradeError,
    Trade,
    TradeBatch,
    TradeOutcome,
    parse_trades,
)

__all__ = [
    "GoalPeriod",
    "Goals",
    "MalformedTrade",
    "MalformedTradeError",
    "Trade",
    "TradeBatch",
    "TradeOutcome",
    "parse_trades",
]
