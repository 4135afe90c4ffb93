"""Trade record model and boundary validation.

Raw records arrive from the persistence collaborator as JSON-ish dicts
(`_id`, `type`, ISO date strings). They are validated once here; everything
downstream works with `Trade` instances only.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class TradeOutcome(str, Enum):
    PROFIT = "profit"
    LOSS = "loss"


class Trade(BaseModel):
    """A single logged trade. Amount is a non-negative magnitude."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1, validation_alias=AliasChoices("id", "_id"))
    date: datetime
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    outcome: TradeOutcome = Field(..., validation_alias=AliasChoices("outcome", "type"))
    pair: str | None = None
    market: str | None = None
    strategy: str | None = None
    notes: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("id must be a string or number, not a boolean")
        # Mongo ObjectIds and integer keys both end up as strings
        if value is not None and not isinstance(value, str):
            return str(value)
        return value

    @field_validator("amount", mode="before")
    @classmethod
    def _reject_bool_amount(cls, value: Any) -> Any:
        # bool is an int subclass and would otherwise pass as 0.0 or 1.0
        if isinstance(value, bool):
            raise ValueError("amount must be a number, not a boolean")
        return value

    @property
    def net(self) -> float:
        """Signed effect on equity: +amount for profit, -amount for loss."""
        return self.amount if self.outcome == TradeOutcome.PROFIT else -self.amount

    @property
    def is_win(self) -> bool:
        return self.outcome == TradeOutcome.PROFIT


@dataclass
class MalformedTrade:
    """A raw record that failed validation, kept for data-integrity reporting."""

    index: int
    record: Any
    errors: list[str]

    def to_dict(self) -> dict:
        return {"index": self.index, "record": self.record, "errors": self.errors}


@dataclass
class TradeBatch:
    """Result of parsing raw records: valid trades in input order plus rejects."""

    trades: list[Trade] = field(default_factory=list)
    rejected: list[MalformedTrade] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected


class MalformedTradeError(ValueError):
    """Raised by strict parsing when one or more records are malformed."""

    def __init__(self, rejected: list[MalformedTrade]) -> None:
        self.rejected = rejected
        summary = "; ".join(
            f"record {m.index}: {', '.join(m.errors)}" for m in rejected
        )
        super().__init__(f"{len(rejected)} malformed trade record(s): {summary}")


def _format_errors(exc: ValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "record"
        messages.append(f"{loc}: {err['msg']}")
    return messages


def parse_trade(record: Mapping[str, Any] | Trade) -> Trade:
    """Validate a single raw record. Raises pydantic.ValidationError."""
    if isinstance(record, Trade):
        return record
    return Trade.model_validate(record)


def parse_trades(
    records: Iterable[Mapping[str, Any] | Trade],
    strict: bool = False,
) -> TradeBatch:
    """Validate raw records, keeping input order.

    Malformed records (non-finite or negative amount, unparseable date,
    unknown outcome, missing id) are excluded from the batch's trades and
    reported in `rejected`. With strict=True a MalformedTradeError is raised
    instead when anything was rejected.
    """
    batch = TradeBatch()
    for index, record in enumerate(records):
        if not isinstance(record, (Mapping, Trade)):
            batch.rejected.append(
                MalformedTrade(index=index, record=record, errors=["record: not an object"])
            )
            continue
        try:
            batch.trades.append(parse_trade(record))
        except ValidationError as e:
            batch.rejected.append(
                MalformedTrade(index=index, record=dict(record), errors=_format_errors(e))
            )

    for bad in batch.rejected:
        logger.warning("Rejected malformed trade record %d: %s", bad.index, "; ".join(bad.errors))

    if strict and batch.rejected:
        raise MalformedTradeError(batch.rejected)
    return batch
