"""Profit goals per calendar period."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class GoalPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Goals(BaseModel):
    """Target net profit for each period. Zero means no goal set."""

    model_config = ConfigDict(frozen=True)

    daily: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    weekly: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    monthly: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    yearly: float = Field(default=0.0, ge=0, allow_inf_nan=False)

    def target_for(self, period: GoalPeriod) -> float:
        return getattr(self, GoalPeriod(period).value)
