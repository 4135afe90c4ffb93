"""Shared test fixtures."""

from datetime import datetime, timezone

import pytest

from tradejournal.models.trade import Trade
from tradejournal.services.preferences import InMemoryPreferences


@pytest.fixture
def store() -> InMemoryPreferences:
    """Fresh in-memory preferences for each test."""
    return InMemoryPreferences()


@pytest.fixture
def now() -> datetime:
    """Wednesday 2024-01-03, 18:00 UTC."""
    return datetime(2024, 1, 3, 18, tzinfo=timezone.utc)


@pytest.fixture
def week_of_trades() -> list[Trade]:
    """Mon +100, Tue -30, Wed +50 in the first ISO week of 2024."""
    return [
        Trade(id="mon", date=datetime(2024, 1, 1, 12, tzinfo=timezone.utc), amount=100, outcome="profit"),
        Trade(id="tue", date=datetime(2024, 1, 2, 12, tzinfo=timezone.utc), amount=30, outcome="loss"),
        Trade(id="wed", date=datetime(2024, 1, 3, 12, tzinfo=timezone.utc), amount=50, outcome="profit"),
    ]
