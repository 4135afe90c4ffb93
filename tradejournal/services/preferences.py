"""Per-user preferences: goals, initial balance, general target, unlocked milestones.

Loaded at session start and saved on each change. The analytics engine never
reads these itself; callers load them here and pass them in.
Values are stored as JSON. With the Redis backend, an unreachable server is
logged and treated as "nothing stored" so the dashboard still renders.
"""

import json
import logging
import math
from collections.abc import Iterable
from typing import Any

import redis
from pydantic import ValidationError

from tradejournal.config import settings
from tradejournal.models.goals import Goals

logger = logging.getLogger(__name__)

REDIS_KEY_PREFIX = "tradejournal:prefs"

KEY_GOALS = "goals"
KEY_INITIAL_BALANCE = "initial_balance"
KEY_TARGET = "target"
KEY_UNLOCKED = "unlocked_milestones"


def default_goals() -> Goals:
    return Goals(
        daily=settings.default_goal_daily,
        weekly=settings.default_goal_weekly,
        monthly=settings.default_goal_monthly,
        yearly=settings.default_goal_yearly,
    )


def _finite_number(value: Any, name: str, allow_negative: bool = True) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite, got {value!r}")
    if not allow_negative and number < 0:
        raise ValueError(f"{name} must be >= 0, got {number}")
    return number


class PreferencesStore:
    """Typed get/set contract over a raw JSON key-value backend."""

    def _get(self, user: str, key: str) -> Any | None:
        raise NotImplementedError

    def _set(self, user: str, key: str, value: Any) -> None:
        raise NotImplementedError

    # ---------- goals ----------
    def load_goals(self, user: str) -> Goals:
        raw = self._get(user, KEY_GOALS)
        if raw is None:
            return default_goals()
        try:
            return Goals.model_validate(raw)
        except ValidationError as e:
            logger.warning("Stored goals for %s are invalid, using defaults: %s", user, e)
            return default_goals()

    def save_goals(self, user: str, goals: Goals) -> None:
        self._set(user, KEY_GOALS, goals.model_dump())

    # ---------- initial balance ----------
    def load_initial_balance(self, user: str) -> float:
        raw = self._get(user, KEY_INITIAL_BALANCE)
        if raw is None:
            return settings.default_initial_balance
        try:
            return _finite_number(raw, "initial balance")
        except ValueError as e:
            logger.warning("Stored balance for %s is invalid, using default: %s", user, e)
            return settings.default_initial_balance

    def save_initial_balance(self, user: str, balance: float) -> None:
        self._set(user, KEY_INITIAL_BALANCE, _finite_number(balance, "initial balance"))

    # ---------- general target ----------
    def load_target(self, user: str) -> float:
        raw = self._get(user, KEY_TARGET)
        if raw is None:
            return 0.0
        try:
            return _finite_number(raw, "target", allow_negative=False)
        except ValueError as e:
            logger.warning("Stored target for %s is invalid, ignoring: %s", user, e)
            return 0.0

    def save_target(self, user: str, target: float) -> None:
        self._set(user, KEY_TARGET, _finite_number(target, "target", allow_negative=False))

    # ---------- milestones ----------
    def load_unlocked(self, user: str) -> set[str]:
        raw = self._get(user, KEY_UNLOCKED)
        if not isinstance(raw, list):
            return set()
        return {str(item) for item in raw}

    def save_unlocked(self, user: str, milestone_ids: Iterable[str]) -> None:
        """Persist unlocked ids. Merges with what is stored; never removes."""
        merged = self.load_unlocked(user) | set(milestone_ids)
        self._set(user, KEY_UNLOCKED, sorted(merged))


class InMemoryPreferences(PreferencesStore):
    """Process-local store, used in development and tests."""

    def __init__(self) -> None:
        self._data: dict[tuple[str, str], str] = {}

    def _get(self, user: str, key: str) -> Any | None:
        raw = self._data.get((user, key))
        return json.loads(raw) if raw is not None else None

    def _set(self, user: str, key: str, value: Any) -> None:
        self._data[(user, key)] = json.dumps(value)


class RedisPreferences(PreferencesStore):
    """Redis-backed store, one key per user and preference."""

    def __init__(self, url: str | None = None) -> None:
        self._url = url or settings.redis_url
        self._client: redis.Redis | None = None

    def _redis(self) -> redis.Redis | None:
        if self._client is None:
            try:
                self._client = redis.from_url(self._url, decode_responses=True)
                self._client.ping()
            except Exception as e:
                logger.warning("Redis unavailable for preferences: %s", e)
                self._client = None
        return self._client

    @staticmethod
    def _key(user: str, key: str) -> str:
        return f"{REDIS_KEY_PREFIX}:{user}:{key}"

    def _get(self, user: str, key: str) -> Any | None:
        r = self._redis()
        if r is None:
            return None
        try:
            raw = r.get(self._key(user, key))
            return json.loads(raw) if raw else None
        except Exception as e:
            logger.warning("Failed to load preference %s for %s: %s", key, user, e)
            return None

    def _set(self, user: str, key: str, value: Any) -> None:
        r = self._redis()
        if r is None:
            logger.warning("Preference %s for %s not saved: Redis unavailable", key, user)
            return
        try:
            r.set(self._key(user, key), json.dumps(value))
        except Exception as e:
            logger.warning("Failed to save preference %s for %s: %s", key, user, e)


_store: PreferencesStore | None = None


def get_preferences_store() -> PreferencesStore:
    """Process-wide store selected by settings.preferences_backend."""
    global _store
    if _store is None:
        if settings.preferences_backend == "redis":
            _store = RedisPreferences()
        else:
            _store = InMemoryPreferences()
        logger.info("Preferences backend: %s", type(_store).__name__)
    return _store
