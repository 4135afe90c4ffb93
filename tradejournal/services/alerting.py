"""Alerting service: webhook notifications for milestones, goals, daily summaries and bad data.

Sends alerts to a Discord/Slack-compatible webhook URL. Falls back to logging
when no webhook is configured.
"""

import logging
from enum import Enum

import httpx

from tradejournal.config import settings
from tradejournal.models.trade import MalformedTrade
from tradejournal.services.analytics.goals import GoalProgress
from tradejournal.services.analytics.milestones import Milestone

logger = logging.getLogger(__name__)


class AlertLevel(str, Enum):
    """Alert severity levels."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LEVEL_EMOJI = {
    AlertLevel.INFO: "ℹ️",
    AlertLevel.WARNING: "⚠️",
    AlertLevel.ERROR: "❌",
}


class AlertService:
    """Send webhook alerts for journal events.

    Compatible with Discord and Slack incoming webhooks.
    Falls back to logging when no webhook URL is configured.
    """

    def __init__(self, webhook_url: str | None = None) -> None:
        self._webhook_url = webhook_url or settings.alert_webhook_url

    def _payload(self, title: str, message: str, level: AlertLevel) -> dict:
        emoji = _LEVEL_EMOJI.get(level, "")
        if "hooks.slack.com" in self._webhook_url:
            # Slack mrkdwn bolds with single asterisks and reads "text"
            return {"text": f"*{emoji} {title}*\n{message}"}
        return {"content": f"**{emoji} {title}**\n{message}"}

    async def send(self, title: str, message: str, level: AlertLevel = AlertLevel.INFO) -> bool:
        """Post one alert, or log it when no webhook is configured.

        Returns True only when the webhook accepted the message.
        """
        if not self._webhook_url:
            log_fn = {
                AlertLevel.WARNING: logger.warning,
                AlertLevel.ERROR: logger.error,
            }.get(level, logger.info)
            log_fn("ALERT [%s]: %s: %s", level.value, title, message)
            return False

        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                resp = await client.post(self._webhook_url, json=self._payload(title, message, level))
        except httpx.HTTPError as e:
            logger.error("Failed to send webhook alert: %s", e)
            return False

        if resp.is_success:
            return True
        logger.warning("Webhook returned %d: %s", resp.status_code, resp.text[:200])
        return False

    async def milestone_unlocked(self, user: str, milestone: Milestone) -> bool:
        """Announce a newly unlocked milestone."""
        return await self.send(
            title=f"Milestone Unlocked: {milestone.title}",
            message=(
                f"User: {user}\n"
                f"{milestone.description}\n"
                f"Reward: {milestone.reward}"
            ),
            level=AlertLevel.INFO,
        )

    async def goal_reached(self, user: str, progress: GoalProgress) -> bool:
        """Announce that a period's net P/L met its goal."""
        return await self.send(
            title=f"{progress.period.value.capitalize()} Goal Reached",
            message=(
                f"User: {user}\n"
                f"P/L: ${progress.net_pnl:+,.2f} of ${progress.target:,.2f} target"
            ),
            level=AlertLevel.INFO,
        )

    async def data_integrity(self, user: str, rejected: list[MalformedTrade]) -> bool:
        """Report trade records that were excluded from analytics."""
        lines = [f"record {m.index}: {'; '.join(m.errors)}" for m in rejected[:10]]
        if len(rejected) > 10:
            lines.append(f"... and {len(rejected) - 10} more")
        return await self.send(
            title=f"{len(rejected)} Malformed Trade Record(s)",
            message=f"User: {user}\n" + "\n".join(lines),
            level=AlertLevel.WARNING,
        )

    async def daily_summary(
        self,
        user: str,
        total_trades: int,
        net_pnl: float,
        win_rate_pct: float,
        equity: float,
        day: str,
    ) -> bool:
        """Send the end-of-day P/L summary."""
        return await self.send(
            title=f"Daily Summary ({day})",
            message=(
                f"User: {user}\n"
                f"Trades today: {total_trades}\n"
                f"P/L: ${net_pnl:+,.2f}\n"
                f"Win rate: {win_rate_pct:.1f}%\n"
                f"Equity: ${equity:,.2f}"
            ),
            level=AlertLevel.INFO,
        )
