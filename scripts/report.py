"""CLI for printing a journal performance report from an exported trade file.

Usage:
    python scripts/report.py trades.json
    python scripts/report.py trades.json --window monthly --balance 5000
    python scripts/report.py trades.json --goals 50,250,1000,12000 --json
    python scripts/report.py trades.json --window daily --notify

The input is a JSON array of trade records as returned by GET /api/trades
(`_id`, `date`, `amount`, `type`, optional `pair`/`market`/`strategy`/`notes`).
"""

import argparse
import asyncio
import json
import logging
import math
import sys
from pathlib import Path

from tradejournal.config import settings
from tradejournal.models.goals import Goals
from tradejournal.models.trade import parse_trades
from tradejournal.services.alerting import AlertService
from tradejournal.services.analytics.milestones import evaluate_milestones
from tradejournal.services.analytics.report import DashboardReport, build_dashboard
from tradejournal.services.analytics.windows import TimeWindow


def format_report(report: DashboardReport, milestone_ids: frozenset[str]) -> str:
    """Format a dashboard report as a readable console report."""
    lines = []
    sep = "=" * 68
    stats = report.stats
    dd = report.drawdown

    lines.append(sep)
    lines.append("  Trading Journal Report")
    lines.append(sep)
    lines.append(
        f"  Window:      {report.window.value:<16s}"
        f"Generated: {report.generated_at.strftime('%Y-%m-%d %H:%M')}"
    )
    lines.append("-" * 68)

    lines.append("  ACCOUNT")
    lines.append(f"  Initial Balance:        ${report.initial_balance:>12,.2f}")
    lines.append(f"  Current Equity:         ${report.current_equity:>12,.2f}")
    lines.append(f"  Peak Equity:            ${dd.max_equity:>12,.2f}")
    lines.append(f"  Max Drawdown:           -{dd.max_drawdown_pct:.2f}% (${dd.max_drawdown:,.2f})")
    lines.append(f"  Worst Day:              ${report.daily_drawdown:>12,.2f}")

    lines.append("")

    lines.append("  TRADES")
    lines.append(
        f"  Total: {stats.total_trades}   "
        f"Win Rate: {stats.win_rate_pct:.1f}% "
        f"({stats.winning_trades}W / {stats.losing_trades}L)"
    )
    lines.append(f"  Total Profit:           ${stats.total_profit:>12,.2f}")
    lines.append(f"  Total Loss:             ${stats.total_loss:>12,.2f}")
    lines.append(f"  Net P/L:                ${stats.net_pnl:>+12,.2f}")
    lines.append(f"  Profit Factor:          {stats.profit_factor:.2f}")
    lines.append(
        f"  Streaks:                {report.streaks['daily']}d / "
        f"{report.streaks['weekly']}w / {report.streaks['monthly']}m "
        f"(best {report.longest_daily_streak}d)"
    )

    trend = report.monthly_trend
    lines.append(
        f"  This Month:             ${trend.this_month:>+12,.2f} "
        f"({trend.direction} {abs(trend.change_pct):.1f}% vs last month)"
    )

    applicable = [g for g in report.goals if g.applicable]
    if applicable:
        lines.append("")
        lines.append("  GOALS")
        for g in applicable:
            lines.append(
                f"  {g.period.value.capitalize():<10} ${g.net_pnl:>+10,.2f} / "
                f"${g.target:>10,.2f}  {g.percentage:5.1f}%"
            )

    lines.append("")
    lines.append(f"  MILESTONES ({len(milestone_ids)} unlocked)")
    for mid in sorted(milestone_ids):
        lines.append(f"  - {mid}")

    lines.append(sep)
    return "\n".join(lines)


def _parse_goals(raw: str | None) -> Goals:
    if not raw:
        return Goals()
    parts = [float(p) for p in raw.split(",")]
    if len(parts) != 4:
        raise ValueError("--goals expects four comma-separated numbers: daily,weekly,monthly,yearly")
    return Goals(daily=parts[0], weekly=parts[1], monthly=parts[2], yearly=parts[3])


async def run_report(args: argparse.Namespace) -> None:
    """Load trades, build the dashboard and print it."""
    try:
        records = json.loads(Path(args.file).read_text(encoding="utf-8"))
        if not isinstance(records, list):
            raise ValueError(f"{args.file} must contain a JSON array of trade records")
        if not math.isfinite(args.balance):
            raise ValueError("--balance must be a finite number")
        batch = parse_trades(records, strict=args.strict)
        goals = _parse_goals(args.goals)
    except (OSError, ValueError) as e:
        # MalformedTradeError and JSONDecodeError are both ValueErrors
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if batch.rejected:
        print(f"Warning: skipped {len(batch.rejected)} malformed record(s)", file=sys.stderr)

    report = build_dashboard(
        batch.trades,
        initial_balance=args.balance,
        goals=goals,
        window=args.window,
        tz=settings.calendar_tz,
    )
    milestones = evaluate_milestones(batch.trades, (), unlock_all=True, tz=settings.calendar_tz)

    if args.json:
        out = report.to_dict()
        out["milestones"] = sorted(milestones.unlocked)
        out["rejected"] = [m.to_dict() for m in batch.rejected]
        print(json.dumps(out, indent=2))
    else:
        print(format_report(report, milestones.unlocked))

    if args.notify:
        alerts = AlertService()
        await alerts.daily_summary(
            user=args.user,
            total_trades=report.stats.total_trades,
            net_pnl=report.stats.net_pnl,
            win_rate_pct=report.stats.win_rate_pct,
            equity=report.current_equity,
            day=report.generated_at.strftime("%Y-%m-%d"),
        )
        for progress in report.goals:
            if progress.reached:
                await alerts.goal_reached(args.user, progress)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(
        description="Trading journal report: P/L, equity, drawdown, streaks and goals"
    )
    parser.add_argument("file", help="JSON file with an array of trade records")
    parser.add_argument(
        "--window", default="all",
        choices=[w.value for w in TimeWindow],
        help="Time window for stats and equity curve (default: all)",
    )
    parser.add_argument(
        "--balance", type=float, default=settings.default_initial_balance,
        help=f"Initial account balance (default: {settings.default_initial_balance:g})",
    )
    parser.add_argument(
        "--goals",
        help="Profit goals as daily,weekly,monthly,yearly (e.g. 50,250,1000,12000)",
    )
    parser.add_argument(
        "--strict", action="store_true",
        help="Fail on any malformed record instead of skipping it",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Output result as JSON instead of formatted report",
    )
    parser.add_argument(
        "--notify", action="store_true",
        help="Send a summary alert to the configured webhook",
    )
    parser.add_argument("--user", default="default", help="User name for alerts")
    args = parser.parse_args()

    asyncio.run(run_report(args))


if __name__ == "__main__":
    main()
