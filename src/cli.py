"""
Horizon — Command-line dashboard.

Prints the home-screen dashboard for one user as plain text, reading from
the configured SQLite database.
"""

from __future__ import annotations

import argparse
import logging
import sys

from src.core.insight_service import Dashboard

logger = logging.getLogger(__name__)

_STATUS_ICONS = {
    "thriving": "✨",
    "connected": "💙",
    "missing": "⚠️",
    "unknown": "·",
}


def format_dashboard(dashboard: Dashboard) -> str:
    """Render a dashboard as plain text, one section per view."""
    lines = [f"Horizon — {dashboard.generated_at:%A, %d %B %Y}", ""]

    lines.append("Weekly goals")
    if not dashboard.goals:
        lines.append("  (no goals yet)")
    for g in dashboard.goals:
        ramp = f"  [{g.ramp_label}]" if g.ramp_label else ""
        done = " ✓" if g.is_complete else ""
        lines.append(f"  {g.name}: {g.current:g}/{g.target:g} {g.unit} ({g.percent:.0f}%){done}{ramp}")
    lines.append("")

    lines.append("Relationships")
    if not dashboard.relationships:
        lines.append("  Add people you care about to track relationship health")
    for r in dashboard.relationships:
        icon = _STATUS_ICONS[r.status.value]
        lines.append(f"  {icon} {r.person_name} ({r.relationship}): {r.insight}")
    lines.append("")

    if dashboard.upcoming:
        lines.append("Coming up")
        for u in dashboard.upcoming[:3]:
            who = f"{u.person_name} • " if u.person_name else ""
            lines.append(f"  {u.title}: {who}{u.next_date:%b %d} ({u.label})")
        lines.append("")

    lines.append("Balance")
    for area in dashboard.balance.areas:
        lines.append(f"  {area.label:<14} {area.value:>3}%  {area.status.value}")
    lines.append(f"  {dashboard.balance.insight}")

    if dashboard.nudges:
        lines.append("")
        lines.append("Patterns noticed")
        for n in dashboard.nudges[:3]:
            lines.append(f"  - {n.message}")

    if dashboard.drift:
        lines.append("")
        lines.append("Drift")
        for m in dashboard.drift:
            lines.append(f"  {m.label}: {m.message}")

    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python main.py",
        description="Print the Horizon dashboard for one user.",
    )
    parser.add_argument("user_id", help="Owner of the goals, people and logs to report on")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point: `python main.py <user_id>`.

    Bad arguments exit with status 2 through argparse.
    """
    from src.adapters.clock import SystemClock
    from src.core.insight_service import InsightService
    from src.data.db import HorizonDB
    from src.ports.store_port import StoreError

    args = _build_parser().parse_args(argv)

    try:
        service = InsightService(store=HorizonDB(), clock=SystemClock())
        dashboard = service.dashboard(args.user_id)
    except StoreError as exc:
        print(f"ERROR: could not read the database: {exc}", file=sys.stderr)
        return 1

    print(format_dashboard(dashboard))
    return 0
