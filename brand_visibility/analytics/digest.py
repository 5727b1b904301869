"""Weekly digest — a short plain-text recap of a dashboard."""

from __future__ import annotations

from brand_visibility.schemas.dashboard import DashboardSummary

FALLBACK_ACTION = "Stay the course and re-run next week."


def compose_weekly_digest(brand: str, dashboard: DashboardSummary) -> str:
    share = dashboard.summary_card.share_of_voice.get(brand, 0)
    delta = dashboard.trend_card.delta
    gap = dashboard.gap_card[0] if dashboard.gap_card else None
    action = dashboard.action_card[0] if dashboard.action_card else FALLBACK_ACTION

    lines = [
        f"{brand} captured {share}% of AI voice this week.",
        f"Queries with {brand} vs last run: {'+' if delta >= 0 else ''}{delta}.",
        (
            f"Biggest gap: {gap.query} (dominated by {gap.dominating_competitor})."
            if gap
            else "No query gaps detected."
        ),
        f"Action: {action}",
    ]
    return "\n".join(lines)
