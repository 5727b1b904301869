"""Dashboard Summary Builder — the payload behind the project dashboard.

Recomputed from scratch on every read: summary, trend, gaps, actions and
sentiment cards are pure functions of the mention list and run snapshots.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from brand_visibility.analytics.actions import recommend_actions
from brand_visibility.analytics.gaps import MAX_GAPS, detect_gaps
from brand_visibility.analytics.sanitizer import normalize_sentiment
from brand_visibility.analytics.stats import percentage, round_int
from brand_visibility.analytics.types import Mention, ProjectSnapshot
from brand_visibility.schemas.dashboard import (
    DashboardSummary,
    SentimentBreakdown,
    SummaryCard,
    TrendCard,
    TrendPoint,
)

logger = logging.getLogger(__name__)

TREND_WINDOW = 10  # most recent snapshots shown on the trend card


# ---------------------------------------------------------------------------
# Summary card
# ---------------------------------------------------------------------------


def queries_by_brand(mentions: Iterable[Mention]) -> dict[str, set[str]]:
    """Brand → distinct query texts it appeared in."""
    result: dict[str, set[str]] = {}
    for m in mentions:
        result.setdefault(m.brand, set()).add(m.query)
    return result


def compute_total_queries(snapshots: Iterable[ProjectSnapshot], queries_with_mentions: int) -> int:
    """Cumulative query volume across runs.

    A re-executed query counts once per run. With no snapshot volume at all
    the number of distinct queries with mentions stands in; a positive sum
    below that number is raised to it so that no share of voice exceeds 100%.
    """
    total = sum(s.total_queries for s in snapshots)
    if total == 0:
        return queries_with_mentions
    if total < queries_with_mentions:
        logger.warning(
            "Snapshot totals (%d) below distinct queries with mentions (%d); clamping",
            total,
            queries_with_mentions,
        )
        return queries_with_mentions
    return total


def compute_share_of_voice(
    names: Sequence[str],
    appearances: dict[str, set[str]],
    total_queries: int,
) -> dict[str, int]:
    """Each name's distinct-query appearances as a % of total query volume.

    Denominators are shared, so values overlap and need not sum to 100.
    """
    return {name: percentage(len(appearances.get(name, ())), total_queries) for name in names}


# ---------------------------------------------------------------------------
# Trend card
# ---------------------------------------------------------------------------


def format_week(snapshot: ProjectSnapshot) -> str:
    """Short label like 'Mar 4'."""
    d = snapshot.snapshot_date
    return f"{d:%b} {d.day}"


def build_trend_series(
    snapshots: Iterable[ProjectSnapshot],
    brand: str,
    competitors: Sequence[str],
) -> list[TrendPoint]:
    """Latest TREND_WINDOW snapshots, oldest first.

    Competitor values are reconstructed from the stored share percentage
    (``round(pct / 100 * total_queries)``), so they approximate the original
    counts rather than replay them.
    """
    latest = sorted(snapshots, key=lambda s: s.snapshot_date)[-TREND_WINDOW:]
    series: list[TrendPoint] = []
    for snap in latest:
        brands = {brand: snap.brand_mentions}
        for comp in competitors:
            pct = snap.competitor_shares.get(comp, 0)
            brands[comp] = round_int(pct / 100 * snap.total_queries)
        series.append(TrendPoint(week=format_week(snap), value=snap.brand_mentions, brands=brands))
    return series


def compute_delta(series: Sequence[TrendPoint]) -> int:
    if len(series) < 2:
        return 0
    return series[-1].value - series[-2].value


# ---------------------------------------------------------------------------
# Sentiment card
# ---------------------------------------------------------------------------


def compute_sentiment(mentions: Iterable[Mention], brand: str) -> SentimentBreakdown:
    """Sentiment of the brand's own mentions; competitor mentions are ignored."""
    counts = {"positive": 0, "neutral": 0, "negative": 0}
    for m in mentions:
        if m.brand == brand:
            counts[normalize_sentiment(m.sentiment).value] += 1
    return SentimentBreakdown(**counts)


# ---------------------------------------------------------------------------
# Full dashboard
# ---------------------------------------------------------------------------


def default_query_universe(snapshots: Iterable[ProjectSnapshot]) -> list[str]:
    """Union of every snapshot's analyzed queries, first-seen order."""
    seen: dict[str, None] = {}
    for snap in snapshots:
        for query in snap.analyzed_queries:
            seen.setdefault(query, None)
    return list(seen)


def build_dashboard_summary(
    brand: str,
    competitors: Sequence[str],
    mentions: Sequence[Mention],
    snapshots: Sequence[ProjectSnapshot],
    query_universe: Sequence[str] | None = None,
) -> DashboardSummary:
    """Compute every dashboard card from sanitized mentions and run snapshots."""
    if query_universe is None:
        query_universe = default_query_universe(snapshots)

    appearances = queries_by_brand(mentions)
    queries_with_mentions = len({m.query for m in mentions})
    total_queries = compute_total_queries(snapshots, queries_with_mentions)
    share_of_voice = compute_share_of_voice([brand, *competitors], appearances, total_queries)
    brand_queries = len(appearances.get(brand, ()))

    series = build_trend_series(snapshots, brand, competitors)
    delta = compute_delta(series)

    gaps = detect_gaps(mentions, brand, competitors, query_universe)
    actions = recommend_actions(gaps, delta, share_of_voice[brand])

    logger.debug(
        "Dashboard: brand=%s, queries=%d, total=%d, gaps=%d, delta=%d",
        brand,
        brand_queries,
        total_queries,
        len(gaps),
        delta,
    )

    return DashboardSummary(
        summary_card=SummaryCard(
            brand_mentions=brand_queries,
            total_queries=total_queries,
            queries_with_mentions=queries_with_mentions,
            share_of_voice=share_of_voice,
        ),
        trend_card=TrendCard(series=series, delta=delta),
        gap_card=gaps[:MAX_GAPS],
        action_card=actions,
        sentiment_card=compute_sentiment(mentions, brand),
    )
