"""Query Trend Analyzer — one query, run by run.

Produces the chronological detail behind the query drill-down view and a
coarse up/down/stable direction comparing the early and late halves of the
history.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from brand_visibility.analytics.run_aggregator import SentimentCounts, order_runs
from brand_visibility.analytics.stats import mean_1dp, percentage
from brand_visibility.analytics.types import AnalysisRun, QueryResult, TrendDirection
from brand_visibility.schemas.dashboard import SentimentBreakdown
from brand_visibility.schemas.query_analytics import (
    CompetitorComparison,
    QueryTrendAnalysis,
    QueryTrendDataPoint,
    QueryTrendStats,
)

MIN_TREND_POINTS = 4
TREND_THRESHOLD = 0.1  # change in appearance fraction between halves


def classify_trend(appeared: Sequence[bool]) -> TrendDirection:
    """Compare appearance fractions of the first floor(n/2) points and the rest."""
    if len(appeared) < MIN_TREND_POINTS:
        return TrendDirection.STABLE

    midpoint = len(appeared) // 2
    first, second = appeared[:midpoint], appeared[midpoint:]
    diff = sum(second) / len(second) - sum(first) / len(first)

    if diff > TREND_THRESHOLD:
        return TrendDirection.UP
    if diff < -TREND_THRESHOLD:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def analyze_query_trend(
    runs: Iterable[AnalysisRun],
    results: Iterable[QueryResult],
    query: str,
    brand: str,
    competitors: Sequence[str],
) -> QueryTrendAnalysis:
    """Trend of *query* over every supplied run, oldest first.

    A run that returned no row for the brand counts as "not appeared". When
    a run holds several rows for the same brand, the first one is used.
    """
    rows_by_run: dict[str, list[QueryResult]] = {}
    for row in results:
        if row.query_text == query and not row.is_marker:
            rows_by_run.setdefault(row.run_id, []).append(row)

    data_points: list[QueryTrendDataPoint] = []
    positions: list[int] = []
    sentiment = SentimentCounts()
    competitor_counts = {c: 0 for c in competitors}
    competitor_positions: dict[str, list[int]] = {c: [] for c in competitors}

    for run in order_runs(runs):
        rows = rows_by_run.get(run.id, [])
        brand_row = next((r for r in rows if r.brand == brand), None)

        if brand_row is not None:
            if brand_row.position is not None:
                positions.append(brand_row.position)
            sentiment.add(brand_row.sentiment)

        per_run: dict[str, int | None] = {}
        for comp in competitors:
            comp_row = next((r for r in rows if r.brand == comp), None)
            if comp_row is None:
                per_run[comp] = None
                continue
            competitor_counts[comp] += 1
            per_run[comp] = comp_row.position
            if comp_row.position is not None:
                competitor_positions[comp].append(comp_row.position)

        data_points.append(
            QueryTrendDataPoint(
                date=run.run_at,
                run_id=run.id,
                appeared=brand_row is not None,
                position=brand_row.position if brand_row else None,
                sentiment=brand_row.sentiment if brand_row else None,
                context=brand_row.context if brand_row else None,
                competitor_positions=per_run,
            )
        )

    appeared = [p.appeared for p in data_points]
    appearance_count = sum(appeared)

    return QueryTrendAnalysis(
        query=query,
        data_points=data_points,
        overall_stats=QueryTrendStats(
            total_runs=len(data_points),
            appearance_count=appearance_count,
            appearance_rate=percentage(appearance_count, len(data_points)),
            avg_position=mean_1dp(positions),
            best_position=min(positions, default=0),
            worst_position=max(positions, default=0),
            trend_direction=classify_trend(appeared),
            sentiment_breakdown=SentimentBreakdown(
                positive=sentiment.positive,
                neutral=sentiment.neutral,
                negative=sentiment.negative,
            ),
        ),
        competitor_comparison={
            comp: CompetitorComparison(
                appearance_count=competitor_counts[comp],
                avg_position=mean_1dp(competitor_positions[comp]),
            )
            for comp in competitors
        },
    )
