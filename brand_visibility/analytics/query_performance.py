"""Query Performance Aggregator — cross-run statistics for every query.

Covers tracked queries and queries discovered by analysis runs. Tracked
queries no run has executed yet are still listed, with zero statistics.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from brand_visibility.analytics.run_aggregator import QueryHistory, aggregate_runs
from brand_visibility.analytics.stats import mean, mean_1dp, percentage
from brand_visibility.analytics.types import AnalysisRun, QueryResult
from brand_visibility.schemas.dashboard import SentimentBreakdown
from brand_visibility.schemas.query_analytics import CitationOut, CompetitorPerformance, QueryPerformance

logger = logging.getLogger(__name__)

TREND_DATA_RUNS = 10  # runs shown in the per-query sparkline


def _performance_from_history(
    history: QueryHistory,
    competitors: Sequence[str],
    tracked: set[str],
) -> QueryPerformance:
    positions = history.brand_positions
    competitor_data: dict[str, CompetitorPerformance] = {}
    for name in competitors:
        comp = history.competitors.get(name)
        competitor_data[name] = CompetitorPerformance(
            appearances=comp.appearances if comp else 0,
            avg_position=mean(comp.positions) if comp else 0.0,  # unrounded, unlike the brand average
        )

    return QueryPerformance(
        query=history.query,
        total_runs=history.total_runs,
        brand_appearances=history.brand_appearances,
        appearance_rate=percentage(history.brand_appearances, history.total_runs),
        avg_position=mean_1dp(positions),
        best_position=min(positions, default=0),
        worst_position=max(positions, default=0),
        sentiment=SentimentBreakdown(
            positive=history.sentiment.positive,
            neutral=history.sentiment.neutral,
            negative=history.sentiment.negative,
        ),
        competitor_data=competitor_data,
        trend_data=[int(a) for a in history.appeared[-TREND_DATA_RUNS:]],
        is_tracked=history.query in tracked,
        citations=[
            CitationOut(url=c.url, title=c.title, domain=c.domain, snippet=c.snippet) for c in history.citations
        ],
        used_web_search=history.used_web_search,
    )


def sort_performances(performances: Iterable[QueryPerformance]) -> list[QueryPerformance]:
    """Queries with appearances first (most appearances, then highest rate).

    Queries the brand never appeared in keep their relative order at the end.
    """
    performances = list(performances)
    seen = [p for p in performances if p.brand_appearances > 0]
    unseen = [p for p in performances if p.brand_appearances == 0]
    seen.sort(key=lambda p: (p.brand_appearances, p.appearance_rate), reverse=True)
    return seen + unseen


def calculate_query_performance(
    runs: Iterable[AnalysisRun],
    results: Iterable[QueryResult],
    brand: str,
    competitors: Sequence[str],
    tracked_queries: Sequence[str] = (),
) -> list[QueryPerformance]:
    """Per-query performance across every run, sorted for display."""
    tracked = set(tracked_queries)
    histories = aggregate_runs(runs, results, brand, competitors, tracked_queries)
    performances = [_performance_from_history(h, competitors, tracked) for h in histories.values()]

    logger.debug(
        "Query performance: %d queries (%d tracked, %d never analyzed)",
        len(performances),
        len(tracked),
        sum(1 for p in performances if p.total_runs == 0),
    )
    return sort_performances(performances)
