"""Run Aggregator — per-query history across all runs of a project.

Turns the flat list of stored QueryResult rows into one QueryHistory per
query text. Query performance, single-query trends and query suggestions are
all computed from these histories.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from brand_visibility.analytics.types import AnalysisRun, Citation, QueryResult, Sentiment


@dataclass
class SentimentCounts:
    positive: int = 0
    neutral: int = 0
    negative: int = 0

    def add(self, sentiment: Sentiment | None) -> None:
        if sentiment == Sentiment.POSITIVE:
            self.positive += 1
        elif sentiment == Sentiment.NEGATIVE:
            self.negative += 1
        elif sentiment == Sentiment.NEUTRAL:
            self.neutral += 1


@dataclass
class CompetitorHistory:
    """Appearances of one competitor for one query."""

    name: str
    run_ids: list[str] = field(default_factory=list)  # distinct runs, chronological
    positions: list[int] = field(default_factory=list)

    @property
    def appearances(self) -> int:
        return len(self.run_ids)


@dataclass
class QueryHistory:
    """Everything known about one query text across runs."""

    query: str
    run_ids: list[str] = field(default_factory=list)  # runs touching the query, oldest first
    appeared: list[bool] = field(default_factory=list)  # parallel to run_ids
    brand_positions: list[int] = field(default_factory=list)
    brand_positions_by_run: dict[str, list[int]] = field(default_factory=dict)
    sentiment: SentimentCounts = field(default_factory=SentimentCounts)
    competitors: dict[str, CompetitorHistory] = field(default_factory=dict)
    citations: list[Citation] = field(default_factory=list)
    used_web_search: bool = False
    _run_index: dict[str, int] = field(default_factory=dict, repr=False, compare=False)

    @property
    def total_runs(self) -> int:
        return len(self.run_ids)

    @property
    def brand_appearances(self) -> int:
        return sum(self.appeared)

    def touch(self, run_id: str) -> int:
        """Register *run_id* as touching this query; return its index."""
        idx = self._run_index.get(run_id)
        if idx is None:
            idx = len(self.run_ids)
            self._run_index[run_id] = idx
            self.run_ids.append(run_id)
            self.appeared.append(False)
        return idx


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def order_runs(runs: Iterable[AnalysisRun]) -> list[AnalysisRun]:
    """Runs sorted oldest → newest; ties keep their input order."""
    return sorted(runs, key=lambda r: r.run_at)


def order_results(runs: Iterable[AnalysisRun], results: Iterable[QueryResult]) -> list[QueryResult]:
    """Result rows in chronological run order.

    Rows of unknown runs go after all known runs, in the order their run ids
    were first seen. Row order within a run is preserved.
    """
    rank = {run.id: i for i, run in enumerate(order_runs(runs))}
    unknown: dict[str, int] = {}

    def key(row: QueryResult) -> int:
        if row.run_id in rank:
            return rank[row.run_id]
        return len(rank) + unknown.setdefault(row.run_id, len(unknown))

    return sorted(results, key=key)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def aggregate_runs(
    runs: Iterable[AnalysisRun],
    results: Iterable[QueryResult],
    brand: str,
    competitors: Sequence[str],
    tracked_queries: Iterable[str] = (),
) -> dict[str, QueryHistory]:
    """Group *results* by query text into chronological histories.

    Queries appear in first-seen order, followed by tracked queries that no
    run has touched (with empty histories).
    """
    competitor_set = set(competitors)
    histories: dict[str, QueryHistory] = {}

    for row in order_results(runs, results):
        history = histories.get(row.query_text)
        if history is None:
            history = histories[row.query_text] = QueryHistory(query=row.query_text)

        idx = history.touch(row.run_id)

        if row.citations and not history.citations:
            history.citations = list(row.citations)
        if row.used_web_search:
            history.used_web_search = True

        if row.is_marker:
            continue

        if row.brand == brand:
            history.appeared[idx] = True
            if row.position is not None:
                history.brand_positions.append(row.position)
                history.brand_positions_by_run.setdefault(row.run_id, []).append(row.position)
            history.sentiment.add(row.sentiment)
        elif row.brand in competitor_set:
            comp = history.competitors.get(row.brand)
            if comp is None:
                comp = history.competitors[row.brand] = CompetitorHistory(name=row.brand)
            if row.run_id not in comp.run_ids:
                comp.run_ids.append(row.run_id)
            if row.position is not None:
                comp.positions.append(row.position)

    for query in tracked_queries:
        if query not in histories:
            histories[query] = QueryHistory(query=query)

    return histories
