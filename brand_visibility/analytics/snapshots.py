"""Snapshot Builder — turns one run's LLM answers into stored records.

For every executed query the run stores one QueryResult row per sanitized
mention, or a single brand-less marker row when nothing tracked was found.
The run's ProjectSnapshot counts distinct queries per brand, so
``brand_mentions`` means "queries the brand appeared in".
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from brand_visibility.analytics.sanitizer import sanitize_mentions
from brand_visibility.analytics.stats import percentage
from brand_visibility.analytics.types import (
    BrandProject,
    Mention,
    ProjectSnapshot,
    QueryAnalysisResult,
    QueryResult,
)

logger = logging.getLogger(__name__)


@dataclass
class RunRecords:
    """Everything persisted for a completed run."""

    rows: list[QueryResult]
    snapshot: ProjectSnapshot
    mentions: list[Mention]


def build_result_rows(run_id: str, query: QueryAnalysisResult, mentions: Sequence[Mention]) -> list[QueryResult]:
    """Rows for one executed query; a marker row when there are no mentions."""
    if not mentions:
        return [
            QueryResult(
                run_id=run_id,
                query_text=query.query,
                citations=list(query.citations),
                used_web_search=query.used_web_search,
            )
        ]
    return [
        QueryResult(
            run_id=run_id,
            query_text=query.query,
            brand=m.brand,
            position=m.position,
            sentiment=m.sentiment,
            context=m.context,
            citations=list(query.citations),
            used_web_search=query.used_web_search,
        )
        for m in mentions
    ]


def build_run_records(
    project: BrandProject,
    run_id: str,
    results: Sequence[QueryAnalysisResult],
    snapshot_date: datetime,
) -> RunRecords:
    """Sanitize a run's answers and derive its rows and snapshot."""
    brands = [project.brand_name, *project.competitors]
    rows: list[QueryResult] = []
    all_mentions: list[Mention] = []
    queries_by_brand: dict[str, set[str]] = {name: set() for name in brands}
    queries_with_mentions: set[str] = set()
    analyzed: dict[str, None] = {}

    for result in results:
        analyzed.setdefault(result.query, None)
        mentions = sanitize_mentions(result.mentions, brands)
        # The executed query text is authoritative, whatever the extractor echoed back
        mentions = [
            Mention(query=result.query, brand=m.brand, position=m.position, sentiment=m.sentiment, context=m.context)
            for m in mentions
        ]
        rows.extend(build_result_rows(run_id, result, mentions))
        all_mentions.extend(mentions)

        if mentions:
            queries_with_mentions.add(result.query)
        for m in mentions:
            queries_by_brand.setdefault(m.brand, set()).add(result.query)

    total_queries = len(results)
    brand_queries = len(queries_by_brand[project.brand_name])

    snapshot = ProjectSnapshot(
        project_id=project.id,
        run_id=run_id,
        snapshot_date=snapshot_date,
        total_queries=total_queries,
        queries_with_mentions=len(queries_with_mentions),
        brand_mentions=brand_queries,
        brand_share_pct=percentage(brand_queries, total_queries),
        competitor_shares={
            comp: percentage(len(queries_by_brand.get(comp, ())), total_queries) for comp in project.competitors
        },
        analyzed_queries=list(analyzed),
    )

    logger.info(
        "Run %s: %d queries, %d with mentions, brand in %d",
        run_id,
        total_queries,
        snapshot.queries_with_mentions,
        brand_queries,
    )
    return RunRecords(rows=rows, snapshot=snapshot, mentions=all_mentions)
