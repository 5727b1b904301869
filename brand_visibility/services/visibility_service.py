"""Visibility service — async fetch layer over the analytics engine.

Every read loads plain collections from the repository, then delegates to
the pure functions in ``brand_visibility.analytics``. Nothing derived here
is persisted except the rows and snapshot of a recorded run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import httpx

from brand_visibility.analytics.dashboard import build_dashboard_summary
from brand_visibility.analytics.digest import compose_weekly_digest
from brand_visibility.analytics.query_performance import calculate_query_performance
from brand_visibility.analytics.query_trends import analyze_query_trend
from brand_visibility.analytics.sanitizer import sanitize_mentions
from brand_visibility.analytics.snapshots import RunRecords, build_run_records
from brand_visibility.analytics.suggestions import draft_query_suggestions, finish_query_suggestions
from brand_visibility.analytics.types import (
    BrandProject,
    Mention,
    QueryAnalysisResult,
    QueryResult,
    RawMention,
)
from brand_visibility.collectors.query_generator import QueryIdeaGenerator
from brand_visibility.schemas.dashboard import DashboardSummary
from brand_visibility.schemas.query_analytics import QueryPerformance, QueryTrendAnalysis
from brand_visibility.schemas.suggestion import QuerySuggestion
from brand_visibility.services.repository import ProjectNotFoundError, VisibilityRepository

logger = logging.getLogger(__name__)


def mentions_from_results(results: Iterable[QueryResult], brands: Sequence[str]) -> list[Mention]:
    """Stored rows back to sanitized mentions; marker rows are skipped."""
    raw = [
        RawMention(
            query=row.query_text,
            brand=row.brand,
            position=row.position,
            sentiment=row.sentiment or "neutral",
            context=row.context or "",
        )
        for row in results
        if not row.is_marker
    ]
    return sanitize_mentions(raw, brands)


class VisibilityService:
    """Read and record visibility analytics for brand projects."""

    def __init__(self, repository: VisibilityRepository, query_generator: QueryIdeaGenerator | None = None):
        self.repository = repository
        self.query_generator = query_generator

    async def _require_project(self, project_id: str) -> BrandProject:
        project = await self.repository.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_dashboard(self, project_id: str) -> DashboardSummary:
        project = await self._require_project(project_id)
        results = await self.repository.get_all_project_results(project_id)
        snapshots = await self.repository.get_project_snapshots(project_id)

        mentions = mentions_from_results(results, [project.brand_name, *project.competitors])
        logger.info(
            "Building dashboard: %d mentions, %d snapshots",
            len(mentions),
            len(snapshots),
            extra={"project_id": project_id},
        )
        return build_dashboard_summary(project.brand_name, project.competitors, mentions, snapshots)

    async def get_query_performance(self, project_id: str) -> list[QueryPerformance]:
        project = await self._require_project(project_id)
        runs = await self.repository.get_project_runs(project_id)
        results = await self.repository.get_all_project_results(project_id)
        return calculate_query_performance(
            runs, results, project.brand_name, project.competitors, project.tracked_queries
        )

    async def get_query_trends(self, project_id: str, query: str) -> QueryTrendAnalysis:
        project = await self._require_project(project_id)
        runs = await self.repository.get_project_runs(project_id)
        results = await self.repository.get_all_project_results(project_id)
        return analyze_query_trend(runs, results, query, project.brand_name, project.competitors)

    async def get_query_suggestions(self, project_id: str) -> list[QuerySuggestion]:
        project = await self._require_project(project_id)
        runs = await self.repository.get_project_runs(project_id)
        results = await self.repository.get_all_project_results(project_id)

        draft = draft_query_suggestions(
            runs, results, project.brand_name, project.competitors, project.tracked_queries
        )
        generated: list[str] | None = None
        if draft.needs_ideas:
            exclude = [*project.tracked_queries, *draft.exclude]
            generated = await self._generate_ideas(project, exclude=exclude)
        return finish_query_suggestions(draft, project.tracked_queries, project.keywords, generated)

    async def get_weekly_digest(self, project_id: str) -> str:
        project = await self._require_project(project_id)
        dashboard = await self.get_dashboard(project_id)
        return compose_weekly_digest(project.brand_name, dashboard)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def record_run(
        self,
        project_id: str,
        analysis_results: Sequence[QueryAnalysisResult],
    ) -> RunRecords:
        """Persist one completed run: its result rows and snapshot."""
        project = await self._require_project(project_id)
        run = await self.repository.create_analysis_run(project_id, queries_generated=len(analysis_results))

        records = build_run_records(project, run.id, analysis_results, snapshot_date=run.run_at)
        await self.repository.save_query_results(run.id, records.rows)
        await self.repository.create_snapshot(records.snapshot)

        logger.info(
            "Run recorded: %d rows, brand share %d%%",
            len(records.rows),
            records.snapshot.brand_share_pct,
            extra={"project_id": project_id, "run_id": run.id},
        )
        return records

    async def track_query(self, project_id: str, query: str) -> BrandProject:
        query = query.strip()
        if not query:
            raise ValueError("Tracked query must not be empty")
        return await self.repository.add_tracked_query(project_id, query)

    # ------------------------------------------------------------------
    # Generator
    # ------------------------------------------------------------------

    async def _generate_ideas(self, project: BrandProject, exclude: Sequence[str]) -> list[str] | None:
        """Query ideas from the generator; None when it is missing or fails."""
        if self.query_generator is None:
            return None
        try:
            return await self.query_generator.generate(
                project.brand_name, project.keywords, project.competitors, exclude=exclude
            )
        except httpx.HTTPError as exc:
            logger.warning("Query generator request failed: %s", exc, extra={"project_id": project.id})
        except ValueError as exc:
            logger.warning("Query generator reply unusable: %s", exc, extra={"project_id": project.id})
        return None
