"""Data-access port for run history, plus an in-memory adapter.

The analytics engine never touches storage; services fetch plain
collections through a VisibilityRepository and hand them to the engine.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime, timezone

from brand_visibility.analytics.types import AnalysisRun, BrandProject, ProjectSnapshot, QueryResult

logger = logging.getLogger(__name__)


class ProjectNotFoundError(LookupError):
    """Raised when a project id is unknown to the repository."""

    def __init__(self, project_id: str):
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id


class VisibilityRepository(ABC):
    """Storage collaborator. Collections are returned oldest first."""

    @abstractmethod
    async def get_project(self, project_id: str) -> BrandProject | None: ...

    @abstractmethod
    async def get_project_runs(self, project_id: str) -> list[AnalysisRun]: ...

    @abstractmethod
    async def get_all_project_results(self, project_id: str) -> list[QueryResult]: ...

    @abstractmethod
    async def get_project_snapshots(self, project_id: str) -> list[ProjectSnapshot]: ...

    @abstractmethod
    async def create_analysis_run(self, project_id: str, queries_generated: int) -> AnalysisRun: ...

    @abstractmethod
    async def save_query_results(self, run_id: str, rows: Sequence[QueryResult]) -> None: ...

    @abstractmethod
    async def create_snapshot(self, snapshot: ProjectSnapshot) -> ProjectSnapshot: ...

    @abstractmethod
    async def add_tracked_query(self, project_id: str, query: str) -> BrandProject: ...


class InMemoryRepository(VisibilityRepository):
    """Process-local storage for development, demos and tests."""

    def __init__(self) -> None:
        self._projects: dict[str, BrandProject] = {}
        self._runs: dict[str, list[AnalysisRun]] = {}
        self._results: dict[str, list[QueryResult]] = {}  # run_id → rows
        self._snapshots: dict[str, list[ProjectSnapshot]] = {}

    def add_project(self, project: BrandProject) -> BrandProject:
        self._projects[project.id] = project
        return project

    async def get_project(self, project_id: str) -> BrandProject | None:
        return self._projects.get(project_id)

    async def get_project_runs(self, project_id: str) -> list[AnalysisRun]:
        return list(self._runs.get(project_id, []))

    async def get_all_project_results(self, project_id: str) -> list[QueryResult]:
        rows: list[QueryResult] = []
        for run in self._runs.get(project_id, []):
            rows.extend(self._results.get(run.id, []))
        return rows

    async def get_project_snapshots(self, project_id: str) -> list[ProjectSnapshot]:
        return list(self._snapshots.get(project_id, []))

    async def create_analysis_run(self, project_id: str, queries_generated: int) -> AnalysisRun:
        if project_id not in self._projects:
            raise ProjectNotFoundError(project_id)
        run = AnalysisRun(
            id=str(uuid.uuid4()),
            project_id=project_id,
            run_at=datetime.now(timezone.utc),
            queries_generated=queries_generated,
        )
        self._runs.setdefault(project_id, []).append(run)
        return run

    async def save_query_results(self, run_id: str, rows: Sequence[QueryResult]) -> None:
        stored = self._results.setdefault(run_id, [])
        for row in rows:
            if not row.id:
                row.id = str(uuid.uuid4())
            stored.append(row)

    async def create_snapshot(self, snapshot: ProjectSnapshot) -> ProjectSnapshot:
        if not snapshot.id:
            snapshot.id = str(uuid.uuid4())
        self._snapshots.setdefault(snapshot.project_id, []).append(snapshot)
        return snapshot

    async def add_tracked_query(self, project_id: str, query: str) -> BrandProject:
        project = self._projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        if query not in project.tracked_queries:
            project.tracked_queries.append(query)
        logger.debug("Project %s tracks %d queries", project_id, len(project.tracked_queries))
        return project
