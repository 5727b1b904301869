"""
run_visibility_demo.py — End-to-end run of the visibility analytics on sample data

Runs the whole read/write cycle in-process:
  1. Configure logging and validate settings
  2. Create a demo project in the in-memory repository
  3. Record three weekly runs of LLM answers
  4. Print the dashboard, query performance, one query trend and suggestions
  5. Print the weekly digest

Set OPENAI_API_KEY to get AI-generated suggestions instead of keyword templates.

Usage:
    python run_visibility_demo.py
"""

import asyncio
import json
import logging

from brand_visibility.analytics.types import BrandProject, Citation, QueryAnalysisResult, RawMention
from brand_visibility.collectors.query_generator import get_query_generator
from brand_visibility.core.config import validate_settings_for_production
from brand_visibility.core.logging import setup_logging
from brand_visibility.services.repository import InMemoryRepository
from brand_visibility.services.visibility_service import VisibilityService

logger = logging.getLogger("visibility_demo")

PROJECT = BrandProject(
    id="demo",
    brand_name="Klio AI",
    keywords=["AI tutoring", "homework help"],
    competitors=["TutorPlus", "MindCoach"],
    tracked_queries=["best AI tutor for kids"],
)

# (query, [(brand, position, sentiment), ...]) per weekly run
RUNS = [
    [
        ("best AI tutor for kids", [("TutorPlus", 1, "positive"), ("Klio AI", 3, "neutral")]),
        ("homework help app for high school", [("MindCoach", 1, "positive")]),
        ("AI study assistant for exams", []),
    ],
    [
        ("best AI tutor for kids", [("Klio AI", 2, "positive"), ("TutorPlus", 1, "neutral")]),
        ("homework help app for high school", [("MindCoach", 2, "neutral"), ("TutorPlus", 1, "Positive")]),
        ("AI study assistant for exams", [("Klio AI", 1, "positive")]),
    ],
    [
        ("best AI tutor for kids", [("Klio AI", 1, "positive"), ("TutorPlus", 2, "neutral")]),
        ("homework help app for high school", [("Klio AI", 3, "negative"), ("MindCoach", 1, "positive")]),
        ("AI study assistant for exams", [("Klio AI", 1, "positive"), ("UnknownBot", 2, "neutral")]),
    ],
]


def _analysis_results(run: list) -> list[QueryAnalysisResult]:
    return [
        QueryAnalysisResult(
            query=query,
            mentions=[RawMention(query=query, brand=b, position=p, sentiment=s) for b, p, s in mentions],
            citations=[Citation(url="https://example.com/reviews", title="Reviews", domain="example.com")],
        )
        for query, mentions in run
    ]


def _print(title: str, payload) -> None:
    print(f"\n=== {title} ===")
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


async def main() -> None:
    setup_logging()
    validate_settings_for_production()

    repository = InMemoryRepository()
    repository.add_project(PROJECT)
    service = VisibilityService(repository, query_generator=get_query_generator())

    for i, run in enumerate(RUNS, 1):
        records = await service.record_run(PROJECT.id, _analysis_results(run))
        logger.info("Run %d stored with %d rows", i, len(records.rows))

    dashboard = await service.get_dashboard(PROJECT.id)
    _print("Dashboard", dashboard.model_dump(mode="json"))

    performance = await service.get_query_performance(PROJECT.id)
    _print("Query performance", [p.model_dump(mode="json") for p in performance])

    trend = await service.get_query_trends(PROJECT.id, "best AI tutor for kids")
    _print("Query trend", trend.model_dump(mode="json"))

    suggestions = await service.get_query_suggestions(PROJECT.id)
    _print("Suggestions", [s.model_dump(mode="json") for s in suggestions])

    print("\n=== Weekly digest ===")
    print(await service.get_weekly_digest(PROJECT.id))


if __name__ == "__main__":
    asyncio.run(main())
