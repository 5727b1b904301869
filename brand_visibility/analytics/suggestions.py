"""Query Suggestion Engine — which untracked queries are worth tracking.

Scoring pools (all constants are part of the product contract):
  - zero_visibility: brand never appears        → 90 + min(strength × 10, 10)
  - competitor_gap:  a competitor appears more   → 60 + min(gap_pp / 2, 20)
  - high_performer:  ≥60% appearance, avg ≤ #3   → 40 + (rate − 60) / 4 + (4 − avg) × 3.33

When history is thin, AI-generated ideas (55, 53, 51, …) or keyword
templates (50, 45, 40, 35, 30) fill the list.

Generated ideas come from an async collaborator, so this module never calls
it: callers pass the generated query texts in (``None`` = generator
unavailable).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from brand_visibility.analytics.run_aggregator import aggregate_runs
from brand_visibility.analytics.stats import OnlineMean, mean, round_half_up, round_int
from brand_visibility.analytics.types import AnalysisRun, QueryResult, SuggestionCategory
from brand_visibility.schemas.suggestion import QuerySuggestion, SuggestionMetadata

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 10
MIN_UNTRACKED_SUGGESTIONS = 5  # fewer than this → supplement with generated ideas
MIN_DISTINCT_QUERIES = 3  # fewer distinct queries in history → supplement

AI_SCORE_START = 55
AI_SCORE_STEP = 2
TEMPLATE_SCORE_START = 50
TEMPLATE_SCORE_STEP = 5

AI_REASON = "AI-generated suggestion based on your brand and keywords"
TEMPLATE_REASON = "Keyword-based suggestion - run first analysis to get data-driven suggestions"

_KEYWORD_TEMPLATES = (
    "What are the best {keywords} solutions?",
    "Which {keywords} tool should I choose?",
    "How do I compare {keywords} platforms?",
    "What's the difference between {keywords} providers?",
    "Which {keywords} service is most cost-effective?",
)


# ---------------------------------------------------------------------------
# Per-query analysis
# ---------------------------------------------------------------------------


@dataclass
class QueryAnalysis:
    """Suggestion-relevant statistics of one query across runs."""

    query: str
    total_runs: int = 0
    brand_appearances: int = 0
    competitor_appearances: dict[str, int] = field(default_factory=dict)  # competitor-list order
    position: OnlineMean = field(default_factory=OnlineMean)  # mean of per-run mean positions
    brand_missing: bool = False  # brand absent from at least one run

    @property
    def avg_brand_position(self) -> float:
        return self.position.value

    @property
    def appearance_rate(self) -> float:
        if self.total_runs == 0:
            return 0.0
        return self.brand_appearances / self.total_runs * 100


def analyze_query_history(
    runs: Iterable[AnalysisRun],
    results: Iterable[QueryResult],
    brand: str,
    competitors: Sequence[str],
) -> dict[str, QueryAnalysis]:
    """Fold every run into per-query statistics.

    For each run where the brand appears with a position, that run's mean
    position is folded into the query's running mean.
    """
    analyses: dict[str, QueryAnalysis] = {}
    for query, history in aggregate_runs(runs, results, brand, competitors).items():
        analysis = QueryAnalysis(
            query=query,
            total_runs=history.total_runs,
            brand_appearances=history.brand_appearances,
            brand_missing=not all(history.appeared),
        )
        for run_id, appeared in zip(history.run_ids, history.appeared):
            run_positions = history.brand_positions_by_run.get(run_id)
            if appeared and run_positions:
                analysis.position.add(mean(run_positions))
        for comp in competitors:
            comp_history = history.competitors.get(comp)
            if comp_history is not None:
                analysis.competitor_appearances[comp] = comp_history.appearances
        analyses[query] = analysis
    return analyses


def _top_competitor(appearances: dict[str, int]) -> str | None:
    """Competitor with the most appearances; first one wins ties."""
    top: str | None = None
    top_count = 0
    for name, count in appearances.items():
        if top is None or count > top_count:
            top, top_count = name, count
    return top


# ---------------------------------------------------------------------------
# Scoring pools
# ---------------------------------------------------------------------------


def find_zero_visibility_queries(analyses: Iterable[QueryAnalysis], brand: str) -> list[QuerySuggestion]:
    suggestions: list[QuerySuggestion] = []
    for a in analyses:
        if a.brand_appearances > 0 or a.total_runs == 0:
            continue

        total_competitor = sum(a.competitor_appearances.values())
        strength = total_competitor / a.total_runs
        top = _top_competitor(a.competitor_appearances)

        suggestions.append(
            QuerySuggestion(
                query=a.query,
                score=90 + min(strength * 10, 10),
                reason=(
                    f"Critical gap - {top} appears but {brand} is absent"
                    if top
                    else "Critical gap - zero brand visibility"
                ),
                category=SuggestionCategory.ZERO_VISIBILITY,
                metadata=SuggestionMetadata(
                    competitor_mentions=total_competitor,
                    competitor_name=top,
                    brand_missing=True,
                    appearance_rate=0,
                ),
            )
        )
    return suggestions


def find_competitor_gaps(analyses: Iterable[QueryAnalysis]) -> list[QuerySuggestion]:
    """Queries where the brand shows up but a competitor shows up more often.

    Only the first such competitor (competitor-list order) is reported.
    """
    suggestions: list[QuerySuggestion] = []
    for a in analyses:
        if a.brand_appearances == 0:
            continue

        for competitor, count in a.competitor_appearances.items():
            if count <= a.brand_appearances:
                continue
            brand_rate = a.appearance_rate
            comp_rate = count / a.total_runs * 100
            gap = comp_rate - brand_rate

            suggestions.append(
                QuerySuggestion(
                    query=a.query,
                    score=60 + min(gap / 2, 20),
                    reason=f"{competitor} appears {round_int(comp_rate)}% vs your {round_int(brand_rate)}%",
                    category=SuggestionCategory.COMPETITOR_GAP,
                    metadata=SuggestionMetadata(
                        competitor_mentions=count,
                        competitor_name=competitor,
                        brand_missing=False,
                        avg_position=round_half_up(a.avg_brand_position, 1),
                        appearance_rate=round_int(brand_rate),
                    ),
                )
            )
            break
    return suggestions


def find_high_performers(analyses: Iterable[QueryAnalysis]) -> list[QuerySuggestion]:
    suggestions: list[QuerySuggestion] = []
    for a in analyses:
        if a.brand_appearances == 0:
            continue

        rate = a.appearance_rate
        avg = a.avg_brand_position
        if rate < 60 or not 0 < avg <= 3:
            continue

        consistency_bonus = (rate - 60) / 4
        position_bonus = (4 - avg) * 3.33
        suggestions.append(
            QuerySuggestion(
                query=a.query,
                score=40 + consistency_bonus + position_bonus,
                reason=f"Strong performer - {round_int(rate)}% appearance, avg #{round_half_up(avg, 1):.1f} position",
                category=SuggestionCategory.HIGH_PERFORMER,
                metadata=SuggestionMetadata(
                    brand_missing=False,
                    avg_position=round_half_up(avg, 1),
                    appearance_rate=round_int(rate),
                ),
            )
        )
    return suggestions


def score_query_suggestions(
    analyses: dict[str, QueryAnalysis],
    brand: str,
    tracked_queries: Iterable[str],
) -> list[QuerySuggestion]:
    """Data-driven candidates from all three pools, minus tracked queries."""
    tracked = set(tracked_queries)
    values = list(analyses.values())
    candidates = [
        *find_zero_visibility_queries(values, brand),
        *find_competitor_gaps(values),
        *find_high_performers(values),
    ]
    return [c for c in candidates if c.query not in tracked]


# ---------------------------------------------------------------------------
# Generated ideas
# ---------------------------------------------------------------------------


def keyword_template_suggestions(keywords: Sequence[str], exclude: Iterable[str] = ()) -> list[QuerySuggestion]:
    """Template queries built from the first three keywords."""
    if not keywords:
        return []

    excluded = {q.lower() for q in exclude}
    keyword_str = ", ".join(keywords[:3])
    suggestions: list[QuerySuggestion] = []
    for idx, template in enumerate(_KEYWORD_TEMPLATES):
        query = template.format(keywords=keyword_str)
        if query.lower() in excluded:
            continue
        suggestions.append(
            QuerySuggestion(
                query=query,
                score=TEMPLATE_SCORE_START - idx * TEMPLATE_SCORE_STEP,
                reason=TEMPLATE_REASON,
                category=SuggestionCategory.RELATED,
                metadata=SuggestionMetadata(brand_missing=True, appearance_rate=0),
            )
        )
    return suggestions


def ai_suggestions(queries: Iterable[str], exclude: Iterable[str] = ()) -> list[QuerySuggestion]:
    """Score generated query texts 55, 53, 51, … after dropping excluded ones.

    Exclusion is a case-insensitive exact match.
    """
    excluded = {q.lower() for q in exclude}
    suggestions: list[QuerySuggestion] = []
    for query in queries:
        if query.lower() in excluded:
            continue
        excluded.add(query.lower())
        suggestions.append(
            QuerySuggestion(
                query=query,
                score=AI_SCORE_START - len(suggestions) * AI_SCORE_STEP,
                reason=AI_REASON,
                category=SuggestionCategory.RELATED,
                metadata=SuggestionMetadata(brand_missing=True, appearance_rate=0),
            )
        )
        if len(suggestions) == MAX_SUGGESTIONS:
            break
    return suggestions


def generated_suggestions(
    generated: Sequence[str] | None,
    keywords: Sequence[str],
    exclude: Iterable[str] = (),
) -> list[QuerySuggestion]:
    """AI ideas when the generator produced any, keyword templates otherwise."""
    exclude = list(exclude)
    if generated:
        return ai_suggestions(generated, exclude)
    logger.info("No generated query ideas available, using keyword templates")
    return keyword_template_suggestions(keywords, exclude)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def needs_supplement(candidates: Sequence[QuerySuggestion], analyses: dict[str, QueryAnalysis]) -> bool:
    """Too few untracked candidates, or too little query diversity."""
    return len(candidates) < MIN_UNTRACKED_SUGGESTIONS or len(analyses) < MIN_DISTINCT_QUERIES


def supplement_suggestions(
    candidates: Sequence[QuerySuggestion],
    generated: Sequence[str] | None,
    keywords: Sequence[str],
    tracked_queries: Iterable[str],
) -> list[QuerySuggestion]:
    """Append generated ideas that are neither tracked nor already candidates."""
    merged = list(candidates)
    existing = {c.query for c in merged}
    exclude = [*tracked_queries, *existing]
    for suggestion in generated_suggestions(generated, keywords, exclude):
        if suggestion.query not in existing:
            merged.append(suggestion)
            existing.add(suggestion.query)
    return merged


def rank_suggestions(candidates: Iterable[QuerySuggestion]) -> list[QuerySuggestion]:
    """Highest score first (stable), capped at MAX_SUGGESTIONS."""
    return sorted(candidates, key=lambda s: s.score, reverse=True)[:MAX_SUGGESTIONS]


def build_cold_start_suggestions(
    generated: Sequence[str] | None,
    keywords: Sequence[str],
    tracked_queries: Iterable[str],
) -> list[QuerySuggestion]:
    """Suggestions for a project that has no runs yet."""
    return rank_suggestions(generated_suggestions(generated, keywords, tracked_queries))


@dataclass
class SuggestionDraft:
    """Data-driven candidates, before any generated ideas are merged in."""

    candidates: list[QuerySuggestion]
    needs_ideas: bool  # generated ideas (or templates) will be merged in
    cold_start: bool = False

    @property
    def exclude(self) -> list[str]:
        return [c.query for c in self.candidates]


def draft_query_suggestions(
    runs: Sequence[AnalysisRun],
    results: Iterable[QueryResult],
    brand: str,
    competitors: Sequence[str],
    tracked_queries: Sequence[str],
) -> SuggestionDraft:
    """Score the history once and report whether generated ideas are wanted."""
    if not runs:
        return SuggestionDraft(candidates=[], needs_ideas=True, cold_start=True)

    analyses = analyze_query_history(runs, results, brand, competitors)
    candidates = score_query_suggestions(analyses, brand, tracked_queries)

    logger.info(
        "Query suggestion analysis: unique=%d, tracked=%d, candidates=%d",
        len(analyses),
        len(tracked_queries),
        len(candidates),
    )
    return SuggestionDraft(candidates=candidates, needs_ideas=needs_supplement(candidates, analyses))


def finish_query_suggestions(
    draft: SuggestionDraft,
    tracked_queries: Sequence[str],
    keywords: Sequence[str],
    generated: Sequence[str] | None = None,
) -> list[QuerySuggestion]:
    """Merge generated ideas into *draft* when it asks for them, then rank."""
    if draft.cold_start:
        return build_cold_start_suggestions(generated, keywords, tracked_queries)
    candidates = draft.candidates
    if draft.needs_ideas:
        candidates = supplement_suggestions(candidates, generated, keywords, tracked_queries)
    return rank_suggestions(candidates)


def generate_query_suggestions(
    runs: Sequence[AnalysisRun],
    results: Iterable[QueryResult],
    brand: str,
    competitors: Sequence[str],
    tracked_queries: Sequence[str],
    keywords: Sequence[str],
    generated: Sequence[str] | None = None,
) -> list[QuerySuggestion]:
    """Ranked suggestions for a project.

    *generated* holds query ideas already produced by the AI collaborator;
    ``None`` means it is unavailable and keyword templates are used instead.
    """
    draft = draft_query_suggestions(runs, results, brand, competitors, tracked_queries)
    return finish_query_suggestions(draft, tracked_queries, keywords, generated)
