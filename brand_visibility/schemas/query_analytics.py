"""Pydantic response models for per-query analytics."""

from datetime import datetime

from pydantic import BaseModel, Field

from brand_visibility.analytics.types import Sentiment, TrendDirection
from brand_visibility.schemas.dashboard import SentimentBreakdown


class CitationOut(BaseModel):
    url: str
    title: str = ""
    domain: str = ""
    snippet: str | None = None


# ---------------------------------------------------------------------------
# Query performance (all queries, cross-run)
# ---------------------------------------------------------------------------


class CompetitorPerformance(BaseModel):
    appearances: int = Field(ge=0, description="Distinct runs the competitor appeared in")
    avg_position: float = Field(ge=0)


class QueryPerformance(BaseModel):
    query: str
    total_runs: int = Field(ge=0)
    brand_appearances: int = Field(ge=0)
    appearance_rate: int = Field(ge=0, le=100)
    avg_position: float = Field(ge=0)
    best_position: int = Field(ge=0)
    worst_position: int = Field(ge=0)
    sentiment: SentimentBreakdown
    competitor_data: dict[str, CompetitorPerformance] = Field(default_factory=dict)
    trend_data: list[int] = Field(default_factory=list, max_length=10, description="1 = brand appeared, oldest first")
    is_tracked: bool = False
    citations: list[CitationOut] = Field(default_factory=list)
    used_web_search: bool = False


# ---------------------------------------------------------------------------
# Single-query trend
# ---------------------------------------------------------------------------


class QueryTrendDataPoint(BaseModel):
    date: datetime
    run_id: str
    appeared: bool
    position: int | None = None
    sentiment: Sentiment | None = None
    context: str | None = None
    competitor_positions: dict[str, int | None] = Field(default_factory=dict)


class QueryTrendStats(BaseModel):
    total_runs: int = Field(ge=0)
    appearance_count: int = Field(ge=0)
    appearance_rate: int = Field(ge=0, le=100)
    avg_position: float = Field(ge=0)
    best_position: int = Field(ge=0)
    worst_position: int = Field(ge=0)
    trend_direction: TrendDirection = TrendDirection.STABLE
    sentiment_breakdown: SentimentBreakdown


class CompetitorComparison(BaseModel):
    appearance_count: int = Field(ge=0)
    avg_position: float = Field(ge=0)


class QueryTrendAnalysis(BaseModel):
    query: str
    data_points: list[QueryTrendDataPoint]
    overall_stats: QueryTrendStats
    competitor_comparison: dict[str, CompetitorComparison] = Field(default_factory=dict)
