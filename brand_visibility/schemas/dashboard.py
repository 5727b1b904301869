"""Pydantic response models for the project dashboard."""

from pydantic import BaseModel, Field

from brand_visibility.analytics.types import GapType


class SummaryCard(BaseModel):
    brand_mentions: int = Field(ge=0, description="Distinct queries where the brand appeared")
    total_queries: int = Field(ge=0, description="Queries executed, summed over every run")
    queries_with_mentions: int = Field(ge=0, description="Distinct queries with any tracked brand")
    share_of_voice: dict[str, int] = Field(default_factory=dict, description="Brand/competitor → % of query slots")


class TrendPoint(BaseModel):
    week: str = Field(description="Snapshot date, e.g. 'Mar 4'")
    value: int = Field(ge=0, description="Distinct queries the brand appeared in for that run")
    brands: dict[str, int] = Field(default_factory=dict, description="Per-brand value; competitors reconstructed")


class TrendCard(BaseModel):
    series: list[TrendPoint]
    delta: int = 0


class GapOpportunity(BaseModel):
    query: str
    dominating_competitor: str
    recommendation: str
    gap_type: GapType


class SentimentBreakdown(BaseModel):
    positive: int = Field(default=0, ge=0)
    neutral: int = Field(default=0, ge=0)
    negative: int = Field(default=0, ge=0)


class DashboardSummary(BaseModel):
    summary_card: SummaryCard
    trend_card: TrendCard
    gap_card: list[GapOpportunity] = Field(max_length=5)
    action_card: list[str] = Field(max_length=4)
    sentiment_card: SentimentBreakdown
