"""Pydantic response models for query suggestions."""

from pydantic import BaseModel, Field

from brand_visibility.analytics.types import SuggestionCategory


class SuggestionMetadata(BaseModel):
    competitor_mentions: int | None = None
    competitor_name: str | None = None
    brand_missing: bool
    avg_position: float | None = None
    appearance_rate: int | None = None


class QuerySuggestion(BaseModel):
    query: str
    score: float = Field(description="Priority; higher first")
    reason: str
    category: SuggestionCategory
    metadata: SuggestionMetadata
