"""Core input types for the visibility analytics engine.

Everything here is plain data handed to the engine by its callers. Derived
read models (dashboard cards, per-query stats, suggestions) live in
``brand_visibility.schemas``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Sentiment(str, Enum):
    """Coarse sentiment bucket of a single mention."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class GapType(str, Enum):
    """Visibility-gap category of a query, in output priority order."""

    ZERO_VISIBILITY = "zero_visibility"  # Nobody tracked appears at all
    MISSING = "missing"  # Brand absent, a competitor present
    OUTRANKED = "outranked"  # Brand present, a competitor ranks better


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class SuggestionCategory(str, Enum):
    ZERO_VISIBILITY = "zero_visibility"
    COMPETITOR_GAP = "competitor_gap"
    HIGH_PERFORMER = "high_performer"
    RELATED = "related"  # AI-generated or keyword-template idea


# ---------------------------------------------------------------------------
# Mentions
# ---------------------------------------------------------------------------


@dataclass
class RawMention:
    """A brand mention as extracted from an LLM answer, before sanitization."""

    query: str
    brand: str
    position: int | None = None
    sentiment: str = "neutral"  # free text from the extractor
    context: str = ""


@dataclass
class Mention:
    """A sanitized mention: brand is a known name, sentiment is normalized."""

    query: str
    brand: str
    position: int
    sentiment: Sentiment = Sentiment.NEUTRAL
    context: str = ""


@dataclass
class Citation:
    """A source returned by a web-search enabled answer."""

    url: str
    title: str = ""
    domain: str = ""
    snippet: str | None = None


# ---------------------------------------------------------------------------
# Run history (as stored by the persistence collaborator)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisRun:
    """One execution of the project's query set."""

    id: str
    project_id: str
    run_at: datetime
    queries_generated: int = 0


@dataclass
class QueryResult:
    """One stored row of a run.

    A row with ``brand is None`` records that the query ran and nothing was
    found; it counts toward the runs touching the query but is never a mention.
    """

    run_id: str
    query_text: str
    brand: str | None = None
    position: int | None = None
    sentiment: Sentiment | None = None
    context: str | None = None
    citations: list[Citation] = field(default_factory=list)
    used_web_search: bool = False
    id: str = ""

    @property
    def is_marker(self) -> bool:
        return self.brand is None


@dataclass
class ProjectSnapshot:
    """Per-run aggregate captured when a run completes (1:1 with AnalysisRun).

    ``brand_mentions`` holds the number of distinct queries in the run where
    the brand appeared, not the raw mention count.
    """

    project_id: str
    run_id: str
    snapshot_date: datetime
    total_queries: int = 0
    queries_with_mentions: int = 0
    brand_mentions: int = 0
    brand_share_pct: int = 0
    competitor_shares: dict[str, int] = field(default_factory=dict)
    analyzed_queries: list[str] = field(default_factory=list)
    id: str = ""


# ---------------------------------------------------------------------------
# Collaborator payloads
# ---------------------------------------------------------------------------


@dataclass
class QueryAnalysisResult:
    """Output of the LLM query collaborator for a single query of a run."""

    query: str
    response_text: str = ""
    mentions: list[RawMention] = field(default_factory=list)
    citations: list[Citation] = field(default_factory=list)
    used_web_search: bool = False


@dataclass
class BrandProject:
    """A tracked brand with its competitor set and tracked queries."""

    id: str
    brand_name: str
    keywords: list[str] = field(default_factory=list)
    competitors: list[str] = field(default_factory=list)
    tracked_queries: list[str] = field(default_factory=list)
