"""Gap Detector — queries where the brand is invisible, missing or outranked.

Gap types, in output priority:
  1. zero_visibility — neither the brand nor any competitor appears
  2. missing         — brand absent, at least one competitor present
  3. outranked       — brand present, a competitor holds a better position
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from brand_visibility.analytics.types import GapType, Mention
from brand_visibility.schemas.dashboard import GapOpportunity

MAX_GAPS = 5
NO_COMPETITOR = "None"


def _group_by_query(mentions: Iterable[Mention], query_universe: Iterable[str]) -> dict[str, list[Mention]]:
    """Universe queries first (given order), then queries only seen in mentions."""
    grouped: dict[str, list[Mention]] = {}
    for query in query_universe:
        grouped.setdefault(query, [])
    for m in mentions:
        grouped.setdefault(m.query, []).append(m)
    return grouped


def classify_query(
    query: str,
    mentions: Sequence[Mention],
    brand: str,
    competitors: Iterable[str],
) -> GapOpportunity | None:
    """Classify one query's mentions; ``None`` when there is no gap."""
    competitor_set = set(competitors)
    brand_mention = next((m for m in mentions if m.brand == brand), None)
    competitor_mentions = [m for m in mentions if m.brand in competitor_set]

    if brand_mention is None and not competitor_mentions:
        return GapOpportunity(
            query=query,
            dominating_competitor=NO_COMPETITOR,
            recommendation=(
                f'Zero brand visibility for "{query}" - no tracked brand appears. '
                "Publish authoritative content that answers this query."
            ),
            gap_type=GapType.ZERO_VISIBILITY,
        )

    if brand_mention is None:
        # min() keeps the first competitor on equal positions
        top = min(competitor_mentions, key=lambda m: m.position)
        return GapOpportunity(
            query=query,
            dominating_competitor=top.brand,
            recommendation=(
                f"Missing from this query - {top.brand} ranks #{top.position}. "
                f'Create content targeting "{query}".'
            ),
            gap_type=GapType.MISSING,
        )

    better = [m for m in competitor_mentions if m.position < brand_mention.position]
    if better:
        top = min(better, key=lambda m: m.position)
        return GapOpportunity(
            query=query,
            dominating_competitor=top.brand,
            recommendation=(
                f"You rank #{brand_mention.position}, but {top.brand} ranks #{top.position}. "
                f'Improve content for "{query}".'
            ),
            gap_type=GapType.OUTRANKED,
        )

    return None


def detect_gaps(
    mentions: Iterable[Mention],
    brand: str,
    competitors: Sequence[str],
    query_universe: Iterable[str] = (),
) -> list[GapOpportunity]:
    """All gaps, grouped zero_visibility → missing → outranked.

    Within a group gaps keep the order their queries were encountered.
    """
    buckets: dict[GapType, list[GapOpportunity]] = {t: [] for t in GapType}
    for query, group in _group_by_query(mentions, query_universe).items():
        gap = classify_query(query, group, brand, competitors)
        if gap is not None:
            buckets[gap.gap_type].append(gap)

    return [
        *buckets[GapType.ZERO_VISIBILITY],
        *buckets[GapType.MISSING],
        *buckets[GapType.OUTRANKED],
    ]


def find_gap_opportunities(
    mentions: Iterable[Mention],
    brand: str,
    competitors: Sequence[str],
    query_universe: Iterable[str] = (),
) -> list[GapOpportunity]:
    """Top gaps for the dashboard card."""
    return detect_gaps(mentions, brand, competitors, query_universe)[:MAX_GAPS]
