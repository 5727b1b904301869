"""Mention Sanitizer — first step for every LLM-extracted mention list.

The extractor works on free text, so it can return brands nobody asked about
(hallucinated or garbled names) and sentiment labels outside the three we
aggregate on. This step keeps only mentions of known brands, rewrites the
brand to its canonical spelling and normalizes sentiment.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from brand_visibility.analytics.types import Mention, RawMention, Sentiment

logger = logging.getLogger(__name__)

_SENTIMENT_LOOKUP: dict[str, Sentiment] = {s.value: s for s in Sentiment}


def normalize_sentiment(value: object) -> Sentiment:
    """Map any label to positive/negative/neutral; unknown labels are neutral."""
    if isinstance(value, Sentiment):
        return value
    if not isinstance(value, str):
        return Sentiment.NEUTRAL
    return _SENTIMENT_LOOKUP.get(value.strip().lower(), Sentiment.NEUTRAL)


def _valid_position(position: object) -> bool:
    # bool is an int subclass; True must not pass as rank 1
    return isinstance(position, int) and not isinstance(position, bool) and position >= 1


def build_allow_list(brands: Iterable[str]) -> dict[str, str]:
    """Lower-cased name → canonical spelling. First spelling wins."""
    allowed: dict[str, str] = {}
    for name in brands:
        if not name:
            continue
        allowed.setdefault(name.strip().lower(), name)
    return allowed


def sanitize_mentions(mentions: Iterable[RawMention], brands: Iterable[str]) -> list[Mention]:
    """Filter *mentions* to the known *brands* (case-insensitive).

    Mentions without a usable 1-based position are dropped as well: an absent
    position means "not mentioned". Input order is preserved.
    """
    allowed = build_allow_list(brands)
    cleaned: list[Mention] = []
    dropped = 0

    for m in mentions:
        brand = m.brand.strip().lower() if isinstance(m.brand, str) else ""
        canonical = allowed.get(brand)
        if canonical is None or not _valid_position(m.position):
            dropped += 1
            continue
        cleaned.append(
            Mention(
                query=m.query,
                brand=canonical,
                position=m.position,
                sentiment=normalize_sentiment(m.sentiment),
                context=m.context or "",
            )
        )

    if dropped:
        logger.debug("Sanitizer dropped %d of %d mentions", dropped, dropped + len(cleaned))
    return cleaned
