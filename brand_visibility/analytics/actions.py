"""Action Recommender — rule cascade turning gaps and trends into next steps.

Rules fire in a fixed order and each contributes at most one action. Earlier
rules win when the four slots run out.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence

from brand_visibility.analytics.types import GapType
from brand_visibility.schemas.dashboard import GapOpportunity

logger = logging.getLogger(__name__)

MAX_ACTIONS = 4
TREND_ALERT_THRESHOLD = 2  # |delta| above this triggers a trend action
LOW_SHARE_THRESHOLD = 40  # brand share of voice (%) below this triggers an action

DEFAULT_ACTION = (
    "Visibility is holding steady - maintain momentum by refreshing your top-performing content "
    "and re-running the analysis next week."
)


def _of_type(gaps: Sequence[GapOpportunity], gap_type: GapType) -> list[GapOpportunity]:
    return [g for g in gaps if g.gap_type == gap_type]


def _dominant_competitor(gaps: Sequence[GapOpportunity]) -> tuple[str, int, str]:
    """Competitor leading the most gaps → (name, gap count, example query).

    Counter.most_common keeps first-encountered order on equal counts.
    """
    counts = Counter(g.dominating_competitor for g in gaps)
    name, count = counts.most_common(1)[0]
    example = next(g.query for g in gaps if g.dominating_competitor == name)
    return name, count, example


def recommend_actions(
    gaps: Sequence[GapOpportunity],
    delta: int,
    brand_share: int,
) -> list[str]:
    """Build up to four prioritized actions.

    Args:
        gaps: Full ordered gap list (not only the five shown on the card).
        delta: Trend delta between the two most recent runs.
        brand_share: Brand share of voice, rounded percentage.
    """
    actions: list[str] = []

    def has_slot() -> bool:
        return len(actions) < MAX_ACTIONS

    # Rule 1: queries where nobody tracked shows up
    zero = _of_type(gaps, GapType.ZERO_VISIBILITY)
    if zero:
        actions.append(
            f"Critical: {len(zero)} "
            f"{'query has' if len(zero) == 1 else 'queries have'} zero brand visibility. "
            f'Start with "{zero[0].query}" and publish content that answers it directly.'
        )

    # Rule 2: competitor owning the most queries the brand is missing from
    missing = _of_type(gaps, GapType.MISSING)
    if missing and has_slot():
        name, count, example = _dominant_competitor(missing)
        actions.append(
            f"{name} appears in {count} {'query' if count == 1 else 'queries'} where you are missing "
            f'(e.g. "{example}"). Publish comparison content positioning you against {name}.'
        )

    # Rule 3: trend alert (decline and momentum are mutually exclusive)
    if has_slot():
        if delta < -TREND_ALERT_THRESHOLD:
            actions.append(
                f"Visibility dropped by {abs(delta)} queries since the last run. "
                "Review recent competitor content and refresh your key pages."
            )
        elif delta > TREND_ALERT_THRESHOLD:
            actions.append(
                f"Visibility grew by {delta} queries since the last run. "
                "Double down on the content driving this momentum."
            )

    # Rule 4: low share of voice
    if brand_share < LOW_SHARE_THRESHOLD and has_slot():
        actions.append(
            f"Your share of voice is {brand_share}%. Raise share of voice by earning mentions "
            "on the review sites and community threads AI models cite."
        )

    # Rule 5: outranked on a query
    outranked = _of_type(gaps, GapType.OUTRANKED)
    if outranked and has_slot():
        actions.append(outranked[0].recommendation)

    if not actions:
        actions.append(DEFAULT_ACTION)

    logger.debug("Recommended %d actions (gaps=%d, delta=%d, share=%d)", len(actions), len(gaps), delta, brand_share)
    return actions[:MAX_ACTIONS]
