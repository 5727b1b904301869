"""Tests for gap detection."""

from brand_visibility.analytics.gaps import MAX_GAPS, NO_COMPETITOR, classify_query, detect_gaps, find_gap_opportunities
from brand_visibility.analytics.types import GapType, Mention

BRAND = "Klio AI"
COMPETITORS = ["TutorPlus", "MindCoach"]


def _m(query: str, brand: str, position: int) -> Mention:
    return Mention(query=query, brand=brand, position=position)


class TestClassifyQuery:
    def test_zero_visibility(self):
        gap = classify_query("q", [], BRAND, COMPETITORS)
        assert gap.gap_type == GapType.ZERO_VISIBILITY
        assert gap.dominating_competitor == NO_COMPETITOR
        assert "Zero brand visibility" in gap.recommendation

    def test_missing_picks_best_position(self):
        gap = classify_query("q", [_m("q", "MindCoach", 3), _m("q", "TutorPlus", 1)], BRAND, COMPETITORS)
        assert gap.gap_type == GapType.MISSING
        assert gap.dominating_competitor == "TutorPlus"
        assert "#1" in gap.recommendation

    def test_missing_tie_keeps_first(self):
        gap = classify_query("q", [_m("q", "MindCoach", 2), _m("q", "TutorPlus", 2)], BRAND, COMPETITORS)
        assert gap.dominating_competitor == "MindCoach"

    def test_outranked(self):
        mentions = [_m("q", BRAND, 3), _m("q", "TutorPlus", 2), _m("q", "MindCoach", 1)]
        gap = classify_query("q", mentions, BRAND, COMPETITORS)
        assert gap.gap_type == GapType.OUTRANKED
        assert gap.dominating_competitor == "MindCoach"
        assert gap.recommendation.startswith("You rank #3, but MindCoach ranks #1.")

    def test_uses_first_brand_mention(self):
        mentions = [_m("q", BRAND, 1), _m("q", "TutorPlus", 2), _m("q", BRAND, 5)]
        assert classify_query("q", mentions, BRAND, COMPETITORS) is None

    def test_equal_position_is_not_outranked(self):
        mentions = [_m("q", BRAND, 2), _m("q", "TutorPlus", 2)]
        assert classify_query("q", mentions, BRAND, COMPETITORS) is None

    def test_brand_leads(self):
        mentions = [_m("q", BRAND, 1), _m("q", "TutorPlus", 2)]
        assert classify_query("q", mentions, BRAND, COMPETITORS) is None

    def test_non_competitor_brand_ignored(self):
        gap = classify_query("q", [_m("q", "Other", 1)], BRAND, COMPETITORS)
        assert gap.gap_type == GapType.ZERO_VISIBILITY


class TestDetectGaps:
    def test_ordered_by_type(self):
        mentions = [
            _m("outranked", BRAND, 2),
            _m("outranked", "TutorPlus", 1),
            _m("missing", "MindCoach", 1),
        ]
        gaps = detect_gaps(mentions, BRAND, COMPETITORS, query_universe=["zero"])
        assert [g.query for g in gaps] == ["zero", "missing", "outranked"]
        assert [g.gap_type for g in gaps] == [GapType.ZERO_VISIBILITY, GapType.MISSING, GapType.OUTRANKED]

    def test_universe_first_then_mention_queries(self):
        mentions = [_m("m1", "TutorPlus", 1), _m("m2", "MindCoach", 1)]
        gaps = detect_gaps(mentions, BRAND, COMPETITORS, query_universe=["m2"])
        assert [g.query for g in gaps] == ["m2", "m1"]

    def test_full_list_not_truncated(self):
        universe = [f"q{i}" for i in range(8)]
        assert len(detect_gaps([], BRAND, COMPETITORS, universe)) == 8

    def test_card_capped(self):
        universe = [f"q{i}" for i in range(8)]
        gaps = find_gap_opportunities([], BRAND, COMPETITORS, universe)
        assert len(gaps) == MAX_GAPS
        assert [g.query for g in gaps] == universe[:MAX_GAPS]

    def test_no_data(self):
        assert detect_gaps([], BRAND, COMPETITORS) == []
