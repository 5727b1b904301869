"""Tests for the action recommender rule cascade."""

from brand_visibility.analytics.actions import DEFAULT_ACTION, MAX_ACTIONS, recommend_actions
from brand_visibility.analytics.types import GapType
from brand_visibility.schemas.dashboard import GapOpportunity


def _gap(query: str, gap_type: GapType, competitor: str = "None", recommendation: str = "rec") -> GapOpportunity:
    return GapOpportunity(
        query=query,
        dominating_competitor=competitor,
        recommendation=recommendation,
        gap_type=gap_type,
    )


class TestRecommendActions:
    def test_default_when_nothing_fires(self):
        assert recommend_actions([], delta=0, brand_share=50) == [DEFAULT_ACTION]

    def test_default_at_threshold_values(self):
        assert recommend_actions([], delta=2, brand_share=40) == [DEFAULT_ACTION]
        assert recommend_actions([], delta=-2, brand_share=40) == [DEFAULT_ACTION]

    def test_zero_visibility_singular(self):
        actions = recommend_actions([_gap("q1", GapType.ZERO_VISIBILITY)], 0, 50)
        assert actions[0].startswith('Critical: 1 query has zero brand visibility. Start with "q1"')

    def test_zero_visibility_plural(self):
        gaps = [_gap("q1", GapType.ZERO_VISIBILITY), _gap("q2", GapType.ZERO_VISIBILITY)]
        actions = recommend_actions(gaps, 0, 50)
        assert actions[0].startswith("Critical: 2 queries have zero brand visibility.")

    def test_dominant_competitor(self):
        gaps = [
            _gap("a", GapType.MISSING, "MindCoach"),
            _gap("b", GapType.MISSING, "TutorPlus"),
            _gap("c", GapType.MISSING, "TutorPlus"),
        ]
        actions = recommend_actions(gaps, 0, 50)
        assert actions[0].startswith('TutorPlus appears in 2 queries where you are missing (e.g. "b")')

    def test_dominant_competitor_tie_first_wins(self):
        gaps = [_gap("a", GapType.MISSING, "MindCoach"), _gap("b", GapType.MISSING, "TutorPlus")]
        actions = recommend_actions(gaps, 0, 50)
        assert actions[0].startswith("MindCoach appears in 1 query where")

    def test_decline_alert(self):
        actions = recommend_actions([], delta=-3, brand_share=50)
        assert actions == ["Visibility dropped by 3 queries since the last run. "
                           "Review recent competitor content and refresh your key pages."]

    def test_momentum(self):
        actions = recommend_actions([], delta=5, brand_share=50)
        assert actions[0].startswith("Visibility grew by 5 queries")

    def test_low_share(self):
        actions = recommend_actions([], delta=0, brand_share=25)
        assert len(actions) == 1
        assert "25%" in actions[0]
        assert "share of voice" in actions[0]

    def test_outranked_uses_first_recommendation(self):
        gaps = [
            _gap("a", GapType.OUTRANKED, "TutorPlus", "first outranked"),
            _gap("b", GapType.OUTRANKED, "MindCoach", "second outranked"),
        ]
        assert recommend_actions(gaps, 0, 50) == ["first outranked"]

    def test_capped_and_rule_order(self):
        gaps = [
            _gap("z", GapType.ZERO_VISIBILITY),
            _gap("m", GapType.MISSING, "TutorPlus"),
            _gap("o", GapType.OUTRANKED, "MindCoach", "outranked rec"),
        ]
        actions = recommend_actions(gaps, delta=-4, brand_share=10)
        assert len(actions) == MAX_ACTIONS
        assert actions[0].startswith("Critical:")
        assert actions[1].startswith("TutorPlus appears")
        assert actions[2].startswith("Visibility dropped by 4")
        assert actions[3].startswith("Your share of voice is 10%")
        assert "outranked rec" not in actions

    def test_never_more_than_max(self):
        gaps = [_gap(f"q{i}", t) for i, t in enumerate(GapType)]
        for delta in (-10, 0, 10):
            for share in (0, 100):
                assert 1 <= len(recommend_actions(gaps, delta, share)) <= MAX_ACTIONS
