"""Tests for the dashboard summary builder."""

from datetime import datetime, timedelta, timezone

from brand_visibility.analytics.actions import DEFAULT_ACTION
from brand_visibility.analytics.dashboard import (
    TREND_WINDOW,
    build_dashboard_summary,
    build_trend_series,
    compute_delta,
    compute_share_of_voice,
    compute_total_queries,
    default_query_universe,
    format_week,
    queries_by_brand,
)
from brand_visibility.analytics.types import GapType, Mention, ProjectSnapshot, Sentiment
from brand_visibility.schemas.dashboard import TrendPoint

BRAND = "Klio AI"


def _m(query: str, brand: str, position: int = 1, sentiment: Sentiment = Sentiment.NEUTRAL) -> Mention:
    return Mention(query=query, brand=brand, position=position, sentiment=sentiment)


def _snap(
    brand_mentions: int,
    day: int = 1,
    total_queries: int = 3,
    competitor_shares: dict | None = None,
    analyzed_queries: list | None = None,
) -> ProjectSnapshot:
    return ProjectSnapshot(
        project_id="p",
        run_id=f"r{day}",
        snapshot_date=datetime(2025, 3, 1, tzinfo=timezone.utc) + timedelta(days=day - 1),
        total_queries=total_queries,
        brand_mentions=brand_mentions,
        competitor_shares=competitor_shares or {},
        analyzed_queries=analyzed_queries or [],
    )


KLIO_MENTIONS = [
    _m("best AI tutor", "Klio AI", 1, Sentiment.POSITIVE),
    _m("best AI tutor", "TutorPlus", 2, Sentiment.NEUTRAL),
    _m("AI tutor for kids", "MindCoach", 1, Sentiment.POSITIVE),
]


# ===================================================================
# Worked example
# ===================================================================


class TestKlioExample:
    def test_mindcoach_untracked(self):
        summary = build_dashboard_summary(BRAND, ["TutorPlus"], KLIO_MENTIONS, [_snap(2, day=1), _snap(3, day=8)])
        assert summary.summary_card.brand_mentions == 1
        assert summary.trend_card.delta == 1
        assert summary.gap_card[0].query == "AI tutor for kids"
        assert summary.gap_card[0].gap_type == GapType.ZERO_VISIBILITY

    def test_mindcoach_tracked(self):
        summary = build_dashboard_summary(
            BRAND, ["TutorPlus", "MindCoach"], KLIO_MENTIONS, [_snap(2, day=1), _snap(3, day=8)]
        )
        assert summary.summary_card.brand_mentions == 1
        assert summary.trend_card.delta == 1
        assert summary.gap_card[0].query == "AI tutor for kids"
        assert summary.gap_card[0].dominating_competitor == "MindCoach"

    def test_summary_counts(self):
        summary = build_dashboard_summary(
            BRAND, ["TutorPlus", "MindCoach"], KLIO_MENTIONS, [_snap(2, day=1), _snap(3, day=8)]
        )
        card = summary.summary_card
        assert card.total_queries == 6
        assert card.queries_with_mentions == 2
        assert card.share_of_voice == {"Klio AI": 17, "TutorPlus": 17, "MindCoach": 17}

    def test_sentiment_brand_only(self):
        summary = build_dashboard_summary(BRAND, ["TutorPlus", "MindCoach"], KLIO_MENTIONS, [])
        assert summary.sentiment_card.model_dump() == {"positive": 1, "neutral": 0, "negative": 0}


# ===================================================================
# Summary card
# ===================================================================


class TestSummaryCard:
    def test_queries_by_brand_distinct(self):
        mentions = [_m("a", BRAND), _m("a", BRAND, 2), _m("b", BRAND)]
        assert queries_by_brand(mentions) == {BRAND: {"a", "b"}}

    def test_total_queries_summed(self):
        assert compute_total_queries([_snap(0, total_queries=3), _snap(0, total_queries=4)], 2) == 7

    def test_total_queries_clamped_to_queries_with_mentions(self):
        assert compute_total_queries([_snap(0, total_queries=1)], 3) == 3

    def test_total_queries_without_snapshots_falls_back_to_queries_with_mentions(self):
        assert compute_total_queries([], 3) == 3
        assert compute_total_queries([_snap(0, total_queries=0)], 2) == 2
        assert compute_total_queries([], 0) == 0

    def test_share_of_voice_zero_total(self):
        assert compute_share_of_voice([BRAND, "TutorPlus"], {BRAND: {"a"}}, 0) == {BRAND: 0, "TutorPlus": 0}

    def test_share_of_voice_need_not_sum_to_100(self):
        appearances = {BRAND: {"a", "b"}, "TutorPlus": {"a", "b"}}
        shares = compute_share_of_voice([BRAND, "TutorPlus"], appearances, 2)
        assert shares == {BRAND: 100, "TutorPlus": 100}

    def test_share_of_voice_bounded(self):
        mentions = [_m(f"q{i}", BRAND) for i in range(5)]
        summary = build_dashboard_summary(BRAND, ["TutorPlus"], mentions, [_snap(1, total_queries=2)])
        assert all(0 <= v <= 100 for v in summary.summary_card.share_of_voice.values())


# ===================================================================
# Trend card
# ===================================================================


class TestTrendCard:
    def test_format_week(self):
        assert format_week(_snap(0, day=4)) == "Mar 4"

    def test_series_oldest_first_and_windowed(self):
        snaps = [_snap(i, day=i) for i in range(12, 0, -1)]
        series = build_trend_series(snaps, BRAND, [])
        assert len(series) == TREND_WINDOW
        assert [p.value for p in series] == list(range(3, 13))

    def test_competitor_values_reconstructed(self):
        snap = _snap(2, total_queries=8, competitor_shares={"TutorPlus": 38})
        point = build_trend_series([snap], BRAND, ["TutorPlus", "MindCoach"])[0]
        # 38% of 8 = 3.04
        assert point.brands == {BRAND: 2, "TutorPlus": 3, "MindCoach": 0}

    def test_value_is_distinct_query_count(self):
        """The trend value replays the stored brand_mentions: distinct queries, not raw mentions."""
        snap = _snap(2, total_queries=5)
        point = build_trend_series([snap], BRAND, [])[0]
        assert point.value == snap.brand_mentions == 2

    def test_delta_needs_two_points(self):
        assert compute_delta([]) == 0
        assert compute_delta([TrendPoint(week="Mar 1", value=4)]) == 0

    def test_delta_last_minus_previous(self):
        series = [TrendPoint(week="w", value=v) for v in (5, 9, 4)]
        assert compute_delta(series) == -5


# ===================================================================
# Full summary
# ===================================================================


class TestBuildDashboardSummary:
    def test_empty_project(self):
        summary = build_dashboard_summary(BRAND, ["TutorPlus"], [], [])
        assert summary.summary_card.brand_mentions == 0
        assert summary.summary_card.total_queries == 0
        assert summary.trend_card.series == []
        assert summary.trend_card.delta == 0
        assert summary.gap_card == []
        # share 0 < 40 triggers the low share action
        assert len(summary.action_card) == 1
        assert summary.action_card[0].startswith("Your share of voice is 0%")

    def test_mentions_without_snapshots_still_have_share(self):
        summary = build_dashboard_summary(BRAND, ["TutorPlus", "MindCoach"], KLIO_MENTIONS, [])
        card = summary.summary_card
        assert card.total_queries == 2
        assert card.share_of_voice == {"Klio AI": 50, "TutorPlus": 50, "MindCoach": 50}

    def test_default_action_when_healthy(self):
        mentions = [_m("a", BRAND, 1), _m("a", "TutorPlus", 2)]
        summary = build_dashboard_summary(BRAND, ["TutorPlus"], mentions, [_snap(1, total_queries=1)])
        assert summary.gap_card == []
        assert summary.action_card == [DEFAULT_ACTION]

    def test_universe_defaults_to_analyzed_queries(self):
        snaps = [_snap(0, day=1, analyzed_queries=["a", "b"]), _snap(0, day=2, analyzed_queries=["b", "c"])]
        assert default_query_universe(snaps) == ["a", "b", "c"]
        summary = build_dashboard_summary(BRAND, ["TutorPlus"], [], snaps)
        assert [g.query for g in summary.gap_card] == ["a", "b", "c"]

    def test_explicit_universe(self):
        summary = build_dashboard_summary(BRAND, [], [], [], query_universe=["x"])
        assert [g.query for g in summary.gap_card] == ["x"]

    def test_gap_card_capped_but_actions_count_all(self):
        universe = [f"q{i}" for i in range(7)]
        summary = build_dashboard_summary(BRAND, ["TutorPlus"], [], [], query_universe=universe)
        assert len(summary.gap_card) == 5
        assert summary.action_card[0].startswith("Critical: 7 queries have zero brand visibility.")
