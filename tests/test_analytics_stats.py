"""Tests for shared numeric helpers."""

import pytest

from brand_visibility.analytics.stats import OnlineMean, mean, mean_1dp, percentage, round_half_up, round_int


class TestRounding:
    def test_half_rounds_up(self):
        assert round_int(2.5) == 3
        assert round_int(0.5) == 1

    def test_differs_from_bankers_rounding(self):
        assert round(2.5) == 2
        assert round_int(2.5) == 3

    def test_below_half_rounds_down(self):
        assert round_int(2.49) == 2

    def test_one_decimal(self):
        assert round_half_up(0.25, 1) == 0.3
        assert round_half_up(1.66666, 1) == 1.7

    def test_negative_half_rounds_toward_positive(self):
        assert round_int(-2.5) == -2


class TestPercentage:
    def test_rounded(self):
        assert percentage(1, 3) == 33
        assert percentage(2, 3) == 67
        assert percentage(1, 8) == 13

    def test_zero_whole(self):
        assert percentage(5, 0) == 0

    def test_full(self):
        assert percentage(4, 4) == 100


class TestMean:
    def test_empty(self):
        assert mean([]) == 0.0
        assert mean_1dp([]) == 0

    def test_one_decimal(self):
        assert mean_1dp([1, 1, 2, 1, 3, 2]) == 1.7

    def test_accepts_generator(self):
        assert mean(x for x in (2, 4)) == 3.0


class TestOnlineMean:
    def test_empty(self):
        acc = OnlineMean()
        assert acc.count == 0
        assert acc.value == 0.0

    def test_matches_batch_mean(self):
        values = [1.0, 2.0, 4.0, 3.5, 1.5, 2.25]
        acc = OnlineMean()
        for v in values:
            acc.add(v)
        assert acc.count == len(values)
        assert acc.value == pytest.approx(mean(values))

    def test_matches_reference_formula(self):
        """mean += (x - mean) / n equals (old * (n - 1) + x) / n at every step."""
        acc = OnlineMean()
        reference = 0.0
        for n, x in enumerate([3.0, 1.0, 2.0, 5.0], 1):
            reference = (reference * (n - 1) + x) / n
            assert acc.add(x) == pytest.approx(reference)

    def test_repr(self):
        acc = OnlineMean()
        acc.add(2)
        assert repr(acc) == "OnlineMean(count=1, value=2.0000)"
