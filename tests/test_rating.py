"""
Tests for the capped Elo-style rating delta
Run with: pytest tests/test_rating.py -v
"""

import pytest

from rightcall.core.rating import BASE_RATING, DEFAULT_K, DEFAULT_PICK_CAP, rating_delta


class TestRatingDelta:
    """round(clamp(K * (S - p), -cap, cap))"""

    def test_underdog_win(self):
        # 30 * (1 - 0.3) = 21
        assert rating_delta(30, 1, 0.3, 40) == 21

    def test_favourite_loss(self):
        # 30 * (0 - 0.9) = -27
        assert rating_delta(30, 0, 0.9, 40) == -27

    def test_defaults(self):
        assert DEFAULT_K == 30
        assert DEFAULT_PICK_CAP == 40
        assert BASE_RATING == 1200
        assert rating_delta(DEFAULT_K, 1, 0.5) == 15

    def test_cap_applies_on_win(self):
        assert rating_delta(100, 1, 0.0, 40) == 40

    def test_cap_applies_on_loss(self):
        assert rating_delta(100, 0, 1.0, 40) == -40

    def test_fractional_cap_never_exceeded(self):
        # 30 * 0.9 = 27 capped at 26.5; half-up would give 27
        assert rating_delta(30, 1, 0.1, 26.5) == 26

    def test_half_rounds_up(self):
        # 30 * (0 - 0.25) = -7.5 → -7
        assert rating_delta(30, 0, 0.25, 40) == -7

    @pytest.mark.parametrize("p", [0.0, 0.05, 0.3, 0.5, 0.77, 0.99, 1.0])
    def test_win_non_negative_loss_non_positive(self, p):
        assert rating_delta(30, 1, p) >= 0
        assert rating_delta(30, 0, p) <= 0

    @pytest.mark.parametrize("k", [10, 30, 80, 250])
    def test_bounded_by_cap(self, k):
        for p in (0.0, 0.2, 0.5, 0.8, 1.0):
            for outcome in (0, 1):
                assert abs(rating_delta(k, outcome, p, 40)) <= 40

    def test_zero_cap_gives_zero(self):
        assert rating_delta(30, 1, 0.2, 0) == 0

    def test_invalid_outcome(self):
        with pytest.raises(ValueError):
            rating_delta(30, 2, 0.5)

    @pytest.mark.parametrize("p", [1.2, -0.1, float("nan")])
    def test_probability_out_of_range(self, p):
        # 30 * (1 - 1.2) would otherwise give a negative delta for a win
        with pytest.raises(ValueError):
            rating_delta(30, 1, p)

    def test_negative_cap(self):
        with pytest.raises(ValueError):
            rating_delta(30, 1, 0.5, -1)
