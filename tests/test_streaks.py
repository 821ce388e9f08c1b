"""
Geode Discord Bot - Streak Tests
================================

Tests for guess counters and streak recomputation.
"""

import random

from src.services.guess.streaks import GuessStats, apply_outcome, compute_streaks, run_lengths

T, F = True, False


def _fold(outcomes):
    stats = GuessStats(user_id=1)
    for outcome in outcomes:
        stats = apply_outcome(stats, outcome)
    return stats


class TestApplyOutcome:
    """Tests for incremental counter updates."""

    def test_correct_extends_streak(self):
        """Test that a correct guess increments everything."""
        stats = apply_outcome(GuessStats(user_id=1, total=2, correct=1, streak=1, max_streak=1), True)
        assert (stats.total, stats.correct, stats.streak, stats.max_streak) == (3, 2, 2, 2)

    def test_incorrect_resets_streak(self):
        """Test that a miss resets the streak but keeps the best."""
        stats = apply_outcome(GuessStats(user_id=1, total=3, correct=3, streak=3, max_streak=3), False)
        assert (stats.total, stats.correct, stats.streak, stats.max_streak) == (4, 3, 0, 3)

    def test_best_only_grows(self):
        """Test that a shorter streak doesn't lower the best."""
        stats = _fold([T, T, T, F, T])
        assert stats.streak == 1
        assert stats.max_streak == 3

    def test_accuracy(self):
        """Test the accuracy percentage."""
        assert _fold([T, F, T, T]).accuracy == 75.0
        assert GuessStats(user_id=1).accuracy == 0.0


class TestComputeStreaks:
    """Tests for recomputing streaks from history."""

    def test_run_lengths(self):
        """Test run-length encoding of outcomes."""
        assert run_lengths([T, T, F, T]) == [(True, 2), (False, 1), (True, 1)]
        assert run_lengths([]) == []

    def test_newest_first_ending_in_miss(self):
        """Test a history whose oldest guess missed."""
        # Newest first, so the two latest guesses were correct
        assert compute_streaks([T, T, F, T, T, T, F]) == (2, 3)

    def test_latest_miss_has_no_current_streak(self):
        """Test that a miss as the latest guess means a current streak of 0."""
        assert compute_streaks([F, T, T, T, F, T, T], newest_first=True) == (0, 3)
        assert compute_streaks([T, T, F, T, T, T, F], newest_first=False) == (0, 3)

    def test_all_correct(self):
        """Test an unbroken run."""
        assert compute_streaks([T, T, T]) == (3, 3)

    def test_empty_history(self):
        """Test a player with no guesses."""
        assert compute_streaks([]) == (0, 0)

    def test_matches_incremental_counters(self):
        """Test that recomputation agrees with applying outcomes one by one."""
        rng = random.Random(2024)
        for _ in range(200):
            history = [rng.random() < 0.6 for _ in range(rng.randint(0, 30))]
            stats = _fold(history)
            assert compute_streaks(history, newest_first=False) == (stats.streak, stats.max_streak)
