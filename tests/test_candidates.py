"""
Geode Discord Bot - Candidate Selection Tests
=============================================

Tests for choosing the answer options of a guess round.
"""

import random
from collections import Counter

from src.services.guess.candidates import RosterEntry, candidate_window, select_candidates


def _roster(weights):
    """Roster where user N has weight weights[N - 1]."""
    return [RosterEntry(user_id=i, name=f"user{i}", weight=w) for i, w in enumerate(weights, start=1)]


class TestCandidateWindow:
    """Tests for the popularity window."""

    def test_window_excludes_correct_author(self):
        """Test that the correct author is never in the draw pool."""
        roster = _roster([5, 4, 3, 2, 1])
        window = candidate_window(roster[2], roster, range_size=5)
        assert roster[2] not in window
        assert len(window) == 4

    def test_window_centered_on_rank(self):
        """Test the window bounds for an author in the middle of a long roster."""
        # 20 authors, weights 20..1, so rank == user_id - 1
        roster = _roster(list(range(20, 0, -1)))
        correct = roster[10]

        window = candidate_window(correct, roster, range_size=5)

        # Start 5 places above rank 10, span 10 entries of the roster without the author
        assert [e.user_id for e in window] == [6, 7, 8, 9, 10, 12, 13, 14, 15, 16]

    def test_window_clamped_at_top(self):
        """Test that the most quoted author gets a window starting at the top."""
        roster = _roster(list(range(20, 0, -1)))
        window = candidate_window(roster[0], roster, range_size=5)
        assert [e.user_id for e in window] == list(range(2, 12))

    def test_window_clamped_at_bottom(self):
        """Test that the least quoted author's window stops at the end of the list."""
        roster = _roster(list(range(20, 0, -1)))
        window = candidate_window(roster[-1], roster, range_size=5)
        assert [e.user_id for e in window] == [15, 16, 17, 18, 19]

    def test_author_missing_from_roster(self):
        """Test that an unknown author is placed by weight."""
        roster = _roster([10, 8, 6, 4, 2])
        outsider = RosterEntry(user_id=99, name="new", weight=5)
        window = candidate_window(outsider, roster, range_size=1)
        # Three heavier entries, so rank 3 and the window starts at 2
        assert [e.user_id for e in window] == [3, 4]


class TestSelectCandidates:
    """Tests for drawing the answer options."""

    def test_correct_author_first_and_included(self):
        """Test that the correct author is always an option."""
        roster = _roster([9, 8, 7, 6, 5, 4, 3])
        for seed in range(50):
            picked = select_candidates(roster[3], roster, desired_count=5, rng=random.Random(seed))
            assert picked[0] == roster[3]

    def test_options_distinct_and_bounded(self):
        """Test that options are unique and never exceed the desired count."""
        roster = _roster([9, 8, 7, 6, 5, 4, 3])
        for seed in range(50):
            picked = select_candidates(roster[0], roster, desired_count=5, rng=random.Random(seed))
            assert len(picked) == 5
            assert len({e.user_id for e in picked}) == 5

    def test_small_roster_returns_fewer(self):
        """Test that a tiny roster yields every author once."""
        roster = _roster([3, 1])
        picked = select_candidates(roster[0], roster, desired_count=5, rng=random.Random(1))
        assert sorted(e.user_id for e in picked) == [1, 2]

    def test_single_author(self):
        """Test that an author alone on the roster is the only option."""
        roster = _roster([3])
        assert select_candidates(roster[0], roster, desired_count=5) == [roster[0]]

    def test_zero_weights_still_drawn(self):
        """Test that zero-weight entries are drawn uniformly instead of hanging."""
        roster = _roster([0, 0, 0, 0])
        picked = select_candidates(roster[0], roster, desired_count=3, rng=random.Random(3))
        assert len(picked) == 3

    def test_heavier_authors_drawn_more_often(self):
        """Test that draw frequency follows quote counts."""
        correct = RosterEntry(user_id=100, name="answer", weight=50)
        roster = [correct] + _roster([40, 10])
        rng = random.Random(12345)

        counts = Counter()
        trials = 4000
        for _ in range(trials):
            picked = select_candidates(correct, roster, desired_count=2, range_size=5, rng=rng)
            counts[picked[1].user_id] += 1

        # Expected split is 80% / 20%; chi-squared with one degree of freedom
        expected = {1: trials * 0.8, 2: trials * 0.2}
        chi_squared = sum((counts[k] - expected[k]) ** 2 / expected[k] for k in expected)
        assert chi_squared < 10.83
        assert counts[1] > counts[2]

    def test_reproducible_with_seed(self):
        """Test that the same seed gives the same options."""
        roster = _roster([9, 8, 7, 6, 5, 4, 3])
        first = select_candidates(roster[2], roster, rng=random.Random(7))
        second = select_candidates(roster[2], roster, rng=random.Random(7))
        assert first == second
