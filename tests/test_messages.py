"""
Geode Discord Bot - Guess Message Tests
=======================================

Tests for round result text, "Fix names" and /guess stats.
"""

from src.services.guess.messages import (
    SAVE_FAILED_LINE,
    correct_leaderboard_message,
    fix_names,
    profile_message,
    result_message,
    shown_user_id,
    streak_leaderboard_message,
)
from src.services.guess.service import GuessOutcome, GuessResult
from src.services.guess.streaks import GuessStats


def _outcome(result, previous, stats, guess_id=1, saved=True):
    return GuessOutcome(
        result=result,
        guess_id=guess_id,
        previous=GuessStats(5, *previous),
        stats=GuessStats(5, *stats),
        saved=saved,
    )


def _profile(**values):
    profile = {
        "quoted": 0, "total": 0, "correct": 0, "max_streak": 0,
        "times_guessed": 0, "times_answer": 0, "times_answer_correct": 0,
        "self_total": 0, "self_incorrect": 0,
    }
    profile.update(values)
    return profile


class TestResultMessage:
    """Tests for the message shown when a round ends."""

    def test_first_correct(self):
        """Test a correct guess without a streak."""
        outcome = _outcome(GuessResult.CORRECT, (0, 0, 0, 0), (1, 1, 1, 1))
        assert result_message(outcome, "<@5>", 1) == (
            "### ✅ Good job, <@5>, this quote is by <@1>!\n"
            "-# You have made **1**/**1** (**100.0%**) correct guesses in total"
            " with a best streak of **1** in a row.\n"
        )

    def test_new_best_streak(self):
        """Test the fire line for a record streak."""
        outcome = _outcome(GuessResult.CORRECT, (2, 2, 2, 2), (3, 3, 3, 3))
        assert result_message(outcome, "<@5>", 1) == (
            "### 🔥 3x, new best! Keep it going, <@5>, this quote is by <@1>!\n"
            "-# You have made **3**/**3** (**100.0%**) correct guesses in total.\n"
        )

    def test_streak_below_best(self):
        """Test a running streak that doesn't beat the record."""
        outcome = _outcome(GuessResult.CORRECT, (6, 5, 1, 4), (7, 6, 2, 4))
        text = result_message(outcome, "<@5>", 1)
        assert text.startswith("### ✅ 2x! Keep it going, <@5>")
        assert "best streak of **4** in a row" in text

    def test_broken_streak(self):
        """Test the broken heart when a streak ends."""
        outcome = _outcome(GuessResult.INCORRECT, (3, 3, 3, 3), (4, 3, 0, 3), guess_id=2)
        assert result_message(outcome, "<@5>", 1) == (
            "### 💔 Good guess, <@5>, but this quote is not by <@2>...\n"
            "-# You have made **3**/**4** (**75.0%**) correct guesses in total"
            " with a best streak of **3** in a row.\n"
        )

    def test_timeout(self):
        """Test the timeout text."""
        outcome = _outcome(GuessResult.TIMEOUT, (0, 0, 0, 0), (1, 0, 0, 0), guess_id=0)
        text = result_message(outcome, "<@5>", 1)
        assert text.startswith("### 🕛 YOUR TAKING TOO LONG... <@5>, this quote is by <@1>...")
        assert "(**0.0%**)" in text

    def test_unsaved_result_warns(self):
        """Test that a failed save adds a warning line."""
        outcome = _outcome(GuessResult.CORRECT, (0, 0, 0, 0), (1, 1, 1, 1), saved=False)
        assert result_message(outcome, "<@5>", 1).endswith(f"{SAVE_FAILED_LINE}\n")


class TestFixNames:
    """Tests for replacing mentions with plain names."""

    def test_correct_guess(self):
        """Test that the author mention becomes their name."""
        content = "### ✅ Good job, <@5>, this quote is by <@1>!\n"
        assert fix_names(content, 1, "alice", None) == "### ✅ Good job, <@5>, this quote is by `alice`!\n"

    def test_incorrect_guess(self):
        """Test that a wrong guess names both the author and the guess."""
        content = "### ❌ Good guess, <@5>, but this quote is not by <@2>...\n"
        assert fix_names(content, 1, "alice", "bob") == (
            "### ❌ Good guess, <@5>, but this quote is by `alice`, not `bob`...\n"
        )

    def test_unknown_guess_falls_back_to_id(self):
        """Test that an unresolvable guess shows its ID."""
        content = "this quote is not by <@2>..."
        assert fix_names(content, 1, "alice", None) == "this quote is by `alice`, not `2`..."

    def test_no_mention(self):
        """Test content that has already been fixed."""
        assert fix_names("this quote is by `alice`!", 1, "alice", None) is None

    def test_shown_user_id(self):
        """Test reading the ID the result message names."""
        assert shown_user_id("Good guess, <@5>, but this quote is not by <@2>...") == 2
        assert shown_user_id("nothing here") is None


class TestProfileMessage:
    """Tests for the /guess stats text."""

    def test_no_stats(self):
        """Test that an unknown user gets no stats."""
        assert profile_message(_profile()) is None

    def test_quoted_once(self):
        """Test singular wording."""
        assert profile_message(_profile(quoted=1)) == "- Has been quoted **1** time."

    def test_guesser_lines(self):
        """Test the lines about a player's own guesses."""
        text = profile_message(_profile(total=4, correct=3, max_streak=2))
        assert text.splitlines() == [
            "- Has made **4** total quote guesses...",
            "  - ...**3** (**75.0%**) of which were correct.",
            "- Achieved a maximum streak of **2** correct guesses in a row.",
        ]

    def test_answer_lines(self):
        """Test the lines about being the correct answer."""
        text = profile_message(_profile(times_answer=5, times_answer_correct=1))
        assert "- Has been the correct guess **5** times..." in text
        assert "  - ...but only guessed correctly **1** time (**20.0%**)." in text

    def test_self_guess(self):
        """Test the self guess lines."""
        text = profile_message(_profile(self_total=2, self_incorrect=1))
        assert "- Has gotten to guess themselves **2** times!.." in text
        assert "  - ...and somehow failed **1** time." in text


class TestLeaderboards:
    """Tests for leaderboard text."""

    def test_correct_leaderboard(self):
        """Test numbering and wording."""
        rows = [
            {"user_id": 5, "total": 9, "correct": 7, "streak": 0, "max_streak": 3},
            {"user_id": 6, "total": 2, "correct": 2, "streak": 2, "max_streak": 2},
        ]
        assert correct_leaderboard_message(rows) == (
            "## 🏆 10 most correct guesses:\n"
            "1. <@5> - **7** correct guesses\n"
            "2. <@6> - **2** correct guesses"
        )

    def test_streak_leaderboard(self):
        """Test the streak leaderboard line format."""
        rows = [{"user_id": 5, "total": 9, "correct": 7, "streak": 0, "max_streak": 3}]
        assert streak_leaderboard_message(rows) == (
            "## 🏆 10 highest guess streaks:\n"
            "1. <@5> - **3** correct guesses in a row"
        )
