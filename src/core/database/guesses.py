"""
Geode Discord Bot - Guess Operations Mixin
==========================================

Guess history and the per-user counters derived from it.

DESIGN:
    guess_stats holds incremental counters that are the source of truth
    for streaks and leaderboards. record_guess reads the counters, applies
    the caller's update, inserts the guess row and writes the counters
    back inside one BEGIN IMMEDIATE transaction, so either both the row
    and the counters land or neither does.
"""

import time
from typing import TYPE_CHECKING, Callable, List

from src.core.database.models import GuessProfileRecord, GuessRecord, GuessStatsRecord

if TYPE_CHECKING:
    from .manager import DatabaseManager


def _empty_stats(user_id: int) -> GuessStatsRecord:
    return {"user_id": user_id, "total": 0, "correct": 0, "streak": 0, "max_streak": 0}


class GuessesMixin:
    """Mixin for guess history and guess counters."""

    # =========================================================================
    # Counters
    # =========================================================================

    def get_guess_stats(self: "DatabaseManager", user_id: int) -> GuessStatsRecord:
        """
        Get the last committed guess counters for a user.

        Returns:
            Counters, all zero if the user never played.
        """
        row = self.fetchone(
            "SELECT user_id, total, correct, streak, max_streak FROM guess_stats WHERE user_id = ?",
            (user_id,)
        )
        if not row:
            return _empty_stats(user_id)
        return {
            "user_id": row["user_id"],
            "total": row["total"],
            "correct": row["correct"],
            "streak": row["streak"],
            "max_streak": row["max_streak"],
        }

    def record_guess(
        self: "DatabaseManager",
        guess: GuessRecord,
        update: Callable[[GuessStatsRecord], GuessStatsRecord],
    ) -> GuessStatsRecord:
        """
        Store a finished round and update the player's counters atomically.

        Args:
            guess: The round to insert.
            update: Maps the committed counters to the new counters.

        Returns:
            The counters as committed.

        Raises:
            sqlite3.Error: If anything fails; nothing is written in that case.
        """
        user_id = guess["user_id"]
        with self.transaction() as tx:
            tx.execute(
                "SELECT user_id, total, correct, streak, max_streak FROM guess_stats WHERE user_id = ?",
                (user_id,)
            )
            row = tx.fetchone()
            current: GuessStatsRecord = dict(row) if row else _empty_stats(user_id)  # type: ignore[assignment]
            updated = update(current)

            tx.execute(
                """INSERT INTO guesses
                   (message_id, started_at, guessed_at, user_id, guess_id, quote_message_id)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    guess["message_id"],
                    guess["started_at"],
                    guess["guessed_at"],
                    user_id,
                    guess["guess_id"],
                    guess["quote_message_id"],
                )
            )
            tx.execute(
                """INSERT INTO guess_stats (user_id, total, correct, streak, max_streak, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(user_id) DO UPDATE SET
                       total = excluded.total,
                       correct = excluded.correct,
                       streak = excluded.streak,
                       max_streak = excluded.max_streak,
                       updated_at = excluded.updated_at""",
                (
                    user_id,
                    updated["total"],
                    updated["correct"],
                    updated["streak"],
                    updated["max_streak"],
                    time.time(),
                )
            )
        return updated

    # =========================================================================
    # History
    # =========================================================================

    def get_guess_outcomes(self: "DatabaseManager", user_id: int) -> List[bool]:
        """
        Get whether each of a user's guesses was correct, oldest first.

        Correctness is judged against the quote's current author.
        """
        rows = self.fetchall(
            """SELECT g.guess_id = q.author_id AS is_correct
               FROM guesses g
               JOIN quotes q ON q.message_id = g.quote_message_id
               WHERE g.user_id = ?
               ORDER BY g.guessed_at ASC, g.message_id ASC""",
            (user_id,)
        )
        return [bool(row["is_correct"]) for row in rows]

    def count_guesses(self: "DatabaseManager") -> int:
        """Count all stored guess rounds."""
        row = self.fetchone("SELECT COUNT(*) AS c FROM guesses")
        return row["c"] if row else 0

    def get_guess_profile(self: "DatabaseManager", user_id: int) -> GuessProfileRecord:
        """
        Collect everything /guess stats shows for one user.

        Args:
            user_id: User to describe.

        Returns:
            Aggregated counts; all zero for unknown users.
        """
        stats = self.get_guess_stats(user_id)

        times_guessed = self.fetchone(
            "SELECT COUNT(*) AS c FROM guesses WHERE guess_id = ?", (user_id,)
        )["c"]

        answer = self.fetchone(
            """SELECT COUNT(*) AS total,
                      COALESCE(SUM(g.guess_id = q.author_id), 0) AS correct
               FROM guesses g
               JOIN quotes q ON q.message_id = g.quote_message_id
               WHERE q.author_id = ?""",
            (user_id,)
        )

        self_guess = self.fetchone(
            """SELECT COUNT(*) AS total,
                      COALESCE(SUM(g.guess_id != q.author_id), 0) AS incorrect
               FROM guesses g
               JOIN quotes q ON q.message_id = g.quote_message_id
               WHERE g.user_id = ? AND q.author_id = ?""",
            (user_id, user_id)
        )

        return {
            "quoted": self.count_quotes(user_id),
            "total": stats["total"],
            "correct": stats["correct"],
            "max_streak": stats["max_streak"],
            "times_guessed": times_guessed,
            "times_answer": answer["total"],
            "times_answer_correct": answer["correct"],
            "self_total": self_guess["total"],
            "self_incorrect": self_guess["incorrect"],
        }

    # =========================================================================
    # Leaderboards
    # =========================================================================

    def get_correct_leaderboard(self: "DatabaseManager", limit: int = 10) -> List[GuessStatsRecord]:
        """Top users by number of correct guesses."""
        rows = self.fetchall(
            """SELECT user_id, total, correct, streak, max_streak FROM guess_stats
               WHERE correct > 0
               ORDER BY correct DESC, user_id ASC LIMIT ?""",
            (limit,)
        )
        return [dict(row) for row in rows]  # type: ignore[misc]

    def get_streak_leaderboard(self: "DatabaseManager", limit: int = 10) -> List[GuessStatsRecord]:
        """Top users by longest streak of correct guesses."""
        rows = self.fetchall(
            """SELECT user_id, total, correct, streak, max_streak FROM guess_stats
               WHERE max_streak > 0
               ORDER BY max_streak DESC, user_id ASC LIMIT ?""",
            (limit,)
        )
        return [dict(row) for row in rows]  # type: ignore[misc]


__all__ = ["GuessesMixin"]
