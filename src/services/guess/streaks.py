"""
Geode Discord Bot - Guess Streaks
=================================

Per-user guess counters and streak arithmetic.

DESIGN:
    apply_outcome() is the canonical way streaks change: one outcome in,
    new counters out, no history scan. compute_streaks() recomputes the
    same numbers from the full outcome history by run-length encoding
    and is only used to audit the stored counters. Both agree as long
    as outcomes are applied once each, in the order they happened.
"""

from dataclasses import dataclass, replace
from typing import Iterable, List, Sequence, Tuple

from src.core.database.models import GuessStatsRecord


@dataclass(frozen=True)
class GuessStats:
    """Counters kept for every player."""
    user_id: int
    total: int = 0
    correct: int = 0
    streak: int = 0
    max_streak: int = 0

    @property
    def accuracy(self) -> float:
        """Percentage of correct guesses, 0 when nothing was guessed."""
        return self.correct / self.total * 100.0 if self.total else 0.0

    @classmethod
    def from_record(cls, record: GuessStatsRecord) -> "GuessStats":
        return cls(
            user_id=record["user_id"],
            total=record["total"],
            correct=record["correct"],
            streak=record["streak"],
            max_streak=record["max_streak"],
        )

    def to_record(self) -> GuessStatsRecord:
        return {
            "user_id": self.user_id,
            "total": self.total,
            "correct": self.correct,
            "streak": self.streak,
            "max_streak": self.max_streak,
        }


def apply_outcome(stats: GuessStats, correct: bool) -> GuessStats:
    """
    Fold one finished round into the counters.

    Timeouts count as incorrect.
    """
    if not correct:
        return replace(stats, total=stats.total + 1, streak=0)

    streak = stats.streak + 1
    return replace(
        stats,
        total=stats.total + 1,
        correct=stats.correct + 1,
        streak=streak,
        max_streak=max(stats.max_streak, streak),
    )


def run_lengths(outcomes: Iterable[bool]) -> List[Tuple[bool, int]]:
    """
    Split outcomes into maximal runs of equal values.

    Example:
        [T, T, F, T] -> [(True, 2), (False, 1), (True, 1)]
    """
    runs: List[Tuple[bool, int]] = []
    for outcome in outcomes:
        outcome = bool(outcome)
        if runs and runs[-1][0] == outcome:
            runs[-1] = (outcome, runs[-1][1] + 1)
        else:
            runs.append((outcome, 1))
    return runs


def compute_streaks(outcomes: Sequence[bool], newest_first: bool = True) -> Tuple[int, int]:
    """
    Recompute (current streak, best streak) from a full history.

    Args:
        outcomes: Whether each guess was correct.
        newest_first: True if outcomes[0] is the most recent guess.

    Returns:
        Length of the trailing correct run (0 if the latest guess missed)
        and the longest correct run overall.
    """
    chronological = list(reversed(outcomes)) if newest_first else list(outcomes)
    runs = run_lengths(chronological)
    if not runs:
        return 0, 0

    last_value, last_length = runs[-1]
    current = last_length if last_value else 0
    best = max((length for value, length in runs if value), default=0)
    return current, best


__all__ = ["GuessStats", "apply_outcome", "run_lengths", "compute_streaks"]
