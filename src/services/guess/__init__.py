"""
Geode Discord Bot - Guess Game Package
======================================

Candidate selection, streak counters and round orchestration for
the "who said this" game.
"""

from .candidates import RosterEntry, candidate_window, select_candidates
from .streaks import GuessStats, apply_outcome, compute_streaks, run_lengths
from .service import (
    GuessOutcome,
    GuessResult,
    GuessRound,
    GuessService,
    StreakAudit,
)

__all__ = [
    "RosterEntry",
    "candidate_window",
    "select_candidates",
    "GuessStats",
    "apply_outcome",
    "compute_streaks",
    "run_lengths",
    "GuessOutcome",
    "GuessResult",
    "GuessRound",
    "GuessService",
    "StreakAudit",
]
