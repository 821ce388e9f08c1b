"""
Geode Discord Bot - Guess Candidate Selection
=============================================

Picks the names offered as answers in a guess round.

DESIGN:
    The roster is every quoted author weighted by how many quotes they
    have. Candidates are drawn from a window of authors ranked near the
    correct one, so the answer doesn't stand out as the only popular
    (or only obscure) name on the board. Within the window, draws are
    weighted by quote count and made without replacement.
"""

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class RosterEntry:
    """An author that can be offered as an answer."""
    user_id: int
    name: str
    weight: int


def _rank_of(correct: RosterEntry, ranked: Sequence[RosterEntry]) -> int:
    for i, entry in enumerate(ranked):
        if entry.user_id == correct.user_id:
            return i
    # Not on the roster: place it after everyone heavier.
    return sum(1 for entry in ranked if entry.weight > correct.weight)


def candidate_window(
    correct: RosterEntry,
    roster: Sequence[RosterEntry],
    range_size: int = 5,
) -> List[RosterEntry]:
    """
    The slice of the roster that candidates may be drawn from.

    The roster is ranked by weight (heaviest first) and the correct
    author is removed. The window starts `range_size` places above the
    author's rank and spans at most `2 * range_size` entries, clamped
    to the bounds of the list.
    """
    ranked = sorted(roster, key=lambda e: e.weight, reverse=True)
    rank = _rank_of(correct, ranked)
    working = [e for e in ranked if e.user_id != correct.user_id]

    start = max(rank - range_size, 0)
    end = min(start + 2 * range_size, len(working))
    return working[start:end]


def _draw(pool: List[RosterEntry], rng: random.Random) -> RosterEntry:
    total = sum(max(e.weight, 0) for e in pool)
    if total <= 0:
        return pool.pop(rng.randrange(len(pool)))

    point = rng.uniform(0, total)
    for i, entry in enumerate(pool):
        point -= max(entry.weight, 0)
        if point < 0:
            return pool.pop(i)
    # uniform() may return exactly `total`
    for i in range(len(pool) - 1, -1, -1):
        if pool[i].weight > 0:
            return pool.pop(i)
    return pool.pop()


def select_candidates(
    correct: RosterEntry,
    roster: Sequence[RosterEntry],
    desired_count: int = 5,
    range_size: int = 5,
    rng: Optional[random.Random] = None,
) -> List[RosterEntry]:
    """
    Choose the answer options for a guess round.

    Args:
        correct: The author of the quote being guessed.
        roster: Known authors with their quote counts. May contain `correct`.
        desired_count: Options to return, including the correct author.
        range_size: Half-width of the popularity window.
        rng: Random source, for reproducible draws.

    Returns:
        The correct author first, then up to `desired_count - 1` distinct
        others. Fewer are returned when the window runs out. Callers
        shuffle before showing them.
    """
    rng = rng or random.Random()
    pool = candidate_window(correct, roster, range_size)

    selected = [correct]
    while pool and len(selected) < desired_count:
        selected.append(_draw(pool, rng))
    return selected


__all__ = ["RosterEntry", "candidate_window", "select_candidates"]
