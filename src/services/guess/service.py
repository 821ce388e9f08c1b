"""
Geode Discord Bot - Guess Service
=================================

Runs "who said this" rounds and keeps players' counters.

DESIGN:
    A round is: pick a quote whose author still resolves to a name,
    build the roster of quoted authors, draw the answer options, wait
    for the player, then record the outcome.

    Recording is serialized per player with an asyncio.Lock, and the
    database write is one transaction that reads the committed
    counters, applies the outcome and stores both the guess row and
    the new counters. If that transaction fails the player still sees
    their result (computed from the committed counters), the failure
    is logged, and because nothing was written the next round starts
    from the same committed counters again.
"""

import asyncio
import random
import sqlite3
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Dict, List, Optional, Tuple

import discord

from src.core.constants import GUESS_QUOTE_ATTEMPTS, TIMEOUT_GUESS_ID
from src.core.database.models import GuessRecord, QuoteRecord
from src.core.logger import logger
from src.services.guess.candidates import RosterEntry, select_candidates
from src.services.guess.streaks import GuessStats, apply_outcome, compute_streaks


# =============================================================================
# Types
# =============================================================================

class GuessResult(Enum):
    TIMEOUT = "timeout"
    INCORRECT = "incorrect"
    CORRECT = "correct"


@dataclass
class GuessRound:
    """A round ready to be shown: the quote and shuffled answer options."""
    quote: QuoteRecord
    author_name: str
    candidates: List[RosterEntry]


@dataclass
class GuessOutcome:
    """What happened in a finished round and the player's counters after it."""
    result: GuessResult
    guess_id: int
    previous: GuessStats
    stats: GuessStats
    saved: bool

    @property
    def new_best(self) -> bool:
        return self.stats.max_streak > self.previous.max_streak


@dataclass
class StreakAudit:
    """Stored counters next to the streaks recomputed from history."""
    stored: GuessStats
    history_total: int
    history_correct: int
    current: int
    best: int

    @property
    def consistent(self) -> bool:
        return (
            self.stored.total == self.history_total
            and self.stored.correct == self.history_correct
            and self.stored.streak == self.current
            and self.stored.max_streak == self.best
        )


def classify(quote: QuoteRecord, guess_id: int) -> GuessResult:
    if guess_id == TIMEOUT_GUESS_ID:
        return GuessResult.TIMEOUT
    if guess_id == quote["author_id"]:
        return GuessResult.CORRECT
    return GuessResult.INCORRECT


# =============================================================================
# Guess Service
# =============================================================================

class GuessService:
    """
    Round setup and outcome recording.

    Attributes:
        db: DatabaseManager.
        resolver: UserNameResolver for author names.
        options: Number of answer buttons per round.
        range_size: Popularity window half-width for candidate selection.
    """

    def __init__(self, db, resolver, options: int = 5, range_size: int = 5) -> None:
        self.db = db
        self.resolver = resolver
        self.options = options
        self.range_size = range_size
        # user_id -> (lock, holders and waiters)
        self._locks: Dict[int, Tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def _player_lock(self, user_id: int) -> AsyncIterator[None]:
        """
        Serialize recording for one player.

        The lock is dropped once nobody holds or waits for it.
        """
        lock, users = self._locks.get(user_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[user_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[user_id]
            if users == 1:
                del self._locks[user_id]
            else:
                self._locks[user_id] = (lock, users - 1)

    # =========================================================================
    # Round Setup
    # =========================================================================

    async def _name_of(self, user_id: int) -> Optional[str]:
        try:
            return await self.resolver.resolve(user_id)
        except discord.HTTPException as e:
            logger.debug(f"Could not resolve user {user_id}: {e}")
            return None

    async def pick_quote(self) -> Optional[GuessRound]:
        """
        Pick a random quote whose author can be named.

        Returns:
            A round with only the correct author as candidate, or None.
        """
        for quote in self.db.random_quotes(GUESS_QUOTE_ATTEMPTS):
            name = await self._name_of(quote["author_id"])
            if name is None:
                continue
            return GuessRound(quote=quote, author_name=name, candidates=[])
        return None

    async def build_roster(self) -> List[RosterEntry]:
        """Every quoted author with a resolvable name, weighted by quote count."""
        roster: List[RosterEntry] = []
        for row in self.db.get_author_quote_counts():
            name = await self._name_of(row["author_id"])
            if name is None:
                continue
            roster.append(RosterEntry(user_id=row["author_id"], name=name, weight=row["count"]))
        return roster

    async def start_round(self, rng: Optional[random.Random] = None) -> Optional[GuessRound]:
        """
        Prepare a round: quote plus shuffled candidates.

        Returns:
            None when no quote with a resolvable author exists.
        """
        rng = rng or random.Random()
        guess_round = await self.pick_quote()
        if guess_round is None:
            return None

        quote = guess_round.quote
        correct = RosterEntry(
            user_id=quote["author_id"],
            name=guess_round.author_name,
            weight=self.db.count_quotes(quote["author_id"]),
        )
        roster = await self.build_roster()
        candidates = select_candidates(
            correct,
            roster,
            desired_count=self.options,
            range_size=self.range_size,
            rng=rng,
        )
        rng.shuffle(candidates)
        guess_round.candidates = candidates

        logger.tree("Guess Round Started", [
            ("Quote", f"{quote['id']}: {quote['name']}"),
            ("Options", str(len(candidates))),
            ("Roster", str(len(roster))),
        ], emoji="❓")
        return guess_round

    # =========================================================================
    # Recording
    # =========================================================================

    async def record(
        self,
        user_id: int,
        quote: QuoteRecord,
        guess_id: int,
        message_id: int,
        started_at: float,
        guessed_at: float,
    ) -> GuessOutcome:
        """
        Store a finished round and update the player's counters.

        Never raises for storage failures; check `saved` on the result.
        """
        result = classify(quote, guess_id)
        correct = result is GuessResult.CORRECT
        guess: GuessRecord = {
            "message_id": message_id,
            "started_at": started_at,
            "guessed_at": guessed_at,
            "user_id": user_id,
            "guess_id": guess_id,
            "quote_message_id": quote["message_id"],
        }

        async with self._player_lock(user_id):
            try:
                baseline = GuessStats.from_record(self.db.get_guess_stats(user_id))
            except sqlite3.Error as e:
                logger.warning("Guess Stats Unreadable", [
                    ("User ID", str(user_id)),
                    ("Error", str(e)[:100]),
                ])
                baseline = GuessStats(user_id=user_id)

            try:
                committed = self.db.record_guess(
                    guess,
                    lambda current: apply_outcome(GuessStats.from_record(current), correct).to_record(),
                )
            except sqlite3.Error as e:
                logger.warning("Guess Stats Not Saved", [
                    ("User ID", str(user_id)),
                    ("Quote", str(quote.get("id"))),
                    ("Result", result.value),
                    ("Error", str(e)[:100]),
                ])
                return GuessOutcome(
                    result=result,
                    guess_id=guess_id,
                    previous=baseline,
                    stats=apply_outcome(baseline, correct),
                    saved=False,
                )

        stats = GuessStats.from_record(committed)
        logger.tree("Guess Recorded", [
            ("User ID", str(user_id)),
            ("Quote", str(quote.get("id"))),
            ("Result", result.value),
            ("Score", f"{stats.correct}/{stats.total}"),
            ("Streak", f"{stats.streak} (best {stats.max_streak})"),
        ], emoji="🎯")
        return GuessOutcome(
            result=result,
            guess_id=guess_id,
            previous=baseline,
            stats=stats,
            saved=True,
        )

    # =========================================================================
    # Audit
    # =========================================================================

    def audit(self, user_id: int) -> StreakAudit:
        """Compare stored counters with a recomputation from guess history."""
        stored = GuessStats.from_record(self.db.get_guess_stats(user_id))
        outcomes = self.db.get_guess_outcomes(user_id)
        current, best = compute_streaks(outcomes, newest_first=False)
        return StreakAudit(
            stored=stored,
            history_total=len(outcomes),
            history_correct=sum(1 for o in outcomes if o),
            current=current,
            best=best,
        )


__all__ = [
    "GuessService",
    "GuessRound",
    "GuessOutcome",
    "GuessResult",
    "StreakAudit",
    "classify",
]
