"""
Geode Discord Bot - Guess Messages
==================================

Text for round results, player stats and leaderboards.
"""

import re
from typing import List, Optional

from src.core.database.models import GuessProfileRecord, GuessStatsRecord
from src.services.guess.service import GuessOutcome, GuessResult, StreakAudit


SAVE_FAILED_LINE = "-# ⚠️ Failed to save stats, sorry... :<"
NO_STATS_MESSAGE = "❌ No stats to show... :<"

# First "by <@id>" or "not by <@id>" in a result message
SHOWN_ID_PATTERN = re.compile(r"(?:not )?by <@(\d+)>")


def _suffix(count: int, suffix: str) -> str:
    return "" if count == 1 else suffix


def _choose(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def _percent(part: int, whole: int) -> str:
    return f"{part / whole * 100.0:.1f}%" if whole else "0.0%"


# =============================================================================
# Round Messages
# =============================================================================

def prompt_message(player_mention: str) -> str:
    return f"## {player_mention}, who said this?"


def result_message(outcome: GuessOutcome, player_mention: str, author_id: int) -> str:
    """
    The message that replaces the prompt once a round ends.

    Example:
        ### 🔥 3x, new best! Keep it going, <@1>, this quote is by <@2>!
        -# You have made **7**/**9** (**77.8%**) correct guesses in total.
    """
    result = outcome.result
    prev_streak = outcome.previous.streak
    streak = outcome.stats.streak
    new_best = outcome.new_best

    parts = ["### "]

    if result is not GuessResult.CORRECT and prev_streak > 1:
        parts.append("💔 ")
    elif result is GuessResult.TIMEOUT:
        parts.append("🕛 ")
    elif result is GuessResult.INCORRECT:
        parts.append("❌ ")
    elif streak > 1 and new_best:
        parts.append("🔥 ")
    else:
        parts.append("✅ ")

    if streak > 1:
        parts.append(f"{streak}x")
        if new_best:
            parts.append(", new best")
        parts.append("! ")

    if result is GuessResult.TIMEOUT:
        parts.append(f"YOUR TAKING TOO LONG... {player_mention}, this quote is by <@{author_id}>...")
    elif result is GuessResult.INCORRECT:
        parts.append(f"Good guess, {player_mention}, but this quote is not by <@{outcome.guess_id}>...")
    elif streak > 1:
        parts.append(f"Keep it going, {player_mention}, this quote is by <@{author_id}>!")
    else:
        parts.append(f"Good job, {player_mention}, this quote is by <@{author_id}>!")
    parts.append("\n")

    stats = outcome.stats
    parts.append(
        f"-# You have made **{stats.correct}**/**{stats.total}** "
        f"(**{_percent(stats.correct, stats.total)}**) correct guesses in total"
    )
    if not (streak > 1 and new_best):
        parts.append(f" with a best streak of **{stats.max_streak}** in a row")
    parts.append(".\n")

    if not outcome.saved:
        parts.append(f"{SAVE_FAILED_LINE}\n")

    return "".join(parts)


def fix_names(content: str, author_id: int, author_name: str, shown_name: Optional[str]) -> Optional[str]:
    """
    Replace the first user mention in a result message with plain names.

    Mentions of users outside the guild render as raw IDs, so this swaps
    `by <@id>` for `by `name`` (and `not by <@id>` for
    `by `author`, not `guessed``).

    Returns:
        The new content, or None if no mention was found.
    """
    match = SHOWN_ID_PATTERN.search(content)
    if match is None:
        return None

    shown_id = int(match.group(1))
    if shown_id == author_id:
        replacement = f"by `{author_name}`"
    else:
        replacement = f"by `{author_name}`, not `{shown_name or shown_id}`"

    return content[:match.start()] + replacement + content[match.end():]


def shown_user_id(content: str) -> Optional[int]:
    """The user ID a result message names, if any."""
    match = SHOWN_ID_PATTERN.search(content)
    return int(match.group(1)) if match else None


# =============================================================================
# Stats
# =============================================================================

def profile_message(profile: GuessProfileRecord) -> Optional[str]:
    """
    Bullet list for /guess stats.

    Returns:
        None when the user has no stats at all.
    """
    lines: List[str] = []

    quoted = profile["quoted"]
    total = profile["total"]
    correct = profile["correct"]
    max_streak = profile["max_streak"]
    times_answer = profile["times_answer"]
    answer_correct = profile["times_answer_correct"]
    times_guessed = profile["times_guessed"]
    self_total = profile["self_total"]
    self_incorrect = profile["self_incorrect"]

    if quoted > 0:
        lines.append(f"- Has been quoted **{quoted}** time{_suffix(quoted, 's')}.")

    if total > 0:
        lines.append(f"- Has made **{total}** total quote guess{_suffix(total, 'es')}...")
        if correct > 0:
            lines.append(
                f"  - ...**{correct}** (**{_percent(correct, total)}**) of which "
                f"{_choose(correct, 'was', 'were')} correct."
            )
        else:
            lines.append("  - ...none of which were correct.")
        if max_streak > 1:
            lines.append(f"- Achieved a maximum streak of **{max_streak}** correct guesses in a row.")

    if times_answer > 0:
        lines.append(f"- Has been the correct guess **{times_answer}** time{_suffix(times_answer, 's')}...")
        if answer_correct > 0:
            joiner = "and" if answer_correct / times_answer * 100.0 > 60.0 else "but only"
            lines.append(
                f"  - ...{joiner} guessed correctly **{answer_correct}** "
                f"time{_suffix(answer_correct, 's')} (**{_percent(answer_correct, times_answer)}**)."
            )
        else:
            lines.append("  - ...but never guessed correctly.")

    if times_guessed > 0:
        lines.append(f"- Has been guessed **{times_guessed}** time{_suffix(times_guessed, 's')}...")
        if answer_correct > 0:
            joiner = "and" if answer_correct / times_guessed * 100.0 > 60.0 else "but only"
            lines.append(
                f"  - ...{joiner} **{answer_correct}** (**{_percent(answer_correct, times_guessed)}**) "
                f"of the guesses {_choose(answer_correct, 'was', 'were')} correct."
            )
        else:
            lines.append("  - ...but none of the guesses were correct.")

    if self_total > 0:
        if self_incorrect > 0:
            lines.append(f"- Has gotten to guess themselves **{self_total}** time{_suffix(self_total, 's')}!..")
            lines.append(f"  - ...and somehow failed **{self_incorrect}** time{_suffix(self_incorrect, 's')}.")
        else:
            lines.append(f"- Has gotten to guess themselves **{self_total}** time{_suffix(self_total, 's')}!")

    if not lines:
        return None
    return "\n".join(lines)


# =============================================================================
# Leaderboards
# =============================================================================

def correct_leaderboard_message(rows: List[GuessStatsRecord]) -> str:
    lines = [
        f"{i}. <@{row['user_id']}> - **{row['correct']}** correct guesses"
        for i, row in enumerate(rows, start=1)
    ]
    return "## 🏆 10 most correct guesses:\n" + "\n".join(lines)


def streak_leaderboard_message(rows: List[GuessStatsRecord]) -> str:
    lines = [
        f"{i}. <@{row['user_id']}> - **{row['max_streak']}** correct guesses in a row"
        for i, row in enumerate(rows, start=1)
    ]
    return "## 🏆 10 highest guess streaks:\n" + "\n".join(lines)


def audit_message(user_mention: str, audit: StreakAudit) -> str:
    stored = audit.stored
    verdict = "✅ Counters match guess history." if audit.consistent else "⚠️ Counters differ from guess history!"
    return (
        f"### Guess audit for {user_mention}\n"
        f"{verdict}\n"
        f"- Total: stored **{stored.total}**, history **{audit.history_total}**\n"
        f"- Correct: stored **{stored.correct}**, history **{audit.history_correct}**\n"
        f"- Streak: stored **{stored.streak}**, history **{audit.current}**\n"
        f"- Best streak: stored **{stored.max_streak}**, history **{audit.best}**"
    )


__all__ = [
    "SAVE_FAILED_LINE",
    "NO_STATS_MESSAGE",
    "prompt_message",
    "result_message",
    "fix_names",
    "shown_user_id",
    "profile_message",
    "correct_leaderboard_message",
    "streak_leaderboard_message",
    "audit_message",
]
