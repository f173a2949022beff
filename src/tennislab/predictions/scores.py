"""Validators and formatters for tennis score tokens and player names."""

from __future__ import annotations

import re

from tennislab.predictions.types import MatchFormat

SCORE_PATTERN = re.compile(r"^(\d+)-(\d+)$")

SET_SCORES = (
    "6-0", "6-1", "6-2", "6-3", "6-4", "7-5", "7-6",
    "6-7", "5-7", "4-6", "3-6", "2-6", "1-6", "0-6",
)
TIEBREAK_SET_SCORES = ("7-6", "6-7")
THREE_SET_RESULTS = ("2-1", "1-2")

SUPER_TIEBREAK_MIN_POINTS = 10
TIEBREAK_MIN_POINTS = 7
WINNING_MARGIN = 2


def parse_score(token: str | None) -> tuple[int, int] | None:
    """Split an ``N-M`` token into integers, ``None`` when malformed."""

    if not token:
        return None
    match = SCORE_PATTERN.match(token.strip())
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def validate_set_score(token: str) -> bool:
    """Accept completed-set tokens such as ``6-4``, ``7-5`` or ``6-7``."""

    parsed = parse_score(token)
    if parsed is None:
        return False
    high, low = max(parsed), min(parsed)
    if high == 6:
        return low <= 4
    if high == 7:
        return low in (5, 6)
    return False


def set_score_options(winner_is_side_a: bool | None = None) -> list[str]:
    """Completed-set quick picks, narrowed to the given side when known."""

    if winner_is_side_a is None:
        return list(SET_SCORES)
    return [score for score in SET_SCORES if set_won_by_side_a(score) is winner_is_side_a]


def set_won_by_side_a(token: str) -> bool | None:
    parsed = parse_score(token)
    if parsed is None or parsed[0] == parsed[1]:
        return None
    return parsed[0] > parsed[1]


def is_tiebreak_set(token: str) -> bool:
    return token.strip() in TIEBREAK_SET_SCORES if token else False


def validate_tiebreak_score(token: str, set_score: str) -> bool:
    """Check a tiebreak score against the ``7-6``/``6-7`` set that contains it."""

    if not is_tiebreak_set(set_score):
        return False
    parsed = parse_score(token)
    if parsed is None:
        return False
    side_a_won_set = set_score.strip() == "7-6"
    winner_points = parsed[0] if side_a_won_set else parsed[1]
    loser_points = parsed[1] if side_a_won_set else parsed[0]
    if winner_points < TIEBREAK_MIN_POINTS:
        return False
    if winner_points - loser_points < WINNING_MARGIN:
        return False
    if winner_points > TIEBREAK_MIN_POINTS and winner_points - loser_points != WINNING_MARGIN:
        return False
    return True


def tiebreak_options(set_score: str) -> list[str]:
    if not is_tiebreak_set(set_score):
        return []
    if set_score.strip() == "7-6":
        return [f"7-{n}" for n in range(6)]
    return [f"{n}-7" for n in range(6)]


def validate_super_tiebreak_score(token: str, winner_is_side_a: bool) -> bool:
    """Validate a 10-point super tiebreak score for the expected winner.

    An empty token is treated as absent and therefore valid, so the field
    can be cleared. Otherwise the winner needs at least 10 points, a lead of
    two, and must be the side named by ``winner_is_side_a``.
    """

    if not token or not token.strip():
        return True
    parsed = parse_score(token)
    if parsed is None:
        return False
    side_a, side_b = parsed
    if max(side_a, side_b) < SUPER_TIEBREAK_MIN_POINTS:
        return False
    if abs(side_a - side_b) < WINNING_MARGIN:
        return False
    if winner_is_side_a and side_a <= side_b:
        return False
    if not winner_is_side_a and side_b <= side_a:
        return False
    return True


def is_straight_sets(match_result: str) -> bool:
    """True when the losing side takes no sets (``3-0``, ``0-2`` ...)."""

    parsed = parse_score(match_result)
    if parsed is None:
        return False
    return min(parsed) == 0 and max(parsed) > 0


def is_three_set_result(match_result: str) -> bool:
    return match_result in THREE_SET_RESULTS


def allowed_match_results(fmt: MatchFormat, winner_is_side_a: bool) -> list[str]:
    sets_to_win = fmt.sets_to_win
    results = []
    for loser_sets in range(sets_to_win):
        if winner_is_side_a:
            results.append(f"{sets_to_win}-{loser_sets}")
        else:
            results.append(f"{loser_sets}-{sets_to_win}")
    return results


def _abbreviate(full_name: str) -> str:
    parts = full_name.split()
    if len(parts) >= 2:
        return f"{parts[-1]} {parts[0][0].upper()}."
    return full_name


def display_name(full_name: str, is_doubles: bool = False) -> str:
    """Format ``"Rafael Nadal"`` as ``"Nadal R."``.

    Doubles teams written as ``"A B & C D"`` are abbreviated per player; any
    other doubles string is returned unchanged.
    """

    if not is_doubles:
        return _abbreviate(full_name)
    if full_name.count(" & ") != 1:
        return full_name
    first, second = full_name.split(" & ")
    if not first.strip() or not second.strip():
        return full_name
    return f"{_abbreviate(first)} & {_abbreviate(second)}"


def last_name(full_name: str) -> str:
    parts = full_name.split()
    return parts[-1] if parts else full_name
