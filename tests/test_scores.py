"""Score token and display name tests."""

from __future__ import annotations

import pytest

from tennislab.predictions import scores
from tennislab.predictions.types import MatchFormat


@pytest.mark.parametrize("token", ["6-0", "6-4", "7-5", "7-6", "6-7", "5-7", "0-6"])
def test_completed_set_scores_are_valid(token: str) -> None:
    assert scores.validate_set_score(token)


@pytest.mark.parametrize("token", ["6-5", "8-6", "5-5", "7-4", "abc", "", "6-"])
def test_incomplete_or_malformed_set_scores_are_rejected(token: str) -> None:
    assert not scores.validate_set_score(token)


def test_set_score_options_follow_the_set_winner() -> None:
    assert len(scores.set_score_options()) == 14
    side_a = scores.set_score_options(winner_is_side_a=True)
    assert side_a == ["6-0", "6-1", "6-2", "6-3", "6-4", "7-5", "7-6"]
    assert "6-7" in scores.set_score_options(winner_is_side_a=False)


def test_tiebreak_score_rules() -> None:
    assert scores.validate_tiebreak_score("7-5", "7-6")
    assert scores.validate_tiebreak_score("10-8", "7-6")
    assert scores.validate_tiebreak_score("5-7", "6-7")
    assert not scores.validate_tiebreak_score("7-6", "7-6")
    assert not scores.validate_tiebreak_score("9-6", "7-6")
    assert not scores.validate_tiebreak_score("5-7", "7-6")
    assert not scores.validate_tiebreak_score("7-5", "6-4")


def test_tiebreak_options_are_oriented_to_the_set_winner() -> None:
    assert scores.tiebreak_options("7-6")[0] == "7-0"
    assert scores.tiebreak_options("6-7")[-1] == "5-7"
    assert scores.tiebreak_options("6-3") == []


def test_super_tiebreak_score_rules() -> None:
    assert scores.validate_super_tiebreak_score("10-8", True)
    assert scores.validate_super_tiebreak_score("17-15", True)
    assert scores.validate_super_tiebreak_score("8-10", False)
    assert scores.validate_super_tiebreak_score("", True)
    assert not scores.validate_super_tiebreak_score("10-9", True)
    assert not scores.validate_super_tiebreak_score("9-7", True)
    assert not scores.validate_super_tiebreak_score("8-10", True)
    assert not scores.validate_super_tiebreak_score("ten-eight", True)


def test_allowed_match_results_by_format_and_side() -> None:
    assert scores.allowed_match_results(MatchFormat.BEST_OF_5, True) == ["3-0", "3-1", "3-2"]
    assert scores.allowed_match_results(MatchFormat.BEST_OF_3, False) == ["0-2", "1-2"]
    assert scores.allowed_match_results(MatchFormat.BEST_OF_3_SUPER_TIEBREAK, True) == ["2-0", "2-1"]


def test_straight_sets_and_three_set_results() -> None:
    assert scores.is_straight_sets("3-0")
    assert scores.is_straight_sets("0-2")
    assert not scores.is_straight_sets("2-1")
    assert not scores.is_straight_sets("")
    assert scores.is_three_set_result("1-2")
    assert not scores.is_three_set_result("3-1")


def test_display_name_abbreviates_singles_and_doubles() -> None:
    assert scores.display_name("Rafael Nadal") == "Nadal R."
    assert scores.display_name("Cher") == "Cher"
    assert scores.display_name("Rafael Nadal & Marc Lopez", is_doubles=True) == "Nadal R. & Lopez M."
    assert scores.display_name("A B & C D & E F", is_doubles=True) == "A B & C D & E F"
    assert scores.last_name("Roger Federer") == "Federer"
