"""Bonus multiplier pricing for detailed match predictions."""

from __future__ import annotations

import math
from dataclasses import dataclass

from tennislab.config import get_settings
from tennislab.predictions.scores import (
    is_straight_sets,
    is_three_set_result,
    parse_score,
    set_won_by_side_a,
    validate_set_score,
    validate_super_tiebreak_score,
    validate_tiebreak_score,
)
from tennislab.predictions.state import first_sets_split, score_sets, sets_to_show
from tennislab.predictions.types import TIEBREAK_SETS, MatchDetails, MatchFormat, PredictionOptions


@dataclass(frozen=True)
class MultiplierBreakdown:
    base_odds: float
    match_result_bonus: float = 0.0
    set_winners_bonus: float = 0.0
    set_scores_bonus: float = 0.0
    tiebreaks_bonus: float = 0.0
    super_tiebreak_bonus: float = 0.0

    @property
    def total_bonus(self) -> float:
        return round(
            self.match_result_bonus
            + self.set_winners_bonus
            + self.set_scores_bonus
            + self.tiebreaks_bonus
            + self.super_tiebreak_bonus,
            2,
        )

    @property
    def multiplier(self) -> float:
        if self.base_odds <= 0:
            return 0.0
        return round(self.base_odds + self.total_bonus, 2)


def potential_winnings(bet_amount: float, multiplier: float) -> float:
    """Single-bet payout rounded to whole coins, halves rounding up."""

    return float(math.floor(bet_amount * multiplier + 0.5))


def display_bonus(current: float, maximum: float) -> float:
    """Show what a section pays once filled, or what it could pay while empty."""

    return current if current > 0 else maximum


class MultiplierEngine:
    """Price a prediction as the chosen side's odds plus a fixed step per detail field."""

    def __init__(self, bonus_step: float | None = None, max_tiebreak_bonus: float | None = None) -> None:
        settings = get_settings()
        self.bonus_step = settings.bonus_step if bonus_step is None else bonus_step
        self.max_tiebreak_bonus = (
            settings.max_tiebreak_bonus if max_tiebreak_bonus is None else max_tiebreak_bonus
        )

    def _steps(self, count: int) -> float:
        return round(count * self.bonus_step, 2)

    def breakdown(self, match: MatchDetails, prediction: PredictionOptions) -> MultiplierBreakdown:
        base_odds = match.odds_for(prediction.winner) if prediction.winner else 0.0
        if base_odds <= 0:
            return MultiplierBreakdown(base_odds=0.0)
        result = prediction.match_result
        if parse_score(result) is None:
            return MultiplierBreakdown(base_odds=base_odds)
        return MultiplierBreakdown(
            base_odds=base_odds,
            match_result_bonus=self._steps(1),
            set_winners_bonus=self._steps(self._set_winner_count(match, prediction)),
            set_scores_bonus=self._steps(self._set_score_count(match, prediction)),
            tiebreaks_bonus=min(
                self._steps(self._tiebreak_count(match, prediction)), self.max_tiebreak_bonus
            ),
            super_tiebreak_bonus=self._steps(self._super_tiebreak_count(match, prediction)),
        )

    def current_multiplier(self, match: MatchDetails, prediction: PredictionOptions) -> float:
        return self.breakdown(match, prediction).multiplier

    def _set_winner_count(self, match: MatchDetails, prediction: PredictionOptions) -> int:
        result = prediction.match_result
        if is_straight_sets(result):
            return 0
        if is_three_set_result(result):
            # the second pick is derived from the first
            return 1 if first_sets_split(prediction) else 0
        cap_a, cap_b = parse_score(result)
        picked = prediction.set_winners(sets_to_show(result, match.format))
        return min(picked.count(match.player1.name), cap_a) + min(picked.count(match.player2.name), cap_b)

    def _set_score_count(self, match: MatchDetails, prediction: PredictionOptions) -> int:
        count = 0
        for set_number in score_sets(match, prediction):
            score = prediction.set_score_for(set_number)
            if not score or not validate_set_score(score):
                continue
            set_winner = prediction.set_winner_for(set_number)
            if set_winner and set_won_by_side_a(score) is not match.is_side_a(set_winner):
                continue
            count += 1
        return count

    def _tiebreak_count(self, match: MatchDetails, prediction: PredictionOptions) -> int:
        scored = score_sets(match, prediction)
        return sum(
            1
            for set_number in TIEBREAK_SETS
            if set_number in scored
            and prediction.tiebreak_score_for(set_number)
            and validate_tiebreak_score(
                prediction.tiebreak_score_for(set_number), prediction.set_score_for(set_number)
            )
        )

    def _super_tiebreak_count(self, match: MatchDetails, prediction: PredictionOptions) -> int:
        if not (match.format.is_amateur and is_three_set_result(prediction.match_result)):
            return 0
        score = prediction.super_tiebreak_score
        if score and validate_super_tiebreak_score(score, match.is_side_a(prediction.winner)):
            return 1
        return 0

    def max_match_result_bonus(self) -> float:
        return self._steps(1)

    def max_set_winners_bonus(self, match_result: str) -> float:
        parsed = parse_score(match_result)
        if parsed is None or is_straight_sets(match_result):
            return 0.0
        if is_three_set_result(match_result):
            return self._steps(1)
        return self._steps(sum(parsed))

    def max_set_scores_bonus(self, match_result: str) -> float:
        parsed = parse_score(match_result)
        if parsed is None:
            return 0.0
        if is_straight_sets(match_result):
            return self._steps(sum(parsed))
        if is_three_set_result(match_result):
            return self._steps(2)
        return 0.0

    def max_tiebreaks_bonus(self) -> float:
        return self.max_tiebreak_bonus

    def max_super_tiebreak_bonus(self, match_result: str, fmt: MatchFormat) -> float:
        if fmt.is_amateur and is_three_set_result(match_result):
            return self._steps(1)
        return 0.0

    def section_bonuses(self, match: MatchDetails, prediction: PredictionOptions) -> dict[str, float]:
        """Per-section "+N.Nx" badge values: current fill, else the section ceiling."""

        current = self.breakdown(match, prediction)
        result = prediction.match_result
        return {
            "match_result": display_bonus(current.match_result_bonus, self.max_match_result_bonus()),
            "set_winners": display_bonus(current.set_winners_bonus, self.max_set_winners_bonus(result)),
            "set_scores": display_bonus(current.set_scores_bonus, self.max_set_scores_bonus(result)),
            "tiebreaks": display_bonus(current.tiebreaks_bonus, self.max_tiebreaks_bonus()),
            "super_tiebreak": display_bonus(
                current.super_tiebreak_bonus, self.max_super_tiebreak_bonus(result, match.format)
            ),
        }
