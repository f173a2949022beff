"""Dataclasses for betting-slip and parlay modeling."""

from __future__ import annotations

from dataclasses import dataclass

from tennislab.predictions.types import MatchDetails, PredictionOptions


@dataclass
class SlipItem:
    match_id: str
    match: MatchDetails
    prediction: PredictionOptions
    bet_amount: float = 0.0
    multiplier: float = 0.0
    potential_winnings: float = 0.0

    @property
    def predicted_odds(self) -> float:
        """Base odds of the predicted side, or the match average before a winner is picked."""

        odds = self.match.odds_for(self.prediction.winner)
        if odds > 0:
            return odds
        return (self.match.player1.base_odds + self.match.player2.base_odds) / 2


@dataclass(frozen=True)
class ParlayLeg:
    match_id: str
    odds: float
    stake: float = 0.0
    is_locked: bool = False


@dataclass(frozen=True)
class ParlayCalculation:
    base_odds: float
    bonus_multiplier: float
    streak_booster: float
    final_odds: float
    potential_winnings: float
    bonus_percentage: float = 0.0
    is_eligible_for_bonus: bool = False


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(is_valid=True)

    @classmethod
    def fail(cls, error: str) -> ValidationResult:
        return cls(is_valid=False, error=error)


@dataclass(frozen=True)
class IndividualTotals:
    total_stake: float
    total_winnings: float
