"""Parlay odds, boosters and slip validation."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from tennislab.config import get_settings
from tennislab.parlays.types import (
    IndividualTotals,
    ParlayCalculation,
    ParlayLeg,
    SlipItem,
    ValidationResult,
)

settings = get_settings()

MIN_PARLAY_LEGS = 2


def combine_odds(odds: Iterable[float]) -> float:
    decimal = 1.0
    for value in odds:
        decimal *= value
    return decimal


def calculate_streak_booster(
    user_streak: int,
    threshold: int = settings.streak_booster_threshold,
    percentage: float = settings.streak_booster_percentage,
    maximum: float = settings.max_streak_booster,
) -> float:
    if user_streak < threshold:
        return 1.0
    boost = min((user_streak - threshold + 1) * percentage, maximum)
    return round(1 + boost, 4)


def calculate_parlay_odds(
    legs: Sequence[ParlayLeg],
    stake: float,
    user_streak: int = 0,
    *,
    combine: Callable[[Iterable[float]], float] = combine_odds,
    bonus_threshold: int = settings.parlay_bonus_threshold,
    bonus_percentage: float = settings.parlay_bonus_percentage,
    streak_threshold: int = settings.streak_booster_threshold,
    streak_percentage: float = settings.streak_booster_percentage,
    max_streak_boost: float = settings.max_streak_booster,
) -> ParlayCalculation:
    """Combine per-leg odds and apply the leg-count bonus and streak booster."""

    if not legs:
        return ParlayCalculation(
            base_odds=1.0,
            bonus_multiplier=1.0,
            streak_booster=1.0,
            final_odds=1.0,
            potential_winnings=0.0,
        )

    base_odds = combine(leg.odds for leg in legs)
    eligible = len(legs) >= bonus_threshold
    bonus_multiplier = 1 + bonus_percentage if eligible else 1.0
    streak_booster = calculate_streak_booster(
        user_streak, streak_threshold, streak_percentage, max_streak_boost
    )
    final_odds = base_odds * bonus_multiplier * streak_booster
    return ParlayCalculation(
        base_odds=base_odds,
        bonus_multiplier=bonus_multiplier,
        streak_booster=streak_booster,
        final_odds=final_odds,
        potential_winnings=stake * final_odds,
        bonus_percentage=bonus_percentage * 100 if eligible else 0.0,
        is_eligible_for_bonus=eligible,
    )


def calculate_safe_bet_cost(prediction_count: int, cost: int = settings.safe_bet_cost) -> int:
    return cost * prediction_count


def bonus_descriptions(
    leg_count: int,
    user_streak: int,
    *,
    bonus_threshold: int = settings.parlay_bonus_threshold,
    bonus_percentage: float = settings.parlay_bonus_percentage,
    streak_threshold: int = settings.streak_booster_threshold,
    streak_percentage: float = settings.streak_booster_percentage,
    max_streak_boost: float = settings.max_streak_booster,
) -> list[str]:
    descriptions: list[str] = []
    if leg_count >= bonus_threshold:
        descriptions.append(f"{bonus_percentage * 100:g}% Bonus for {leg_count}+ picks")
    if user_streak >= streak_threshold:
        booster = calculate_streak_booster(
            user_streak, streak_threshold, streak_percentage, max_streak_boost
        )
        boost = booster - 1
        descriptions.append(f"+{boost * 100:.1f}% Streak Booster ({user_streak} wins)")
    return descriptions


def format_parlay_odds(odds: float) -> str:
    return f"{odds:.2f}"


def format_winnings(winnings: float) -> str:
    return f"{winnings:.0f}"


def legs_from_items(items: Iterable[SlipItem]) -> list[ParlayLeg]:
    return [
        ParlayLeg(
            match_id=item.match_id,
            odds=item.predicted_odds,
            stake=item.bet_amount,
            is_locked=item.match.is_locked,
        )
        for item in items
    ]


def _stake_limit_error(legs: Sequence[ParlayLeg], min_bet: float, max_bet: float) -> str | None:
    if any(leg.stake < min_bet for leg in legs):
        return f"Minimum bet amount is {min_bet:g}"
    if any(leg.stake > max_bet for leg in legs):
        return f"Maximum bet amount is {max_bet:g}"
    return None


def validate_parlay_bet(
    legs: Sequence[ParlayLeg],
    stake: float,
    balance: float,
    min_bet: float = settings.min_bet,
    max_bet: float = settings.max_bet,
) -> ValidationResult:
    """Check a parlay can be placed; the error text is shown to the user as-is."""

    if len(legs) < MIN_PARLAY_LEGS:
        return ValidationResult.fail("Parlay requires at least 2 predictions")
    if stake <= 0:
        return ValidationResult.fail("Stake must be greater than 0")
    limit_error = _stake_limit_error(legs, min_bet, max_bet)
    if limit_error:
        return ValidationResult.fail(limit_error)
    if stake > balance:
        return ValidationResult.fail("Insufficient balance")
    if any(leg.is_locked for leg in legs):
        return ValidationResult.fail("Some matches are already locked")
    return ValidationResult.ok()


def validate_individual_bets(
    legs: Sequence[ParlayLeg],
    balance: float,
    min_bet: float = settings.min_bet,
    max_bet: float = settings.max_bet,
) -> ValidationResult:
    if not legs:
        return ValidationResult.fail("Add at least one prediction")
    limit_error = _stake_limit_error(legs, min_bet, max_bet)
    if limit_error:
        return ValidationResult.fail(limit_error)
    total_stake = sum(leg.stake for leg in legs)
    if total_stake <= 0:
        return ValidationResult.fail("Stake must be greater than 0")
    if total_stake > balance:
        return ValidationResult.fail("Insufficient balance")
    if any(leg.is_locked for leg in legs):
        return ValidationResult.fail("Some matches are already locked")
    return ValidationResult.ok()


def individual_totals(items: Iterable[SlipItem]) -> IndividualTotals:
    total_stake = 0.0
    total_winnings = 0.0
    for item in items:
        total_stake += item.bet_amount
        total_winnings += item.bet_amount * item.multiplier
    return IndividualTotals(total_stake=total_stake, total_winnings=total_winnings)


class ParlayAggregator:
    """Price and validate a read-only snapshot of slip items as one parlay."""

    def __init__(
        self,
        combine: Callable[[Iterable[float]], float] = combine_odds,
        min_bet: float | None = None,
        max_bet: float | None = None,
    ) -> None:
        self.combine = combine
        self.min_bet = settings.min_bet if min_bet is None else min_bet
        self.max_bet = settings.max_bet if max_bet is None else max_bet

    def calculate(self, items: Sequence[SlipItem], user_streak: int = 0) -> ParlayCalculation:
        legs = legs_from_items(items)
        stake = sum(leg.stake for leg in legs)
        return calculate_parlay_odds(legs, stake, user_streak, combine=self.combine)

    def validate(self, items: Sequence[SlipItem], balance: float) -> ValidationResult:
        legs = legs_from_items(items)
        stake = sum(leg.stake for leg in legs)
        return validate_parlay_bet(legs, stake, balance, self.min_bet, self.max_bet)

    def validate_individual(self, items: Sequence[SlipItem], balance: float) -> ValidationResult:
        return validate_individual_bets(legs_from_items(items), balance, self.min_bet, self.max_bet)
