"""Betting slip: the predictions a user is about to submit and how they are combined."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from tennislab.betting.ports import PowerUpError, PowerUpKind, PowerUpPort
from tennislab.parlays.engine import (
    MIN_PARLAY_LEGS,
    ParlayAggregator,
    bonus_descriptions,
    calculate_safe_bet_cost,
    individual_totals,
)
from tennislab.parlays.types import ParlayCalculation, SlipItem, ValidationResult
from tennislab.predictions.multiplier import potential_winnings
from tennislab.session.store import PredictionSessionStore

logger = logging.getLogger(__name__)

PowerUpListener = Callable[[dict[PowerUpKind, bool]], None]


@dataclass(frozen=True)
class SlipQuote:
    is_parlay: bool
    total_stake: float
    potential_winnings: float
    validation: ValidationResult
    parlay: ParlayCalculation | None = None
    bonus_descriptions: tuple[str, ...] = ()
    safe_bet_cost: int = 0
    safe_slip_armed: bool = False


@dataclass
class BettingSlip:
    """Mutable slip state; parlay mode needs two picks and each mode arms its own safe power-up."""

    store: PredictionSessionStore | None = None
    power_ups: PowerUpPort | None = None
    user_id: str | None = None
    user_streak: int = 0
    safe_bet_tokens: int = 0
    aggregator: ParlayAggregator = field(default_factory=ParlayAggregator)
    items: list[SlipItem] = field(default_factory=list)
    parlay_mode: bool = False
    is_safe_bet: bool = False
    using_safe_parlay: bool = False
    using_safe_single: bool = False
    available_power_ups: dict[PowerUpKind, bool] = field(
        default_factory=lambda: {kind: False for kind in PowerUpKind}
    )
    _listeners: list[PowerUpListener] = field(default_factory=list, init=False, repr=False)

    def add_item(self, item: SlipItem) -> None:
        """Add a pick, replacing any existing pick on the same match."""

        self.items = [existing for existing in self.items if existing.match_id != item.match_id]
        self.items.append(item)

    def remove_item(self, match_id: str) -> None:
        self.items = [item for item in self.items if item.match_id != match_id]
        if self.store is not None:
            self.store.delete(match_id)
        if len(self.items) < MIN_PARLAY_LEGS and self.parlay_mode:
            self.set_parlay_mode(False)
        if not self.items:
            self.using_safe_single = False

    def update_bet_amount(self, match_id: str, amount: float) -> SlipItem:
        for index, item in enumerate(self.items):
            if item.match_id == match_id:
                updated = replace(
                    item,
                    bet_amount=amount,
                    potential_winnings=potential_winnings(amount, item.multiplier),
                )
                self.items[index] = updated
                return updated
        raise KeyError(match_id)

    def clear(self) -> None:
        self.items = []
        self.parlay_mode = False
        self.is_safe_bet = False
        self.using_safe_parlay = False
        self.using_safe_single = False

    @property
    def can_enable_parlay(self) -> bool:
        return len(self.items) >= MIN_PARLAY_LEGS

    def set_parlay_mode(self, enabled: bool) -> bool:
        if enabled and not self.can_enable_parlay:
            logger.debug("Parlay mode needs at least %s picks", MIN_PARLAY_LEGS)
            enabled = False
        self.parlay_mode = enabled
        if enabled:
            self.using_safe_single = False
        else:
            self.using_safe_parlay = False
            self.is_safe_bet = False
        return self.parlay_mode

    def toggle_parlay_mode(self) -> bool:
        return self.set_parlay_mode(not self.parlay_mode)

    @property
    def safe_parlay_eligible(self) -> bool:
        return self.available_power_ups[PowerUpKind.SAFE_PARLAY] and self.parlay_mode and self.can_enable_parlay

    @property
    def safe_single_eligible(self) -> bool:
        return self.available_power_ups[PowerUpKind.SAFE_SINGLE] and not self.parlay_mode and bool(self.items)

    def toggle_safe_parlay(self) -> bool:
        self.using_safe_parlay = not self.using_safe_parlay and self.safe_parlay_eligible
        return self.using_safe_parlay

    def toggle_safe_single(self) -> bool:
        self.using_safe_single = not self.using_safe_single and self.safe_single_eligible
        return self.using_safe_single

    @property
    def safe_slip_armed(self) -> bool:
        return self.using_safe_parlay if self.parlay_mode else self.using_safe_single

    @property
    def safe_bet_cost(self) -> int:
        return calculate_safe_bet_cost(len(self.items)) if self.parlay_mode else 0

    def toggle_safe_bet(self) -> ValidationResult:
        if self.is_safe_bet:
            self.is_safe_bet = False
            return ValidationResult.ok()
        if not self.parlay_mode:
            return ValidationResult.fail("Safe bets are only available for parlays")
        cost = self.safe_bet_cost
        if self.safe_bet_tokens < cost:
            return ValidationResult.fail(
                f"You need {cost} safe bet tokens to use this feature. You have {self.safe_bet_tokens}."
            )
        self.is_safe_bet = True
        return ValidationResult.ok()

    def subscribe(self, listener: PowerUpListener) -> Callable[[], None]:
        """Register for power-up availability changes; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def refresh_power_ups(self) -> dict[PowerUpKind, bool]:
        if self.power_ups is None or not self.user_id:
            available = {kind: False for kind in PowerUpKind}
        else:
            available = {}
            for kind in PowerUpKind:
                try:
                    available[kind] = bool(self.power_ups.has_power_up(self.user_id, kind))
                except PowerUpError as exc:
                    logger.error("Power-up lookup failed for %s: %s", kind.value, exc)
                    available[kind] = False
        self.available_power_ups = available
        if not available[PowerUpKind.SAFE_PARLAY]:
            self.using_safe_parlay = False
        if not available[PowerUpKind.SAFE_SINGLE]:
            self.using_safe_single = False
        for listener in list(self._listeners):
            listener(dict(available))
        return dict(available)

    def quote(self, balance: float) -> SlipQuote:
        snapshot = tuple(self.items)
        if self.parlay_mode:
            calculation = self.aggregator.calculate(snapshot, self.user_streak)
            return SlipQuote(
                is_parlay=True,
                total_stake=sum(item.bet_amount for item in snapshot),
                potential_winnings=calculation.potential_winnings,
                validation=self.aggregator.validate(snapshot, balance),
                parlay=calculation,
                bonus_descriptions=tuple(bonus_descriptions(len(snapshot), self.user_streak)),
                safe_bet_cost=self.safe_bet_cost,
                safe_slip_armed=self.safe_slip_armed,
            )
        totals = individual_totals(snapshot)
        return SlipQuote(
            is_parlay=False,
            total_stake=totals.total_stake,
            potential_winnings=totals.total_winnings,
            validation=self.aggregator.validate_individual(snapshot, balance),
            safe_slip_armed=self.safe_slip_armed,
        )
