"""Submit a betting slip as one parlay or a series of single bets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tennislab.betting.ports import (
    BetGateway,
    BetPlacementError,
    BettingError,
    InsufficientBalanceError,
    ParlayBetRequest,
    ParlaySelection,
    PowerUpError,
    PowerUpKind,
    PowerUpPort,
    SingleBetRequest,
    WalletPort,
)
from tennislab.parlays.engine import format_parlay_odds
from tennislab.parlays.slip import BettingSlip, SlipQuote
from tennislab.parlays.types import SlipItem
from tennislab.predictions.codec import encode
from tennislab.predictions.multiplier import potential_winnings
from tennislab.session.store import PredictionSessionStore

logger = logging.getLogger(__name__)


@dataclass
class PlacementResult:
    mode: str
    total_stake: float
    bet_ids: list[str] = field(default_factory=list)
    match_ids: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def single_bet_description(item: SlipItem) -> str:
    return f"{item.match.label} - {item.multiplier:.2f}x multiplier"


class BetPlacementService:
    """Record bets, apply armed power-ups, then debit the wallet."""

    def __init__(
        self,
        gateway: BetGateway,
        wallet: WalletPort,
        power_ups: PowerUpPort | None = None,
        store: PredictionSessionStore | None = None,
    ) -> None:
        self.gateway = gateway
        self.wallet = wallet
        self.power_ups = power_ups
        self.store = store

    def submit(self, slip: BettingSlip, user_id: str | None = None) -> PlacementResult:
        """Place everything on the slip.

        When a later single bet fails, the ones already placed and debited are
        taken off the slip and listed in the error's ``placed_bet_ids``, so a
        retry only covers what is left.
        """

        if not slip.items:
            raise BetPlacementError("No predictions to submit")
        quote = slip.quote(self.wallet.balance)
        if not quote.validation.is_valid:
            raise BetPlacementError(quote.validation.error or "Invalid bet")

        mode = "parlay" if quote.is_parlay else "individual"
        user_id = user_id or slip.user_id
        result = PlacementResult(mode=mode, total_stake=0.0)
        try:
            if quote.is_parlay:
                self._submit_parlay(slip, quote, user_id, result)
            else:
                self._submit_individual(slip, user_id, result)
        except InsufficientBalanceError as exc:
            self._release(slip, result.match_ids)
            exc.placed_bet_ids = list(result.bet_ids)
            raise
        except BettingError as exc:
            self._release(slip, result.match_ids)
            logger.error("Error placing %s bet(s): %s", mode, exc)
            raise BetPlacementError(
                f"Error placing {mode} bet(s): {exc}", placed_bet_ids=result.bet_ids
            ) from exc

        if self.store is not None:
            for item in slip.items:
                self.store.delete(item.match_id)
        slip.clear()
        logger.info("Placed %s bet(s) %s for %.0f", mode, result.bet_ids, result.total_stake)
        return result

    def _release(self, slip: BettingSlip, match_ids: list[str]) -> None:
        if not match_ids:
            return
        logger.warning("Removing placed bets %s from the slip after a failure", match_ids)
        for match_id in match_ids:
            slip.remove_item(match_id)
            if self.store is not None:
                self.store.delete(match_id)

    def _submit_parlay(
        self, slip: BettingSlip, quote: SlipQuote, user_id: str | None, result: PlacementResult
    ) -> None:
        calculation = quote.parlay
        request = ParlayBetRequest(
            predictions=[
                ParlaySelection(
                    match_id=item.match_id,
                    prediction=encode(item.prediction),
                    description=item.match.label,
                )
                for item in slip.items
            ],
            total_stake=quote.total_stake,
            base_odds=calculation.base_odds,
            final_odds=calculation.final_odds,
            bonus_multiplier=calculation.bonus_multiplier,
            streak_booster=calculation.streak_booster,
            is_safe_bet=slip.is_safe_bet,
            safe_bet_cost=quote.safe_bet_cost if slip.is_safe_bet else 0,
        )
        bet_id = self.gateway.create_parlay_bet(request)

        if slip.using_safe_parlay and user_id:
            self._apply_power_up(user_id, PowerUpKind.SAFE_PARLAY, bet_id, result)

        self.wallet.place_bet(
            quote.total_stake,
            bet_id,
            f"Parlay bet - {len(slip.items)} predictions - "
            f"{format_parlay_odds(calculation.final_odds)}x odds",
        )
        result.bet_ids.append(bet_id)
        result.total_stake = quote.total_stake
        if slip.is_safe_bet:
            slip.safe_bet_tokens -= quote.safe_bet_cost

    def _submit_individual(self, slip: BettingSlip, user_id: str | None, result: PlacementResult) -> None:
        for item in list(slip.items):
            if item.bet_amount <= 0:
                continue
            description = single_bet_description(item)
            bet_id = self.gateway.create_bet(
                SingleBetRequest(
                    match_id=item.match_id,
                    bet_amount=item.bet_amount,
                    multiplier=item.multiplier,
                    potential_winnings=potential_winnings(item.bet_amount, item.multiplier),
                    prediction=encode(item.prediction),
                    description=description,
                )
            )
            # the safe single covers only the first bet placed
            if not result.bet_ids and slip.using_safe_single and user_id:
                self._apply_power_up(user_id, PowerUpKind.SAFE_SINGLE, bet_id, result)
            self.wallet.place_bet(item.bet_amount, item.match_id, description)
            result.bet_ids.append(bet_id)
            result.match_ids.append(item.match_id)
            result.total_stake += item.bet_amount

    def _apply_power_up(
        self, user_id: str, kind: PowerUpKind, bet_id: str, result: PlacementResult
    ) -> None:
        if self.power_ups is None:
            result.warnings.append(f"No power-up service configured; {kind.label} was not applied")
            return
        try:
            self.power_ups.apply_power_up(user_id, kind, bet_id)
        except PowerUpError as exc:
            logger.error("Failed to apply %s power-up to %s: %s", kind.value, bet_id, exc)
            result.warnings.append(f"Bet placed, but the {kind.label} power-up could not be applied")
