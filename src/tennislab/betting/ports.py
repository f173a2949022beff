"""Contracts for the wallet, bet store and power-up services used at submission."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from tennislab.predictions.codec import StructuredPrediction


class BettingError(Exception):
    """Base error for bet submission.

    ``placed_bet_ids`` lists bets that went through before the failure and
    must not be submitted again.
    """

    def __init__(self, message: str = "", placed_bet_ids: list[str] | None = None) -> None:
        super().__init__(message)
        self.placed_bet_ids = list(placed_bet_ids or [])


class InsufficientBalanceError(BettingError):
    """The wallet cannot cover the stake."""


class BetPlacementError(BettingError):
    """A bet could not be recorded."""


class PowerUpError(BettingError):
    """A power-up lookup or application failed."""


class PowerUpKind(str, Enum):
    SAFE_PARLAY = "safeParlay"
    SAFE_SINGLE = "safeSingle"

    @property
    def label(self) -> str:
        return "safe parlay" if self is PowerUpKind.SAFE_PARLAY else "safe single"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class SingleBetRequest(_CamelModel):
    match_id: str
    bet_amount: float
    multiplier: float
    potential_winnings: float
    prediction: StructuredPrediction
    description: str


class ParlaySelection(_CamelModel):
    match_id: str
    prediction: StructuredPrediction
    description: str


class ParlayBetRequest(_CamelModel):
    predictions: list[ParlaySelection]
    total_stake: float
    base_odds: float
    final_odds: float
    bonus_multiplier: float
    streak_booster: float
    is_safe_bet: bool = False
    safe_bet_cost: int = 0


class WalletPort(Protocol):
    @property
    def balance(self) -> float: ...

    def place_bet(self, amount: float, match_ref: str, description: str) -> None: ...


class BetGateway(Protocol):
    def create_bet(self, request: SingleBetRequest) -> str: ...

    def create_parlay_bet(self, request: ParlayBetRequest) -> str: ...


class PowerUpPort(Protocol):
    def has_power_up(self, user_id: str, kind: PowerUpKind) -> bool: ...

    def apply_power_up(self, user_id: str, kind: PowerUpKind, target_id: str) -> None: ...
