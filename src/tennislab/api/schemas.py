"""Pydantic schemas for the TennisLab API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from tennislab.predictions.types import (
    MatchDetails,
    MatchFormat,
    PlayerSide,
    PredictionField,
    PredictionOptions,
    SectionId,
)


class PlayerModel(BaseModel):
    name: str
    base_odds: float = Field(gt=0)
    ntrp_rating: float | None = None
    team_name: str | None = None


class MatchModel(BaseModel):
    player1: PlayerModel
    player2: PlayerModel
    round: str = ""
    surface: str = ""
    format: MatchFormat = MatchFormat.BEST_OF_3
    is_doubles: bool = False
    is_locked: bool = False

    def to_details(self) -> MatchDetails:
        return MatchDetails(
            player1=PlayerSide(**self.player1.model_dump()),
            player2=PlayerSide(**self.player2.model_dump()),
            round=self.round,
            surface=self.surface,
            format=self.format,
            is_doubles=self.is_doubles,
            is_locked=self.is_locked,
        )


class PredictionModel(BaseModel):
    winner: str = ""
    match_result: str = ""
    set1_winner: str = ""
    set2_winner: str = ""
    set3_winner: str = ""
    set4_winner: str = ""
    set5_winner: str = ""
    set1_score: str = ""
    set2_score: str = ""
    set3_score: str = ""
    set4_score: str = ""
    set5_score: str = ""
    set1_tiebreak_score: str = ""
    set2_tiebreak_score: str = ""
    super_tiebreak_score: str = ""
    super_tiebreak_winner: str = ""

    def to_options(self) -> PredictionOptions:
        return PredictionOptions(**self.model_dump())

    @classmethod
    def from_options(cls, options: PredictionOptions) -> PredictionModel:
        return cls(**options.to_dict())


class MutationRequest(BaseModel):
    match: MatchModel
    prediction: PredictionModel = Field(default_factory=PredictionModel)
    field: PredictionField
    value: str = ""
    reconcile_on_result_change: bool | None = None


class MutationResponse(BaseModel):
    prediction: PredictionModel
    accepted: bool
    error: str | None = None
    visible_sections: list[SectionId]
    multiplier: float


class PredictionQuoteRequest(BaseModel):
    match: MatchModel
    prediction: PredictionModel
    bet_amount: float = Field(default=0.0, ge=0)


class PredictionQuoteResponse(BaseModel):
    base_odds: float
    total_bonus: float
    multiplier: float
    potential_winnings: float
    section_bonuses: dict[str, float]
    summary: str
    structured: dict[str, str | None]


class SlipItemModel(BaseModel):
    match_id: str
    match: MatchModel
    prediction: PredictionModel
    bet_amount: float = Field(default=0.0, ge=0)


class SlipQuoteRequest(BaseModel):
    items: list[SlipItemModel]
    balance: float = Field(ge=0)
    parlay_mode: bool = False
    user_streak: int = Field(default=0, ge=0)
    is_safe_bet: bool = False
    safe_bet_tokens: int = Field(default=0, ge=0)


class SlipQuoteResponse(BaseModel):
    is_parlay: bool
    total_stake: float
    potential_winnings: float
    is_valid: bool
    error: str | None = None
    base_odds: float | None = None
    bonus_multiplier: float | None = None
    streak_booster: float | None = None
    final_odds: float | None = None
    bonus_descriptions: list[str] = Field(default_factory=list)
    safe_bet_cost: int = 0
    item_multipliers: dict[str, float] = Field(default_factory=dict)
