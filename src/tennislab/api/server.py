"""FastAPI backend for TennisLab predictions."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Header, HTTPException, Response, status
from fastapi.middleware.cors import CORSMiddleware

from tennislab import __version__
from tennislab.api.schemas import (
    MutationRequest,
    MutationResponse,
    PredictionModel,
    PredictionQuoteRequest,
    PredictionQuoteResponse,
    SlipQuoteRequest,
    SlipQuoteResponse,
)
from tennislab.config import get_api_access_key, get_settings
from tennislab.db.database import init_db
from tennislab.parlays.slip import BettingSlip
from tennislab.parlays.types import SlipItem
from tennislab.predictions.codec import describe, encode
from tennislab.predictions.multiplier import MultiplierEngine, potential_winnings
from tennislab.predictions.state import try_mutation, visible_sections
from tennislab.session.store import PredictionSessionStore, SqlSessionStore

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:  # pragma: no cover - exercised when served
    init_db()
    yield


app = FastAPI(
    lifespan=lifespan,
    title="TennisLab Predictions API",
    version=__version__,
    description="Prediction form rules, multiplier pricing and betting-slip quotes.",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

engine = MultiplierEngine()


def get_store() -> PredictionSessionStore:
    return SqlSessionStore()


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    expected = get_api_access_key()
    if not x_api_key or x_api_key != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


StoreDep = Annotated[PredictionSessionStore, Depends(get_store)]
APIKeyDep = Annotated[None, Depends(require_api_key)]


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/version")
def version() -> dict[str, Any]:
    return {"name": "tennislab-predictions", "version": __version__}


@app.post("/predictions/mutate", response_model=MutationResponse)
def mutate_prediction(payload: MutationRequest) -> MutationResponse:
    match = payload.match.to_details()
    reconcile = payload.reconcile_on_result_change
    if reconcile is None:
        reconcile = settings.reconcile_on_result_change
    result = try_mutation(
        match,
        payload.prediction.to_options(),
        payload.field,
        payload.value,
        reconcile_on_result_change=reconcile,
    )
    return MutationResponse(
        prediction=PredictionModel.from_options(result.state),
        accepted=result.accepted,
        error=result.error,
        visible_sections=sorted(visible_sections(match, result.state), key=lambda s: s.value),
        multiplier=engine.current_multiplier(match, result.state),
    )


@app.post("/predictions/quote", response_model=PredictionQuoteResponse)
def quote_prediction(payload: PredictionQuoteRequest) -> PredictionQuoteResponse:
    match = payload.match.to_details()
    prediction = payload.prediction.to_options()
    if not prediction.winner:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Select a match winner first")
    if match.side_of(prediction.winner) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{prediction.winner} is not playing in {match.label}",
        )
    breakdown = engine.breakdown(match, prediction)
    return PredictionQuoteResponse(
        base_odds=breakdown.base_odds,
        total_bonus=breakdown.total_bonus,
        multiplier=breakdown.multiplier,
        potential_winnings=potential_winnings(payload.bet_amount, breakdown.multiplier),
        section_bonuses=engine.section_bonuses(match, prediction),
        summary=describe(prediction),
        structured=encode(prediction).to_payload(),
    )


@app.post("/slip/quote", response_model=SlipQuoteResponse)
def quote_slip(payload: SlipQuoteRequest) -> SlipQuoteResponse:
    slip = BettingSlip(user_streak=payload.user_streak, safe_bet_tokens=payload.safe_bet_tokens)
    for entry in payload.items:
        match = entry.match.to_details()
        prediction = entry.prediction.to_options()
        multiplier = engine.current_multiplier(match, prediction)
        slip.add_item(
            SlipItem(
                match_id=entry.match_id,
                match=match,
                prediction=prediction,
                bet_amount=entry.bet_amount,
                multiplier=multiplier,
                potential_winnings=potential_winnings(entry.bet_amount, multiplier),
            )
        )
    if payload.parlay_mode and not slip.set_parlay_mode(True):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Parlay requires at least 2 predictions",
        )
    if payload.is_safe_bet:
        armed = slip.toggle_safe_bet()
        if not armed.is_valid:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=armed.error)

    quote = slip.quote(payload.balance)
    response = SlipQuoteResponse(
        is_parlay=quote.is_parlay,
        total_stake=quote.total_stake,
        potential_winnings=quote.potential_winnings,
        is_valid=quote.validation.is_valid,
        error=quote.validation.error,
        bonus_descriptions=list(quote.bonus_descriptions),
        safe_bet_cost=quote.safe_bet_cost,
        item_multipliers={item.match_id: item.multiplier for item in slip.items},
    )
    if quote.parlay is not None:
        response.base_odds = quote.parlay.base_odds
        response.bonus_multiplier = quote.parlay.bonus_multiplier
        response.streak_booster = quote.parlay.streak_booster
        response.final_odds = quote.parlay.final_odds
    return response


@app.get("/drafts/{match_id}", response_model=PredictionModel)
def get_draft(match_id: str, _: APIKeyDep, store: StoreDep) -> PredictionModel:
    draft = store.get(match_id)
    if draft is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No draft for this match")
    return PredictionModel.from_options(draft)


@app.put("/drafts/{match_id}", response_model=PredictionModel)
def put_draft(match_id: str, payload: PredictionModel, _: APIKeyDep, store: StoreDep) -> PredictionModel:
    store.set(match_id, payload.to_options())
    return payload


@app.delete("/drafts/{match_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_draft(match_id: str, _: APIKeyDep, store: StoreDep) -> Response:
    store.delete(match_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
