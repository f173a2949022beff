"""Structured payloads and readable summaries for match predictions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from tennislab.predictions.scores import is_straight_sets, last_name
from tennislab.predictions.types import MAX_SETS, TIEBREAK_SETS, PredictionField, PredictionOptions

logger = logging.getLogger(__name__)

PredictionType = Literal["set_score", "set_winner", "match_result", "winner"]

SUMMARY_SEPARATOR = " • "
EMPTY_SUMMARY = "No prediction"


def _wire_alias(name: str) -> str:
    try:
        return PredictionField(name).wire_name
    except ValueError:
        return name


class StructuredPrediction(BaseModel):
    """Payload handed to automated bet resolution; empty fields are ``None``."""

    model_config = ConfigDict(alias_generator=_wire_alias, populate_by_name=True)

    type: PredictionType = "winner"
    winner: str | None = None
    match_result: str | None = None
    set1_winner: str | None = None
    set2_winner: str | None = None
    set3_winner: str | None = None
    set4_winner: str | None = None
    set5_winner: str | None = None
    set1_score: str | None = None
    set2_score: str | None = None
    set3_score: str | None = None
    set4_score: str | None = None
    set5_score: str | None = None
    set1_tiebreak_score: str | None = None
    set2_tiebreak_score: str | None = None
    super_tiebreak_score: str | None = None
    super_tiebreak_winner: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def _coerce(prediction: PredictionOptions | Mapping[str, Any] | None) -> PredictionOptions | None:
    if prediction is None or isinstance(prediction, PredictionOptions):
        return prediction
    return PredictionOptions.from_dict(prediction)


def classify(prediction: PredictionOptions) -> PredictionType:
    if prediction.match_result and any(prediction.set_scores()):
        return "set_score"
    if prediction.match_result and any(prediction.set_winners()):
        return "set_winner"
    if prediction.match_result:
        return "match_result"
    return "winner"


def encode(prediction: PredictionOptions | Mapping[str, Any] | None) -> StructuredPrediction:
    options = _coerce(prediction)
    if options is None or options.is_empty():
        logger.warning("encode called with an empty prediction; returning a bare winner payload")
        return StructuredPrediction()
    values = {field.value: options.get(field) or None for field in PredictionField}
    return StructuredPrediction(type=classify(options), **values)


def describe(
    prediction: PredictionOptions | Mapping[str, Any] | None,
    placeholder: str = EMPTY_SUMMARY,
) -> str:
    """One-line summary such as ``"Winner: Nadal • Result: 3-1 • Set 1: 6-4"``."""

    options = _coerce(prediction)
    if options is None:
        return placeholder

    parts: list[str] = []
    if options.winner:
        parts.append(f"Winner: {last_name(options.winner)}")
    if options.match_result:
        parts.append(f"Result: {options.match_result}")
        if not is_straight_sets(options.match_result):
            for set_number in range(1, MAX_SETS + 1):
                set_winner = options.set_winner_for(set_number)
                if set_winner:
                    parts.append(f"Set {set_number} winner: {last_name(set_winner)}")
    for set_number in range(1, MAX_SETS + 1):
        score = options.set_score_for(set_number)
        if score:
            parts.append(f"Set {set_number}: {score}")
    for set_number in TIEBREAK_SETS:
        tiebreak = options.tiebreak_score_for(set_number)
        if tiebreak:
            parts.append(f"TB{set_number}: {tiebreak}")
    if options.super_tiebreak_winner:
        parts.append(f"Super TB winner: {last_name(options.super_tiebreak_winner)}")
    if options.super_tiebreak_score:
        parts.append(f"Super TB: {options.super_tiebreak_score}")

    return SUMMARY_SEPARATOR.join(parts) if parts else placeholder
