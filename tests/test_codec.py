"""Structured prediction payload and summary tests."""

from __future__ import annotations

import logging

from tennislab.predictions import codec
from tennislab.predictions.types import PredictionOptions


def _detailed() -> PredictionOptions:
    return PredictionOptions(
        winner="Rafael Nadal",
        match_result="3-1",
        set1_winner="Rafael Nadal",
        set1_score="7-6",
        set1_tiebreak_score="7-4",
    )


def test_classify_prefers_the_most_detailed_level() -> None:
    assert codec.classify(PredictionOptions(winner="Rafael Nadal")) == "winner"
    assert codec.classify(PredictionOptions(winner="Rafael Nadal", match_result="3-1")) == "match_result"
    assert (
        codec.classify(PredictionOptions(winner="Rafael Nadal", match_result="3-1", set2_winner="Roger Federer"))
        == "set_winner"
    )
    assert codec.classify(_detailed()) == "set_score"


def test_encode_uses_camel_case_keys_and_nulls() -> None:
    payload = codec.encode(_detailed()).to_payload()
    assert payload["type"] == "set_score"
    assert payload["matchResult"] == "3-1"
    assert payload["set1TieBreakScore"] == "7-4"
    assert payload["set2Winner"] is None
    assert payload["superTieBreakScore"] is None


def test_encode_accepts_wire_dicts() -> None:
    structured = codec.encode({"winner": "Roger Federer", "matchResult": "2-0", "unknown": "x"})
    assert structured.type == "match_result"
    assert structured.match_result == "2-0"


def test_encode_empty_prediction_logs_warning(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        structured = codec.encode(None)
    assert structured.type == "winner"
    assert structured.winner is None
    assert "empty prediction" in caplog.text


def test_describe_joins_parts_in_order() -> None:
    summary = codec.describe(_detailed())
    assert summary == "Winner: Nadal • Result: 3-1 • Set 1 winner: Nadal • Set 1: 7-6 • TB1: 7-4"


def test_describe_skips_set_winners_for_straight_sets() -> None:
    prediction = PredictionOptions(
        winner="Roger Federer",
        match_result="0-2",
        set1_winner="Roger Federer",
        set2_winner="Roger Federer",
    )
    assert codec.describe(prediction) == "Winner: Federer • Result: 0-2"


def test_describe_super_tiebreak_and_placeholder() -> None:
    prediction = PredictionOptions(
        winner="Rafael Nadal",
        match_result="2-1",
        super_tiebreak_winner="Rafael Nadal",
        super_tiebreak_score="10-8",
    )
    assert codec.describe(prediction).endswith("Super TB winner: Nadal • Super TB: 10-8")
    assert codec.describe(None) == "No prediction"
    assert codec.describe(PredictionOptions(), placeholder="-") == "-"
