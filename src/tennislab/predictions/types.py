"""Dataclasses and identifiers for single-match tennis predictions."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any, Mapping

MAX_SETS = 5
TIEBREAK_SETS = (1, 2)


class MatchFormat(str, Enum):
    BEST_OF_3 = "best-of-3"
    BEST_OF_3_SUPER_TIEBREAK = "best-of-3-super-tiebreak"
    BEST_OF_5 = "best-of-5"

    @property
    def is_best_of_5(self) -> bool:
        return self is MatchFormat.BEST_OF_5

    @property
    def is_amateur(self) -> bool:
        """Amateur matches replace the deciding set with a super tiebreak."""

        return self is MatchFormat.BEST_OF_3_SUPER_TIEBREAK

    @property
    def sets_to_win(self) -> int:
        return 3 if self.is_best_of_5 else 2

    @property
    def label(self) -> str:
        return {
            MatchFormat.BEST_OF_3: "Best of 3",
            MatchFormat.BEST_OF_3_SUPER_TIEBREAK: "Best of 3 (Super TB)",
            MatchFormat.BEST_OF_5: "Best of 5",
        }[self]


class PredictionField(str, Enum):
    WINNER = "winner"
    MATCH_RESULT = "match_result"
    SET1_WINNER = "set1_winner"
    SET2_WINNER = "set2_winner"
    SET3_WINNER = "set3_winner"
    SET4_WINNER = "set4_winner"
    SET5_WINNER = "set5_winner"
    SET1_SCORE = "set1_score"
    SET2_SCORE = "set2_score"
    SET3_SCORE = "set3_score"
    SET4_SCORE = "set4_score"
    SET5_SCORE = "set5_score"
    SET1_TIEBREAK_SCORE = "set1_tiebreak_score"
    SET2_TIEBREAK_SCORE = "set2_tiebreak_score"
    SUPER_TIEBREAK_SCORE = "super_tiebreak_score"
    SUPER_TIEBREAK_WINNER = "super_tiebreak_winner"

    @classmethod
    def set_winner(cls, set_number: int) -> PredictionField:
        return cls(f"set{set_number}_winner")

    @classmethod
    def set_score(cls, set_number: int) -> PredictionField:
        return cls(f"set{set_number}_score")

    @classmethod
    def tiebreak_score(cls, set_number: int) -> PredictionField:
        return cls(f"set{set_number}_tiebreak_score")

    @property
    def set_number(self) -> int | None:
        """Set index for per-set fields, ``None`` for match-level fields."""

        if self.value.startswith("set"):
            return int(self.value[3])
        return None

    @property
    def wire_name(self) -> str:
        """camelCase key used by the bet-resolution payload and session drafts."""

        head, *rest = self.value.split("_")
        camel = head + "".join(part.title() for part in rest)
        return camel.replace("Tiebreak", "TieBreak")


WIRE_TO_FIELD: dict[str, PredictionField] = {field.wire_name: field for field in PredictionField}


class SectionId(str, Enum):
    """Form sections that unlock as the prediction gains detail."""

    MATCH_WINNER = "match_winner"
    MATCH_RESULT = "match_result"
    SET_WINNERS = "set_winners"
    SET_SCORES = "set_scores"
    SET1_TIEBREAK = "set1_tiebreak"
    SET2_TIEBREAK = "set2_tiebreak"
    SUPER_TIEBREAK = "super_tiebreak"


@dataclass(frozen=True)
class PlayerSide:
    name: str
    base_odds: float
    ntrp_rating: float | None = None
    team_name: str | None = None


@dataclass(frozen=True)
class MatchDetails:
    player1: PlayerSide
    player2: PlayerSide
    round: str = ""
    surface: str = ""
    format: MatchFormat = MatchFormat.BEST_OF_3
    is_doubles: bool = False
    is_locked: bool = False

    @property
    def label(self) -> str:
        return f"{self.player1.name} vs {self.player2.name}"

    def is_side_a(self, name: str) -> bool:
        return bool(name) and name == self.player1.name

    def side_of(self, name: str) -> PlayerSide | None:
        if name == self.player1.name:
            return self.player1
        if name == self.player2.name:
            return self.player2
        return None

    def opponent_of(self, name: str) -> str:
        return self.player2.name if name == self.player1.name else self.player1.name

    def odds_for(self, name: str) -> float:
        side = self.side_of(name)
        return side.base_odds if side else 0.0


@dataclass
class PredictionOptions:
    """One match's in-progress prediction; empty string marks an unset field."""

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

    def get(self, field: PredictionField | str) -> str:
        return getattr(self, PredictionField(field).value)

    def set_winner_for(self, set_number: int) -> str:
        return self.get(PredictionField.set_winner(set_number))

    def set_score_for(self, set_number: int) -> str:
        return self.get(PredictionField.set_score(set_number))

    def tiebreak_score_for(self, set_number: int) -> str:
        return self.get(PredictionField.tiebreak_score(set_number))

    def set_winners(self, count: int = MAX_SETS) -> list[str]:
        return [self.set_winner_for(n) for n in range(1, count + 1)]

    def set_scores(self, count: int = MAX_SETS) -> list[str]:
        return [self.set_score_for(n) for n in range(1, count + 1)]

    def with_values(self, values: Mapping[PredictionField, str]) -> PredictionOptions:
        return replace(self, **{PredictionField(key).value: value for key, value in values.items()})

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    def to_wire(self) -> dict[str, str]:
        return {field.wire_name: self.get(field) for field in PredictionField}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> PredictionOptions:
        """Build from snake_case or camelCase keys; unknown keys are ignored."""

        if not data:
            return cls()
        values: dict[str, str] = {}
        for key, value in data.items():
            field = WIRE_TO_FIELD.get(key)
            if field is None:
                try:
                    field = PredictionField(key)
                except ValueError:
                    continue
            values[field.value] = str(value) if value is not None else ""
        return cls(**values)
