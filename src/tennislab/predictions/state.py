"""Dependent-field rules for building a single-match prediction.

A prediction grows from the match winner down to set-level detail. Every
write goes through :func:`try_mutation`, which validates the value against
tennis scoring rules and the fields already chosen, then applies the
automatic assignments the result implies (straight-sets winners, the
paired set winner in a 2-1 match, the super tiebreak winner). Which form
sections are open is never stored; :func:`visible_sections` derives it from
the current record each time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tennislab.config import get_settings
from tennislab.predictions.scores import (
    allowed_match_results,
    display_name,
    is_straight_sets,
    is_three_set_result,
    is_tiebreak_set,
    parse_score,
    set_won_by_side_a,
    validate_set_score,
    validate_super_tiebreak_score,
    validate_tiebreak_score,
)
from tennislab.predictions.types import (
    MAX_SETS,
    TIEBREAK_SETS,
    MatchDetails,
    MatchFormat,
    PredictionField,
    PredictionOptions,
    SectionId,
)
from tennislab.session.store import PredictionSessionStore

logger = logging.getLogger(__name__)

SET_LEVEL_FIELDS = tuple(
    [PredictionField.set_winner(n) for n in range(1, MAX_SETS + 1)]
    + [PredictionField.set_score(n) for n in range(1, MAX_SETS + 1)]
    + [PredictionField.tiebreak_score(n) for n in TIEBREAK_SETS]
    + [PredictionField.SUPER_TIEBREAK_SCORE, PredictionField.SUPER_TIEBREAK_WINNER]
)

SUPER_TIEBREAK_ERROR = (
    "Invalid score. Winner must have at least 10 points and win by 2 points (e.g., 10-8, 17-15)."
)


@dataclass(frozen=True)
class MutationResult:
    state: PredictionOptions
    accepted: bool = True
    error: str | None = None


@dataclass(frozen=True)
class SetWinnerChoice:
    set_number: int
    side_a_enabled: bool
    side_b_enabled: bool
    side_a_max_reached: bool = False
    side_b_max_reached: bool = False
    auto_assigned: bool = False


def sets_to_show(match_result: str, fmt: MatchFormat) -> int:
    """Number of regular sets a result implies; the amateur decider is a super tiebreak."""

    parsed = parse_score(match_result)
    if parsed is None:
        return 0
    if fmt.is_amateur and is_three_set_result(match_result):
        return 2
    return min(sum(parsed), MAX_SETS)


def set_winners_from_result(match_result: str, winner: str, match: MatchDetails) -> list[str]:
    parsed = parse_score(match_result)
    if parsed is None or not winner:
        return []
    side_a = match.is_side_a(winner)
    winner_sets, loser_sets = (parsed[0], parsed[1]) if side_a else (parsed[1], parsed[0])
    return [winner] * winner_sets + [match.opponent_of(winner)] * loser_sets


def first_sets_split(state: PredictionOptions) -> bool:
    """Sets 1 and 2 of a 2-1 result must go one to each side before they count."""

    return bool(state.set1_winner and state.set2_winner and state.set1_winner != state.set2_winner)


def score_sets(match: MatchDetails, state: PredictionOptions) -> tuple[int, ...]:
    """Sets whose exact score may currently be predicted."""

    result = state.match_result
    if not result or not state.winner:
        return ()
    if is_straight_sets(result):
        return tuple(range(1, sets_to_show(result, match.format) + 1))
    if is_three_set_result(result) and first_sets_split(state):
        return (1, 2)
    return ()


def visible_sections(match: MatchDetails, state: PredictionOptions) -> frozenset[SectionId]:
    sections = {SectionId.MATCH_WINNER}
    if not state.winner:
        return frozenset(sections)
    sections.add(SectionId.MATCH_RESULT)
    result = state.match_result
    if not result:
        return frozenset(sections)

    if not is_straight_sets(result):
        sections.add(SectionId.SET_WINNERS)
    scored = score_sets(match, state)
    if scored:
        sections.add(SectionId.SET_SCORES)
    for set_number, section in zip(TIEBREAK_SETS, (SectionId.SET1_TIEBREAK, SectionId.SET2_TIEBREAK)):
        if set_number in scored and is_tiebreak_set(state.set_score_for(set_number)):
            sections.add(section)
    if match.format.is_amateur and is_three_set_result(result):
        sections.add(SectionId.SUPER_TIEBREAK)
    return frozenset(sections)


def set_winner_choices(match: MatchDetails, state: PredictionOptions, set_number: int) -> SetWinnerChoice:
    """Which side may be picked as winner of ``set_number`` right now."""

    result = state.match_result
    parsed = parse_score(result)
    if parsed is None or not state.winner:
        return SetWinnerChoice(set_number, side_a_enabled=False, side_b_enabled=False)
    if is_straight_sets(result):
        return SetWinnerChoice(set_number, side_a_enabled=False, side_b_enabled=False, auto_assigned=True)
    if is_three_set_result(result):
        enabled = set_number in (1, 2)
        return SetWinnerChoice(set_number, side_a_enabled=enabled, side_b_enabled=enabled)
    if set_number > sets_to_show(result, match.format):
        return SetWinnerChoice(set_number, side_a_enabled=False, side_b_enabled=False)

    cap_a, cap_b = parsed
    others = [
        winner
        for index, winner in enumerate(state.set_winners(sets_to_show(result, match.format)), start=1)
        if index != set_number
    ]
    current = state.set_winner_for(set_number)
    a_max = others.count(match.player1.name) >= cap_a
    b_max = others.count(match.player2.name) >= cap_b
    return SetWinnerChoice(
        set_number,
        side_a_enabled=not a_max or current == match.player1.name,
        side_b_enabled=not b_max or current == match.player2.name,
        side_a_max_reached=a_max,
        side_b_max_reached=b_max,
    )


def _reject(state: PredictionOptions, field: PredictionField, message: str) -> MutationResult:
    logger.debug("Rejected %s write: %s", field.value, message)
    return MutationResult(state=state, accepted=False, error=message)


def _cleared_set_level() -> dict[PredictionField, str]:
    return {field: "" for field in SET_LEVEL_FIELDS}


def _mutate_winner(match, state, value) -> MutationResult:
    if value and match.side_of(value) is None:
        return _reject(state, PredictionField.WINNER, f"{value} is not playing in {match.label}")
    new_winner = "" if value == state.winner else value
    # every other field is relative to the winner
    return MutationResult(state=PredictionOptions(winner=new_winner))


def _mutate_match_result(match, state, value, reconcile) -> MutationResult:
    field = PredictionField.MATCH_RESULT
    if not state.winner:
        return _reject(state, field, "Select a match winner first")
    if value == state.match_result:
        value = ""
    allowed = allowed_match_results(match.format, match.is_side_a(state.winner))
    if value and value not in allowed:
        return _reject(
            state,
            field,
            f"{value} is not a possible {match.format.label} result for "
            f"{display_name(state.winner, match.is_doubles)}",
        )

    updates: dict[PredictionField, str] = {field: value}
    if reconcile and value != state.match_result:
        updates.update(_cleared_set_level())
    elif is_straight_sets(state.match_result) and not is_straight_sets(value):
        # set winners were filled in from the old result, not picked
        for set_number in range(1, MAX_SETS + 1):
            updates[PredictionField.set_winner(set_number)] = ""
    if is_straight_sets(value):
        for set_number in range(1, sets_to_show(value, match.format) + 1):
            updates[PredictionField.set_winner(set_number)] = state.winner
    if match.format.is_amateur and is_three_set_result(value):
        updates[PredictionField.SUPER_TIEBREAK_WINNER] = state.winner
    return MutationResult(state=state.with_values(updates))


def _mutate_set_winner(match, state, field, value) -> MutationResult:
    result = state.match_result
    set_number = field.set_number
    if not result:
        return _reject(state, field, "Select a match result first")
    if is_straight_sets(result):
        return _reject(state, field, "Set winners follow the match winner in straight sets")
    if value and match.side_of(value) is None:
        return _reject(state, field, f"{value} is not playing in {match.label}")
    if value == state.get(field):
        value = ""

    if is_three_set_result(result):
        if set_number not in (1, 2):
            return _reject(state, field, "Only sets 1 and 2 are picked before the decider")
        paired = PredictionField.set_winner(2 if set_number == 1 else 1)
        paired_value = match.opponent_of(value) if value else ""
        return MutationResult(state=state.with_values({field: value, paired: paired_value}))

    if set_number > sets_to_show(result, match.format):
        return _reject(state, field, f"Set {set_number} is not played in a {result} result")
    if value:
        choice = set_winner_choices(match, state, set_number)
        enabled = choice.side_a_enabled if match.is_side_a(value) else choice.side_b_enabled
        if not enabled:
            return _reject(
                state,
                field,
                f"{display_name(value, match.is_doubles)} already has the maximum sets for {result}",
            )
    return MutationResult(state=state.with_values({field: value}))


def _mutate_set_score(match, state, field, value) -> MutationResult:
    set_number = field.set_number
    if set_number not in score_sets(match, state):
        return _reject(state, field, f"Set {set_number} score is not available yet")
    updates: dict[PredictionField, str] = {field: value}
    if set_number in TIEBREAK_SETS and value != state.get(field):
        updates[PredictionField.tiebreak_score(set_number)] = ""
    if not value:
        return MutationResult(state=state.with_values(updates))
    if not validate_set_score(value):
        return _reject(state, field, f"{value} is not a valid set score")
    set_winner = state.set_winner_for(set_number)
    if set_winner and set_won_by_side_a(value) is not match.is_side_a(set_winner):
        return _reject(
            state,
            field,
            f"{value} does not match {display_name(set_winner, match.is_doubles)} winning set {set_number}",
        )
    return MutationResult(state=state.with_values(updates))


def _mutate_tiebreak_score(match, state, field, value) -> MutationResult:
    set_number = field.set_number
    section = SectionId.SET1_TIEBREAK if set_number == 1 else SectionId.SET2_TIEBREAK
    if section not in visible_sections(match, state):
        return _reject(state, field, f"Set {set_number} needs a 7-6 or 6-7 score first")
    if value and not validate_tiebreak_score(value, state.set_score_for(set_number)):
        return _reject(
            state, field, f"{value} is not a valid tiebreak for a {state.set_score_for(set_number)} set"
        )
    return MutationResult(state=state.with_values({field: value}))


def _mutate_super_tiebreak(match, state, field, value) -> MutationResult:
    if SectionId.SUPER_TIEBREAK not in visible_sections(match, state):
        return _reject(state, field, "A super tiebreak is only played in amateur 2-1 or 1-2 results")
    if field is PredictionField.SUPER_TIEBREAK_WINNER:
        if value != state.winner:
            return _reject(state, field, "The super tiebreak winner must match the match winner")
        return MutationResult(state=state.with_values({field: value}))
    if not validate_super_tiebreak_score(value, match.is_side_a(state.winner)):
        return _reject(state, field, SUPER_TIEBREAK_ERROR)
    return MutationResult(
        state=state.with_values({field: value, PredictionField.SUPER_TIEBREAK_WINNER: state.winner})
    )


def try_mutation(
    match: MatchDetails,
    state: PredictionOptions,
    field: PredictionField | str,
    value: str | None,
    *,
    reconcile_on_result_change: bool = False,
) -> MutationResult:
    """Validate and apply one field write, returning the new record or the reason it was refused."""

    field = PredictionField(field)
    value = (value or "").strip()

    if field is PredictionField.WINNER:
        return _mutate_winner(match, state, value)
    if field is PredictionField.MATCH_RESULT:
        return _mutate_match_result(match, state, value, reconcile_on_result_change)
    if field.value.endswith("_tiebreak_score") and field.set_number:
        return _mutate_tiebreak_score(match, state, field, value)
    if field.value.endswith("_winner") and field.set_number:
        return _mutate_set_winner(match, state, field, value)
    if field.value.endswith("_score") and field.set_number:
        return _mutate_set_score(match, state, field, value)
    return _mutate_super_tiebreak(match, state, field, value)


def apply_mutation(
    match: MatchDetails,
    state: PredictionOptions,
    field: PredictionField | str,
    value: str | None,
    *,
    reconcile_on_result_change: bool = False,
) -> PredictionOptions:
    """Pure form of :func:`try_mutation`; refused writes return ``state`` unchanged."""

    return try_mutation(
        match, state, field, value, reconcile_on_result_change=reconcile_on_result_change
    ).state


class PredictionStateMachine:
    """Owns one match's prediction for a UI session and mirrors it to a session store."""

    def __init__(
        self,
        match_id: str,
        match: MatchDetails,
        store: PredictionSessionStore | None = None,
        *,
        reconcile_on_result_change: bool | None = None,
    ) -> None:
        self.match_id = str(match_id)
        self.match = match
        self.store = store
        if reconcile_on_result_change is None:
            reconcile_on_result_change = get_settings().reconcile_on_result_change
        self.reconcile_on_result_change = reconcile_on_result_change
        self.state = (store.get(self.match_id) if store else None) or PredictionOptions()

    @property
    def visible_sections(self) -> frozenset[SectionId]:
        return visible_sections(self.match, self.state)

    def set_winner_choices(self, set_number: int) -> SetWinnerChoice:
        return set_winner_choices(self.match, self.state, set_number)

    def apply(self, field: PredictionField | str, value: str | None) -> MutationResult:
        result = try_mutation(
            self.match,
            self.state,
            field,
            value,
            reconcile_on_result_change=self.reconcile_on_result_change,
        )
        if result.accepted:
            self.state = result.state
            if self.store is not None:
                self.store.set(self.match_id, self.state)
        return result

    def clear_all(self) -> PredictionOptions:
        self.state = PredictionOptions()
        if self.store is not None:
            self.store.delete(self.match_id)
        return self.state
