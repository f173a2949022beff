"""Betting slip tests."""

from __future__ import annotations

import pytest

from tennislab.betting.ports import PowerUpError, PowerUpKind
from tennislab.parlays.slip import BettingSlip
from tennislab.parlays.types import SlipItem
from tennislab.predictions.types import MatchDetails, PlayerSide, PredictionOptions
from tennislab.session.store import InMemorySessionStore


class FakePowerUps:
    def __init__(self, owned: set[PowerUpKind] | None = None, fail: bool = False) -> None:
        self.owned = owned or set()
        self.fail = fail
        self.lookups: list[tuple[str, PowerUpKind]] = []

    def has_power_up(self, user_id: str, kind: PowerUpKind) -> bool:
        self.lookups.append((user_id, kind))
        if self.fail:
            raise PowerUpError("service down")
        return kind in self.owned

    def apply_power_up(self, user_id: str, kind: PowerUpKind, target_id: str) -> None:
        raise AssertionError("not expected")


def _item(idx: int, bet_amount: float = 20.0, multiplier: float = 2.0) -> SlipItem:
    match = MatchDetails(
        player1=PlayerSide(name=f"Player A{idx}", base_odds=1.5),
        player2=PlayerSide(name=f"Player B{idx}", base_odds=2.0),
    )
    return SlipItem(
        match_id=f"m{idx}",
        match=match,
        prediction=PredictionOptions(winner=f"Player B{idx}"),
        bet_amount=bet_amount,
        multiplier=multiplier,
    )


def _slip(*items: SlipItem, **kwargs) -> BettingSlip:
    slip = BettingSlip(**kwargs)
    for item in items:
        slip.add_item(item)
    return slip


def test_parlay_mode_needs_two_items() -> None:
    slip = _slip(_item(1))
    assert slip.set_parlay_mode(True) is False
    slip.add_item(_item(2))
    assert slip.toggle_parlay_mode() is True


def test_removing_below_two_items_leaves_parlay_mode_and_purges_draft() -> None:
    store = InMemorySessionStore(namespace="slip")
    store.set("m2", PredictionOptions(winner="Player B2"))
    slip = _slip(_item(1), _item(2), store=store)
    slip.set_parlay_mode(True)
    slip.remove_item("m2")
    assert not slip.parlay_mode
    assert store.get("m2") is None
    assert [item.match_id for item in slip.items] == ["m1"]


def test_adding_same_match_replaces_pick() -> None:
    slip = _slip(_item(1, bet_amount=10), _item(1, bet_amount=40))
    assert len(slip.items) == 1
    assert slip.items[0].bet_amount == 40


def test_update_bet_amount_recomputes_winnings() -> None:
    slip = _slip(_item(1, multiplier=1.25))
    updated = slip.update_bet_amount("m1", 10)
    assert updated.potential_winnings == 13.0
    with pytest.raises(KeyError):
        slip.update_bet_amount("missing", 10)


def test_safe_power_ups_are_exclusive_by_mode() -> None:
    power_ups = FakePowerUps({PowerUpKind.SAFE_PARLAY, PowerUpKind.SAFE_SINGLE})
    slip = _slip(_item(1), _item(2), power_ups=power_ups, user_id="u1")
    slip.refresh_power_ups()

    assert slip.toggle_safe_single() is True
    slip.set_parlay_mode(True)
    assert not slip.using_safe_single
    assert slip.toggle_safe_parlay() is True
    assert slip.toggle_safe_single() is False
    assert slip.safe_slip_armed

    slip.set_parlay_mode(False)
    assert not slip.using_safe_parlay
    assert not slip.safe_slip_armed


def test_power_up_not_owned_cannot_be_armed() -> None:
    slip = _slip(_item(1), power_ups=FakePowerUps(), user_id="u1")
    slip.refresh_power_ups()
    assert slip.toggle_safe_single() is False


def test_refresh_notifies_listeners_and_survives_lookup_errors() -> None:
    seen: list[dict] = []
    slip = _slip(_item(1), power_ups=FakePowerUps(fail=True), user_id="u1")
    unsubscribe = slip.subscribe(seen.append)
    available = slip.refresh_power_ups()
    assert available == {PowerUpKind.SAFE_PARLAY: False, PowerUpKind.SAFE_SINGLE: False}
    assert seen == [available]

    unsubscribe()
    slip.refresh_power_ups()
    assert len(seen) == 1


def test_refresh_without_user_skips_lookup() -> None:
    power_ups = FakePowerUps({PowerUpKind.SAFE_SINGLE})
    slip = _slip(_item(1), power_ups=power_ups)
    assert slip.refresh_power_ups()[PowerUpKind.SAFE_SINGLE] is False
    assert power_ups.lookups == []


def test_safe_bet_requires_enough_tokens() -> None:
    slip = _slip(_item(1), _item(2), safe_bet_tokens=50)
    assert slip.toggle_safe_bet().error == "Safe bets are only available for parlays"
    slip.set_parlay_mode(True)
    assert slip.safe_bet_cost == 100
    result = slip.toggle_safe_bet()
    assert not result.is_valid
    assert result.error == "You need 100 safe bet tokens to use this feature. You have 50."

    slip.safe_bet_tokens = 100
    assert slip.toggle_safe_bet().is_valid
    assert slip.is_safe_bet


def test_parlay_quote() -> None:
    slip = _slip(_item(1, bet_amount=25), _item(2, bet_amount=25), _item(3, bet_amount=50), user_streak=3)
    slip.set_parlay_mode(True)
    quote = slip.quote(balance=500)
    assert quote.is_parlay
    assert quote.validation.is_valid
    assert quote.total_stake == 100
    assert quote.parlay.final_odds == pytest.approx(8 * 1.05 * 1.02)
    assert quote.potential_winnings == pytest.approx(100 * 8 * 1.05 * 1.02)
    assert len(quote.bonus_descriptions) == 2


def test_individual_quote() -> None:
    slip = _slip(_item(1, bet_amount=20, multiplier=2.4), _item(2, bet_amount=5))
    quote = slip.quote(balance=500)
    assert not quote.is_parlay
    assert quote.total_stake == 25
    assert quote.validation.error == "Minimum bet amount is 10"
