"""Bet submission tests."""

from __future__ import annotations

import httpx
import pytest

from tennislab.betting.http_gateway import HttpBetGateway
from tennislab.betting.ports import (
    BetPlacementError,
    InsufficientBalanceError,
    PowerUpError,
    PowerUpKind,
    SingleBetRequest,
)
from tennislab.betting.service import BetPlacementService
from tennislab.parlays.slip import BettingSlip
from tennislab.parlays.types import SlipItem
from tennislab.predictions.codec import encode
from tennislab.predictions.types import MatchDetails, PlayerSide, PredictionOptions
from tennislab.session.store import InMemorySessionStore


class FakeGateway:
    def __init__(self, events: list[str], fail: bool = False, fail_once_on: str | None = None) -> None:
        self.events = events
        self.fail = fail
        self.fail_once_on = fail_once_on
        self.singles = []
        self.parlays = []

    def create_bet(self, request) -> str:
        if self.fail:
            raise BetPlacementError("bet store unavailable")
        if request.match_id == self.fail_once_on:
            self.fail_once_on = None
            raise BetPlacementError("bet store timed out")
        self.singles.append(request)
        bet_id = f"bet-{len(self.singles)}"
        self.events.append(f"create:{bet_id}")
        return bet_id

    def create_parlay_bet(self, request) -> str:
        if self.fail:
            raise BetPlacementError("bet store unavailable")
        self.parlays.append(request)
        self.events.append("create:parlay-1")
        return "parlay-1"


class FakeWallet:
    def __init__(self, events: list[str], balance: float = 1000.0, fail: bool = False) -> None:
        self.events = events
        self._balance = balance
        self.fail = fail
        self.debits: list[tuple[float, str, str]] = []

    @property
    def balance(self) -> float:
        return self._balance

    def place_bet(self, amount: float, match_ref: str, description: str) -> None:
        if self.fail:
            raise InsufficientBalanceError("Insufficient balance")
        self._balance -= amount
        self.debits.append((amount, match_ref, description))
        self.events.append(f"debit:{match_ref}")


class FakePowerUps:
    def __init__(self, events: list[str], fail: bool = False) -> None:
        self.events = events
        self.fail = fail

    def has_power_up(self, user_id: str, kind: PowerUpKind) -> bool:
        return True

    def apply_power_up(self, user_id: str, kind: PowerUpKind, target_id: str) -> None:
        if self.fail:
            raise PowerUpError("already used")
        self.events.append(f"{kind.value}:{target_id}")


def _item(idx: int, bet_amount: float = 20.0) -> SlipItem:
    match = MatchDetails(
        player1=PlayerSide(name=f"Player A{idx}", base_odds=1.5),
        player2=PlayerSide(name=f"Player B{idx}", base_odds=2.0),
    )
    return SlipItem(
        match_id=f"m{idx}",
        match=match,
        prediction=PredictionOptions(winner=f"Player A{idx}", match_result="2-0"),
        bet_amount=bet_amount,
        multiplier=1.7,
    )


def _setup(events: list[str], *items: SlipItem, power_up_fail: bool = False):
    power_ups = FakePowerUps(events, fail=power_up_fail)
    slip = BettingSlip(power_ups=power_ups, user_id="u1")
    for item in items:
        slip.add_item(item)
    slip.refresh_power_ups()
    return slip, power_ups


def test_parlay_submission_order() -> None:
    events: list[str] = []
    slip, power_ups = _setup(events, _item(1), _item(2))
    slip.set_parlay_mode(True)
    slip.toggle_safe_parlay()
    gateway = FakeGateway(events)
    wallet = FakeWallet(events)

    result = BetPlacementService(gateway, wallet, power_ups).submit(slip)

    assert events == ["create:parlay-1", "safeParlay:parlay-1", "debit:parlay-1"]
    assert result.bet_ids == ["parlay-1"]
    assert result.warnings == []
    request = gateway.parlays[0]
    assert request.total_stake == 40
    assert request.final_odds == pytest.approx(2.25)
    assert request.to_payload()["predictions"][0]["prediction"]["matchResult"] == "2-0"
    assert wallet.debits[0][2] == "Parlay bet - 2 predictions - 2.25x odds"
    assert slip.items == []


def test_single_submission_applies_safe_single_to_first_bet_only() -> None:
    events: list[str] = []
    store = InMemorySessionStore(namespace="submit")
    store.set("m1", PredictionOptions(winner="Player A1"))
    slip, power_ups = _setup(events, _item(1), _item(2, bet_amount=30))
    slip.toggle_safe_single()
    gateway = FakeGateway(events)
    wallet = FakeWallet(events)

    result = BetPlacementService(gateway, wallet, power_ups, store=store).submit(slip)

    assert events == ["create:bet-1", "safeSingle:bet-1", "debit:m1", "create:bet-2", "debit:m2"]
    assert result.bet_ids == ["bet-1", "bet-2"]
    assert result.total_stake == 50
    assert gateway.singles[0].description == "Player A1 vs Player B1 - 1.70x multiplier"
    assert gateway.singles[1].potential_winnings == 51.0
    assert wallet.balance == 950
    assert store.get("m1") is None


def test_power_up_failure_is_a_warning() -> None:
    events: list[str] = []
    slip, power_ups = _setup(events, _item(1), _item(2), power_up_fail=True)
    slip.set_parlay_mode(True)
    slip.toggle_safe_parlay()

    result = BetPlacementService(FakeGateway(events), FakeWallet(events), power_ups).submit(slip)

    assert result.bet_ids == ["parlay-1"]
    assert result.warnings == ["Bet placed, but the safe parlay power-up could not be applied"]
    assert events[-1] == "debit:parlay-1"


def test_invalid_slip_is_not_submitted() -> None:
    events: list[str] = []
    slip, power_ups = _setup(events, _item(1, bet_amount=500))
    service = BetPlacementService(FakeGateway(events), FakeWallet(events, balance=100), power_ups)
    with pytest.raises(BetPlacementError, match="Insufficient balance"):
        service.submit(slip)
    assert events == []
    with pytest.raises(BetPlacementError, match="No predictions"):
        service.submit(BettingSlip())


def test_gateway_errors_are_wrapped_and_slip_kept() -> None:
    events: list[str] = []
    slip, power_ups = _setup(events, _item(1))
    service = BetPlacementService(FakeGateway(events, fail=True), FakeWallet(events), power_ups)
    with pytest.raises(BetPlacementError, match="Error placing individual bet"):
        service.submit(slip)
    assert len(slip.items) == 1


def test_wallet_shortfall_propagates() -> None:
    events: list[str] = []
    slip, power_ups = _setup(events, _item(1))
    service = BetPlacementService(FakeGateway(events), FakeWallet(events, fail=True), power_ups)
    with pytest.raises(InsufficientBalanceError):
        service.submit(slip)


def test_partial_failure_removes_placed_bets_before_retry() -> None:
    events: list[str] = []
    store = InMemorySessionStore(namespace="submit")
    store.set("m1", PredictionOptions(winner="Player A1"))
    store.set("m2", PredictionOptions(winner="Player A2"))
    slip, power_ups = _setup(events, _item(1), _item(2, bet_amount=30))
    gateway = FakeGateway(events, fail_once_on="m2")
    wallet = FakeWallet(events)
    service = BetPlacementService(gateway, wallet, power_ups, store=store)

    with pytest.raises(BetPlacementError, match="Error placing individual bet") as excinfo:
        service.submit(slip)
    assert excinfo.value.placed_bet_ids == ["bet-1"]
    assert [item.match_id for item in slip.items] == ["m2"]
    assert store.get("m1") is None
    assert store.get("m2") is not None
    assert [debit[1] for debit in wallet.debits] == ["m1"]

    result = service.submit(slip)
    assert result.bet_ids == ["bet-2"]
    assert [debit[1] for debit in wallet.debits] == ["m1", "m2"]
    assert wallet.balance == 950
    assert slip.items == []


def _request() -> SingleBetRequest:
    item = _item(1)
    return SingleBetRequest(
        match_id=item.match_id,
        bet_amount=20,
        multiplier=1.7,
        potential_winnings=34,
        prediction=encode(item.prediction),
        description="Player A1 vs Player B1 - 1.70x multiplier",
    )


def test_http_gateway_posts_camel_case_payload() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"id": "abc"})

    gateway = HttpBetGateway(base_url="http://bets.test", token="t0k", transport=httpx.MockTransport(handler))
    assert gateway.create_bet(_request()) == "abc"
    assert seen[0].url.path == "/bets"
    assert seen[0].headers["Authorization"] == "Bearer t0k"
    body = seen[0].read().decode()
    assert '"betAmount":20' in body.replace(" ", "")
    assert '"matchResult":"2-0"' in body.replace(" ", "")


def test_http_gateway_maps_errors() -> None:
    def short(request: httpx.Request) -> httpx.Response:
        return httpx.Response(402, json={"error": "balance"})

    def broken(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with pytest.raises(InsufficientBalanceError):
        HttpBetGateway(base_url="http://bets.test", transport=httpx.MockTransport(short)).create_bet(_request())
    with pytest.raises(BetPlacementError):
        HttpBetGateway(base_url="http://bets.test", transport=httpx.MockTransport(broken)).create_bet(_request())
