"""Thin HTTP client for the bet store."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from tennislab.betting.ports import (
    BetPlacementError,
    InsufficientBalanceError,
    ParlayBetRequest,
    SingleBetRequest,
)
from tennislab.config import get_settings

logger = logging.getLogger(__name__)


class HttpBetGateway:
    """Create single and parlay bets over the bet service's REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        settings = get_settings()
        base_url = base_url or settings.bet_service_url
        if not base_url:
            raise RuntimeError("BET_SERVICE_URL is not configured.")
        self.base_url = base_url.rstrip("/")
        token = token or settings.bet_service_token
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.Client(
            timeout=timeout or settings.bet_service_timeout,
            headers=headers,
            transport=transport,
        )

    def __enter__(self) -> "HttpBetGateway":  # pragma: no cover - context sugar
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self._client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise BetPlacementError(f"Bet service unreachable: {exc}") from exc
        if response.status_code == httpx.codes.PAYMENT_REQUIRED:
            raise InsufficientBalanceError("Insufficient balance")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("Bet service rejected %s: %s", path, response.text)
            raise BetPlacementError(f"Bet service returned {response.status_code}") from exc
        return response.json()

    def _bet_id(self, body: Dict[str, Any]) -> str:
        bet_id = body.get("id") or body.get("data", {}).get("id")
        if not bet_id:
            raise BetPlacementError("Bet service response did not include a bet id")
        return str(bet_id)

    def create_bet(self, request: SingleBetRequest) -> str:
        return self._bet_id(self._post("/bets", request.to_payload()))

    def create_parlay_bet(self, request: ParlayBetRequest) -> str:
        return self._bet_id(self._post("/parlays", request.to_payload()))
