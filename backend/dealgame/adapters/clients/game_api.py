# dealgame/adapters/clients/game_api.py
from __future__ import annotations

from typing import Any

import httpx

from ...config import settings
from .http_resilience import resilient_request


class GameApiClient:
    """
    Thin client for the score persistence endpoints, used by game hosts
    (the terminal game, or anything else driving the engine out of process).
    """

    def __init__(
        self,
        user_id: int,
        *,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int | None = None,
        backoff_base_s: float | None = None,
    ) -> None:
        self.user_id = user_id
        self.base_url = (base_url or settings.GAME_API_BASE_URL).rstrip("/")
        self._transport = transport
        self._max_retries = max_retries
        self._backoff_base_s = backoff_base_s

    def _headers(self) -> dict[str, str]:
        return {"X-User-Id": str(self.user_id), "accept": "application/json"}

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        resp = await resilient_request(
            "POST",
            f"{self.base_url}{path}",
            headers=self._headers(),
            json=payload,
            transport=self._transport,
            max_retries=self._max_retries,
            backoff_base_s=self._backoff_base_s,
        )
        return resp.json()

    async def today_challenge(self) -> dict[str, Any]:
        resp = await resilient_request(
            "GET",
            f"{self.base_url}/challenges/today",
            headers=self._headers(),
            transport=self._transport,
            max_retries=self._max_retries,
            backoff_base_s=self._backoff_base_s,
        )
        return resp.json()

    async def save_session(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._post("/game/sessions", payload)

    async def complete_challenge(self, challenge_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._post(f"/challenges/{int(challenge_id)}/complete", payload)
