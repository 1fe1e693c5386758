# dealgame/service_layer/score_sync.py
from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from ..adapters.clients.game_api import GameApiClient
from ..domain.engine import ChallengeCompletion, PersistCommand, SessionSnapshot

log = logging.getLogger(__name__)


class ScoreSync:
    """
    Performs the engine's persistence commands in the background.

    Gameplay never waits on these and never sees their errors: retryable
    failures are retried by the client, anything left is logged and dropped.
    """

    def __init__(self, client: GameApiClient) -> None:
        self.client = client
        self._tasks: set[asyncio.Task[Any]] = set()

    def submit(self, command: PersistCommand | None) -> asyncio.Task[Any] | None:
        if command is None:
            return None
        task = asyncio.create_task(self.persist(command))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def persist(self, command: PersistCommand) -> dict[str, Any] | None:
        try:
            if isinstance(command, ChallengeCompletion):
                return await self.client.complete_challenge(command.challenge_id, command.to_payload())
            if isinstance(command, SessionSnapshot):
                return await self.client.save_session(command.to_payload())
            raise TypeError(f"unknown persist command: {type(command).__name__}")
        except httpx.HTTPStatusError as e:
            # rejected (e.g. challenge already completed) or retries exhausted
            log.warning("score save rejected: %s %s", e.response.status_code, e.response.text[:200])
        except httpx.HTTPError as e:
            log.warning("score save failed: %s", e)
        except ValueError as e:
            # 2xx with a body that is not JSON (proxy page, truncated reply)
            log.warning("score save returned an unreadable body: %s", e)
        return None

    async def drain(self) -> None:
        """Wait for in-flight saves (used when the host shuts down)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
