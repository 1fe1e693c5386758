# dealgame/adapters/clients/http_resilience.py
from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from ...config import settings

log = logging.getLogger(__name__)

RETRYABLE_STATUS = (429, 500, 502, 503, 504)


async def resilient_request(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    json: Any | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    max_retries: int | None = None,
    backoff_base_s: float | None = None,
) -> httpx.Response:
    """
    Retries timeouts, network errors and 429/5xx with exponential backoff.
    Any other 4xx is raised immediately.
    """
    timeout = httpx.Timeout(float(settings.HTTP_TIMEOUT_S))
    retries = int(settings.HTTP_MAX_RETRIES if max_retries is None else max_retries)
    backoff = float(settings.HTTP_BACKOFF_BASE_S if backoff_base_s is None else backoff_base_s)

    last_exc: Exception | None = None
    for attempt in range(retries + 1):
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
                resp = await client.request(method, url, headers=headers, params=params, json=json)

            if resp.status_code in RETRYABLE_STATUS:
                raise httpx.HTTPStatusError("retryable_status", request=resp.request, response=resp)

            resp.raise_for_status()
            return resp
        except httpx.HTTPStatusError as e:
            if e.response.status_code not in RETRYABLE_STATUS:
                raise
            last_exc = e
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            last_exc = e

        if attempt >= retries:
            break
        log.debug("retrying %s %s (attempt %d): %s", method, url, attempt + 1, last_exc)
        await asyncio.sleep(min(5.0, backoff * (2**attempt)))

    assert last_exc is not None
    raise last_exc
