# dealgame/entrypoints/api/routers/health.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_case_repository, require_api_key
from ....adapters.repos.cases import CaseRepository
from ....config import settings
from ....db import get_session
from ....service_layer.jobruns import recent_job_runs

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/debug/config", dependencies=[Depends(require_api_key)])
def debug_config(cases: CaseRepository = Depends(get_case_repository)) -> dict[str, Any]:
    return {
        "ENV": settings.ENV,
        "DOD_DB_URL": settings.DOD_DB_URL,
        "TIMEZONE": settings.TIMEZONE,
        "DAILY_CHALLENGE_CRON": settings.DAILY_CHALLENGE_CRON,
        "SCHEDULER_ENABLED": settings.SCHEDULER_ENABLED,
        "CASE_TIME_LIMIT_S": settings.CASE_TIME_LIMIT_S,
        "CASE_COUNT": len(cases),
        "AZURE_OPENAI_CONFIGURED": bool(settings.AZURE_OPENAI_API_KEY and settings.AZURE_OPENAI_ENDPOINT),
    }


@router.get("/debug/jobs", dependencies=[Depends(require_api_key)])
async def debug_jobs(
    job_name: str | None = None,
    limit: int = Query(default=20, ge=1, le=200),
    session: AsyncSession = Depends(get_session),
) -> list[dict[str, Any]]:
    return await recent_job_runs(session, job_name, limit=limit)
