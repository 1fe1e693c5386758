# dealgame/service_layer/jobruns.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import JobRun, JobRunStatus

MAX_ERROR_CHARS = 4000


async def start_job(session: AsyncSession, job_name: str) -> JobRun:
    run = JobRun(job_name=job_name, status=JobRunStatus.running, started_at=datetime.utcnow())
    session.add(run)
    await session.flush()
    return run


async def _close(session: AsyncSession, run: JobRun, status: JobRunStatus, **fields: Any) -> None:
    run.status = status
    run.finished_at = datetime.utcnow()
    for k, v in fields.items():
        setattr(run, k, v)
    await session.flush()


async def finish_job_success(session: AsyncSession, run: JobRun, summary: dict[str, Any]) -> None:
    await _close(session, run, JobRunStatus.success, summary_json=json.dumps(summary, default=str), error=None)


async def finish_job_fail(session: AsyncSession, run: JobRun, err: Exception) -> None:
    await _close(session, run, JobRunStatus.failed, error=f"{type(err).__name__}: {err}"[:MAX_ERROR_CHARS])


async def recent_job_runs(session: AsyncSession, job_name: str | None = None, limit: int = 20) -> list[dict[str, Any]]:
    """Newest first, summaries decoded."""
    q = select(JobRun).order_by(JobRun.started_at.desc(), JobRun.id.desc()).limit(limit)
    if job_name:
        q = q.where(JobRun.job_name == job_name)

    out: list[dict[str, Any]] = []
    for run in (await session.execute(q)).scalars():
        out.append(
            {
                "id": run.id,
                "job_name": run.job_name,
                "status": run.status.value,
                "started_at": run.started_at,
                "finished_at": run.finished_at,
                "error": run.error,
                "summary": json.loads(run.summary_json) if run.summary_json else None,
            }
        )
    return out
