# dealgame/jobs/scheduler.py
from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from ..config import settings
from .daily_challenge import ensure_todays_challenge, run_daily_challenge_job

log = logging.getLogger(__name__)


def build_scheduler(*, catch_up: bool = True) -> AsyncIOScheduler:
    """
    Jobs are coroutine functions; AsyncIOExecutor awaits them on the
    scheduler's event loop, so start() must be called from inside that loop.
    """
    sched = AsyncIOScheduler(timezone=settings.TIMEZONE)

    # new challenge just after local midnight
    sched.add_job(
        run_daily_challenge_job,
        CronTrigger.from_crontab(settings.DAILY_CHALLENGE_CRON, timezone=settings.TIMEZONE),
        id="daily_challenge",
        replace_existing=True,
    )

    if catch_up:
        # one-off run right after start, in case the server was down at midnight
        sched.add_job(ensure_todays_challenge, id="daily_challenge_catch_up")

    log.info("daily challenge cron=%r tz=%s", settings.DAILY_CHALLENGE_CRON, settings.TIMEZONE)
    return sched
