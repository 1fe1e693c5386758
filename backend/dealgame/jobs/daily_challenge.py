# dealgame/jobs/daily_challenge.py
from __future__ import annotations

import logging
import random
from datetime import date
from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.clients.scenario_generator import DIFFICULTIES, AzureScenarioGenerator, ScenarioGenerator
from ..config import settings
from ..db import async_session
from ..domain.dates import today_in_timezone
from ..models import DailyChallenge, Difficulty
from ..service_layer.daily_challenges import create_challenge, get_challenge_by_date, replace_challenge_data
from ..service_layer.jobruns import finish_job_fail, finish_job_success, start_job

log = logging.getLogger(__name__)

JOB_NAME = "daily_challenge"


def pick_difficulty(rng: random.Random | None = None) -> Difficulty:
    return Difficulty((rng or random).choice(DIFFICULTIES))


async def generate_challenge_for_date(
    session: AsyncSession,
    generator: ScenarioGenerator,
    *,
    challenge_date: date,
    difficulty: Difficulty | None = None,
    overwrite: bool = False,
) -> DailyChallenge:
    """
    Generate and store the scenario for one date.

    Raises ChallengeExists when the date already has a challenge, unless
    overwrite is set (then the stored scenario is replaced in place).
    """
    difficulty = difficulty or pick_difficulty()
    log.info("generating %s challenge for %s", difficulty.value, challenge_date.isoformat())
    scenario = await generator.generate(difficulty.value)

    if overwrite:
        return await replace_challenge_data(session, challenge_date, difficulty, scenario)
    return await create_challenge(session, challenge_date, difficulty, scenario)


async def run_daily_challenge_job(
    *,
    generator: ScenarioGenerator | None = None,
    challenge_date: date | None = None,
    session_factory: Callable[[], Any] = async_session,
) -> dict[str, Any]:
    """
    Scheduler entrypoint. Never raises: failures are logged and recorded in job_runs.
    """
    challenge_date = challenge_date or today_in_timezone(settings.TIMEZONE)

    # bookkeeping lives in its own session so a failed generation can't roll it back
    async with session_factory() as jr_session:
        jr = await start_job(jr_session, JOB_NAME)
        await jr_session.commit()

        try:
            async with session_factory() as session:
                existing = await get_challenge_by_date(session, challenge_date)
                if existing:
                    log.info("challenge for %s already exists (id=%s), skipping", challenge_date, existing.id)
                    summary = {"date": challenge_date.isoformat(), "skipped": True, "challenge_id": existing.id}
                else:
                    ch = await generate_challenge_for_date(
                        session,
                        generator or AzureScenarioGenerator(),
                        challenge_date=challenge_date,
                    )
                    await session.commit()
                    log.info("created challenge %s for %s (%s)", ch.id, challenge_date, ch.difficulty.value)
                    summary = {
                        "date": challenge_date.isoformat(),
                        "skipped": False,
                        "challenge_id": ch.id,
                        "difficulty": ch.difficulty.value,
                    }

            await finish_job_success(jr_session, jr, summary)
            await jr_session.commit()
            return summary
        except Exception as e:
            log.exception("daily challenge generation failed for %s", challenge_date)
            await finish_job_fail(jr_session, jr, e)
            await jr_session.commit()
            return {"date": challenge_date.isoformat(), "skipped": False, "error": f"{type(e).__name__}: {e}"}


async def ensure_todays_challenge(
    *,
    generator: ScenarioGenerator | None = None,
    session_factory: Callable[[], Any] = async_session,
) -> dict[str, Any]:
    """Startup catch-up: make sure today's challenge exists."""
    return await run_daily_challenge_job(generator=generator, session_factory=session_factory)
