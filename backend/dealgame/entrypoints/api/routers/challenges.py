# dealgame/entrypoints/api/routers/challenges.py
from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user, get_scenario_generator, get_today, require_api_key
from ....adapters.clients.scenario_generator import ScenarioGenerator, ScenarioValidationError
from ....db import get_session
from ....domain.dates import parse_challenge_date
from ....domain.errors import CaseDataError
from ....domain.normalize import case_to_dict
from ....domain.types import Decision
from ....jobs.daily_challenge import generate_challenge_for_date
from ....models import DailyChallenge, Difficulty, JobRun, User, UserDailyChallenge
from ....schemas import (
    ChallengeByDateOut,
    ChallengeHistoryOut,
    ChallengeOut,
    CompletionCreate,
    CompletionOut,
    CompletionResult,
    DailyLeaderboardRow,
    GenerateChallengeRequest,
    TodayChallengeOut,
)
from ....service_layer.daily_challenges import (
    ChallengeAlreadyCompleted,
    ChallengeExists,
    ChallengeNotFound,
    challenge_case,
    challenge_history,
    challenge_property_data,
    complete_challenge,
    daily_leaderboard,
    get_challenge_by_date,
    get_completion,
)
from ....service_layer.jobruns import finish_job_fail, finish_job_success, start_job

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/challenges", tags=["challenges"])


def _challenge_out(ch: DailyChallenge) -> ChallengeOut:
    return ChallengeOut(
        id=ch.id,
        challenge_date=ch.challenge_date,
        difficulty=ch.difficulty.value,
        property_data=challenge_property_data(ch),
    )


def _completion_out(done: UserDailyChallenge | None) -> CompletionOut | None:
    if done is None:
        return None
    return CompletionOut(
        id=done.id,
        user_id=done.user_id,
        challenge_id=done.challenge_id,
        decision=done.decision,
        points_earned=done.points_earned,
        time_taken=done.time_taken,
        completed_at=done.completed_at,
    )


def _playable_case(ch: DailyChallenge) -> dict[str, Any]:
    try:
        return case_to_dict(challenge_case(ch))
    except CaseDataError as e:
        log.error("challenge %s has unplayable data: %s", ch.id, e)
        raise HTTPException(status_code=500, detail="Challenge data is invalid")


@router.get("/today", response_model=TodayChallengeOut)
async def today_challenge(
    user: User = Depends(current_user),
    today: date = Depends(get_today),
    session: AsyncSession = Depends(get_session),
) -> TodayChallengeOut:
    ch = await get_challenge_by_date(session, today)
    if not ch:
        raise HTTPException(status_code=404, detail="No challenge available for today")

    return TodayChallengeOut(
        challenge=_challenge_out(ch),
        case=_playable_case(ch),
        user_completion=_completion_out(await get_completion(session, user.id, ch.id)),
    )


@router.get("/history", response_model=ChallengeHistoryOut)
async def history(
    page: int = Query(1, ge=1),
    user: User = Depends(current_user),
    session: AsyncSession = Depends(get_session),
) -> ChallengeHistoryOut:
    return ChallengeHistoryOut(**(await challenge_history(session, user.id, page=page)))


@router.get("/leaderboard", response_model=list[DailyLeaderboardRow])
async def leaderboard(
    today: date = Depends(get_today),
    session: AsyncSession = Depends(get_session),
) -> list[DailyLeaderboardRow]:
    return [DailyLeaderboardRow(**row) for row in await daily_leaderboard(session, today)]


@router.get("/date/{challenge_date}", response_model=ChallengeByDateOut)
async def challenge_by_date(
    challenge_date: str,
    user: User = Depends(current_user),
    session: AsyncSession = Depends(get_session),
) -> ChallengeByDateOut:
    try:
        day = parse_challenge_date(challenge_date)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {challenge_date}")

    ch = await get_challenge_by_date(session, day)
    if not ch:
        raise HTTPException(status_code=404, detail=f"No challenge for {day.isoformat()}")

    done = await get_completion(session, user.id, ch.id)
    return ChallengeByDateOut(
        challenge=_challenge_out(ch),
        case=_playable_case(ch),
        completed=done is not None,
        completion=_completion_out(done),
    )


@router.post("/{challenge_id}/complete", response_model=CompletionResult, status_code=201)
async def complete(
    challenge_id: int,
    body: CompletionCreate,
    user: User = Depends(current_user),
    session: AsyncSession = Depends(get_session),
) -> CompletionResult:
    """
    Records the caller's one completion of a challenge. `points_earned` is the
    whole case total (flag reveals, quiz answers and decision), which is what the
    daily leaderboard ranks.
    """
    try:
        done = await complete_challenge(
            session,
            user_id=user.id,
            challenge_id=challenge_id,
            decision=Decision(body.decision),
            points_earned=body.points_earned,
            time_taken=body.time_taken,
        )
    except ChallengeNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ChallengeAlreadyCompleted:
        raise HTTPException(status_code=409, detail="Challenge already completed")

    await session.commit()
    return CompletionResult(completion=_completion_out(done))


@router.post(
    "/generate",
    response_model=ChallengeOut,
    status_code=201,
    dependencies=[Depends(require_api_key)],
)
async def generate(
    body: GenerateChallengeRequest,
    today: date = Depends(get_today),
    generator: ScenarioGenerator = Depends(get_scenario_generator),
    session: AsyncSession = Depends(get_session),
) -> ChallengeOut:
    day = body.challenge_date or today
    # checked before calling the model so an existing date costs nothing
    if await get_challenge_by_date(session, day):
        raise HTTPException(status_code=409, detail=f"Challenge already exists for {day.isoformat()}")

    jr = await start_job(session, "daily_challenge_api")
    await session.commit()
    jr_id = jr.id

    async def _fail(e: Exception) -> None:
        await session.rollback()
        failed = await session.get(JobRun, jr_id)
        await finish_job_fail(session, failed, e)
        await session.commit()

    try:
        ch = await generate_challenge_for_date(
            session,
            generator,
            challenge_date=day,
            difficulty=Difficulty(body.difficulty) if body.difficulty else None,
        )
        await finish_job_success(
            session, jr, {"date": day.isoformat(), "challenge_id": ch.id, "difficulty": ch.difficulty.value}
        )
        await session.commit()
        return _challenge_out(ch)
    except ChallengeExists as e:
        await _fail(e)
        raise HTTPException(status_code=409, detail=str(e))
    except ScenarioValidationError as e:
        await _fail(e)
        raise HTTPException(status_code=502, detail=f"Generated scenario rejected: {e}")
    except Exception as e:
        await _fail(e)
        raise
