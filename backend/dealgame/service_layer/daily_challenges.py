# dealgame/service_layer/daily_challenges.py
from __future__ import annotations

import json
import logging
import math
from datetime import date, datetime
from typing import Any

from sqlalchemy import and_, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.normalize import case_from_challenge
from ..domain.types import Decision, PropertyCase
from ..models import DailyChallenge, Difficulty, User, UserDailyChallenge
from .users import display_name, get_user

log = logging.getLogger(__name__)

HISTORY_PAGE_SIZE = 30


class ChallengeNotFound(LookupError):
    pass


class ChallengeAlreadyCompleted(ValueError):
    pass


class ChallengeExists(ValueError):
    pass


def challenge_property_data(ch: DailyChallenge) -> dict[str, Any]:
    data = json.loads(ch.property_data or "{}")
    return data if isinstance(data, dict) else {}


def challenge_case(ch: DailyChallenge) -> PropertyCase:
    """Stored scenario -> the PropertyCase the engine plays."""
    return case_from_challenge(ch.id, challenge_property_data(ch))


async def get_challenge(session: AsyncSession, challenge_id: int) -> DailyChallenge:
    ch = (await session.execute(select(DailyChallenge).where(DailyChallenge.id == challenge_id))).scalars().first()
    if not ch:
        raise ChallengeNotFound(f"Challenge {challenge_id} not found")
    return ch


async def get_challenge_by_date(session: AsyncSession, challenge_date: date) -> DailyChallenge | None:
    return (
        await session.execute(select(DailyChallenge).where(DailyChallenge.challenge_date == challenge_date))
    ).scalars().first()


async def get_completion(session: AsyncSession, user_id: int, challenge_id: int) -> UserDailyChallenge | None:
    return (
        await session.execute(
            select(UserDailyChallenge)
            .where(UserDailyChallenge.user_id == user_id)
            .where(UserDailyChallenge.challenge_id == challenge_id)
        )
    ).scalars().first()


async def create_challenge(
    session: AsyncSession,
    challenge_date: date,
    difficulty: Difficulty,
    property_data: dict[str, Any],
) -> DailyChallenge:
    if await get_challenge_by_date(session, challenge_date):
        raise ChallengeExists(f"Challenge already exists for {challenge_date.isoformat()}")

    ch = DailyChallenge(
        challenge_date=challenge_date,
        difficulty=difficulty,
        property_data=json.dumps(property_data),
    )
    session.add(ch)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise ChallengeExists(f"Challenge already exists for {challenge_date.isoformat()}") from None
    return ch


async def replace_challenge_data(
    session: AsyncSession,
    challenge_date: date,
    difficulty: Difficulty,
    property_data: dict[str, Any],
) -> DailyChallenge:
    """
    Regenerate an existing date in place, keeping its id (and completions).
    """
    ch = await get_challenge_by_date(session, challenge_date)
    if not ch:
        return await create_challenge(session, challenge_date, difficulty, property_data)
    ch.difficulty = difficulty
    ch.property_data = json.dumps(property_data)
    await session.flush()
    return ch


async def complete_challenge(
    session: AsyncSession,
    *,
    user_id: int,
    challenge_id: int,
    decision: Decision,
    points_earned: int,
    time_taken: int,
) -> UserDailyChallenge:
    """
    Record a user's single completion of a challenge.

    The pre-check gives a clean error for the common case; the unique
    constraint on (user_id, challenge_id) rejects a concurrent double submit
    that slips past it.
    """
    await get_user(session, user_id)
    await get_challenge(session, challenge_id)

    if await get_completion(session, user_id, challenge_id):
        raise ChallengeAlreadyCompleted(f"Challenge {challenge_id} already completed by user {user_id}")

    row = UserDailyChallenge(
        user_id=user_id,
        challenge_id=challenge_id,
        decision=Decision(decision).value,
        points_earned=int(points_earned),
        time_taken=int(time_taken),
        completed_at=datetime.utcnow(),
    )
    session.add(row)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        log.warning("duplicate completion rejected by constraint: user=%s challenge=%s", user_id, challenge_id)
        raise ChallengeAlreadyCompleted(f"Challenge {challenge_id} already completed by user {user_id}") from None
    return row


async def challenge_history(
    session: AsyncSession,
    user_id: int,
    page: int = 1,
    limit: int = HISTORY_PAGE_SIZE,
) -> dict[str, Any]:
    page = max(1, int(page))
    offset = (page - 1) * limit

    stmt = (
        select(DailyChallenge, UserDailyChallenge)
        .outerjoin(
            UserDailyChallenge,
            and_(
                UserDailyChallenge.challenge_id == DailyChallenge.id,
                UserDailyChallenge.user_id == user_id,
            ),
        )
        .order_by(desc(DailyChallenge.challenge_date))
        .limit(limit)
        .offset(offset)
    )
    rows = (await session.execute(stmt)).all()
    total = (await session.execute(select(func.count()).select_from(DailyChallenge))).scalar_one()

    items: list[dict[str, Any]] = []
    for ch, done in rows:
        items.append(
            dict(
                id=ch.id,
                challenge_date=ch.challenge_date,
                difficulty=ch.difficulty.value,
                completed=done is not None,
                completed_at=done.completed_at if done else None,
                decision=done.decision if done else None,
                points_earned=done.points_earned if done else None,
            )
        )

    return {
        "challenges": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": int(total),
            "total_pages": math.ceil(int(total) / limit) if limit else 0,
        },
    }


async def daily_leaderboard(session: AsyncSession, challenge_date: date, limit: int = 100) -> list[dict[str, Any]]:
    """
    Completions for the given day: most points first, fastest time breaks ties.
    """
    ch = await get_challenge_by_date(session, challenge_date)
    if not ch:
        return []

    stmt = (
        select(UserDailyChallenge, User)
        .join(User, User.id == UserDailyChallenge.user_id)
        .where(UserDailyChallenge.challenge_id == ch.id)
        .order_by(desc(UserDailyChallenge.points_earned), UserDailyChallenge.time_taken.asc())
        .limit(limit)
    )
    rows = (await session.execute(stmt)).all()

    return [
        dict(
            rank=i + 1,
            username=display_name(user),
            points=done.points_earned,
            time=done.time_taken,
            completed_at=done.completed_at,
        )
        for i, (done, user) in enumerate(rows)
    ]
