# dealgame/service_layer/game_sessions.py
from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import DailyChallenge, GameSession, User, UserDailyChallenge
from .users import display_name, get_user


async def save_game_session(
    session: AsyncSession,
    user_id: int,
    *,
    points: int,
    cases_solved: int,
    good_deals: int,
    bad_deals_avoided: int,
    mistakes: int,
    red_flags_found: int,
    red_flag_correct: int = 0,
    red_flag_mistakes: int = 0,
) -> GameSession:
    await get_user(session, user_id)

    gs = GameSession(
        user_id=user_id,
        points=points,
        cases_solved=cases_solved,
        good_deals=good_deals,
        bad_deals_avoided=bad_deals_avoided,
        mistakes=mistakes,
        red_flags_found=red_flags_found,
        red_flag_correct=red_flag_correct,
        red_flag_mistakes=red_flag_mistakes,
    )
    session.add(gs)
    await session.flush()
    return gs


async def recent_sessions(session: AsyncSession, user_id: int, limit: int = 20) -> list[GameSession]:
    stmt = (
        select(GameSession)
        .where(GameSession.user_id == user_id)
        .order_by(desc(GameSession.created_at), desc(GameSession.id))
        .limit(limit)
    )
    return list((await session.execute(stmt)).scalars().all())


def _current_streak(completed_dates: set[date], today: date) -> int:
    """
    Consecutive daily-challenge days ending today (or yesterday, if today isn't played yet).
    """
    day = today if today in completed_dates else today - timedelta(days=1)
    streak = 0
    while day in completed_dates:
        streak += 1
        day -= timedelta(days=1)
    return streak


async def user_stats(session: AsyncSession, user_id: int, *, today: date) -> dict[str, Any]:
    await get_user(session, user_id)

    row = (
        await session.execute(
            select(
                func.count(GameSession.id),
                func.max(GameSession.points),
                func.avg(GameSession.points),
                func.coalesce(func.sum(GameSession.good_deals), 0),
                func.coalesce(func.sum(GameSession.bad_deals_avoided), 0),
                func.coalesce(func.sum(GameSession.mistakes), 0),
                func.coalesce(func.sum(GameSession.red_flags_found), 0),
                func.coalesce(func.sum(GameSession.points), 0),
            ).where(GameSession.user_id == user_id)
        )
    ).one()

    total_games, best, avg, good, bad_avoided, mistakes, flags, session_points = row

    # daily challenge points count towards lifetime points too
    challenge_points = (
        await session.execute(
            select(func.coalesce(func.sum(UserDailyChallenge.points_earned), 0)).where(
                UserDailyChallenge.user_id == user_id
            )
        )
    ).scalar_one()

    completed_dates = set(
        (
            await session.execute(
                select(DailyChallenge.challenge_date)
                .join(UserDailyChallenge, UserDailyChallenge.challenge_id == DailyChallenge.id)
                .where(UserDailyChallenge.user_id == user_id)
            )
        )
        .scalars()
        .all()
    )

    return {
        "total_games": int(total_games or 0),
        "best_score": int(best) if best is not None else None,
        "average_score": float(avg) if avg is not None else None,
        "total_good_deals": int(good),
        "total_bad_deals_avoided": int(bad_avoided),
        "total_mistakes": int(mistakes),
        "total_red_flags": int(flags),
        "lifetime_points": int(session_points) + int(challenge_points),
        "current_streak": _current_streak(completed_dates, today),
    }


async def leaderboard(session: AsyncSession, limit: int = 100) -> list[dict[str, Any]]:
    """
    Best single-session score per user (users with no games rank last).
    """
    best = func.max(GameSession.points)
    stmt = (
        select(
            User,
            best.label("best_score"),
            func.count(GameSession.id).label("games_played"),
            func.coalesce(func.sum(GameSession.good_deals), 0).label("total_good_deals"),
            func.coalesce(func.sum(GameSession.bad_deals_avoided), 0).label("total_bad_deals_avoided"),
        )
        .outerjoin(GameSession, GameSession.user_id == User.id)
        .group_by(User.id)
        .order_by(desc(best).nulls_last(), User.id.asc())
        .limit(limit)
    )
    rows = (await session.execute(stmt)).all()

    out: list[dict[str, Any]] = []
    for user, best_score, games_played, good, bad_avoided in rows:
        out.append(
            dict(
                user_id=user.id,
                display_name=display_name(user),
                best_score=int(best_score) if best_score is not None else None,
                games_played=int(games_played),
                total_good_deals=int(good),
                total_bad_deals_avoided=int(bad_avoided),
            )
        )
    return out
