# dealgame/entrypoints/api/routers/game.py
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user, get_today
from ....db import get_session
from ....models import GameSession, User
from ....schemas import GameSessionCreate, GameSessionOut, LeaderboardRow, UserStatsOut
from ....service_layer.game_sessions import leaderboard, recent_sessions, save_game_session, user_stats

router = APIRouter(prefix="/api/game", tags=["game"])


def _session_out(gs: GameSession) -> GameSessionOut:
    return GameSessionOut(
        id=gs.id,
        user_id=gs.user_id,
        points=gs.points,
        cases_solved=gs.cases_solved,
        good_deals=gs.good_deals,
        bad_deals_avoided=gs.bad_deals_avoided,
        mistakes=gs.mistakes,
        red_flags_found=gs.red_flags_found,
        red_flag_correct=gs.red_flag_correct,
        red_flag_mistakes=gs.red_flag_mistakes,
        created_at=gs.created_at,
    )


@router.post("/sessions", response_model=GameSessionOut, status_code=201)
async def save_session(
    body: GameSessionCreate,
    user: User = Depends(current_user),
    session: AsyncSession = Depends(get_session),
) -> GameSessionOut:
    gs = await save_game_session(
        session,
        user.id,
        points=body.points,
        cases_solved=body.cases_solved,
        good_deals=body.good_deals,
        bad_deals_avoided=body.bad_deals_avoided,
        mistakes=body.mistakes,
        red_flags_found=body.red_flags_found,
        red_flag_correct=body.red_flag_correct,
        red_flag_mistakes=body.red_flag_mistakes,
    )
    await session.commit()
    return _session_out(gs)


@router.get("/sessions", response_model=list[GameSessionOut])
async def list_sessions(
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(current_user),
    session: AsyncSession = Depends(get_session),
) -> list[GameSessionOut]:
    return [_session_out(gs) for gs in await recent_sessions(session, user.id, limit=limit)]


@router.get("/stats", response_model=UserStatsOut)
async def stats(
    user: User = Depends(current_user),
    today: date = Depends(get_today),
    session: AsyncSession = Depends(get_session),
) -> UserStatsOut:
    return UserStatsOut(**(await user_stats(session, user.id, today=today)))


@router.get("/leaderboard", response_model=list[LeaderboardRow])
async def game_leaderboard(
    limit: int = Query(100, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> list[LeaderboardRow]:
    return [LeaderboardRow(**row) for row in await leaderboard(session, limit=limit)]
