# dealgame/entrypoints/api/routers/users.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user, require_api_key
from ....db import get_session
from ....models import User
from ....schemas import UserCreate, UserOut
from ....service_layer.users import UserExists, create_user

router = APIRouter(prefix="/api/users", tags=["users"])


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        name=user.name,
        username=user.username,
        created_at=user.created_at,
    )


@router.post("", response_model=UserOut, status_code=201, dependencies=[Depends(require_api_key)])
async def register_user(body: UserCreate, session: AsyncSession = Depends(get_session)) -> UserOut:
    try:
        user = await create_user(session, body.email, name=body.name, username=body.username)
    except UserExists as e:
        raise HTTPException(status_code=409, detail=str(e))
    await session.commit()
    return _user_out(user)


@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(current_user)) -> UserOut:
    return _user_out(user)
