# dealgame/service_layer/users.py
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import User


class UserNotFound(LookupError):
    pass


class UserExists(ValueError):
    pass


def display_name(user: User) -> str:
    """
    username, else first name, else the local part of the email
    """
    if user.username:
        return user.username
    if user.name and user.name.strip():
        return user.name.split()[0]
    return user.email.split("@")[0]


async def get_user(session: AsyncSession, user_id: int) -> User:
    user = (await session.execute(select(User).where(User.id == user_id))).scalars().first()
    if not user:
        raise UserNotFound(f"User {user_id} not found")
    return user


async def create_user(
    session: AsyncSession,
    email: str,
    name: str | None = None,
    username: str | None = None,
) -> User:
    email = email.strip().lower()
    existing = (await session.execute(select(User).where(User.email == email))).scalars().first()
    if existing:
        raise UserExists(f"User with email {email} already exists")

    user = User(email=email, name=name, username=username)
    session.add(user)
    await session.flush()
    return user


async def get_or_create_user(
    session: AsyncSession,
    email: str,
    name: str | None = None,
    username: str | None = None,
) -> User:
    email = email.strip().lower()
    existing = (await session.execute(select(User).where(User.email == email))).scalars().first()
    if existing:
        return existing
    return await create_user(session, email, name=name, username=username)
