# dealgame/entrypoints/api/deps.py
from __future__ import annotations

from datetime import date

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.clients.scenario_generator import AzureScenarioGenerator, ScenarioGenerator
from ...adapters.repos.cases import CaseRepository, default_case_repository
from ...config import settings
from ...db import get_session
from ...domain.dates import today_in_timezone
from ...models import User
from ...service_layer.users import UserNotFound, get_user


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    if settings.API_KEY:
        if not x_api_key or x_api_key != settings.API_KEY:
            raise HTTPException(status_code=401, detail="Invalid API key")


async def current_user(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    session: AsyncSession = Depends(get_session),
) -> User:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid X-User-Id header") from None
    try:
        return await get_user(session, user_id)
    except UserNotFound:
        raise HTTPException(status_code=401, detail="Unknown user") from None


def get_case_repository() -> CaseRepository:
    return default_case_repository()


def get_scenario_generator() -> ScenarioGenerator:
    try:
        return AzureScenarioGenerator()
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e)) from None


def get_today() -> date:
    """Today's date in the configured timezone (challenges roll over at local midnight)."""
    return today_in_timezone(settings.TIMEZONE)
