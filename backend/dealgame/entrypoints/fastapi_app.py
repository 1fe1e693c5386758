# dealgame/entrypoints/fastapi_app.py
from __future__ import annotations

import logging

from fastapi import FastAPI

from ..config import settings
from ..db import create_tables
from .api.routers import cases, challenges, game, health, users

log = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Deal or Disaster")

    @app.on_event("startup")
    async def _startup() -> None:
        await create_tables()

        if settings.SCHEDULER_ENABLED:
            from ..jobs.scheduler import build_scheduler

            app.state.scheduler = build_scheduler()
            app.state.scheduler.start()
            log.info("daily challenge scheduler started")

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        sched = getattr(app.state, "scheduler", None)
        if sched is not None:
            sched.shutdown(wait=False)

    # Routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(game.router)
    app.include_router(cases.router)
    app.include_router(challenges.router)

    return app
