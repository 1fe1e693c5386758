# scripts/generate_challenge.py
from __future__ import annotations

import argparse
import asyncio
import logging

from dealgame.adapters.clients.scenario_generator import DIFFICULTIES, AzureScenarioGenerator
from dealgame.config import settings
from dealgame.db import async_session, create_tables
from dealgame.domain.dates import parse_challenge_date, today_in_timezone
from dealgame.jobs.daily_challenge import generate_challenge_for_date
from dealgame.models import Difficulty

log = logging.getLogger("generate_challenge")


def _quiet_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    # Quiet the usual offenders
    for name in ("httpx", "openai", "apscheduler", "uvicorn"):
        logging.getLogger(name).setLevel(logging.WARNING)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Generate (or regenerate) the daily challenge for a date")
    parser.add_argument("--date", default=None, help="YYYY-MM-DD (default: today)")
    parser.add_argument("--difficulty", choices=DIFFICULTIES, default=None, help="default: random")
    parser.add_argument("--force", action="store_true", help="Replace the scenario if the date already has one")
    args = parser.parse_args()

    _quiet_logging()

    day = parse_challenge_date(args.date) if args.date else today_in_timezone(settings.TIMEZONE)

    await create_tables()

    async with async_session() as session:
        ch = await generate_challenge_for_date(
            session,
            AzureScenarioGenerator(),
            challenge_date=day,
            difficulty=Difficulty(args.difficulty) if args.difficulty else None,
            overwrite=args.force,
        )
        await session.commit()

    log.info("challenge %s ready for %s (%s)", ch.id, day.isoformat(), ch.difficulty.value)


if __name__ == "__main__":
    asyncio.run(main())
