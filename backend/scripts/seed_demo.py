# scripts/seed_demo.py
from __future__ import annotations

import argparse
import asyncio

from dealgame.config import settings
from dealgame.db import async_session, create_tables
from dealgame.domain.dates import parse_challenge_date, today_in_timezone
from dealgame.service_layer.demo_seed import seed_demo


async def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--date", default=None, help="Challenge date YYYY-MM-DD (default: today)")
    args = parser.parse_args()

    day = parse_challenge_date(args.date) if args.date else today_in_timezone(settings.TIMEZONE)

    await create_tables()

    async with async_session() as session:
        res = await seed_demo(session, challenge_date=day)
        await session.commit()

    print(f"Seeded demo data for {day.isoformat()}: {res}")


if __name__ == "__main__":
    asyncio.run(main())
