# scripts/run_scheduler.py
from __future__ import annotations

import asyncio
import logging

from dealgame.db import create_tables
from dealgame.jobs.scheduler import build_scheduler


def _quiet_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    # Quiet the usual offenders
    for name in ("httpx", "openai", "apscheduler", "uvicorn"):
        logging.getLogger(name).setLevel(logging.WARNING)


async def main() -> None:
    _quiet_logging()

    await create_tables()

    scheduler = build_scheduler()
    scheduler.start()
    logging.getLogger(__name__).info("Scheduler started")

    try:
        while True:
            await asyncio.sleep(3600)
    except (KeyboardInterrupt, asyncio.CancelledError):
        scheduler.shutdown()
        logging.getLogger(__name__).info("Scheduler stopped")


if __name__ == "__main__":
    asyncio.run(main())
