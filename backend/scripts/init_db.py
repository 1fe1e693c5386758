# scripts/init_db.py
import argparse
import asyncio

from dealgame.config import settings
from dealgame.db import create_tables, engine
from dealgame.models import Base


async def main() -> None:
    parser = argparse.ArgumentParser(description="Create the game database tables")
    parser.add_argument("--reset", action="store_true", help="Drop every table first (destroys scores)")
    args = parser.parse_args()

    if args.reset:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    await create_tables()
    print(f"Tables ready at {settings.DOD_DB_URL}: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    asyncio.run(main())
