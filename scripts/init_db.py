"""
Creates the webhook_events table.
Run: python -m scripts.init_db
"""

import asyncio
import os
import sys

import asyncpg
from dotenv import load_dotenv

from gavdash.modules.events.store import SCHEMA_SQL

load_dotenv()


async def init_db():
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("ERROR: DATABASE_URL not set")
        sys.exit(1)

    conn = await asyncpg.connect(database_url)
    try:
        await conn.execute(SCHEMA_SQL)
        count = await conn.fetchval("SELECT COUNT(*) FROM webhook_events")
        print(f"webhook_events ready ({count} rows)")
    finally:
        await conn.close()


if __name__ == "__main__":
    asyncio.run(init_db())
