"""
Webhook event store: append-only PostgreSQL table of received callbacks.
Writes never fail the webhook; errors are logged and reported as False.
"""

import asyncio
import json
import logging

import asyncpg

from gavdash.database import get_pool
from gavdash.errors import PersistenceError
from gavdash.models.event import WebhookEvent

logger = logging.getLogger(__name__)

# asyncio.TimeoutError is not an OSError before Python 3.11.
DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError, OSError)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS webhook_events (
    id BIGSERIAL PRIMARY KEY,
    received_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    event_type TEXT NULL,
    payload JSONB
)
"""


async def ensure_schema() -> bool:
    pool = await get_pool()
    if pool is None:
        return False
    try:
        await pool.execute(SCHEMA_SQL)
    except DB_ERRORS as e:
        logger.error("Could not create webhook_events table: %s", e)
        return False
    return True


async def save_event(event_type: str | None, payload) -> bool:
    """Insert one event. Returns False (after logging) when persistence is off or fails."""
    try:
        pool = await get_pool()
        if pool is None:
            return False
        await pool.execute(
            "INSERT INTO webhook_events (event_type, payload) VALUES ($1, $2::jsonb)",
            event_type,
            json.dumps(payload, default=str),
        )
    except (*DB_ERRORS, TypeError, ValueError) as e:
        logger.error("Failed to persist webhook event type=%s: %s", event_type, e)
        return False
    return True


async def list_events(limit: int = 50) -> list[WebhookEvent]:
    try:
        pool = await get_pool()
        if pool is None:
            raise PersistenceError("database not configured")
        rows = await pool.fetch(
            """
            SELECT id, received_at, event_type, payload
            FROM webhook_events
            ORDER BY id DESC
            LIMIT $1
            """,
            limit,
        )
    except DB_ERRORS as e:
        logger.error("Failed to read webhook events: %s", e)
        raise PersistenceError(str(e)) from e

    events = []
    for row in rows:
        data = dict(row)
        if isinstance(data.get("payload"), str):
            data["payload"] = json.loads(data["payload"])
        events.append(WebhookEvent(**data))
    return events
