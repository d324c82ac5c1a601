"""
Enrichment Joiner: attaches a secondary entity (e.g. the contact) to each lead
through a foreign-key field, fetching in small concurrent batches.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from gavdash.modules.fields.normalizer import get_path

logger = logging.getLogger(__name__)


def _key_of(record: dict, foreign_key: str):
    value = get_path(record, foreign_key) if "." in foreign_key else record.get(foreign_key)
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


async def join_records(
    records: list[dict],
    foreign_key: str,
    fetch_one: Callable[[object], Awaitable[dict | None]],
    batch_size: int = 10,
    attach_as: str = "joined",
) -> list[dict]:
    """Return copies of records with `attach_as` set to the joined record or None."""
    keys = []
    seen = set()
    for record in records:
        key = _key_of(record, foreign_key)
        if key is not None and key not in seen:
            seen.add(key)
            keys.append(key)

    batch_size = max(batch_size, 1)
    joined: dict = {}
    for start in range(0, len(keys), batch_size):
        batch = keys[start:start + batch_size]
        results = await asyncio.gather(*(fetch_one(key) for key in batch), return_exceptions=True)
        for key, result in zip(batch, results):
            if isinstance(result, BaseException):
                logger.warning("Join fetch failed for %s=%s: %s", foreign_key, key, result)
                joined[key] = None
            else:
                joined[key] = result

    logger.info("Joined %d distinct %s values onto %d records", len(keys), foreign_key, len(records))

    out = []
    for record in records:
        key = _key_of(record, foreign_key)
        enriched = dict(record)
        enriched[attach_as] = joined.get(key) if key is not None else None
        out.append(enriched)
    return out
