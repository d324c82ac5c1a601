"""
Lead List Fetcher: fetches a collection resource and flattens whatever envelope
upstream wraps it in (bare list, {"leads": [...]}, {"data": [...]}, ...).
"""

import json
import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

CONTAINER_KEYS = ("items", "data", "rows", "results", "list", "leads", "contacts", "campaigns")
TOTAL_KEYS = ("total", "count", "totalCount")


@dataclass
class LeadList:
    records: list[dict] = field(default_factory=list)
    total_count: int = 0
    truncated: bool = False
    url: str | None = None


def lead_query(limit: int | None = None, campaign_id: str | None = None) -> dict:
    """Query parameters for a page of leads, optionally within one campaign."""
    params = {"page": 1, "pageSize": limit or 100}
    if campaign_id:
        numeric = _as_count(campaign_id)
        params["filters"] = json.dumps({"campaignId": {"$eq": campaign_id if numeric is None else numeric}})
    return params


def _find_list(body: dict, keys: tuple[str, ...], depth: int = 0) -> list | None:
    for key in keys:
        value = body.get(key)
        if isinstance(value, list):
            return value
    if depth == 0:
        for key in keys:
            value = body.get(key)
            if isinstance(value, dict):
                nested = _find_list(value, keys, depth + 1)
                if nested is not None:
                    return nested
    return None


def resolve_envelope(body, extra_keys: tuple[str, ...] = ()) -> list:
    """Return the raw item list held by a list-style response body."""
    if isinstance(body, list):
        return body
    if not isinstance(body, dict):
        return []

    found = _find_list(body, tuple(extra_keys) + CONTAINER_KEYS)
    if found is not None:
        return found

    for value in body.values():
        if isinstance(value, list):
            return value
    return []


def _as_count(raw) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)) and raw >= 0:
        return int(raw)
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    return None


def resolve_total(body, raw_length: int) -> int:
    """Explicit total/count/totalCount on the envelope (or its meta), else raw_length."""
    if isinstance(body, dict):
        for container in (body, body.get("meta")):
            if not isinstance(container, dict):
                continue
            for key in TOTAL_KEYS:
                total = _as_count(container.get(key))
                if total is not None:
                    return total
    return raw_length


def flatten_envelope(body, limit: int | None = None, extra_keys: tuple[str, ...] = ()) -> LeadList:
    raw = resolve_envelope(body, extra_keys)
    records = [item for item in raw if isinstance(item, dict)]
    total = resolve_total(body, len(raw))

    truncated = False
    if limit is not None and limit > 0 and len(records) > limit:
        records = records[:limit]
        truncated = True

    return LeadList(records=records, total_count=total, truncated=truncated)


async def fetch_list(
    client,
    path: str,
    params: dict | None = None,
    limit: int | None = None,
    extra_keys: tuple[str, ...] = (),
) -> LeadList:
    """GET a collection and flatten it. UpstreamFetchError propagates to the caller."""
    response = await client.get_json(path, params=params)
    result = flatten_envelope(response.body, limit=limit, extra_keys=extra_keys)
    result.url = response.url
    logger.info(
        "Fetched %s: %d records (total=%d, truncated=%s)",
        path, len(result.records), result.total_count, result.truncated,
    )
    return result
