"""
Debug API: secret-protected endpoints for webhook inspection and field
discovery across Adversus leads and results.
"""

import logging

from fastapi import APIRouter, Depends, Query

from gavdash.config import Settings
from gavdash.dependencies import (
    get_adversus_client,
    get_app_settings,
    get_event_buffer,
    get_pacer,
    require_secret,
)
from gavdash.modules.events.buffer import EventBuffer
from gavdash.modules.events.store import list_events
from gavdash.modules.fields.inventory import build_coverage, build_result_inventory
from gavdash.modules.fields.prober import DEFAULT_RESULT_SOURCES, MultiSourceProber, SuccessFilter
from gavdash.modules.leads.fetcher import fetch_list, lead_query

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_secret)])


# --- Webhook events ---

@router.get("/events")
async def recent_events(
    limit: int = Query(50, ge=0),
    events: EventBuffer = Depends(get_event_buffer),
):
    """Newest-first webhook events from the in-memory buffer."""
    latest = events.latest(limit)
    return {"ok": True, "count": len(latest), "capacity": events.capacity, "events": latest}


@router.get("/webhook-events")
async def stored_events(limit: int = Query(50, ge=1, le=1000)):
    """Newest-first webhook events from the database."""
    rows = await list_events(limit)
    return {"ok": True, "count": len(rows), "events": [r.model_dump(mode="json") for r in rows]}


# --- Field discovery ---

@router.get("/lead-fields")
async def lead_fields(
    limit: int = Query(100, ge=1, le=1000),
    campaign_id: str | None = Query(None, alias="campaignId"),
    client=Depends(get_adversus_client),
):
    """Coverage of every field seen on a page of leads, custom fields included."""
    leads = await fetch_list(client, "leads", params=lead_query(limit, campaign_id), limit=limit)
    coverage = build_coverage(leads.records, prefix="lead")
    logger.info("Lead field inventory: %d rows, %d fields", coverage["total_rows"], len(coverage["fields"]))
    return {"ok": True, "url": leads.url, "total_count": leads.total_count, **coverage}


@router.get("/result-fields")
async def result_fields(
    limit: int | None = Query(None, ge=1),
    campaign_id: str | None = Query(None, alias="campaignId"),
    lead_ids: str | None = Query(None, alias="leadIds"),
    success_only: bool = Query(False, alias="successOnly"),
    sample: int = Query(20, ge=0, le=500),
    client=Depends(get_adversus_client),
    pacer=Depends(get_pacer),
    settings: Settings = Depends(get_app_settings),
):
    """Deep scan: probe each lead's result sources and inventory the result fields.

    leadIds: comma separated ids to probe instead of fetching a page of leads.
    successOnly: only consider results whose status is a configured success term.
    """
    limit = min(limit or settings.max_scan_records, settings.max_scan_records)

    if lead_ids:
        ids = [part.strip() for part in lead_ids.split(",") if part.strip()][:limit]
    else:
        leads = await fetch_list(client, "leads", params=lead_query(limit, campaign_id), limit=limit)
        ids = [r.get("id") for r in leads.records if r.get("id") is not None]

    success_filter = SuccessFilter(settings.success_terms) if success_only else None
    prober = MultiSourceProber(client, pacer=pacer, success_filter=success_filter)
    results = await prober.scan(ids, DEFAULT_RESULT_SOURCES)

    inventory = build_result_inventory(results, sample_size=sample)
    failed = sum(1 for a in inventory["diag"] if a["error"])
    if failed:
        logger.warning("Result field scan: %d of %d probes failed", failed, len(inventory["diag"]))
    return {"ok": True, **inventory}
