"""
Dashboard API: flattened Adversus collections, leads optionally joined with
their contact.
"""

import logging

from fastapi import APIRouter, Depends, Query

from gavdash.config import Settings
from gavdash.dependencies import get_adversus_client, get_app_settings, require_secret
from gavdash.modules.leads.enrichment import join_records
from gavdash.modules.leads.fetcher import LeadList, fetch_list, lead_query

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_secret)])


def _list_response(result: LeadList, data: list[dict]) -> dict:
    return {
        "ok": True,
        "url": result.url,
        "total_count": result.total_count,
        "returned": len(data),
        "truncated": result.truncated,
        "data": data,
    }


@router.get("/leads")
async def list_leads(
    limit: int = Query(100, ge=1, le=1000),
    campaign_id: str | None = Query(None, alias="campaignId"),
    with_contacts: bool = Query(True, alias="withContacts"),
    client=Depends(get_adversus_client),
    settings: Settings = Depends(get_app_settings),
):
    """Leads, each with its contact attached under "contact"."""
    result = await fetch_list(client, "leads", params=lead_query(limit, campaign_id), limit=limit)
    data = result.records
    if with_contacts:
        data = await join_records(
            data,
            foreign_key="contactId",
            fetch_one=client.fetch_contact,
            batch_size=settings.contact_batch_size,
            attach_as="contact",
        )
    return _list_response(result, data)


@router.get("/campaigns")
async def list_campaigns(
    limit: int = Query(100, ge=1, le=1000),
    client=Depends(get_adversus_client),
):
    result = await fetch_list(client, "campaigns", limit=limit)
    return _list_response(result, result.records)
