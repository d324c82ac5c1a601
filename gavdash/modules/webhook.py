"""
Adversus Webhook Handler: acknowledges callbacks immediately, keeps them in the
debug buffer and persists them after the response has been sent.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse

from gavdash.dependencies import get_event_buffer, require_secret
from gavdash.modules.events.buffer import EventBuffer
from gavdash.modules.events.store import save_event

router = APIRouter()
logger = logging.getLogger(__name__)


def _event_type(body) -> str | None:
    if not isinstance(body, dict):
        return None
    for key in ("type", "event", "eventType"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


@router.post("/adversus", dependencies=[Depends(require_secret)])
async def receive_adversus_event(
    request: Request,
    background_tasks: BackgroundTasks,
    events: EventBuffer = Depends(get_event_buffer),
):
    """Receive an Adversus callback (lead_saved, call_ended, ...)."""
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"ok": False, "error": "invalid JSON body"})

    event_type = _event_type(body)
    events.push({
        "receivedAt": datetime.now(timezone.utc).isoformat(),
        "type": event_type,
        "body": body,
    })
    logger.info("Adversus webhook received: type=%s", event_type)

    background_tasks.add_task(save_event, event_type, body)
    return {"ok": True}
