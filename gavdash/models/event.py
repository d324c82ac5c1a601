from datetime import datetime
from typing import Any

from pydantic import BaseModel


class WebhookEvent(BaseModel):
    id: int
    received_at: datetime
    event_type: str | None = None
    # Any JSON value the webhook accepted: object, array or scalar.
    payload: Any = None
