"""
Request-scoped dependencies: shared secret check and access to the objects the
application context owns (settings, event buffer, upstream client).
"""

import hmac

from fastapi import Request

from gavdash.config import Settings
from gavdash.errors import AuthError
from gavdash.modules.adversus.client import AdversusClient
from gavdash.modules.events.buffer import EventBuffer
from gavdash.modules.fields.pacing import IntervalPacer

SECRET_HEADER = "x-adversus-secret"
SECRET_QUERY_PARAMS = ("secret", "key")


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_event_buffer(request: Request) -> EventBuffer:
    return request.app.state.events


def get_adversus_client(request: Request) -> AdversusClient:
    client = request.app.state.adversus
    if client is None:
        client = AdversusClient.from_settings(request.app.state.settings)
        request.app.state.adversus = client
    return client


def get_pacer(request: Request) -> IntervalPacer:
    """Fresh pacer per request: pacing is never shared across requests."""
    return IntervalPacer(request.app.state.settings.probe_delay_seconds)


def provided_secret(request: Request) -> str | None:
    secret = request.headers.get(SECRET_HEADER)
    if secret:
        return secret
    for name in SECRET_QUERY_PARAMS:
        secret = request.query_params.get(name)
        if secret:
            return secret
    return None


def secret_matches(provided: str | None, expected: str) -> bool:
    if not expected or not provided:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())


async def require_secret(request: Request) -> None:
    expected = request.app.state.settings.adversus_webhook_secret
    if not expected:
        raise AuthError("server secret not configured")
    provided = provided_secret(request)
    if provided is None:
        raise AuthError("missing secret")
    if not secret_matches(provided, expected):
        raise AuthError("invalid secret")
