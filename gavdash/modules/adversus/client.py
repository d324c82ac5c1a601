"""
Adversus REST API client: Basic-auth GET requests with a fixed timeout.
Every failure (transport, timeout, non-2xx) surfaces as UpstreamFetchError.
"""

import logging
from dataclasses import dataclass

import httpx

from gavdash.config import Settings, get_settings
from gavdash.errors import UpstreamFetchError

logger = logging.getLogger(__name__)

BODY_EXCERPT_CHARS = 2000


@dataclass
class UpstreamResponse:
    status: int
    url: str
    body: object


def _parse_body(response: httpx.Response) -> object:
    try:
        return response.json()
    except ValueError:
        return response.text


class AdversusClient:
    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=httpx.BasicAuth(username, password),
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "AdversusClient":
        settings = settings or get_settings()
        if not settings.adversus_api_user:
            logger.warning("ADVERSUS_API_USER not set, upstream calls will be rejected")
        return cls(
            base_url=settings.adversus_api_base,
            username=settings.adversus_api_user,
            password=settings.adversus_api_password,
            timeout=settings.upstream_timeout_seconds,
        )

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def get_json(self, path: str, params: dict | None = None) -> UpstreamResponse:
        url = self.url_for(path)
        try:
            response = await self._client.get(f"/{path.lstrip('/')}", params=params)
        except httpx.TimeoutException as e:
            logger.warning("Upstream timeout on %s after %ss", url, self.timeout)
            raise UpstreamFetchError(
                f"upstream request timed out after {self.timeout:g}s", url=url,
            ) from e
        except httpx.HTTPError as e:
            logger.warning("Upstream transport error on %s: %s", url, e)
            raise UpstreamFetchError(f"upstream request failed: {e}", url=url) from e

        full_url = str(response.request.url)
        if not response.is_success:
            excerpt = response.text[:BODY_EXCERPT_CHARS]
            logger.warning("Upstream %s returned %d", full_url, response.status_code)
            raise UpstreamFetchError(
                f"upstream returned HTTP {response.status_code}",
                status=response.status_code,
                url=full_url,
                body=excerpt,
            )

        return UpstreamResponse(status=response.status_code, url=full_url, body=_parse_body(response))

    async def fetch_contact(self, contact_id) -> dict | None:
        """Fetch one contact; unwraps the {"contacts": [...]} / {"data": ...} envelopes."""
        response = await self.get_json(f"contacts/{contact_id}")
        body = response.body
        if isinstance(body, dict):
            for key in ("contact", "data"):
                if isinstance(body.get(key), dict):
                    return body[key]
            for key in ("contacts", "data", "items"):
                if isinstance(body.get(key), list) and body[key]:
                    first = body[key][0]
                    return first if isinstance(first, dict) else None
            return body
        if isinstance(body, list) and body and isinstance(body[0], dict):
            return body[0]
        return None

    async def aclose(self) -> None:
        await self._client.aclose()
