"""Pytest fixtures for gavdash tests."""

import pytest
from fastapi.testclient import TestClient

from gavdash.config import Settings
from gavdash.dependencies import get_pacer
from gavdash.errors import UpstreamFetchError
from gavdash.main import create_app
from gavdash.modules.adversus.client import UpstreamResponse
from gavdash.modules.fields.pacing import NoDelayPacer

SECRET = "s3cret"


class FakeAdversusClient:
    """Serves canned bodies by path; unknown paths answer 404."""

    base_url = "https://api.test/v1"

    def __init__(self, routes: dict | None = None):
        self.routes = routes or {}
        self.calls: list[tuple[str, dict | None]] = []

    async def get_json(self, path: str, params: dict | None = None) -> UpstreamResponse:
        self.calls.append((path, params))
        url = f"{self.base_url}/{path}"
        if path not in self.routes:
            raise UpstreamFetchError("upstream returned HTTP 404", status=404, url=url, body="not found")
        body = self.routes[path]
        if isinstance(body, Exception):
            raise body
        return UpstreamResponse(status=200, url=url, body=body)

    async def fetch_contact(self, contact_id) -> dict | None:
        response = await self.get_json(f"contacts/{contact_id}")
        return response.body

    @property
    def paths_called(self) -> list[str]:
        return [path for path, _ in self.calls]


@pytest.fixture
def make_client():
    """Factory for FakeAdversusClient instances."""
    return FakeAdversusClient


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        adversus_webhook_secret=SECRET,
        database_url="",
        probe_delay_seconds=0,
        success_terms=["sale", "won"],
    )


@pytest.fixture
def fake_upstream() -> FakeAdversusClient:
    return FakeAdversusClient()


@pytest.fixture
def app(settings: Settings, fake_upstream: FakeAdversusClient):
    application = create_app(settings, adversus_client=fake_upstream)
    application.dependency_overrides[get_pacer] = NoDelayPacer
    return application


@pytest.fixture
def http(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"x-adversus-secret": SECRET}


@pytest.fixture
def phone_leads() -> list[dict]:
    """10 leads: phone directly on 6, nested in resultData on 2, absent on 2."""
    leads = []
    for i in range(10):
        lead = {"id": i + 1, "campaignId": 7}
        if i < 6:
            lead["phone"] = f"+45 20 00 00 0{i}"
        elif i < 8:
            lead["resultData"] = {"phone": f"+45 30 00 00 0{i}"}
        leads.append(lead)
    return leads
