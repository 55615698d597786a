import json

import httpx
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.engine.chat import ChatRelay
from src.engine.providers.openrouter_provider import OpenRouterProvider
from src.engine.storage import PROTECTED_KEYS, default_portfolio
from src.main import app


class FakeStorage:
    """In-memory stand-in for PortfolioStorage."""

    def __init__(self):
        self.portfolios: dict[str, dict] = {}

    async def get_portfolio(self, username):
        doc = self.portfolios.get(username.lower())
        return dict(doc) if doc else None

    async def create_portfolio(self, username, email):
        username = username.lower()
        if username not in self.portfolios:
            self.portfolios[username] = {
                **default_portfolio(username, email),
                "createdAt": "2026-01-01T00:00:00+00:00",
                "updatedAt": "2026-01-01T00:00:00+00:00",
            }
        return dict(self.portfolios[username])

    async def update_portfolio(self, username, updates):
        doc = self.portfolios.get(username.lower())
        if doc is None:
            return None
        doc.update({k: v for k, v in updates.items() if k not in PROTECTED_KEYS})
        doc["updatedAt"] = "2026-01-02T00:00:00+00:00"
        return dict(doc)


class UpstreamStub:
    """Scripted chat completion endpoint behind an httpx.MockTransport."""

    def __init__(self):
        self.status_code = 200
        self.body: dict = {"choices": [{"message": {"role": "assistant", "content": "Hello!"}}]}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest_asyncio.fixture
async def upstream():
    return UpstreamStub()


@pytest_asyncio.fixture
async def storage():
    return FakeStorage()


@pytest_asyncio.fixture
async def client(upstream, storage):
    provider = OpenRouterProvider(
        base_url="https://upstream.test/api/v1",
        transport=httpx.MockTransport(upstream.handler),
    )
    app.state.chat_relay = ChatRelay(provider)
    app.state.storage = storage
    app.state.api_token = None
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.state.chat_relay = None
    app.state.storage = None
