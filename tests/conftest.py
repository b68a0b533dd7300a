import json

import httpx
import pytest
from fastapi.testclient import TestClient

from config import settings
from main import app, get_transport


class FakeGemini:
    """Stands in for the chat completion endpoint and records what it was sent."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = None
        self.content = ""

    def reply(self, content):
        self.status_code = 200
        self.content = content
        self.body = None

    def respond(self, body):
        self.status_code = 200
        self.body = body

    def fail(self, status_code, body="upstream exploded"):
        self.status_code = status_code
        self.body = body

    @property
    def last_payload(self):
        return json.loads(self.requests[-1].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text=self.body)
        if self.body is not None:
            return httpx.Response(200, json=self.body)
        return httpx.Response(
            200,
            json={
                "choices": [
                    {"index": 0, "message": {"role": "assistant", "content": self.content}}
                ]
            },
        )

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def gemini(api_key):
    fake = FakeGemini()
    app.dependency_overrides[get_transport] = lambda: fake.transport
    yield fake
    app.dependency_overrides.pop(get_transport, None)


@pytest.fixture
def client(gemini):
    return TestClient(app)
