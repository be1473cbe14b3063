import json
from unittest.mock import MagicMock

import pytest
import requests
from httpx import AsyncClient, ASGITransport

from app.core.config import Settings
from app.models.domain import StructuredPromptInput
from app.services.llm.streaming import iter_sse_data

OPENAI_TEST_KEY = "sk-test-openai-0123456789abcdef"
GEMINI_TEST_KEY = "AIza-test-gemini-0123456789"


class FakeResponse:
    """Stand-in for requests.Response with just what the adapters touch."""

    def __init__(self, status_code=200, payload=None, chunks=None):
        self.status_code = status_code
        self._payload = payload
        self._chunks = chunks or []
        self.closed = False

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload

    def iter_content(self, chunk_size=None):
        for chunk in self._chunks:
            yield chunk

    def close(self):
        self.closed = True


def sse_chunks(*events):
    """Encode payloads as upstream SSE byte chunks; strings are sent verbatim."""
    chunks = []
    for event in events:
        data = event if isinstance(event, str) else json.dumps(event)
        chunks.append(f"data: {data}\n\n".encode("utf-8"))
    return chunks


def collect_stream_content(chunks):
    """Reassemble the text of an SSE body from OpenAI delta or `{"content"}` events, up to [DONE]."""
    parts = []
    for data in iter_sse_data(chunks):
        if data == "[DONE]":
            break
        try:
            parsed = json.loads(data)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed.get("content"), str):
            parts.append(parsed["content"])
            continue
        choices = parsed.get("choices") or []
        if choices:
            parts.append((choices[0].get("delta") or {}).get("content") or "")
    return "".join(parts)


def sse_events(body):
    """Parse every JSON `data:` event of an SSE body."""
    return [json.loads(data) for data in iter_sse_data(body) if data and data != "[DONE]"]


def openai_body(content="Generated meta prompt", model="gpt-4o-mini"):
    return {
        "id": "chatcmpl-test",
        "model": model,
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 120, "completion_tokens": 80, "total_tokens": 200},
    }


def gemini_body(text="Generated meta prompt", finish_reason="STOP"):
    return {
        "candidates": [{
            "content": {"parts": [{"text": text}], "role": "model"},
            "finishReason": finish_reason,
        }],
        "usageMetadata": {
            "promptTokenCount": 90,
            "candidatesTokenCount": 60,
            "totalTokenCount": 150,
        },
    }


def make_settings(**overrides):
    values = {
        "openai_api_key": OPENAI_TEST_KEY,
        "gemini_api_key": GEMINI_TEST_KEY,
        "default_provider": "openai",
        "_env_file": None,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def session():
    """HTTP session whose post() is a spy returning a successful OpenAI body."""
    mock_session = MagicMock(spec=requests.Session)
    mock_session.post.return_value = FakeResponse(200, openai_body())
    return mock_session


@pytest.fixture
def chef_input():
    return StructuredPromptInput(role="Chef", instruction="Write a recipe")


@pytest.fixture
def tutor_input():
    return StructuredPromptInput(
        title="Calculus tutor",
        role="Tutor",
        personality="Patient",
        instruction="Explain derivatives",
        context="High-school student",
        example="f(x)=x^2 -> 2x",
    )


@pytest.fixture
async def async_client(settings, session):
    """Async HTTP client against the app with settings and HTTP session overridden."""
    from app.main import app
    from app.api.deps import get_app_settings, get_http_session

    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_http_session] = lambda: session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
