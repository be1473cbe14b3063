import json
from urllib.parse import parse_qs, urlsplit

import pytest

from app.core.exceptions import (
    ConfigException,
    ContentBlockedException,
    NoContentException,
    ProviderAuthException,
    RateLimitException,
    UpstreamException,
)
from app.models.domain import GenerationOptions, Provider
from app.services.llm.gemini_adapter import SAFETY_SETTINGS, GeminiAdapter
from app.services.llm.prompt_compiler import compile_prompt
from app.services.llm.streaming import DONE_EVENT

from conftest import (
    GEMINI_TEST_KEY,
    FakeResponse,
    collect_stream_content,
    gemini_body,
    make_settings,
    sse_chunks,
    sse_events,
)


@pytest.fixture
def adapter(settings, session):
    session.post.return_value = FakeResponse(200, gemini_body())
    return GeminiAdapter(settings, session=session)


def test_generate_sends_combined_text_and_key_in_query(adapter, session, chef_input):
    pair = compile_prompt(chef_input)
    result = adapter.generate(pair)

    session.post.assert_called_once()
    url = session.post.call_args.args[0]
    kwargs = session.post.call_args.kwargs

    parts = urlsplit(url)
    assert parts.path.endswith("/models/gemini-1.5-flash:generateContent")
    assert parse_qs(parts.query)["key"] == [GEMINI_TEST_KEY]
    assert "Authorization" not in kwargs["headers"]

    payload = kwargs["json"]
    assert payload["contents"][0]["parts"][0]["text"] == f"{pair.system_prompt}\n\n{pair.user_prompt}"
    assert payload["generationConfig"] == {
        "temperature": 0.7,
        "maxOutputTokens": 2000,
        "topK": 40,
        "topP": 0.95,
    }
    assert payload["safetySettings"] == SAFETY_SETTINGS

    assert result.provider is Provider.GEMINI
    assert result.content == "Generated meta prompt"
    assert result.model == "gemini-1.5-flash"
    assert (result.usage.prompt, result.usage.completion, result.usage.total) == (90, 60, 150)


def test_safety_finish_reason_is_blocked(adapter, session, chef_input):
    session.post.return_value = FakeResponse(200, gemini_body(text="", finish_reason="SAFETY"))
    with pytest.raises(ContentBlockedException) as exc_info:
        adapter.generate(compile_prompt(chef_input))
    assert exc_info.value.status_code == 400
    assert exc_info.value.provider == "gemini"


def test_prompt_feedback_block(adapter, session, chef_input):
    session.post.return_value = FakeResponse(200, {"promptFeedback": {"blockReason": "OTHER"}})
    with pytest.raises(ContentBlockedException) as exc_info:
        adapter.generate(compile_prompt(chef_input))
    assert exc_info.value.reason == "OTHER"


@pytest.mark.parametrize("body", [
    {"candidates": []},
    {"candidates": [{"content": {"parts": []}, "finishReason": "STOP"}]},
    {"candidates": [{"content": {"parts": [{"text": ""}]}, "finishReason": "STOP"}]},
])
def test_empty_candidate_is_no_content(adapter, session, chef_input, body):
    session.post.return_value = FakeResponse(200, body)
    with pytest.raises(NoContentException) as exc_info:
        adapter.generate(compile_prompt(chef_input))
    assert exc_info.value.status_code == 502


def test_missing_usage_metadata_tolerated(adapter, session):
    session.post.return_value = FakeResponse(200, {
        "candidates": [{"content": {"parts": [{"text": "ok"}]}, "finishReason": "STOP"}]
    })
    result = adapter.complete_text("hello")
    assert result.content == "ok"
    assert result.usage.total is None


def test_missing_key_makes_no_call(session, chef_input):
    adapter = GeminiAdapter(make_settings(gemini_api_key=""), session=session)
    with pytest.raises(ConfigException) as exc_info:
        adapter.generate(compile_prompt(chef_input))
    assert "GEMINI_API_KEY" in exc_info.value.message
    session.post.assert_not_called()


@pytest.mark.parametrize("status, exc_type", [
    (401, ProviderAuthException),
    (403, ProviderAuthException),
    (429, RateLimitException),
    (500, UpstreamException),
])
def test_error_classification(adapter, session, chef_input, status, exc_type):
    session.post.return_value = FakeResponse(status, {"error": {"message": "nope"}})
    with pytest.raises(exc_type):
        adapter.generate(compile_prompt(chef_input))
    assert session.post.call_count == 1


def test_options_map_to_generation_config(adapter, session):
    adapter.complete_text("hello", GenerationOptions(model="gemini-1.5-pro", temperature=0.2, max_tokens=64))

    url = session.post.call_args.args[0]
    config = session.post.call_args.kwargs["json"]["generationConfig"]
    assert "/models/gemini-1.5-pro:generateContent" in url
    assert config["temperature"] == 0.2
    assert config["maxOutputTokens"] == 64


def test_stream_is_translated_to_content_events(adapter, session, chef_input):
    response = FakeResponse(200, chunks=sse_chunks(
        gemini_body(text="Hello"),
        "not json",
        gemini_body(text=" world"),
    ))
    session.post.return_value = response

    body = list(adapter.open_stream(compile_prompt(chef_input)))

    url = session.post.call_args.args[0]
    assert ":streamGenerateContent?" in url
    assert parse_qs(urlsplit(url).query)["alt"] == ["sse"]

    assert body[0] == b'data: {"content": "Hello"}\n\n'
    assert body[-1] == DONE_EVENT
    assert collect_stream_content(body) == "Hello world"
    assert response.closed is True


def test_stream_safety_block_emits_error_then_done(adapter, session):
    session.post.return_value = FakeResponse(200, chunks=sse_chunks(
        gemini_body(text="Partial"),
        gemini_body(text="", finish_reason="SAFETY"),
        gemini_body(text="never sent"),
    ))

    body = list(adapter.stream_text("hello"))

    assert len(body) == 3
    assert json.loads(body[1][len(b"data: "):]) == {"error": ContentBlockedException("gemini").message}
    assert body[2] == DONE_EVENT


@pytest.mark.parametrize("reason", ["SAFETY", "OTHER"])
def test_stream_prompt_feedback_block_emits_error_then_done(adapter, session, reason):
    response = FakeResponse(200, chunks=sse_chunks({"promptFeedback": {"blockReason": reason}}))
    session.post.return_value = response

    body = list(adapter.stream_text("hello"))

    assert sse_events(body) == [{"error": ContentBlockedException("gemini").message}]
    assert body[-1] == DONE_EVENT
    assert response.closed is True


@pytest.mark.parametrize("events", [
    [{"candidates": [{"finishReason": "STOP"}]}],
    [gemini_body(text="")],
    [],
])
def test_stream_without_text_emits_no_content_error(adapter, session, events):
    session.post.return_value = FakeResponse(200, chunks=sse_chunks(*events))

    body = list(adapter.stream_text("hello"))

    assert sse_events(body) == [{"error": NoContentException("gemini").message}]
    assert body[-1] == DONE_EVENT
    assert collect_stream_content(body) == ""


def test_stream_response_released_when_never_iterated(adapter, session, chef_input):
    response = FakeResponse(200, chunks=sse_chunks(gemini_body(text="Hello")))
    session.post.return_value = response

    body = adapter.open_stream(compile_prompt(chef_input))
    body.close()

    assert response.closed is True
