import contextvars
import json
import logging

import pytest

from app.core.logging import (
    REDACTED,
    HumanReadableFormatter,
    StructuredJSONFormatter,
    log_event,
    scrub_context,
    set_request_id,
)
from app.services.llm.cost import estimate_cost, estimate_costs
from app.services.llm.observer import GenerationObserver, mask_secret, redact_url


@pytest.mark.parametrize("value, expected", [
    (None, "NOT_FOUND"),
    ("", "NOT_FOUND"),
    ("short", "..."),
    ("sk-proj-abcdef123456", "sk-pro..."),
])
def test_mask_secret(value, expected):
    assert mask_secret(value) == expected


def test_redact_url_hides_key():
    url = "https://example.test/models/m:generateContent?alt=sse&key=AIza-secret"
    redacted = redact_url(url)
    assert "AIza-secret" not in redacted
    assert "key=***" in redacted
    assert "alt=sse" in redacted


def test_redact_url_without_query():
    assert redact_url("https://api.openai.com/v1/chat/completions") == \
        "https://api.openai.com/v1/chat/completions"


def test_key_status_never_exposes_key():
    status = GenerationObserver().key_status("openai", "sk-test-openai-0123456789abcdef")
    assert status == {"configured": True, "keyPrefix": "sk-tes...", "keyLength": 31}


def test_key_status_unconfigured():
    status = GenerationObserver().key_status("gemini", None)
    assert status == {"configured": False, "keyPrefix": "NOT_FOUND", "keyLength": 0}


def test_request_started_logs_redacted_url(caplog):
    with caplog.at_level(logging.INFO, logger="app.services.llm"):
        GenerationObserver().request_started(
            "gemini", "gemini-1.5-flash", "https://example.test/m:generateContent?key=AIza-secret"
        )

    record = caplog.records[-1]
    assert record.event == "llm_request_started"
    assert "AIza-secret" not in record.context["url"]


def test_request_failed_logs_error_type(caplog):
    with caplog.at_level(logging.ERROR, logger="app.services.llm"):
        GenerationObserver().request_failed("openai", "gpt-4o-mini", RuntimeError("boom"), status_code=500)

    record = caplog.records[-1]
    assert record.levelno == logging.ERROR
    assert record.context["error_type"] == "RuntimeError"
    assert record.context["status_code"] == 500


def test_scrub_context_nested():
    context = {"provider": "openai", "headers": {"Authorization": "Bearer sk-x"}, "items": [{"api_key": "k"}]}
    assert scrub_context(context) == {
        "provider": "openai",
        "headers": {"Authorization": REDACTED},
        "items": [{"api_key": REDACTED}],
    }


def test_estimate_cost_per_provider():
    assert estimate_cost(1000, "openai") == pytest.approx(0.01 + 2 * 0.03)
    assert estimate_cost(1000, "gemini") == pytest.approx(0.00025 + 2 * 0.0005)


def test_estimate_costs_covers_every_provider():
    costs = estimate_costs(500)
    assert set(costs) == {"openai", "gemini"}
    assert costs["openai"] > costs["gemini"] > 0


def _format_in_request(formatter, request_id):
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "hello", None, None)
    record.context = {"api_key": "secret"}

    def run():
        set_request_id(request_id)
        return formatter.format(record)

    return contextvars.copy_context().run(run)


def test_json_formatter_includes_request_id():
    data = json.loads(_format_in_request(StructuredJSONFormatter(), "req_abc"))
    assert data["request_id"] == "req_abc"
    assert data["message"] == "hello"
    assert data["context"]["api_key"] == REDACTED


def test_text_formatter_includes_request_id():
    text = _format_in_request(HumanReadableFormatter(), "req_abc")
    assert "  request_id: req_abc" in text
    assert "secret" not in text


def test_log_event_operation_reaches_formatter():
    formatter = StructuredJSONFormatter()
    captured = []

    class Capture(logging.Handler):
        def emit(self, record):
            captured.append(formatter.format(record))

    handler = Capture()
    target = logging.getLogger("app.test.operation")
    target.addHandler(handler)
    target.setLevel(logging.INFO)
    try:
        log_event("INFO", "app.test.operation", "test", operation="generate_prompt", message="go")
    finally:
        target.removeHandler(handler)
        target.setLevel(logging.NOTSET)

    assert json.loads(captured[0])["operation"] == "generate_prompt"
