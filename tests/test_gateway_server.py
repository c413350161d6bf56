import httpx
from fastapi.testclient import TestClient

from riyl_chat.ai.client import AIClient, AIResponse, is_quota_error
from riyl_chat.ai.prompts import build_riyl_prompt
from riyl_chat.config import AIConfig
from riyl_chat.gateway.server import (
    INTERNAL_ERROR_MESSAGE,
    NO_PROMPT_MESSAGE,
    QUOTA_MESSAGE,
    create_app,
)


class _StatusError(Exception):
    def __init__(self, status_code: int):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class _FakeAIClient(AIClient):
    def __init__(self, result):
        self.result = result
        self.calls: list[dict] = []

    async def complete(self, system, prompt, model, max_tokens=1024, temperature=0.7):
        self.calls.append({"system": system, "prompt": prompt, "model": model})
        if isinstance(self.result, Exception):
            raise self.result
        return AIResponse(text=self.result)


def _client(result, **ai_overrides):
    ai = _FakeAIClient(result)
    config = AIConfig(**ai_overrides)
    return TestClient(create_app(ai, config)), ai


def test_chat_wraps_prompt_in_riyl_template():
    client, ai = _client("1. Thom Yorke...")

    resp = client.post("/api/chat", json={"prompt": "Radiohead"})

    assert resp.status_code == 200
    assert resp.json() == {"response": "1. Thom Yorke..."}
    assert ai.calls == [
        {
            "system": "You are a helpful chatbot.",
            "prompt": "Give me 9 related music recommendations RIYL Radiohead",
            "model": "gpt-3.5-turbo",
        }
    ]


def test_recommendation_count_is_configurable():
    client, ai = _client("ok", recommendation_count=5, model="claude-test")
    client.post("/api/chat", json={"prompt": "Low"})
    assert ai.calls[0]["prompt"] == build_riyl_prompt("Low", 5)
    assert ai.calls[0]["model"] == "claude-test"


def test_missing_or_empty_prompt_is_400():
    client, ai = _client("unused")
    for body in ({}, {"prompt": ""}, {"prompt": None}):
        resp = client.post("/api/chat", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"response": NO_PROMPT_MESSAGE}
    resp = client.post("/api/chat")
    assert resp.status_code == 400
    assert ai.calls == []


def test_non_string_prompt_is_used_as_text():
    client, ai = _client("ok")
    resp = client.post("/api/chat", json={"prompt": 5})
    assert resp.status_code == 200
    assert ai.calls[0]["prompt"] == build_riyl_prompt("5")


def test_malformed_body_is_400():
    client, ai = _client("unused")
    for content in (b"{not json", b"[1, 2]", b'"Radiohead"'):
        resp = client.post(
            "/api/chat", content=content, headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400
        assert resp.json() == {"response": NO_PROMPT_MESSAGE}
    assert ai.calls == []


def test_wrong_method_is_405():
    client, _ = _client("unused")
    resp = client.get("/api/chat")
    assert resp.status_code == 405
    assert resp.json() == {"response": "Method Not Allowed"}


def test_upstream_429_maps_to_quota_message():
    client, _ = _client(_StatusError(429))
    resp = client.post("/api/chat", json={"prompt": "x"})
    assert resp.status_code == 429
    assert resp.json() == {"response": QUOTA_MESSAGE}


def test_upstream_failure_is_500():
    for error in (_StatusError(503), RuntimeError("boom")):
        client, _ = _client(error)
        resp = client.post("/api/chat", json={"prompt": "x"})
        assert resp.status_code == 500
        assert resp.json() == {"response": INTERNAL_ERROR_MESSAGE}


def test_empty_upstream_reply_is_500():
    client, _ = _client("")
    resp = client.post("/api/chat", json={"prompt": "x"})
    assert resp.status_code == 500
    assert resp.json() == {"response": INTERNAL_ERROR_MESSAGE}


def test_health():
    client, _ = _client("unused")
    assert client.get("/health").json() == {"status": "ok"}


def test_is_quota_error_reads_status_code():
    assert is_quota_error(_StatusError(429))
    assert not is_quota_error(_StatusError(500))
    assert not is_quota_error(ValueError("x"))
    assert not is_quota_error(httpx.ConnectError("x"))
