"""Tests for the Groq chat-completion client."""

from __future__ import annotations

import json

import httpx
import pytest

from atlas_study.client import (
    CompletionClient,
    close_completion_client,
    get_completion_client,
    temperature_for,
)
from atlas_study.errors import CompletionError, ErrorCategory
from atlas_study.models.content import ChatMessage
from tests.conftest import completion_body, json_transport

URL = "https://api.groq.com/openai/v1/chat/completions"
MESSAGES = [ChatMessage(role="system", content="sys"), ChatMessage(role="user", content="hi")]


def _client(handler) -> CompletionClient:
    return CompletionClient(
        "gsk-test-1234", model="llama-3.1-8b-instant", api_url=URL,
        transport=json_transport(handler),
    )


class TestComplete:
    @pytest.mark.asyncio
    async def test_success_sends_request_shape(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers["authorization"]
            return 200, completion_body('{"summary": "ok"}')

        client = _client(handler)
        text = await client.complete(MESSAGES, temperature=0.4)

        assert text == '{"summary": "ok"}'
        assert seen["auth"] == "Bearer gsk-test-1234"
        assert seen["body"] == {
            "model": "llama-3.1-8b-instant",
            "messages": [{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}],
            "temperature": 0.4,
            "max_tokens": 4096,
            "stream": False,
        }
        await client.aclose()

    @pytest.mark.asyncio
    async def test_empty_choices_yield_empty_text(self):
        client = _client(lambda request: (200, {"choices": []}))
        assert await client.complete(MESSAGES, temperature=0.5) == ""
        await client.aclose()

    @pytest.mark.asyncio
    async def test_error_status_message(self):
        client = _client(lambda request: (429, {"error": {"message": "Rate limit reached"}}))
        with pytest.raises(CompletionError) as exc_info:
            await client.complete(MESSAGES, temperature=0.5)
        assert str(exc_info.value) == "Groq API error: 429 — Rate limit reached"
        assert exc_info.value.status_code == 429
        await client.aclose()

    @pytest.mark.asyncio
    async def test_error_without_body(self):
        client = _client(lambda request: (502, b"bad gateway"))
        with pytest.raises(CompletionError, match="Groq API error: 502 — Unknown error"):
            await client.complete(MESSAGES, temperature=0.5)
        await client.aclose()

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = CompletionClient(
            "gsk-test-1234", model="m", api_url=URL, transport=httpx.MockTransport(handler),
        )
        with pytest.raises(CompletionError) as exc_info:
            await client.complete(MESSAGES, temperature=0.5)
        assert exc_info.value.category == ErrorCategory.NETWORK_ERROR
        await client.aclose()


class TestConstruction:
    def test_missing_key_fails_fast(self):
        with pytest.raises(CompletionError) as exc_info:
            CompletionClient("", model="m", api_url=URL)
        assert exc_info.value.category == ErrorCategory.API_KEY_MISSING

    def test_singleton_from_env(self, monkeypatch):
        monkeypatch.setenv("GROQ_MODEL", "llama-3.3-70b-versatile")
        client = get_completion_client()
        assert client is get_completion_client()
        assert client.model == "llama-3.3-70b-versatile"

    def test_singleton_without_key(self, monkeypatch):
        monkeypatch.delenv("GROQ_API_KEY")
        with pytest.raises(CompletionError):
            get_completion_client()

    @pytest.mark.asyncio
    async def test_close(self):
        get_completion_client()
        assert await close_completion_client() is True
        assert await close_completion_client() is False


class TestTemperatures:
    def test_known_features(self):
        assert temperature_for("summary") == 0.4
        assert temperature_for("quiz") == 0.5
        assert temperature_for("chat") == 0.6

    def test_unknown_feature(self):
        with pytest.raises(ValueError):
            temperature_for("essay")
