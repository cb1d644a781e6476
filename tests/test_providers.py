import json

import httpx
import pytest

from edutext.catalog import ContentType, Provider
from edutext.claude_client import ClaudeClient
from edutext.domain import GenerationRequest
from edutext.errors import ProviderError, UnsupportedProviderError, ValidationError
from edutext.gemini_client import GeminiClient
from edutext.prompts import compile_prompt
from edutext.providers import (
    MOCK_TOKENS_USED,
    ProviderAdapter,
    ProviderClients,
    build_provider_clients,
    is_configured_credential,
    select_mock_document,
)
from edutext.settings import Settings

from conftest import FakeBackend


def _settings(**kw):
    return Settings(_env_file=None, **kw)


def _prompt(content_type):
    return compile_prompt(GenerationRequest(provider=Provider.GEMINI, prompt="spring", content_type=content_type))


@pytest.mark.parametrize("value,expected", [
    (None, False),
    ("", False),
    ("   ", False),
    ("your_gemini_api_key_here", False),
    ("PLACEHOLDER", False),
    ("AIzaSyRealLookingKey", True),
])
def test_is_configured_credential(value, expected):
    assert is_configured_credential(value) is expected


@pytest.mark.parametrize("content_type,key", [
    (ContentType.READING, "reading"),
    (ContentType.VOCABULARY, "vocabulary"),
    (ContentType.GRAMMAR, "vocabulary"),
    (ContentType.QUESTIONS, "questions"),
    (ContentType.ANSWERS, "answers"),
    (ContentType.VOCABULARY_ANALYSIS, "vocabulary-analysis"),
])
def test_mock_selection_follows_task_line(content_type, key):
    assert select_mock_document(_prompt(content_type)) == key


def test_build_clients_skips_missing_and_placeholder_keys():
    clients = build_provider_clients(_settings(GEMINI_API_KEY="your_gemini_api_key_here", CLAUDE_API_KEY=None))
    assert clients.gemini is None
    assert clients.claude is None


def test_build_clients_creates_live_backends():
    clients = build_provider_clients(_settings(GEMINI_API_KEY="g-key", CLAUDE_API_KEY="c-key"))
    assert isinstance(clients.gemini, GeminiClient)
    assert isinstance(clients.claude, ClaudeClient)


def test_build_clients_tolerates_init_failure():
    # Vertex without a project cannot be built
    clients = build_provider_clients(_settings(GEMINI_API_KEY="g-key", GEMINI_PROVIDER="vertex"))
    assert clients.gemini is None


@pytest.mark.asyncio
async def test_invoke_without_backend_returns_mock():
    adapter = ProviderAdapter(ProviderClients())
    reply = await adapter.invoke("gemini", _prompt(ContentType.READING))
    assert reply.mock is True
    assert reply.provider is Provider.GEMINI
    assert reply.tokens_used == MOCK_TOKENS_USED
    assert json.loads(reply.text)["title"]


@pytest.mark.asyncio
async def test_invoke_uses_live_backend_once():
    backend = FakeBackend(text="hello", usage=None)
    adapter = ProviderAdapter(ProviderClients(claude=backend))
    reply = await adapter.invoke(Provider.CLAUDE, "prompt text")
    assert backend.prompts == ["prompt text"]
    assert reply.text == "hello"
    assert reply.tokens_used is None
    assert reply.mock is False


@pytest.mark.asyncio
async def test_invoke_wraps_backend_failure_without_retry():
    backend = FakeBackend(error=httpx.ConnectError("boom"))
    other = FakeBackend()
    adapter = ProviderAdapter(ProviderClients(gemini=backend, claude=other))
    with pytest.raises(ProviderError) as info:
        await adapter.invoke("gemini", "p")
    assert info.value.provider == "gemini"
    assert "boom" in info.value.message
    assert len(backend.prompts) == 1
    assert other.prompts == []


@pytest.mark.asyncio
async def test_invoke_rejects_unknown_provider():
    backend = FakeBackend()
    adapter = ProviderAdapter(ProviderClients(gemini=backend))
    with pytest.raises(UnsupportedProviderError) as info:
        await adapter.invoke("openai", "p")
    assert isinstance(info.value, ValidationError)
    assert isinstance(info.value, ProviderError)
    assert backend.prompts == []


def test_status_reflects_backend_presence():
    adapter = ProviderAdapter(ProviderClients(gemini=FakeBackend()))
    status = adapter.status()
    assert status["gemini"]["available"] is True
    assert "lastCheckedAt" in status["gemini"]
    assert status["claude"] == {"available": False}


@pytest.mark.asyncio
async def test_gemini_client_wire_format():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "candidates": [{"content": {"parts": [{"text": "{\"title\": \"G\"}"}]}}],
            "usageMetadata": {"candidatesTokenCount": 17},
        })

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = GeminiClient(config=_settings(GEMINI_API_KEY="g-key", EDUTEXT_TEMPERATURE=0.2), client=http)
    out = await client.generate("hello")
    await client.aclose()
    assert out.text == '{"title": "G"}'
    assert out.usage == 17
    assert "key=g-key" in seen["url"]
    assert seen["body"]["contents"][0]["parts"][0]["text"] == "hello"
    assert seen["body"]["generationConfig"]["temperature"] == 0.2


@pytest.mark.asyncio
async def test_gemini_client_raises_on_http_error():
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(429, json={"error": "quota"})))
    client = GeminiClient(config=_settings(GEMINI_API_KEY="g-key"), client=http)
    with pytest.raises(httpx.HTTPStatusError):
        await client.generate("hello")


@pytest.mark.asyncio
async def test_claude_client_wire_format():
    seen = {}

    def handler(request):
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "content": [{"type": "text", "text": "part one "}, {"type": "text", "text": "part two"}],
            "usage": {"input_tokens": 5, "output_tokens": 9},
        })

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = ClaudeClient(config=_settings(CLAUDE_API_KEY="c-key", CLAUDE_MODEL="claude-test"), client=http)
    out = await client.generate("hi")
    assert out.text == "part one part two"
    assert out.usage == 9
    assert seen["headers"]["x-api-key"] == "c-key"
    assert seen["body"]["model"] == "claude-test"
    assert seen["body"]["messages"] == [{"role": "user", "content": "hi"}]


@pytest.mark.asyncio
async def test_claude_client_unexpected_payload():
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"oops": True})))
    client = ClaudeClient(config=_settings(CLAUDE_API_KEY="c-key"), client=http)
    with pytest.raises(RuntimeError, match="Unexpected Claude response"):
        await client.generate("hi")


def test_mock_selection_ignores_learner_text():
    prompt = compile_prompt(GenerationRequest(
        provider=Provider.GEMINI,
        prompt="answer key with questions and answers for a reading passage",
        content_type=ContentType.GRAMMAR,
    ))
    assert select_mock_document(prompt) == "vocabulary"
