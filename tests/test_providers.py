import json

import httpx
import pytest

from errors import ConfigurationError, ContentRejectedError, ProviderError
from providers import BytezProvider, DocumentationProvider, GeminiProvider, MistralProvider, build_registry


class Recorder:
    """MockTransport handler that replays canned responses and keeps the requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}]}


def mistral_body(content, finish_reason="stop"):
    return {"choices": [{"message": {"role": "assistant", "content": content}, "finish_reason": finish_reason}]}


def make(provider_cls, handler, fast_retry, **kwargs):
    return provider_cls(api_key="test-key", retry_policy=fast_retry, transport=httpx.MockTransport(handler), **kwargs)


# ==================== GEMINI ====================

@pytest.mark.asyncio
async def test_gemini_returns_candidate_text(snapshot, fast_retry):
    handler = Recorder(httpx.Response(200, json=gemini_body("# Widget docs\n")))
    provider = make(GeminiProvider, handler, fast_retry)

    assert await provider.generate(snapshot) == "# Widget docs"

    request = handler.requests[0]
    assert request.url.path.endswith("/gemini-1.5-flash:generateContent")
    assert request.headers["x-goog-api-key"] == "test-key"
    body = json.loads(request.content)
    assert "Repository Name: widget" in body["contents"][0]["parts"][0]["text"]


@pytest.mark.asyncio
async def test_gemini_empty_output_is_retried_then_fails(snapshot, fast_retry, sleep_recorder):
    handler = Recorder(httpx.Response(200, json=gemini_body("   ")))
    provider = make(GeminiProvider, handler, fast_retry)

    with pytest.raises(ProviderError, match="empty response"):
        await provider.generate(snapshot)

    assert len(handler.requests) == 3
    assert sleep_recorder.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_gemini_safety_block_is_not_retried(snapshot, fast_retry):
    handler = Recorder(httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}}))
    provider = make(GeminiProvider, handler, fast_retry)

    with pytest.raises(ContentRejectedError):
        await provider.generate(snapshot)
    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_gemini_recovers_after_server_error(snapshot, fast_retry):
    handler = Recorder(
        httpx.Response(500, text="internal"),
        httpx.Response(200, json=gemini_body("# Recovered")),
    )
    provider = make(GeminiProvider, handler, fast_retry)

    assert await provider.generate(snapshot) == "# Recovered"
    assert len(handler.requests) == 2


@pytest.mark.asyncio
async def test_gemini_malformed_parts_is_provider_error(snapshot, fast_retry):
    handler = Recorder(httpx.Response(200, json={"candidates": [{"content": {"parts": 5}}]}))
    provider = make(GeminiProvider, handler, fast_retry)

    with pytest.raises(ProviderError, match="malformed response"):
        await provider.generate(snapshot)
    assert len(handler.requests) == 3


@pytest.mark.asyncio
async def test_gemini_unhashable_finish_reason_is_tolerated(snapshot, fast_retry):
    body = {"candidates": [{"content": {"parts": [{"text": "# Docs"}]}, "finishReason": ["STOP"]}]}
    provider = make(GeminiProvider, Recorder(httpx.Response(200, json=body)), fast_retry)

    assert await provider.generate(snapshot) == "# Docs"


# ==================== MISTRAL ====================

@pytest.mark.asyncio
async def test_mistral_returns_message_content(snapshot, fast_retry):
    handler = Recorder(httpx.Response(200, json=mistral_body("# Mistral docs")))
    provider = make(MistralProvider, handler, fast_retry)

    assert await provider.generate(snapshot) == "# Mistral docs"

    request = handler.requests[0]
    assert request.url.path.endswith("/chat/completions")
    assert request.headers["authorization"] == "Bearer test-key"
    body = json.loads(request.content)
    assert body["model"] == "mistral-large-latest"


@pytest.mark.asyncio
async def test_mistral_joins_text_chunks(snapshot, fast_retry):
    content = [{"type": "text", "text": "# Part one"}, {"type": "thinking", "thinking": "x"}, {"type": "text", "text": "\n\nTwo"}]
    handler = Recorder(httpx.Response(200, json=mistral_body(content)))
    provider = make(MistralProvider, handler, fast_retry)

    assert await provider.generate(snapshot) == "# Part one\n\nTwo"


@pytest.mark.asyncio
async def test_mistral_null_chunk_text_is_provider_error(snapshot, fast_retry):
    handler = Recorder(httpx.Response(200, json=mistral_body([{"type": "text", "text": None}])))
    provider = make(MistralProvider, handler, fast_retry)

    with pytest.raises(ProviderError, match="empty response"):
        await provider.generate(snapshot)
    assert len(handler.requests) == 3


@pytest.mark.asyncio
async def test_mistral_content_filter_is_rejection(snapshot, fast_retry):
    handler = Recorder(httpx.Response(200, json=mistral_body(None, finish_reason="content_filter")))
    provider = make(MistralProvider, handler, fast_retry)

    with pytest.raises(ContentRejectedError):
        await provider.generate(snapshot)
    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_mistral_timeout_is_provider_error(snapshot, fast_retry):
    handler = Recorder(httpx.ReadTimeout("too slow"))
    provider = make(MistralProvider, handler, fast_retry, timeout=5)

    with pytest.raises(ProviderError, match="timed out after 5s"):
        await provider.generate(snapshot)
    assert len(handler.requests) == 3


@pytest.mark.asyncio
async def test_mistral_rate_limit_message(snapshot, fast_retry):
    handler = Recorder(httpx.Response(429, json={"message": "slow down"}))
    provider = make(MistralProvider, handler, fast_retry)

    with pytest.raises(ProviderError, match="rate limited"):
        await provider.generate(snapshot)


# ==================== BYTEZ ====================

@pytest.mark.asyncio
async def test_bytez_chat_model_sends_messages_without_manifests(snapshot, fast_retry):
    handler = Recorder(httpx.Response(200, json={"error": None, "output": {"role": "assistant", "content": "# Bytez docs"}}))
    provider = make(BytezProvider, handler, fast_retry)

    assert await provider.generate(snapshot) == "# Bytez docs"

    request = handler.requests[0]
    assert request.headers["authorization"] == "test-key"
    body = json.loads(request.content)
    assert body["messages"][0]["role"] == "system"
    assert "Manifest Files:" not in body["messages"][1]["content"]


@pytest.mark.asyncio
async def test_bytez_text_model_sends_prompt(snapshot, fast_retry):
    handler = Recorder(httpx.Response(200, json={"output": "# Plain output"}))
    provider = make(BytezProvider, handler, fast_retry, model="google/flan-t5-large")

    assert await provider.generate(snapshot) == "# Plain output"
    body = json.loads(handler.requests[0].content)
    assert body["text"].startswith("Instructions: ")
    assert "messages" not in body


@pytest.mark.asyncio
async def test_bytez_api_error(snapshot, fast_retry):
    handler = Recorder(httpx.Response(200, json={"error": "model is loading", "output": None}))
    provider = make(BytezProvider, handler, fast_retry)

    with pytest.raises(ProviderError, match="model is loading"):
        await provider.generate(snapshot)
    assert len(handler.requests) == 3


@pytest.mark.asyncio
async def test_bytez_moderation_error_is_rejection(snapshot, fast_retry):
    handler = Recorder(httpx.Response(200, json={"error": "Blocked by moderation", "output": None}))
    provider = make(BytezProvider, handler, fast_retry)

    with pytest.raises(ContentRejectedError):
        await provider.generate(snapshot)
    assert len(handler.requests) == 1


# ==================== CONSTRUCTION ====================

@pytest.mark.parametrize("provider_cls, env_name", [
    (GeminiProvider, "GOOGLE_GEMINI_API_KEY"),
    (MistralProvider, "MISTRAL_API_KEY"),
    (BytezProvider, "BYTEZ_API_KEY"),
])
def test_missing_credential_is_configuration_error(provider_cls, env_name):
    with pytest.raises(ConfigurationError, match=env_name):
        provider_cls(api_key="")


def test_providers_satisfy_protocol():
    assert isinstance(GeminiProvider(api_key="k"), DocumentationProvider)


def test_registry_keeps_configured_providers_in_order():
    providers = build_registry({"bytez": "b", "gemini": "g"})
    assert [p.name for p in providers] == ["gemini", "bytez"]


def test_registry_empty_without_credentials():
    assert build_registry({}) == []
