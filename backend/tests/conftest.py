"""Shared fixtures: a scripted in-memory provider, an HTTP-mocked OpenAI provider, env isolation."""

import json
from typing import Any, Callable, Optional

import httpx
import pytest

import agentcore.agents.base as base_module
import agentcore.agents.manager as manager_module
from agentcore.agents.llm_providers import LLMProviderFactory, OpenAIProvider
from agentcore.exceptions import ConfigurationError
from agentcore.models.agent_schemas import LLMResponse
from agentcore.settings import get_settings

ENV_VARS = (
    "OPENAI_API_KEY", "OPENAI_MODEL", "OPENAI_BASE_URL", "OPENAI_TIMEOUT_SECONDS",
    "AGENT_MAX_CONCURRENT", "AGENT_MIN_INTERVAL_SECONDS", "AGENT_MAX_RETRIES", "LOG_LEVEL",
)


class FakeProvider:
    """In-memory LLMProvider.

    `replies` is consumed in order; an Exception entry is raised instead of
    answered. Once exhausted, replies echo the last user message.
    """

    provider_name = "fake"

    def __init__(self, replies: Optional[list[Any]] = None, *, stream_fragments: Optional[list[str]] = None,
                 configured: bool = True) -> None:
        self.replies = list(replies or [])
        self.stream_fragments = ["Hel", "lo"] if stream_fragments is None else stream_fragments
        self.configured = configured
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def ensure_configured(self) -> None:
        if not self.configured:
            raise ConfigurationError("fake provider is not configured")

    async def complete(self, messages, *, model, max_tokens, temperature, tools=None) -> LLMResponse:
        self.calls.append({
            "messages": messages, "model": model, "max_tokens": max_tokens,
            "temperature": temperature, "tools": tools,
        })
        if self.replies:
            reply = self.replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
            content = reply
        else:
            content = f"echo: {messages[-1]['content']}"
        return LLMResponse(
            content=content,
            usage={"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
            model=model,
            latency_ms=1,
            provider=self.provider_name,
            finish_reason="stop",
        )

    async def stream(self, messages, *, model, max_tokens, temperature):
        self.calls.append({"messages": messages, "model": model, "stream": True})
        for fragment in self.stream_fragments:
            yield fragment

    async def close(self) -> None:
        self.closed = True

    @property
    def last_messages(self) -> list[dict[str, str]]:
        return self.calls[-1]["messages"]


def completion_body(content: str = "Hello!", *, model: str = "gpt-4o-mini", finish_reason: str = "stop") -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [{
            "index": 0,
            "message": {"role": "assistant", "content": content},
            "finish_reason": finish_reason,
        }],
        "usage": {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
    }


def sse_body(fragments: list[str], *, model: str = "gpt-4o-mini") -> bytes:
    events = []
    for fragment in fragments:
        chunk = {
            "id": "chatcmpl-test",
            "object": "chat.completion.chunk",
            "created": 1700000000,
            "model": model,
            "choices": [{"index": 0, "delta": {"content": fragment}, "finish_reason": None}],
        }
        events.append(f"data: {json.dumps(chunk)}\n\n")
    events.append("data: [DONE]\n\n")
    return "".join(events).encode()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Clear agentcore env vars, cached settings and process-wide singletons around every test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("agentcore.agents.llm_providers.load_dotenv", lambda *a, **kw: False)
    monkeypatch.setattr(base_module, "_factory", None)
    monkeypatch.setattr(manager_module, "_manager", None)
    monkeypatch.setattr(LLMProviderFactory, "_providers", {})
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def mock_openai() -> Callable[[Callable[[httpx.Request], httpx.Response]], OpenAIProvider]:
    """Build an OpenAIProvider whose HTTP traffic goes to `handler`."""

    def build(handler: Callable[[httpx.Request], httpx.Response], api_key: Optional[str] = "test-key") -> OpenAIProvider:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return OpenAIProvider(api_key=api_key, base_url="https://api.test/v1", http_client=client)

    return build
