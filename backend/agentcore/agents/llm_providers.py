"""LLM Provider Protocol, the OpenAI-compatible implementation, and factory."""

import asyncio
import json
import logging
import os
import time
from typing import Any, AsyncIterator, Optional, Protocol, runtime_checkable

import httpx
import openai
from dotenv import load_dotenv

from agentcore.exceptions import ApiError, ConfigurationError, LLMResponseError, NetworkError
from agentcore.models.agent_schemas import LLMResponse
from agentcore.settings import RuntimeSettings, get_settings

logger = logging.getLogger(__name__)


@runtime_checkable
class LLMProvider(Protocol):
    """Structural interface every completion backend must satisfy."""

    @property
    def provider_name(self) -> str: ...

    def ensure_configured(self) -> None: ...

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str,
        max_tokens: int,
        temperature: float,
        tools: Optional[list[dict[str, Any]]] = None,
    ) -> LLMResponse: ...

    def stream(
        self,
        messages: list[dict[str, str]],
        *,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> AsyncIterator[str]: ...

    async def close(self) -> None: ...


# ── Error translation ──────────────────────────────────────────

def _status_error(exc: openai.APIStatusError) -> ApiError:
    try:
        body = exc.response.text
    except httpx.ResponseNotRead:
        body = json.dumps(exc.body) if exc.body is not None else ""
    return ApiError(
        f"Completion endpoint returned HTTP {exc.status_code}: {exc.message}",
        status_code=exc.status_code,
        body=body,
    )


def _network_error(exc: Exception) -> NetworkError:
    return NetworkError(f"Completion request failed without a response: {exc}", details={"cause": type(exc).__name__})


# ── OpenAIProvider ──────────────────────────────────────────────

class OpenAIProvider:
    """OpenAI Chat Completions API, or any endpoint speaking the same protocol."""

    provider_name: str = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._http_client = http_client
        self._client: Optional[openai.AsyncOpenAI] = None
        self._client_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: RuntimeSettings, **kwargs) -> "OpenAIProvider":
        return cls(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.openai_timeout_seconds,
            **kwargs,
        )

    def ensure_configured(self) -> None:
        """Resolve the API key, raising ConfigurationError before any network call."""
        if not self._api_key:
            load_dotenv()
            self._api_key = os.environ.get("OPENAI_API_KEY") or None
        if not self._api_key:
            raise ConfigurationError(
                "OpenAI API key is not configured (set OPENAI_API_KEY)",
                details={"provider": self.provider_name},
            )

    async def _get_client(self) -> openai.AsyncOpenAI:
        self.ensure_configured()
        if self._client is None:
            async with self._client_lock:
                if self._client is None:
                    # Retry policy belongs to agentcore, not the SDK
                    self._client = openai.AsyncOpenAI(
                        api_key=self._api_key,
                        base_url=self._base_url,
                        timeout=self._timeout,
                        max_retries=0,
                        http_client=self._http_client,
                    )
        return self._client

    async def complete(
        self, messages, *, model, max_tokens, temperature, tools=None,
    ) -> LLMResponse:
        client = await self._get_client()
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if tools:
            kwargs["tools"] = tools

        start = time.monotonic()
        try:
            response = await client.chat.completions.create(**kwargs)
        except openai.APIStatusError as exc:
            raise _status_error(exc) from exc
        except openai.APIConnectionError as exc:
            raise _network_error(exc) from exc
        latency_ms = int((time.monotonic() - start) * 1000)

        if not response.choices:
            raise LLMResponseError(
                f"Completion response contained no choices (model={model})",
                details={"provider": self.provider_name},
            )
        choice = response.choices[0]
        content = choice.message.content or ""
        if not content:
            logger.warning(
                "Empty completion: finish_reason=%s model=%s", choice.finish_reason, model,
            )

        return LLMResponse(
            content=content,
            usage={
                "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
                "completion_tokens": response.usage.completion_tokens if response.usage else 0,
                "total_tokens": response.usage.total_tokens if response.usage else 0,
            },
            model=response.model or model,
            latency_ms=latency_ms,
            provider=self.provider_name,
            finish_reason=choice.finish_reason,
        )

    async def stream(
        self, messages, *, model, max_tokens, temperature,
    ) -> AsyncIterator[str]:
        """Yield content deltas from the server-sent event stream until [DONE]."""
        client = await self._get_client()
        try:
            stream = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                stream=True,
            )
        except openai.APIStatusError as exc:
            raise _status_error(exc) from exc
        except openai.APIConnectionError as exc:
            raise _network_error(exc) from exc

        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content if chunk.choices[0].delta else None
                if delta:
                    yield delta
        except openai.APIStatusError as exc:
            raise _status_error(exc) from exc
        except (openai.APIConnectionError, httpx.TransportError) as exc:
            raise _network_error(exc) from exc
        finally:
            await stream.close()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None


# ── LLMProviderFactory ──────────────────────────────────────────

class LLMProviderFactory:
    """Singleton factory: one provider instance per backend."""

    _providers: dict[str, LLMProvider] = {}

    @classmethod
    def get_provider(cls, name: str = "openai") -> LLMProvider:
        if name not in cls._providers:
            if name == "openai":
                cls._providers[name] = OpenAIProvider.from_settings(get_settings())
            else:
                raise ValueError(f"Unknown provider: {name}")
        return cls._providers[name]

    @classmethod
    def set_provider(cls, name: str, provider: LLMProvider) -> None:
        cls._providers[name] = provider

    @classmethod
    async def close_all(cls) -> None:
        providers = list(cls._providers.values())
        cls._providers.clear()
        for provider in providers:
            await provider.close()
