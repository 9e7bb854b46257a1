"""OpenAIAgent: BaseAgent backed by a chat-completion endpoint."""

import asyncio
import logging
from typing import Any, AsyncIterator, Optional

from agentcore.agents.base import BaseAgent
from agentcore.agents.config import AgentConfig
from agentcore.agents.llm_providers import LLMProvider, LLMProviderFactory
from agentcore.agents.rate_limiter import RateLimiter
from agentcore.agents.retry import RetryOptions, is_transient, with_retry
from agentcore.agents.tokens import MODEL_CONTEXT_LIMITS, estimate_tokens
from agentcore.exceptions import NetworkError
from agentcore.models.agent_schemas import AgentResponse, LLMResponse, MemoryEntry, ResponseMetadata, TokenUsage
from agentcore.models.enums import MessageRole

logger = logging.getLogger(__name__)


class OpenAIAgent(BaseAgent):
    """
    Turns configuration + memory + new input into a completion request.

    Optional collaborators:
    - rate_limiter: every non-streaming call (including each retry) goes through it;
      a stream holds a slot only until its first fragment arrives
    - retry_options: wraps the call in with_retry(); defaults to retrying
      transient failures only (is_transient)
    """

    def __init__(
        self,
        config: AgentConfig,
        *,
        provider: Optional[LLMProvider] = None,
        rate_limiter: Optional[RateLimiter] = None,
        retry_options: Optional[RetryOptions] = None,
    ) -> None:
        super().__init__(config)
        self._provider = provider
        self.rate_limiter = rate_limiter
        if retry_options is not None and retry_options.should_retry is None:
            retry_options = RetryOptions(
                max_retries=retry_options.max_retries,
                initial_delay=retry_options.initial_delay,
                max_delay=retry_options.max_delay,
                backoff_factor=retry_options.backoff_factor,
                should_retry=is_transient,
            )
        self.retry_options = retry_options

    @property
    def provider(self) -> LLMProvider:
        if self._provider is None:
            self._provider = LLMProviderFactory.get_provider("openai")
        return self._provider

    # ── Single response ────────────────────────────────────────

    async def process(self, input_text: str, context: Optional[dict[str, Any]] = None) -> AgentResponse:
        self.provider.ensure_configured()

        async with self._turn_lock:
            self._absorb_context(context)
            messages = self._build_messages(input_text)
            logger.info(
                "Processing agent=%s model=%s messages=%d input_chars=%d",
                self.name, self.config.model, len(messages), len(input_text),
            )

            response = await self._call(messages)

            self.add_to_memory(MessageRole.USER, input_text)
            self.add_to_memory(MessageRole.ASSISTANT, response.content)

        logger.info(
            "LLM response agent=%s tokens_in=%s tokens_out=%s latency_ms=%s",
            self.name,
            response.usage.get("prompt_tokens"),
            response.usage.get("completion_tokens"),
            response.latency_ms,
        )
        return AgentResponse(
            content=response.content,
            metadata=ResponseMetadata(
                model=response.model or self.config.model,
                usage=TokenUsage(
                    prompt=response.usage.get("prompt_tokens", 0),
                    completion=response.usage.get("completion_tokens", 0),
                    total=response.usage.get("total_tokens", 0),
                ),
                finish_reason=response.finish_reason,
                latency_ms=response.latency_ms,
            ),
        )

    async def _call(self, messages: list[dict[str, str]]) -> LLMResponse:
        tools = [t.to_openai() for t in self.config.tools] or None

        async def attempt() -> LLMResponse:
            try:
                return await asyncio.wait_for(
                    self.provider.complete(
                        messages,
                        model=self.config.model,
                        max_tokens=self.config.max_tokens,
                        temperature=self.config.temperature,
                        tools=tools,
                    ),
                    timeout=self.config.timeout_seconds,
                )
            except asyncio.TimeoutError as exc:
                raise NetworkError(
                    f"{self.name}: completion timed out after {self.config.timeout_seconds}s",
                    details={"agent": self.name},
                ) from exc

        async def limited() -> LLMResponse:
            if self.rate_limiter is None:
                return await attempt()
            return await self.rate_limiter.execute(attempt)

        if self.retry_options is None:
            return await limited()
        return await with_retry(limited, self.retry_options)

    # ── Streaming ──────────────────────────────────────────────

    async def process_stream(
        self, input_text: str, context: Optional[dict[str, Any]] = None,
    ) -> AsyncIterator[str]:
        """
        Yield text fragments as they arrive. The first draw raises if the request is rejected.

        _turn_lock is held only while the request is built and while the finished
        turn is recorded, never across a yield: a consumer that stops drawing does
        not block later turns. An abandoned stream records nothing in memory.
        """
        self.provider.ensure_configured()

        async with self._turn_lock:
            self._absorb_context(context)
            messages = self._build_messages(input_text)
        logger.info("Streaming agent=%s model=%s messages=%d", self.name, self.config.model, len(messages))

        stream = self.provider.stream(
            messages,
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )
        # the rate limiter gates opening the stream, not reading it
        if self.rate_limiter is None:
            first = await anext(stream, None)
        else:
            first = await self.rate_limiter.execute(anext, stream, None)

        fragments: list[str] = []
        if first is not None:
            fragments.append(first)
            yield first
            async for fragment in stream:
                fragments.append(fragment)
                yield fragment

        async with self._turn_lock:
            self.add_to_memory(MessageRole.USER, input_text)
            self.add_to_memory(MessageRole.ASSISTANT, "".join(fragments))
        logger.info("Stream complete agent=%s fragments=%d", self.name, len(fragments))

    # ── Request construction ───────────────────────────────────

    def _absorb_context(self, context: Optional[dict[str, Any]]) -> None:
        for key, value in (context or {}).items():
            self.set_context(key, value)

    def _build_messages(self, input_text: str) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if self.config.system_prompt:
            messages.append({"role": MessageRole.SYSTEM.value, "content": self.config.system_prompt})
        messages.extend(entry.as_message() for entry in self._history_within_budget())
        messages.append({"role": MessageRole.USER.value, "content": input_text})
        self._check_token_budget(messages)
        return messages

    def _history_within_budget(self) -> list[MemoryEntry]:
        """Short-term memory, dropping the oldest turns beyond max_history_tokens."""
        history = list(self.get_history())
        budget = self.config.max_history_tokens
        if budget is None:
            return history

        kept: list[MemoryEntry] = []
        used = 0
        for entry in reversed(history):
            cost = estimate_tokens(entry.content)
            if used + cost > budget:
                break
            kept.append(entry)
            used += cost
        if len(kept) < len(history):
            logger.debug(
                "Trimmed history agent=%s dropped=%d budget=%d", self.name, len(history) - len(kept), budget,
            )
        return list(reversed(kept))

    def _check_token_budget(self, messages: list[dict[str, str]]) -> None:
        """Warn when the request is likely to overflow the model's context window."""
        limit = MODEL_CONTEXT_LIMITS.get(self.config.model)
        if limit is None:
            return
        estimated_input = sum(estimate_tokens(m["content"]) for m in messages)
        if estimated_input + self.config.max_tokens > limit:
            logger.warning(
                "Token budget warning: agent=%s estimated_input=%d max_tokens=%d model_limit=%d",
                self.name, estimated_input, self.config.max_tokens, limit,
            )
