"""Token estimation, truncation and per-model cost estimation."""

import math
from typing import Mapping

from agentcore.models.agent_schemas import TokenUsage

# ── Model context window limits ────────────────────────────────
MODEL_CONTEXT_LIMITS: dict[str, int] = {
    "gpt-4o": 128_000,
    "gpt-4o-mini": 128_000,
    "gpt-4-turbo": 128_000,
    "gpt-4-turbo-preview": 128_000,
    "gpt-4": 8_192,
    "gpt-3.5-turbo": 16_385,
}

# USD per 1K tokens, approximate
MODEL_PRICING: dict[str, dict[str, float]] = {
    "gpt-4o": {"input": 0.0025, "output": 0.01},
    "gpt-4o-mini": {"input": 0.00015, "output": 0.0006},
    "gpt-4-turbo": {"input": 0.01, "output": 0.03},
    "gpt-4-turbo-preview": {"input": 0.01, "output": 0.03},
    "gpt-4": {"input": 0.03, "output": 0.06},
    "gpt-3.5-turbo": {"input": 0.0005, "output": 0.0015},
}
_FALLBACK_PRICING_MODEL = "gpt-3.5-turbo"

_ELLIPSIS = "..."


def estimate_tokens(text: str) -> int:
    """Rough token estimate: ~4 chars per token for English text."""
    return math.ceil(len(text) / 4)


def validate_token_limit(text: str, max_tokens: int) -> bool:
    return estimate_tokens(text) <= max_tokens


def truncate_to_token_limit(text: str, max_tokens: int) -> str:
    """Cut text so its estimate fits max_tokens, marking the cut with '...'."""
    estimated = estimate_tokens(text)
    if estimated <= max_tokens:
        return text
    if max_tokens <= 0:
        return ""

    ratio = max_tokens / estimated
    # leave room for the ellipsis
    target_length = max(0, math.floor(len(text) * ratio) - len(_ELLIPSIS))
    truncated = text[:target_length]
    return truncated if truncated.endswith(_ELLIPSIS) else truncated + _ELLIPSIS


def estimate_cost(usage: TokenUsage | Mapping[str, int], model: str) -> float:
    """Approximate USD cost of a call. Unknown models are priced as gpt-3.5-turbo."""
    if isinstance(usage, TokenUsage):
        prompt_tokens, completion_tokens = usage.prompt, usage.completion
    else:
        prompt_tokens = usage.get("prompt", usage.get("prompt_tokens", 0))
        completion_tokens = usage.get("completion", usage.get("completion_tokens", 0))

    pricing = MODEL_PRICING.get(model) or MODEL_PRICING[_FALLBACK_PRICING_MODEL]
    return (prompt_tokens / 1000) * pricing["input"] + (completion_tokens / 1000) * pricing["output"]
