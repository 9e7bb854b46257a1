"""Pydantic I/O models shared by agentcore agents."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from agentcore.models.enums import MessageRole, SummaryFormat, SummaryLength, Tone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── LLM Response (provider level) ──────────────────────────────

class LLMResponse(BaseModel):
    """Standardized response from the completion endpoint."""
    content: str = ""
    usage: dict[str, int] = Field(default_factory=dict)
    model: str = ""
    latency_ms: int = 0
    provider: str = ""
    finish_reason: Optional[str] = None


# ── Memory ─────────────────────────────────────────────────────

class MemoryEntry(BaseModel):
    """One turn of short-term conversational memory."""
    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)

    def as_message(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


# ── Agent Response ─────────────────────────────────────────────

class TokenUsage(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: int = 0
    completion: int = 0
    total: int = 0


class ResponseMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: str
    usage: TokenUsage = Field(default_factory=TokenUsage)
    timestamp: str = Field(default_factory=lambda: _utcnow().isoformat())
    finish_reason: Optional[str] = None
    latency_ms: int = 0


class AgentResponse(BaseModel):
    """Result of a single BaseAgent.process() call."""
    model_config = ConfigDict(frozen=True)

    content: str
    metadata: ResponseMetadata


class AgentInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    model: str


# ── Convenience-method options ─────────────────────────────────

class SummarizeOptions(BaseModel):
    """Options accepted by SummarizationAgent.summarize()."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    length: SummaryLength = SummaryLength.MEDIUM
    format: SummaryFormat = SummaryFormat.PARAGRAPH
    source_language: Optional[str] = None
    target_language: Optional[str] = None


class GenerateOptions(BaseModel):
    """Options accepted by ContentGenerationAgent.generate()."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    tone: Optional[Tone] = None
    style: Optional[str] = None
    length: Optional[int] = Field(default=None, gt=0, description="Target length in words")
