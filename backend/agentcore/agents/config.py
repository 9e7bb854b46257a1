"""Agent configuration dataclasses."""

from dataclasses import dataclass, field
from typing import Any, Optional

from agentcore.settings import default_model


@dataclass(frozen=True)
class AgentTool:
    """Function-style tool declaration forwarded to the completion endpoint."""

    name: str
    description: str = ""
    parameters: dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})

    def to_openai(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass(frozen=True)
class AgentConfig:
    """Immutable configuration for a single agent instance."""

    name: str
    description: str = ""
    model: str = field(default_factory=default_model)
    temperature: float = 0.7
    max_tokens: int = 2000
    system_prompt: Optional[str] = None
    tools: tuple[AgentTool, ...] = ()
    timeout_seconds: float = 120
    max_history_tokens: Optional[int] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(f"temperature must be within [0, 2], got {self.temperature}")
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")
        # Accept any iterable of tools but store an immutable tuple
        if not isinstance(self.tools, tuple):
            object.__setattr__(self, "tools", tuple(self.tools))
