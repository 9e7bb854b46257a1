"""BaseAgent abstract class, agent memory, and the process-wide AgentFactory."""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from agentcore.agents.config import AgentConfig
from agentcore.models.agent_schemas import AgentInfo, AgentResponse, MemoryEntry
from agentcore.models.enums import MemoryScope, MessageRole

logger = logging.getLogger(__name__)


@dataclass
class AgentMemory:
    """Short-term conversation turns plus a long-term key/value context store."""
    short_term: list[MemoryEntry] = field(default_factory=list)
    long_term: dict[str, Any] = field(default_factory=dict)


class BaseAgent(ABC):
    """
    Contract shared by every agent.

    Subclasses implement process(). Memory is owned by the agent and only
    mutated through the methods below; _turn_lock serializes request steps
    that read history and then append to it.
    """

    def __init__(self, config: AgentConfig) -> None:
        self._config = config
        self.memory = AgentMemory()
        self._turn_lock = asyncio.Lock()

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def name(self) -> str:
        return self._config.name

    @abstractmethod
    async def process(self, input_text: str, context: Optional[dict[str, Any]] = None) -> AgentResponse:
        """Produce a response for input_text, given the agent's memory."""
        ...

    # ── Memory management ──────────────────────────────────────

    def add_to_memory(self, role: MessageRole | str, content: str) -> MemoryEntry:
        entry = MemoryEntry(role=MessageRole(role), content=content)
        self.memory.short_term.append(entry)
        return entry

    def get_history(self) -> tuple[MemoryEntry, ...]:
        """Read-only view of short-term memory, oldest first."""
        return tuple(self.memory.short_term)

    def clear_memory(self, scope: MemoryScope | str = MemoryScope.ALL) -> None:
        scope = MemoryScope(scope)
        if scope in (MemoryScope.SHORT_TERM, MemoryScope.ALL):
            self.memory.short_term.clear()
        if scope in (MemoryScope.LONG_TERM, MemoryScope.ALL):
            self.memory.long_term.clear()
        logger.debug("Cleared memory agent=%s scope=%s", self.name, scope.value)

    def set_context(self, key: str, value: Any) -> None:
        self.memory.long_term[key] = value

    def get_context(self, key: str) -> Any:
        return self.memory.long_term.get(key)

    # ── Introspection ──────────────────────────────────────────

    def get_info(self) -> AgentInfo:
        return AgentInfo(
            name=self._config.name,
            description=self._config.description,
            model=self._config.model,
        )

    @property
    def is_processing(self) -> bool:
        return self._turn_lock.locked()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._config.name!r}, model={self._config.model!r})"


# ── Agent Factory ──────────────────────────────────────────────

class AgentFactory:
    """Registry mapping string ids to agent instances.

    Construct one directly for an isolated registry (tests); use
    get_agent_factory() for the shared process-wide instance.
    """

    def __init__(self) -> None:
        self._agents: dict[str, BaseAgent] = {}
        self._lock = threading.Lock()

    def register_agent(self, agent_id: str, agent: BaseAgent) -> None:
        with self._lock:
            replaced = agent_id in self._agents
            self._agents[agent_id] = agent
        logger.info("Registered agent id=%s name=%s replaced=%s", agent_id, agent.name, replaced)

    def get_agent(self, agent_id: str) -> Optional[BaseAgent]:
        return self._agents.get(agent_id)

    def list_agents(self) -> list[str]:
        with self._lock:
            return list(self._agents)

    def list_agent_info(self) -> list[tuple[str, AgentInfo]]:
        with self._lock:
            items = list(self._agents.items())
        return [(agent_id, agent.get_info()) for agent_id, agent in items]

    def remove_agent(self, agent_id: str) -> bool:
        with self._lock:
            removed = self._agents.pop(agent_id, None) is not None
        if removed:
            logger.info("Removed agent id=%s", agent_id)
        return removed

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._agents

    def __len__(self) -> int:
        return len(self._agents)


_factory: Optional[AgentFactory] = None
_factory_lock = threading.Lock()


def get_agent_factory() -> AgentFactory:
    """Process-wide AgentFactory, created on first access."""
    global _factory
    if _factory is None:
        with _factory_lock:
            if _factory is None:
                _factory = AgentFactory()
    return _factory
