"""
AgentManager: facade over the Agent Factory with lazily created specialized agents.

Module-level helpers (summarize, analyze, ...) go through a process-wide
manager built from the cached RuntimeSettings on first use.
"""

import logging
import threading
from typing import Any, Callable, Iterable, Optional, Sequence

from agentcore.agents.base import AgentFactory, BaseAgent, get_agent_factory
from agentcore.agents.config import AgentConfig
from agentcore.agents.llm_providers import LLMProvider, LLMProviderFactory
from agentcore.agents.openai_agent import OpenAIAgent
from agentcore.agents.orchestrator import AgentOrchestrator
from agentcore.agents.rate_limiter import RateLimiter
from agentcore.agents.retry import RetryOptions
from agentcore.agents.specialized import (
    AnalysisAgent, ContentGenerationAgent, ExtractionAgent, QAAgent, SpecializedAgent,
    SummarizationAgent, TranslationAgent,
)
from agentcore.exceptions import AgentNotFoundError
from agentcore.models.enums import MemoryScope
from agentcore.models.orchestration import OrchestrationResult, OrchestrationTask
from agentcore.settings import get_settings

logger = logging.getLogger(__name__)

BUILTIN_AGENTS: dict[str, type[SpecializedAgent]] = {
    "summarizer": SummarizationAgent,
    "analyzer": AnalysisAgent,
    "generator": ContentGenerationAgent,
    "extractor": ExtractionAgent,
    "qa": QAAgent,
    "translator": TranslationAgent,
}


class AgentManager:
    def __init__(
        self,
        factory: Optional[AgentFactory] = None,
        *,
        provider: Optional[LLMProvider] = None,
        rate_limiter: Optional[RateLimiter] = None,
        retry_options: Optional[RetryOptions] = None,
    ) -> None:
        self._factory = factory
        self._provider = provider
        self._rate_limiter = rate_limiter
        self._retry_options = retry_options
        self._orchestrator: Optional[AgentOrchestrator] = None

    @property
    def factory(self) -> AgentFactory:
        return self._factory or get_agent_factory()

    @property
    def orchestrator(self) -> AgentOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = AgentOrchestrator(self.factory)
        return self._orchestrator

    def _collaborators(self) -> dict[str, Any]:
        return {
            "provider": self._provider,
            "rate_limiter": self._rate_limiter,
            "retry_options": self._retry_options,
        }

    # ── Built-in agents ────────────────────────────────────────

    def _builtin(self, agent_id: str) -> SpecializedAgent:
        """Return the built-in agent for agent_id, creating and registering it on first use."""
        agent = self.factory.get_agent(agent_id)
        if agent is None:
            agent = BUILTIN_AGENTS[agent_id](**self._collaborators())
            self.factory.register_agent(agent_id, agent)
        return agent

    @property
    def summarizer(self) -> SummarizationAgent:
        return self._builtin("summarizer")

    @property
    def analyzer(self) -> AnalysisAgent:
        return self._builtin("analyzer")

    @property
    def generator(self) -> ContentGenerationAgent:
        return self._builtin("generator")

    @property
    def extractor(self) -> ExtractionAgent:
        return self._builtin("extractor")

    @property
    def qa(self) -> QAAgent:
        return self._builtin("qa")

    @property
    def translator(self) -> TranslationAgent:
        return self._builtin("translator")

    # ── Registry ───────────────────────────────────────────────

    def register_agent(self, agent_id: str, agent: BaseAgent) -> None:
        self.factory.register_agent(agent_id, agent)

    def get_agent(self, agent_id: str) -> BaseAgent:
        """Look up an agent, creating built-ins on demand. Raises AgentNotFoundError."""
        if agent_id in BUILTIN_AGENTS:
            return self._builtin(agent_id)
        agent = self.factory.get_agent(agent_id)
        if agent is None:
            raise AgentNotFoundError(f"Agent '{agent_id}' not found", agent_id=agent_id)
        return agent

    def create_custom_agent(self, agent_id: str, config: AgentConfig) -> OpenAIAgent:
        agent = OpenAIAgent(config, **self._collaborators())
        self.factory.register_agent(agent_id, agent)
        return agent

    def list_agents(self) -> list[str]:
        return self.factory.list_agents()

    def remove_agent(self, agent_id: str) -> bool:
        return self.factory.remove_agent(agent_id)

    def clear_all_memories(self, scope: MemoryScope | str = MemoryScope.ALL) -> None:
        for agent_id in self.factory.list_agents():
            agent = self.factory.get_agent(agent_id)
            if agent is not None:
                agent.clear_memory(scope)
        logger.info("Cleared memories agents=%d scope=%s", len(self.factory), MemoryScope(scope).value)

    def get_status(self) -> dict[str, Any]:
        """Snapshot of registered agents, their memory sizes and the limiter queue."""
        agents = {}
        for agent_id, info in self.factory.list_agent_info():
            agent = self.factory.get_agent(agent_id)
            agents[agent_id] = {
                **info.model_dump(),
                "history_length": len(agent.get_history()) if agent else 0,
                "processing": agent.is_processing if agent else False,
            }
        status: dict[str, Any] = {"agent_count": len(agents), "agents": agents}
        if self._rate_limiter is not None:
            status["rate_limiter"] = {
                "active": self._rate_limiter.active,
                "queued": self._rate_limiter.queued,
            }
        return status

    # ── Orchestration ──────────────────────────────────────────

    async def orchestrate(self, tasks: Iterable[OrchestrationTask | dict[str, Any]]) -> OrchestrationResult:
        tasks = list(tasks)
        # make sure referenced built-ins exist before planning dispatches them
        for task in tasks:
            agent_id = task.agent_id if isinstance(task, OrchestrationTask) else task.get("agent_id")
            if agent_id in BUILTIN_AGENTS:
                self._builtin(agent_id)
        return await self.orchestrator.execute(tasks)

    async def execute_workflow(
        self,
        agent_ids: Sequence[str],
        input_text: str,
        transformers: Optional[Sequence[Optional[Callable[[str, int], str]]]] = None,
    ) -> str:
        for agent_id in agent_ids:
            self.get_agent(agent_id)
        return await self.orchestrator.execute_workflow(agent_ids, input_text, transformers)

    async def close(self) -> None:
        if self._provider is not None:
            await self._provider.close()
        else:
            await LLMProviderFactory.close_all()


_manager: Optional[AgentManager] = None
_manager_lock = threading.Lock()


def get_agent_manager() -> AgentManager:
    """Process-wide AgentManager configured from the environment."""
    global _manager
    if _manager is None:
        with _manager_lock:
            if _manager is None:
                settings = get_settings()
                _manager = AgentManager(
                    rate_limiter=RateLimiter(
                        max_concurrent=settings.max_concurrent,
                        min_interval=settings.min_interval_seconds,
                    ),
                    retry_options=RetryOptions(max_retries=settings.max_retries),
                )
                logger.info(
                    "Agent manager ready model=%s max_concurrent=%d max_retries=%d",
                    settings.openai_model, settings.max_concurrent, settings.max_retries,
                )
    return _manager


# ── Convenience functions ──────────────────────────────────────

async def summarize(content: str, **options: Any) -> str:
    return await get_agent_manager().summarizer.summarize(content, **options)


async def analyze(content: str, aspects: Optional[Sequence[str]] = None) -> str:
    return await get_agent_manager().analyzer.analyze(content, aspects)


async def generate(prompt: str, **options: Any) -> str:
    return await get_agent_manager().generator.generate(prompt, **options)


async def ask_question(question: str, context: Optional[str] = None) -> str:
    return await get_agent_manager().qa.answer(question, context)


async def extract(content: str, fields: Sequence[str]) -> dict[str, Any]:
    return await get_agent_manager().extractor.extract(content, fields)


async def translate(text: str, target_language: str, source_language: Optional[str] = None) -> str:
    return await get_agent_manager().translator.translate(text, target_language, source_language)
