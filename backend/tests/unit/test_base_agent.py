"""Tests for AgentConfig, BaseAgent memory and the AgentFactory registry."""

import pytest

from agentcore.agents.base import AgentFactory, BaseAgent, get_agent_factory
from agentcore.agents.config import AgentConfig, AgentTool
from agentcore.models.agent_schemas import AgentResponse, ResponseMetadata
from agentcore.models.enums import MemoryScope, MessageRole


class EchoAgent(BaseAgent):
    async def process(self, input_text, context=None):
        self.add_to_memory(MessageRole.USER, input_text)
        return AgentResponse(content=input_text, metadata=ResponseMetadata(model=self.config.model))


class TestAgentConfig:
    def test_defaults(self):
        config = AgentConfig(name="a")
        assert config.model == "gpt-4o-mini"
        assert config.temperature == 0.7
        assert config.max_tokens == 2000
        assert config.tools == ()

    def test_model_from_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4o")
        assert AgentConfig(name="a").model == "gpt-4o"

    @pytest.mark.parametrize("kwargs", [{"temperature": -0.1}, {"temperature": 2.5}, {"max_tokens": 0}])
    def test_rejects_out_of_range(self, kwargs):
        with pytest.raises(ValueError):
            AgentConfig(name="a", **kwargs)

    def test_tools_stored_as_tuple(self):
        tool = AgentTool(name="lookup", description="Look something up")
        config = AgentConfig(name="a", tools=[tool])
        assert config.tools == (tool,)
        assert config.tools[0].to_openai()["function"]["name"] == "lookup"


class TestMemory:
    def test_history_order_and_read_only_view(self):
        agent = EchoAgent(AgentConfig(name="echo"))
        agent.add_to_memory("user", "hi")
        agent.add_to_memory(MessageRole.ASSISTANT, "hello")

        history = agent.get_history()
        assert [(e.role, e.content) for e in history] == [("user", "hi"), ("assistant", "hello")]
        assert isinstance(history, tuple)

    def test_invalid_role_rejected(self):
        agent = EchoAgent(AgentConfig(name="echo"))
        with pytest.raises(ValueError):
            agent.add_to_memory("narrator", "once upon a time")

    def test_context_store(self):
        agent = EchoAgent(AgentConfig(name="echo"))
        agent.set_context("topic", "finance")
        assert agent.get_context("topic") == "finance"
        assert agent.get_context("missing") is None

    @pytest.mark.parametrize("scope,short_left,long_left", [
        (MemoryScope.SHORT_TERM, 0, 1),
        (MemoryScope.LONG_TERM, 1, 0),
        ("all", 0, 0),
    ])
    def test_clear_memory_scopes(self, scope, short_left, long_left):
        agent = EchoAgent(AgentConfig(name="echo"))
        agent.add_to_memory("user", "hi")
        agent.set_context("k", "v")

        agent.clear_memory(scope)
        assert len(agent.get_history()) == short_left
        assert len(agent.memory.long_term) == long_left

    def test_info_and_repr(self):
        agent = EchoAgent(AgentConfig(name="echo", description="repeats", model="m"))
        info = agent.get_info()
        assert (info.name, info.description, info.model) == ("echo", "repeats", "m")
        assert "echo" in repr(agent)
        assert not agent.is_processing


class TestAgentFactory:
    def test_register_get_remove(self):
        factory = AgentFactory()
        agent = EchoAgent(AgentConfig(name="echo"))
        factory.register_agent("echo", agent)

        assert "echo" in factory
        assert factory.get_agent("echo") is agent
        assert factory.list_agents() == ["echo"]
        assert factory.remove_agent("echo") is True
        assert factory.remove_agent("echo") is False
        assert factory.get_agent("echo") is None
        assert len(factory) == 0

    def test_register_replaces_existing(self):
        factory = AgentFactory()
        first = EchoAgent(AgentConfig(name="one"))
        second = EchoAgent(AgentConfig(name="two"))
        factory.register_agent("x", first)
        factory.register_agent("x", second)
        assert factory.get_agent("x") is second
        assert [agent_id for agent_id, _ in factory.list_agent_info()] == ["x"]

    def test_process_wide_singleton(self):
        assert get_agent_factory() is get_agent_factory()
