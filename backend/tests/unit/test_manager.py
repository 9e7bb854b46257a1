"""Tests for AgentManager, the module-level helpers and the CLI."""

import io
from unittest.mock import AsyncMock, patch

import pytest

import agentcore.agents.manager as manager_module
from agentcore import cli
from agentcore.agents.base import AgentFactory
from agentcore.agents.config import AgentConfig
from agentcore.agents.manager import AgentManager, get_agent_manager
from agentcore.agents.specialized import SummarizationAgent
from agentcore.exceptions import AgentNotFoundError, ConfigurationError
from agentcore.models.enums import TaskStatus
from conftest import FakeProvider


@pytest.fixture
def manager():
    return AgentManager(AgentFactory(), provider=FakeProvider())


class TestAgentManager:
    def test_builtins_created_lazily(self, manager):
        assert manager.list_agents() == []
        summarizer = manager.summarizer
        assert isinstance(summarizer, SummarizationAgent)
        assert manager.summarizer is summarizer
        assert manager.list_agents() == ["summarizer"]

    def test_get_agent(self, manager):
        assert manager.get_agent("translator").name == "Translation Agent"
        with pytest.raises(AgentNotFoundError):
            manager.get_agent("nobody")

    def test_custom_agent_registration(self, manager):
        agent = manager.create_custom_agent("poet", AgentConfig(name="Poet", temperature=1.2))
        assert manager.get_agent("poet") is agent
        assert manager.remove_agent("poet") is True
        assert "poet" not in manager.list_agents()

    @pytest.mark.asyncio
    async def test_clear_all_memories(self, manager):
        await manager.qa.answer("one")
        await manager.analyzer.analyze("two")
        manager.clear_all_memories()
        assert manager.qa.get_history() == ()
        assert manager.analyzer.get_history() == ()

    @pytest.mark.asyncio
    async def test_status(self, manager):
        await manager.qa.answer("hello")
        status = manager.get_status()
        assert status["agent_count"] == 1
        assert status["agents"]["qa"]["name"] == "Q&A Agent"
        assert status["agents"]["qa"]["history_length"] == 2

    @pytest.mark.asyncio
    async def test_orchestrate_creates_referenced_builtins(self, manager):
        result = await manager.orchestrate([
            {"id": "sum", "agent_id": "summarizer", "input": "text"},
            {"id": "qa", "agent_id": "qa", "input": "question", "depends_on": ["sum"]},
        ])
        assert result["sum"].status == TaskStatus.COMPLETED
        assert result["qa"].status == TaskStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_workflow(self, manager):
        result = await manager.execute_workflow(["analyzer", "summarizer"], "report")
        assert result.startswith("echo: ")

    @pytest.mark.asyncio
    async def test_close_closes_provider(self, manager):
        await manager.close()
        assert manager._provider.closed


class TestModuleHelpers:
    def test_singleton_from_environment(self, monkeypatch):
        monkeypatch.setenv("AGENT_MAX_CONCURRENT", "5")
        monkeypatch.setenv("AGENT_MAX_RETRIES", "1")
        manager = get_agent_manager()
        assert manager is get_agent_manager()
        assert manager.get_status()["rate_limiter"] == {"active": 0, "queued": 0}
        assert manager._rate_limiter.max_concurrent == 5
        assert manager._retry_options.max_retries == 1

    def test_bad_environment_value(self, monkeypatch):
        monkeypatch.setenv("AGENT_MAX_CONCURRENT", "many")
        with pytest.raises(ConfigurationError):
            get_agent_manager()

    @pytest.mark.asyncio
    async def test_helpers_route_to_builtins(self, monkeypatch):
        provider = FakeProvider(["summary", "answer", '{"who": "Ada"}', "Hola"])
        monkeypatch.setattr(manager_module, "_manager", AgentManager(AgentFactory(), provider=provider))

        assert await manager_module.summarize("text", length="short") == "summary"
        assert await manager_module.ask_question("why?") == "answer"
        assert await manager_module.extract("Ada was here", ["who"]) == {"who": "Ada"}
        assert await manager_module.translate("Hello", "es") == "Hola"

    @pytest.mark.asyncio
    async def test_missing_key_reported_on_first_call(self):
        with pytest.raises(ConfigurationError):
            await manager_module.analyze("text")


class TestCli:
    def test_summarize_from_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr(cli, "setup_logging", lambda *a, **kw: None)
        monkeypatch.setattr("sys.stdin", io.StringIO("A long document."))
        monkeypatch.setattr(
            manager_module, "_manager", AgentManager(AgentFactory(), provider=FakeProvider(["Short."])),
        )

        assert cli.main(["summarize", "--length", "short"]) == 0
        assert capsys.readouterr().out == "Short.\n"

    def test_stream_writes_fragments(self, monkeypatch, capsys, tmp_path):
        monkeypatch.setattr(cli, "setup_logging", lambda *a, **kw: None)
        prompt = tmp_path / "prompt.txt"
        prompt.write_text("Say hello", encoding="utf-8")
        monkeypatch.setattr(
            manager_module, "_manager",
            AgentManager(AgentFactory(), provider=FakeProvider(stream_fragments=["Hel", "lo"])),
        )

        assert cli.main(["stream", str(prompt)]) == 0
        assert capsys.readouterr().out == "Hello\n"

    def test_errors_return_non_zero(self, monkeypatch, capsys):
        monkeypatch.setattr(cli, "setup_logging", lambda *a, **kw: None)
        failing = AgentManager(AgentFactory(), provider=FakeProvider(configured=False))
        monkeypatch.setattr(manager_module, "_manager", failing)

        with patch.object(failing, "close", new=AsyncMock()) as close:
            assert cli.main(["ask", "why?"]) == 1
        close.assert_awaited_once()
        assert "error:" in capsys.readouterr().err
