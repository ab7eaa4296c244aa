"""Unit tests for ChatAgent construction.

The OpenAI client and ChatAgent are patched; no network access.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

from config.settings import Settings
from entities.agent import (
    DatabaseToolset,
    build_agent,
    create_chat_client,
    create_database_agent,
    load_prompt,
    run_agent,
)
from entities.agent.agent import AGENT_NAME, _limit_tool_iterations
from entities.shared.connection import ConnectionManager

from tests.conftest import FakeConnector

_CLIENT_PATCH = "entities.agent.agent.OpenAIChatClient"
_AGENT_PATCH = "entities.agent.agent.ChatAgent"


class TestLoadPrompt:
    """Test instruction loading."""

    def test_row_limit_filled_in(self) -> None:
        prompt = load_prompt(250)
        assert "SELECT limited to 250 rows" in prompt
        assert "{row_limit}" not in prompt

    def test_lists_every_tool(self) -> None:
        prompt = load_prompt(10)
        for name in ("test_connection", "list_tables", "get_schema", "get_all_schemas", "run_query"):
            assert name in prompt


class TestLimitToolIterations:
    """Test max-turn wiring for both config shapes."""

    def test_dict_config(self) -> None:
        client = SimpleNamespace(function_invocation_configuration={"max_iterations": 40})
        _limit_tool_iterations(client, 3)
        assert client.function_invocation_configuration["max_iterations"] == 3

    def test_object_config(self) -> None:
        client = SimpleNamespace(function_invocation_configuration=SimpleNamespace(max_iterations=40))
        _limit_tool_iterations(client, 3)
        assert client.function_invocation_configuration.max_iterations == 3

    def test_missing_config(self) -> None:
        client = SimpleNamespace()
        _limit_tool_iterations(client, 3)
        assert not hasattr(client, "function_invocation_configuration")


class TestCreateChatClient:
    """Test OpenAI client construction."""

    def test_uses_configured_model_and_key(self) -> None:
        settings = Settings(agent_model="gpt-test", openai_api_key="sk-test", agent_max_turns=4)
        with patch(_CLIENT_PATCH) as client_cls:
            client_cls.return_value.function_invocation_configuration = {}
            client = create_chat_client(settings)

        client_cls.assert_called_once_with(model_id="gpt-test", api_key="sk-test")
        assert client.function_invocation_configuration == {"max_iterations": 4}


class TestCreateDatabaseAgent:
    """Test ChatAgent construction."""

    def test_passes_name_instructions_and_tools(self) -> None:
        chat_client = MagicMock()
        tools = [MagicMock(), MagicMock()]
        with patch(_AGENT_PATCH) as agent_cls:
            agent = create_database_agent(chat_client, "be careful", tools)

        agent_cls.assert_called_once_with(
            name=AGENT_NAME,
            instructions="be careful",
            chat_client=chat_client,
            tools=tools,
        )
        assert agent is agent_cls.return_value

    def test_build_agent_wires_all_tools(self) -> None:
        settings = Settings(openai_api_key="sk-test", mysql_row_limit=42)
        toolset = DatabaseToolset(ConnectionManager(connect=FakeConnector()))
        with patch(_CLIENT_PATCH), patch(_AGENT_PATCH) as agent_cls:
            build_agent(settings, toolset)

        kwargs = agent_cls.call_args.kwargs
        assert "42 rows" in kwargs["instructions"]
        assert [t.name for t in kwargs["tools"]] == [
            "test_connection",
            "list_tables",
            "get_schema",
            "get_all_schemas",
            "run_query",
        ]


class TestRunAgent:
    """Only the final answer text is returned."""

    async def test_returns_text(self) -> None:
        agent = MagicMock()
        agent.run = AsyncMock(return_value=SimpleNamespace(text="Four tables."))
        assert await run_agent(agent, "How many tables?") == "Four tables."
        agent.run.assert_awaited_once_with("How many tables?")

    async def test_none_text_becomes_empty(self) -> None:
        agent = MagicMock()
        agent.run = AsyncMock(return_value=SimpleNamespace(text=None))
        assert await run_agent(agent, "?") == ""
