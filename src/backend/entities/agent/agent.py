"""
MySQL Assistant agent construction.

Builds the OpenAI chat client and the ``ChatAgent`` that drives the
database tools. Only the agent's final answer leaves this module; the
intermediate tool-call transcript stays inside the model runtime.
"""

import logging
from pathlib import Path
from typing import Any

from agent_framework import ChatAgent
from agent_framework.openai import OpenAIChatClient
from config.settings import Settings

from .tools import DatabaseToolset, build_tools

logger = logging.getLogger(__name__)

AGENT_NAME = "MySQL Assistant"


def load_prompt(row_limit: int) -> str:
    """Load the agent instructions from prompt.md in this folder.

    Args:
        row_limit: Row cap embedded in the security section.

    Returns:
        Instruction text with the row limit filled in.
    """
    template = (Path(__file__).parent / "prompt.md").read_text(encoding="utf-8")
    return template.replace("{row_limit}", str(row_limit))


def _limit_tool_iterations(chat_client: Any, max_turns: int) -> None:
    """Cap the number of tool-calling round trips per request."""
    config = getattr(chat_client, "function_invocation_configuration", None)
    if isinstance(config, dict):
        config["max_iterations"] = max_turns
    elif config is not None:
        config.max_iterations = max_turns
    else:
        logger.warning("Chat client has no function invocation settings; max turns not applied")


def create_chat_client(settings: Settings) -> OpenAIChatClient:
    """Create the OpenAI chat client for the configured model.

    Args:
        settings: Supplies ``agent_model``, ``agent_max_turns`` and the API key.

    Returns:
        Chat client limited to ``agent_max_turns`` tool iterations.
    """
    chat_client = OpenAIChatClient(
        model_id=settings.agent_model,
        api_key=settings.openai_api_key,
    )
    _limit_tool_iterations(chat_client, settings.agent_max_turns)
    return chat_client


def create_database_agent(
    chat_client: Any,
    instructions: str,
    tools: list[Any],
) -> ChatAgent:
    """Create the MySQL Assistant ChatAgent.

    Args:
        chat_client: Chat client for LLM access.
        instructions: Agent system prompt text.
        tools: Tool functions the agent may call.

    Returns:
        Configured ChatAgent with the database tools.
    """
    return ChatAgent(
        name=AGENT_NAME,
        instructions=instructions,
        chat_client=chat_client,
        tools=tools,
    )


def build_agent(settings: Settings, toolset: DatabaseToolset) -> ChatAgent:
    """Default agent factory used by ``MySQLAgent`` for the chat task."""
    return create_database_agent(
        create_chat_client(settings),
        load_prompt(settings.mysql_row_limit),
        build_tools(toolset),
    )


async def run_agent(agent: ChatAgent, message: str) -> str:
    """Send one user message and return the agent's final text answer.

    Args:
        agent: Configured agent.
        message: User question.

    Returns:
        The final answer text (empty if the model produced none).
    """
    logger.info("Running agent for message: %s", message[:100])
    result = await agent.run(message)
    return result.text or ""
