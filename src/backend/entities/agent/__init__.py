"""
MySQL agent - task dispatch, database tools, and the chat agent.

The service:
1. Maps task requests to executors and wraps results in envelopes
2. Exposes the executors as tools for the model runtime
3. Answers natural-language questions through a tool-calling ChatAgent
"""

from .agent import build_agent, create_chat_client, create_database_agent, load_prompt, run_agent
from .service import MySQLAgent
from .tools import DatabaseToolset, build_tools

__all__ = [
    "DatabaseToolset",
    "MySQLAgent",
    "build_agent",
    "build_tools",
    "create_chat_client",
    "create_database_agent",
    "load_prompt",
    "run_agent",
]
