"""MySQLAgent: task dispatch and the natural-language entry point.

``MySQLAgent`` is the long-lived service object callers hold. It owns the
``ConnectionManager`` (settings plus the single database session), maps
each task request to its executor, times the whole dispatch, and wraps
the outcome in a ``TaskResult`` envelope. ``dispatch`` never raises.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from config.settings import Settings
from entities.shared.connection import ConnectionManager
from entities.shared.protocols import ConnectionFactory
from entities.tasks import (
    check_write_permission,
    connection_info,
    elapsed_ms,
    get_all_schemas,
    get_schema,
    list_tables,
    run_query,
)
from models import (
    ChatRequest,
    ConnectionTestRequest,
    GetAllSchemasRequest,
    GetSchemaRequest,
    ListTablesRequest,
    QueryRequest,
    QueryResult,
    TaskRequest,
    TaskResult,
    parse_task_request,
)

from .agent import build_agent, run_agent
from .tools import DatabaseToolset

logger = logging.getLogger(__name__)

AgentFactory = Callable[[Settings, DatabaseToolset], Any]
"""Builds a chat agent (anything with ``async run(message) -> .text``)."""

_REQUEST_TYPES = (
    ConnectionTestRequest,
    ListTablesRequest,
    GetSchemaRequest,
    GetAllSchemasRequest,
    QueryRequest,
    ChatRequest,
)


class MySQLAgent:
    """Runs predefined database tasks and natural-language questions.

    Usage::

        async with MySQLAgent() as agent:
            result = await agent.dispatch({"task": "list-tables"})
            answer = await agent.ask("Which table holds orders?")

    Args:
        overrides: Explicit settings that win over environment variables.
        connect: Database session factory (defaults to ``MySqlClient.connect``).
        agent_factory: Builds the chat agent for the chat task
            (defaults to ``build_agent``).
    """

    def __init__(
        self,
        overrides: dict[str, Any] | None = None,
        *,
        connect: ConnectionFactory | None = None,
        agent_factory: AgentFactory | None = None,
    ) -> None:
        self.connections = ConnectionManager(overrides, connect=connect)
        self.toolset = DatabaseToolset(self.connections)
        self._agent_factory: AgentFactory = agent_factory or build_agent

    @property
    def settings(self) -> Settings:
        """Settings currently in effect."""
        return self.connections.settings

    async def __aenter__(self) -> MySQLAgent:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def configure(self, **overrides: Any) -> Settings:
        """Merge configuration overrides and force a reconnect on next use."""
        return await self.connections.reconfigure(**overrides)

    async def close(self) -> None:
        """Release the database session."""
        await self.connections.close()

    async def dispatch(self, request: TaskRequest | dict[str, Any]) -> TaskResult[Any]:
        """Run one task and wrap its outcome in an envelope.

        Args:
            request: A task request model, or a raw dict validated with
                ``parse_task_request``.

        Returns:
            ``TaskResult`` with ``data`` on success or ``error`` on failure.
            ``duration_ms`` covers the whole dispatch, validation included.
        """
        start = time.perf_counter()
        task = request.get("task") if isinstance(request, dict) else getattr(request, "task", None)
        try:
            if not isinstance(request, _REQUEST_TYPES):
                request = parse_task_request(request)
            data = await self._execute(request)
        except Exception as e:  # noqa: BLE001
            duration_ms = elapsed_ms(start)
            logger.warning("Task %s failed after %.2f ms: %s", task, duration_ms, e)
            return TaskResult(success=False, error=str(e) or type(e).__name__, duration_ms=duration_ms)

        duration_ms = elapsed_ms(start)
        logger.info("Task %s completed in %.2f ms", task, duration_ms)
        return TaskResult(success=True, data=data, duration_ms=duration_ms)

    async def ask(self, prompt: str) -> TaskResult[str]:
        """Answer a natural-language question through the tool-calling agent."""
        return await self.dispatch({"task": "chat", "message": prompt})

    async def execute_query(self, sql: str, allow_write: bool = False) -> TaskResult[QueryResult]:
        """Run a raw SQL statement directly, bypassing the model."""
        return await self.dispatch({"task": "query", "sql": sql, "allow_write": allow_write})

    async def _execute(self, request: TaskRequest) -> Any:
        if isinstance(request, ChatRequest):
            agent = self._agent_factory(self.settings, self.toolset)
            return await run_agent(agent, request.message)

        if isinstance(request, QueryRequest):
            # Permission failures never need a database session
            check_write_permission(request.sql, request.allow_write, self.settings)

        db = await self.connections.get_connection()

        if isinstance(request, ConnectionTestRequest):
            return await connection_info(db)
        if isinstance(request, ListTablesRequest):
            return await list_tables(db, request.include_row_counts)
        if isinstance(request, GetSchemaRequest):
            return await get_schema(db, request.table_name)
        if isinstance(request, GetAllSchemasRequest):
            return await get_all_schemas(db)
        if isinstance(request, QueryRequest):
            return await run_query(
                db,
                request.sql,
                settings=self.settings,
                allow_write=request.allow_write,
            )
        raise ValueError(f"Unknown task: {request!r}")
