"""
Database tools for the MySQL agent.

Each task executor is exposed as an AI-callable function with a declared
parameter schema. Tool calls never raise into the model runtime: any
failure comes back as a JSON error payload so the model always receives
a response.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Annotated, Any

from agent_framework import tool
from entities.shared.connection import ConnectionManager
from entities.shared.errors import ToolInvocationError
from entities.tasks import connection_info, get_all_schemas, get_schema, list_tables, run_query
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    """Convert models (or lists of models) into JSON-compatible data."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    return value


def _dumps(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


class DatabaseToolset:
    """The five database tools, bound to one ``ConnectionManager``.

    Methods return JSON text and never raise.

    Args:
        connections: Owner of the database session and settings.
    """

    def __init__(self, connections: ConnectionManager) -> None:
        self._connections = connections

    async def _guarded(
        self,
        tool_name: str,
        call: Callable[[], Awaitable[Any]],
        **context: Any,
    ) -> str:
        logger.info("Tool called: %s %s", tool_name, context or "")
        try:
            result = await call()
            return _dumps(_jsonable(result))
        except Exception as e:  # noqa: BLE001
            error = ToolInvocationError(tool_name, e)
            logger.warning("%s", error)
            return _dumps(error.to_payload(**context))

    async def test_connection(self) -> str:
        """Test the MySQL database connection and return server information."""

        async def call() -> dict[str, Any]:
            db = await self._connections.get_connection()
            info = await connection_info(db)
            return {"status": "connected", **info.model_dump(mode="json")}

        return await self._guarded("test_connection", call)

    async def list_tables(
        self,
        include_row_counts: Annotated[
            bool, Field(description="Fetch exact row counts (slower but accurate)")
        ] = False,
    ) -> str:
        """List all tables in the current database with metadata."""

        async def call() -> Any:
            db = await self._connections.get_connection()
            return await list_tables(db, include_row_counts)

        return await self._guarded("list_tables", call)

    async def get_schema(
        self,
        table_name: Annotated[str, Field(description="The table name to inspect")],
    ) -> str:
        """Get the schema for a table: columns, indexes, and foreign keys."""

        async def call() -> Any:
            db = await self._connections.get_connection()
            return await get_schema(db, table_name)

        return await self._guarded("get_schema", call, table=table_name)

    async def get_all_schemas(self) -> str:
        """Get schemas for all tables. Use sparingly for large databases."""

        async def call() -> Any:
            db = await self._connections.get_connection()
            return await get_all_schemas(db)

        return await self._guarded("get_all_schemas", call)

    async def run_query(
        self,
        sql: Annotated[str, Field(description="The SQL query to execute")],
        allow_write: Annotated[
            bool, Field(description="Enable INSERT/UPDATE/DELETE (requires env permission)")
        ] = False,
    ) -> str:
        """Execute a SQL query. SELECTs are auto-limited; writes need explicit permission."""

        async def call() -> Any:
            db = await self._connections.get_connection()
            return await run_query(
                db, sql, settings=self._connections.settings, allow_write=allow_write
            )

        return await self._guarded("run_query", call)


TOOL_DESCRIPTIONS: dict[str, str] = {
    "test_connection": (
        "Test the MySQL database connection and return server information. "
        "Always call this first to verify connectivity."
    ),
    "list_tables": "List all tables in the current database with metadata.",
    "get_schema": (
        "Get the schema for a specific table including columns, indexes, and foreign keys."
    ),
    "get_all_schemas": "Get schemas for all tables. Use sparingly for large databases.",
    "run_query": (
        "Execute a SQL query. SELECT queries are auto-limited. "
        "Write operations require explicit permission."
    ),
}


def build_tools(toolset: DatabaseToolset) -> list[Any]:
    """Wrap the toolset's methods as agent-framework tools.

    Args:
        toolset: Bound database tools.

    Returns:
        Tools in the order they are listed in the agent instructions.
    """
    return [
        tool(getattr(toolset, name), name=name, description=description)
        for name, description in TOOL_DESCRIPTIONS.items()
    ]
