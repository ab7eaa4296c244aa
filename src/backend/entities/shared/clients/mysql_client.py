"""
Async MySQL client for executing queries.

This module wraps a single ``aiomysql`` connection. It does not pool,
cache, or wrap statements in transactions; autocommit is on so write
statements that pass the permission gates take effect immediately.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aiomysql
from entities.shared.errors import DatabaseConnectionError, DriverError
from pymysql.err import MySQLError, OperationalError

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)

# CR_SERVER_GONE_ERROR, CR_SERVER_LOST, CR_SERVER_LOST_EXTENDED
_LOST_CONNECTION_CODES = {2006, 2013, 2055}


class MySqlClient:
    """
    Async wrapper around one MySQL session.

    Usage:
        client = await MySqlClient.connect(settings)
        rows = await client.execute("SELECT VERSION() AS version")
        await client.close()

    or as an async context manager::

        async with await MySqlClient.connect(settings) as client:
            rows = await client.execute("SELECT 1 AS one")
    """

    def __init__(self, connection: aiomysql.Connection) -> None:
        """
        Wrap an open connection.

        Args:
            connection: An ``aiomysql`` connection. Ownership moves to this client.
        """
        self._connection: aiomysql.Connection | None = connection

    @classmethod
    async def connect(cls, settings: Settings) -> MySqlClient:
        """
        Open a new session from resolved settings.

        Args:
            settings: Resolved configuration. ``connection_options()`` picks
                either the URL or the discrete fields.

        Returns:
            A connected client.

        Raises:
            DatabaseConnectionError: If the server cannot be reached or rejects the login.
        """
        try:
            options = settings.connection_options()
        except ValueError as e:
            raise DatabaseConnectionError(str(e)) from e

        logger.info(
            "Connecting to MySQL at %s:%s (db=%s, user=%s)",
            options["host"],
            options["port"],
            options["db"],
            options["user"],
        )
        try:
            connection = await aiomysql.connect(**options, autocommit=True)
        except (MySQLError, OSError) as e:
            logger.error("MySQL connection failed: %s", e)
            raise DatabaseConnectionError(str(e)) from e

        return cls(connection)

    async def __aenter__(self) -> MySqlClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        """True once ``close()`` has run or the server dropped the session."""
        return self._connection is None or self._connection.closed

    async def execute(
        self,
        query: str,
        params: list[Any] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Execute a SQL statement and return its rows.

        Args:
            query: SQL statement with ``%s`` placeholders for ``params``.
            params: Bind-parameter values (or ``None``).

        Returns:
            One dict per row keyed by column label. Empty for statements
            without a result set.

        Raises:
            DatabaseConnectionError: If the client was already closed.
            DriverError: If the server rejects the statement.
        """
        if self._connection is None:
            raise DatabaseConnectionError("Database connection is closed")

        logger.debug("Executing SQL: %s", query[:200])
        try:
            async with self._connection.cursor(aiomysql.DictCursor) as cursor:
                await cursor.execute(query, params)
                if cursor.description is None:
                    return []
                rows = await cursor.fetchall()
        except OperationalError as e:
            if e.args and e.args[0] in _LOST_CONNECTION_CODES:
                logger.error("MySQL session lost: %s", e)
                raise DatabaseConnectionError(str(e)) from e
            logger.error("SQL execution error: %s", e)
            raise DriverError(str(e)) from e
        except MySQLError as e:
            logger.error("SQL execution error: %s", e)
            raise DriverError(str(e)) from e

        return list(rows)

    async def close(self) -> None:
        """Close the session. Safe to call more than once."""
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        try:
            await connection.ensure_closed()
        except (MySQLError, OSError) as e:
            # ensure_closed() still drops the socket on failure
            logger.warning("Error while closing MySQL connection: %s", e)
