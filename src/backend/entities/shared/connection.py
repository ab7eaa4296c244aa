"""Owner of the single database session and the settings it was built from.

``ConnectionManager`` is the explicit context object threaded through the
task executors: it memoizes one ``SqlConnection`` per instance, recreates
it after ``close()`` or ``reconfigure()``, and serialises the
check-then-create-or-replace step behind one ``asyncio.Lock``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from config.settings import Settings, resolve_settings
from entities.shared.clients import MySqlClient
from entities.shared.errors import DatabaseConnectionError, MySQLAgentError
from entities.shared.protocols import ConnectionFactory, SqlConnection

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Lazily creates, memoizes, and replaces the database session.

    Args:
        overrides: Explicit settings that win over the environment.
        connect: Factory that opens a session from ``Settings``.
            Defaults to ``MySqlClient.connect``.
    """

    def __init__(
        self,
        overrides: dict[str, Any] | None = None,
        connect: ConnectionFactory | None = None,
    ) -> None:
        self._overrides: dict[str, Any] = {
            k: v for k, v in (overrides or {}).items() if v is not None
        }
        self._settings: Settings = resolve_settings(self._overrides)
        self._connect: ConnectionFactory = connect or MySqlClient.connect
        self._connection: SqlConnection | None = None
        self._lock = asyncio.Lock()

    @property
    def settings(self) -> Settings:
        """The resolved settings the current (or next) session uses."""
        return self._settings

    @property
    def is_connected(self) -> bool:
        """True while a memoized session exists."""
        return self._connection is not None

    async def get_connection(self) -> SqlConnection:
        """Return the memoized session, opening one if needed.

        Returns:
            The live ``SqlConnection``.

        Raises:
            DatabaseConnectionError: If the session cannot be established.
                The next call tries again with a fresh session.
        """
        async with self._lock:
            if self._connection is not None and getattr(self._connection, "closed", False):
                logger.info("Dropping closed MySQL session")
                self._connection = None
            if self._connection is None:
                self._connection = await self._open()
            return self._connection

    async def close(self) -> None:
        """Release the session if one is open. Idempotent."""
        async with self._lock:
            await self._release()

    async def reconfigure(self, **overrides: Any) -> Settings:
        """Merge overrides into the configuration and force a fresh session.

        Merging, resolving and swapping happen in one critical section, so
        concurrent calls each see the previous call's overrides. The new
        settings are resolved before anything is torn down, so a failure
        leaves both the old configuration and the old session in place.

        Args:
            **overrides: Settings fields to override. ``None`` values are ignored.

        Returns:
            The newly resolved settings.
        """
        async with self._lock:
            merged = {**self._overrides, **{k: v for k, v in overrides.items() if v is not None}}
            settings = resolve_settings(merged)
            await self._release()
            self._overrides = merged
            self._settings = settings

        logger.info("Configuration updated: %s", sorted(overrides))
        return settings

    # -- helpers --

    async def _open(self) -> SqlConnection:
        try:
            connection = await self._connect(self._settings)
        except MySQLAgentError:
            raise
        except Exception as e:
            logger.exception("Failed to open MySQL session")
            raise DatabaseConnectionError(str(e)) from e
        logger.info("MySQL session established")
        return connection

    async def _release(self) -> None:
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        await connection.close()
        logger.info("MySQL session closed")
