"""Protocol interfaces for I/O boundaries.

These protocols enable dependency injection for testability.
The production implementation wraps an ``aiomysql`` connection; test
fakes return canned rows with zero network access.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from config.settings import Settings


@runtime_checkable
class SqlConnection(Protocol):
    """A single live database session.

    ``execute`` returns one dict per row, keyed by column label.
    Statements that produce no result set return an empty list.
    """

    async def execute(
        self,
        query: str,
        params: list[Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Execute a SQL statement.

        Args:
            query: SQL statement, optionally with ``%s`` placeholders.
            params: Bind-parameter values (or ``None``).

        Returns:
            Rows as dicts, in the order the server produced them.
        """
        ...

    async def close(self) -> None:
        """Release the session. Calling it twice is harmless."""
        ...


ConnectionFactory = Callable[["Settings"], Awaitable[SqlConnection]]
"""Creates a connected ``SqlConnection`` from resolved settings."""
