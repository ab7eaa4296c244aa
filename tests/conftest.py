"""Shared test fixtures for the MySQL agent."""

import sys
from collections.abc import Callable
from pathlib import Path
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest

# Ensure src/backend/ is on the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src" / "backend"))

import config.settings as settings_module
from config.settings import Settings
from entities.agent import MySQLAgent

ENV_VARS = (
    "MYSQL_URL",
    "MYSQL_HOST",
    "MYSQL_PORT",
    "MYSQL_USER",
    "MYSQL_PASS",
    "MYSQL_DB",
    "MYSQL_ALLOW_WRITE",
    "MYSQL_ROW_LIMIT",
    "AGENT_MODEL",
    "AGENT_MAX_TURNS",
    "OPENAI_API_KEY",
    "LOG_LEVEL",
)

Rows = list[dict[str, Any]]

# ---------------------------------------------------------------------------
# Protocol fakes
# ---------------------------------------------------------------------------


class FakeConnection:
    """In-memory fake satisfying the ``SqlConnection`` protocol.

    ``responses`` maps a SQL fragment to canned rows (or to a callable taking
    the bound params and returning rows). The first fragment contained in the
    query wins; unmatched queries return no rows. Every call is recorded.
    """

    def __init__(
        self,
        responses: dict[str, Rows | Callable[[list[Any] | None], Rows]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.responses = responses or {}
        self.error = error
        self.calls: list[tuple[str, list[Any] | None]] = []
        self.closed = False
        self.close_calls = 0

    async def execute(self, query: str, params: list[Any] | None = None) -> Rows:
        """Return the canned rows for the first matching fragment."""
        self.calls.append((query, params))
        if self.error is not None:
            raise self.error
        for fragment, rows in self.responses.items():
            if fragment in query:
                result = rows(params) if callable(rows) else rows
                return [dict(row) for row in result]
        return []

    async def close(self) -> None:
        """Mark the connection closed."""
        self.closed = True
        self.close_calls += 1

    @property
    def queries(self) -> list[str]:
        """SQL text of every recorded call, in order."""
        return [query for query, _ in self.calls]


class FakeConnector:
    """Connection factory handing out ``FakeConnection`` objects.

    Hands out ``connections`` in order (reusing the last one), or raises
    ``error`` when set. Records the settings of every connect attempt.
    """

    def __init__(self, *connections: FakeConnection, error: Exception | None = None) -> None:
        self.connections = list(connections) or [FakeConnection()]
        self.error = error
        self.attempts: list[Settings] = []

    async def __call__(self, settings: Settings) -> FakeConnection:
        self.attempts.append(settings)
        if self.error is not None:
            raise self.error
        index = min(len(self.attempts), len(self.connections)) - 1
        return self.connections[index]


class FakeChatAgent:
    """Stand-in for ``ChatAgent`` returning a canned final answer."""

    def __init__(self, text: str | None = "There are 4 tables.") -> None:
        self.run = AsyncMock(return_value=SimpleNamespace(text=text))


# ---------------------------------------------------------------------------
# Catalog data
# ---------------------------------------------------------------------------

TABLE_ROWS: Rows = [
    {
        "table_name": "orders",
        "table_type": "BASE TABLE",
        "engine": "InnoDB",
        "estimated_rows": 8,
        "created_at": None,
        "updated_at": None,
    },
    {
        "table_name": "user_emails",
        "table_type": "VIEW",
        "engine": None,
        "estimated_rows": None,
        "created_at": None,
        "updated_at": None,
    },
    {
        "table_name": "users",
        "table_type": "BASE TABLE",
        "engine": "InnoDB",
        "estimated_rows": 10,
        "created_at": None,
        "updated_at": None,
    },
]

COLUMN_ROWS: dict[str, Rows] = {
    "users": [
        {
            "name": "id",
            "type": "int",
            "full_type": "int",
            "nullable": "NO",
            "default_value": None,
            "key_type": "PRI",
            "extra": "auto_increment",
            "comment": "",
        },
        {
            "name": "email",
            "type": "varchar",
            "full_type": "varchar(255)",
            "nullable": "NO",
            "default_value": None,
            "key_type": "UNI",
            "extra": "",
            "comment": "",
        },
    ],
    "orders": [
        {
            "name": "id",
            "type": "int",
            "full_type": "int",
            "nullable": "NO",
            "default_value": None,
            "key_type": "PRI",
            "extra": "auto_increment",
            "comment": "",
        },
        {
            "name": "user_id",
            "type": "int",
            "full_type": "int",
            "nullable": "NO",
            "default_value": None,
            "key_type": "MUL",
            "extra": "",
            "comment": "",
        },
    ],
}

INDEX_ROWS: dict[str, Rows] = {
    "users": [
        {"name": "PRIMARY", "columns": "id", "non_unique": 0, "type": "BTREE"},
        {"name": "email", "columns": "email", "non_unique": 0, "type": "BTREE"},
    ],
    "orders": [
        {"name": "PRIMARY", "columns": "id", "non_unique": 0, "type": "BTREE"},
        {"name": "user_id", "columns": "user_id", "non_unique": 1, "type": "BTREE"},
    ],
}

FOREIGN_KEY_ROWS: dict[str, Rows] = {
    "users": [],
    "orders": [
        {
            "name": "orders_ibfk_1",
            "column_name": "user_id",
            "referenced_table": "users",
            "referenced_column": "id",
        }
    ],
}


def _by_table(rows: dict[str, Rows]) -> Callable[[list[Any] | None], Rows]:
    return lambda params: rows.get(params[0], []) if params else []


def make_catalog_connection() -> FakeConnection:
    """Return a ``FakeConnection`` answering the catalog queries for a small shop schema."""
    return FakeConnection(
        {
            "VERSION()": [
                {"version": "8.0.36", "db_name": "shop", "db_user": "agent@localhost"}
            ],
            "TABLE_TYPE = 'BASE TABLE'": [{"name": "orders"}, {"name": "users"}],
            "ENGINE AS engine": TABLE_ROWS,
            "information_schema.COLUMNS": _by_table(COLUMN_ROWS),
            "information_schema.STATISTICS": _by_table(INDEX_ROWS),
            "information_schema.KEY_COLUMN_USAGE": _by_table(FOREIGN_KEY_ROWS),
            "FROM `orders`": [{"count": 8}],
            "FROM `users`": [{"count": 10}],
        }
    )


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run every test without agent env vars, without a ``.env`` file, and
    with a fresh global settings cache."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings_module, "_settings", None)


@pytest.fixture
def test_settings() -> Settings:
    """Return a ``Settings`` instance populated with safe test defaults."""
    return Settings(
        mysql_host="db.test",
        mysql_user="agent",
        mysql_db="shop",
        mysql_row_limit=100,
        openai_api_key="sk-test",
    )


@pytest.fixture
def fake_db() -> FakeConnection:
    """Return a ``FakeConnection`` with the shop catalog loaded."""
    return make_catalog_connection()


@pytest.fixture
def fake_connector(fake_db: FakeConnection) -> FakeConnector:
    """Return a connector that always hands out ``fake_db``."""
    return FakeConnector(fake_db)


@pytest.fixture
def fake_chat_agent() -> FakeChatAgent:
    """Return a ``FakeChatAgent`` with a canned answer."""
    return FakeChatAgent()


@pytest.fixture
def service(fake_connector: FakeConnector, fake_chat_agent: FakeChatAgent) -> MySQLAgent:
    """Return a ``MySQLAgent`` wired to the fake database and chat agent."""
    return MySQLAgent(
        {"mysql_db": "shop", "mysql_row_limit": 100, "openai_api_key": "sk-test"},
        connect=fake_connector,
        agent_factory=lambda settings, toolset: fake_chat_agent,
    )
