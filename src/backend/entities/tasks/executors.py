"""Task executors: one coroutine per predefined task.

Each executor takes the live ``SqlConnection`` first, issues its queries
against ``information_schema`` or user tables, and returns typed models.
Executors raise on failure; converting errors into envelopes is the
dispatcher's job.

Statements run one after another on the single connection. Multi-query
tasks (``get_schema``, ``list_tables`` with row counts, ``get_all_schemas``)
are not atomic, so a concurrent schema change can show up as skew between
their parts.
"""

from __future__ import annotations

import logging
import time

from config.settings import Settings
from entities.shared.errors import DriverError, WritePermissionError
from entities.shared.protocols import SqlConnection
from entities.shared.sql_guard import enforce_row_limit, is_write_query, quote_identifier
from models import (
    ColumnInfo,
    ConnectionInfo,
    ForeignKeyInfo,
    IndexInfo,
    QueryResult,
    TableInfo,
    TableSchema,
)

logger = logging.getLogger(__name__)

CONNECTION_INFO_SQL = """
    SELECT
      VERSION() AS version,
      DATABASE() AS db_name,
      USER() AS db_user
"""

LIST_TABLES_SQL = """
    SELECT
      TABLE_NAME AS table_name,
      TABLE_TYPE AS table_type,
      ENGINE AS engine,
      TABLE_ROWS AS estimated_rows,
      CREATE_TIME AS created_at,
      UPDATE_TIME AS updated_at
    FROM information_schema.TABLES
    WHERE TABLE_SCHEMA = DATABASE()
    ORDER BY TABLE_NAME
"""

BASE_TABLES_SQL = """
    SELECT TABLE_NAME AS name
    FROM information_schema.TABLES
    WHERE TABLE_SCHEMA = DATABASE() AND TABLE_TYPE = 'BASE TABLE'
    ORDER BY TABLE_NAME
"""

COLUMNS_SQL = """
    SELECT
      COLUMN_NAME AS name,
      DATA_TYPE AS type,
      COLUMN_TYPE AS full_type,
      IS_NULLABLE AS nullable,
      COLUMN_DEFAULT AS default_value,
      COLUMN_KEY AS key_type,
      EXTRA AS extra,
      COLUMN_COMMENT AS comment
    FROM information_schema.COLUMNS
    WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = %s
    ORDER BY ORDINAL_POSITION
"""

INDEXES_SQL = """
    SELECT
      INDEX_NAME AS name,
      GROUP_CONCAT(COLUMN_NAME ORDER BY SEQ_IN_INDEX) AS columns,
      NON_UNIQUE AS non_unique,
      INDEX_TYPE AS type
    FROM information_schema.STATISTICS
    WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = %s
    GROUP BY INDEX_NAME, NON_UNIQUE, INDEX_TYPE
"""

FOREIGN_KEYS_SQL = """
    SELECT
      CONSTRAINT_NAME AS name,
      COLUMN_NAME AS column_name,
      REFERENCED_TABLE_NAME AS referenced_table,
      REFERENCED_COLUMN_NAME AS referenced_column
    FROM information_schema.KEY_COLUMN_USAGE
    WHERE TABLE_SCHEMA = DATABASE()
      AND TABLE_NAME = %s
      AND REFERENCED_TABLE_NAME IS NOT NULL
"""

CALLER_WRITE_GATE_MESSAGE = "Write operations require allow_write=true parameter"
CONFIG_WRITE_GATE_MESSAGE = (
    "Write operations disabled by configuration. Set MYSQL_ALLOW_WRITE=true"
)


def elapsed_ms(start: float) -> float:
    """Milliseconds since a ``time.perf_counter()`` reading, rounded to 2 decimals, never negative."""
    return max(round((time.perf_counter() - start) * 1000, 2), 0.0)


async def connection_info(db: SqlConnection) -> ConnectionInfo:
    """Return server version, current database and current user."""
    rows = await db.execute(CONNECTION_INFO_SQL)
    info = rows[0]
    return ConnectionInfo(
        version=info["version"],
        database=info["db_name"],
        user=info["db_user"],
    )


async def list_tables(db: SqlConnection, include_row_counts: bool = False) -> list[TableInfo]:
    """List tables and views in the current database, ordered by name.

    Args:
        db: Live connection.
        include_row_counts: Run ``COUNT(*)`` for every base table and fill in
            ``exact_row_count``. One extra round trip per table.

    Returns:
        Table descriptors in name order.
    """
    rows = await db.execute(LIST_TABLES_SQL)
    tables = [TableInfo.model_validate(row) for row in rows]

    if not include_row_counts:
        return tables

    counted: list[TableInfo] = []
    for table in tables:
        if table.table_type == "BASE TABLE":
            count_rows = await db.execute(
                f"SELECT COUNT(*) AS count FROM {quote_identifier(table.table_name)}"
            )
            table = table.model_copy(update={"exact_row_count": int(count_rows[0]["count"])})
        counted.append(table)

    logger.info("Counted rows for %d table(s)", len(counted))
    return counted


async def get_schema(db: SqlConnection, table_name: str) -> TableSchema:
    """Describe one table: columns, indexes and foreign keys.

    The table name is always sent as a bound parameter.

    Args:
        db: Live connection.
        table_name: Table in the current database.

    Returns:
        The table's schema.

    Raises:
        DriverError: If the table does not exist in the current database.
    """
    column_rows = await db.execute(COLUMNS_SQL, [table_name])
    index_rows = await db.execute(INDEXES_SQL, [table_name])
    fk_rows = await db.execute(FOREIGN_KEYS_SQL, [table_name])

    if not column_rows:
        # information_schema returns nothing rather than failing for unknown tables
        raise DriverError(f"Table '{table_name}' doesn't exist")

    return TableSchema(
        table=table_name,
        columns=[ColumnInfo.model_validate(row) for row in column_rows],
        indexes=[IndexInfo.model_validate(row) for row in index_rows],
        foreign_keys=[ForeignKeyInfo.model_validate(row) for row in fk_rows],
    )


async def get_all_schemas(db: SqlConnection) -> list[TableSchema]:
    """Describe every base table, in name order.

    Issues three catalog queries per table; meant for small schemas.
    """
    rows = await db.execute(BASE_TABLES_SQL)
    schemas = [await get_schema(db, row["name"]) for row in rows]
    logger.info("Collected schemas for %d table(s)", len(schemas))
    return schemas


def check_write_permission(sql: str, allow_write: bool, settings: Settings) -> None:
    """Apply the dual write gate to a statement.

    Args:
        sql: Raw SQL text.
        allow_write: Caller-side gate.
        settings: Supplies the configuration-side gate ``mysql_allow_write``.

    Raises:
        WritePermissionError: If the statement is a write and either gate is closed.
            The message names the gate that is missing.
    """
    if not is_write_query(sql):
        return
    if not allow_write:
        raise WritePermissionError(CALLER_WRITE_GATE_MESSAGE)
    if not settings.mysql_allow_write:
        raise WritePermissionError(CONFIG_WRITE_GATE_MESSAGE)


async def run_query(
    db: SqlConnection,
    sql: str,
    *,
    settings: Settings,
    allow_write: bool = False,
) -> QueryResult:
    """Execute a raw SQL statement.

    Write statements need both ``allow_write`` and ``settings.mysql_allow_write``.
    SELECTs without a LIMIT get ``settings.mysql_row_limit`` appended.

    Args:
        db: Live connection.
        sql: Raw SQL text.
        settings: Resolved configuration.
        allow_write: Caller-side write gate.

    Returns:
        Rows, row count, and the time spent in ``execute`` alone.

    Raises:
        WritePermissionError: If a write gate is closed.
        DriverError: If the server rejects the statement.
    """
    check_write_permission(sql, allow_write, settings)
    final_sql = enforce_row_limit(sql, settings.mysql_row_limit)

    start = time.perf_counter()
    rows = await db.execute(final_sql)
    duration_ms = elapsed_ms(start)

    logger.info("Query returned %d row(s) in %.2f ms", len(rows), duration_ms)
    return QueryResult(rows=rows, row_count=len(rows), duration_ms=duration_ms)
