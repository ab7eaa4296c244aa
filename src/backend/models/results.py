"""
Result models produced by the task executors.

Catalog descriptors are read-only projections of ``information_schema``
rows; they are rebuilt on every call and never cached.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_serializer

T = TypeVar("T")


def _hex_if_binary(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()
    return value


class ConnectionInfo(BaseModel):
    """Server details returned by the connection test."""

    version: str = Field(description="Server version string")
    database: str | None = Field(default=None, description="Current database (None if none selected)")
    user: str = Field(description="Authenticated user as reported by USER()")


class TableInfo(BaseModel):
    """One row of ``information_schema.TABLES`` for the current database."""

    table_name: str
    table_type: str = Field(description="'BASE TABLE' or 'VIEW'")
    engine: str | None = None
    estimated_rows: int | None = Field(default=None, description="Storage-engine estimate")
    created_at: datetime | None = None
    updated_at: datetime | None = None
    exact_row_count: int | None = Field(
        default=None, description="COUNT(*) result, only when row counts were requested"
    )


class ColumnInfo(BaseModel):
    """A column definition from ``information_schema.COLUMNS``."""

    name: str
    type: str = Field(description="Data type, e.g. 'varchar'")
    full_type: str = Field(description="Declared type, e.g. 'varchar(255)'")
    nullable: str = Field(description="'YES' or 'NO'")
    default_value: str | None = None
    key_type: str = Field(default="", description="'PRI', 'UNI', 'MUL' or ''")
    extra: str = ""
    comment: str = ""


class IndexInfo(BaseModel):
    """An index from ``information_schema.STATISTICS``, grouped by index name."""

    name: str
    columns: str = Field(description="Comma-separated member columns in index order")
    non_unique: int = Field(description="0 for unique indexes, 1 otherwise")
    type: str = Field(description="Index type, e.g. 'BTREE'")


class ForeignKeyInfo(BaseModel):
    """A foreign key column from ``information_schema.KEY_COLUMN_USAGE``."""

    name: str
    column_name: str
    referenced_table: str
    referenced_column: str


class TableSchema(BaseModel):
    """Columns, indexes and foreign keys of one table."""

    table: str
    columns: list[ColumnInfo] = Field(default_factory=list)
    indexes: list[IndexInfo] = Field(default_factory=list)
    foreign_keys: list[ForeignKeyInfo] = Field(default_factory=list)


class QueryResult(BaseModel):
    """Rows returned by a user query.

    Binary column values (BINARY, VARBINARY, BLOB) stay ``bytes`` in Python
    and are written as ``0x``-prefixed hex strings in JSON output.
    """

    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int = 0
    duration_ms: float = Field(default=0.0, description="Time spent in execute() only")

    @field_serializer("rows", when_used="json")
    def _serialize_rows(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [{key: _hex_if_binary(value) for key, value in row.items()} for row in rows]


class TaskResult(BaseModel, Generic[T]):
    """Uniform envelope returned by ``MySQLAgent.dispatch``.

    Exactly one of ``data`` / ``error`` is meaningful depending on ``success``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    data: T | None = None
    error: str | None = None
    duration_ms: float | None = None
