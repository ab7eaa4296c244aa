"""
Shared models for entities.

These models are used by the task executors, the dispatcher, the tool
facade, and the API layer. All models are re-exported here.
"""

from .results import (
    ColumnInfo,
    ConnectionInfo,
    ForeignKeyInfo,
    IndexInfo,
    QueryResult,
    TableInfo,
    TableSchema,
    TaskResult,
)
from .tasks import (
    ChatRequest,
    ConnectionTestRequest,
    GetAllSchemasRequest,
    GetSchemaRequest,
    ListTablesRequest,
    QueryRequest,
    TaskName,
    TaskRequest,
    parse_task_request,
)

__all__ = [
    # Results (catalog descriptors and envelopes)
    "ColumnInfo",
    "ConnectionInfo",
    "ForeignKeyInfo",
    "IndexInfo",
    "QueryResult",
    "TableInfo",
    "TableSchema",
    "TaskResult",
    # Task requests (tagged union)
    "ChatRequest",
    "ConnectionTestRequest",
    "GetAllSchemasRequest",
    "GetSchemaRequest",
    "ListTablesRequest",
    "QueryRequest",
    "TaskName",
    "TaskRequest",
    "parse_task_request",
]
