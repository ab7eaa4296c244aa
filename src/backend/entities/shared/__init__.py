"""Shared utilities for the database tasks and the agent."""

from .clients import MySqlClient
from .connection import ConnectionManager
from .errors import (
    DatabaseConnectionError,
    DriverError,
    MySQLAgentError,
    TaskValidationError,
    ToolInvocationError,
    WritePermissionError,
)
from .sql_guard import enforce_row_limit, is_write_query, quote_identifier

__all__ = [
    "ConnectionManager",
    "DatabaseConnectionError",
    "DriverError",
    "MySQLAgentError",
    "MySqlClient",
    "TaskValidationError",
    "ToolInvocationError",
    "WritePermissionError",
    "enforce_row_limit",
    "is_write_query",
    "quote_identifier",
]
