"""
Task executors for the predefined database tasks.
"""

from .executors import (
    check_write_permission,
    connection_info,
    elapsed_ms,
    get_all_schemas,
    get_schema,
    list_tables,
    run_query,
)

__all__ = [
    "check_write_permission",
    "connection_info",
    "elapsed_ms",
    "get_all_schemas",
    "get_schema",
    "list_tables",
    "run_query",
]
