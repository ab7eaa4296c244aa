"""Keyword heuristics for SQL statements.

Pure functions, no I/O. These look at the leading keyword only; they are
not a SQL parser. A comment before the keyword, a CTE wrapping a write, or
several statements in one string are not classified reliably.
"""

import re

WRITE_KEYWORDS = (
    "INSERT",
    "UPDATE",
    "DELETE",
    "DROP",
    "CREATE",
    "ALTER",
    "TRUNCATE",
    "REPLACE",
)

_WRITE_PATTERN = re.compile(rf"^({'|'.join(WRITE_KEYWORDS)})", re.IGNORECASE)


def is_write_query(sql: str) -> bool:
    """Return True when the statement starts with a data or schema changing keyword.

    Args:
        sql: Raw SQL text.

    Returns:
        True if the trimmed statement begins with one of ``WRITE_KEYWORDS``.
    """
    return bool(_WRITE_PATTERN.match(sql.strip()))


def enforce_row_limit(sql: str, limit: int) -> str:
    """Append ``LIMIT <limit>`` to a SELECT that has no LIMIT clause.

    The check is a substring test for ``" LIMIT "`` on the upper-cased
    statement, so a LIMIT inside a subquery also counts as present.

    Args:
        sql: Raw SQL text.
        limit: Maximum number of rows to return.

    Returns:
        The trimmed statement with a LIMIT appended, or ``sql`` unchanged.
    """
    normalized = sql.strip().upper()
    if normalized.startswith("SELECT") and " LIMIT " not in normalized:
        return f"{sql.strip()} LIMIT {limit}"
    return sql


def quote_identifier(name: str) -> str:
    """Quote a table or column name with backticks."""
    return "`" + name.replace("`", "``") + "`"
