"""
Task request models.

A task request is a tagged union discriminated on ``task``. Each variant
carries only the parameters its task needs; required parameters have no
default, so a missing one is a validation error rather than a silent default.
Both snake_case and camelCase parameter names are accepted.
"""

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
)


class TaskName(StrEnum):
    """Predefined tasks understood by the dispatcher."""

    TEST_CONNECTION = "test-connection"
    LIST_TABLES = "list-tables"
    GET_SCHEMA = "get-schema"
    GET_ALL_SCHEMAS = "get-all-schemas"
    QUERY = "query"
    CHAT = "chat"


class _TaskRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]


class ConnectionTestRequest(_TaskRequest):
    """Check connectivity and report server details."""

    task: Literal["test-connection"] = TaskName.TEST_CONNECTION


class ListTablesRequest(_TaskRequest):
    """List tables in the current database."""

    task: Literal["list-tables"] = TaskName.LIST_TABLES
    include_row_counts: bool = Field(
        default=False,
        validation_alias=AliasChoices("include_row_counts", "includeRowCounts"),
        description="Attach exact COUNT(*) per base table (one query per table)",
    )


class GetSchemaRequest(_TaskRequest):
    """Describe the columns, indexes and foreign keys of one table."""

    task: Literal["get-schema"] = TaskName.GET_SCHEMA
    table_name: NonBlankStr = Field(
        validation_alias=AliasChoices("table_name", "tableName", "table"),
        description="Table to inspect",
    )


class GetAllSchemasRequest(_TaskRequest):
    """Describe every base table. Cost grows with the number of tables."""

    task: Literal["get-all-schemas"] = TaskName.GET_ALL_SCHEMAS


class QueryRequest(_TaskRequest):
    """Run a raw SQL statement."""

    task: Literal["query"] = TaskName.QUERY
    sql: NonBlankStr = Field(description="SQL statement to execute")
    allow_write: bool = Field(
        default=False,
        validation_alias=AliasChoices("allow_write", "allowWrite"),
        description="Caller-side write gate",
    )


class ChatRequest(_TaskRequest):
    """Answer a natural-language question through the tool-calling agent."""

    task: Literal["chat"] = TaskName.CHAT
    message: NonBlankStr = Field(description="User message for the agent")


TaskRequest = Annotated[
    ConnectionTestRequest
    | ListTablesRequest
    | GetSchemaRequest
    | GetAllSchemasRequest
    | QueryRequest
    | ChatRequest,
    Field(discriminator="task"),
]

_task_request_adapter: TypeAdapter[TaskRequest] = TypeAdapter(TaskRequest)


def parse_task_request(payload: dict[str, Any]) -> TaskRequest:
    """Validate a raw request dict into its task variant.

    Parameters may be given flat (``{"task": "get-schema", "table_name": "users"}``)
    or nested under ``params`` (``{"task": "get-schema", "params": {"tableName": "users"}}``).

    Args:
        payload: Raw request, e.g. decoded JSON.

    Returns:
        The matching request model.

    Raises:
        TaskValidationError: If the task is unknown or a parameter is missing or invalid.
    """
    from entities.shared.errors import TaskValidationError  # noqa: PLC0415

    if not isinstance(payload, dict):
        raise TaskValidationError(f"Task request must be an object, got {type(payload).__name__}")

    flat = {k: v for k, v in payload.items() if k != "params"}
    params = payload.get("params")
    if isinstance(params, dict):
        flat.update(params)
    elif params is not None:
        raise TaskValidationError("'params' must be an object")

    try:
        return _task_request_adapter.validate_python(flat)
    except ValidationError as e:
        raise TaskValidationError(_format_validation_error(flat.get("task"), e)) from e


def _format_validation_error(task: Any, error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"] if part != task)
        problems.append(f"{location or 'request'}: {item['msg']}")
    return f"Invalid request for task {task!r}: " + "; ".join(problems)
