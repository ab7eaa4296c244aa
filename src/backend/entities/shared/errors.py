"""Error kinds raised by the task executors.

Executors raise these; ``MySQLAgent.dispatch`` converts them into failed
``TaskResult`` envelopes and the tool facade converts them into JSON
error payloads. Nothing here is retried automatically.
"""


class MySQLAgentError(Exception):
    """Base class for every error raised by this package."""


class DatabaseConnectionError(MySQLAgentError):
    """The database client could not establish or keep a session."""


class WritePermissionError(MySQLAgentError):
    """A write statement was attempted without both write gates open."""


class TaskValidationError(MySQLAgentError):
    """A task request is missing a required parameter or is malformed."""


class DriverError(MySQLAgentError):
    """The database reported an error while executing a statement."""


class ToolInvocationError(MySQLAgentError):
    """A wrapped tool failed while running on behalf of the model runtime.

    Never propagates to the model runtime; the tool facade turns it into
    a JSON payload with ``to_payload()`` so the model always gets a reply.

    Args:
        tool_name: Name of the tool that failed.
        cause: The exception raised by the executor.
    """

    def __init__(self, tool_name: str, cause: BaseException) -> None:
        super().__init__(f"{tool_name} failed: {cause}")
        self.tool_name = tool_name
        self.__cause__ = cause

    def to_payload(self, **context: object) -> dict[str, object]:
        """Structured error body returned to the model as the tool result."""
        cause = self.__cause__
        return {
            "status": "error",
            "tool": self.tool_name,
            "error_type": type(cause).__name__,
            "message": str(cause),
            **context,
        }
