"""
Command-line entry point for the MySQL agent.

Usage:
    mysql-agent --task test-connection
    mysql-agent --task list-tables --include-counts
    mysql-agent --task get-schema --table users
    mysql-agent --task query --sql "SELECT * FROM users LIMIT 5"
    mysql-agent --chat "What tables contain user data?"
    mysql-agent --interactive
"""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Callable, Sequence
from typing import Any

from config.settings import get_settings
from dotenv import load_dotenv
from entities.agent import MySQLAgent
from models import TaskName, TaskResult

logger = logging.getLogger(__name__)

CLI_TASKS = [name.value for name in TaskName if name is not TaskName.CHAT]
EXIT_COMMANDS = {"exit", "quit"}
PROMPT = "mysql> "

EPILOG = """\
environment:
  OPENAI_API_KEY      Required for chat mode
  MYSQL_URL           MySQL connection URL
  MYSQL_ALLOW_WRITE   Enable write operations (default: false)
  MYSQL_ROW_LIMIT     Max rows per query (default: 1000)
  AGENT_MAX_TURNS     Max agent turns per request (default: 10)
"""


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mysql-agent",
        description="MySQL database assistant: predefined tasks or natural-language chat",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    task_group = parser.add_argument_group("task mode")
    task_group.add_argument("--task", "-t", help=f"Predefined task: {', '.join(CLI_TASKS)}")
    task_group.add_argument("--table", help="Table name (for get-schema)")
    task_group.add_argument("--sql", "-s", help="SQL query (for query)")
    task_group.add_argument(
        "--include-counts", action="store_true", help="Include row counts (for list-tables)"
    )
    task_group.add_argument(
        "--allow-write", action="store_true", help="Allow write operations (for query)"
    )

    chat_group = parser.add_argument_group("chat mode")
    chat_group.add_argument("--chat", "-c", help="Send a natural-language question to the agent")
    chat_group.add_argument(
        "--interactive", "-i", action="store_true", help="Start interactive chat mode"
    )
    chat_group.add_argument("message", nargs="*", help="Question words (same as --chat)")

    parser.add_argument(
        "--json", "-j", action="store_true", help="Output the raw JSON envelope"
    )
    return parser


def print_result(result: TaskResult[Any], as_json: bool = False) -> bool:
    """
    Print a task envelope to stdout (or the error to stderr).

    Returns:
        True if the task succeeded.
    """
    if as_json:
        print(json.dumps(result.model_dump(mode="json"), indent=2, default=str))
        return result.success

    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        return False

    data = result.model_dump(mode="json")["data"]
    if isinstance(data, str):
        print(data)
    else:
        print(json.dumps(data, indent=2, default=str))
    if result.duration_ms:
        print(f"\n{result.duration_ms}ms")
    return True


def build_task_request(args: argparse.Namespace) -> dict[str, Any]:
    """
    Translate task-mode arguments into a task request dict.

    Raises:
        ValueError: If the task is unknown or a required argument is missing.
    """
    task = args.task
    if task not in CLI_TASKS:
        raise ValueError(f"Unknown task: {task}. Valid tasks: {', '.join(CLI_TASKS)}")

    if task == TaskName.LIST_TABLES:
        return {"task": task, "params": {"includeRowCounts": args.include_counts}}
    if task == TaskName.GET_SCHEMA:
        if not args.table:
            raise ValueError("--table required for get-schema task")
        return {"task": task, "params": {"tableName": args.table}}
    if task == TaskName.QUERY:
        if not args.sql:
            raise ValueError("--sql required for query task")
        return {"task": task, "params": {"sql": args.sql, "allowWrite": args.allow_write}}
    return {"task": task}


async def interactive_loop(
    agent: MySQLAgent,
    as_json: bool = False,
    read_line: Callable[[str], str] = input,
) -> None:
    """Read questions until 'exit', 'quit' or end of input."""
    print("MySQL Agent (interactive mode). Type 'exit' to quit.\n")
    while True:
        try:
            line = (await asyncio.to_thread(read_line, PROMPT)).strip()
        except EOFError:
            break
        if not line:
            continue
        if line.lower() in EXIT_COMMANDS:
            break
        print_result(await agent.ask(line), as_json)
        print()
    print("\nGoodbye!\n")


async def run(args: argparse.Namespace, agent: MySQLAgent) -> int:
    """
    Execute one CLI invocation against an agent service.

    The agent's database session is closed before returning.

    Returns:
        Process exit code: 0 on success, 1 on any failure.
    """
    try:
        message = args.chat or " ".join(args.message)
        if (args.interactive or message) and not agent.settings.openai_api_key:
            print("Error: OPENAI_API_KEY required for chat mode", file=sys.stderr)
            return 1

        if args.interactive:
            await interactive_loop(agent, args.json)
            return 0

        if message:
            return 0 if print_result(await agent.ask(message), args.json) else 1

        if args.task:
            try:
                request = build_task_request(args)
            except ValueError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
            return 0 if print_result(await agent.dispatch(request), args.json) else 1

        print("Use --help for usage information")
        return 0
    finally:
        await agent.close()


def main(argv: Sequence[str] | None = None) -> int:
    """Console script entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=get_settings().log_level.upper(), force=True)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("agent_framework").setLevel(logging.WARNING)

    try:
        return asyncio.run(run(args, MySQLAgent()))
    except KeyboardInterrupt:
        return 1
    except Exception:
        logger.exception("Fatal error")
        return 1


if __name__ == "__main__":
    sys.exit(main())
