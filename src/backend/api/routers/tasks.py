"""
Task and chat API routes.

Both endpoints return the ``TaskResult`` envelope with HTTP 200, including
for failed tasks; ``success`` tells the caller whether the task worked.
"""

import logging
from typing import Any

from api.dependencies import get_agent
from entities.agent import MySQLAgent
from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tasks"])


class ChatBody(BaseModel):
    """Request body for the chat endpoint."""

    message: str = Field(description="Natural-language question for the agent")


@router.post("/tasks")
async def run_task(
    payload: dict[str, Any] = Body(
        ...,
        examples=[{"task": "get-schema", "params": {"tableName": "users"}}],
    ),
    agent: MySQLAgent = Depends(get_agent),
) -> dict[str, Any]:
    """Run one predefined task and return its envelope."""
    logger.info("Task request: %s", payload.get("task"))
    result = await agent.dispatch(payload)
    return result.model_dump(mode="json")


@router.post("/chat")
async def chat(
    body: ChatBody,
    agent: MySQLAgent = Depends(get_agent),
) -> dict[str, Any]:
    """Answer a natural-language question through the tool-calling agent."""
    result = await agent.ask(body.message)
    return result.model_dump(mode="json")
