"""
FastAPI dependencies for shared resources.
"""

import logging
from typing import TYPE_CHECKING

from fastapi import HTTPException, Request

if TYPE_CHECKING:
    from entities.agent import MySQLAgent

logger = logging.getLogger(__name__)


def get_agent(request: Request) -> "MySQLAgent":
    """
    Get the MySQLAgent service from app state.

    Raises HTTPException 503 if not initialized.
    """
    agent = getattr(request.app.state, "agent", None)
    if agent is None:
        raise HTTPException(status_code=503, detail="Agent not initialized")
    return agent
