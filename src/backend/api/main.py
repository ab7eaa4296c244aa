"""
FastAPI server exposing the MySQL agent.

This module handles application setup, lifespan management, and middleware
configuration. Route handlers are organized in the routers/ package.

- POST /api/tasks runs a predefined task (test-connection, list-tables, ...)
- POST /api/chat answers a natural-language question via the ChatAgent
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from api.routers import tasks_router
from config.settings import get_settings
from dotenv import load_dotenv
from entities.agent import MySQLAgent
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

# Configure logging - use force=True to prevent duplicate handlers
logger = logging.getLogger(__name__)
logging.basicConfig(level=get_settings().log_level.upper(), force=True)

# Reduce noise from HTTP clients and the agent framework
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)
# agent_framework logs all message content at INFO level
logging.getLogger("agent_framework").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Creates the MySQLAgent service on startup and releases its database
    session on shutdown. The session itself is opened lazily on first use.
    """
    agent = MySQLAgent()
    application.state.agent = agent
    logger.info(
        "MySQL agent API starting (write enabled: %s, row limit: %s)",
        agent.settings.mysql_allow_write,
        agent.settings.mysql_row_limit,
    )

    yield

    await agent.close()
    application.state.agent = None
    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(title="MySQL Agent", lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(tasks_router)


@app.get("/health")
async def health_check() -> dict[str, object]:
    """Health check endpoint."""
    agent = getattr(app.state, "agent", None)
    return {
        "status": "healthy",
        "agent_ready": agent is not None,
        "database_connected": bool(agent and agent.connections.is_connected),
    }


if __name__ == "__main__":
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)  # noqa: S104
