"""
API routers package.
"""

from api.routers.tasks import router as tasks_router

__all__ = ["tasks_router"]
