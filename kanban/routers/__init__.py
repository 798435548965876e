"""API routers package.

This package contains all FastAPI routers for the application.
Each router handles a specific domain of the API.
"""

from .auth import router as auth_router
from .items import router as items_router
from .project_members import router as project_members_router
from .projects import router as projects_router
from .sections import router as sections_router
from .tags import router as tags_router

__all__ = [
    "auth_router",
    "items_router",
    "project_members_router",
    "projects_router",
    "sections_router",
    "tags_router",
]
