# src/plikeme/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .communities import router as communities_router
from .gurus import router as gurus_router
from .replies import router as replies_router
from .system import router as system_router
from .threads import router as threads_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "communities_router",
    "gurus_router",
    "replies_router",
    "system_router",
    "threads_router",
    "users_router",
]
