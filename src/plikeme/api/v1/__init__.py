# src/plikeme/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    communities_router,
    gurus_router,
    replies_router,
    system_router,
    threads_router,
    users_router,
)

__all__ = [
    "auth_router",
    "communities_router",
    "gurus_router",
    "replies_router",
    "system_router",
    "threads_router",
    "users_router",
]
