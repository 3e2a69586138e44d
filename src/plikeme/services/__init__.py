# src/plikeme/services/__init__.py
"""Business logic services for the P-LikeMe application."""

from . import communities, gurus, membership, profile, threads, user_search
from .membership import JoinResult, join_community, leave_community
from .user_search import SearchResult, search_users

__all__ = [
    "communities",
    "gurus",
    "membership",
    "profile",
    "threads",
    "user_search",
    "JoinResult",
    "SearchResult",
    "join_community",
    "leave_community",
    "search_users",
]
