# src/plikeme/schemas/__init__.py
"""Pydantic schemas for request and response validation."""

from .common import ErrorResponse, ok
from .community import JoinRequest
from .guru import IntroUpdate, QuestionCreate, QuestionReplyCreate
from .search import CommunityFilter, UserSearchFilters
from .thread import CommunityLink, ReplyCreate, ThreadWrite
from .user import (
    DiseaseHistoryEntry,
    LoginRequest,
    ProfileUpdateRequest,
    SignupRequest,
    UserPublic,
)

__all__ = [
    "ErrorResponse", "ok",
    "JoinRequest",
    "IntroUpdate", "QuestionCreate", "QuestionReplyCreate",
    "CommunityFilter", "UserSearchFilters",
    "CommunityLink", "ReplyCreate", "ThreadWrite",
    "DiseaseHistoryEntry", "LoginRequest", "ProfileUpdateRequest",
    "SignupRequest", "UserPublic",
]
