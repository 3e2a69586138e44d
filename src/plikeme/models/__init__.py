# src/plikeme/models/__init__.py
"""SQLAlchemy models for the P-LikeMe application."""

from .community import Community, SubCommunityMember
from .guru import GuruQuestion, GuruQuestionReply
from .thread import Reply, Thread, ThreadCommunity
from .user import User, UserCommunity, UserDiseaseHistory, UserHospital

__all__ = [
    "Community", "SubCommunityMember",
    "GuruQuestion", "GuruQuestionReply",
    "Reply", "Thread", "ThreadCommunity",
    "User", "UserCommunity", "UserDiseaseHistory", "UserHospital",
]
