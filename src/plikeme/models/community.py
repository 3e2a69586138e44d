"""SQLAlchemy models for communities and their sub-community counters."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from plikeme.db.session import Base
from plikeme.db.time import utcnow


class Community(Base):
    """A disease-themed (Level I) community."""

    __tablename__ = "communities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Space separated search terms.
    keywords: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Denormalized count of Level I memberships.
    member_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # {"stage": {"label": ..., "values": [...]}, "type": {"label": ..., "values": [...]}}
    dimensions: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class SubCommunityMember(Base):
    """Aggregate member count for a Level II or Level III sub-community.

    An empty ``stage`` or ``type`` means the row does not narrow by that dimension.
    """

    __tablename__ = "sub_community_members"
    __table_args__ = (UniqueConstraint("community_id", "stage", "type"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    community_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("communities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stage: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(Text, nullable=False, default="")
    member_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
