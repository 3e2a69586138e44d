# src/plikeme/models/thread.py
"""SQLAlchemy models for shared threads and their replies."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from plikeme.db.session import Base
from plikeme.db.time import utcnow


class Thread(Base):
    """A user's shared story, linked to zero or more (sub-)communities."""

    __tablename__ = "threads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, onupdate=utcnow
    )

    community_links: Mapped[list[ThreadCommunity]] = relationship(
        "ThreadCommunity",
        back_populates="thread",
        cascade="all, delete-orphan",
        order_by="ThreadCommunity.id",
    )
    replies: Mapped[list[Reply]] = relationship(
        "Reply",
        back_populates="thread",
        cascade="all, delete-orphan",
    )


class ThreadCommunity(Base):
    """Link between a thread and a community at any level."""

    __tablename__ = "thread_communities"
    __table_args__ = (UniqueConstraint("thread_id", "community_id", "stage", "type"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    thread_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("threads.id", ondelete="CASCADE"), nullable=False, index=True
    )
    community_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("communities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stage: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(Text, nullable=False, default="")

    thread: Mapped[Thread] = relationship("Thread", back_populates="community_links")


class Reply(Base):
    """A reply to a thread.

    ``parent_reply_id`` is the immediate reply being answered, if any. Replies are
    grouped under their topmost ancestor when rendered, so chains are not
    constrained structurally and the parent may since have been deleted.
    """

    __tablename__ = "replies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    thread_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("threads.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    parent_reply_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    thread: Mapped[Thread] = relationship("Thread", back_populates="replies")
