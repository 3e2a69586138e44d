"""SQLAlchemy models for guru questions and answers."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from plikeme.db.session import Base
from plikeme.db.time import utcnow


class GuruQuestion(Base):
    """A public question asked to a guru."""

    __tablename__ = "guru_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guru_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    asker_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # Denormalized; maintained by reply create/delete.
    reply_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    replies: Mapped[list[GuruQuestionReply]] = relationship(
        "GuruQuestionReply",
        back_populates="question",
        cascade="all, delete-orphan",
    )


class GuruQuestionReply(Base):
    """A reply under a guru question, optionally answering another reply."""

    __tablename__ = "guru_question_replies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("guru_questions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    parent_reply_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    question: Mapped[GuruQuestion] = relationship("GuruQuestion", back_populates="replies")
