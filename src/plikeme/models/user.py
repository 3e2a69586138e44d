# src/plikeme/models/user.py
"""SQLAlchemy models for user accounts, profiles and community membership."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from plikeme.db.session import Base
from plikeme.db.time import utcnow

# Profile attributes replaced wholesale by a profile update.
PROFILE_FIELDS: tuple[str, ...] = (
    "gender",
    "age",
    "profession",
    "marriage_status",
    "fertility_status",
    "location_from",
    "location_living",
    "location_living_district",
    "location_living_street",
    "income_individual",
    "income_family",
    "family_size",
    "hukou",
    "education",
    "consumption_level",
    "housing_status",
    "economic_dependency",
)


class User(Base):
    """A registered account with an optional health/demographic profile."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    gender: Mapped[str | None] = mapped_column(Text, nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    profession: Mapped[str | None] = mapped_column(Text, nullable=True)
    marriage_status: Mapped[str | None] = mapped_column(Text, nullable=True)
    fertility_status: Mapped[str | None] = mapped_column(Text, nullable=True)
    location_from: Mapped[str | None] = mapped_column(Text, nullable=True)
    location_living: Mapped[str | None] = mapped_column(Text, nullable=True)
    location_living_district: Mapped[str | None] = mapped_column(Text, nullable=True)
    location_living_street: Mapped[str | None] = mapped_column(Text, nullable=True)
    income_individual: Mapped[str | None] = mapped_column(Text, nullable=True)
    income_family: Mapped[str | None] = mapped_column(Text, nullable=True)
    family_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    hukou: Mapped[str | None] = mapped_column(Text, nullable=True)
    education: Mapped[str | None] = mapped_column(Text, nullable=True)
    consumption_level: Mapped[str | None] = mapped_column(Text, nullable=True)
    housing_status: Mapped[str | None] = mapped_column(Text, nullable=True)
    economic_dependency: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_guru: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    guru_intro: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class UserCommunity(Base):
    """One membership row; empty stage and type is the Level I membership."""

    __tablename__ = "user_communities"
    __table_args__ = (UniqueConstraint("user_id", "community_id", "stage", "type"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    community_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("communities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stage: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(Text, nullable=False, default="")
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class UserDiseaseHistory(Base):
    """A condition on a user's profile, linked to a community or free text."""

    __tablename__ = "user_disease_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    community_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("communities.id", ondelete="SET NULL"), nullable=True
    )
    stage: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(Text, nullable=False, default="")
    disease: Mapped[str] = mapped_column(Text, nullable=False)
    # "YYYY-MM"
    onset_date: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class UserHospital(Base):
    """A hospital the user has been treated at."""

    __tablename__ = "user_hospitals"
    __table_args__ = (UniqueConstraint("user_id", "hospital"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    hospital: Mapped[str] = mapped_column(Text, nullable=False)
