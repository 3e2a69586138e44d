"""core schema

Revision ID: 0001_core_schema
Revises:
Create Date: 2026-10-19 09:12:40.318211

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_core_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create communities, accounts, memberships, profiles and threads."""
    op.create_table(
        "communities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("keywords", sa.Text(), nullable=False),
        sa.Column("member_count", sa.Integer(), nullable=False),
        sa.Column("dimensions", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "sub_community_members",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("stage", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("member_count", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("community_id", "stage", "type"),
    )
    op.create_index(
        "ix_sub_community_members_community_id", "sub_community_members", ["community_id"]
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("gender", sa.Text(), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("profession", sa.Text(), nullable=True),
        sa.Column("marriage_status", sa.Text(), nullable=True),
        sa.Column("fertility_status", sa.Text(), nullable=True),
        sa.Column("location_from", sa.Text(), nullable=True),
        sa.Column("location_living", sa.Text(), nullable=True),
        sa.Column("location_living_district", sa.Text(), nullable=True),
        sa.Column("location_living_street", sa.Text(), nullable=True),
        sa.Column("income_individual", sa.Text(), nullable=True),
        sa.Column("income_family", sa.Text(), nullable=True),
        sa.Column("family_size", sa.Integer(), nullable=True),
        sa.Column("hukou", sa.Text(), nullable=True),
        sa.Column("education", sa.Text(), nullable=True),
        sa.Column("consumption_level", sa.Text(), nullable=True),
        sa.Column("housing_status", sa.Text(), nullable=True),
        sa.Column("economic_dependency", sa.Text(), nullable=True),
        sa.Column("is_guru", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("guru_intro", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )
    op.create_table(
        "user_communities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("stage", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "community_id", "stage", "type"),
    )
    op.create_index("ix_user_communities_user_id", "user_communities", ["user_id"])
    op.create_index("ix_user_communities_community_id", "user_communities", ["community_id"])

    op.create_table(
        "user_disease_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("community_id", sa.Integer(), nullable=True),
        sa.Column("stage", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("disease", sa.Text(), nullable=False),
        sa.Column("onset_date", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_disease_history_user_id", "user_disease_history", ["user_id"])

    op.create_table(
        "user_hospitals",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("hospital", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "hospital"),
    )
    op.create_index("ix_user_hospitals_user_id", "user_hospitals", ["user_id"])

    op.create_table(
        "threads",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_threads_user_id", "threads", ["user_id"])

    op.create_table(
        "thread_communities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("thread_id", sa.Integer(), nullable=False),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("stage", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["thread_id"], ["threads.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("thread_id", "community_id", "stage", "type"),
    )
    op.create_index("ix_thread_communities_thread_id", "thread_communities", ["thread_id"])
    op.create_index("ix_thread_communities_community_id", "thread_communities", ["community_id"])

    op.create_table(
        "replies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("thread_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("parent_reply_id", sa.Integer(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["thread_id"], ["threads.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_replies_thread_id", "replies", ["thread_id"])


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_index("ix_replies_thread_id", table_name="replies")
    op.drop_table("replies")
    op.drop_index("ix_thread_communities_community_id", table_name="thread_communities")
    op.drop_index("ix_thread_communities_thread_id", table_name="thread_communities")
    op.drop_table("thread_communities")
    op.drop_index("ix_threads_user_id", table_name="threads")
    op.drop_table("threads")
    op.drop_index("ix_user_hospitals_user_id", table_name="user_hospitals")
    op.drop_table("user_hospitals")
    op.drop_index("ix_user_disease_history_user_id", table_name="user_disease_history")
    op.drop_table("user_disease_history")
    op.drop_index("ix_user_communities_community_id", table_name="user_communities")
    op.drop_index("ix_user_communities_user_id", table_name="user_communities")
    op.drop_table("user_communities")
    op.drop_table("users")
    op.drop_index("ix_sub_community_members_community_id", table_name="sub_community_members")
    op.drop_table("sub_community_members")
    op.drop_table("communities")
