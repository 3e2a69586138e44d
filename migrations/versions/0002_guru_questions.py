"""guru questions

Revision ID: 0002_guru_questions
Revises: 0001_core_schema
Create Date: 2026-10-19 09:40:02.551870

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0002_guru_questions"
down_revision: Union[str, Sequence[str], None] = "0001_core_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add public guru questions and their threaded replies."""
    op.create_table(
        "guru_questions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("guru_user_id", sa.Integer(), nullable=False),
        sa.Column("asker_user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("reply_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["guru_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["asker_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_guru_questions_guru_user_id", "guru_questions", ["guru_user_id"])

    op.create_table(
        "guru_question_replies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("question_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("parent_reply_id", sa.Integer(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["question_id"], ["guru_questions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_guru_question_replies_question_id", "guru_question_replies", ["question_id"]
    )


def downgrade() -> None:
    """Drop the guru Q&A tables."""
    op.drop_index("ix_guru_question_replies_question_id", table_name="guru_question_replies")
    op.drop_table("guru_question_replies")
    op.drop_index("ix_guru_questions_guru_user_id", table_name="guru_questions")
    op.drop_table("guru_questions")
