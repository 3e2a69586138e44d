"""Guru directory and public Q&A."""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from plikeme.models import GuruQuestion, GuruQuestionReply, User
from plikeme.schemas.guru import QuestionCreate, QuestionReplyCreate
from plikeme.services.membership import get_user_memberships
from plikeme.services.profile import get_disease_history
from plikeme.services.threads import get_threads_by_user, serialize_threads

__all__ = [
    "create_question",
    "create_question_reply",
    "delete_question",
    "delete_question_reply",
    "get_guru_by_username",
    "get_guru_detail",
    "get_question",
    "get_question_detail",
    "get_question_reply",
    "list_guru_questions",
    "list_gurus",
    "update_guru_intro",
]

logger = logging.getLogger(__name__)

UNKNOWN_USER = "未知用户"


def _serialize_guru(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "guru_intro": user.guru_intro,
        "created_at": user.created_at,
    }


def list_gurus(db: Session) -> list[dict[str, Any]]:
    """Every guru with their disease history."""
    gurus = db.query(User).filter(User.is_guru.is_(True)).order_by(User.id).all()
    result = []
    for guru in gurus:
        data = _serialize_guru(guru)
        data["disease_history"] = get_disease_history(db, guru.id)
        result.append(data)
    return result


def get_guru_by_username(db: Session, username: str) -> User | None:
    return (
        db.query(User)
        .filter(User.username == username, User.is_guru.is_(True))
        .first()
    )


def get_guru_detail(db: Session, guru: User) -> dict[str, Any]:
    data = _serialize_guru(guru)
    data["communities"] = get_user_memberships(db, guru.id)
    data["disease_history"] = get_disease_history(db, guru.id)
    data["threads"] = serialize_threads(db, get_threads_by_user(db, guru.id))
    return data


def update_guru_intro(db: Session, user: User, intro: str) -> User:
    """Replace a guru's introduction.

    Raises:
        PermissionError: If the user is not a guru.
    """
    if not user.is_guru:
        raise PermissionError("只有明星可以编辑简介")
    try:
        user.guru_intro = intro
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    return user


def _usernames(db: Session, user_ids: set[int]) -> dict[int, str]:
    if not user_ids:
        return {}
    return {row.id: row.username for row in db.query(User.id, User.username).filter(User.id.in_(user_ids))}


def _serialize_question(question: GuruQuestion, names: dict[int, str]) -> dict[str, Any]:
    return {
        "id": question.id,
        "guru_user_id": question.guru_user_id,
        "asker_user_id": question.asker_user_id,
        "title": question.title,
        "content": question.content,
        "reply_count": question.reply_count,
        "created_at": question.created_at,
        "asker_username": names.get(question.asker_user_id, UNKNOWN_USER),
    }


def list_guru_questions(db: Session, guru_id: int) -> list[dict[str, Any]]:
    questions = (
        db.query(GuruQuestion)
        .filter(GuruQuestion.guru_user_id == guru_id)
        .order_by(GuruQuestion.created_at.desc(), GuruQuestion.id.desc())
        .all()
    )
    names = _usernames(db, {q.asker_user_id for q in questions})
    return [_serialize_question(q, names) for q in questions]


def create_question(db: Session, guru: User, asker_id: int, data: QuestionCreate) -> GuruQuestion:
    """Ask a guru a question.

    Raises:
        ValueError: If the asker is the guru.
    """
    if guru.id == asker_id:
        raise ValueError("不能向自己提问")
    question = GuruQuestion(
        guru_user_id=guru.id,
        asker_user_id=asker_id,
        title=data.title,
        content=data.content,
        reply_count=0,
    )
    try:
        db.add(question)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(question)
    logger.info("user %s asked guru %s question %s", asker_id, guru.id, question.id)
    return question


def get_question(db: Session, question_id: int) -> GuruQuestion | None:
    return db.get(GuruQuestion, question_id)


def get_question_detail(db: Session, question: GuruQuestion) -> dict[str, Any]:
    """A question with asker, guru and every reply (oldest first)."""
    replies = (
        db.query(GuruQuestionReply)
        .filter(GuruQuestionReply.question_id == question.id)
        .order_by(GuruQuestionReply.created_at, GuruQuestionReply.id)
        .all()
    )
    names = _usernames(
        db,
        {question.asker_user_id, question.guru_user_id} | {reply.user_id for reply in replies},
    )
    data = _serialize_question(question, names)
    data["guru_username"] = names.get(question.guru_user_id, UNKNOWN_USER)
    data["replies"] = [
        {
            "id": reply.id,
            "question_id": reply.question_id,
            "user_id": reply.user_id,
            "parent_reply_id": reply.parent_reply_id,
            "content": reply.content,
            "created_at": reply.created_at,
            "username": names.get(reply.user_id, UNKNOWN_USER),
        }
        for reply in replies
    ]
    return data


def delete_question(db: Session, question: GuruQuestion, user_id: int) -> None:
    """Delete a question and its replies.

    Raises:
        PermissionError: Unless the user is the asker or the guru.
    """
    if user_id not in (question.asker_user_id, question.guru_user_id):
        raise PermissionError("没有权限删除此问题")
    try:
        db.delete(question)
        db.commit()
    except Exception:
        db.rollback()
        raise


def create_question_reply(
    db: Session, question: GuruQuestion, user_id: int, data: QuestionReplyCreate
) -> GuruQuestionReply:
    """Reply under a question and bump its reply count.

    Raises:
        ValueError: If the parent reply does not belong to this question.
    """
    parent_id = None
    if data.parent_reply_id:
        parent = db.get(GuruQuestionReply, data.parent_reply_id)
        if parent is None or parent.question_id != question.id:
            raise ValueError("父回复不存在")
        parent_id = parent.id

    reply = GuruQuestionReply(
        question_id=question.id,
        user_id=user_id,
        parent_reply_id=parent_id,
        content=data.content,
    )
    try:
        db.add(reply)
        question.reply_count = GuruQuestion.reply_count + 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(reply)
    return reply


def get_question_reply(db: Session, reply_id: int) -> GuruQuestionReply | None:
    return db.get(GuruQuestionReply, reply_id)


def delete_question_reply(db: Session, reply: GuruQuestionReply, user_id: int) -> None:
    """Delete a reply the user wrote and decrement the question's count.

    Raises:
        PermissionError: If the user did not write the reply.
    """
    if reply.user_id != user_id:
        raise PermissionError("没有权限删除此回复")
    question = db.get(GuruQuestion, reply.question_id)
    try:
        db.delete(reply)
        if question is not None and question.reply_count > 0:
            question.reply_count = GuruQuestion.reply_count - 1
        db.commit()
    except Exception:
        db.rollback()
        raise
