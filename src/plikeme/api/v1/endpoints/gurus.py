# src/plikeme/api/v1/endpoints/gurus.py
"""Guru directory and Q&A endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.orm import Session

from plikeme.api.v1.dependencies import CurrentUserDep, SessionDep
from plikeme.models import GuruQuestion, User
from plikeme.schemas.common import ok
from plikeme.schemas.guru import IntroUpdate, QuestionCreate, QuestionReplyCreate
from plikeme.services import gurus as guru_service

router = APIRouter(prefix="/gurus", tags=["gurus"])

GURU_NOT_FOUND = "明星不存在"
QUESTION_NOT_FOUND = "问题不存在"


def _guru_or_404(db: Session, username: str) -> User:
    guru = guru_service.get_guru_by_username(db, username)
    if guru is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=GURU_NOT_FOUND)
    return guru


def _question_or_404(db: Session, question_id: int) -> GuruQuestion:
    question = guru_service.get_question(db, question_id)
    if question is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=QUESTION_NOT_FOUND)
    return question


@router.get("")
async def list_gurus(db: SessionDep) -> dict[str, Any]:
    gurus = guru_service.list_gurus(db)
    return ok(gurus, count=len(gurus))


@router.put("/intro")
async def update_intro(
    payload: IntroUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Replace the signed-in guru's introduction."""
    try:
        user = guru_service.update_guru_intro(db, current_user, payload.intro)
    except PermissionError as err:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(err)) from err
    return ok({"guru_intro": user.guru_intro}, message="简介更新成功")


# Question routes are registered before "/{username}" so they are not shadowed.
@router.get("/questions/{question_id}")
async def get_question(question_id: int, db: SessionDep) -> dict[str, Any]:
    question = _question_or_404(db, question_id)
    return ok(guru_service.get_question_detail(db, question))


@router.delete("/questions/{question_id}")
async def delete_question(
    question_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Delete a question; only its asker or the guru may."""
    question = _question_or_404(db, question_id)
    try:
        guru_service.delete_question(db, question, current_user.id)
    except PermissionError as err:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(err)) from err
    return ok(None, message="问题已删除")


@router.post("/questions/{question_id}/replies", status_code=status.HTTP_201_CREATED)
async def create_question_reply(
    question_id: int,
    payload: QuestionReplyCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    question = _question_or_404(db, question_id)
    try:
        reply = guru_service.create_question_reply(db, question, current_user.id, payload)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    data = {
        "id": reply.id,
        "question_id": reply.question_id,
        "user_id": reply.user_id,
        "parent_reply_id": reply.parent_reply_id,
        "content": reply.content,
        "created_at": reply.created_at,
        "username": current_user.username,
    }
    return ok(data, message="回复发布成功")


@router.delete("/questions/replies/{reply_id}")
async def delete_question_reply(
    reply_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    reply = guru_service.get_question_reply(db, reply_id)
    if reply is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="回复不存在")
    try:
        guru_service.delete_question_reply(db, reply, current_user.id)
    except PermissionError as err:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(err)) from err
    return ok(None, message="回复已删除")


@router.get("/{username}")
async def get_guru(username: str, db: SessionDep) -> dict[str, Any]:
    """Guru profile with memberships, disease history and threads."""
    guru = _guru_or_404(db, username)
    return ok(guru_service.get_guru_detail(db, guru))


@router.get("/{username}/questions")
async def list_questions(username: str, db: SessionDep) -> dict[str, Any]:
    guru = _guru_or_404(db, username)
    questions = guru_service.list_guru_questions(db, guru.id)
    return ok(questions, count=len(questions))


@router.post("/{username}/questions", status_code=status.HTTP_201_CREATED)
async def ask_question(
    username: str,
    payload: QuestionCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Ask a guru a public question."""
    guru = _guru_or_404(db, username)
    try:
        question = guru_service.create_question(db, guru, current_user.id, payload)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return ok({"id": question.id}, message="问题发布成功")
