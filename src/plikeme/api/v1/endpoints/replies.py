"""Reply endpoints nested under threads."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.orm import Session

from plikeme.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from plikeme.schemas.common import ok
from plikeme.schemas.thread import ReplyCreate
from plikeme.services import threads as thread_service

router = APIRouter(prefix="/threads", tags=["replies"])


def _require_thread(db: Session, thread_id: int) -> None:
    if thread_service.get_thread(db, thread_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="分享不存在")


@router.get("/{thread_id}/replies")
async def list_replies(
    thread_id: int,
    viewer: OptionalUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Replies of a thread, oldest first; ``is_owner`` reflects the viewer."""
    _require_thread(db, thread_id)
    replies = thread_service.get_replies(db, thread_id, viewer.id if viewer else None)
    return ok(replies, count=len(replies))


@router.post("/{thread_id}/replies", status_code=status.HTTP_201_CREATED)
async def create_reply(
    thread_id: int,
    payload: ReplyCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    _require_thread(db, thread_id)
    try:
        reply = thread_service.create_reply(db, thread_id, current_user.id, payload)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    data = {
        "id": reply.id,
        "thread_id": reply.thread_id,
        "user_id": reply.user_id,
        "parent_reply_id": reply.parent_reply_id,
        "content": reply.content,
        "created_at": reply.created_at,
        "author": current_user.username,
        "is_owner": True,
    }
    return ok(data, message="回复成功")


@router.delete("/{thread_id}/replies/{reply_id}")
async def delete_reply(
    thread_id: int,
    reply_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    reply = thread_service.get_reply(db, reply_id)
    if reply is None or reply.thread_id != thread_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="回复不存在")
    if reply.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="无权删除此回复")
    thread_service.delete_reply(db, reply_id, current_user.id)
    return ok(None, message="回复已删除")
