# src/plikeme/api/v1/endpoints/threads.py
"""Thread endpoints for the P-LikeMe API."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, status

from plikeme.api.v1.dependencies import CurrentUserDep, SessionDep
from plikeme.models import User
from plikeme.schemas.common import ok
from plikeme.schemas.thread import ThreadWrite
from plikeme.services import threads as thread_service

router = APIRouter(prefix="/threads", tags=["threads"])

THREAD_NOT_FOUND = "分享不存在"


@router.get("")
async def list_own_threads(current_user: CurrentUserDep, db: SessionDep) -> dict[str, Any]:
    """Threads written by the signed-in user."""
    threads = thread_service.get_threads_by_user(db, current_user.id)
    data = thread_service.serialize_threads(db, threads)
    return ok(data, count=len(data))


@router.get("/user/{username}")
async def list_user_threads(
    username: str,
    _current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Threads written by another user."""
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="用户不存在")
    threads = thread_service.get_threads_by_user(db, user.id)
    data = thread_service.serialize_threads(db, threads)
    return ok(data, count=len(data), user={"id": user.id, "username": user.username})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_thread(
    payload: ThreadWrite,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    try:
        thread = thread_service.create_thread(db, current_user.id, payload)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return ok(thread_service.serialize_threads(db, [thread])[0], message="分享创建成功")


@router.get("/{thread_id}")
async def get_own_thread(
    thread_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """A thread the signed-in user owns."""
    thread = thread_service.get_thread(db, thread_id)
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=THREAD_NOT_FOUND)
    if thread.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="无权访问此分享")
    return ok(thread_service.serialize_threads(db, [thread])[0])


@router.get("/{thread_id}/public")
async def get_public_thread(thread_id: int, db: SessionDep) -> dict[str, Any]:
    """Any thread, readable without a session."""
    thread = thread_service.get_thread(db, thread_id)
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=THREAD_NOT_FOUND)
    return ok(thread_service.serialize_threads(db, [thread])[0])


@router.put("/{thread_id}")
async def update_thread(
    thread_id: int,
    payload: ThreadWrite,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    try:
        thread = thread_service.update_thread(db, thread_id, current_user.id, payload)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="分享不存在或无权修改")
    return ok(thread_service.serialize_threads(db, [thread])[0], message="分享更新成功")


@router.delete("/{thread_id}")
async def delete_thread(
    thread_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    if not thread_service.delete_thread(db, thread_id, current_user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="分享不存在或无权删除")
    return ok(None, message="分享已删除")
