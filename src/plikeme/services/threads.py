"""Shared threads, their community links, and replies."""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from plikeme.models import Community, Reply, Thread, ThreadCommunity, User
from plikeme.schemas.thread import ReplyCreate, ThreadWrite
from plikeme.services.membership import display_path

__all__ = [
    "ANONYMOUS_AUTHOR",
    "create_reply",
    "create_thread",
    "delete_reply",
    "delete_thread",
    "get_replies",
    "get_reply",
    "get_thread",
    "get_threads_by_community",
    "get_threads_by_user",
    "serialize_threads",
    "update_thread",
]

logger = logging.getLogger(__name__)

ANONYMOUS_AUTHOR = "匿名用户"
UNKNOWN_COMMUNITY = "未知社区"


def _check_communities(db: Session, links: list[tuple[int, str, str]]) -> None:
    ids = {community_id for community_id, _, _ in links}
    if not ids:
        return
    known = {row.id for row in db.query(Community.id).filter(Community.id.in_(ids))}
    if ids - known:
        raise ValueError("关联的社区不存在")


def _replace_links(thread: Thread, links: list[tuple[int, str, str]]) -> None:
    thread.community_links = [
        ThreadCommunity(community_id=community_id, stage=stage, type=type_)
        for community_id, stage, type_ in links
    ]


def create_thread(db: Session, user_id: int, data: ThreadWrite) -> Thread:
    """Create a thread with its community links in one transaction.

    Raises:
        ValueError: If a link names a community that does not exist.
    """
    links = data.links()
    _check_communities(db, links)
    thread = Thread(user_id=user_id, title=data.title, content=data.content)
    _replace_links(thread, links)
    try:
        db.add(thread)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(thread)
    logger.info("user %s created thread %s with %d links", user_id, thread.id, len(links))
    return thread


def update_thread(db: Session, thread_id: int, user_id: int, data: ThreadWrite) -> Thread | None:
    """Replace title, content and links of a thread the user owns.

    Returns None when the thread does not exist or belongs to someone else.
    """
    thread = db.get(Thread, thread_id)
    if thread is None or thread.user_id != user_id:
        return None
    links = data.links()
    _check_communities(db, links)
    try:
        thread.title = data.title
        thread.content = data.content
        thread.community_links.clear()
        db.flush()
        _replace_links(thread, links)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(thread)
    return thread


def delete_thread(db: Session, thread_id: int, user_id: int) -> bool:
    """Delete an owned thread together with its links and replies."""
    thread = db.get(Thread, thread_id)
    if thread is None or thread.user_id != user_id:
        return False
    try:
        db.delete(thread)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("user %s deleted thread %s", user_id, thread_id)
    return True


def get_thread(db: Session, thread_id: int) -> Thread | None:
    return db.get(Thread, thread_id)


def get_threads_by_user(db: Session, user_id: int) -> list[Thread]:
    return (
        db.query(Thread)
        .filter(Thread.user_id == user_id)
        .order_by(Thread.created_at.desc(), Thread.id.desc())
        .all()
    )


def get_threads_by_community(
    db: Session,
    community_id: int,
    limit: int = 10,
    offset: int = 0,
    stage: str | None = None,
    type_: str | None = None,
) -> tuple[list[Thread], int]:
    """Threads visible at a community level, newest first.

    The whole community shows every linked thread. A stage-only view shows threads
    linked with that stage (any type), a type-only view those with that type (any
    stage), and a view with both shows exact matches only.
    """
    stage_value, type_value = (stage or "").strip(), (type_ or "").strip()
    linked = db.query(ThreadCommunity.thread_id).filter(
        ThreadCommunity.community_id == community_id
    )
    if stage_value:
        linked = linked.filter(ThreadCommunity.stage == stage_value)
    if type_value:
        linked = linked.filter(ThreadCommunity.type == type_value)

    query = db.query(Thread).filter(Thread.id.in_(linked.distinct()))
    total = query.count()
    threads = (
        query.order_by(Thread.created_at.desc(), Thread.id.desc())
        .offset(max(offset, 0))
        .limit(max(limit, 0))
        .all()
    )
    return threads, total


def serialize_threads(db: Session, threads: list[Thread]) -> list[dict[str, Any]]:
    """Thread payloads with author, linked communities and reply counts.

    Authors, community names and reply counts are each fetched with a single query.
    """
    if not threads:
        return []
    thread_ids = [thread.id for thread in threads]

    authors = {
        row.id: row.username
        for row in db.query(User.id, User.username).filter(
            User.id.in_({thread.user_id for thread in threads})
        )
    }
    links = (
        db.query(ThreadCommunity)
        .filter(ThreadCommunity.thread_id.in_(thread_ids))
        .order_by(ThreadCommunity.id)
        .all()
    )
    names: dict[int, str] = {}
    community_ids = {link.community_id for link in links}
    if community_ids:
        names = {
            row.id: row.name
            for row in db.query(Community.id, Community.name).filter(
                Community.id.in_(community_ids)
            )
        }
    reply_counts = dict(
        db.query(Reply.thread_id, func.count(Reply.id))
        .filter(Reply.thread_id.in_(thread_ids))
        .group_by(Reply.thread_id)
        .all()
    )

    by_thread: dict[int, list[dict[str, Any]]] = {thread_id: [] for thread_id in thread_ids}
    for link in links:
        name = names.get(link.community_id, UNKNOWN_COMMUNITY)
        stage, type_ = link.stage or None, link.type or None
        by_thread[link.thread_id].append(
            {
                "id": link.community_id,
                "name": name,
                "stage": stage,
                "type": type_,
                "display_path": display_path(name, stage, type_),
            }
        )

    payloads = []
    for thread in threads:
        communities = by_thread[thread.id]
        payloads.append(
            {
                "id": thread.id,
                "user_id": thread.user_id,
                "title": thread.title,
                "content": thread.content,
                "created_at": thread.created_at,
                "updated_at": thread.updated_at,
                "author": authors.get(thread.user_id, ANONYMOUS_AUTHOR),
                "community_ids": sorted({c["id"] for c in communities}),
                "communities": communities,
                "reply_count": reply_counts.get(thread.id, 0),
            }
        )
    return payloads


def get_reply(db: Session, reply_id: int) -> Reply | None:
    return db.get(Reply, reply_id)


def create_reply(db: Session, thread_id: int, user_id: int, data: ReplyCreate) -> Reply:
    """Add a reply, optionally answering another reply on the same thread.

    Raises:
        ValueError: If the parent reply does not exist on this thread.
    """
    parent_id = None
    if data.parent_reply_id:
        parent = db.get(Reply, data.parent_reply_id)
        if parent is None or parent.thread_id != thread_id:
            raise ValueError("要回复的评论不存在")
        parent_id = parent.id

    reply = Reply(
        thread_id=thread_id, user_id=user_id, parent_reply_id=parent_id, content=data.content
    )
    try:
        db.add(reply)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(reply)
    return reply


def _root_of(reply_id: int, parents: dict[int, int | None]) -> int:
    """Topmost ancestor still present; chains through deleted replies stop there."""
    current = reply_id
    visited = {current}
    while True:
        parent = parents.get(current)
        if parent is None or parent not in parents or parent in visited:
            return current
        visited.add(parent)
        current = parent


def get_replies(db: Session, thread_id: int, viewer_id: int | None = None) -> list[dict[str, Any]]:
    """Every reply of a thread, oldest first, with its grouping root."""
    replies = (
        db.query(Reply)
        .filter(Reply.thread_id == thread_id)
        .order_by(Reply.created_at, Reply.id)
        .all()
    )
    if not replies:
        return []

    users = {
        row.id: row.username
        for row in db.query(User.id, User.username).filter(
            User.id.in_({reply.user_id for reply in replies})
        )
    }
    parents = {reply.id: reply.parent_reply_id for reply in replies}
    authors = {reply.id: users.get(reply.user_id, ANONYMOUS_AUTHOR) for reply in replies}

    return [
        {
            "id": reply.id,
            "thread_id": reply.thread_id,
            "user_id": reply.user_id,
            "parent_reply_id": reply.parent_reply_id,
            "root_reply_id": _root_of(reply.id, parents),
            "content": reply.content,
            "created_at": reply.created_at,
            "author": authors[reply.id],
            "parent_author": authors.get(reply.parent_reply_id) if reply.parent_reply_id else None,
            "is_owner": viewer_id is not None and reply.user_id == viewer_id,
        }
        for reply in replies
    ]


def delete_reply(db: Session, reply_id: int, user_id: int) -> bool:
    """Delete a reply the user wrote; answers to it keep their dangling parent id."""
    reply = db.get(Reply, reply_id)
    if reply is None or reply.user_id != user_id:
        return False
    try:
        db.delete(reply)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return True
