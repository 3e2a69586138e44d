# src/plikeme/api/v1/endpoints/communities.py
"""Community-related endpoints for the P-LikeMe API."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, HTTPException, status
from sqlalchemy.orm import Session

from plikeme.api.v1.dependencies import CurrentUserDep, SessionDep
from plikeme.models import Community
from plikeme.schemas.common import ok
from plikeme.schemas.community import JoinRequest
from plikeme.services import communities as community_service
from plikeme.services import membership
from plikeme.services.threads import get_threads_by_community, serialize_threads

router = APIRouter(prefix="/communities", tags=["communities"])

COMMUNITY_NOT_FOUND = "社区不存在"


def _get_or_404(db: Session, community_id: int) -> Community:
    community = community_service.get_community(db, community_id)
    if community is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=COMMUNITY_NOT_FOUND)
    return community


def _blank(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


@router.get("")
async def list_communities(db: SessionDep, q: str | None = None) -> dict[str, Any]:
    """List all communities, or search them when ``q`` is given."""
    if q and q.strip():
        data = community_service.search_communities(db, q)
    else:
        data = [
            community_service.serialize_community(c)
            for c in community_service.list_communities(db)
        ]
    return ok(data, count=len(data))


@router.get("/{community_id}")
async def get_community(
    community_id: int,
    db: SessionDep,
    stage: str | None = None,
    type: str | None = None,
) -> dict[str, Any]:
    """Community detail with its sub-community member-count matrix."""
    community = _get_or_404(db, community_id)
    data = community_service.serialize_community(community)
    data["sub_community_members"] = membership.get_sub_community_member_counts(db, community_id)
    data["current_stage"] = _blank(stage)
    data["current_type"] = _blank(type)
    return ok(data)


@router.get("/{community_id}/threads")
async def get_community_threads(
    community_id: int,
    db: SessionDep,
    limit: int = 10,
    offset: int = 0,
    stage: str | None = None,
    type: str | None = None,
) -> dict[str, Any]:
    """Threads visible at the requested community level, newest first."""
    _get_or_404(db, community_id)
    limit = max(limit, 1)
    offset = max(offset, 0)
    threads, total = get_threads_by_community(
        db, community_id, limit=limit, offset=offset, stage=stage, type_=type
    )
    return ok(
        serialize_threads(db, threads),
        count=len(threads),
        total=total,
        has_more=offset + len(threads) < total,
    )


@router.post("/{community_id}/join")
async def join_community(
    community_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    payload: JoinRequest | None = Body(default=None),
) -> dict[str, Any]:
    """Join a community or one of its sub-communities (parents are joined too)."""
    community = _get_or_404(db, community_id)
    payload = payload or JoinRequest()
    problem = community_service.validate_dimension_values(community, payload.stage, payload.type)
    if problem:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=problem)

    result = membership.join_community(
        db, current_user.id, community_id, payload.stage, payload.type
    )
    is_sub = result.level != membership.LEVEL_COMMUNITY
    if result.joined:
        message = "加入细分社区成功" if is_sub else "加入成功"
    else:
        message = "您已经是该细分社区成员" if is_sub else "您已经是该社区成员"
    return ok(
        {
            "community_id": community_id,
            "stage": payload.stage,
            "type": payload.type,
            "joined": result.joined,
        },
        message=message,
    )


@router.delete("/{community_id}/leave")
async def leave_community(
    community_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    stage: str | None = None,
    type: str | None = None,
) -> dict[str, Any]:
    """Leave a community level; deeper memberships go with it."""
    stage, type = _blank(stage), _blank(type)
    left = membership.leave_community(db, current_user.id, community_id, stage, type)
    is_sub = bool(stage or type)
    if left:
        message = "已退出细分社区" if is_sub else "已退出社区"
    else:
        message = "您尚未加入该细分社区" if is_sub else "您尚未加入该社区"
    return ok(
        {"community_id": community_id, "stage": stage, "type": type, "left": left},
        message=message,
    )
