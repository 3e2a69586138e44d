"""Endpoints about the signed-in user's own memberships."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from plikeme.api.v1.dependencies import CurrentUserDep, SessionDep
from plikeme.schemas.common import ok
from plikeme.services import membership
from plikeme.services.communities import serialize_community

router = APIRouter(prefix="/user", tags=["users"])


@router.get("/communities")
async def my_communities(
    current_user: CurrentUserDep,
    db: SessionDep,
    details: bool = False,
    community_id: int | None = None,
) -> dict[str, Any]:
    """Communities the user has joined.

    * ``community_id`` given: Level I flag and sub-community memberships there.
    * ``details=true``: full community objects.
    * otherwise: the distinct community ids.
    """
    if community_id is not None:
        return ok(
            {
                "is_level_one_member": membership.is_user_in_community(
                    db, current_user.id, community_id
                ),
                "sub_communities": membership.get_user_sub_communities(
                    db, current_user.id, community_id
                ),
            }
        )
    if details:
        communities = membership.get_user_communities(db, current_user.id)
        return ok([serialize_community(c) for c in communities])
    return ok(membership.get_user_community_ids(db, current_user.id))
